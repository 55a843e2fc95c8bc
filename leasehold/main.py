# leasehold/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .errors import LeaseholdError
from .logging_config import configure_logging

from .middleware.request_id import RequestIdMiddleware, get_request_id
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.agreements import router as agreements_router
from .routers.audit import router as audit_router
from .routers.properties import router as properties_router
from .routers.reports import router as reports_router
from .routers.tenants import router as tenants_router
from .routers.users import router as users_router

API_PREFIX = "/api"

log = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    val = settings.cors_allow_origins
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    return list(val) or ["*"]


async def leasehold_error_handler(request: Request, exc: LeaseholdError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request failed: %s", exc.detail, exc_info=exc)
    body = {"detail": exc.detail}
    rid = get_request_id()
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=exc.status_code, content=body)


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Leasehold", version="0.1.0")

    # added last runs first: request id is set before the request line is logged
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LeaseholdError, leasehold_error_handler)

    @app.get(f"{API_PREFIX}/health", tags=["meta"])
    def health():
        return {"ok": True, "env": settings.app_env}

    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(properties_router, prefix=API_PREFIX)
    app.include_router(tenants_router, prefix=API_PREFIX)
    app.include_router(agreements_router, prefix=API_PREFIX)
    app.include_router(reports_router, prefix=API_PREFIX)
    app.include_router(audit_router, prefix=API_PREFIX)

    return app


app = create_app()
