# leasehold/logging_config.py
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from .config import settings
from .middleware.request_id import get_request_id

# Extras services and middleware attach via `extra={...}`. Anything else on the
# record is ignored by the formatter.
STRUCTURED_FIELDS = (
    "user_id",
    "property_id",
    "tenant_id",
    "agreement_id",
    "transition",
    "http_method",
    "http_path",
    "http_status",
    "duration_ms",
)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, keyed for log search rather than for humans."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = get_request_id()
        if rid:
            payload["request_id"] = rid

        payload.update({k: getattr(record, k) for k in STRUCTURED_FIELDS if hasattr(record, k)})

        if record.exc_info:
            payload["exc_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None) -> None:
    """Route everything through one stdout JSON handler. Safe to call twice."""
    level = (level or settings.log_level or "INFO").upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    logging.getLogger("sqlalchemy.engine").setLevel((settings.sql_log_level or "WARNING").upper())
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
