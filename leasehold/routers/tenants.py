# leasehold/routers/tenants.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFoundError
from ..schemas import AgreementOut, TenantCreate, TenantOut, TenantProfile
from ..services import agreements, tenants as svc

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.post("", response_model=TenantOut, status_code=201)
def create_tenant(payload: TenantCreate, db: Session = Depends(get_db)):
    return svc.create_tenant(db, payload)


@router.get("", response_model=list[TenantOut])
def list_tenants(db: Session = Depends(get_db)):
    return svc.list_tenants(db)


@router.get("/by-user/{user_id}", response_model=TenantOut)
def get_by_user(user_id: int, db: Session = Depends(get_db)):
    row = svc.get_tenant_by_user_id(db, user_id)
    if row is None:
        raise NotFoundError(f"Tenant not found for user id: {user_id}")
    return row


@router.get("/{tenant_id}", response_model=TenantOut)
def get_tenant(tenant_id: int, db: Session = Depends(get_db)):
    row = svc.get_tenant(db, tenant_id)
    if row is None:
        raise NotFoundError.for_id("Tenant", tenant_id)
    return row


@router.put("/{tenant_id}", response_model=TenantOut)
def update_tenant(tenant_id: int, payload: TenantProfile, db: Session = Depends(get_db)):
    return svc.update_tenant(db, tenant_id, payload)


@router.delete("/{tenant_id}")
def delete_tenant(tenant_id: int, db: Session = Depends(get_db)):
    svc.delete_tenant(db, tenant_id)
    return {"ok": True}


@router.get("/{tenant_id}/agreements", response_model=list[AgreementOut])
def list_tenant_agreements(tenant_id: int, db: Session = Depends(get_db)):
    return agreements.list_by_tenant(db, tenant_id)


@router.get("/{tenant_id}/current-agreement", response_model=AgreementOut | None)
def current_agreement(tenant_id: int, db: Session = Depends(get_db)):
    """null when the tenant exists but holds no ACTIVE agreement."""
    return svc.get_current_agreement(db, tenant_id)
