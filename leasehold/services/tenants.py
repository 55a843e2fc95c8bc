# leasehold/services/tenants.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import unit_of_work
from ..domain.audit import audit_write, snapshot
from ..errors import ConflictError
from ..models import AgreementStatus, RentalAgreement, Tenant
from ..schemas import TenantCreate, TenantProfile
from .lookups import delete_row, must_get_tenant, must_get_user

log = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "emergency_contact_name",
    "emergency_contact_phone",
    "employer_name",
    "employer_phone",
    "notes",
)

_DUPLICATE = "Tenant profile already exists for this user"


def create_tenant(db: Session, data: TenantCreate) -> Tenant:
    must_get_user(db, data.user_id)
    if get_tenant_by_user_id(db, data.user_id) is not None:
        raise ConflictError(_DUPLICATE)

    try:
        with unit_of_work(db):
            row = Tenant(**data.model_dump())
            db.add(row)
            db.flush()
            audit_write(db, action="tenant.create", entity_type="Tenant", entity_id=row.id, after=snapshot(row))
    except IntegrityError as exc:
        # unique(user_id) caught a concurrent create
        raise ConflictError(_DUPLICATE) from exc
    db.refresh(row)
    log.info("tenant created", extra={"tenant_id": row.id, "user_id": row.user_id})
    return row


def get_tenant(db: Session, tenant_id: int) -> Optional[Tenant]:
    return db.get(Tenant, tenant_id)


def get_tenant_by_user_id(db: Session, user_id: int) -> Optional[Tenant]:
    return db.scalar(select(Tenant).where(Tenant.user_id == user_id))


def list_tenants(db: Session) -> list[Tenant]:
    return list(db.scalars(select(Tenant).order_by(Tenant.id)).all())


def get_current_agreement(db: Session, tenant_id: int) -> Optional[RentalAgreement]:
    """The tenant's ACTIVE agreement, latest start first, or None when they hold none."""
    must_get_tenant(db, tenant_id)
    return db.scalars(
        select(RentalAgreement)
        .where(RentalAgreement.tenant_id == tenant_id, RentalAgreement.status == AgreementStatus.ACTIVE)
        .order_by(RentalAgreement.start_date.desc(), RentalAgreement.id.desc())
    ).first()


def update_tenant(db: Session, tenant_id: int, data: TenantProfile) -> Tenant:
    """Replaces the profile fields. The linked user never changes."""
    row = must_get_tenant(db, tenant_id)
    before = snapshot(row)
    values = data.model_dump(include=set(PROFILE_FIELDS))

    with unit_of_work(db):
        for k in PROFILE_FIELDS:
            setattr(row, k, values.get(k))
        db.flush()
        audit_write(
            db, action="tenant.update", entity_type="Tenant", entity_id=row.id, before=before, after=snapshot(row)
        )
    db.refresh(row)
    return row


def delete_tenant(db: Session, tenant_id: int) -> None:
    row = must_get_tenant(db, tenant_id)
    with unit_of_work(db):
        before = snapshot(row)
        delete_row(db, row, label=f"Tenant {tenant_id}")
        audit_write(db, action="tenant.delete", entity_type="Tenant", entity_id=tenant_id, before=before)
    log.info("tenant deleted", extra={"tenant_id": tenant_id})
