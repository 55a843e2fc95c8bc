# leasehold/services/lookups.py
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError
from ..models import Property, RentalAgreement, Tenant, User

log = logging.getLogger(__name__)


def must_get_user(db: Session, user_id: int) -> User:
    row = db.get(User, user_id)
    if not row:
        raise NotFoundError.for_id("User", user_id)
    return row


def must_get_property(db: Session, property_id: int, *, for_update: bool = False) -> Property:
    row = db.get(Property, property_id, with_for_update=True if for_update else None)
    if not row:
        raise NotFoundError.for_id("Property", property_id)
    return row


def must_get_tenant(db: Session, tenant_id: int) -> Tenant:
    row = db.get(Tenant, tenant_id)
    if not row:
        raise NotFoundError.for_id("Tenant", tenant_id)
    return row


def must_get_agreement(db: Session, agreement_id: int, *, for_update: bool = False) -> RentalAgreement:
    row = db.get(RentalAgreement, agreement_id, with_for_update=True if for_update else None)
    if not row:
        raise NotFoundError.for_id("Rental agreement", agreement_id)
    return row


def delete_row(db: Session, row: Any, *, label: str) -> None:
    """
    Delete and flush so the store's foreign keys are checked now. A row that is
    still referenced comes back as ConflictError with the session rolled back.
    """
    db.delete(row)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        log.warning("delete blocked by reference: %s", label)
        raise ConflictError(f"{label} is still referenced and cannot be deleted") from exc
