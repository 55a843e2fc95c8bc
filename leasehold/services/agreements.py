# leasehold/services/agreements.py
"""
Rental agreement lifecycle.

This module is the state machine of record. Every status change goes through
`apply_transition`, which writes the agreement, the linked property's status
and an audit row in one unit of work. If any of the three writes fails the
transaction is rolled back and the caller gets a single error; there is no
"agreement updated, property unchanged" outcome.

Open behaviors kept on purpose (see DESIGN.md):
  - deleting an ACTIVE agreement leaves the property RENTED
  - overlapping agreements on one property are allowed unless
    settings.block_overlapping_agreements is on
  - any transition is accepted unless settings.strict_agreement_transitions is on
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..db import unit_of_work
from ..domain.agreement_lifecycle import (
    check_transition,
    overlaps,
    property_status_for,
    successor_dates,
    validate_dates,
    validate_money,
)
from ..domain.audit import audit_write, snapshot
from ..errors import ConflictError, InvalidArgumentError, LeaseholdError, SynchronizationError
from ..models import AgreementStatus, Property, RentalAgreement
from ..schemas import AgreementCreate, AgreementTerms
from . import properties
from .lookups import delete_row, must_get_agreement, must_get_property, must_get_tenant

log = logging.getLogger(__name__)

TERM_FIELDS = ("start_date", "end_date", "monthly_rent", "security_deposit", "terms")

# Agreements that still hold (or may come to hold) the property.
_OCCUPYING = (AgreementStatus.PENDING, AgreementStatus.ACTIVE)


def _list(db: Session, *where) -> list[RentalAgreement]:
    return list(db.scalars(select(RentalAgreement).where(*where).order_by(RentalAgreement.id)).all())


def _validate_terms(data: AgreementTerms) -> None:
    validate_dates(data.start_date, data.end_date)
    validate_money(monthly_rent=data.monthly_rent, security_deposit=data.security_deposit)


# -----------------------------------------------------------------------------
# Overlap rule (off by default)
# -----------------------------------------------------------------------------

def find_overlapping_agreements(
    db: Session,
    *,
    property_id: int,
    start_date: date,
    end_date: date,
    ignore_agreement_id: Optional[int] = None,
) -> list[RentalAgreement]:
    q = select(RentalAgreement).where(
        RentalAgreement.property_id == property_id,
        RentalAgreement.status.in_(_OCCUPYING),
        RentalAgreement.start_date <= end_date,
        RentalAgreement.end_date >= start_date,
    )
    if ignore_agreement_id is not None:
        q = q.where(RentalAgreement.id != ignore_agreement_id)

    rows = db.scalars(q.order_by(RentalAgreement.id)).all()
    return [r for r in rows if overlaps(start_date, end_date, r.start_date, r.end_date)]


def _ensure_no_overlap(
    db: Session, *, property_id: int, start_date: date, end_date: date, ignore_agreement_id: Optional[int] = None
) -> None:
    if not settings.block_overlapping_agreements:
        return
    clash = find_overlapping_agreements(
        db,
        property_id=property_id,
        start_date=start_date,
        end_date=end_date,
        ignore_agreement_id=ignore_agreement_id,
    )
    if clash:
        r = clash[0]
        raise ConflictError(
            f"agreement dates overlap with agreement id={r.id} "
            f"({r.start_date.isoformat()} -> {r.end_date.isoformat()})"
        )


# -----------------------------------------------------------------------------
# Create / update / delete
# -----------------------------------------------------------------------------

def create_agreement(db: Session, data: AgreementCreate) -> RentalAgreement:
    _validate_terms(data)
    must_get_property(db, data.property_id)
    must_get_tenant(db, data.tenant_id)
    _ensure_no_overlap(db, property_id=data.property_id, start_date=data.start_date, end_date=data.end_date)

    with unit_of_work(db):
        row = RentalAgreement(**data.model_dump(), status=AgreementStatus.PENDING)
        db.add(row)
        db.flush()
        audit_write(
            db, action="agreement.create", entity_type="RentalAgreement", entity_id=row.id, after=snapshot(row)
        )
    db.refresh(row)
    log.info(
        "agreement created",
        extra={"agreement_id": row.id, "property_id": row.property_id, "tenant_id": row.tenant_id},
    )
    return row


def update_agreement(db: Session, agreement_id: int, data: AgreementTerms) -> RentalAgreement:
    """Replaces dates, money and terms. Status, property and tenant stay as they are."""
    _validate_terms(data)
    row = must_get_agreement(db, agreement_id)
    _ensure_no_overlap(
        db,
        property_id=row.property_id,
        start_date=data.start_date,
        end_date=data.end_date,
        ignore_agreement_id=row.id,
    )
    before = snapshot(row)
    values = data.model_dump(include=set(TERM_FIELDS))

    with unit_of_work(db):
        for k in TERM_FIELDS:
            setattr(row, k, values.get(k))
        db.flush()
        audit_write(
            db,
            action="agreement.update",
            entity_type="RentalAgreement",
            entity_id=row.id,
            before=before,
            after=snapshot(row),
        )
    db.refresh(row)
    return row


def delete_agreement(db: Session, agreement_id: int) -> None:
    row = must_get_agreement(db, agreement_id)
    if row.status == AgreementStatus.ACTIVE:
        # property status is left as-is
        log.warning(
            "deleting ACTIVE agreement; property status not reverted",
            extra={"agreement_id": row.id, "property_id": row.property_id},
        )
    with unit_of_work(db):
        before = snapshot(row)
        delete_row(db, row, label=f"Rental agreement {agreement_id}")
        audit_write(db, action="agreement.delete", entity_type="RentalAgreement", entity_id=agreement_id, before=before)


# -----------------------------------------------------------------------------
# Lifecycle transitions
# -----------------------------------------------------------------------------

def apply_transition(
    db: Session,
    agreement_id: int,
    target: AgreementStatus,
    *,
    actor_user_id: Optional[int] = None,
    follow_up: Optional[Callable[[RentalAgreement], None]] = None,
) -> RentalAgreement:
    """
    Move an agreement to `target` and synchronize its property, atomically.

    `follow_up` runs inside the same unit of work after the property write;
    renewal uses it to open the successor term. The row lock and the strict
    check both sit inside the unit of work, so a refused transition releases
    the lock on the way out.

    Raises NotFoundError for a missing id, InvalidArgumentError for a
    transition refused in strict mode, SynchronizationError when a write
    fails part-way (after rolling both rows back).
    """
    if target == AgreementStatus.RENEWED and follow_up is None:
        # a RENEWED row with no ACTIVE successor would leave the property RENTED by nothing
        raise InvalidArgumentError("renewal must open a successor term; use renew_agreement")

    transition = f"?->{target.value}"
    try:
        with unit_of_work(db):
            row = must_get_agreement(db, agreement_id, for_update=True)
            previous = row.status
            transition = f"{previous.value}->{target.value}"
            check_transition(previous, target, strict=settings.strict_agreement_transitions)
            prop_status = property_status_for(target)

            row.status = target
            db.flush()
            properties.update_status(db, row.property_id, prop_status, commit=False)
            audit_write(
                db,
                action=f"agreement.{target.value.lower()}",
                entity_type="RentalAgreement",
                entity_id=row.id,
                before={"status": previous},
                after={"status": target, "property_status": prop_status},
                actor_user_id=actor_user_id,
            )
            if follow_up is not None:
                follow_up(row)
    except LeaseholdError:
        raise
    except Exception as exc:
        log.error(
            "lifecycle transition rolled back",
            exc_info=True,
            extra={"agreement_id": agreement_id, "transition": transition},
        )
        raise SynchronizationError(
            f"could not apply {transition} to rental agreement {agreement_id}; nothing was changed",
            agreement_id=agreement_id,
            cause=exc,
        ) from exc

    db.refresh(row)
    log.info(
        "agreement transition applied",
        extra={"agreement_id": row.id, "property_id": row.property_id, "transition": transition},
    )
    return row


def activate_agreement(db: Session, agreement_id: int, **kw) -> RentalAgreement:
    return apply_transition(db, agreement_id, AgreementStatus.ACTIVE, **kw)


def terminate_agreement(db: Session, agreement_id: int, **kw) -> RentalAgreement:
    return apply_transition(db, agreement_id, AgreementStatus.TERMINATED, **kw)


def expire_agreement(db: Session, agreement_id: int, **kw) -> RentalAgreement:
    return apply_transition(db, agreement_id, AgreementStatus.EXPIRED, **kw)


def renew_agreement(
    db: Session,
    agreement_id: int,
    terms: Optional[AgreementTerms] = None,
    *,
    actor_user_id: Optional[int] = None,
) -> RentalAgreement:
    """
    Close the current term as RENEWED and open its successor as ACTIVE, in one
    unit of work. The property stays RENTED, backed by the successor.

    Without `terms` the successor starts the day after the current term ends,
    runs for the same length and keeps rent, deposit and terms text.
    Returns the successor.
    """
    if terms is not None:
        _validate_terms(terms)
    opened: list[RentalAgreement] = []

    def _open_next_term(prev: RentalAgreement) -> None:
        nxt = terms if terms is not None else next_term(prev)
        _ensure_no_overlap(
            db,
            property_id=prev.property_id,
            start_date=nxt.start_date,
            end_date=nxt.end_date,
            ignore_agreement_id=prev.id,
        )
        row = RentalAgreement(
            property_id=prev.property_id,
            tenant_id=prev.tenant_id,
            **nxt.model_dump(include=set(TERM_FIELDS)),
            status=AgreementStatus.ACTIVE,
        )
        db.add(row)
        db.flush()
        audit_write(
            db,
            action="agreement.create",
            entity_type="RentalAgreement",
            entity_id=row.id,
            after={**snapshot(row), "renews_agreement_id": prev.id},
            actor_user_id=actor_user_id,
        )
        opened.append(row)

    apply_transition(
        db, agreement_id, AgreementStatus.RENEWED, actor_user_id=actor_user_id, follow_up=_open_next_term
    )

    successor = opened[0]
    db.refresh(successor)
    log.info(
        "agreement renewed",
        extra={"agreement_id": successor.id, "property_id": successor.property_id, "tenant_id": successor.tenant_id},
    )
    return successor


def next_term(prev: RentalAgreement) -> AgreementTerms:
    start, end = successor_dates(prev.start_date, prev.end_date)
    return AgreementTerms(
        start_date=start,
        end_date=end,
        monthly_rent=prev.monthly_rent,
        security_deposit=prev.security_deposit,
        terms=prev.terms,
    )


# -----------------------------------------------------------------------------
# Reads
# -----------------------------------------------------------------------------

def get_agreement(db: Session, agreement_id: int) -> Optional[RentalAgreement]:
    return db.get(RentalAgreement, agreement_id)


def list_agreements(db: Session) -> list[RentalAgreement]:
    return _list(db)


def list_by_property(db: Session, property_id: int) -> list[RentalAgreement]:
    return _list(db, RentalAgreement.property_id == property_id)


def list_by_tenant(db: Session, tenant_id: int) -> list[RentalAgreement]:
    return _list(db, RentalAgreement.tenant_id == tenant_id)


def list_by_status(db: Session, status: AgreementStatus) -> list[RentalAgreement]:
    return _list(db, RentalAgreement.status == status)


def list_by_property_and_status(db: Session, property_id: int, status: AgreementStatus) -> list[RentalAgreement]:
    return _list(db, RentalAgreement.property_id == property_id, RentalAgreement.status == status)


def list_by_owner(db: Session, owner_id: int) -> list[RentalAgreement]:
    """Agreements on any property the given user owns."""
    return list(
        db.scalars(
            select(RentalAgreement)
            .join(Property, RentalAgreement.property_id == Property.id)
            .where(Property.owner_id == owner_id)
            .order_by(RentalAgreement.id)
        ).all()
    )
