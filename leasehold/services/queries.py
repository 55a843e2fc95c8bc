# leasehold/services/queries.py
"""
Read-side views over properties and agreements.

Nothing here writes. Date-relative views take a Clock so "today" is whatever
the caller says it is; the request layer injects the system clock and tests
inject a FixedClock.
"""
from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.clock import Clock
from ..models import AgreementStatus, Property, RentalAgreement
from ..schemas import PropertySearch


def list_active_agreements(db: Session) -> list[RentalAgreement]:
    return list(
        db.scalars(
            select(RentalAgreement)
            .where(RentalAgreement.status == AgreementStatus.ACTIVE)
            .order_by(RentalAgreement.id)
        ).all()
    )


def list_expired_agreements(db: Session, *, clock: Clock) -> list[RentalAgreement]:
    """
    Agreements whose end date is strictly before today, whatever their stored
    status. Evaluated on every call.
    """
    today = clock.today()
    return list(
        db.scalars(
            select(RentalAgreement)
            .where(RentalAgreement.end_date < today)
            .order_by(RentalAgreement.end_date, RentalAgreement.id)
        ).all()
    )


def list_expiring_between(db: Session, start: date, end: date) -> list[RentalAgreement]:
    """end_date within [start, end], both inclusive. A reversed window matches nothing."""
    if end < start:
        return []
    return list(
        db.scalars(
            select(RentalAgreement)
            .where(RentalAgreement.end_date.between(start, end))
            .order_by(RentalAgreement.end_date, RentalAgreement.id)
        ).all()
    )


def list_expiring_within(db: Session, days: int, *, clock: Clock) -> list[RentalAgreement]:
    today = clock.today()
    return list_expiring_between(db, today, today + timedelta(days=days))


def search_properties(db: Session, f: PropertySearch) -> list[Property]:
    """
    One query with every given filter ANDed in. Unset filters are skipped.
    Price bounds are inclusive, and a max_price below min_price simply matches
    nothing. A bedroom minimum excludes rows with no count.
    """
    q = select(Property)

    if f.city is not None:
        q = q.where(Property.city == f.city)
    if f.status is not None:
        q = q.where(Property.status == f.status)
    if f.property_type is not None:
        q = q.where(Property.property_type == f.property_type)
    if f.owner_id is not None:
        q = q.where(Property.owner_id == f.owner_id)

    if f.min_price is not None:
        q = q.where(Property.price >= f.min_price)
    if f.max_price is not None:
        q = q.where(Property.price <= f.max_price)
    if f.min_bedrooms is not None:
        q = q.where(Property.bedrooms >= f.min_bedrooms)

    return list(db.scalars(q.order_by(Property.id)).all())
