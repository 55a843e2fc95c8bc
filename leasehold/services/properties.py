# leasehold/services/properties.py
"""
Property directory.

Owns the property row and its status field. Generic updates never touch
status; status changes go through `update_status`, which the agreement
lifecycle calls with `commit=False` so both writes share one transaction.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import unit_of_work
from ..domain.audit import audit_write, snapshot
from ..models import Property, PropertyStatus, PropertyType
from ..schemas import PropertyCreate, PropertyFields
from .lookups import delete_row, must_get_property, must_get_user

log = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "address",
    "city",
    "state",
    "zip_code",
    "property_type",
    "price",
    "bedrooms",
    "bathrooms",
    "square_feet",
)


def _list(db: Session, *where) -> list[Property]:
    return list(db.scalars(select(Property).where(*where).order_by(Property.id)).all())


def create_property(db: Session, data: PropertyCreate) -> Property:
    must_get_user(db, data.owner_id)

    with unit_of_work(db):
        row = Property(**data.model_dump(), status=PropertyStatus.AVAILABLE)
        db.add(row)
        db.flush()
        audit_write(db, action="property.create", entity_type="Property", entity_id=row.id, after=snapshot(row))
    db.refresh(row)
    log.info("property created", extra={"property_id": row.id, "user_id": row.owner_id})
    return row


def get_property(db: Session, property_id: int) -> Optional[Property]:
    return db.get(Property, property_id)


def list_properties(db: Session) -> list[Property]:
    return _list(db)


def list_by_owner(db: Session, owner_id: int) -> list[Property]:
    return _list(db, Property.owner_id == owner_id)


def list_by_status(db: Session, status: PropertyStatus) -> list[Property]:
    return _list(db, Property.status == status)


def list_available(db: Session) -> list[Property]:
    return list_by_status(db, PropertyStatus.AVAILABLE)


def list_by_type(db: Session, property_type: PropertyType) -> list[Property]:
    return _list(db, Property.property_type == property_type)


def list_by_city(db: Session, city: str) -> list[Property]:
    return _list(db, Property.city == city)


def list_by_city_and_status(db: Session, city: str, status: PropertyStatus) -> list[Property]:
    # served by ix_properties_city_status
    return _list(db, Property.city == city, Property.status == status)


def list_available_in_city(db: Session, city: str) -> list[Property]:
    return list_by_city_and_status(db, city, PropertyStatus.AVAILABLE)


def list_by_status_and_type(db: Session, status: PropertyStatus, property_type: PropertyType) -> list[Property]:
    return _list(db, Property.status == status, Property.property_type == property_type)


def list_by_price_range(db: Session, min_price: Decimal, max_price: Decimal) -> list[Property]:
    return _list(db, Property.price.between(min_price, max_price))


def list_by_min_bedrooms(db: Session, min_bedrooms: int) -> list[Property]:
    # NULL >= n is never true, so properties without a bedroom count drop out
    return _list(db, Property.bedrooms >= min_bedrooms)


def update_property(db: Session, property_id: int, data: PropertyFields) -> Property:
    row = must_get_property(db, property_id)
    before = snapshot(row)
    values = data.model_dump(include=set(UPDATABLE_FIELDS))

    with unit_of_work(db):
        for k in UPDATABLE_FIELDS:
            setattr(row, k, values.get(k))
        db.flush()
        audit_write(
            db, action="property.update", entity_type="Property", entity_id=row.id, before=before, after=snapshot(row)
        )
    db.refresh(row)
    return row


def update_status(db: Session, property_id: int, status: PropertyStatus, *, commit: bool = True) -> Property:
    """
    Set status directly. Any status may follow any other.

    With commit=False the change is only flushed; the caller's unit of work
    decides whether it sticks.
    """
    row = must_get_property(db, property_id, for_update=not commit)
    previous = row.status
    row.status = status
    db.flush()
    audit_write(
        db,
        action="property.status",
        entity_type="Property",
        entity_id=row.id,
        before={"status": previous},
        after={"status": status},
    )
    if commit:
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(row)
    log.info(
        "property status %s -> %s",
        getattr(previous, "value", previous),
        status.value,
        extra={"property_id": row.id},
    )
    return row


def delete_property(db: Session, property_id: int) -> None:
    row = must_get_property(db, property_id)
    with unit_of_work(db):
        before = snapshot(row)
        delete_row(db, row, label=f"Property {property_id}")
        audit_write(db, action="property.delete", entity_type="Property", entity_id=property_id, before=before)
    log.info("property deleted", extra={"property_id": property_id})
