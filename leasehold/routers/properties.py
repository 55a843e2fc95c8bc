# leasehold/routers/properties.py
from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFoundError
from ..models import AgreementStatus, PropertyStatus, PropertyType
from ..schemas import (
    AgreementOut,
    PropertyCreate,
    PropertyFields,
    PropertyOut,
    PropertySearch,
    PropertyStatusUpdate,
)
from ..services import agreements, properties as svc, queries

router = APIRouter(prefix="/properties", tags=["properties"])


@router.post("", response_model=PropertyOut, status_code=201)
def create_property(payload: PropertyCreate, db: Session = Depends(get_db)):
    return svc.create_property(db, payload)


@router.get("", response_model=list[PropertyOut])
def list_properties(
    status: PropertyStatus | None = Query(default=None),
    property_type: PropertyType | None = Query(default=None),
    city: str | None = Query(default=None),
    owner_id: int | None = Query(default=None),
    min_price: Decimal | None = Query(default=None),
    max_price: Decimal | None = Query(default=None),
    min_bedrooms: int | None = Query(default=None),
    db: Session = Depends(get_db),
):
    f = PropertySearch(
        status=status,
        property_type=property_type,
        city=city,
        owner_id=owner_id,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=min_bedrooms,
    )
    return queries.search_properties(db, f)


@router.get("/available", response_model=list[PropertyOut])
def list_available(city: str | None = Query(default=None), db: Session = Depends(get_db)):
    if city:
        return svc.list_available_in_city(db, city)
    return svc.list_available(db)


@router.get("/{property_id}", response_model=PropertyOut)
def get_property(property_id: int, db: Session = Depends(get_db)):
    row = svc.get_property(db, property_id)
    if row is None:
        raise NotFoundError.for_id("Property", property_id)
    return row


@router.put("/{property_id}", response_model=PropertyOut)
def update_property(property_id: int, payload: PropertyFields, db: Session = Depends(get_db)):
    return svc.update_property(db, property_id, payload)


@router.patch("/{property_id}/status", response_model=PropertyOut)
def update_status(property_id: int, payload: PropertyStatusUpdate, db: Session = Depends(get_db)):
    return svc.update_status(db, property_id, payload.status)


@router.delete("/{property_id}")
def delete_property(property_id: int, db: Session = Depends(get_db)):
    svc.delete_property(db, property_id)
    return {"ok": True}


@router.get("/{property_id}/agreements", response_model=list[AgreementOut])
def list_property_agreements(
    property_id: int,
    status: AgreementStatus | None = Query(default=None),
    db: Session = Depends(get_db),
):
    if status is not None:
        return agreements.list_by_property_and_status(db, property_id, status)
    return agreements.list_by_property(db, property_id)


@router.get("/by-owner/{owner_id}/agreements", response_model=list[AgreementOut])
def list_owner_agreements(owner_id: int, db: Session = Depends(get_db)):
    return agreements.list_by_owner(db, owner_id)
