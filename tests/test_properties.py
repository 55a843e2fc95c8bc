from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import select

from leasehold.errors import ConflictError, NotFoundError
from leasehold.models import AuditEvent, PropertyStatus, PropertyType, UserRole
from leasehold.schemas import PropertyCreate, PropertyFields
from leasehold.services import agreements, properties


def _fields(**kw) -> PropertyFields:
    data = {
        "title": "Renovated loft",
        "address": "9 Mill Rd",
        "city": "Shelbyville",
        "state": "IL",
        "zip_code": "62565",
        "property_type": PropertyType.CONDO,
        "price": Decimal("1500.00"),
        "bedrooms": 1,
    }
    data.update(kw)
    return PropertyFields(**data)


def test_create_sets_available(db_session, make_property):
    p = make_property()
    assert p.id is not None
    assert p.status == PropertyStatus.AVAILABLE
    assert p.created_at is not None and p.updated_at is not None


def test_create_requires_owner(db_session):
    with pytest.raises(NotFoundError, match="User not found with id: 404"):
        properties.create_property(db_session, PropertyCreate(owner_id=404, **_fields().model_dump()))


def test_update_replaces_fields_not_status(db_session, make_property):
    p = make_property()
    properties.update_status(db_session, p.id, PropertyStatus.MAINTENANCE)

    out = properties.update_property(db_session, p.id, _fields(description="sunny"))
    assert out.title == "Renovated loft"
    assert out.city == "Shelbyville"
    assert out.description == "sunny"
    assert out.price == Decimal("1500.00")
    assert out.status == PropertyStatus.MAINTENANCE


def test_update_status_any_to_any(db_session, make_property):
    p = make_property()
    for s in (PropertyStatus.RENTED, PropertyStatus.PENDING, PropertyStatus.AVAILABLE, PropertyStatus.MAINTENANCE):
        assert properties.update_status(db_session, p.id, s).status == s


def test_missing_id_operations(db_session):
    with pytest.raises(NotFoundError, match="Property not found with id: 99"):
        properties.update_status(db_session, 99, PropertyStatus.RENTED)
    with pytest.raises(NotFoundError):
        properties.update_property(db_session, 99, _fields())
    with pytest.raises(NotFoundError):
        properties.delete_property(db_session, 99)
    assert properties.get_property(db_session, 99) is None


def test_delete_unreferenced(db_session, make_property):
    p = make_property()
    properties.delete_property(db_session, p.id)
    assert properties.get_property(db_session, p.id) is None


def test_delete_referenced_property_is_refused(db_session, make_agreement):
    ag = make_agreement()
    with pytest.raises(ConflictError, match="still referenced"):
        properties.delete_property(db_session, ag.property_id)
    assert properties.get_property(db_session, ag.property_id) is not None
    assert agreements.get_agreement(db_session, ag.id) is not None


def ids(rows) -> list[int]:
    return [r.id for r in rows]


def test_filtered_views(db_session, make_user, make_property):
    owner = make_user(UserRole.PROPERTY_OWNER)
    a = make_property(owner=owner, city="Springfield", property_type=PropertyType.HOUSE, bedrooms=3)
    b = make_property(owner=owner, city="Springfield", property_type=PropertyType.APARTMENT, bedrooms=None)
    c = make_property(city="Capital City", property_type=PropertyType.HOUSE, price=Decimal("4000.00"), bedrooms=4)
    properties.update_status(db_session, b.id, PropertyStatus.RENTED)

    assert ids(properties.list_properties(db_session)) == [a.id, b.id, c.id]
    assert ids(properties.list_by_owner(db_session, owner.id)) == [a.id, b.id]
    assert ids(properties.list_by_status(db_session, PropertyStatus.RENTED)) == [b.id]
    assert ids(properties.list_available(db_session)) == [a.id, c.id]
    assert ids(properties.list_by_type(db_session, PropertyType.HOUSE)) == [a.id, c.id]
    assert ids(properties.list_by_city(db_session, "Springfield")) == [a.id, b.id]
    assert ids(properties.list_by_city_and_status(db_session, "Springfield", PropertyStatus.RENTED)) == [b.id]
    assert ids(properties.list_available_in_city(db_session, "Springfield")) == [a.id]
    assert ids(properties.list_by_status_and_type(db_session, PropertyStatus.AVAILABLE, PropertyType.HOUSE)) == [
        a.id,
        c.id,
    ]
    # no bedroom count means excluded
    assert ids(properties.list_by_min_bedrooms(db_session, 3)) == [a.id, c.id]
    assert ids(properties.list_by_min_bedrooms(db_session, 4)) == [c.id]


def test_price_range_is_inclusive(db_session, make_property):
    p = make_property(price=Decimal("2000.00"))

    inside = properties.list_by_price_range(db_session, Decimal("1000"), Decimal("3000"))
    assert [r.id for r in inside] == [p.id]

    assert properties.list_by_price_range(db_session, Decimal("3000"), Decimal("5000")) == []
    assert [r.id for r in properties.list_by_price_range(db_session, Decimal("2000"), Decimal("2000"))] == [p.id]


def test_status_change_is_audited(db_session, make_property):
    p = make_property()
    properties.update_status(db_session, p.id, PropertyStatus.PENDING)
    ev = db_session.scalar(select(AuditEvent).where(AuditEvent.action == "property.status"))
    assert ev.entity_type == "Property"
    assert ev.entity_id == str(p.id)
