from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from leasehold.domain.clock import FixedClock
from leasehold.models import AgreementStatus, PropertyStatus, PropertyType
from leasehold.schemas import PropertySearch
from leasehold.services import agreements, queries


@pytest.fixture
def three_agreements(make_property, make_agreement):
    p = make_property()
    early = make_agreement(prop=p, start_date=date(2024, 1, 1), end_date=date(2025, 5, 31))
    edge = make_agreement(prop=p, start_date=date(2024, 6, 1), end_date=date(2025, 6, 1))
    late = make_agreement(prop=p, start_date=date(2025, 6, 2), end_date=date(2025, 6, 30))
    return early, edge, late


def test_list_expired_is_strictly_before_today(db_session, three_agreements):
    early, edge, late = three_agreements
    clock = FixedClock.on(date(2025, 6, 1))

    got = queries.list_expired_agreements(db_session, clock=clock)
    assert [a.id for a in got] == [early.id]

    # moving the clock moves the answer
    later = FixedClock.on(date(2025, 7, 1))
    assert {a.id for a in queries.list_expired_agreements(db_session, clock=later)} == {early.id, edge.id, late.id}


def test_list_expired_ignores_stored_status(db_session, three_agreements):
    early, _, _ = three_agreements
    agreements.activate_agreement(db_session, early.id)
    got = queries.list_expired_agreements(db_session, clock=FixedClock.on(date(2025, 6, 1)))
    assert [a.id for a in got] == [early.id]
    assert got[0].status == AgreementStatus.ACTIVE


def test_list_expiring_between_is_inclusive(db_session, three_agreements):
    early, edge, late = three_agreements
    got = queries.list_expiring_between(db_session, date(2025, 5, 31), date(2025, 6, 1))
    assert [a.id for a in got] == [early.id, edge.id]

    got = queries.list_expiring_between(db_session, date(2025, 6, 2), date(2025, 6, 29))
    assert got == []


def test_list_expiring_between_backwards_window_is_empty(db_session, three_agreements):
    assert queries.list_expiring_between(db_session, date(2025, 6, 2), date(2025, 6, 1)) == []


def test_list_expiring_within_days(db_session, three_agreements):
    _, edge, late = three_agreements
    clock = FixedClock.on(date(2025, 6, 1))
    assert [a.id for a in queries.list_expiring_within(db_session, 0, clock=clock)] == [edge.id]
    assert [a.id for a in queries.list_expiring_within(db_session, 30, clock=clock)] == [edge.id, late.id]
    assert queries.list_expiring_within(db_session, -1, clock=clock) == []


def test_list_active_agreements(db_session, three_agreements):
    early, edge, _ = three_agreements
    agreements.activate_agreement(db_session, edge.id)
    assert [a.id for a in queries.list_active_agreements(db_session)] == [edge.id]


def test_search_properties_ands_filters(db_session, make_property, make_user):
    a = make_property(city="Springfield", price=Decimal("1200.00"), bedrooms=2)
    b = make_property(city="Springfield", price=Decimal("2500.00"), bedrooms=3, property_type=PropertyType.HOUSE)
    c = make_property(city="Ogdenville", price=Decimal("2500.00"), bedrooms=None)

    def ids(**kw):
        return [p.id for p in queries.search_properties(db_session, PropertySearch(**kw))]

    assert ids() == [a.id, b.id, c.id]
    assert ids(city="Springfield") == [a.id, b.id]
    assert ids(min_price=Decimal("2000")) == [b.id, c.id]
    assert ids(city="Springfield", min_price=Decimal("2000")) == [b.id]
    assert ids(max_price=Decimal("1200")) == [a.id]
    assert ids(min_bedrooms=2) == [a.id, b.id]
    assert ids(property_type=PropertyType.HOUSE, status=PropertyStatus.AVAILABLE) == [b.id]
    assert ids(owner_id=c.owner_id) == [c.id]


def test_search_properties_inverted_price_bounds_is_empty(db_session, make_property):
    make_property(price=Decimal("7.00"))
    got = queries.search_properties(db_session, PropertySearch(min_price=Decimal("10"), max_price=Decimal("5")))
    assert got == []
