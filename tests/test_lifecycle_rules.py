from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from leasehold.domain.agreement_lifecycle import (
    ALLOWED_TRANSITIONS,
    PROPERTY_STATUS_FOR,
    TERMINAL_STATUSES,
    check_transition,
    overlaps,
    property_status_for,
    validate_dates,
    validate_money,
)
from leasehold.errors import InvalidArgumentError
from leasehold.models import AgreementStatus as A, PropertyStatus as P


def test_every_transition_target_names_its_property_status():
    targets = {t for nxt in ALLOWED_TRANSITIONS.values() for t in nxt}
    assert targets <= set(PROPERTY_STATUS_FOR)


def test_property_status_pairing():
    assert property_status_for(A.ACTIVE) == P.RENTED
    assert property_status_for(A.RENEWED) == P.RENTED
    assert property_status_for(A.TERMINATED) == P.AVAILABLE
    assert property_status_for(A.EXPIRED) == P.AVAILABLE
    with pytest.raises(InvalidArgumentError):
        property_status_for(A.PENDING)


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {A.EXPIRED, A.TERMINATED, A.RENEWED}


def test_check_transition_modes():
    check_transition(A.TERMINATED, A.ACTIVE, strict=False)
    check_transition(A.PENDING, A.ACTIVE, strict=True)
    check_transition(A.ACTIVE, A.RENEWED, strict=True)
    with pytest.raises(InvalidArgumentError):
        check_transition(A.TERMINATED, A.ACTIVE, strict=True)


def test_validate_dates():
    validate_dates(date(2025, 1, 1), date(2025, 1, 2))
    for start, end in ((date(2025, 1, 2), date(2025, 1, 1)), (date(2025, 1, 1), date(2025, 1, 1))):
        with pytest.raises(InvalidArgumentError, match="end date must be after start date"):
            validate_dates(start, end)


def test_validate_money():
    validate_money(monthly_rent=Decimal("0.01"))
    with pytest.raises(InvalidArgumentError, match="security_deposit must be positive"):
        validate_money(monthly_rent=Decimal("1"), security_deposit=Decimal("0"))


def test_overlaps_is_inclusive():
    jan = (date(2025, 1, 1), date(2025, 1, 31))
    assert overlaps(*jan, date(2025, 1, 31), date(2025, 2, 28))
    assert not overlaps(*jan, date(2025, 2, 1), date(2025, 2, 28))
    assert overlaps(*jan, date(2024, 12, 1), date(2025, 3, 1))
