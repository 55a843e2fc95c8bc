# leasehold/domain/agreement_lifecycle.py
from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from ..errors import InvalidArgumentError
from ..models import AgreementStatus, PropertyStatus

# -----------------------------------------------------------------------------
# Rental agreement lifecycle
# -----------------------------------------------------------------------------
#   PENDING -> ACTIVE -> { EXPIRED | TERMINATED | RENEWED }
#
# Every transition that changes agreement status also writes the linked
# property's status. The pairing lives here, in one table, so a new transition
# cannot be added without naming its property side.
# -----------------------------------------------------------------------------

PROPERTY_STATUS_FOR: dict[AgreementStatus, PropertyStatus] = {
    AgreementStatus.ACTIVE: PropertyStatus.RENTED,
    AgreementStatus.RENEWED: PropertyStatus.RENTED,
    AgreementStatus.TERMINATED: PropertyStatus.AVAILABLE,
    AgreementStatus.EXPIRED: PropertyStatus.AVAILABLE,
}

ALLOWED_TRANSITIONS: dict[AgreementStatus, frozenset[AgreementStatus]] = {
    AgreementStatus.PENDING: frozenset({AgreementStatus.ACTIVE, AgreementStatus.TERMINATED}),
    AgreementStatus.ACTIVE: frozenset(
        {AgreementStatus.EXPIRED, AgreementStatus.TERMINATED, AgreementStatus.RENEWED}
    ),
    AgreementStatus.EXPIRED: frozenset(),
    AgreementStatus.TERMINATED: frozenset(),
    AgreementStatus.RENEWED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, nxt in ALLOWED_TRANSITIONS.items() if not nxt)


def is_allowed_transition(current: AgreementStatus, target: AgreementStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def property_status_for(target: AgreementStatus) -> PropertyStatus:
    try:
        return PROPERTY_STATUS_FOR[target]
    except KeyError:
        raise InvalidArgumentError(f"no lifecycle transition leads to {target.value}") from None


def check_transition(current: AgreementStatus, target: AgreementStatus, *, strict: bool) -> None:
    """
    Non-strict mode accepts any transition, matching how agreements have always
    behaved. Strict mode enforces ALLOWED_TRANSITIONS.
    """
    if strict and not is_allowed_transition(current, target):
        raise InvalidArgumentError(
            f"cannot move agreement from {current.value} to {target.value}"
        )


def validate_dates(start_date: date, end_date: date) -> None:
    if start_date is None or end_date is None:
        raise InvalidArgumentError("start date and end date are required")
    if not end_date > start_date:
        raise InvalidArgumentError("end date must be after start date")


def validate_money(**amounts: Optional[Decimal]) -> None:
    for name, v in amounts.items():
        if v is None or Decimal(v) <= 0:
            raise InvalidArgumentError(f"{name} must be positive")


def successor_dates(start_date: date, end_date: date) -> tuple[date, date]:
    """The next term starts the day after `end_date` and runs for the same length."""
    start = end_date + timedelta(days=1)
    return start, start + (end_date - start_date)


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive on both ends."""
    return not (a_end < b_start or b_end < a_start)

