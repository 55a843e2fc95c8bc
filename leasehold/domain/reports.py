# leasehold/domain/reports.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models import (
    AgreementStatus,
    Property,
    PropertyStatus,
    PropertyType,
    RentalAgreement,
    Tenant,
    User,
    UserRole,
)
from .clock import Clock

# -----------------------------------------------------------------------------
# Admin rollups
# -----------------------------------------------------------------------------
# Counts are grouped in SQL; every enum member appears in the output even when
# its count is zero so dashboards get a stable shape.
# -----------------------------------------------------------------------------

RECENT_WINDOW = timedelta(days=7)


def _counts(db: Session, col, enum_cls) -> dict[str, int]:
    rows = db.execute(select(col, func.count()).group_by(col)).all()
    got = {getattr(k, "value", k): int(n) for (k, n) in rows}
    return {m.value: got.get(m.value, 0) for m in enum_cls}


def _money(v: Optional[Decimal]) -> Decimal:
    return Decimal(v or 0).quantize(Decimal("0.01"))


@dataclass(frozen=True)
class PropertyReport:
    total: int
    by_status: dict[str, int]
    by_type: dict[str, int]
    average_price: Decimal

    def as_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_status": self.by_status,
            "by_type": self.by_type,
            "average_price": str(self.average_price),
        }


@dataclass(frozen=True)
class AgreementReport:
    total: int
    by_status: dict[str, int]
    monthly_revenue: Decimal
    average_monthly_rent: Decimal
    security_deposits_held: Decimal

    def as_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_status": self.by_status,
            "financials": {
                "monthly_revenue": str(self.monthly_revenue),
                "average_monthly_rent": str(self.average_monthly_rent),
                "security_deposits_held": str(self.security_deposits_held),
            },
        }


@dataclass(frozen=True)
class TenantReport:
    total: int
    with_active_agreement: int
    without_active_agreement: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "with_active_agreement": self.with_active_agreement,
            "without_active_agreement": self.without_active_agreement,
        }


@dataclass(frozen=True)
class UserReport:
    total: int
    active: int
    by_role: dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {"total": self.total, "active": self.active, "by_role": self.by_role}


def property_report(db: Session) -> PropertyReport:
    total = int(db.scalar(select(func.count(Property.id))) or 0)
    avg = db.scalar(select(func.avg(Property.price)))
    return PropertyReport(
        total=total,
        by_status=_counts(db, Property.status, PropertyStatus),
        by_type=_counts(db, Property.property_type, PropertyType),
        average_price=_money(avg),
    )


def agreement_report(db: Session) -> AgreementReport:
    total = int(db.scalar(select(func.count(RentalAgreement.id))) or 0)
    active = db.scalars(
        select(RentalAgreement).where(RentalAgreement.status == AgreementStatus.ACTIVE)
    ).all()

    revenue = sum((Decimal(a.monthly_rent) for a in active), Decimal("0"))
    deposits = sum((Decimal(a.security_deposit) for a in active), Decimal("0"))
    avg = revenue / len(active) if active else Decimal("0")

    return AgreementReport(
        total=total,
        by_status=_counts(db, RentalAgreement.status, AgreementStatus),
        monthly_revenue=_money(revenue),
        average_monthly_rent=_money(avg),
        security_deposits_held=_money(deposits),
    )


def tenant_report(db: Session) -> TenantReport:
    total = int(db.scalar(select(func.count(Tenant.id))) or 0)
    with_active = int(
        db.scalar(
            select(func.count(func.distinct(RentalAgreement.tenant_id))).where(
                RentalAgreement.status == AgreementStatus.ACTIVE
            )
        )
        or 0
    )
    return TenantReport(
        total=total,
        with_active_agreement=with_active,
        without_active_agreement=max(total - with_active, 0),
    )


def user_report(db: Session) -> UserReport:
    by_role = {r.value: 0 for r in UserRole}
    active = 0
    users = db.scalars(select(User)).all()
    for u in users:
        match u.role:
            case UserRole.ADMIN:
                by_role[UserRole.ADMIN.value] += 1
            case UserRole.PROPERTY_OWNER:
                by_role[UserRole.PROPERTY_OWNER.value] += 1
            case UserRole.TENANT:
                by_role[UserRole.TENANT.value] += 1
        if u.active:
            active += 1
    return UserReport(total=len(users), active=active, by_role=by_role)


def recent_activity(db: Session, *, clock: Clock) -> dict[str, int]:
    since: datetime = clock.now() - RECENT_WINDOW
    return {
        "new_users": int(db.scalar(select(func.count(User.id)).where(User.created_at > since)) or 0),
        "new_properties": int(
            db.scalar(select(func.count(Property.id)).where(Property.created_at > since)) or 0
        ),
        "new_agreements": int(
            db.scalar(select(func.count(RentalAgreement.id)).where(RentalAgreement.created_at > since)) or 0
        ),
    }


def dashboard(db: Session, *, clock: Clock) -> dict[str, Any]:
    return {
        "users": user_report(db).as_dict(),
        "properties": property_report(db).as_dict(),
        "agreements": agreement_report(db).as_dict(),
        "tenants": tenant_report(db).as_dict(),
        "last_week": recent_activity(db, clock=clock),
        "generated_at": clock.now().isoformat(),
    }
