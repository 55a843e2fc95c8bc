# leasehold/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from leasehold.domain.clock import Clock, system_clock
from leasehold.models import AgreementStatus, PropertyType, UserRole
from leasehold.schemas import AgreementCreate, PropertyCreate, TenantCreate, UserCreate
from leasehold.services import agreements, properties, tenants, users


@dataclass(frozen=True)
class SeedResult:
    owner_id: int
    tenant_id: int
    property_id: int
    agreement_id: int
    agreement_status: AgreementStatus


def _get_or_create_user(db: Session, username: str, email: str, first: str, last: str, role: UserRole):
    row = users.get_user_by_username(db, username)
    if row:
        return row
    return users.create_user(
        db, UserCreate(username=username, email=email, first_name=first, last_name=last, role=role)
    )


def seed_demo(
    db: Session,
    *,
    city: str = "Springfield",
    monthly_rent: Decimal = Decimal("2000.00"),
    activate: bool = True,
    clock: Clock = system_clock,
) -> SeedResult:
    """
    One owner, one tenant, one listing and a 12 month agreement starting today.
    Re-running reuses the owner and tenant accounts and adds another listing.
    """
    owner = _get_or_create_user(db, "demo_owner", "owner@demo.local", "Olive", "Owner", UserRole.PROPERTY_OWNER)
    renter = _get_or_create_user(db, "demo_tenant", "tenant@demo.local", "Tom", "Tenant", UserRole.TENANT)

    tenant = tenants.get_tenant_by_user_id(db, renter.id) or tenants.create_tenant(
        db, TenantCreate(user_id=renter.id, employer_name="Demo Works")
    )

    prop = properties.create_property(
        db,
        PropertyCreate(
            owner_id=owner.id,
            title="Demo two-bed apartment",
            address="1 Main St",
            city=city,
            state="IL",
            zip_code="62701",
            property_type=PropertyType.APARTMENT,
            price=monthly_rent,
            bedrooms=2,
            bathrooms=1,
        ),
    )

    start = clock.today()
    ag = agreements.create_agreement(
        db,
        AgreementCreate(
            property_id=prop.id,
            tenant_id=tenant.id,
            start_date=start,
            end_date=start + timedelta(days=365),
            monthly_rent=monthly_rent,
            security_deposit=monthly_rent,
        ),
    )
    if activate:
        ag = agreements.activate_agreement(db, ag.id)

    return SeedResult(
        owner_id=owner.id,
        tenant_id=tenant.id,
        property_id=prop.id,
        agreement_id=ag.id,
        agreement_status=ag.status,
    )
