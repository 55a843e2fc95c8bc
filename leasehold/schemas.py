# leasehold/schemas.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import AgreementStatus, PropertyStatus, PropertyType, UserRole


# -------------------- Users --------------------

class UserUpdate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone_number: Optional[str] = None


class UserCreate(UserUpdate):
    username: str = Field(min_length=3, max_length=80)
    email: str = Field(min_length=3, max_length=200)
    role: UserRole = UserRole.TENANT


class UserOut(UserCreate):
    id: int
    active: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# -------------------- Properties --------------------

class PropertyFields(BaseModel):
    """Everything a generic property update replaces. Status and owner are not here."""

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1, max_length=10)
    property_type: PropertyType
    price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    bedrooms: Optional[int] = Field(default=None, gt=0)
    bathrooms: Optional[int] = Field(default=None, gt=0)
    square_feet: Optional[int] = Field(default=None, gt=0)


class PropertyCreate(PropertyFields):
    owner_id: int


class PropertyStatusUpdate(BaseModel):
    status: PropertyStatus


class PropertyOut(PropertyCreate):
    id: int
    status: PropertyStatus
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class PropertySearch(BaseModel):
    status: Optional[PropertyStatus] = None
    property_type: Optional[PropertyType] = None
    city: Optional[str] = None
    owner_id: Optional[int] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_bedrooms: Optional[int] = None


# -------------------- Tenants --------------------

class TenantProfile(BaseModel):
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    employer_name: Optional[str] = None
    employer_phone: Optional[str] = None
    notes: Optional[str] = None


class TenantCreate(TenantProfile):
    user_id: int


class TenantOut(TenantCreate):
    id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# -------------------- Rental agreements --------------------

class AgreementTerms(BaseModel):
    """
    Date ordering is checked by the lifecycle service, not here, so the
    service owns the single "end date must be after start date" rule.
    """

    start_date: date
    end_date: date
    monthly_rent: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    security_deposit: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    terms: Optional[str] = Field(default=None, max_length=5000)


class AgreementCreate(AgreementTerms):
    property_id: int
    tenant_id: int


class AgreementOut(AgreementCreate):
    id: int
    status: AgreementStatus
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TransitionOut(BaseModel):
    agreement: AgreementOut
    property_status: PropertyStatus


# -------------------- Audit --------------------

class AuditEventOut(BaseModel):
    id: int
    actor_user_id: Optional[int] = None
    action: str
    entity_type: str
    entity_id: str
    before_json: Optional[str] = None
    after_json: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
