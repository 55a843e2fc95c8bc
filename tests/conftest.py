# tests/conftest.py
from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leasehold.db import Base, build_engine, get_db
from leasehold.domain.clock import FixedClock
from leasehold.main import create_app
from leasehold.models import PropertyType, UserRole
from leasehold.routers.deps import get_clock
from leasehold.schemas import AgreementCreate, PropertyCreate, TenantCreate, UserCreate
from leasehold.services import agreements, properties, tenants, users

TODAY = date(2025, 6, 1)


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock():
    return FixedClock.on(TODAY)


@pytest.fixture
def client(session_factory, clock, monkeypatch):
    # keep pytest's own log capture in place
    monkeypatch.setattr("leasehold.main.configure_logging", lambda *a, **k: None)
    app = create_app()

    def _get_db():
        db = session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as c:
        yield c


# -------------------- factories --------------------


@pytest.fixture
def make_user(db_session):
    n = {"i": 0}

    def _make(role: UserRole = UserRole.TENANT, **kw):
        n["i"] += 1
        data = {
            "username": f"user{n['i']}",
            "email": f"user{n['i']}@example.com",
            "first_name": "Pat",
            "last_name": f"Doe{n['i']}",
            "role": role,
        }
        data.update(kw)
        return users.create_user(db_session, UserCreate(**data))

    return _make


@pytest.fixture
def make_property(db_session, make_user):
    def _make(owner=None, **kw):
        owner = owner or make_user(UserRole.PROPERTY_OWNER)
        data = {
            "owner_id": owner.id,
            "title": "Two bed flat",
            "address": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip_code": "62701",
            "property_type": PropertyType.APARTMENT,
            "price": Decimal("2000.00"),
            "bedrooms": 2,
            "bathrooms": 1,
        }
        data.update(kw)
        return properties.create_property(db_session, PropertyCreate(**data))

    return _make


@pytest.fixture
def make_tenant(db_session, make_user):
    def _make(user=None, **kw):
        user = user or make_user(UserRole.TENANT)
        return tenants.create_tenant(db_session, TenantCreate(user_id=user.id, **kw))

    return _make


@pytest.fixture
def make_agreement(db_session, make_property, make_tenant):
    def _make(prop=None, tenant=None, **kw):
        prop = prop or make_property()
        tenant = tenant or make_tenant()
        data = {
            "property_id": prop.id,
            "tenant_id": tenant.id,
            "start_date": date(2025, 1, 1),
            "end_date": date(2025, 12, 31),
            "monthly_rent": Decimal("2000.00"),
            "security_deposit": Decimal("2000.00"),
        }
        data.update(kw)
        return agreements.create_agreement(db_session, AgreementCreate(**data))

    return _make
