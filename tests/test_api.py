from __future__ import annotations

from decimal import Decimal

from leasehold.services import properties


def _user(client, username: str, role: str = "TENANT") -> dict:
    r = client.post(
        "/api/users",
        json={
            "username": username,
            "email": f"{username}@example.com",
            "first_name": "Al",
            "last_name": "Ex",
            "role": role,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


def _property(client, owner_id: int, **kw) -> dict:
    body = {
        "owner_id": owner_id,
        "title": "Corner house",
        "address": "5 Elm St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "property_type": "HOUSE",
        "price": "2000.00",
        "bedrooms": 3,
    }
    body.update(kw)
    r = client.post("/api/properties", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def _setup(client) -> tuple[dict, dict]:
    owner = _user(client, "owner", "PROPERTY_OWNER")
    renter = _user(client, "renter")
    prop = _property(client, owner["id"])
    r = client.post("/api/tenants", json={"user_id": renter["id"], "employer_name": "Acme"})
    assert r.status_code == 201, r.text
    return prop, r.json()


def test_health_and_request_id(client):
    r = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.headers["X-Request-ID"] == "abc-123"


def test_lifecycle_over_http(client):
    prop, tenant = _setup(client)

    r = client.post(
        "/api/agreements",
        json={
            "property_id": prop["id"],
            "tenant_id": tenant["id"],
            "start_date": "2025-01-01",
            "end_date": "2025-12-31",
            "monthly_rent": "2000.00",
            "security_deposit": "2000.00",
        },
    )
    assert r.status_code == 201, r.text
    ag = r.json()
    assert ag["status"] == "PENDING"

    r = client.post(f"/api/agreements/{ag['id']}/activate")
    assert r.status_code == 200, r.text
    assert r.json()["agreement"]["status"] == "ACTIVE"
    assert r.json()["property_status"] == "RENTED"
    assert client.get(f"/api/properties/{prop['id']}").json()["status"] == "RENTED"

    r = client.post(f"/api/agreements/{ag['id']}/terminate")
    assert r.json()["property_status"] == "AVAILABLE"

    audit = client.get("/api/audit", params={"entity_type": "RentalAgreement"}).json()
    assert [e["action"] for e in audit][:2] == ["agreement.terminated", "agreement.active"]


def test_error_mapping(client):
    prop, tenant = _setup(client)

    r = client.get("/api/properties/999")
    assert r.status_code == 404
    assert r.json()["detail"] == "Property not found with id: 999"

    r = client.post(
        "/api/agreements",
        json={
            "property_id": prop["id"],
            "tenant_id": tenant["id"],
            "start_date": "2025-02-01",
            "end_date": "2025-01-01",
            "monthly_rent": "1000.00",
            "security_deposit": "1000.00",
        },
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "end date must be after start date"
    assert client.get("/api/agreements").json() == []

    r = client.post(
        "/api/users",
        json={"username": "owner", "email": "x@example.com", "first_name": "A", "last_name": "B"},
    )
    assert r.status_code == 409

    r = client.post("/api/tenants", json={"user_id": tenant["user_id"]})
    assert r.status_code == 409


def test_synchronization_failure_is_500_and_nothing_changes(client, monkeypatch):
    prop, tenant = _setup(client)
    ag = client.post(
        "/api/agreements",
        json={
            "property_id": prop["id"],
            "tenant_id": tenant["id"],
            "start_date": "2025-01-01",
            "end_date": "2025-12-31",
            "monthly_rent": "2000.00",
            "security_deposit": "2000.00",
        },
    ).json()

    def boom(*a, **k):
        raise RuntimeError("disk full")

    monkeypatch.setattr(properties, "update_status", boom)

    r = client.post(f"/api/agreements/{ag['id']}/activate")
    assert r.status_code == 500
    assert "nothing was changed" in r.json()["detail"]

    assert client.get(f"/api/agreements/{ag['id']}").json()["status"] == "PENDING"
    assert client.get(f"/api/properties/{prop['id']}").json()["status"] == "AVAILABLE"


def test_property_search_and_price_range(client):
    owner = _user(client, "lister", "PROPERTY_OWNER")
    p = _property(client, owner["id"], price="2000.00")

    r = client.get("/api/properties", params={"min_price": "1000", "max_price": "3000"})
    assert [x["id"] for x in r.json()] == [p["id"]]
    assert Decimal(r.json()[0]["price"]) == Decimal("2000.00")

    r = client.get("/api/properties", params={"min_price": "3000", "max_price": "5000"})
    assert r.json() == []

    r = client.get("/api/properties/available", params={"city": "Springfield"})
    assert [x["id"] for x in r.json()] == [p["id"]]


def test_expiring_uses_injected_clock(client):
    prop, tenant = _setup(client)
    for start, end in (("2025-01-01", "2025-05-31"), ("2025-01-01", "2025-06-15")):
        r = client.post(
            "/api/agreements",
            json={
                "property_id": prop["id"],
                "tenant_id": tenant["id"],
                "start_date": start,
                "end_date": end,
                "monthly_rent": "900.00",
                "security_deposit": "900.00",
            },
        )
        assert r.status_code == 201, r.text

    # the test clock is fixed at 2025-06-01
    expired = client.get("/api/agreements/expired").json()
    assert [a["end_date"] for a in expired] == ["2025-05-31"]

    soon = client.get("/api/agreements/expiring", params={"days": 30}).json()
    assert [a["end_date"] for a in soon] == ["2025-06-15"]

    window = client.get("/api/agreements/expiring", params={"start": "2025-05-01", "end": "2025-06-30"}).json()
    assert len(window) == 2


def test_dashboard_endpoint(client):
    _setup(client)
    d = client.get("/api/reports/dashboard").json()
    assert d["users"]["total"] == 2
    assert d["generated_at"].startswith("2025-06-01")


def _active_agreement(client, prop: dict, tenant: dict) -> dict:
    r = client.post(
        "/api/agreements",
        json={
            "property_id": prop["id"],
            "tenant_id": tenant["id"],
            "start_date": "2025-01-01",
            "end_date": "2025-12-31",
            "monthly_rent": "2000.00",
            "security_deposit": "2000.00",
        },
    )
    assert r.status_code == 201, r.text
    r = client.post(f"/api/agreements/{r.json()['id']}/activate")
    assert r.status_code == 200, r.text
    return r.json()["agreement"]


def test_renew_over_http_returns_successor(client):
    prop, tenant = _setup(client)
    ag = _active_agreement(client, prop, tenant)

    r = client.post(f"/api/agreements/{ag['id']}/renew")
    assert r.status_code == 200, r.text
    nxt = r.json()["agreement"]
    assert nxt["id"] != ag["id"]
    assert nxt["status"] == "ACTIVE"
    assert nxt["start_date"] == "2026-01-01"
    assert r.json()["property_status"] == "RENTED"
    assert client.get(f"/api/agreements/{ag['id']}").json()["status"] == "RENEWED"

    active = client.get(f"/api/properties/{prop['id']}/agreements", params={"status": "ACTIVE"}).json()
    assert [a["id"] for a in active] == [nxt["id"]]

    r = client.post(
        f"/api/agreements/{nxt['id']}/renew",
        json={
            "start_date": "2027-01-01",
            "end_date": "2027-03-31",
            "monthly_rent": "2100.00",
            "security_deposit": "2000.00",
        },
    )
    assert r.status_code == 200, r.text
    assert r.json()["agreement"]["end_date"] == "2027-03-31"


def test_owner_agreements_and_current_agreement(client):
    prop, tenant = _setup(client)

    r = client.get(f"/api/tenants/{tenant['id']}/current-agreement")
    assert r.status_code == 200
    assert r.json() is None

    ag = _active_agreement(client, prop, tenant)

    r = client.get(f"/api/tenants/{tenant['id']}/current-agreement")
    assert r.json()["id"] == ag["id"]

    owned = client.get(f"/api/properties/by-owner/{prop['owner_id']}/agreements").json()
    assert [a["id"] for a in owned] == [ag["id"]]
    assert client.get("/api/properties/by-owner/999/agreements").json() == []

    assert client.get("/api/tenants/999/current-agreement").status_code == 404


def test_expiring_rejects_half_window(client):
    r = client.get("/api/agreements/expiring", params={"start": "2025-05-01"})
    assert r.status_code == 400
    assert r.json()["detail"] == "both start and end are required for a date window"

    r = client.get("/api/agreements/expiring", params={"end": "2025-06-30"})
    assert r.status_code == 400

    r = client.get("/api/agreements/expiring", params={"start": "2025-07-01", "end": "2025-06-01"})
    assert r.status_code == 200
    assert r.json() == []
