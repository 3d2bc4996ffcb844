"""HTTP tests for the eligibility and inventory endpoints."""
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update
from sqlalchemy.orm import sessionmaker

from conftest import FailingStore
from bloodbank.api.deps import get_store
from bloodbank.core.security import create_access_token
from bloodbank.database.database import get_db
from bloodbank.main import app
from bloodbank.models import BloodInventory, BloodRequest, Donation


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(db):
    db.add_all([
        BloodInventory(blood_type="O-", quantity=15, capacity=100),
        BloodInventory(blood_type="O+", quantity=60, capacity=100),
        BloodRequest(user_id="user-1", blood_type="O+", quantity=2, status="pending"),
        BloodRequest(user_id="user-2", blood_type="O+", quantity=1, status="pending"),
        BloodRequest(user_id="user-3", blood_type="O+", quantity=4, status="pending"),
        Donation(donor_id="donor-1", blood_type="O-", units=1, donation_date=date.today() - timedelta(days=10)),
    ])
    db.commit()


def auth_headers(user_id):
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


def test_donation_eligibility(client):
    response = client.post("/api/v1/eligibility/donation", json={
        "age": 30,
        "weight": 70,
        "medical_conditions": ["Heart Disease"],
    })
    assert response.status_code == 200
    body = response.json()
    assert body["is_eligible"] is False
    assert body["reasons"] == ["Cannot donate due to medical condition: Heart Disease"]
    assert "next_eligible_date" not in body


def test_donation_eligibility_next_date(client):
    last = (date.today() - timedelta(days=50)).isoformat()
    body = client.post("/api/v1/eligibility/donation", json={"last_donation_date": last}).json()
    assert body["is_eligible"] is False
    assert body["next_eligible_date"] == (date.today() + timedelta(days=6)).isoformat()


def test_donation_eligibility_rejects_negative_age(client):
    response = client.post("/api/v1/eligibility/donation", json={"age": -1})
    assert response.status_code == 422
    body = response.json()
    assert body["detail"] == "Validation error"
    assert body["errors"][0]["loc"] == ["body", "age"]


def test_donation_eligibility_accepts_null_fields(client):
    response = client.post("/api/v1/eligibility/donation", json={
        "age": 30,
        "weight": 70,
        "last_donation_date": None,
        "medical_conditions": None,
        "medications": None,
        "recent_surgery": None,
        "recent_tattoo": None,
        "recent_travel": None,
    })
    assert response.status_code == 200
    body = response.json()
    assert body["is_eligible"] is True
    assert body["reasons"] == []


def test_request_eligibility_anonymous(client, seeded):
    response = client.post("/api/v1/eligibility/request", json={"urgency_level": "urgent"})
    assert response.status_code == 200
    body = response.json()
    assert body["is_eligible"] is False
    assert "logged in" in body["reasons"][0]
    assert body["required_documents"] == []


def test_request_eligibility_with_pending_request(client, seeded):
    routine = client.post(
        "/api/v1/eligibility/request",
        json={"urgency_level": "routine"},
        headers=auth_headers("user-1"),
    ).json()
    assert routine["is_eligible"] is False

    emergency = client.post(
        "/api/v1/eligibility/request",
        json={"urgency_level": "emergency"},
        headers=auth_headers("user-1"),
    ).json()
    assert emergency["is_eligible"] is True
    assert emergency["required_documents"] == ["Emergency medical authorization", "Valid ID"]


def test_request_eligibility_empty_inventory(client):
    body = client.post(
        "/api/v1/eligibility/request",
        json={"urgency_level": "urgent"},
        headers=auth_headers("user-9"),
    ).json()
    assert body["is_eligible"] is False
    assert body["reasons"] == ["No blood inventory available for urgent requests"]


def test_request_eligibility_invalid_urgency(client):
    response = client.post("/api/v1/eligibility/request", json={"urgency_level": "whenever"})
    assert response.status_code == 422


def test_invalid_token_is_rejected(client):
    response = client.get(
        "/api/v1/eligibility/appointment",
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


def test_appointment_eligibility(client, seeded):
    body = client.get("/api/v1/eligibility/appointment", headers=auth_headers("donor-1")).json()
    assert body["is_eligible"] is False
    assert body["reasons"] == ["Must wait 46 more days since last donation"]
    assert "next_eligible_date" not in body


def test_availability(client, seeded):
    response = client.get("/api/v1/inventory/availability", params={"blood_type": "O+", "required_units": 5})
    assert response.status_code == 200
    body = response.json()
    assert body["available_units"] == 60
    assert body["pending_requests"] == 7
    assert body["is_available"] is True
    assert body["stock_level"] == "good"


def test_compatible(client, seeded):
    body = client.get("/api/v1/inventory/compatible", params={"recipient_blood_type": "O+"}).json()
    assert [item["blood_type"] for item in body] == ["O-", "O+"]
    assert body[0]["stock_level"] == "critical"


def test_compatible_unknown_recipient(client):
    response = client.get("/api/v1/inventory/compatible", params={"recipient_blood_type": "Q"})
    assert response.status_code == 200
    assert response.json() == []


def test_with_requests_flags_attention(client, seeded):
    body = client.get("/api/v1/inventory/with-requests").json()
    by_type = {item["blood_type"]: item for item in body}
    assert by_type["O-"]["needs_attention"] is True
    assert by_type["O+"]["request_count"] == 3
    assert by_type["O+"]["needs_attention"] is True


def test_live_inventory_reads_database(client, seeded):
    body = client.get("/api/v1/inventory/live").json()
    assert body["refreshed_at"] is not None
    assert [item["blood_type"] for item in body["items"]] == ["O+", "O-"]


def test_store_failure_returns_503(client):
    app.dependency_overrides[get_store] = lambda: FailingStore()
    response = client.get("/api/v1/inventory/availability", params={"blood_type": "O+"})
    assert response.status_code == 503
    assert response.json()["detail"] == "Unable to check eligibility right now"


def test_live_inventory_sees_writes_from_other_connections(client, engine):
    assert client.get("/api/v1/inventory/live").json()["items"] == []

    other_session = sessionmaker(bind=engine)()
    other_session.add(BloodInventory(blood_type="A+", quantity=30, capacity=100))
    other_session.commit()
    other_session.close()

    with engine.begin() as conn:
        conn.execute(BloodInventory.__table__.insert().values(blood_type="O-", quantity=5, capacity=50))

    body = client.get("/api/v1/inventory/live").json()
    assert [item["blood_type"] for item in body["items"]] == ["A+", "O-"]
    assert body["items"][1]["stock_level"] == "critical"

    with engine.begin() as conn:
        conn.execute(
            update(BloodInventory.__table__)
            .where(BloodInventory.__table__.c.blood_type == "O-")
            .values(quantity=40)
        )

    body = client.get("/api/v1/inventory/live").json()
    assert body["items"][1]["quantity"] == 40
    assert body["items"][1]["stock_level"] == "good"


def test_compatibility_lookup(client):
    response = client.get("/api/v1/inventory/compatibility", params={"blood_type": "A-"})
    assert response.status_code == 200
    assert response.json() == {
        "blood_type": "A-",
        "can_receive_from": ["O-", "A-"],
        "can_donate_to": ["A-", "A+", "AB-", "AB+"],
    }


def test_compatibility_checks_a_donor(client):
    params = {"blood_type": "B+", "donor_blood_type": "O+"}
    assert client.get("/api/v1/inventory/compatibility", params=params).json()["compatible"] is True

    params["donor_blood_type"] = "A+"
    assert client.get("/api/v1/inventory/compatibility", params=params).json()["compatible"] is False


def test_compatibility_unknown_type(client):
    body = client.get("/api/v1/inventory/compatibility", params={"blood_type": "Q"}).json()
    assert body["can_receive_from"] == []
    assert body["can_donate_to"] == []
