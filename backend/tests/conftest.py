import os

# Must be set before anything under medlegal is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from medlegal.db.database import Base, SessionLocal, engine, get_db
from medlegal.main import app


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _register(client, username, full_name="Dr. Test User"):
    response = client.post(
        "/api/v1/auth/register",
        json={"username": username, "password": "password123", "full_name": full_name},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def auth_headers(client):
    return _register(client, "doctor")


@pytest.fixture()
def other_headers(client):
    return _register(client, "second.doctor", "Dr. Other")


@pytest.fixture()
def case_id(client, auth_headers):
    response = client.post("/api/v1/cases", json={}, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]


@pytest.fixture()
def claimant_payload():
    return {
        "full_name": "John Smith",
        "date_of_birth": "1985-04-12",
        "gender": "Male",
        "address": "12 Station Road, Preston",
        "date_of_examination": "2025-03-01",
    }


@pytest.fixture()
def full_case():
    """Every section minimally complete, keyed by Case column name"""
    return {
        "claimant_details": {"full_name": "John Smith", "date_of_birth": "1985-04-12"},
        "accident_details": {"accident_date": "2025-01-10", "accident_type": "Rear-end collision"},
        "physical_injury_details": {
            "injuries": [
                {"type": "Neck", "onset_time": "Same Day", "initial_severity": "Moderate",
                 "current_severity": "Mild"},
            ]
        },
        "psychological_injuries": {"travel_anxiety_symptoms": ["Nervous as a driver"]},
        "treatments": {"went_to_hospital": False},
        "lifestyle_impact": {"days_off_work": "3"},
        "family_history": {"has_previous_accident": False},
        "work_history": {"time_off_work": "1 week"},
        "prognosis": {"overall_prognosis": "Full recovery expected"},
        "expert_details": {"examiner": "Dr. Sarah Johnson", "credentials": "MBBS"},
    }
