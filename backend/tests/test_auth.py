from datetime import timedelta

from medlegal.core.security import create_access_token, get_password_hash, verify_password


def test_password_hash_round_trip():
    hashed = get_password_hash("password123")
    assert hashed.startswith("pbkdf2_sha256$")
    assert verify_password("password123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("password123", "garbage")


def test_register_login_and_me(client):
    response = client.post(
        "/api/v1/auth/register",
        json={"username": "Sarah.J", "password": "password123", "full_name": "Dr. Sarah Johnson"},
    )
    assert response.status_code == 201
    assert response.json()["user"]["username"] == "sarah.j"

    response = client.post("/api/v1/auth/login", json={"username": "SARAH.J", "password": "password123"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["full_name"] == "Dr. Sarah Johnson"
    assert me.json()["role"] == "doctor"


def test_duplicate_username_rejected(client, auth_headers):
    response = client.post(
        "/api/v1/auth/register",
        json={"username": "doctor", "password": "password123", "full_name": "Dr. Again"},
    )
    assert response.status_code == 400


def test_bad_password_rejected(client, auth_headers):
    response = client.post("/api/v1/auth/login", json={"username": "doctor", "password": "nope"})
    assert response.status_code == 401


def test_missing_or_invalid_token(client):
    assert client.get("/api/v1/cases").status_code in (401, 403)
    response = client.get("/api/v1/cases", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_expired_token_rejected(client, auth_headers):
    token = create_access_token({"sub": "1"}, expires_delta=timedelta(minutes=-5))
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token expired"
