"""Tests for staff login and user management."""

from datetime import datetime, timezone

from jose import jwt

from carwash.auth import ALGORITHM, create_access_token
from carwash.config import settings


def test_login(client, admin_headers):
    response = client.post("/auth/login", data={"username": "admin@example.com", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"

    token = response.json()["access_token"]
    me = client.get("/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == "admin@example.com"
    assert me.json()["role"] == "admin"


def test_login_wrong_password(client, admin_headers):
    response = client.post("/auth/login", data={"username": "admin@example.com", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_unknown_user(client):
    response = client.post("/auth/login", data={"username": "ghost@example.com", "password": "password123"})
    assert response.status_code == 401


def test_me_requires_token(client):
    assert client.get("/me").status_code == 401


def test_admin_creates_staff(client, admin_headers):
    body = {"email": "washer@example.com", "password": "longenough", "role": "staff"}

    response = client.post("/users", json=body, headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["role"] == "staff"

    assert client.post("/users", json=body, headers=admin_headers).status_code == 409

    login = client.post("/auth/login", data={"username": "washer@example.com", "password": "longenough"})
    assert login.status_code == 200


def test_staff_cannot_create_users(client, staff_headers):
    body = {"email": "someone@example.com", "password": "longenough", "role": "admin"}
    assert client.post("/users", json=body, headers=staff_headers).status_code == 403


def test_short_password(client, admin_headers):
    body = {"email": "someone@example.com", "password": "short", "role": "staff"}
    assert client.post("/users", json=body, headers=admin_headers).status_code == 422


def test_token_expiry():
    before = datetime.now(timezone.utc).timestamp()
    token = create_access_token({"sub": "admin@example.com"}, expires_minutes=15)

    claims = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    assert claims["sub"] == "admin@example.com"
    assert before + 14 * 60 <= claims["exp"] <= before + 16 * 60


def test_expired_token_is_rejected(client, admin_headers):
    token = create_access_token({"sub": "admin@example.com"}, expires_minutes=-1)
    assert client.get("/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401
