"""
Tests for login, bearer-token resolution and role guards.
"""

from datetime import timedelta

import pytest

from models.enums import UserRole, UserStatus
from utils.auth import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)

TEST_PASSWORD = "testpassword123"


@pytest.mark.unit
def test_password_hashing():
    hashed = get_password_hash("secret-password")
    assert hashed != "secret-password"
    assert verify_password("secret-password", hashed)
    assert not verify_password("wrong-password", hashed)


@pytest.mark.unit
def test_token_round_trip():
    token = create_access_token(data={"sub": "user-123"})
    assert decode_access_token(token) == "user-123"


@pytest.mark.unit
def test_expired_token_is_rejected():
    token = create_access_token(data={"sub": "user-123"}, expires_delta=timedelta(minutes=-1))
    assert decode_access_token(token) is None


@pytest.mark.unit
def test_garbage_token_is_rejected():
    assert decode_access_token("not-a-jwt") is None


@pytest.mark.integration
def test_login_success(client, student):
    response = client.post("/api/auth/login", json={"email": student.email, "password": TEST_PASSWORD})
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == student.email
    assert "password" not in data["user"]
    assert decode_access_token(data["token"]) == data["user"]["id"]


@pytest.mark.integration
def test_login_wrong_password(client, student):
    response = client.post("/api/auth/login", json={"email": student.email, "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Incorrect email or password"


@pytest.mark.integration
def test_login_unknown_email(client):
    response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": TEST_PASSWORD})
    assert response.status_code == 401


@pytest.mark.integration
def test_login_blocked_account(client, make_user):
    user = make_user(email="blocked@example.com", status=UserStatus.BLOCKED)
    response = client.post("/api/auth/login", json={"email": user.email, "password": TEST_PASSWORD})
    assert response.status_code == 403
    assert response.json()["message"] == "User account is not active"


@pytest.mark.integration
def test_token_endpoint_accepts_form_login(client, student):
    response = client.post("/api/auth/token", data={"username": student.email, "password": TEST_PASSWORD})
    assert response.status_code == 200

    body = response.json()
    assert body["token_type"] == "bearer"
    assert decode_access_token(body["access_token"]) == student.id

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json()["data"]["email"] == student.email


@pytest.mark.integration
def test_token_endpoint_rejects_bad_credentials(client, student):
    response = client.post("/api/auth/token", data={"username": "not-an-email", "password": TEST_PASSWORD})
    assert response.status_code == 401


@pytest.mark.integration
def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["success"] is False


@pytest.mark.integration
def test_me_with_invalid_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer invalid"})
    assert response.status_code == 401
    assert response.json()["message"] == "Could not validate credentials"
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.integration
def test_me_returns_current_user(client, student, student_headers):
    response = client.get("/api/auth/me", headers=student_headers)
    assert response.status_code == 200
    assert response.json()["data"]["id"] == student.id


@pytest.mark.integration
def test_inactive_user_token_is_forbidden(client, make_user, auth_headers):
    user = make_user(email="inactive@example.com", status=UserStatus.INACTIVE)
    response = client.get("/api/auth/me", headers=auth_headers(user))
    assert response.status_code == 403


@pytest.mark.integration
def test_role_guard_blocks_wrong_role(client, student_headers):
    response = client.get("/api/assignments/instructor/stats", headers=student_headers)
    assert response.status_code == 403
    assert response.json()["message"] == "You are not authorized to access this resource"


@pytest.mark.integration
def test_role_guard_allows_matching_role(client, make_user, auth_headers):
    instructor = make_user(email="prof@university.edu", role=UserRole.INSTRUCTOR)
    response = client.get("/api/assignments/instructor/stats", headers=auth_headers(instructor))
    assert response.status_code == 200
