"""
Tests for registration, user search and profile updates.
"""

import pytest

from models.enums import UserRole, UserStatus


@pytest.fixture
def mock_user_data():
    """Mock user data for testing."""
    return {
        "name": "  Test User  ",
        "email": "test@example.com",
        "password": "testpassword123",
    }


@pytest.mark.integration
def test_register_user(client, mock_user_data):
    response = client.post("/api/users/register", json=mock_user_data)
    assert response.status_code == 201

    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    assert body["data"]["name"] == "Test User"
    assert body["data"]["role"] == "STUDENT"
    assert body["data"]["status"] == "ACTIVE"
    assert "password" not in body["data"]


@pytest.mark.integration
def test_registered_user_can_log_in(client, mock_user_data):
    client.post("/api/users/register", json=mock_user_data)
    response = client.post(
        "/api/auth/login",
        json={"email": mock_user_data["email"], "password": mock_user_data["password"]},
    )
    assert response.status_code == 200


@pytest.mark.integration
def test_register_duplicate_email(client, mock_user_data):
    client.post("/api/users/register", json=mock_user_data)
    response = client.post("/api/users/register", json=mock_user_data)
    assert response.status_code == 400
    assert response.json()["message"] == "User with this email test@example.com already exists"


@pytest.mark.integration
def test_register_validation_error(client):
    response = client.post("/api/users/register", json={"name": "", "email": "not-an-email", "password": "123"})
    assert response.status_code == 422

    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation Error"
    fields = {error["loc"][-1] for error in body["error_details"]}
    assert {"name", "email", "password"} <= fields


@pytest.mark.integration
def test_get_users_requires_auth(client):
    assert client.get("/api/users").status_code == 401


@pytest.mark.integration
def test_get_users_paginates(client, make_user, student_headers):
    for i in range(3):
        make_user(name=f"Paged User {i}", email=f"paged{i}@example.com")

    response = client.get("/api/users", params={"page": 2, "limit": 2}, headers=student_headers)
    assert response.status_code == 200

    body = response.json()
    assert body["meta"] == {"page": 2, "limit": 2, "total": 4, "total_pages": 2}
    assert len(body["data"]) == 2


@pytest.mark.integration
def test_get_users_search_and_filters(client, make_user, student, student_headers):
    make_user(name="Dr. Grace Hopper", email="grace@university.edu", role=UserRole.INSTRUCTOR)
    make_user(name="Blocked Person", email="blocked@example.com", status=UserStatus.BLOCKED)

    response = client.get("/api/users", params={"search_term": "GRACE"}, headers=student_headers)
    assert [u["email"] for u in response.json()["data"]] == ["grace@university.edu"]

    response = client.get("/api/users", params={"search_term": "student.edu"}, headers=student_headers)
    assert [u["email"] for u in response.json()["data"]] == [student.email]

    response = client.get("/api/users", params={"role": "INSTRUCTOR"}, headers=student_headers)
    assert [u["role"] for u in response.json()["data"]] == ["INSTRUCTOR"]

    response = client.get("/api/users", params={"status": "BLOCKED"}, headers=student_headers)
    assert [u["email"] for u in response.json()["data"]] == ["blocked@example.com"]

    response = client.get("/api/users", params={"email": student.email}, headers=student_headers)
    assert response.json()["meta"]["total"] == 1


@pytest.mark.integration
def test_get_users_sorting(client, make_user, student_headers):
    make_user(name="Zed", email="zed@example.com")
    make_user(name="Amy", email="amy@example.com")

    response = client.get("/api/users", params={"sort_by": "name", "sort_order": "asc"}, headers=student_headers)
    names = [u["name"] for u in response.json()["data"]]
    assert names == sorted(names)


@pytest.mark.integration
def test_get_my_profile(client, student, student_headers):
    response = client.get("/api/users/me", headers=student_headers)
    assert response.status_code == 200
    assert response.json()["data"]["email"] == student.email


@pytest.mark.integration
def test_update_profile(client, student_headers):
    response = client.put("/api/users/profile", json={"name": "Alice C."}, headers=student_headers)
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Alice C."


@pytest.mark.integration
def test_update_profile_email_taken(client, other_student, student_headers):
    response = client.put("/api/users/profile", json={"email": other_student.email}, headers=student_headers)
    assert response.status_code == 400


@pytest.mark.integration
def test_get_user_by_id(client, instructor, student_headers):
    response = client.get(f"/api/users/{instructor.id}", headers=student_headers)
    assert response.status_code == 200
    assert response.json()["data"]["name"] == instructor.name


@pytest.mark.integration
def test_get_user_by_id_not_found(client, student_headers):
    response = client.get("/api/users/00000000-0000-0000-0000-000000000000", headers=student_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


@pytest.mark.integration
def test_instructor_updates_user(client, student, instructor_headers):
    response = client.put(
        f"/api/users/{student.id}",
        json={"status": "BLOCKED"},
        headers=instructor_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "BLOCKED"


@pytest.mark.integration
def test_student_cannot_update_user(client, other_student, student_headers):
    response = client.put(f"/api/users/{other_student.id}", json={"name": "Hacked"}, headers=student_headers)
    assert response.status_code == 403


@pytest.mark.integration
def test_search_treats_wildcards_literally(client, make_user, student_headers):
    make_user(name="axb", email="axb@example.com")
    make_user(name="a_b", email="a_b@example.com")

    response = client.get("/api/users", params={"search_term": "a_b"}, headers=student_headers)
    assert [u["name"] for u in response.json()["data"]] == ["a_b"]

    response = client.get("/api/users", params={"search_term": "100%"}, headers=student_headers)
    assert response.json()["data"] == []
