"""
Test the FastAPI application basic functionality.
"""

import os

import pytest


@pytest.mark.unit
def test_environment_setup():
    """Test that test environment is properly configured."""
    assert os.getenv("ENV") == "test"
    assert os.getenv("DATABASE_URL") == "sqlite://"
    assert os.getenv("SECRET_KEY") is not None


@pytest.mark.integration
def test_app_startup(client):
    """Test that the root endpoint answers with the standard envelope."""
    response = client.get("/")
    assert response.status_code == 200

    body = response.json()
    assert body["success"] is True
    assert body["status_code"] == 200
    assert body["data"]["service"] == "AssignmentHub API"


@pytest.mark.integration
def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.integration
def test_cors_configuration(client):
    """Test that CORS is properly configured."""
    response = client.get("/", headers={"Origin": "http://localhost:3000"})
    assert response.status_code == 200
    assert "access-control-allow-origin" in response.headers


@pytest.mark.integration
def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404

    body = response.json()
    assert body["success"] is False
    assert body["status_code"] == 404
    assert body["message"] == "Not Found"


@pytest.mark.unit
def test_routes_registered():
    """Test that every resource router is mounted on the app."""
    from app import app

    paths = {getattr(route, "path", None) for route in app.routes} | set(app.openapi()["paths"])
    for path in (
        "/api/auth/login",
        "/api/users/register",
        "/api/assignments/create",
        "/api/submissions/create",
        "/api/notifications",
    ):
        assert path in paths, f"{path} should be registered"
