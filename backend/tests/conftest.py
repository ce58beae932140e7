"""
Test configuration and fixtures for the AssignmentHub backend tests.
Every test runs against a fresh in-memory SQLite database.
"""
import os

# Settings are read at import time, so the test environment must be in place first
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"

from datetime import timedelta
from typing import Generator

import pytest
from fastapi.testclient import TestClient

import models  # noqa: F401
from app import app
from db import Base, SessionLocal, engine
from models.assignment import Assignment
from models.enums import SubmissionStatus, UserRole, UserStatus
from models.submission import Submission
from models.user import User
from utils.auth import create_access_token, get_password_hash
from utils.dates import utcnow

TEST_PASSWORD = "testpassword123"


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create the schema before each test and drop it afterwards."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_session):
    """Factory storing a user with a known password."""

    def _make_user(
        name="Test User",
        email="test@example.com",
        role=UserRole.STUDENT,
        status=UserStatus.ACTIVE,
        password=TEST_PASSWORD,
    ):
        user = User(
            name=name,
            email=email,
            password=get_password_hash(password),
            role=role,
            status=status,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_assignment(db_session):
    def _make_assignment(instructor, title="Test Assignment", deadline=None, is_active=True):
        assignment = Assignment(
            title=title,
            description="Test assignment description",
            deadline=deadline or utcnow() + timedelta(days=7),
            is_active=is_active,
            instructor_id=instructor.id,
        )
        db_session.add(assignment)
        db_session.commit()
        db_session.refresh(assignment)
        return assignment

    return _make_assignment


@pytest.fixture
def make_submission(db_session):
    def _make_submission(assignment, student, status=SubmissionStatus.PENDING, feedback=None, submitted_at=None):
        submission = Submission(
            assignment_id=assignment.id,
            student_id=student.id,
            submission_url="https://github.com/example/project",
            note="Initial work",
            status=status,
            feedback=feedback,
        )
        if submitted_at is not None:
            submission.submitted_at = submitted_at
        db_session.add(submission)
        db_session.commit()
        db_session.refresh(submission)
        return submission

    return _make_submission


@pytest.fixture
def instructor(make_user):
    return make_user(name="Dr. John Smith", email="john.smith@university.edu", role=UserRole.INSTRUCTOR)


@pytest.fixture
def other_instructor(make_user):
    return make_user(name="Prof. Sarah Johnson", email="sarah.johnson@university.edu", role=UserRole.INSTRUCTOR)


@pytest.fixture
def student(make_user):
    return make_user(name="Alice Cooper", email="alice.cooper@student.edu", role=UserRole.STUDENT)


@pytest.fixture
def other_student(make_user):
    return make_user(name="Bob Martinez", email="bob.martinez@student.edu", role=UserRole.STUDENT)


@pytest.fixture
def auth_headers():
    """Create authentication headers for a stored user."""

    def _auth_headers(user):
        token = create_access_token(data={"sub": user.id, "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def instructor_headers(instructor, auth_headers):
    return auth_headers(instructor)


@pytest.fixture
def student_headers(student, auth_headers):
    return auth_headers(student)


@pytest.fixture
def future_deadline():
    return (utcnow() + timedelta(days=14)).replace(microsecond=0).isoformat()
