"""
Tests for the demo data seed script.
"""

import pytest

from models import Assignment, Notification, Submission, User
from models.enums import UserRole
from scripts.seed_database import (
    DEFAULT_PASSWORD,
    INSTRUCTORS,
    SAMPLE_ASSIGNMENTS,
    SAMPLE_NOTIFICATIONS,
    SAMPLE_SUBMISSIONS,
    STUDENTS,
    seed_database,
)
from utils.auth import verify_password
from utils.dates import utcnow


@pytest.mark.integration
def test_seed_creates_demo_data(db_session):
    counts = seed_database(db_session)

    assert counts == {
        "super_admin": 1,
        "instructors": len(INSTRUCTORS),
        "students": len(STUDENTS),
        "assignments": len(SAMPLE_ASSIGNMENTS),
        "submissions": len(SAMPLE_SUBMISSIONS),
        "notifications": len(SAMPLE_NOTIFICATIONS),
    }
    assert db_session.query(User).filter(User.role == UserRole.INSTRUCTOR).count() == 6
    assert db_session.query(User).filter(User.role == UserRole.STUDENT).count() == 10


@pytest.mark.integration
def test_seed_is_idempotent(db_session):
    seed_database(db_session)
    counts = seed_database(db_session)

    assert set(counts.values()) == {0}
    assert db_session.query(Assignment).count() == len(SAMPLE_ASSIGNMENTS)
    assert db_session.query(Submission).count() == len(SAMPLE_SUBMISSIONS)
    assert db_session.query(Notification).count() == len(SAMPLE_NOTIFICATIONS)


@pytest.mark.integration
def test_seeded_accounts_use_hashed_default_password(db_session):
    seed_database(db_session)

    admin = db_session.query(User).filter(User.email == "superadmin@assignment-system.com").one()
    assert admin.password != DEFAULT_PASSWORD
    assert verify_password(DEFAULT_PASSWORD, admin.password)


@pytest.mark.integration
def test_seeded_assignments_are_open(db_session):
    seed_database(db_session)

    now = utcnow()
    assert all(a.deadline > now and a.is_active for a in db_session.query(Assignment).all())


@pytest.mark.integration
def test_seeded_users_can_log_in(client, db_session):
    seed_database(db_session)

    response = client.post(
        "/api/auth/login",
        json={"email": "john.smith@university.edu", "password": DEFAULT_PASSWORD},
    )
    assert response.status_code == 200


@pytest.mark.integration
def test_seed_without_users_skips_dependent_rows(db_session):
    from scripts.seed_database import insert_assignments, insert_notifications, insert_submissions

    assert insert_assignments(db_session) == 0
    assert insert_submissions(db_session) == 0
    assert insert_notifications(db_session) == 0
