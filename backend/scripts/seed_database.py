#!/usr/bin/env python3
"""
Seed script for AssignmentHub
Creates demo instructors, students, assignments, submissions and notifications.
Safe to run repeatedly: rows that already exist are left alone.
"""

import logging
import sys
from datetime import timedelta
from typing import Dict, List

from sqlalchemy.orm import Session

from config.settings import configure_logging
from db import SessionLocal, init_db
from models import Assignment, Notification, Submission, User
from models.enums import NotificationType, SubmissionStatus, UserRole, UserStatus
from utils.auth import get_password_hash
from utils.dates import utcnow

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "12345678"

SUPER_ADMIN = {"name": "Super Admin", "email": "superadmin@assignment-system.com"}

INSTRUCTORS = [
    {"name": "Dr. John Smith", "email": "john.smith@university.edu"},
    {"name": "Prof. Sarah Johnson", "email": "sarah.johnson@university.edu"},
    {"name": "Dr. Michael Brown", "email": "michael.brown@university.edu"},
    {"name": "Prof. Emily Davis", "email": "emily.davis@university.edu"},
    {"name": "Dr. Robert Wilson", "email": "robert.wilson@university.edu"},
]

STUDENTS = [
    {"name": "Alice Cooper", "email": "alice.cooper@student.edu"},
    {"name": "Bob Martinez", "email": "bob.martinez@student.edu"},
    {"name": "Carol Thompson", "email": "carol.thompson@student.edu"},
    {"name": "David Lee", "email": "david.lee@student.edu"},
    {"name": "Emma Garcia", "email": "emma.garcia@student.edu"},
    {"name": "Frank Miller", "email": "frank.miller@student.edu"},
    {"name": "Grace Chen", "email": "grace.chen@student.edu"},
    {"name": "Henry Rodriguez", "email": "henry.rodriguez@student.edu"},
    {"name": "Isabel Kim", "email": "isabel.kim@student.edu"},
    {"name": "Jack Taylor", "email": "jack.taylor@student.edu"},
]

# Deadlines are offsets in days from the time the seed runs
SAMPLE_ASSIGNMENTS = [
    {
        "title": "Introduction to React Components",
        "description": (
            "Create a simple React application with at least 3 functional components. Include state "
            "management using useState and props passing between components. Submit your code via "
            "GitHub repository link."
        ),
        "deadline_days": 14,
    },
    {
        "title": "Database Design Project",
        "description": (
            "Design a normalized database schema for an e-commerce platform. Include at least 5 related "
            "tables, proper relationships, and constraints. Submit your ERD and SQL schema file."
        ),
        "deadline_days": 19,
    },
    {
        "title": "API Development with Node.js",
        "description": (
            "Build a RESTful API using Node.js and Express. Include CRUD operations, input validation, "
            "error handling, and proper HTTP status codes. Document your API endpoints."
        ),
        "deadline_days": 24,
    },
    {
        "title": "Data Structures and Algorithms",
        "description": (
            "Implement and analyze the time complexity of binary search tree operations. Include "
            "insertion, deletion, search, and traversal methods with detailed comments."
        ),
        "deadline_days": 35,
    },
    {
        "title": "Web Security Assessment",
        "description": (
            "Conduct a security audit of a provided web application. Identify vulnerabilities, provide "
            "detailed reports, and suggest remediation strategies."
        ),
        "deadline_days": 40,
    },
]

SAMPLE_SUBMISSIONS = [
    {
        "submission_url": "https://github.com/alice-cooper/react-components-project",
        "note": "Completed all requirements. Added extra styling with CSS modules.",
        "status": SubmissionStatus.ACCEPTED,
        "feedback": "Excellent work! Clean code structure and good use of React hooks.",
    },
    {
        "submission_url": "https://github.com/bob-martinez/ecommerce-database",
        "note": "Database schema with sample data included.",
        "status": SubmissionStatus.PENDING,
        "feedback": None,
    },
    {
        "submission_url": "https://github.com/carol-thompson/nodejs-api",
        "note": "API includes authentication middleware and comprehensive testing.",
        "status": SubmissionStatus.ACCEPTED,
        "feedback": "Great implementation of best practices. Well documented.",
    },
    {
        "submission_url": "https://github.com/david-lee/binary-search-tree",
        "note": "Implemented with TypeScript for better type safety.",
        "status": SubmissionStatus.REJECTED,
        "feedback": "Missing deletion method implementation. Please complete and resubmit.",
    },
]

SAMPLE_NOTIFICATIONS = [
    {
        "title": "New Assignment Posted",
        "message": "A new assignment has been posted. Check your dashboard for details.",
        "type": NotificationType.NEW_ASSIGNMENT,
        "is_read": False,
    },
    {
        "title": "Assignment Deadline Reminder",
        "message": "Don't forget! Your assignment is due in 2 days.",
        "type": NotificationType.DEADLINE_REMINDER,
        "is_read": False,
    },
    {
        "title": "Assignment Graded",
        "message": "Your submission has been graded. Check your feedback.",
        "type": NotificationType.ASSIGNMENT_GRADED,
        "is_read": True,
    },
]


def _insert_users(db: Session, people: List[Dict[str, str]], role: UserRole) -> int:
    emails = [person["email"] for person in people]
    existing = {email for (email,) in db.query(User.email).filter(User.email.in_(emails)).all()}

    created = 0
    for person in people:
        if person["email"] in existing:
            continue
        db.add(
            User(
                name=person["name"],
                email=person["email"],
                password=get_password_hash(DEFAULT_PASSWORD),
                role=role,
                status=UserStatus.ACTIVE,
            )
        )
        created += 1

    db.commit()
    return created


def insert_super_admin(db: Session) -> int:
    return _insert_users(db, [SUPER_ADMIN], UserRole.INSTRUCTOR)


def insert_instructors(db: Session) -> int:
    return _insert_users(db, INSTRUCTORS, UserRole.INSTRUCTOR)


def insert_students(db: Session) -> int:
    return _insert_users(db, STUDENTS, UserRole.STUDENT)


def insert_assignments(db: Session) -> int:
    """Spread the sample assignments round-robin across instructors"""
    instructors = (
        db.query(User)
        .filter(User.role == UserRole.INSTRUCTOR)
        .order_by(User.created_at, User.email)
        .all()
    )
    if not instructors:
        logger.warning("No instructors found. Please seed instructors first.")
        return 0

    titles = [sample["title"] for sample in SAMPLE_ASSIGNMENTS]
    existing = {title for (title,) in db.query(Assignment.title).filter(Assignment.title.in_(titles)).all()}

    now = utcnow()
    created = 0
    for index, sample in enumerate(SAMPLE_ASSIGNMENTS):
        if sample["title"] in existing:
            continue
        db.add(
            Assignment(
                title=sample["title"],
                description=sample["description"],
                deadline=now + timedelta(days=sample["deadline_days"]),
                is_active=True,
                instructor_id=instructors[index % len(instructors)].id,
            )
        )
        created += 1

    db.commit()
    return created


def _sample_assignments(db: Session) -> List[Assignment]:
    titles = [sample["title"] for sample in SAMPLE_ASSIGNMENTS]
    by_title = {a.title: a for a in db.query(Assignment).filter(Assignment.title.in_(titles)).all()}
    return [by_title[title] for title in titles if title in by_title]


def _students(db: Session) -> List[User]:
    return db.query(User).filter(User.role == UserRole.STUDENT).order_by(User.created_at, User.email).all()


def insert_submissions(db: Session) -> int:
    assignments = _sample_assignments(db)
    students = _students(db)
    if not assignments or not students:
        logger.warning("No assignments or students found. Please seed them first.")
        return 0

    created = 0
    for index, sample in enumerate(SAMPLE_SUBMISSIONS[: len(assignments)]):
        assignment = assignments[index]
        student = students[index % len(students)]

        exists = (
            db.query(Submission.id)
            .filter(Submission.assignment_id == assignment.id, Submission.student_id == student.id)
            .first()
        )
        if exists:
            continue

        db.add(Submission(assignment_id=assignment.id, student_id=student.id, **sample))
        created += 1

    db.commit()
    return created


def insert_notifications(db: Session) -> int:
    students = _students(db)
    if not students:
        return 0

    assignments = _sample_assignments(db)
    submissions = db.query(Submission).order_by(Submission.created_at).all()

    created = 0
    for index, sample in enumerate(SAMPLE_NOTIFICATIONS):
        user = students[index % len(students)]
        exists = (
            db.query(Notification.id)
            .filter(Notification.user_id == user.id, Notification.title == sample["title"])
            .first()
        )
        if exists:
            continue

        db.add(
            Notification(
                user_id=user.id,
                assignment_id=assignments[index % len(assignments)].id if assignments else None,
                submission_id=submissions[index % len(submissions)].id if submissions else None,
                **sample,
            )
        )
        created += 1

    db.commit()
    return created


def seed_database(db: Session) -> Dict[str, int]:
    """Run every seeding step in dependency order and report how many rows each created"""
    logger.info("🌱 Starting database seeding...")

    counts = {}
    counts["super_admin"] = insert_super_admin(db)
    logger.info("✅ Super admin inserted")
    counts["instructors"] = insert_instructors(db)
    logger.info("✅ Instructors inserted")
    counts["students"] = insert_students(db)
    logger.info("✅ Students inserted")
    counts["assignments"] = insert_assignments(db)
    logger.info("✅ Assignments inserted")
    counts["submissions"] = insert_submissions(db)
    logger.info("✅ Submissions inserted")
    counts["notifications"] = insert_notifications(db)
    logger.info("✅ Notifications inserted")

    logger.info(f"🎉 Database seeding completed successfully! {counts}")
    return counts


def main():
    configure_logging()
    init_db()

    db = SessionLocal()
    try:
        seed_database(db)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error seeding database: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
