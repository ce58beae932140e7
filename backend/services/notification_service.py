"""
Notification Service
Reads a user's notifications and builds the notification rows other
services write as side effects of assignment and submission changes
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import status
from sqlalchemy import asc, desc
from sqlalchemy.orm import Session, joinedload

from db import transaction
from models.enums import NotificationType, SubmissionStatus, UserRole, UserStatus
from models.notification import Notification, NotificationFilters
from models.submission import Submission
from models.user import User
from utils.errors import ApiError

logger = logging.getLogger(__name__)


def get_active_students(db: Session) -> List[User]:
    return (
        db.query(User)
        .filter(User.role == UserRole.STUDENT, User.status == UserStatus.ACTIVE)
        .all()
    )


def notify_active_students(
    db: Session,
    title: str,
    message: str,
    notification_type: NotificationType,
    assignment_id: Optional[str] = None,
) -> int:
    """
    Queue one notification per active student on the session

    The caller owns the transaction; nothing is committed here.

    Returns:
        Number of notifications queued
    """
    students = get_active_students(db)
    db.add_all(
        [
            Notification(
                user_id=student.id,
                title=title,
                message=message,
                type=notification_type,
                assignment_id=assignment_id,
            )
            for student in students
        ]
    )
    return len(students)


def get_status_notification_data(status_value: SubmissionStatus, submission: Submission) -> Dict[str, Any]:
    assignment_title = submission.assignment.title
    feedback_suffix = f" Feedback: {submission.feedback}" if submission.feedback else ""

    if status_value == SubmissionStatus.ACCEPTED:
        return {
            "title": "Submission Accepted ✅",
            "message": f'Your submission for "{assignment_title}" has been accepted.{feedback_suffix}',
            "type": NotificationType.ASSIGNMENT_GRADED,
        }

    if status_value == SubmissionStatus.REJECTED:
        return {
            "title": "Submission Requires Revision ❌",
            "message": f'Your submission for "{assignment_title}" needs revision.{feedback_suffix}',
            "type": NotificationType.ASSIGNMENT_FEEDBACK,
        }

    return {
        "title": "Submission Under Review ⏳",
        "message": f'Your submission for "{assignment_title}" is being reviewed.',
        "type": NotificationType.ASSIGNMENT_GRADED,
    }


def create_status_update_notification(db: Session, submission: Submission, new_status: SubmissionStatus) -> Notification:
    """Queue the student's notification for a status change"""
    data = get_status_notification_data(new_status, submission)
    notification = Notification(
        user_id=submission.student_id,
        title=data["title"],
        message=data["message"],
        type=data["type"],
        assignment_id=submission.assignment_id,
        submission_id=submission.id,
    )
    db.add(notification)
    return notification


class NotificationService:
    """Service for reading and acknowledging a user's notifications"""

    def __init__(self, db: Session):
        self.db = db

    def get_notifications_by_user_id(self, user_id: str, filters: Optional[NotificationFilters] = None) -> Dict[str, Any]:
        """
        Get notifications for a user with optional filtering

        Args:
            user_id: Addressee of the notifications
            filters: Limit, read state, type and ordering

        Returns:
            Dictionary with counts and the matching notifications
        """
        filters = filters or NotificationFilters()

        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if filters.is_read is not None:
            query = query.filter(Notification.is_read == filters.is_read)
        if filters.type is not None:
            query = query.filter(Notification.type == filters.type)

        total_count = query.count()
        unread_count = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .count()
        )

        order = desc if filters.sort_order == "desc" else asc
        notifications = (
            query.options(joinedload(Notification.assignment), joinedload(Notification.submission))
            .order_by(order(getattr(Notification, filters.sort_by)), order(Notification.id))
            .limit(filters.limit)
            .all()
        )

        return {
            "total_count": total_count,
            "unread_count": unread_count,
            "read_count": total_count - unread_count,
            "notifications": notifications,
        }

    def mark_as_read(self, user_id: str, notification_id: str) -> Notification:
        notification = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )
        if not notification:
            raise ApiError(status.HTTP_404_NOT_FOUND, "Notification not found")

        with transaction(self.db):
            notification.is_read = True

        self.db.refresh(notification)
        return notification

    def mark_all_as_read(self, user_id: str) -> int:
        with transaction(self.db):
            updated = (
                self.db.query(Notification)
                .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
                .update({Notification.is_read: True}, synchronize_session=False)
            )

        logger.info(f"Marked {updated} notifications as read for user {user_id}")
        return updated
