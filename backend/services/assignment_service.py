"""
Assignment Service
Creates, updates and removes assignments and fans out the matching
notifications to active students
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import status
from sqlalchemy.orm import Session, joinedload, selectinload

from db import transaction
from models.assignment import Assignment, AssignmentCreate, AssignmentUpdate
from models.enums import NotificationType, SubmissionStatus, UserRole, UserStatus
from models.notification import Notification
from models.submission import Submission
from models.user import User
from services.notification_service import notify_active_students
from utils.errors import ApiError
from utils.metrics import percentage

logger = logging.getLogger(__name__)


class AssignmentService:
    """Service for assignment lifecycle and instructor/student dashboards"""

    def __init__(self, db: Session):
        self.db = db

    def _get_or_404(self, assignment_id: str, message: str = "Assignment not found..!!") -> Assignment:
        assignment = (
            self.db.query(Assignment)
            .options(joinedload(Assignment.instructor))
            .filter(Assignment.id == assignment_id)
            .first()
        )
        if not assignment:
            raise ApiError(status.HTTP_404_NOT_FOUND, message)
        return assignment

    def _title_taken(self, title: str, instructor_id: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(Assignment).filter(
            Assignment.title == title,
            Assignment.instructor_id == instructor_id,
            Assignment.is_active.is_(True),
        )
        if exclude_id:
            query = query.filter(Assignment.id != exclude_id)
        return self.db.query(query.exists()).scalar()

    def create_assignment(self, data: AssignmentCreate, actor: User) -> Dict[str, Any]:
        """
        Create an assignment and notify every active student

        Args:
            data: Validated assignment fields
            actor: Authenticated instructor making the request

        Returns:
            Dictionary with the new assignment and the notification count
        """
        instructor_id = str(data.instructor_id) if data.instructor_id else actor.id
        if instructor_id != actor.id:
            raise ApiError(status.HTTP_403_FORBIDDEN, "You can only create assignments for yourself")

        instructor = (
            self.db.query(User)
            .filter(
                User.id == instructor_id,
                User.role == UserRole.INSTRUCTOR,
                User.status == UserStatus.ACTIVE,
            )
            .first()
        )
        if not instructor:
            raise ApiError(
                status.HTTP_404_NOT_FOUND,
                "Instructor not found or not authorized to create assignments",
            )

        if self._title_taken(data.title, instructor_id):
            raise ApiError(status.HTTP_409_CONFLICT, "An assignment with this title already exists")

        with transaction(self.db):
            assignment = Assignment(
                title=data.title,
                description=data.description,
                deadline=data.deadline,
                instructor_id=instructor_id,
                is_active=True,
            )
            self.db.add(assignment)
            self.db.flush()

            notification_count = notify_active_students(
                self.db,
                title="New Assignment Posted",
                message=(
                    f'{instructor.name} has posted a new assignment: "{assignment.title}". '
                    f"Deadline: {assignment.deadline.strftime('%m/%d/%Y')}"
                ),
                notification_type=NotificationType.NEW_ASSIGNMENT,
                assignment_id=assignment.id,
            )

        self.db.refresh(assignment)
        logger.info(f'Assignment "{assignment.title}" created by {instructor.name} ({instructor.id})')
        logger.info(f"{notification_count} notifications sent to students")

        return {"assignment": assignment, "notifications_sent": notification_count}

    def get_all_assignments(self) -> List[Assignment]:
        return (
            self.db.query(Assignment)
            .options(joinedload(Assignment.instructor), selectinload(Assignment.submissions))
            .order_by(Assignment.created_at.desc())
            .all()
        )

    def get_single_assignment(self, assignment_id: str) -> Assignment:
        assignment = (
            self.db.query(Assignment)
            .options(
                joinedload(Assignment.instructor),
                selectinload(Assignment.submissions).joinedload(Submission.student),
            )
            .filter(Assignment.id == assignment_id)
            .first()
        )
        if not assignment:
            raise ApiError(status.HTTP_404_NOT_FOUND, "Assignment not found..!!")
        return assignment

    def update_assignment(self, assignment_id: str, data: AssignmentUpdate, actor: User) -> Dict[str, Any]:
        """
        Update an assignment owned by the acting instructor

        Students are notified only when the title, description or deadline
        actually changes.
        """
        existing = self._get_or_404(assignment_id, "Assignment not found")

        if existing.instructor_id != actor.id:
            raise ApiError(status.HTTP_403_FORBIDDEN, "You are not allowed to update this assignment")

        if data.instructor_id and str(data.instructor_id) != existing.instructor_id:
            raise ApiError(status.HTTP_403_FORBIDDEN, "You cannot reassign ownership")

        if data.title and data.title != existing.title:
            if self._title_taken(data.title, existing.instructor_id, exclude_id=existing.id):
                raise ApiError(status.HTTP_409_CONFLICT, "Duplicate assignment title for this instructor")

        changes = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"instructor_id"})
        content_changed = any(
            field in changes and changes[field] != getattr(existing, field)
            for field in ("title", "description", "deadline")
        )

        with transaction(self.db):
            for field, value in changes.items():
                setattr(existing, field, value)

            notification_count = 0
            if content_changed:
                notification_count = notify_active_students(
                    self.db,
                    title="Assignment Updated",
                    message=(
                        f'{existing.instructor.name} updated the assignment: "{existing.title}". '
                        "Please check for changes."
                    ),
                    notification_type=NotificationType.ASSIGNMENT_UPDATED,
                    assignment_id=existing.id,
                )

        self.db.refresh(existing)
        logger.info(
            f'Assignment "{existing.title}" updated by {existing.instructor.name}. '
            f"Notifications sent: {notification_count}"
        )

        return {"assignment": existing, "notifications_sent": notification_count}

    def delete_assignment(self, assignment_id: str, actor: User) -> Dict[str, Any]:
        """Delete an assignment with its submissions and tell students it is gone"""
        existing = self._get_or_404(assignment_id)

        if existing.instructor_id != actor.id:
            raise ApiError(status.HTTP_403_FORBIDDEN, "You are not allowed to delete this assignment")

        title = existing.title
        instructor_name = existing.instructor.name

        with transaction(self.db):
            submission_ids = [
                row.id for row in self.db.query(Submission.id).filter(Submission.assignment_id == assignment_id)
            ]
            notification_query = self.db.query(Notification).filter(Notification.assignment_id == assignment_id)
            if submission_ids:
                notification_query = self.db.query(Notification).filter(
                    (Notification.assignment_id == assignment_id) | (Notification.submission_id.in_(submission_ids))
                )
            notification_query.delete(synchronize_session=False)
            self.db.query(Submission).filter(Submission.assignment_id == assignment_id).delete(
                synchronize_session=False
            )
            self.db.delete(existing)

            notification_count = notify_active_students(
                self.db,
                title="Assignment Removed",
                message=f'The assignment "{title}" by {instructor_name} has been removed.',
                notification_type=NotificationType.ASSIGNMENT_DELETED,
            )

        logger.info(f'Assignment "{title}" deleted by instructor {actor.id}')
        return {"success": True, "notifications_sent": notification_count}

    def get_assignment_stats_by_instructor(self, instructor_id: str) -> Dict[str, int]:
        assignments = (
            self.db.query(Assignment)
            .options(selectinload(Assignment.submissions))
            .filter(Assignment.instructor_id == instructor_id)
            .all()
        )
        submissions = [submission for assignment in assignments for submission in assignment.submissions]

        total_submissions = len(submissions)
        pending_review = sum(1 for s in submissions if s.status == SubmissionStatus.PENDING)
        accepted = sum(1 for s in submissions if s.status == SubmissionStatus.ACCEPTED)
        completion_rate = percentage(accepted, total_submissions)

        return {
            "total_assignments": len(assignments),
            "total_submissions": total_submissions,
            "pending_review": pending_review,
            "completion_rate": completion_rate,
            "accepted_submissions": accepted,
            "rejected_submissions": total_submissions - accepted - pending_review,
        }

    def _instructor_assignments_query(self, instructor_id: str):
        return (
            self.db.query(Assignment)
            .options(
                joinedload(Assignment.instructor),
                selectinload(Assignment.submissions).joinedload(Submission.student),
            )
            .filter(Assignment.instructor_id == instructor_id)
            .order_by(Assignment.created_at.desc())
        )

    def get_recent_assignments_by_instructor(self, instructor_id: str, limit: int = 5) -> List[Assignment]:
        return self._instructor_assignments_query(instructor_id).limit(limit).all()

    def get_all_assignments_by_instructor(self, instructor_id: str) -> Dict[str, Any]:
        assignments = self._instructor_assignments_query(instructor_id).all()
        total_count = self.db.query(Assignment).filter(Assignment.instructor_id == instructor_id).count()
        return {"total_count": total_count, "assignments": assignments}

    def get_student_assignment_stats(self, student_id: str) -> Dict[str, int]:
        available = self.db.query(Assignment).filter(Assignment.is_active.is_(True)).count()
        statuses = [row.status for row in self.db.query(Submission.status).filter(Submission.student_id == student_id)]

        return {
            "available_assignments": available,
            "my_submissions": len(statuses),
            "pending": statuses.count(SubmissionStatus.PENDING),
            "accepted": statuses.count(SubmissionStatus.ACCEPTED),
            "rejected": statuses.count(SubmissionStatus.REJECTED),
            "not_submitted": available - len(statuses),
        }

    def get_available_assignments_for_student(self, student_id: str) -> Dict[str, Any]:
        """Active assignments the student has not submitted yet, soonest deadline first"""
        submitted_ids = self.db.query(Submission.assignment_id).filter(Submission.student_id == student_id)
        query = self.db.query(Assignment).filter(
            Assignment.is_active.is_(True),
            Assignment.id.notin_(submitted_ids.scalar_subquery()),
        )

        assignments = query.options(joinedload(Assignment.instructor)).order_by(Assignment.deadline.asc()).all()
        return {"total_count": query.count(), "assignments": assignments}
