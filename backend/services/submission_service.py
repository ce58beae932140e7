"""
Submission Service
Handles student submissions, instructor grading and the notifications
each of those produces
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import status
from sqlalchemy.orm import Session, joinedload

from db import transaction
from models.assignment import Assignment
from models.enums import NotificationType, SubmissionStatus, UserRole, UserStatus
from models.notification import Notification
from models.submission import Submission, SubmissionCreate, SubmissionUpdate
from models.user import User
from services.notification_service import create_status_update_notification
from utils.dates import utcnow
from utils.errors import ApiError
from utils.metrics import percentage

logger = logging.getLogger(__name__)

CHART_COLORS = {
    "Pending": "#fbbf24",
    "Accepted": "#10b981",
    "Rejected": "#ef4444",
    "Not Submitted": "#6b7280",
}


def _status_slices(statuses: List[SubmissionStatus]) -> List[Dict[str, Any]]:
    return [
        {"name": "Pending", "value": statuses.count(SubmissionStatus.PENDING), "color": CHART_COLORS["Pending"]},
        {"name": "Accepted", "value": statuses.count(SubmissionStatus.ACCEPTED), "color": CHART_COLORS["Accepted"]},
        {"name": "Rejected", "value": statuses.count(SubmissionStatus.REJECTED), "color": CHART_COLORS["Rejected"]},
    ]


class SubmissionService:
    """Service for the submission lifecycle"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Submission).options(
            joinedload(Submission.assignment).joinedload(Assignment.instructor),
            joinedload(Submission.student),
        )

    def _get_or_404(self, submission_id: str, message: str = "Submission not found..!!") -> Submission:
        submission = self._query().filter(Submission.id == submission_id).first()
        if not submission:
            raise ApiError(status.HTTP_404_NOT_FOUND, message)
        return submission

    def create_submission(self, data: SubmissionCreate, actor: User) -> Submission:
        """
        Create a submission and notify the assignment's instructor

        Args:
            data: Validated submission fields
            actor: Authenticated student making the request

        Returns:
            The stored submission
        """
        assignment_id = str(data.assignment_id)
        student_id = str(data.student_id) if data.student_id else actor.id
        if student_id != actor.id:
            raise ApiError(status.HTTP_403_FORBIDDEN, "You can only submit work for yourself")

        assignment = (
            self.db.query(Assignment)
            .filter(Assignment.id == assignment_id, Assignment.is_active.is_(True))
            .first()
        )
        if not assignment:
            raise ApiError(status.HTTP_404_NOT_FOUND, "Assignment not found or is inactive")

        if assignment.deadline < utcnow():
            raise ApiError(status.HTTP_400_BAD_REQUEST, "Assignment deadline has passed")

        student = (
            self.db.query(User)
            .filter(
                User.id == student_id,
                User.role == UserRole.STUDENT,
                User.status == UserStatus.ACTIVE,
            )
            .first()
        )
        if not student:
            raise ApiError(status.HTTP_404_NOT_FOUND, "Student not found or is inactive")

        existing = (
            self.db.query(Submission)
            .filter(Submission.assignment_id == assignment_id, Submission.student_id == student_id)
            .first()
        )
        if existing:
            raise ApiError(status.HTTP_409_CONFLICT, "Submission already exists for this assignment")

        with transaction(self.db):
            submission = Submission(
                assignment_id=assignment_id,
                student_id=student_id,
                submission_url=str(data.submission_url),
                note=data.note,
            )
            self.db.add(submission)
            self.db.flush()

            self.db.add(
                Notification(
                    user_id=assignment.instructor_id,
                    title="New Submission Received",
                    message=f"{student.name} submitted assignment: {assignment.title}",
                    type=NotificationType.NEW_SUBMISSION,
                    assignment_id=assignment.id,
                    submission_id=submission.id,
                )
            )

        self.db.refresh(submission)
        logger.info(f'Submission {submission.id} created by {student.name} for "{assignment.title}"')
        return submission

    def get_all_submissions(
        self,
        assignment_id: Optional[str] = None,
        student_id: Optional[str] = None,
        status_filter: Optional[SubmissionStatus] = None,
    ) -> List[Submission]:
        query = self._query()
        if assignment_id:
            query = query.filter(Submission.assignment_id == assignment_id)
        if student_id:
            query = query.filter(Submission.student_id == student_id)
        if status_filter:
            query = query.filter(Submission.status == status_filter)
        return query.order_by(Submission.created_at.desc()).all()

    def get_single_submission(self, submission_id: str) -> Submission:
        return self._get_or_404(submission_id)

    def update_submission(self, submission_id: str, data: SubmissionUpdate, actor: User) -> Submission:
        """
        Update a submission on behalf of its student or its assignment's instructor

        Students may change the link and note while the work is still pending
        and the deadline has not passed. The owning instructor may change
        status and feedback. Either way the other party is notified.
        """
        existing = self._get_or_404(submission_id, "Submission not found")
        assignment = existing.assignment

        is_owner = actor.role == UserRole.STUDENT and existing.student_id == actor.id
        is_grader = actor.role == UserRole.INSTRUCTOR and assignment.instructor_id == actor.id

        if not is_owner and not is_grader:
            raise ApiError(status.HTTP_403_FORBIDDEN, "You do not have permission to update this submission")

        changes: Dict[str, Any] = {}
        notification: Optional[Notification] = None

        if is_owner:
            if data.status is not None or data.feedback is not None:
                raise ApiError(status.HTTP_403_FORBIDDEN, "Students cannot update status or feedback")

            if existing.status != SubmissionStatus.PENDING:
                raise ApiError(status.HTTP_400_BAD_REQUEST, "Cannot update submission after it has been graded")

            if assignment.deadline < utcnow():
                raise ApiError(status.HTTP_400_BAD_REQUEST, "Cannot update submission after deadline")

            if data.submission_url is not None:
                changes["submission_url"] = str(data.submission_url)
            if "note" in data.model_fields_set:
                changes["note"] = data.note

            if changes:
                notification = Notification(
                    user_id=assignment.instructor_id,
                    title="Submission Updated",
                    message=f"{existing.student.name} updated their submission for {assignment.title}",
                    type=NotificationType.NEW_SUBMISSION,
                    assignment_id=assignment.id,
                    submission_id=existing.id,
                )

        if is_grader:
            if data.status is not None:
                changes["status"] = data.status
            if data.feedback is not None:
                changes["feedback"] = data.feedback

            if data.status is not None and data.status != SubmissionStatus.PENDING:
                notification = Notification(
                    user_id=existing.student_id,
                    title="Assignment Graded",
                    message=f"Your submission for {assignment.title} has been {data.status.value.lower()}",
                    type=NotificationType.ASSIGNMENT_GRADED,
                    assignment_id=assignment.id,
                    submission_id=existing.id,
                )
            elif data.feedback:
                notification = Notification(
                    user_id=existing.student_id,
                    title="Feedback Added",
                    message=f"New feedback added to your submission for {assignment.title}",
                    type=NotificationType.ASSIGNMENT_FEEDBACK,
                    assignment_id=assignment.id,
                    submission_id=existing.id,
                )

        if not changes:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "No valid fields provided for update")

        with transaction(self.db):
            for field, value in changes.items():
                setattr(existing, field, value)
            if notification is not None:
                self.db.add(notification)

        self.db.refresh(existing)
        logger.info(f"Submission {existing.id} updated by {actor.role.value.lower()} {actor.id}")
        return existing

    def delete_submission(self, submission_id: str, actor: User) -> Dict[str, bool]:
        existing = self.db.query(Submission).filter(Submission.id == submission_id).first()
        if not existing:
            raise ApiError(status.HTTP_404_NOT_FOUND, "Submission not found..!!")

        if existing.student_id != actor.id:
            raise ApiError(status.HTTP_403_FORBIDDEN, "You are not allowed to delete this submission")

        with transaction(self.db):
            self.db.query(Notification).filter(Notification.submission_id == submission_id).delete(
                synchronize_session=False
            )
            self.db.delete(existing)

        logger.info(f"Submission {submission_id} deleted by student {actor.id}")
        return {"success": True}

    def update_submission_status(
        self,
        submission_id: str,
        new_status: SubmissionStatus,
        feedback: Optional[str],
        instructor_id: str,
    ) -> Submission:
        """Grade a submission and send the student a status notification"""
        instructor = self.db.query(User).filter(User.id == instructor_id).first()
        if not instructor:
            raise ApiError(status.HTTP_404_NOT_FOUND, "Instructor not found")

        if instructor.role != UserRole.INSTRUCTOR:
            raise ApiError(status.HTTP_403_FORBIDDEN, "Only instructors can update submission status")

        if instructor.status != UserStatus.ACTIVE:
            raise ApiError(status.HTTP_403_FORBIDDEN, "Instructor account is not active")

        existing = self._get_or_404(submission_id, "Submission not found")

        if existing.assignment.instructor_id != instructor_id:
            raise ApiError(
                status.HTTP_403_FORBIDDEN,
                "You can only update submissions for your own assignments",
            )

        if existing.status == new_status:
            raise ApiError(status.HTTP_400_BAD_REQUEST, f"Submission is already {new_status.value.lower()}")

        with transaction(self.db):
            existing.status = new_status
            existing.feedback = feedback or existing.feedback
            create_status_update_notification(self.db, existing, new_status)

        self.db.refresh(existing)
        logger.info(f"Submission {existing.id} marked {new_status.value} by instructor {instructor_id}")
        return existing

    def give_submission_feedback(self, instructor_id: str, submission_id: str, feedback: str) -> Submission:
        submission = (
            self._query()
            .join(Submission.assignment)
            .filter(Submission.id == submission_id, Assignment.instructor_id == instructor_id)
            .first()
        )
        if not submission:
            raise ApiError(status.HTTP_404_NOT_FOUND, "Submission not found or unauthorized")

        accepted = submission.status == SubmissionStatus.ACCEPTED

        with transaction(self.db):
            submission.feedback = feedback
            self.db.add(
                Notification(
                    user_id=submission.student_id,
                    title="Assignment Accepted" if accepted else "Feedback Received",
                    message=(
                        f'Your submission for "{submission.assignment.title}" has been '
                        f"{submission.status.value.lower()}. Check the feedback for details."
                    ),
                    type=NotificationType.ASSIGNMENT_GRADED if accepted else NotificationType.ASSIGNMENT_FEEDBACK,
                    assignment_id=submission.assignment_id,
                    submission_id=submission.id,
                )
            )

        self.db.refresh(submission)
        return submission

    def get_submission_chart_data_for_instructor(self, instructor_id: str) -> List[Dict[str, Any]]:
        statuses = [
            row.status
            for row in self.db.query(Submission.status)
            .join(Submission.assignment)
            .filter(Assignment.instructor_id == instructor_id)
        ]
        return _status_slices(statuses)

    def get_student_submission_chart_data(self, student_id: str) -> List[Dict[str, Any]]:
        statuses = [row.status for row in self.db.query(Submission.status).filter(Submission.student_id == student_id)]
        total_assignments = self.db.query(Assignment).filter(Assignment.is_active.is_(True)).count()

        slices = _status_slices(statuses)
        slices.append(
            {
                "name": "Not Submitted",
                "value": total_assignments - len(statuses),
                "color": CHART_COLORS["Not Submitted"],
            }
        )
        return slices

    def get_student_recent_submissions(self, student_id: str, limit: int = 5) -> List[Submission]:
        return (
            self._query()
            .filter(Submission.student_id == student_id)
            .order_by(Submission.submitted_at.desc())
            .limit(limit)
            .all()
        )

    def get_my_submission_stats(self, student_id: str) -> Dict[str, int]:
        submissions = self._query().filter(Submission.student_id == student_id).all()

        total = len(submissions)
        pending = sum(1 for s in submissions if s.status == SubmissionStatus.PENDING)
        accepted = sum(1 for s in submissions if s.status == SubmissionStatus.ACCEPTED)
        rejected = sum(1 for s in submissions if s.status == SubmissionStatus.REJECTED)
        late = sum(1 for s in submissions if s.submitted_at > s.assignment.deadline)
        reviewed = accepted + rejected

        return {
            "total_submissions": total,
            "pending_review": pending,
            "accepted": accepted,
            "rejected": rejected,
            "late_submissions": late,
            "on_time_submissions": total - late,
            "acceptance_rate": percentage(accepted, reviewed),
            # Share of submissions already reviewed, reported under the dashboard's field name
            "average_response_time": percentage(reviewed, total),
        }
