from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from db import get_db
from models.enums import SubmissionStatus, UserRole
from models.submission import (
    RecentSubmission,
    SubmissionCreate,
    SubmissionFeedback,
    SubmissionResponse,
    SubmissionStatusUpdate,
    SubmissionUpdate,
)
from models.user import User
from services.submission_service import SubmissionService
from utils.auth import get_current_user_dependency, require_roles
from utils.response import send_response

router = APIRouter(prefix="/api/submissions", tags=["submissions"])

instructor_only = require_roles(UserRole.INSTRUCTOR)
student_only = require_roles(UserRole.STUDENT)


@router.post("/create")
def create_submission(
    payload: SubmissionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(student_only),
):
    submission = SubmissionService(db).create_submission(payload, current_user)
    return send_response(
        status_code=status.HTTP_201_CREATED,
        message="Submission created successfully",
        data=SubmissionResponse.model_validate(submission),
    )


@router.get("")
def get_all_submissions(
    assignment_id: Optional[str] = None,
    student_id: Optional[str] = None,
    status_filter: Optional[SubmissionStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    submissions = SubmissionService(db).get_all_submissions(assignment_id, student_id, status_filter)
    return send_response(
        message="Submissions retrieved successfully",
        data=[SubmissionResponse.model_validate(submission) for submission in submissions],
    )


@router.get("/instructor/chart")
def get_instructor_chart(db: Session = Depends(get_db), current_user: User = Depends(instructor_only)):
    result = SubmissionService(db).get_submission_chart_data_for_instructor(current_user.id)
    return send_response(message="Submission chart data retrieved successfully", data=result)


@router.get("/student/chart")
def get_student_chart(db: Session = Depends(get_db), current_user: User = Depends(student_only)):
    result = SubmissionService(db).get_student_submission_chart_data(current_user.id)
    return send_response(message="Submission chart data retrieved successfully", data=result)


@router.get("/student/recent")
def get_student_recent_submissions(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(student_only),
):
    submissions = SubmissionService(db).get_student_recent_submissions(current_user.id, limit)
    return send_response(
        message="Recent submissions retrieved successfully",
        data=[RecentSubmission.model_validate(submission) for submission in submissions],
    )


@router.get("/student/stats")
def get_my_submission_stats(db: Session = Depends(get_db), current_user: User = Depends(student_only)):
    result = SubmissionService(db).get_my_submission_stats(current_user.id)
    return send_response(message="Submission stats retrieved successfully", data=result)


@router.get("/{submission_id}")
def get_single_submission(submission_id: str, db: Session = Depends(get_db)):
    submission = SubmissionService(db).get_single_submission(submission_id)
    return send_response(
        message="Submission retrieved successfully",
        data=SubmissionResponse.model_validate(submission),
    )


@router.put("/status/{submission_id}")
def update_submission_status(
    submission_id: str,
    payload: SubmissionStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user_dependency),
):
    submission = SubmissionService(db).update_submission_status(
        submission_id,
        payload.new_status,
        payload.feedback,
        current_user.id,
    )
    return send_response(
        message="Submission status updated successfully",
        data=SubmissionResponse.model_validate(submission),
    )


@router.put("/feedback/{submission_id}")
def give_submission_feedback(
    submission_id: str,
    payload: SubmissionFeedback,
    db: Session = Depends(get_db),
    current_user: User = Depends(instructor_only),
):
    submission = SubmissionService(db).give_submission_feedback(current_user.id, submission_id, payload.feedback)
    return send_response(
        message="Submission feedback saved successfully",
        data=SubmissionResponse.model_validate(submission),
    )


@router.put("/{submission_id}")
def update_submission(
    submission_id: str,
    payload: SubmissionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user_dependency),
):
    submission = SubmissionService(db).update_submission(submission_id, payload, current_user)
    return send_response(
        message="Submission updated successfully",
        data=SubmissionResponse.model_validate(submission),
    )


@router.delete("/{submission_id}")
def delete_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user_dependency),
):
    result = SubmissionService(db).delete_submission(submission_id, current_user)
    return send_response(message="Submission deleted successfully", data=result)
