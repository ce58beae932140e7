from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from db import get_db
from models.assignment import (
    AssignmentCreate,
    AssignmentDetail,
    AssignmentListItem,
    AssignmentResponse,
    AssignmentUpdate,
    AssignmentWithSubmissions,
)
from models.enums import UserRole
from models.user import User
from services.assignment_service import AssignmentService
from utils.auth import require_roles
from utils.response import send_response

router = APIRouter(prefix="/api/assignments", tags=["assignments"])

instructor_only = require_roles(UserRole.INSTRUCTOR)
student_only = require_roles(UserRole.STUDENT)


@router.post("/create")
def create_assignment(
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(instructor_only),
):
    result = AssignmentService(db).create_assignment(payload, current_user)
    return send_response(
        status_code=status.HTTP_201_CREATED,
        message="Assignment created successfully",
        data={
            "assignment": AssignmentResponse.model_validate(result["assignment"]),
            "notifications_sent": result["notifications_sent"],
        },
    )


@router.get("")
def get_all_assignments(db: Session = Depends(get_db)):
    assignments = AssignmentService(db).get_all_assignments()
    return send_response(
        message="Assignments retrieved successfully",
        data=[AssignmentListItem.model_validate(assignment) for assignment in assignments],
    )


# Dashboard routes are declared before /{assignment_id} so they are matched first
@router.get("/instructor/stats")
def get_instructor_stats(db: Session = Depends(get_db), current_user: User = Depends(instructor_only)):
    result = AssignmentService(db).get_assignment_stats_by_instructor(current_user.id)
    return send_response(message="Assignment stats retrieved successfully", data=result)


@router.get("/instructor/recent")
def get_recent_assignments(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(instructor_only),
):
    assignments = AssignmentService(db).get_recent_assignments_by_instructor(current_user.id, limit)
    return send_response(
        message="Recent assignments retrieved successfully",
        data=[AssignmentWithSubmissions.model_validate(assignment) for assignment in assignments],
    )


@router.get("/instructor/all")
def get_instructor_assignments(db: Session = Depends(get_db), current_user: User = Depends(instructor_only)):
    result = AssignmentService(db).get_all_assignments_by_instructor(current_user.id)
    return send_response(
        message="All assignments retrieved successfully",
        data={
            "total_count": result["total_count"],
            "assignments": [AssignmentWithSubmissions.model_validate(a) for a in result["assignments"]],
        },
    )


@router.get("/student/stats")
def get_student_stats(db: Session = Depends(get_db), current_user: User = Depends(student_only)):
    result = AssignmentService(db).get_student_assignment_stats(current_user.id)
    return send_response(message="Assignment stats retrieved successfully", data=result)


@router.get("/student/available")
def get_available_assignments(db: Session = Depends(get_db), current_user: User = Depends(student_only)):
    result = AssignmentService(db).get_available_assignments_for_student(current_user.id)
    return send_response(
        message="Available assignments retrieved successfully",
        data={
            "total_count": result["total_count"],
            "assignments": [AssignmentResponse.model_validate(a) for a in result["assignments"]],
        },
    )


@router.get("/{assignment_id}")
def get_single_assignment(assignment_id: str, db: Session = Depends(get_db)):
    assignment = AssignmentService(db).get_single_assignment(assignment_id)
    return send_response(
        message="Assignment retrieved successfully",
        data=AssignmentDetail.model_validate(assignment),
    )


@router.put("/{assignment_id}")
def update_assignment(
    assignment_id: str,
    payload: AssignmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(instructor_only),
):
    result = AssignmentService(db).update_assignment(assignment_id, payload, current_user)
    return send_response(
        message="Assignment updated successfully",
        data={
            "assignment": AssignmentResponse.model_validate(result["assignment"]),
            "notifications_sent": result["notifications_sent"],
        },
    )


@router.delete("/{assignment_id}")
def delete_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(instructor_only),
):
    result = AssignmentService(db).delete_assignment(assignment_id, current_user)
    return send_response(message="Assignment deleted successfully", data=result)
