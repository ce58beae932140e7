from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from db import get_db
from models.enums import UserRole, UserStatus
from models.user import User, UserCreate, UserProfileUpdate, UserResponse, UserUpdate
from services.user_service import UserService
from utils.auth import get_current_user_dependency, require_roles
from utils.pagination import PaginationOptions
from utils.response import send_response

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/register")
def register_user(payload: UserCreate, db: Session = Depends(get_db)):
    user = UserService(db).create_user(payload)
    return send_response(
        status_code=status.HTTP_201_CREATED,
        message="User registered successfully",
        data=UserResponse.model_validate(user),
    )


@router.get("")
def get_users(
    search_term: Optional[str] = None,
    role: Optional[UserRole] = None,
    status_filter: Optional[UserStatus] = Query(None, alias="status"),
    email: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: Optional[str] = None,
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user_dependency),
):
    options = PaginationOptions(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    result = UserService(db).get_users(
        options,
        search_term=search_term,
        role=role,
        status_filter=status_filter,
        email=email,
    )
    return send_response(
        message="Users retrieved successfully",
        meta=result["meta"],
        data=[UserResponse.model_validate(user) for user in result["data"]],
    )


@router.get("/me")
def get_my_profile(current_user: User = Depends(get_current_user_dependency)):
    return send_response(message="Profile retrieved successfully", data=UserResponse.model_validate(current_user))


@router.put("/profile")
def update_my_profile(
    payload: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user_dependency),
):
    user = UserService(db).update_profile(current_user, payload)
    return send_response(message="Profile updated successfully", data=UserResponse.model_validate(user))


@router.get("/{user_id}")
def get_user_by_id(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user_dependency),
):
    user = UserService(db).get_user_by_id(user_id)
    return send_response(message="User retrieved successfully", data=UserResponse.model_validate(user))


@router.put("/{user_id}")
def update_user(
    user_id: str,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.INSTRUCTOR)),
):
    user = UserService(db).update_user(user_id, payload)
    return send_response(message="User updated successfully", data=UserResponse.model_validate(user))
