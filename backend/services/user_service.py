"""
User Service
Account creation, lookup, search and profile updates
"""

import logging
from typing import Any, Dict, Optional

from fastapi import status
from sqlalchemy import asc, desc, or_
from sqlalchemy.orm import Session

from db import transaction
from models.enums import UserRole, UserStatus
from models.user import User, UserCreate, UserLogin, UserProfileUpdate, UserUpdate
from utils.auth import get_password_hash, verify_password
from utils.errors import ApiError
from utils.pagination import PaginationOptions, build_meta

logger = logging.getLogger(__name__)

USER_SEARCHABLE_FIELDS = ("name", "email")
USER_SORTABLE_FIELDS = ("created_at", "updated_at", "name", "email")


class UserService:
    """Service for user accounts"""

    def __init__(self, db: Session):
        self.db = db

    def create_user(self, payload: UserCreate) -> User:
        """Create a new user with a hashed password"""
        if self.get_user_by_email(payload.email):
            raise ApiError(status.HTTP_400_BAD_REQUEST, f"User with this email {payload.email} already exists")

        with transaction(self.db):
            user = User(
                name=payload.name,
                email=payload.email,
                password=get_password_hash(payload.password),
                role=payload.role,
                status=UserStatus.ACTIVE,
            )
            self.db.add(user)

        self.db.refresh(user)
        logger.info(f"User {user.email} registered as {user.role.value}")
        return user

    def authenticate_user(self, credentials: UserLogin) -> User:
        """Check credentials and return the matching active user"""
        user = self.get_user_by_email(credentials.email)
        if not user or not verify_password(credentials.password, user.password):
            raise ApiError(status.HTTP_401_UNAUTHORIZED, "Incorrect email or password")

        if user.status != UserStatus.ACTIVE:
            raise ApiError(status.HTTP_403_FORBIDDEN, "User account is not active")

        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_users(
        self,
        options: PaginationOptions,
        search_term: Optional[str] = None,
        role: Optional[UserRole] = None,
        status_filter: Optional[UserStatus] = None,
        email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Search, filter and paginate users

        Args:
            options: Page, limit and ordering
            search_term: Case-insensitive match against name and email
            role, status_filter, email: Exact-match filters

        Returns:
            Dictionary with pagination meta and the page of users
        """
        query = self.db.query(User)

        if search_term and search_term.strip():
            term = search_term.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            query = query.filter(
                or_(*[getattr(User, field).ilike(f"%{term}%", escape="\\") for field in USER_SEARCHABLE_FIELDS])
            )
        if role is not None:
            query = query.filter(User.role == role)
        if status_filter is not None:
            query = query.filter(User.status == status_filter)
        if email:
            query = query.filter(User.email == email)

        sort_by = options.sort_by if options.sort_by in USER_SORTABLE_FIELDS else "created_at"
        order = desc if options.sort_order == "desc" else asc

        total = query.count()
        users = query.order_by(order(getattr(User, sort_by))).offset(options.skip).limit(options.limit).all()

        return {"meta": build_meta(options, total), "data": users}

    def get_user_by_id(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ApiError(status.HTTP_404_NOT_FOUND, "User not found")
        return user

    def update_profile(self, user: User, payload: UserProfileUpdate) -> User:
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in changes and changes["email"] != user.email:
            if self.get_user_by_email(changes["email"]):
                raise ApiError(status.HTTP_400_BAD_REQUEST, f"User with this email {changes['email']} already exists")

        with transaction(self.db):
            for field, value in changes.items():
                setattr(user, field, value)

        self.db.refresh(user)
        return user

    def update_user(self, user_id: str, payload: UserUpdate) -> User:
        user = self.get_user_by_id(user_id)

        with transaction(self.db):
            for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
                setattr(user, field, value)

        self.db.refresh(user)
        logger.info(f"User {user.id} updated: role={user.role.value}, status={user.status.value}")
        return user
