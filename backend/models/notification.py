import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from db import Base
from models.enums import NotificationType, SubmissionStatus
from utils.dates import utcnow


class Notification(Base):
    """A message addressed to one user, optionally pointing at an assignment and/or submission"""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(Enum(NotificationType, name="notification_type"), nullable=False)
    assignment_id = Column(String(36), ForeignKey("assignments.id"), nullable=True)
    submission_id = Column(String(36), ForeignKey("submissions.id"), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="notifications")
    assignment = relationship("Assignment", back_populates="notifications")
    submission = relationship("Submission", back_populates="notifications")


NotificationSortField = Literal["created_at", "updated_at", "title", "type", "is_read"]


class NotificationFilters(BaseModel):
    limit: int = Field(50, ge=1, le=200)
    is_read: Optional[bool] = None
    type: Optional[NotificationType] = None
    sort_by: NotificationSortField = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"


class NotificationAssignment(BaseModel):
    id: str
    title: str
    deadline: datetime

    class Config:
        from_attributes = True


class NotificationSubmission(BaseModel):
    id: str
    status: SubmissionStatus
    submitted_at: datetime

    class Config:
        from_attributes = True


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    is_read: bool
    assignment_id: Optional[str] = None
    submission_id: Optional[str] = None
    created_at: datetime
    assignment: Optional[NotificationAssignment] = None
    submission: Optional[NotificationSubmission] = None

    class Config:
        from_attributes = True
