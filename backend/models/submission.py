import uuid
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, Field, HttpUrl
from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from db import Base
from models.assignment import AssignmentSummary, AssignmentWithInstructor
from models.enums import SubmissionStatus
from models.user import UserSummary
from utils.dates import utcnow


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    assignment_id = Column(String(36), ForeignKey("assignments.id"), nullable=False, index=True)
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    submission_url = Column(String(2048), nullable=False)
    note = Column(Text, nullable=True)
    status = Column(Enum(SubmissionStatus, name="submission_status"), nullable=False, default=SubmissionStatus.PENDING)
    feedback = Column(Text, nullable=True)
    submitted_at = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", back_populates="submissions")
    notifications = relationship("Notification", back_populates="submission")


def _strip(value):
    return value.strip() if isinstance(value, str) else value


# Pydantic models for request validation
class SubmissionCreate(BaseModel):
    assignment_id: uuid.UUID
    student_id: Optional[uuid.UUID] = None
    submission_url: HttpUrl
    note: Optional[str] = Field(None, max_length=1000)


class SubmissionUpdate(BaseModel):
    submission_url: Optional[HttpUrl] = None
    note: Optional[str] = Field(None, max_length=1000)
    status: Optional[SubmissionStatus] = None
    feedback: Optional[str] = Field(None, max_length=2000)


class SubmissionStatusUpdate(BaseModel):
    new_status: SubmissionStatus
    feedback: Optional[Annotated[str, BeforeValidator(_strip), Field(min_length=1, max_length=2000)]] = None


class SubmissionFeedback(BaseModel):
    feedback: Annotated[str, BeforeValidator(_strip), Field(min_length=1, max_length=2000)]


class SubmissionResponse(BaseModel):
    id: str
    assignment_id: str
    student_id: str
    submission_url: str
    note: Optional[str] = None
    status: SubmissionStatus
    feedback: Optional[str] = None
    submitted_at: datetime
    created_at: datetime
    updated_at: datetime
    assignment: AssignmentSummary
    student: UserSummary

    class Config:
        from_attributes = True


class RecentSubmission(BaseModel):
    id: str
    submission_url: str
    note: Optional[str] = None
    status: SubmissionStatus
    feedback: Optional[str] = None
    submitted_at: datetime
    assignment: AssignmentWithInstructor

    class Config:
        from_attributes = True
