import uuid
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from db import Base
from models.enums import SubmissionStatus
from models.user import UserSummary
from utils.dates import to_naive_utc, utcnow


class Assignment(Base):
    """An assignment posted by exactly one instructor"""

    __tablename__ = "assignments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    deadline = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    instructor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    instructor = relationship("User", back_populates="instructor_assignments")
    submissions = relationship("Submission", back_populates="assignment", order_by="Submission.submitted_at")
    notifications = relationship("Notification", back_populates="assignment")

    @property
    def submission_count(self) -> int:
        return len(self.submissions)


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _future_deadline(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return value
    value = to_naive_utc(value)
    if value <= utcnow():
        raise ValueError("Deadline must be in the future")
    return value


Title = Annotated[str, BeforeValidator(_strip), Field(min_length=1, max_length=200)]
Description = Annotated[str, BeforeValidator(_strip), Field(min_length=1, max_length=5000)]
Deadline = Annotated[datetime, AfterValidator(_future_deadline)]
UpdatedDeadline = Annotated[datetime, AfterValidator(to_naive_utc)]


# Pydantic models for request validation
class AssignmentCreate(BaseModel):
    title: Title
    description: Description
    deadline: Deadline
    instructor_id: Optional[uuid.UUID] = None


class AssignmentUpdate(BaseModel):
    title: Optional[Title] = None
    description: Optional[Description] = None
    deadline: Optional[UpdatedDeadline] = None
    is_active: Optional[bool] = None
    instructor_id: Optional[uuid.UUID] = None


class AssignmentSummary(BaseModel):
    id: str
    title: str
    deadline: datetime

    class Config:
        from_attributes = True


class AssignmentWithInstructor(AssignmentSummary):
    description: str
    instructor: UserSummary


class SubmissionBrief(BaseModel):
    """A submission as seen from its assignment"""

    id: str
    status: SubmissionStatus
    submitted_at: datetime
    student: UserSummary

    class Config:
        from_attributes = True


class SubmissionWithStudent(SubmissionBrief):
    submission_url: str
    note: Optional[str] = None
    feedback: Optional[str] = None


class AssignmentResponse(BaseModel):
    id: str
    title: str
    description: str
    deadline: datetime
    is_active: bool
    instructor_id: str
    created_at: datetime
    updated_at: datetime
    instructor: UserSummary

    class Config:
        from_attributes = True


class AssignmentListItem(AssignmentResponse):
    submission_count: int


class AssignmentDetail(AssignmentResponse):
    submissions: List[SubmissionWithStudent] = []


class AssignmentWithSubmissions(AssignmentResponse):
    submissions: List[SubmissionBrief] = []
