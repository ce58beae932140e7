from enum import Enum


class UserRole(str, Enum):
    INSTRUCTOR = "INSTRUCTOR"
    STUDENT = "STUDENT"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BLOCKED = "BLOCKED"


class SubmissionStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class NotificationType(str, Enum):
    NEW_ASSIGNMENT = "NEW_ASSIGNMENT"
    ASSIGNMENT_UPDATED = "ASSIGNMENT_UPDATED"
    ASSIGNMENT_DELETED = "ASSIGNMENT_DELETED"
    NEW_SUBMISSION = "NEW_SUBMISSION"
    ASSIGNMENT_GRADED = "ASSIGNMENT_GRADED"
    ASSIGNMENT_FEEDBACK = "ASSIGNMENT_FEEDBACK"
    DEADLINE_REMINDER = "DEADLINE_REMINDER"
