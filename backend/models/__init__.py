from models.user import User
from models.assignment import Assignment
from models.submission import Submission
from models.notification import Notification

__all__ = ["User", "Assignment", "Submission", "Notification"]
