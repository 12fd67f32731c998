"""SQLAlchemy models for the campus gate service."""

from .fee_record import FeeRecord
from .gate_verification import GateVerification, VerificationStatus
from .notification import Notification, NotificationPriority
from .user import Course, User, UserRole
from .verification_receipt import VerificationReceipt

__all__ = [
    "Course",
    "FeeRecord",
    "GateVerification",
    "Notification",
    "NotificationPriority",
    "User",
    "UserRole",
    "VerificationReceipt",
    "VerificationStatus",
]
