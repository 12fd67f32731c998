"""Read schemas for the verification ledger and challenge codes."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from ..models import VerificationStatus
from .verification import CamelModel


class UserSummary(CamelModel):
    """Lightweight projection of a directory entry."""

    user_id: UUID
    name: str


class StudentSummary(UserSummary):
    admission_number: Optional[str]
    level: Optional[str]


class VerificationRecordRead(CamelModel):
    """A row from the verification ledger."""

    verification_id: int
    student: StudentSummary
    admission_number: str
    verification_date: datetime
    verification_time: str
    status: VerificationStatus
    expiry_date: Optional[datetime]
    agent: Optional[UserSummary] = Field(None, serialization_alias="verifiedBy")
    created_at: datetime


class ReceiptRead(CamelModel):
    """A pending challenge code as shown on the student's dashboard."""

    receipt_id: UUID
    admission_number: str
    verification_code: str
    generated_date: datetime
    expires_at: datetime
    is_used: bool


class GateDashboard(CamelModel):
    """Today's counters for the gate dashboard."""

    today_verifications: int = Field(..., ge=0)
    valid_today: int = Field(..., ge=0)
    expired_today: int = Field(..., ge=0)
    total_students: int = Field(..., ge=0)
