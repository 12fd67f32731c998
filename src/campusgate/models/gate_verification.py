"""Append-only log of completed gate verifications."""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..core.database import Base


class VerificationStatus(str, enum.Enum):
    """Outcome of a completed verification."""

    VALID = "Valid"
    EXPIRED = "Expired"
    # Reserved for blocked accounts; nothing assigns it yet.
    DENIED = "Denied"


class GateVerification(Base):
    """One row per completed verification attempt. Never updated."""

    __tablename__ = "gate_verifications"
    __table_args__ = (
        # admission_number is copied from the student so the daily count needs no join
        Index("gate_verifications_admission_day", "admission_number", "verification_date"),
        Index("gate_verifications_student_day", "student_id", "verification_date"),
    )

    verification_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(UUID(as_uuid=True), ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False)
    admission_number = Column(String, nullable=False)
    verification_date = Column(DateTime, nullable=False)
    verification_time = Column(String, nullable=False)
    status = Column(Enum(VerificationStatus, name="verification_status", values_callable=lambda s: [m.value for m in s]), nullable=False)
    expiry_date = Column(DateTime)
    verified_by = Column(UUID(as_uuid=True), ForeignKey("users.user_id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    student = relationship("User", foreign_keys=[student_id], back_populates="verifications")
    agent = relationship("User", foreign_keys=[verified_by])
