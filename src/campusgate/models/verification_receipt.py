"""Single-use challenge codes sent to students."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..core.database import Base


class VerificationReceipt(Base):
    """A 6-digit code that unlocks one verification once the daily threshold is hit."""

    __tablename__ = "verification_receipts"
    __table_args__ = (
        Index("verification_receipts_student_pending", "student_id", "is_used", "expires_at"),
    )

    receipt_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False)
    admission_number = Column(String, nullable=False)
    verification_code = Column(String(6), nullable=False)
    generated_date = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)
    used_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    student = relationship("User", back_populates="receipts")
