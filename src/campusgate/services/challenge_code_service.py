"""Issue and redeem single-use gate challenge codes."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import NotificationPriority, User, VerificationReceipt
from ..utils.datetime import end_of_day
from . import notification_service

logger = logging.getLogger(__name__)

CODE_NOTIFICATION_TYPE = "gatepass"
CODE_NOTIFICATION_TITLE = "Gate Verification Code Required"


def generate_code() -> str:
    """Return a uniformly random code between 100000 and 999999."""

    return str(secrets.randbelow(900000) + 100000)


def _pending_codes_stmt(student: User, now: datetime):
    return select(VerificationReceipt).where(
        VerificationReceipt.student_id == student.user_id,
        VerificationReceipt.is_used.is_(False),
        VerificationReceipt.expires_at > now,
    )


def get_or_issue_pending_code(
    session: Session,
    student: User,
    *,
    now: datetime,
) -> tuple[VerificationReceipt, bool]:
    """Return the student's pending code, minting one only if none exists.

    The second element is ``True`` when a new code was created. Callers must
    hold the student's admission lock so two requests cannot both mint.
    """

    stmt = _pending_codes_stmt(student, now).order_by(VerificationReceipt.generated_date.desc()).limit(1)
    existing = session.execute(stmt).scalar_one_or_none()
    if existing is not None:
        logger.info("reusing pending challenge code for %s", student.admission_number)
        return existing, False

    receipt = VerificationReceipt(
        student_id=student.user_id,
        admission_number=student.admission_number,
        verification_code=generate_code(),
        generated_date=now,
        expires_at=end_of_day(now),
    )
    session.add(receipt)
    session.flush()
    logger.info("issued challenge code for %s, expires %s", student.admission_number, receipt.expires_at)
    return receipt, True


def dispatch_code(session: Session, receipt: VerificationReceipt, *, sender: Optional[User]) -> None:
    """Send a freshly issued code to the student's dashboard."""

    notification_service.deliver(
        session,
        recipient_id=receipt.student_id,
        sender_id=sender.user_id if sender is not None else None,
        type=CODE_NOTIFICATION_TYPE,
        title=CODE_NOTIFICATION_TITLE,
        message=(
            "SECURITY ALERT: Your admission number has been used for verification multiple times today. "
            f"Your verification code is: {receipt.verification_code}. This code is valid until end of day. "
            "If you did not request this, please contact security."
        ),
        priority=NotificationPriority.HIGH,
    )


def validate_and_consume(
    session: Session,
    student: User,
    presented_code: str,
    *,
    now: datetime,
) -> bool:
    """Mark ``presented_code`` used if it is the student's pending code.

    Returns ``False`` without touching anything for wrong, used or expired codes.
    """

    stmt = _pending_codes_stmt(student, now).where(VerificationReceipt.verification_code == presented_code).limit(1)
    receipt = session.execute(stmt).scalar_one_or_none()
    if receipt is None:
        return False

    receipt.is_used = True
    receipt.used_at = now
    session.flush()
    logger.info("challenge code consumed for %s", student.admission_number)
    return True


def list_pending_codes(session: Session, student: User, *, now: datetime) -> Sequence[VerificationReceipt]:
    """Unused, unexpired codes for a student, newest first."""

    stmt = _pending_codes_stmt(student, now).order_by(VerificationReceipt.generated_date.desc())
    return session.execute(stmt).scalars().all()
