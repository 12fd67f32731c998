"""Read access to the finance office fee records."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import FeeRecord


def latest_fee_record(session: Session, student_id: UUID) -> Optional[FeeRecord]:
    """Return the most recently created fee record for a student, if any."""

    stmt = (
        select(FeeRecord)
        .where(FeeRecord.student_id == student_id)
        .order_by(FeeRecord.created_at.desc())
        .limit(1)
    )
    return session.execute(stmt).scalar_one_or_none()
