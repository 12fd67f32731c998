"""Daily ledger of completed gate verifications."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from ..models import GateVerification, User, VerificationStatus
from ..utils.datetime import day_bounds, format_clock_time
from . import directory_service


def _today_filter(admission_number: str, now: datetime) -> tuple:
    start, end = day_bounds(now)
    return (
        GateVerification.admission_number == admission_number,
        GateVerification.verification_date >= start,
        GateVerification.verification_date <= end,
    )


def count_attempts_today(session: Session, admission_number: str, *, now: datetime) -> int:
    """Number of completed verifications for ``admission_number`` on ``now``'s day."""

    stmt = select(func.count(GateVerification.verification_id)).where(*_today_filter(admission_number, now))
    return session.execute(stmt).scalar_one()


def most_recent_attempt_today(
    session: Session,
    admission_number: str,
    *,
    now: datetime,
) -> Optional[GateVerification]:
    """Return the earliest attempt recorded today, or ``None``.

    Only consulted when exactly one prior attempt exists, so "earliest" and
    "most recent" name the same row there.
    """

    stmt = (
        select(GateVerification)
        .where(*_today_filter(admission_number, now))
        .order_by(GateVerification.verification_date.asc(), GateVerification.verification_id.asc())
        .limit(1)
    )
    return session.execute(stmt).scalar_one_or_none()


def record_attempt(
    session: Session,
    *,
    student: User,
    admission_number: str,
    outcome: VerificationStatus,
    expiry_snapshot: Optional[datetime],
    agent: Optional[User],
    now: datetime,
) -> GateVerification:
    """Append a verification entry. Existing entries are never touched."""

    entry = GateVerification(
        student_id=student.user_id,
        admission_number=admission_number,
        verification_date=now,
        verification_time=format_clock_time(now),
        status=outcome,
        expiry_date=expiry_snapshot,
        verified_by=agent.user_id if agent is not None else None,
    )
    session.add(entry)
    session.flush()
    return entry


def list_attempts_today(session: Session, *, now: datetime) -> Sequence[GateVerification]:
    """Every verification recorded today, newest first."""

    start, end = day_bounds(now)
    stmt = (
        select(GateVerification)
        .options(joinedload(GateVerification.student).joinedload(User.course), joinedload(GateVerification.agent))
        .where(GateVerification.verification_date >= start, GateVerification.verification_date <= end)
        .order_by(GateVerification.verification_date.desc(), GateVerification.verification_id.desc())
    )
    return session.execute(stmt).scalars().all()


def list_attempt_history(
    session: Session,
    *,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = 50,
) -> Sequence[GateVerification]:
    """Verification history, newest first, optionally bounded by a date window."""

    stmt = (
        select(GateVerification)
        .options(joinedload(GateVerification.student).joinedload(User.course), joinedload(GateVerification.agent))
        .order_by(GateVerification.verification_date.desc(), GateVerification.verification_id.desc())
        .limit(limit)
    )
    if start is not None and end is not None:
        stmt = stmt.where(GateVerification.verification_date >= start, GateVerification.verification_date <= end)
    return session.execute(stmt).scalars().all()


def daily_summary(session: Session, *, now: datetime) -> dict[str, int]:
    """Counts for the gate dashboard."""

    start, end = day_bounds(now)
    stmt = (
        select(GateVerification.status, func.count(GateVerification.verification_id))
        .where(GateVerification.verification_date >= start, GateVerification.verification_date <= end)
        .group_by(GateVerification.status)
    )
    by_status = {status: total for status, total in session.execute(stmt).all()}

    return {
        "today_verifications": sum(by_status.values()),
        "valid_today": by_status.get(VerificationStatus.VALID, 0),
        "expired_today": by_status.get(VerificationStatus.EXPIRED, 0),
        "total_students": directory_service.count_students(session),
    }
