"""Lookups against the identity directory."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from ..models import User, UserRole


def find_student_by_admission_number(
    session: Session,
    admission_number: str,
    *,
    lock: bool = False,
) -> Optional[User]:
    """Return the student holding ``admission_number`` with their course loaded."""

    stmt = (
        select(User)
        .options(joinedload(User.course))
        .where(User.admission_number == admission_number, User.role == UserRole.STUDENT)
    )
    if lock:
        stmt = stmt.with_for_update(of=User)
    return session.execute(stmt).scalar_one_or_none()


def find_user_by_id(session: Session, user_id: UUID) -> Optional[User]:
    stmt = select(User).where(User.user_id == user_id)
    return session.execute(stmt).scalar_one_or_none()


def count_students(session: Session) -> int:
    stmt = select(func.count(User.user_id)).where(User.role == UserRole.STUDENT)
    return session.execute(stmt).scalar_one()
