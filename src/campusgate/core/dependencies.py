"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from ..models import User, UserRole
from ..services import directory_service
from ..utils.datetime import Clock, local_now
from .config import get_settings
from .database import get_db

GATE_ROLES = (UserRole.GATE, UserRole.GATE_VERIFICATION)


def get_clock() -> Clock:
    """Time source for request handlers; overridden in tests."""

    return local_now


def get_step_up_threshold() -> int:
    return get_settings().step_up_threshold


def get_current_user(
    x_user_id: Optional[str] = Header(None, description="Authenticated user id set by the auth gateway"),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the caller forwarded by the upstream authentication layer."""

    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, no user")
    try:
        user_id = UUID(x_user_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, bad user id") from exc

    user = directory_service.find_user_by_id(db, user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, unknown user")
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Build a dependency admitting only callers holding one of ``roles``."""

    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {user.role.value} is not authorized to access this route",
            )
        return user

    return checker
