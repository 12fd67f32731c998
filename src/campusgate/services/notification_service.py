"""Persist dashboard notifications."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Notification, NotificationPriority

logger = logging.getLogger(__name__)


def deliver(
    session: Session,
    *,
    recipient_id: UUID,
    sender_id: Optional[UUID],
    type: str,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.NORMAL,
) -> Optional[Notification]:
    """Store a notification for ``recipient_id``.

    The insert runs in a savepoint so a failed delivery leaves the caller's
    transaction usable; the failure is logged and ``None`` is returned.
    """

    notification = Notification(
        recipient_id=recipient_id,
        sender_id=sender_id,
        type=type,
        title=title,
        message=message,
        priority=priority,
    )
    try:
        with session.begin_nested():
            session.add(notification)
    except SQLAlchemyError:
        logger.exception("notification delivery to %s failed", recipient_id)
        return None
    return notification
