"""In-app notification model."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID

from ..core.database import Base


class NotificationPriority(str, enum.Enum):
    """Delivery priority shown on the recipient dashboard."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class Notification(Base):
    """Message persisted for a recipient's dashboard."""

    __tablename__ = "notifications"

    notification_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    recipient_id = Column(UUID(as_uuid=True), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.user_id", ondelete="SET NULL"))
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(
        Enum(NotificationPriority, name="notification_priority", values_callable=lambda p: [m.value for m in p]),
        nullable=False,
        default=NotificationPriority.NORMAL,
    )
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
