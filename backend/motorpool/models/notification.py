import uuid
from datetime import datetime
import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text

from motorpool.database import Base


class NotificationType(str, enum.Enum):
    RESERVATION_CREATED = "RESERVATION_CREATED"
    RESERVATION_UPDATED = "RESERVATION_UPDATED"
    RESERVATION_APPROVED = "RESERVATION_APPROVED"
    RESERVATION_REJECTED = "RESERVATION_REJECTED"
    RESERVATION_CANCELLED = "RESERVATION_CANCELLED"
    RESERVATION_REMINDER = "RESERVATION_REMINDER"
    RESERVATION_STARTED = "RESERVATION_STARTED"
    RESERVATION_ENDED = "RESERVATION_ENDED"
    SYSTEM = "SYSTEM"


class NotificationPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(40), nullable=False, index=True)
    priority = Column(String(10), nullable=False, default=NotificationPriority.MEDIUM.value)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(String(36), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class NotificationPreference(Base):
    """Per-user notification toggles. Missing row means everything enabled."""
    __tablename__ = "notification_preferences"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, unique=True)
    in_app_reservation = Column(Boolean, nullable=False, default=True)
    in_app_approval = Column(Boolean, nullable=False, default=True)
    in_app_reminder = Column(Boolean, nullable=False, default=True)
    in_app_system = Column(Boolean, nullable=False, default=True)
    email_enabled = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
