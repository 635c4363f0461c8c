# pakhealth/core/notifications/models.py

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from pakhealth.db.base import Base


class NotificationType(str, enum.Enum):
    REMINDER = "reminder"
    SUGAR_ALERT = "sugar_alert"
    FOOT_HEALTH = "foot_health"
    MEDICATION = "medication"
    SYSTEM = "system"
    ACHIEVEMENT = "achievement"


class Notification(Base):
    """
    Журнал push-уведомлений пользователя.

    ``is_sent`` означает «попытка отправки была», а не «устройство получило».
    """
    __tablename__ = 'notifications'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    notification_type: Mapped[str] = mapped_column(
        String(32), nullable=False, default=NotificationType.SYSTEM.value
    )
    data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    scheduled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index('ix_notifications_user_read', 'user_id', 'is_read'),
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Notification id={self.id!r} user={self.user_id!r} type={self.notification_type!r} sent={self.is_sent}>"


class NotificationPreferences(Base):
    __tablename__ = 'notification_preferences'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True
    )
    reminder_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sugar_alerts: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    foot_health_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    medication_reminders: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    system_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    achievement_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    quiet_hours_start: Mapped[str] = mapped_column(String(5), default="22:00", nullable=False)
    quiet_hours_end: Mapped[str] = mapped_column(String(5), default="07:00", nullable=False)
    quiet_hours_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
