# pakhealth/core/notifications/schemas.py

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pakhealth.core.reminders.recurrence import TimeOfDay
from .models import NotificationType


class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.SYSTEM
    data: Dict[str, Any] = Field(default_factory=dict)
    send_push: bool = True


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    body: str
    notification_type: str = Field(
        ..., validation_alias=AliasChoices("type", "notification_type"), serialization_alias="type"
    )
    data: Optional[Dict[str, Any]] = None
    is_read: bool
    is_sent: bool
    scheduled_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class NotificationList(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notifications: List[NotificationOut]
    unread_count: int = Field(..., alias="unreadCount")


class UnreadCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    unread_count: int = Field(..., alias="unreadCount")


class PushResult(BaseModel):
    """Результат отправки push для ответа API."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message_id: Optional[str] = Field(None, alias="messageId")
    error: Optional[str] = None


class NotificationCreated(BaseModel):
    notification: NotificationOut
    push: Optional[PushResult] = None


class PreferencesOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reminder_notifications: bool
    sugar_alerts: bool
    foot_health_notifications: bool
    medication_reminders: bool
    system_notifications: bool
    achievement_notifications: bool
    quiet_hours_start: str
    quiet_hours_end: str
    quiet_hours_enabled: bool


class PreferencesUpdate(BaseModel):
    reminder_notifications: Optional[bool] = None
    sugar_alerts: Optional[bool] = None
    foot_health_notifications: Optional[bool] = None
    medication_reminders: Optional[bool] = None
    system_notifications: Optional[bool] = None
    achievement_notifications: Optional[bool] = None
    quiet_hours_start: Optional[str] = None
    quiet_hours_end: Optional[str] = None
    quiet_hours_enabled: Optional[bool] = None

    @field_validator("quiet_hours_start", "quiet_hours_end")
    @classmethod
    def validate_hhmm(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else str(TimeOfDay.parse(value))
