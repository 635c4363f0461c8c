# pakhealth/core/notifications/service.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Notification, NotificationPreferences, NotificationType

log = logging.getLogger(__name__)

PREFERENCE_FIELDS = (
    "reminder_notifications",
    "sugar_alerts",
    "foot_health_notifications",
    "medication_reminders",
    "system_notifications",
    "achievement_notifications",
    "quiet_hours_start",
    "quiet_hours_end",
    "quiet_hours_enabled",
)


class NotificationsService:
    """
    Асинхронный сервис журнала уведомлений и настроек уведомлений.
    Не отправляет push сам: отправкой занимается ``PushDispatcher``.
    """

    def __init__(self, db_session: AsyncSession) -> None:
        self.db: AsyncSession = db_session

    async def create_notification(
        self,
        user_id: str,
        title: str,
        body: str,
        notification_type: str = NotificationType.SYSTEM.value,
        data: Optional[Dict[str, Any]] = None,
        is_sent: bool = False,
        scheduled_at: Optional[datetime] = None,
        sent_at: Optional[datetime] = None,
    ) -> Notification:
        """
        Сохраняет запись уведомления.

        Args:
            is_sent (bool): Была ли попытка отправки push (не факт доставки).
            scheduled_at (datetime | None): Номинальное время срабатывания (для напоминаний).
            sent_at (datetime | None): Момент отправки; при ``is_sent`` без него
                подставляется текущее время.
        """
        if isinstance(notification_type, NotificationType):
            notification_type = notification_type.value
        if is_sent and sent_at is None:
            sent_at = datetime.now()
        notification = Notification(
            user_id=user_id,
            title=title,
            body=body,
            notification_type=notification_type,
            data=dict(data) if data else None,
            is_sent=is_sent,
            scheduled_at=scheduled_at,
            sent_at=sent_at,
        )
        self.db.add(notification)
        await self.db.flush()
        await self.db.refresh(notification)
        log.debug("Stored notification id=%s for user %s (sent=%s)", notification.id, user_id, is_sent)
        return notification

    async def list_for_user(
        self, user_id: str, limit: int = 50, offset: int = 0, unread_only: bool = False
    ) -> Sequence[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit).offset(offset)
        return (await self.db.scalars(stmt)).all()

    async def unread_count(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(Notification).where(
            Notification.user_id == user_id, Notification.is_read.is_(False)
        )
        return int((await self.db.scalar(stmt)) or 0)

    async def get_owned(self, user_id: str, notification_id: str) -> Notification | None:
        notification = await self.db.get(Notification, notification_id)
        if notification is None or notification.user_id != user_id:
            return None
        return notification

    async def mark_read(self, user_id: str, notification_id: str) -> Notification | None:
        notification = await self.get_owned(user_id, notification_id)
        if notification is None:
            log.debug("Notification id=%s not found for user %s", notification_id, user_id)
            return None
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now()
            await self.db.flush()
        return notification

    async def mark_all_read(self, user_id: str) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=datetime.now())
        )
        result = await self.db.execute(stmt)
        log.info("Marked %d notifications as read for user %s", result.rowcount, user_id)
        return result.rowcount or 0

    async def delete_notification(self, user_id: str, notification_id: str) -> bool:
        notification = await self.get_owned(user_id, notification_id)
        if notification is None:
            return False
        await self.db.delete(notification)
        await self.db.flush()
        return True

    async def clear_all(self, user_id: str) -> int:
        result = await self.db.execute(delete(Notification).where(Notification.user_id == user_id))
        log.info("Cleared %d notifications for user %s", result.rowcount, user_id)
        return result.rowcount or 0

    # --- Preferences ---

    async def get_or_create_preferences(self, user_id: str) -> NotificationPreferences:
        stmt = select(NotificationPreferences).where(NotificationPreferences.user_id == user_id)
        prefs = (await self.db.scalars(stmt)).first()
        if prefs is None:
            prefs = NotificationPreferences(user_id=user_id)
            self.db.add(prefs)
            await self.db.flush()
            await self.db.refresh(prefs)
            log.info("Created default notification preferences for user %s", user_id)
        return prefs

    async def update_preferences(self, user_id: str, changes: Mapping[str, Any]) -> NotificationPreferences:
        prefs = await self.get_or_create_preferences(user_id)
        for field_name in PREFERENCE_FIELDS:
            value = changes.get(field_name)
            if value is not None:
                setattr(prefs, field_name, value)
        await self.db.flush()
        await self.db.refresh(prefs)
        return prefs
