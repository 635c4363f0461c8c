# pakhealth/core/reminders/service.py

"""Service-layer for Reminders."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pakhealth.core.errors import ReminderValidationError
from pakhealth.core.users.models import User
from .models import Reminder, ReminderType
from .recurrence import TimeOfDay, WeekdayMask

log = logging.getLogger(__name__)

REMINDER_TYPES = tuple(item.value for item in ReminderType)


def validate_reminder_type(value: str) -> str:
    if isinstance(value, ReminderType):
        return value.value
    if value not in REMINDER_TYPES:
        raise ReminderValidationError("Invalid reminder type.", field="type")
    return value


def coerce_time(value: TimeOfDay | dt.time | str) -> dt.time:
    if isinstance(value, TimeOfDay):
        return value.to_time()
    if isinstance(value, dt.time):
        return TimeOfDay.of(value).to_time()
    return TimeOfDay.parse(value).to_time()


class RemindersService:
    """
    Асинхронный сервис для работы с Напоминаниями.
    Все методы, принимающие ``user_id``, работают только со строками этого пользователя.
    """

    def __init__(self, db_session: AsyncSession) -> None:
        self.db: AsyncSession = db_session

    # ------------------------------------------------------------------ #
    #                       Public business-methods                      #
    # ------------------------------------------------------------------ #

    async def list_for_user(self, user_id: str) -> Sequence[Reminder]:
        stmt = (
            select(Reminder)
            .where(Reminder.user_id == user_id)
            .order_by(Reminder.created_at.desc())
        )
        reminders = (await self.db.scalars(stmt)).all()
        log.debug("Found %d reminders for user %s", len(reminders), user_id)
        return reminders

    async def get_owned(self, user_id: str, reminder_id: str) -> Reminder | None:
        reminder = await self.db.get(Reminder, reminder_id)
        if reminder is None or reminder.user_id != user_id:
            log.debug("Reminder id=%s not found for user %s", reminder_id, user_id)
            return None
        return reminder

    async def create_reminder(
        self,
        user_id: str,
        title: str,
        reminder_type: str,
        time: TimeOfDay | dt.time | str,
        days: WeekdayMask | None = None,
        notes: str | None = None,
    ) -> Reminder:
        """
        Создает новое напоминание для пользователя.

        Args:
            user_id (str): Идентификатор владельца.
            title (str): Текст напоминания.
            reminder_type (str): Категория (Medication, Foot Check, ...).
            time: Время срабатывания ``HH:MM`` (локальное время сервера).
            days (WeekdayMask | None): Дни недели; ``None`` = все семь дней.
            notes (str | None): Доп. заметки, добавляются к тексту push.

        Raises:
            ReminderValidationError: Некорректные title/type/time.
        """
        if not title or not title.strip():
            raise ReminderValidationError("Please provide title, type, and time.", field="title")
        mask = days if days is not None else WeekdayMask.all()
        reminder = Reminder(
            user_id=user_id,
            title=title,
            reminder_type=validate_reminder_type(reminder_type),
            time=coerce_time(time),
            days_mask=mask.bits,
            notes=notes or None,
            is_active=True,
        )
        if mask.is_empty():
            log.warning("Reminder '%s' for user %s has no weekdays and will never fire", title, user_id)
        self.db.add(reminder)
        await self.db.flush()
        await self.db.refresh(reminder)
        log.info("Created reminder id=%s for user %s at %s", reminder.id, user_id, reminder.time_of_day)
        return reminder

    async def update_reminder(
        self, user_id: str, reminder_id: str, changes: Mapping[str, Any]
    ) -> Reminder | None:
        """
        Частичное обновление. Ключи ``changes``: title, reminder_type, time,
        days (``{'monday': bool | None, ...}``), notes, is_active.

        Returns:
            Reminder | None: Обновленное напоминание или None, если не найдено у пользователя.
        """
        reminder = await self.get_owned(user_id, reminder_id)
        if reminder is None:
            return None

        if changes.get("title") is not None:
            reminder.title = changes["title"]
        if changes.get("reminder_type") is not None:
            reminder.reminder_type = validate_reminder_type(changes["reminder_type"])
        if changes.get("time") is not None:
            reminder.time = coerce_time(changes["time"])
        if changes.get("days") is not None:
            days = changes["days"]
            reminder.days = days if isinstance(days, WeekdayMask) else reminder.days.update(days)
        if "notes" in changes:
            reminder.notes = changes["notes"]
        if changes.get("is_active") is not None:
            reminder.is_active = bool(changes["is_active"])

        await self.db.flush()
        await self.db.refresh(reminder)
        log.info("Updated reminder id=%s for user %s", reminder_id, user_id)
        return reminder

    async def toggle_reminder(self, user_id: str, reminder_id: str) -> Reminder | None:
        reminder = await self.get_owned(user_id, reminder_id)
        if reminder is None:
            return None
        reminder.is_active = not reminder.is_active
        await self.db.flush()
        log.info("Reminder id=%s %s", reminder_id, "activated" if reminder.is_active else "deactivated")
        return reminder

    async def delete_reminder(self, user_id: str, reminder_id: str) -> bool:
        """
        Удаляет напоминание пользователя.

        Returns:
            bool: True, если напоминание было найдено и удалено, иначе False.
        """
        reminder = await self.get_owned(user_id, reminder_id)
        if reminder is None:
            log.warning("Reminder id=%s not found for deletion.", reminder_id)
            return False
        await self.db.delete(reminder)
        await self.db.flush()
        log.info("Deleted reminder id=%s", reminder_id)
        return True

    async def list_active_with_tokens(
        self, times: Optional[Iterable[dt.time]] = None
    ) -> List[Tuple[Reminder, Optional[str]]]:
        """
        Активные напоминания всех пользователей вместе с FCM токеном владельца.

        Args:
            times: Если передано, только напоминания с этим временем
                (предфильтр для тика; точное сравнение делает evaluator).
        """
        stmt = (
            select(Reminder, User.fcm_token)
            .join(User, Reminder.user_id == User.id)
            .where(Reminder.is_active.is_(True))
        )
        if times is not None:
            stmt = stmt.where(Reminder.time.in_(list(times)))
        rows = (await self.db.execute(stmt)).all()
        log.debug("Loaded %d active reminder candidates", len(rows))
        return [(reminder, token) for reminder, token in rows]
