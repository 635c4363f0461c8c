# pakhealth/core/reminders/scheduler.py
"""
Reminder tick: one pass of «найти сработавшие напоминания → записать → отправить».

Каждое срабатывание обрабатывается в собственной сессии: запись уведомления
коммитится ДО отправки push, и результат отправки эту запись не откатывает.
Ошибка одного срабатывания логируется и не мешает остальным.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, AsyncContextManager, Callable, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pakhealth.core.notifications.models import NotificationType
from pakhealth.core.notifications.service import NotificationsService
from pakhealth.core.push.dispatcher import PushDispatcher
from pakhealth.db.base import async_session_context
from .evaluator import DEFAULT_LEAD_MINUTES, FiringEvent, iter_due_reminders, lead_buckets
from .recurrence import TimeOfDay
from .service import RemindersService

log = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


@dataclass
class TickReport:
    now: datetime
    candidates: int = 0
    fired: int = 0
    delivered: int = 0
    failed: int = 0
    without_token: int = 0
    errors: int = 0

    def as_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["now"] = self.now.isoformat()
        return out


class ReminderTickScheduler:
    """
    Выполняет один тик движка напоминаний.

    Args:
        session_factory: Фабрика сессий с commit при выходе
            (по умолчанию ``async_session_context``).
        dispatcher (PushDispatcher): Уже сконструированный диспетчер push.
        lead_minutes: Смещения «за N минут»; точное время проверяется всегда.
        clock: Источник текущего локального времени сервера.
    """

    def __init__(
        self,
        dispatcher: PushDispatcher,
        session_factory: SessionFactory = async_session_context,
        lead_minutes: Iterable[int] = DEFAULT_LEAD_MINUTES,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._dispatcher = dispatcher
        self._session_factory = session_factory
        self._lead_minutes = lead_buckets(lead_minutes)
        self._clock = clock

    @property
    def lead_minutes(self) -> tuple[int, ...]:
        return self._lead_minutes

    def candidate_times(self, now: datetime) -> List[Any]:
        """Времена суток, которые могут совпасть в этот тик (предфильтр для запроса)."""
        return sorted({TimeOfDay.of(now + timedelta(minutes=o)).to_time() for o in self._lead_minutes})

    async def run_tick(self, now: Optional[datetime] = None) -> TickReport:
        now = now or self._clock()
        report = TickReport(now=now)
        log.info("Reminder tick at %s", now.strftime("%Y-%m-%d %H:%M:%S"))

        try:
            async with self._session_factory() as session:
                rows = await RemindersService(session).list_active_with_tokens(self.candidate_times(now))
        except Exception:
            log.exception("Reminder tick at %s: failed to load candidate reminders", now)
            return report

        report.candidates = len(rows)
        tokens = {reminder.id: token for reminder, token in rows}
        reminders = [reminder for reminder, _ in rows]

        for event in iter_due_reminders(now, reminders, self._lead_minutes):
            report.fired += 1
            try:
                await self._fire(event, tokens.get(event.reminder.id), now, report)
            except Exception:
                report.errors += 1
                log.exception(
                    "Reminder %s (%s min) failed during tick", event.reminder.id, event.lead_minutes
                )

        log.info(
            "Reminder tick done: candidates=%d fired=%d delivered=%d failed=%d without_token=%d errors=%d",
            report.candidates, report.fired, report.delivered, report.failed,
            report.without_token, report.errors,
        )
        return report

    async def _fire(
        self, event: FiringEvent, token: Optional[str], now: datetime, report: TickReport
    ) -> None:
        reminder = event.reminder
        async with self._session_factory() as session:
            notification = await NotificationsService(session).create_notification(
                user_id=reminder.user_id,
                title=event.title,
                body=event.body,
                notification_type=NotificationType.REMINDER.value,
                data=event.data,
                is_sent=bool(token),
                scheduled_at=event.fire_at,
                sent_at=now if token else None,
            )
        log.info(
            "Reminder '%s' (%s) fired, lead=%d min, notification=%s",
            reminder.title, reminder.id, event.lead_minutes, notification.id,
        )

        if not token:
            report.without_token += 1
            log.info("User %s has no push token; reminder %s stored only", reminder.user_id, reminder.id)
            return

        result = await self._dispatcher.send(token, event.title, event.body, event.data)
        if result.delivered:
            report.delivered += 1
            log.info("Reminder %s pushed: %s", reminder.id, result.message_id)
        else:
            report.failed += 1
            log.warning("Reminder %s push failed: %s", reminder.id, result.reason)


__all__ = ["ReminderTickScheduler", "TickReport"]
