# pakhealth/core/reminders/evaluator.py
"""
Due-set evaluation for recurring reminders.

Чистая функция от (текущее время, смещения, набор напоминаний): никакого I/O.
Для каждого смещения ``o`` (включая 0) берётся ``target = now + o``,
обрезается до минуты, и напоминание срабатывает, если оно активно, день
недели ``target`` включён в маску и время напоминания совпадает с
временем ``target`` с точностью до минуты.

События выдаются по смещениям в порядке ``lead_buckets``: сначала
заблаговременные, затем точное время. Между смещениями ничего не схлопывается.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Iterator, Protocol, Sequence, Tuple

from .recurrence import TimeOfDay, Weekday, WeekdayMask, truncate_to_minute

EXACT = 0
DEFAULT_LEAD_MINUTES: Tuple[int, ...] = (15, 10)


class ReminderLike(Protocol):
    id: str
    title: str
    reminder_type: str
    notes: str | None
    is_active: bool

    @property
    def days(self) -> WeekdayMask: ...

    @property
    def time_of_day(self) -> TimeOfDay: ...


@dataclass(frozen=True)
class FiringEvent:
    reminder: Any
    lead_minutes: int
    fire_at: datetime
    title: str
    body: str
    data: Dict[str, str] = field(default_factory=dict)

    @property
    def is_exact(self) -> bool:
        return self.lead_minutes == EXACT


def lead_buckets(lead_minutes: Iterable[int] = DEFAULT_LEAD_MINUTES) -> Tuple[int, ...]:
    """Смещения в порядке оценки: заданные заранее, затем точное время (0)."""
    buckets = [minutes for minutes in dict.fromkeys(lead_minutes) if minutes != EXACT]
    return (*buckets, EXACT)


def compose_title(reminder: ReminderLike) -> str:
    return f"{reminder.reminder_type} Reminder"


def compose_body(reminder: ReminderLike, lead_minutes: int) -> str:
    if lead_minutes == EXACT:
        text = f"Time for {reminder.title}!"
    else:
        text = f"{lead_minutes} minutes remaining to {reminder.title}"
    if reminder.notes:
        text = f"{text}\n{reminder.notes}"
    return text


def is_due(reminder: ReminderLike, target: datetime) -> bool:
    """``target`` уже должен быть обрезан до минуты."""
    return (
        bool(reminder.is_active)
        and Weekday.of(target) in reminder.days
        and reminder.time_of_day == TimeOfDay.of(target)
    )


def iter_due_reminders(
    now: datetime,
    reminders: Sequence[ReminderLike],
    lead_minutes: Iterable[int] = DEFAULT_LEAD_MINUTES,
) -> Iterator[FiringEvent]:
    """
    Лениво выдаёт ``FiringEvent`` для каждой пары (напоминание, смещение),
    которая должна сработать в момент ``now``.

    Args:
        now: Текущее время сервера (локальное, без tz); секунды игнорируются.
        reminders: Кандидаты. Фильтрация по пользователю здесь не делается.
        lead_minutes: Смещения «за N минут»; точное время оценивается всегда.
    """
    for offset in lead_buckets(lead_minutes):
        target = truncate_to_minute(now + timedelta(minutes=offset))
        for reminder in reminders:
            if not is_due(reminder, target):
                continue
            yield FiringEvent(
                reminder=reminder,
                lead_minutes=offset,
                fire_at=target,
                title=compose_title(reminder),
                body=compose_body(reminder, offset),
                data={
                    "reminder_id": str(reminder.id),
                    "type": "reminder",
                    "minutes_before": str(offset),
                },
            )


__all__ = [
    "EXACT",
    "DEFAULT_LEAD_MINUTES",
    "FiringEvent",
    "lead_buckets",
    "compose_title",
    "compose_body",
    "is_due",
    "iter_due_reminders",
]
