# pakhealth/core/reminders/recurrence.py
"""
Recurrence primitives for reminders.

* ``Weekday``     – день недели, Monday = 0 (как ``datetime.weekday()``).
* ``WeekdayMask`` – набор из семи флагов, хранится в БД как битовая маска.
* ``TimeOfDay``   – время суток с точностью до минуты, сравнивается как кортеж.
"""

from __future__ import annotations

import re
from datetime import datetime, time
from enum import IntEnum
from typing import Dict, Iterable, Iterator, Mapping, NamedTuple

from pakhealth.core.errors import ReminderValidationError

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class Weekday(IntEnum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def key(self) -> str:
        """Имя дня в API: 'monday', 'tuesday', ..."""
        return self.name.lower()

    @classmethod
    def of(cls, moment: datetime) -> "Weekday":
        return cls(moment.weekday())


class WeekdayMask:
    """Immutable set of weekdays backed by a 7-bit integer."""

    __slots__ = ("_bits",)

    ALL_BITS = 0b1111111

    def __init__(self, bits: int = 0) -> None:
        if not 0 <= bits <= self.ALL_BITS:
            raise ValueError(f"Weekday mask out of range: {bits}")
        self._bits = bits

    @classmethod
    def all(cls) -> "WeekdayMask":
        return cls(cls.ALL_BITS)

    @classmethod
    def of(cls, days: Iterable[Weekday]) -> "WeekdayMask":
        bits = 0
        for day in days:
            bits |= 1 << int(day)
        return cls(bits)

    @classmethod
    def from_flags(cls, flags: Mapping[str, bool]) -> "WeekdayMask":
        """``{'monday': True, ...}`` → маска. Отсутствующие дни считаются выключенными."""
        return cls.of(day for day in Weekday if flags.get(day.key))

    @property
    def bits(self) -> int:
        return self._bits

    def with_day(self, day: Weekday, enabled: bool) -> "WeekdayMask":
        if enabled:
            return WeekdayMask(self._bits | (1 << int(day)))
        return WeekdayMask(self._bits & ~(1 << int(day)))

    def update(self, flags: Mapping[str, bool | None]) -> "WeekdayMask":
        """Частичное обновление: меняются только дни, переданные явно."""
        mask = self
        for day in Weekday:
            value = flags.get(day.key)
            if value is not None:
                mask = mask.with_day(day, bool(value))
        return mask

    def to_flags(self) -> Dict[str, bool]:
        return {day.key: day in self for day in Weekday}

    def is_empty(self) -> bool:
        return self._bits == 0

    def __contains__(self, day: object) -> bool:
        if not isinstance(day, int):
            return False
        return bool(self._bits & (1 << int(day)))

    def __iter__(self) -> Iterator[Weekday]:
        return (day for day in Weekday if day in self)

    def __len__(self) -> int:
        return bin(self._bits).count("1")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, WeekdayMask) and other._bits == self._bits

    def __hash__(self) -> int:
        return hash(self._bits)

    def __repr__(self) -> str:
        return f"WeekdayMask({', '.join(day.key for day in self) or 'none'})"


class TimeOfDay(NamedTuple):
    """Hour and minute, no seconds and no timezone."""

    hour: int
    minute: int

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        match = _TIME_RE.match(value or "")
        if not match:
            raise ReminderValidationError("Invalid time format. Use HH:MM format.", field="time")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def of(cls, moment: datetime | time) -> "TimeOfDay":
        # Секунды и микросекунды отбрасываются
        return cls(moment.hour, moment.minute)

    def to_time(self) -> time:
        return time(self.hour, self.minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def truncate_to_minute(moment: datetime) -> datetime:
    return moment.replace(second=0, microsecond=0)


__all__ = ["Weekday", "WeekdayMask", "TimeOfDay", "truncate_to_minute"]
