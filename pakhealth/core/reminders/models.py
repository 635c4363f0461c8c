# pakhealth/core/reminders/models.py

from __future__ import annotations

import enum
import uuid
import datetime as dt
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from pakhealth.db.base import Base
from .recurrence import TimeOfDay, WeekdayMask


class ReminderType(str, enum.Enum):
    MEDICATION = "Medication"
    FOOT_CHECK = "Foot Check"
    SUGAR_CHECK = "Sugar Check"
    DOCTOR_VISIT = "Doctor Visit"
    OTHER = "Other"


class Reminder(Base):
    """
    ORM модель для повторяющихся Напоминаний.

    Напоминание срабатывает в ``time`` (локальное время сервера) в дни,
    отмеченные в ``days_mask``, пока ``is_active`` истинно.
    """
    __tablename__ = 'reminders'

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    reminder_type: Mapped[str] = mapped_column(String(32), nullable=False)
    # Время срабатывания с точностью до минуты, без часового пояса
    time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    # Бит (1 << weekday) на каждый день недели, Monday = 0
    days_mask: Mapped[int] = mapped_column(
        Integer, nullable=False, default=WeekdayMask.ALL_BITS
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index('ix_reminders_active_time', 'is_active', 'time'),
    )

    @property
    def days(self) -> WeekdayMask:
        return WeekdayMask(self.days_mask if self.days_mask is not None else WeekdayMask.ALL_BITS)

    @days.setter
    def days(self, mask: WeekdayMask) -> None:
        self.days_mask = mask.bits

    @property
    def time_of_day(self) -> TimeOfDay:
        return TimeOfDay.of(self.time)

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Reminder id={self.id!r} user_id={self.user_id!r} time='{self.time_of_day}' "
            f"days={self.days!r} active={self.is_active}>"
        )
