# pakhealth/core/reminders/schemas.py

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Reminder, ReminderType
from .recurrence import TimeOfDay, Weekday, WeekdayMask


class ReminderDays(BaseModel):
    """Флаги дней недели. ``None`` = «не передано» (важно для частичного PUT)."""
    monday: Optional[bool] = None
    tuesday: Optional[bool] = None
    wednesday: Optional[bool] = None
    thursday: Optional[bool] = None
    friday: Optional[bool] = None
    saturday: Optional[bool] = None
    sunday: Optional[bool] = None

    def to_mask(self) -> WeekdayMask:
        # При создании непереданные дни выключены
        return WeekdayMask.from_flags({day.key: bool(getattr(self, day.key)) for day in Weekday})


def _check_time(value: str) -> str:
    # ReminderValidationError наследует ValueError -> pydantic отдаст 422
    return str(TimeOfDay.parse(value))


class ReminderCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    type: ReminderType
    time: str = Field(..., description="HH:MM, server local time")
    days: Optional[ReminderDays] = None
    notes: Optional[str] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _check_time(value)


class ReminderUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[ReminderType] = None
    time: Optional[str] = None
    days: Optional[ReminderDays] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_time(value)

    def to_changes(self) -> Dict[str, object]:
        """Только явно переданные поля, в терминах ``RemindersService.update_reminder``."""
        sent = self.model_dump(exclude_unset=True)
        changes: Dict[str, object] = {}
        if "title" in sent:
            changes["title"] = self.title
        if "type" in sent:
            changes["reminder_type"] = self.type
        if "time" in sent:
            changes["time"] = self.time
        if "days" in sent and self.days is not None:
            changes["days"] = self.days.model_dump()
        if "notes" in sent:
            changes["notes"] = self.notes
        if "is_active" in sent:
            changes["is_active"] = self.is_active
        return changes


class ReminderOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    type: str
    time: str
    days: Dict[str, bool]
    notes: Optional[str] = None
    is_active: bool = Field(..., alias="isActive")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    @classmethod
    def from_orm_reminder(cls, reminder: Reminder) -> "ReminderOut":
        return cls(
            id=reminder.id,
            title=reminder.title,
            type=reminder.reminder_type,
            time=str(reminder.time_of_day),
            days=reminder.days.to_flags(),
            notes=reminder.notes,
            is_active=reminder.is_active,
            created_at=reminder.created_at,
        )
