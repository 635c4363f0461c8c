# pakhealth/api/v1/reminders.py

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pakhealth.core.auth.schemas import CurrentUser
from pakhealth.core.auth.security import get_current_identity
from pakhealth.core.errors import ReminderValidationError
from pakhealth.core.reminders.models import Reminder
from pakhealth.core.reminders.recurrence import WeekdayMask
from pakhealth.core.reminders.schemas import ReminderCreate, ReminderOut, ReminderUpdate
from pakhealth.core.reminders.service import RemindersService
from pakhealth.db.base import get_async_db_session

router = APIRouter(prefix="/api/reminders", tags=["Reminders"])
log = logging.getLogger(__name__)

REMINDER_NOT_FOUND = "Reminder not found."


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=REMINDER_NOT_FOUND)


def _invalid(exc: ReminderValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


@router.get("", response_model=List[ReminderOut], summary="List my reminders")
async def list_reminders(
    identity: CurrentUser = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_db_session),
) -> List[ReminderOut]:
    reminders = await RemindersService(db).list_for_user(identity.user_id)
    return [ReminderOut.from_orm_reminder(r) for r in reminders]


@router.post(
    "",
    response_model=ReminderOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a reminder",
)
async def create_reminder(
    payload: ReminderCreate = Body(...),
    identity: CurrentUser = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_db_session),
) -> ReminderOut:
    # Дни не переданы: напоминание на каждый день
    days: WeekdayMask | None = payload.days.to_mask() if payload.days is not None else None
    try:
        reminder: Reminder = await RemindersService(db).create_reminder(
            user_id=identity.user_id,
            title=payload.title,
            reminder_type=payload.type,
            time=payload.time,
            days=days,
            notes=payload.notes,
        )
    except ReminderValidationError as exc:
        raise _invalid(exc) from exc
    return ReminderOut.from_orm_reminder(reminder)


@router.put("/{reminder_id}", response_model=ReminderOut, summary="Update a reminder")
async def update_reminder(
    reminder_id: str,
    payload: ReminderUpdate = Body(...),
    identity: CurrentUser = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_db_session),
) -> ReminderOut:
    try:
        reminder = await RemindersService(db).update_reminder(
            identity.user_id, reminder_id, payload.to_changes()
        )
    except ReminderValidationError as exc:
        raise _invalid(exc) from exc
    if reminder is None:
        raise _not_found()
    return ReminderOut.from_orm_reminder(reminder)


@router.patch("/{reminder_id}/toggle", response_model=ReminderOut, summary="Enable/disable a reminder")
async def toggle_reminder(
    reminder_id: str,
    identity: CurrentUser = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_db_session),
) -> ReminderOut:
    reminder = await RemindersService(db).toggle_reminder(identity.user_id, reminder_id)
    if reminder is None:
        raise _not_found()
    return ReminderOut.from_orm_reminder(reminder)


@router.delete("/{reminder_id}", summary="Delete a reminder")
async def delete_reminder(
    reminder_id: str,
    identity: CurrentUser = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_db_session),
) -> dict[str, str]:
    removed = await RemindersService(db).delete_reminder(identity.user_id, reminder_id)
    if not removed:
        raise _not_found()
    return {"message": "Reminder deleted successfully."}
