import logging
from datetime import time

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from pakhealth.core.errors import ReminderValidationError
from pakhealth.core.reminders.recurrence import TimeOfDay, Weekday, WeekdayMask
from pakhealth.core.reminders.service import RemindersService
from pakhealth.core.users.service import UsersService
from pakhealth.db.base import async_session_context


@pytest_asyncio.fixture
async def db_session(setup_db) -> AsyncSession:
    async with async_session_context() as session:
        yield session


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession):
    return await UsersService(db_session).register("owner@example.com", "secret1", "Owner", fcm_token="tok")


@pytest.mark.asyncio
async def test_create_defaults_to_every_day(db_session: AsyncSession, owner):
    service = RemindersService(db_session)
    reminder = await service.create_reminder(owner.id, "Metformin", "Medication", "08:00", notes="with food")

    assert reminder.days == WeekdayMask.all()
    assert reminder.time == time(8, 0)
    assert reminder.time_of_day == TimeOfDay(8, 0)
    assert reminder.is_active is True
    assert reminder.notes == "with food"


@pytest.mark.asyncio
async def test_create_with_explicit_days(db_session: AsyncSession, owner):
    days = WeekdayMask.from_flags({"monday": True, "thursday": True})
    reminder = await RemindersService(db_session).create_reminder(owner.id, "Feet", "Foot Check", "21:30", days=days)
    assert list(reminder.days) == [Weekday.MONDAY, Weekday.THURSDAY]


@pytest.mark.asyncio
async def test_create_with_empty_mask_is_accepted_with_warning(db_session: AsyncSession, owner, caplog):
    with caplog.at_level(logging.WARNING, logger="pakhealth.core.reminders.service"):
        reminder = await RemindersService(db_session).create_reminder(
            owner.id, "Never", "Other", "10:00", days=WeekdayMask()
        )
    assert reminder.days.is_empty()
    assert "never fire" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"reminder_type": "Yoga", "time": "08:00"}, "type"),
        ({"reminder_type": "Medication", "time": "8:00"}, "time"),
        ({"reminder_type": "Medication", "time": "24:00"}, "time"),
    ],
)
async def test_create_rejects_invalid_fields(db_session: AsyncSession, owner, kwargs, field):
    with pytest.raises(ReminderValidationError) as exc_info:
        await RemindersService(db_session).create_reminder(owner.id, "x", **kwargs)
    assert exc_info.value.field == field


@pytest.mark.asyncio
async def test_update_partial_days_and_fields(db_session: AsyncSession, owner):
    service = RemindersService(db_session)
    reminder = await service.create_reminder(owner.id, "Sugar", "Sugar Check", "07:00")

    updated = await service.update_reminder(
        owner.id, reminder.id, {"days": {"sunday": False, "monday": None}, "time": "07:30", "is_active": False}
    )

    assert updated.time_of_day == TimeOfDay(7, 30)
    assert Weekday.SUNDAY not in updated.days
    assert Weekday.MONDAY in updated.days
    assert len(updated.days) == 6
    assert updated.is_active is False
    assert updated.title == "Sugar"


@pytest.mark.asyncio
async def test_toggle_flips_active(db_session: AsyncSession, owner):
    service = RemindersService(db_session)
    reminder = await service.create_reminder(owner.id, "Doc", "Doctor Visit", "11:00")

    assert (await service.toggle_reminder(owner.id, reminder.id)).is_active is False
    assert (await service.toggle_reminder(owner.id, reminder.id)).is_active is True


@pytest.mark.asyncio
async def test_foreign_reminder_is_invisible(db_session: AsyncSession, owner):
    service = RemindersService(db_session)
    reminder = await service.create_reminder(owner.id, "Mine", "Other", "12:00")

    assert await service.get_owned("someone-else", reminder.id) is None
    assert await service.toggle_reminder("someone-else", reminder.id) is None
    assert await service.update_reminder("someone-else", reminder.id, {"title": "x"}) is None
    assert await service.delete_reminder("someone-else", reminder.id) is False
    assert await service.list_for_user("someone-else") == []


@pytest.mark.asyncio
async def test_delete_reminder(db_session: AsyncSession, owner):
    service = RemindersService(db_session)
    reminder = await service.create_reminder(owner.id, "del", "Other", "12:00")

    assert await service.delete_reminder(owner.id, reminder.id) is True
    assert await service.get_owned(owner.id, reminder.id) is None
    assert await service.delete_reminder(owner.id, reminder.id) is False


@pytest.mark.asyncio
async def test_list_active_with_tokens(db_session: AsyncSession, owner):
    service = RemindersService(db_session)
    morning = await service.create_reminder(owner.id, "Morning", "Medication", "08:00")
    evening = await service.create_reminder(owner.id, "Evening", "Medication", "20:00")
    paused = await service.create_reminder(owner.id, "Paused", "Medication", "08:00")
    await service.toggle_reminder(owner.id, paused.id)

    rows = await service.list_active_with_tokens()
    assert {(r.id, token) for r, token in rows} == {(morning.id, "tok"), (evening.id, "tok")}

    rows = await service.list_active_with_tokens(times=[time(8, 0)])
    assert [r.id for r, _ in rows] == [morning.id]
