import contextlib
from datetime import datetime, time

import pytest
import pytest_asyncio
from sqlalchemy import select

from pakhealth.core.notifications.models import Notification
from pakhealth.core.notifications.service import NotificationsService
from pakhealth.core.push import PushDispatcher
from pakhealth.core.push.base import BasePushProvider
from pakhealth.core.reminders.recurrence import Weekday, WeekdayMask
from pakhealth.core.reminders.scheduler import ReminderTickScheduler
from pakhealth.core.reminders.service import RemindersService
from pakhealth.core.users.service import UsersService
from pakhealth.db.base import async_session_context

MONDAY_0550 = datetime(2024, 1, 1, 5, 50, 12)


class BrokenProvider(BasePushProvider):
    name = "broken"

    async def send(self, token, title, body, data):
        raise RuntimeError("gateway down")


@pytest_asyncio.fixture(autouse=True)
async def _db(setup_db):
    yield


async def _user(email, fcm_token=None):
    async with async_session_context() as session:
        user = await UsersService(session).register(email, "secret1", "User", fcm_token=fcm_token)
        return user.id


async def _reminder(user_id, title="Metformin", at="06:00", days=None, active=True):
    async with async_session_context() as session:
        service = RemindersService(session)
        reminder = await service.create_reminder(user_id, title, "Medication", at, days=days)
        if not active:
            await service.toggle_reminder(user_id, reminder.id)
        return reminder.id


async def _notifications():
    async with async_session_context() as session:
        return (await session.scalars(select(Notification).order_by(Notification.body))).all()


@pytest.mark.asyncio
async def test_ten_minute_lead_fires_and_pushes(dispatcher, push_provider):
    user_id = await _user("a@example.com", fcm_token="device-token")
    reminder_id = await _reminder(user_id)

    report = await ReminderTickScheduler(dispatcher).run_tick(MONDAY_0550)

    assert (report.fired, report.delivered, report.failed, report.errors) == (1, 1, 0, 0)
    (row,) = await _notifications()
    assert row.user_id == user_id
    assert row.title == "Medication Reminder"
    assert "10 minutes" in row.body
    assert row.notification_type == "reminder"
    assert row.is_sent is True
    assert row.sent_at == MONDAY_0550
    assert row.scheduled_at == datetime(2024, 1, 1, 6, 0)
    assert row.data == {"reminder_id": reminder_id, "type": "reminder", "minutes_before": "10"}

    (pushed,) = push_provider.sent
    assert pushed["token"] == "device-token"
    assert pushed["data"]["minutes_before"] == "10"


@pytest.mark.asyncio
async def test_two_runs_for_same_instant_create_two_rows(dispatcher, push_provider):
    user_id = await _user("a@example.com", fcm_token="device-token")
    await _reminder(user_id)

    scheduler = ReminderTickScheduler(dispatcher)
    await scheduler.run_tick(MONDAY_0550)
    await scheduler.run_tick(MONDAY_0550)

    assert len(await _notifications()) == 2
    assert len(push_provider.sent) == 2


@pytest.mark.asyncio
async def test_user_without_token_gets_unsent_record_only(dispatcher, push_provider):
    user_id = await _user("a@example.com")
    await _reminder(user_id)

    report = await ReminderTickScheduler(dispatcher).run_tick(MONDAY_0550)

    assert report.without_token == 1
    assert report.delivered == 0
    (row,) = await _notifications()
    assert row.is_sent is False
    assert row.sent_at is None
    assert push_provider.sent == []


@pytest.mark.asyncio
async def test_failed_push_keeps_the_record():
    user_id = await _user("a@example.com", fcm_token="device-token")
    await _reminder(user_id)

    report = await ReminderTickScheduler(PushDispatcher(BrokenProvider())).run_tick(MONDAY_0550)

    assert report.failed == 1
    assert report.errors == 0
    (row,) = await _notifications()
    assert row.is_sent is True


@pytest.mark.asyncio
async def test_one_failing_firing_does_not_stop_others(dispatcher, push_provider, monkeypatch):
    user_id = await _user("a@example.com", fcm_token="device-token")
    await _reminder(user_id, title="Broken")
    await _reminder(user_id, title="Fine")

    original = NotificationsService.create_notification

    async def flaky(self, *args, **kwargs):
        if "Broken" in kwargs["body"]:
            raise RuntimeError("db hiccup")
        return await original(self, *args, **kwargs)

    monkeypatch.setattr(NotificationsService, "create_notification", flaky)

    report = await ReminderTickScheduler(dispatcher).run_tick(MONDAY_0550)

    assert report.fired == 2
    assert report.errors == 1
    assert report.delivered == 1
    (row,) = await _notifications()
    assert "Fine" in row.body
    assert len(push_provider.sent) == 1


@pytest.mark.asyncio
async def test_inactive_and_off_day_reminders_are_skipped(dispatcher):
    user_id = await _user("a@example.com", fcm_token="device-token")
    await _reminder(user_id, title="Paused", active=False)
    await _reminder(user_id, title="Tuesday only", days=WeekdayMask.of([Weekday.TUESDAY]))
    await _reminder(user_id, title="Later", at="09:00")

    report = await ReminderTickScheduler(dispatcher).run_tick(MONDAY_0550)

    assert report.fired == 0
    assert report.candidates == 1  # 'Tuesday only' проходит предфильтр по времени
    assert await _notifications() == []


@pytest.mark.asyncio
async def test_all_three_buckets_in_one_tick(dispatcher, push_provider):
    user_id = await _user("a@example.com", fcm_token="device-token")
    await _reminder(user_id, title="Fifteen", at="06:05")
    await _reminder(user_id, title="Ten", at="06:00")
    await _reminder(user_id, title="Now", at="05:50")

    report = await ReminderTickScheduler(dispatcher).run_tick(MONDAY_0550)

    assert report.fired == 3
    assert [p["data"]["minutes_before"] for p in push_provider.sent] == ["15", "10", "0"]


@pytest.mark.asyncio
async def test_clock_is_used_when_now_is_omitted(dispatcher):
    user_id = await _user("a@example.com", fcm_token="device-token")
    await _reminder(user_id)

    scheduler = ReminderTickScheduler(dispatcher, clock=lambda: datetime(2024, 1, 1, 5, 45))
    report = await scheduler.run_tick()

    assert report.now == datetime(2024, 1, 1, 5, 45)
    (row,) = await _notifications()
    assert row.body.startswith("15 minutes remaining to")


@pytest.mark.asyncio
async def test_candidate_load_failure_yields_empty_report(dispatcher):
    @contextlib.asynccontextmanager
    async def broken_sessions():
        raise RuntimeError("db unreachable")
        yield  # pragma: no cover

    report = await ReminderTickScheduler(dispatcher, session_factory=broken_sessions).run_tick(MONDAY_0550)

    assert report.fired == 0
    assert report.candidates == 0


@pytest.mark.asyncio
async def test_candidate_times_cover_every_bucket(dispatcher):
    scheduler = ReminderTickScheduler(dispatcher, lead_minutes=[15, 10])
    assert scheduler.lead_minutes == (15, 10, 0)
    assert scheduler.candidate_times(MONDAY_0550) == [time(5, 50), time(6, 0), time(6, 5)]
