from dataclasses import dataclass, field
from datetime import datetime

import pytest

from pakhealth.core.reminders.evaluator import (
    compose_body,
    compose_title,
    iter_due_reminders,
    lead_buckets,
)
from pakhealth.core.reminders.recurrence import TimeOfDay, Weekday, WeekdayMask

MONDAY = datetime(2024, 1, 1)


@dataclass
class FakeReminder:
    id: str
    title: str
    time_of_day: TimeOfDay
    days: WeekdayMask = field(default_factory=WeekdayMask.all)
    reminder_type: str = "Medication"
    notes: str | None = None
    is_active: bool = True


def _at(hour, minute, second=0, day=MONDAY):
    return day.replace(hour=hour, minute=minute, second=second)


def _leads(now, reminders, **kwargs):
    return [event.lead_minutes for event in iter_due_reminders(now, reminders, **kwargs)]


@pytest.fixture
def monday_pill():
    return FakeReminder(
        id="r1",
        title="Metformin",
        time_of_day=TimeOfDay(8, 0),
        days=WeekdayMask.of([Weekday.MONDAY]),
    )


@pytest.mark.parametrize(
    "now, expected",
    [
        (_at(7, 45), [15]),
        (_at(7, 45, 59), [15]),
        (_at(7, 50), [10]),
        (_at(8, 0), [0]),
        (_at(8, 1), []),
        (_at(7, 46), []),
    ],
)
def test_monday_reminder_buckets(monday_pill, now, expected):
    assert _leads(now, [monday_pill]) == expected


def test_inactive_reminder_never_fires(monday_pill):
    monday_pill.is_active = False
    for now in (_at(7, 45), _at(7, 50), _at(8, 0)):
        assert _leads(now, [monday_pill]) == []


def test_disabled_weekday_never_fires(monday_pill):
    tuesday = datetime(2024, 1, 2)
    for now in (_at(7, 45, day=tuesday), _at(7, 50, day=tuesday), _at(8, 0, day=tuesday)):
        assert _leads(now, [monday_pill]) == []


def test_empty_mask_never_fires(monday_pill):
    monday_pill.days = WeekdayMask()
    assert _leads(_at(8, 0), [monday_pill]) == []


def test_weekday_is_taken_from_target_not_now():
    # Воскресенье 23:50 + 15 минут = понедельник 00:05
    reminder = FakeReminder(
        id="r2", title="Insulin", time_of_day=TimeOfDay(0, 5), days=WeekdayMask.of([Weekday.MONDAY])
    )
    sunday = datetime(2023, 12, 31)
    events = list(iter_due_reminders(_at(23, 50, day=sunday), [reminder]))
    assert [e.lead_minutes for e in events] == [15]
    assert events[0].fire_at == datetime(2024, 1, 1, 0, 5)


def test_event_content(monday_pill):
    monday_pill.notes = "After breakfast"
    (early,) = iter_due_reminders(_at(7, 45), [monday_pill])
    (exact,) = iter_due_reminders(_at(8, 0), [monday_pill])

    assert early.title == "Medication Reminder"
    assert early.body == "15 minutes remaining to Metformin\nAfter breakfast"
    assert early.data == {"reminder_id": "r1", "type": "reminder", "minutes_before": "15"}
    assert early.fire_at == _at(8, 0)
    assert not early.is_exact

    assert exact.body == "Time for Metformin!\nAfter breakfast"
    assert exact.data["minutes_before"] == "0"
    assert exact.is_exact


def test_compose_without_notes():
    reminder = FakeReminder(id="x", title="Walk", time_of_day=TimeOfDay(9, 0), reminder_type="Other")
    assert compose_title(reminder) == "Other Reminder"
    assert compose_body(reminder, 10) == "10 minutes remaining to Walk"
    assert compose_body(reminder, 0) == "Time for Walk!"


def test_events_across_buckets_are_ordered_and_not_merged():
    now = _at(7, 45)
    reminders = [
        FakeReminder(id="exact", title="A", time_of_day=TimeOfDay(7, 45)),
        FakeReminder(id="ten", title="B", time_of_day=TimeOfDay(7, 55)),
        FakeReminder(id="fifteen", title="C", time_of_day=TimeOfDay(8, 0)),
        FakeReminder(id="fifteen-2", title="D", time_of_day=TimeOfDay(8, 0)),
    ]
    events = list(iter_due_reminders(now, reminders))
    assert [(e.reminder.id, e.lead_minutes) for e in events] == [
        ("fifteen", 15),
        ("fifteen-2", 15),
        ("ten", 10),
        ("exact", 0),
    ]


def test_evaluation_is_deterministic(monday_pill):
    first = list(iter_due_reminders(_at(7, 50), [monday_pill]))
    second = list(iter_due_reminders(_at(7, 50), [monday_pill]))
    assert first == second


def test_custom_lead_minutes(monday_pill):
    assert _leads(_at(7, 30), [monday_pill], lead_minutes=(30,)) == [30]
    assert _leads(_at(7, 45), [monday_pill], lead_minutes=(30,)) == []


def test_lead_buckets_dedup_and_exact_last():
    assert lead_buckets((15, 10)) == (15, 10, 0)
    assert lead_buckets((10, 0, 10)) == (10, 0)
    assert lead_buckets(()) == (0,)
