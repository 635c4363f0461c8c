# pakhealth/workers/tasks.py

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from celery import Celery
from celery.schedules import crontab
from celery.signals import beat_init
from celery.utils.log import get_task_logger
from redis import Redis
from redis.exceptions import RedisError
from redis.lock import Lock

from pakhealth.config import settings
from pakhealth.core.push import get_push_dispatcher
from pakhealth.core.reminders.scheduler import ReminderTickScheduler, TickReport
from pakhealth.db.base import engine

log = get_task_logger(__name__)

TICK_LOCK_NAME = "pakhealth:reminders:tick"
BEAT_ENTRY = "check-reminders"
CHECK_REMINDERS_TASK = "pakhealth.workers.tasks.check_reminders"
# Тик, не взятый воркером в пределах своей минуты, отбрасывается: догонять пропущенные минуты нельзя
TICK_EXPIRES_SECONDS = 55

celery_app = Celery(
    "pakhealth",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=['pakhealth.workers.tasks'],
    task_serializer='json',
    result_serializer='json',
    accept_content=['json']
)
celery_app.conf.update(
    task_track_started=True,
    # Напоминания сравниваются по локальному времени сервера
    enable_utc=False,
    broker_connection_retry_on_startup=True,
)


def _beat_entry() -> Dict[str, Any]:
    return {
        "task": CHECK_REMINDERS_TASK,
        "schedule": crontab(),
        "options": {"expires": TICK_EXPIRES_SECONDS},
    }


# Beat копирует расписание при создании планировщика, до сигнала beat_init
celery_app.conf.beat_schedule = {BEAT_ENTRY: _beat_entry()}

_redis_client: Optional[Redis] = None


def get_redis_client() -> Redis:
    """Один Redis-клиент (и пул соединений) на процесс воркера."""
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(settings.REDIS_URL, socket_connect_timeout=2)
    return _redis_client


def _tick_lock() -> Lock:
    """Неблокирующий Redis-лок на время одного тика."""
    return get_redis_client().lock(TICK_LOCK_NAME, timeout=settings.REMINDER_TICK_LOCK_TIMEOUT, blocking=False)


async def _run_tick_logic() -> TickReport:
    scheduler = ReminderTickScheduler(
        dispatcher=get_push_dispatcher(),
        lead_minutes=settings.REMINDER_LEAD_MINUTES,
    )
    try:
        return await scheduler.run_tick()
    finally:
        # Пул соединений привязан к event loop, а asyncio.run создаёт новый на каждый тик
        await engine.dispose()


@celery_app.task(name=CHECK_REMINDERS_TASK, ignore_result=False)
def check_reminders() -> Dict[str, Any]:
    """
    Один тик движка напоминаний. Если предыдущий тик ещё держит лок, тик пропускается.
    """
    lock: Optional[Lock] = _tick_lock()
    try:
        acquired = lock.acquire(blocking=False)
    except RedisError as exc:
        log.warning("Redis unavailable for tick lock (%s); running reminder tick unguarded", exc)
        lock, acquired = None, True

    if not acquired:
        log.warning("Previous reminder tick still running; skipping this one")
        return {"skipped": True}

    try:
        report = asyncio.run(_run_tick_logic())
    finally:
        if lock is not None:
            try:
                lock.release()
            except RedisError as exc:
                log.warning("Failed to release reminder tick lock: %s", exc)

    return {"skipped": False, **report.as_dict()}


def start_scheduler() -> None:
    """
    Регистрирует ежеминутный запуск ``check_reminders`` в celery beat (если
    запись была убрана из конфигурации) и ставит в очередь один немедленный тик.
    """
    schedule = dict(celery_app.conf.beat_schedule or {})
    schedule[BEAT_ENTRY] = _beat_entry()
    celery_app.conf.beat_schedule = schedule
    log.info("Reminder scheduler registered: '%s' every minute", BEAT_ENTRY)
    check_reminders.apply_async(expires=TICK_EXPIRES_SECONDS)


@beat_init.connect
def _on_beat_init(sender=None, **kwargs) -> None:
    start_scheduler()


__all__ = ["celery_app", "check_reminders", "start_scheduler"]
