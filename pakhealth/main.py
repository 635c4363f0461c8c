# pakhealth/main.py

from __future__ import annotations
import logging

from fastapi import FastAPI, status

from pakhealth.api.v1.auth import router as auth_router
from pakhealth.api.v1.users import router as users_router
from pakhealth.api.v1.reminders import router as reminders_router
from pakhealth.api.v1.notifications import router as notifications_router
from pakhealth.api.v1.health import router as health_router
from pakhealth.config import settings
from pakhealth.core.push import get_push_dispatcher

# Configure basic logging
logging.basicConfig(level=logging.INFO)
log = logging.getLogger(__name__)
description = """
PakHealth API: аккаунты, повторяющиеся напоминания и журнал уведомлений.
Напоминания рассылает celery beat (`pakhealth.workers.tasks.check_reminders`).
"""
tags_metadata = [
    {"name": "Authentication", "description": "Register, login, logout."},
    {"name": "Users", "description": "Profile and device push token."},
    {"name": "Reminders", "description": "Recurring reminders of the current user."},
    {"name": "Notifications", "description": "Notification inbox and preferences."},
    {"name": "Health", "description": "Liveness checks."},
]

app = FastAPI(
    title="PakHealth API",
    description=description,
    version="0.3.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=tags_metadata,
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(reminders_router)
app.include_router(notifications_router)
app.include_router(health_router)

log.info("\U0001F331 FastAPI application configured. Environment: %s", settings.ENVIRONMENT)

@app.on_event("startup")
async def startup_event() -> None:
    dispatcher = get_push_dispatcher()
    log.info(
        "\U0001F680 FastAPI application startup complete. Push gateway: %s",
        dispatcher.provider.name if dispatcher.is_initialized else "not initialized",
    )

@app.on_event("shutdown")
async def shutdown_event() -> None:
    log.info("\U0001F44B FastAPI application shutdown.")

@app.get("/healthz", tags=["Health"], status_code=status.HTTP_200_OK)
async def health_check():
    """Basic health check endpoint."""
    return {"status": "ok", "environment": settings.ENVIRONMENT}
