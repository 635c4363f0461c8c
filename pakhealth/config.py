# pakhealth/config.py

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Единый конфиг проекта. Читает переменные окружения.
    Pydantic v2 + pydantic-settings.
    """
    model_config = SettingsConfigDict(
        # Переменные окружения передаёт docker-compose, .env файл не читаем
        case_sensitive=False,
        extra="ignore",
    )

    # --- Основные настройки ---
    ENVIRONMENT: str = Field("dev", description="Application environment (dev, test, prod)")

    # --- База данных ---
    DATABASE_URL: str = Field(..., description="Async database connection URL (e.g., postgresql+asyncpg://...)")

    # --- Redis / Celery ---
    REDIS_URL: str = Field("redis://redis:6379/0", description="URL for Redis connection")
    CELERY_BROKER_URL: Optional[str] = Field(None, description="Celery broker URL (defaults to REDIS_URL)")
    CELERY_RESULT_BACKEND: Optional[str] = Field(None, description="Celery result backend URL (defaults to REDIS_URL)")

    # --- JWT ---
    JWT_SECRET_KEY: str = Field(..., description="Secret key for signing JWT tokens")
    JWT_ALGORITHM: str = Field("HS256", description="Algorithm for JWT signing")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24 * 7, description="JWT access token lifetime in minutes")  # 7 дней

    # --- Push (FCM) ---
    PUSH_PROVIDER: str = Field("fcm", description="Push provider to use ('fcm', 'noop')")
    FIREBASE_SERVICE_ACCOUNT: Optional[str] = Field(None, description="Firebase service account JSON (string)")
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = Field(None, description="Path to Google application default credentials")
    PUSH_SEND_TIMEOUT_SECONDS: float = Field(10.0, description="Timeout for a single push send call")

    # --- Напоминания ---
    REMINDER_LEAD_MINUTES: List[int] = Field(
        default_factory=lambda: [15, 10],
        description="Advance notice offsets in minutes (exact time is always evaluated)",
    )
    REMINDER_TICK_LOCK_TIMEOUT: int = Field(55, description="Redis tick lock TTL in seconds")

    @field_validator("REMINDER_LEAD_MINUTES")
    @classmethod
    def check_lead_minutes(cls, value: List[int]) -> List[int]:
        if any(minutes <= 0 for minutes in value):
            raise ValueError("REMINDER_LEAD_MINUTES must contain positive minute offsets")
        return value

    @model_validator(mode='after')
    def set_celery_defaults(self) -> 'Settings':
        if self.CELERY_BROKER_URL is None:
            log.debug("Setting CELERY_BROKER_URL default from REDIS_URL")
            self.CELERY_BROKER_URL = self.REDIS_URL
        if self.CELERY_RESULT_BACKEND is None:
            log.debug("Setting CELERY_RESULT_BACKEND default from REDIS_URL")
            self.CELERY_RESULT_BACKEND = self.REDIS_URL
        return self


try:
    settings = Settings()
    log.info("Settings loaded successfully for ENVIRONMENT=%s", settings.ENVIRONMENT)
    log.debug("Loaded settings: DB URL=%s..., Redis URL=%s, Push provider=%s",
             str(settings.DATABASE_URL)[:25],
             settings.REDIS_URL,
             settings.PUSH_PROVIDER)
except Exception:
    log.exception("Failed to instantiate Settings.")
    raise
