# alembic/env.py

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

# --- Конфигурация ---
# Это объект конфигурации Alembic, читает alembic.ini
config = context.config

# Интерпретируем файл конфигурации для стандартного логирования Python.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# --- Метаданные Моделей ---
from pakhealth.config import settings
from pakhealth.db.base import Base

# Импортируем все модули с моделями, чтобы Alembic их "увидел"
import pakhealth.core.users.models # noqa
import pakhealth.core.reminders.models # noqa
import pakhealth.core.notifications.models # noqa

target_metadata = Base.metadata


def _database_url() -> str:
    # DATABASE_URL из окружения важнее sqlalchemy.url из alembic.ini
    return settings.DATABASE_URL or config.get_main_option("sqlalchemy.url")


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.
    Генерирует SQL скрипты без подключения к БД.
    """
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    """Вспомогательная функция для запуска миграций с готовым соединением."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Run migrations in 'online' mode.
    Подключается к БД и применяет миграции.
    """
    db_url = _database_url()
    if not db_url:
        raise ValueError("Database URL not configured (DATABASE_URL or sqlalchemy.url)")

    # Адаптируем URL для asyncpg, если он в синхронном формате
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif db_url.startswith("postgresql+psycopg2://"):
        db_url = db_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    elif not db_url.startswith("postgresql+asyncpg://"):
        raise ValueError(f"Unsupported DB URL scheme for async operation: {db_url}")

    # NullPool: Alembic выполняет короткие операции
    connectable = create_async_engine(db_url, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
