# pakhealth/core/users/service.py

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pakhealth.core.errors import EmailAlreadyRegistered, InvalidCredentials
from pakhealth.core.users.models import User

log = logging.getLogger(__name__)

# Поля профиля, которые пользователь может менять сам
PROFILE_FIELDS = ("name", "profile_image", "age", "gender", "diabetes_type", "diagnosis_year", "fcm_token")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        log.warning("Stored password hash is malformed")
        return False


class UsersService:
    """
    Асинхронный сервис для работы с пользователями.
    """
    model = User

    def __init__(self, db_session: AsyncSession):
        self.db: AsyncSession = db_session

    async def get_user(self, user_id: str) -> User | None:
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.strip().lower())
        return (await self.db.scalars(stmt)).first()

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        fcm_token: str | None = None,
    ) -> User:
        """
        Регистрирует нового пользователя.

        Raises:
            EmailAlreadyRegistered: Если email уже занят.
        """
        normalized = email.strip().lower()
        if await self.get_by_email(normalized) is not None:
            log.info("Registration rejected: email %s already registered", normalized)
            raise EmailAlreadyRegistered("Email already registered. Please login.")

        user = User(
            email=normalized,
            password_hash=hash_password(password),
            name=name,
            fcm_token=fcm_token or None,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        log.info("Registered user id=%s", user.id)
        return user

    async def authenticate(self, email: str, password: str, fcm_token: str | None = None) -> User:
        """
        Проверяет пароль, обновляет last_active и (если передан) FCM токен.

        Raises:
            InvalidCredentials: Неверный email или пароль.
        """
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            log.info("Login failed for email %s", email.strip().lower())
            raise InvalidCredentials("Invalid email or password.")

        user.last_active = datetime.now(timezone.utc)
        if fcm_token:
            user.fcm_token = fcm_token
        await self.db.flush()
        log.info("User %s logged in (fcm token %s)", user.id, "updated" if fcm_token else "unchanged")
        return user

    async def update_profile(self, user: User, changes: Mapping[str, Any]) -> User:
        """Частичное обновление профиля; неизвестные поля игнорируются."""
        applied = []
        for field_name in PROFILE_FIELDS:
            if field_name in changes:
                setattr(user, field_name, changes[field_name])
                applied.append(field_name)
        if applied:
            await self.db.flush()
            await self.db.refresh(user)
        log.info("Updated profile for user %s: %s", user.id, applied or "nothing")
        return user

    async def set_fcm_token(self, user: User, fcm_token: str) -> User:
        log.debug("Registering FCM token for user %s", user.id)
        user.fcm_token = fcm_token
        await self.db.flush()
        return user
