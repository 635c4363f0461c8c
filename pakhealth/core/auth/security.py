# pakhealth/core/auth/security.py

from __future__ import annotations # Обязательно

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from pakhealth.config import settings # Наш синглтон настроек
from pakhealth.db.base import get_async_db_session
from pakhealth.core.users.models import User

from .schemas import CurrentUser, TokenData

log = logging.getLogger(__name__)

# 'tokenUrl' нужен только для OpenAPI; клиент получает токен через /api/auth/login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

# --- Функции для работы с JWT ---

def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Создает JWT токен доступа.

    Args:
        data (dict): Данные для включения в payload токена.
                     Ключ 'user_id' будет использован как 'sub'.
        expires_delta (timedelta | None, optional): Время жизни токена.
                                                     Если None, используется значение из настроек.

    Returns:
        str: Сгенерированный JWT токен.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    if "user_id" in to_encode:
        to_encode["sub"] = str(to_encode.pop("user_id")) # sub всегда строка
    elif "sub" not in to_encode:
        raise ValueError("Missing 'user_id' or 'sub' in data for JWT")

    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    log.debug("Created JWT token for sub: %s", to_encode.get("sub"))
    return encoded_jwt


async def verify_token(token: str, credentials_exception: HTTPException) -> TokenData:
    """
    Верифицирует JWT токен и возвращает данные из него.

    Raises:
        HTTPException: Если токен невалиден или истек.
    """
    try:
        # Срок действия (exp) проверяет сам jwt.decode
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
        user_id: str | None = payload.get("sub")
        if user_id is None:
            log.warning("Token verification failed: 'sub' (user_id) claim missing.")
            raise credentials_exception
        token_data = TokenData(user_id=user_id)
    except JWTError as e:
        log.warning("Token verification failed: JWTError - %s", e)
        raise credentials_exception from e
    except ValidationError as e:
        log.warning("Token verification failed: ValidationError - %s", e)
        raise credentials_exception from e

    log.debug("Token verified successfully for user_id: %s", token_data.user_id)
    return token_data

# --- FastAPI Dependency для получения текущего пользователя ---

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_async_db_session)
) -> User:
    """
    FastAPI зависимость для получения текущего аутентифицированного пользователя.

    Верифицирует токен, извлекает user_id и загружает пользователя из БД.

    Raises:
        HTTPException: 401, если аутентификация не удалась или пользователя
                       из токена больше нет в БД.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token_data = await verify_token(token, credentials_exception)

    log.debug("Fetching user from DB with id: %s", token_data.user_id)
    user = await db.get(User, token_data.user_id)
    if user is None:
        log.warning("User with id %s from valid token not found in DB.", token_data.user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    log.debug("Authenticated user retrieved: %r", user)
    return user


async def get_current_identity(
    current_user: User = Depends(get_current_user)
) -> CurrentUser:
    """
    FastAPI зависимость: только (user_id, is_developer) текущего пользователя.
    """
    return CurrentUser(user_id=current_user.id, is_developer=bool(current_user.is_developer))
