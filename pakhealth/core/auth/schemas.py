# pakhealth/core/auth/schemas.py

from __future__ import annotations # Обязательно для type hints

from typing import NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Token(BaseModel):
    """Схема для возврата JWT токена клиенту."""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """
    Схема для данных, хранящихся внутри JWT токена.
    ``user_id`` берётся из стандартного поля 'sub'.
    """
    user_id: str | None = Field(None, description="User ID within our application")


class CurrentUser(NamedTuple):
    """Минимальный контекст вызывающего: ID и флаг разработчика."""
    user_id: str
    is_developer: bool = False


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, description="At least 6 characters")
    name: str = Field(..., min_length=1, max_length=128)
    fcm_token: Optional[str] = Field(None, description="Device push token")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    fcm_token: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    is_developer: bool = False
    profile_image: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    diabetes_type: Optional[str] = None
    diagnosis_year: Optional[int] = None


class AuthResponse(BaseModel):
    """Ответ register/login: JWT и профиль пользователя."""
    token: str
    token_type: str = "bearer"
    user: UserOut
