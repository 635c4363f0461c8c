# pakhealth/core/users/models.py
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from pakhealth.db.base import Base


class User(Base):
    __tablename__ = 'users'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), comment="Internal User ID")
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False, comment="Lower-cased login email")
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False, comment="User display name")
    # FCM токен устройства; без него напоминания только сохраняются в БД
    fcm_token: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    is_developer: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Профиль
    profile_image: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    diabetes_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    diagnosis_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_active: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id!r} email={self.email!r} token={'yes' if self.fcm_token else 'no'}>"
