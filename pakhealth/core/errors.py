# pakhealth/core/errors.py
"""
Доменные исключения.

HTTP-слой переводит их в ``HTTPException``; движок напоминаний и диспетчер
пушей ловят их у своих границ и никогда не пропускают наружу.
"""

from __future__ import annotations


class PakHealthError(Exception):
    """Базовое исключение проекта."""


class ReminderValidationError(PakHealthError, ValueError):
    """Некорректные поля напоминания при создании/обновлении."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class EmailAlreadyRegistered(PakHealthError):
    """Пользователь с таким email уже существует."""


class InvalidCredentials(PakHealthError):
    """Неверная пара email/пароль."""


class PushGatewayUnavailable(PakHealthError):
    """Push-провайдер не сконфигурирован или не смог инициализироваться."""


class PushGatewayError(PakHealthError):
    """Ошибка отправки через push-провайдер (токен, сеть, квота)."""


__all__ = [
    "PakHealthError",
    "ReminderValidationError",
    "EmailAlreadyRegistered",
    "InvalidCredentials",
    "PushGatewayUnavailable",
    "PushGatewayError",
]
