# pakhealth/core/push/base.py
"""
Abstract base for push-notification providers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict


class BasePushProvider(ABC):
    """
    Асинхронный интерфейс push-шлюза.

    ``send`` возвращает идентификатор сообщения у провайдера либо бросает
    исключение; ловить его обязан вызывающий (см. ``PushDispatcher``).
    """

    name: str

    @abstractmethod
    async def send(self, token: str, title: str, body: str, data: Dict[str, str]) -> str:
        """
        Отправляет уведомление на устройство.

        Args:
            token (str): Токен устройства (FCM registration token).
            title (str): Заголовок уведомления.
            body (str): Текст уведомления.
            data (Dict[str, str]): Доп. данные; все значения строковые.

        Returns:
            str: ID сообщения у провайдера.

        Raises:
            PushGatewayError: При ошибке отправки.
        """
        ...


__all__ = ["BasePushProvider"]
