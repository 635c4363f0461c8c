# pakhealth/core/push/dispatcher.py

"""Uniform wrapper over the push gateway."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .base import BasePushProvider

log = logging.getLogger(__name__)

GATEWAY_NOT_INITIALIZED = "gateway not initialized"
NO_TOKEN = "no token"


@dataclass(frozen=True)
class DeliveryResult:
    """Результат отправки: ``delivered`` с ID сообщения или ``failed`` с причиной."""

    delivered: bool
    message_id: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, message_id: str) -> "DeliveryResult":
        return cls(delivered=True, message_id=message_id)

    @classmethod
    def failed(cls, reason: str) -> "DeliveryResult":
        return cls(delivered=False, reason=reason)

    def as_dict(self) -> dict[str, Any]:
        if self.delivered:
            return {"success": True, "messageId": self.message_id}
        return {"success": False, "error": self.reason}


class PushDispatcher:
    """
    Отправляет push через провайдера и никогда не бросает исключений.

    Диспетчер без провайдера (шлюз не сконфигурирован) всегда возвращает
    ``failed("gateway not initialized")``.
    """

    def __init__(self, provider: BasePushProvider | None, timeout: float | None = None) -> None:
        self._provider = provider
        self._timeout = timeout

    @property
    def provider(self) -> BasePushProvider | None:
        return self._provider

    @property
    def is_initialized(self) -> bool:
        return self._provider is not None

    async def send(
        self,
        token: str | None,
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
    ) -> DeliveryResult:
        if self._provider is None:
            log.warning("Push gateway not initialized, skipping send of '%s'", title)
            return DeliveryResult.failed(GATEWAY_NOT_INITIALIZED)
        if not token:
            log.warning("No push token provided, skipping send of '%s'", title)
            return DeliveryResult.failed(NO_TOKEN)

        # FCM принимает в data только строки
        payload = {str(key): str(value) for key, value in (data or {}).items()}
        try:
            message_id = await asyncio.wait_for(
                self._provider.send(token, title, body, payload), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            log.error("Push send via '%s' timed out after %ss", self._provider.name, self._timeout)
            return DeliveryResult.failed(f"timed out after {self._timeout}s")
        except Exception as exc:
            log.error("Push send via '%s' failed: %s", self._provider.name, exc)
            return DeliveryResult.failed(str(exc) or type(exc).__name__)

        log.info("Push '%s' delivered via '%s': %s", title, self._provider.name, message_id)
        return DeliveryResult.ok(message_id)


__all__ = ["DeliveryResult", "PushDispatcher", "GATEWAY_NOT_INITIALIZED", "NO_TOKEN"]
