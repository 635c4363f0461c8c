# pakhealth/core/push/noop.py

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, TypedDict

from .base import BasePushProvider

log = logging.getLogger(__name__)


class SentPush(TypedDict):
    message_id: str
    token: str
    title: str
    body: str
    data: Dict[str, str]


class NoOpPushProvider(BasePushProvider):
    """
    Заглушка push-шлюза; складывает сообщения в память.
    Используется в dev и в тестах.
    """

    name: str = "noop"

    def __init__(self) -> None:
        self.sent: List[SentPush] = []
        log.info("Initialized NoOpPushProvider (in-memory)")

    async def send(self, token: str, title: str, body: str, data: Dict[str, str]) -> str:
        message_id = f"noop-{uuid.uuid4()}"
        self.sent.append(
            SentPush(message_id=message_id, token=token, title=title, body=body, data=dict(data))
        )
        log.info("NoOp: push '%s' recorded as %s", title, message_id)
        return message_id


__all__ = ["NoOpPushProvider", "SentPush"]
