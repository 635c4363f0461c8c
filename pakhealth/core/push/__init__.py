"""
Push subsystem package.

• ``BasePushProvider`` – абстрактный интерфейс push-шлюза.
• ``PushDispatcher`` / ``DeliveryResult`` – обёртка, которая никогда не бросает.
• ``get_push_dispatcher()`` – фабрика диспетчера по ``settings.PUSH_PROVIDER``.

Ленивая загрузка (``importlib.import_module``) исключает firebase-admin
в dev/CI, пока он реально не нужен.
"""
from __future__ import annotations

import importlib
import logging
from typing import Callable, Dict, Type

from pakhealth.config import settings
from pakhealth.core.errors import PushGatewayUnavailable
from .base import BasePushProvider
from .dispatcher import DeliveryResult, PushDispatcher

log = logging.getLogger(__name__)


def _lazy_import(module_suffix: str, class_name: str) -> Type[BasePushProvider]:
    module = importlib.import_module(f"{__name__}{module_suffix}")
    return getattr(module, class_name)


_PROVIDER_LOADERS: Dict[str, Callable[[], Type[BasePushProvider]]] = {
    "noop": lambda: _lazy_import(".noop", "NoOpPushProvider"),
    "fcm": lambda: _lazy_import(".fcm", "FCMPushProvider"),
}

_dispatcher_instance: PushDispatcher | None = None


def build_push_dispatcher(name: str | None = None) -> PushDispatcher:
    """
    Создать диспетчер с провайдером ``name`` (или ``settings.PUSH_PROVIDER``).

    Если провайдер не удалось инициализировать (нет credentials и т. п.),
    возвращается диспетчер без провайдера: отправки будут ``failed``, но
    процесс не падает.
    """
    provider_key = (name or settings.PUSH_PROVIDER).lower()
    loader = _PROVIDER_LOADERS.get(provider_key)
    if loader is None:
        raise ValueError(f"Unknown push provider: {provider_key}")
    try:
        provider = loader()()
    except (PushGatewayUnavailable, ImportError) as exc:
        log.warning("Push provider '%s' not initialized: %s", provider_key, exc)
        return PushDispatcher(None, timeout=settings.PUSH_SEND_TIMEOUT_SECONDS)
    log.info("Push provider initialized: %s", provider.name)
    return PushDispatcher(provider, timeout=settings.PUSH_SEND_TIMEOUT_SECONDS)


def get_push_dispatcher() -> PushDispatcher:
    """FastAPI-зависимость / фабрика для ЕДИНСТВЕННОГО экземпляра диспетчера в процессе."""
    global _dispatcher_instance
    if _dispatcher_instance is None:
        _dispatcher_instance = build_push_dispatcher()
    return _dispatcher_instance


__all__: list[str] = [
    "BasePushProvider",
    "DeliveryResult",
    "PushDispatcher",
    "build_push_dispatcher",
    "get_push_dispatcher",
]
