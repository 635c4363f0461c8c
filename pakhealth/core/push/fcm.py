# pakhealth/core/push/fcm.py

from __future__ import annotations

import asyncio
import json
import logging
from typing import Dict

import firebase_admin
from firebase_admin import credentials, messaging
from firebase_admin.exceptions import FirebaseError

from pakhealth.config import settings
from pakhealth.core.errors import PushGatewayError, PushGatewayUnavailable
from .base import BasePushProvider

log = logging.getLogger(__name__)

APP_NAME = "pakhealth"


def _load_credential() -> credentials.Base:
    """
    Credentials: JSON сервисного аккаунта из ``FIREBASE_SERVICE_ACCOUNT``,
    иначе Application Default Credentials из ``GOOGLE_APPLICATION_CREDENTIALS``.
    """
    if settings.FIREBASE_SERVICE_ACCOUNT:
        try:
            info = json.loads(settings.FIREBASE_SERVICE_ACCOUNT)
        except json.JSONDecodeError as exc:
            raise PushGatewayUnavailable("FIREBASE_SERVICE_ACCOUNT is not valid JSON") from exc
        return credentials.Certificate(info)
    if settings.GOOGLE_APPLICATION_CREDENTIALS:
        return credentials.ApplicationDefault()
    raise PushGatewayUnavailable("No Firebase credentials provided")


class FCMPushProvider(BasePushProvider):
    """Firebase Cloud Messaging через firebase-admin SDK."""

    name: str = "fcm"

    def __init__(self) -> None:
        try:
            self._app = firebase_admin.get_app(APP_NAME)
        except ValueError:
            try:
                self._app = firebase_admin.initialize_app(_load_credential(), name=APP_NAME)
            except PushGatewayUnavailable:
                raise
            except (ValueError, IOError) as exc:
                raise PushGatewayUnavailable(f"Firebase Admin initialization error: {exc}") from exc
        log.info("Firebase Admin initialized (app=%s)", APP_NAME)

    @staticmethod
    def build_message(token: str, title: str, body: str, data: Dict[str, str]) -> messaging.Message:
        return messaging.Message(
            token=token,
            notification=messaging.Notification(title=title, body=body),
            data={**data, "click_action": "FLUTTER_NOTIFICATION_CLICK"},
            android=messaging.AndroidConfig(
                priority="high",
                notification=messaging.AndroidNotification(sound="default", channel_id="default"),
            ),
            apns=messaging.APNSConfig(
                payload=messaging.APNSPayload(aps=messaging.Aps(sound="default", badge=1)),
            ),
        )

    async def send(self, token: str, title: str, body: str, data: Dict[str, str]) -> str:
        message = self.build_message(token, title, body, data)
        loop = asyncio.get_running_loop()
        try:
            # SDK синхронный: отправляем в default ThreadPoolExecutor
            message_id: str = await loop.run_in_executor(
                None, lambda: messaging.send(message, app=self._app)
            )
        except FirebaseError as exc:
            raise PushGatewayError(f"{exc.code}: {exc}") from exc
        log.debug("FCM notification sent successfully: %s", message_id)
        return message_id


__all__ = ["FCMPushProvider"]
