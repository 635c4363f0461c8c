# pakhealth/api/v1/notifications.py

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pakhealth.core.auth.security import get_current_user
from pakhealth.core.notifications.models import NotificationType
from pakhealth.core.notifications.schemas import (
    NotificationCreate,
    NotificationCreated,
    NotificationList,
    NotificationOut,
    PreferencesOut,
    PreferencesUpdate,
    PushResult,
    UnreadCount,
)
from pakhealth.core.notifications.service import NotificationsService
from pakhealth.core.push import PushDispatcher, get_push_dispatcher
from pakhealth.core.users.models import User
from pakhealth.db.base import get_async_db_session

router = APIRouter(
    prefix="/api/notifications",
    tags=["Notifications"],
    dependencies=[Depends(get_current_user)],
)
log = logging.getLogger(__name__)

NOTIFICATION_NOT_FOUND = "Notification not found."


def _push_result(result) -> PushResult:
    return PushResult(success=result.delivered, message_id=result.message_id, error=result.reason)


@router.get("", response_model=NotificationList, summary="List my notifications")
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
) -> NotificationList:
    service = NotificationsService(db)
    items = await service.list_for_user(current_user.id, limit=limit, offset=offset, unread_only=unread_only)
    return NotificationList(
        notifications=[NotificationOut.model_validate(n) for n in items],
        unread_count=await service.unread_count(current_user.id),
    )


@router.get("/unread-count", response_model=UnreadCount, summary="Count my unread notifications")
async def unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
) -> UnreadCount:
    return UnreadCount(unread_count=await NotificationsService(db).unread_count(current_user.id))


@router.post(
    "",
    response_model=NotificationCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create a notification and optionally push it",
)
async def create_notification(
    payload: NotificationCreate = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
    dispatcher: PushDispatcher = Depends(get_push_dispatcher),
) -> NotificationCreated:
    will_push = payload.send_push and bool(current_user.fcm_token)
    notification = await NotificationsService(db).create_notification(
        user_id=current_user.id,
        title=payload.title,
        body=payload.body,
        notification_type=payload.type.value,
        data=payload.data,
        is_sent=will_push,
    )
    push = None
    if will_push:
        # Запись уже во flush'е; результат отправки её не откатывает
        result = await dispatcher.send(current_user.fcm_token, payload.title, payload.body, payload.data)
        push = _push_result(result)
    return NotificationCreated(notification=NotificationOut.model_validate(notification), push=push)


@router.post("/test", response_model=PushResult, summary="Send a test push to my device")
async def send_test_notification(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
    dispatcher: PushDispatcher = Depends(get_push_dispatcher),
) -> PushResult:
    if not current_user.fcm_token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No FCM token registered for this user.",
        )
    title = "Test Notification \U0001F514"
    body = f"Hello {current_user.name}! This is a test notification from PakHealth."
    data = {"type": NotificationType.SYSTEM.value, "test": "true"}

    await NotificationsService(db).create_notification(
        user_id=current_user.id,
        title=title,
        body=body,
        notification_type=NotificationType.SYSTEM.value,
        data=data,
        is_sent=True,
    )
    result = await dispatcher.send(current_user.fcm_token, title, body, data)
    log.info("Test push for user %s: delivered=%s", current_user.id, result.delivered)
    return _push_result(result)


@router.patch("/read-all", summary="Mark all my notifications as read")
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
) -> dict[str, int]:
    updated = await NotificationsService(db).mark_all_read(current_user.id)
    return {"updated": updated}


@router.delete("/clear-all", summary="Delete all my notifications")
async def clear_all(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
) -> dict[str, int]:
    deleted = await NotificationsService(db).clear_all(current_user.id)
    return {"deleted": deleted}


@router.get("/preferences", response_model=PreferencesOut, summary="Get my notification preferences")
async def get_preferences(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
) -> PreferencesOut:
    prefs = await NotificationsService(db).get_or_create_preferences(current_user.id)
    return PreferencesOut.model_validate(prefs)


@router.put("/preferences", response_model=PreferencesOut, summary="Update my notification preferences")
async def update_preferences(
    payload: PreferencesUpdate = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
) -> PreferencesOut:
    prefs = await NotificationsService(db).update_preferences(
        current_user.id, payload.model_dump(exclude_unset=True)
    )
    return PreferencesOut.model_validate(prefs)


@router.patch("/{notification_id}/read", response_model=NotificationOut, summary="Mark a notification as read")
async def mark_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
) -> NotificationOut:
    notification = await NotificationsService(db).mark_read(current_user.id, notification_id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOTIFICATION_NOT_FOUND)
    return NotificationOut.model_validate(notification)


@router.delete("/{notification_id}", summary="Delete a notification")
async def delete_notification(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
) -> dict[str, str]:
    removed = await NotificationsService(db).delete_notification(current_user.id, notification_id)
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOTIFICATION_NOT_FOUND)
    return {"message": "Notification deleted successfully."}
