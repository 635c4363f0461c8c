# pakhealth/api/v1/health.py

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pakhealth.config import settings
from pakhealth.core.push import PushDispatcher, get_push_dispatcher
from pakhealth.db.base import get_async_db_session

router = APIRouter(prefix="/api", tags=["Health"])
log = logging.getLogger(__name__)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health(
    db: AsyncSession = Depends(get_async_db_session),
    dispatcher: PushDispatcher = Depends(get_push_dispatcher),
) -> dict[str, str]:
    """Состояние API: БД и push-шлюз."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        log.exception("DB health check failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="db error") from exc

    return {
        "status": "OK",
        "environment": settings.ENVIRONMENT,
        "db": "ok",
        "push": dispatcher.provider.name if dispatcher.provider is not None else "not initialized",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
