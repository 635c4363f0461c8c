# pakhealth/api/v1/users.py

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from pakhealth.core.auth.schemas import UserOut
from pakhealth.core.auth.security import get_current_user
from pakhealth.core.users.models import User
from pakhealth.core.users.service import UsersService
from pakhealth.db.base import get_async_db_session

router = APIRouter(
    prefix="/api/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)],
)
log = logging.getLogger(__name__)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    profile_image: Optional[str] = None
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[str] = None
    diabetes_type: Optional[str] = None
    diagnosis_year: Optional[int] = Field(None, ge=1900, le=2100)
    fcm_token: Optional[str] = None


class FcmTokenRequest(BaseModel):
    fcm_token: str = Field(..., min_length=1)


@router.get("/profile", response_model=UserOut, summary="Get my profile")
async def get_profile(current_user: User = Depends(get_current_user)) -> UserOut:
    return UserOut.model_validate(current_user)


@router.put("/profile", response_model=UserOut, summary="Update my profile")
async def update_profile(
    payload: ProfileUpdate = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
) -> UserOut:
    user = await UsersService(db).update_profile(current_user, payload.model_dump(exclude_unset=True))
    return UserOut.model_validate(user)


@router.post("/fcm-token", summary="Register the device push token")
async def register_fcm_token(
    payload: FcmTokenRequest = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
) -> dict[str, str]:
    await UsersService(db).set_fcm_token(current_user, payload.fcm_token)
    log.info("FCM token registered for user %s", current_user.id)
    return {"message": "FCM token registered successfully."}
