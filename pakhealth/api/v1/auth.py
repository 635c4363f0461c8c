# pakhealth/api/v1/auth.py

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pakhealth.core.auth.schemas import AuthResponse, LoginRequest, RegisterRequest, UserOut
from pakhealth.core.auth.security import create_access_token, get_current_user
from pakhealth.core.errors import EmailAlreadyRegistered, InvalidCredentials
from pakhealth.core.users.models import User
from pakhealth.core.users.service import UsersService
from pakhealth.db.base import get_async_db_session

router = APIRouter(prefix="/api/auth", tags=["Authentication"])
log = logging.getLogger(__name__)


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token(data={"user_id": user.id})
    return AuthResponse(token=token, user=UserOut.model_validate(user))


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
async def register(
    payload: RegisterRequest = Body(...),
    db: AsyncSession = Depends(get_async_db_session),
) -> AuthResponse:
    service = UsersService(db)
    try:
        user = await service.register(
            email=payload.email,
            password=payload.password,
            name=payload.name,
            fcm_token=payload.fcm_token,
        )
    except EmailAlreadyRegistered as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse, summary="Log in with email and password")
async def login(
    payload: LoginRequest = Body(...),
    db: AsyncSession = Depends(get_async_db_session),
) -> AuthResponse:
    service = UsersService(db)
    try:
        user = await service.authenticate(payload.email, payload.password, fcm_token=payload.fcm_token)
    except InvalidCredentials as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    return _auth_response(user)


@router.post("/logout", summary="Log out")
async def logout(current_user: User = Depends(get_current_user)) -> dict[str, str]:
    # JWT не хранится на сервере: клиент просто забывает токен
    log.info("User %s logged out", current_user.id)
    return {"message": "Logged out successfully."}
