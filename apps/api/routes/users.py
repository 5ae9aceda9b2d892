"""User routes: CRUD, login and password reset."""

from __future__ import annotations

from fastapi import APIRouter, Request

from garagehub.models import User
from services.user_service import UserService

from ._deps import mailer, pool, redis, settings
from .schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    UserEnvelope,
    UserRequest,
    UserResponse,
)

router = APIRouter(prefix="/users", tags=["users"])


def service(request: Request) -> UserService:
    return UserService(settings(request), pool(request), redis(request), mailer(request))


def to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        type=user.type,
        created_at=user.created_at,
    )


@router.post("/login", response_model=UserEnvelope)
async def login(request: Request, payload: LoginRequest) -> UserEnvelope:
    user = await service(request).login(email=payload.email, password=payload.password)
    return UserEnvelope(message="Login successful", user=to_response(user))


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(request: Request, payload: ForgotPasswordRequest) -> MessageResponse:
    await service(request).forgot_password(email=payload.email)
    return MessageResponse(message="OTP sent to email")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(request: Request, payload: ResetPasswordRequest) -> MessageResponse:
    await service(request).reset_password(
        email=payload.email, otp=payload.otp, new_password=payload.new_password
    )
    return MessageResponse(message="Password reset successful")


@router.get("", response_model=list[UserResponse])
async def list_users(request: Request) -> list[UserResponse]:
    return [to_response(u) for u in await service(request).list_users()]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(request: Request, user_id: str) -> UserResponse:
    return to_response(await service(request).get_user(user_id))


@router.post("", response_model=UserEnvelope, status_code=201)
async def create_user(request: Request, payload: UserRequest) -> UserEnvelope:
    user = await service(request).create_user(
        name=payload.name, email=payload.email, password=payload.password, type=payload.type
    )
    return UserEnvelope(message="User created successfully", user=to_response(user))


@router.put("/{user_id}", response_model=UserEnvelope)
async def update_user(request: Request, user_id: str, payload: UserRequest) -> UserEnvelope:
    user = await service(request).update_user(
        user_id,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        type=payload.type,
    )
    return UserEnvelope(message="User updated successfully", user=to_response(user))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(request: Request, user_id: str) -> MessageResponse:
    await service(request).delete_user(user_id)
    return MessageResponse(message="User deleted successfully")
