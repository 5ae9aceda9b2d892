"""Users: CRUD, password login and the OTP password reset flow."""

from __future__ import annotations

import asyncio
import logging

from psycopg_pool import AsyncConnectionPool
from redis.asyncio import Redis

from garagehub.config import Settings
from garagehub.error_codes import ErrorCode
from garagehub.exceptions import InvalidCredentialsError, NotFoundError, ValidationError
from garagehub.models import User, new_id, utcnow
from garagehub.repositories import UserRepository
from garagehub.services import Mailer, OtpStore
from garagehub.utils import hash_password, verify_password

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Password Reset OTP"


def _clean(value: str | None) -> str:
    return str(value or "").strip()


class UserService:
    def __init__(
        self,
        settings: Settings,
        pool: AsyncConnectionPool,
        redis: Redis,
        mailer: Mailer,
    ):
        self.settings = settings
        self.user_repo = UserRepository(pool)
        self.otp_store = OtpStore(redis, ttl_seconds=settings.otp_ttl_seconds)
        self.mailer = mailer

    async def _by_email(self, email: str | None) -> User:
        address = _clean(email)
        if not address:
            raise ValidationError("email is required")
        user = await self.user_repo.get_by_email(address)
        if user is None:
            raise NotFoundError("User")
        return user

    async def create_user(
        self, *, name: str | None, email: str | None, password: str | None, type: str | None
    ) -> User:
        name, email, type = _clean(name), _clean(email), _clean(type)
        if not name or not email or not password or not type:
            raise ValidationError("All fields are required")
        user = User(
            id=new_id("user"),
            name=name,
            email=email,
            password_hash=await asyncio.to_thread(hash_password, password),
            type=type,
            created_at=utcnow(),
        )
        return await self.user_repo.create(user)

    async def list_users(self) -> list[User]:
        return await self.user_repo.list()

    async def get_user(self, user_id: str) -> User:
        user = await self.user_repo.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def update_user(
        self,
        user_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
        type: str | None = None,
    ) -> User:
        user = await self.get_user(user_id)
        if _clean(name):
            user.name = _clean(name)
        if _clean(email):
            user.email = _clean(email)
        if _clean(type):
            user.type = _clean(type)
        if password:
            user.password_hash = await asyncio.to_thread(hash_password, password)
        saved = await self.user_repo.update(user)
        if saved is None:
            raise NotFoundError("User", user_id)
        return saved

    async def delete_user(self, user_id: str) -> None:
        if not await self.user_repo.delete(user_id):
            raise NotFoundError("User", user_id)

    async def login(self, *, email: str | None, password: str | None) -> User:
        user = await self._by_email(email)
        if not password or not await asyncio.to_thread(
            verify_password, password, user.password_hash
        ):
            raise InvalidCredentialsError("Invalid credentials")
        return user

    async def forgot_password(self, *, email: str | None) -> None:
        user = await self._by_email(email)
        code = await self.otp_store.issue(user.email)
        try:
            await self.mailer.send(
                to=user.email,
                subject=OTP_SUBJECT,
                body=f"Your OTP for password reset is {code}",
            )
        except Exception:
            await self.otp_store.consume(user.email)
            raise
        logger.info("password reset otp issued (user_id=%s)", user.id)

    async def reset_password(
        self, *, email: str | None, otp: str | int | None, new_password: str | None
    ) -> None:
        user = await self._by_email(email)
        if not new_password:
            raise ValidationError("newPassword is required")
        if otp is None or not await self.otp_store.verify(user.email, str(otp)):
            raise ValidationError("Invalid OTP", error_code=ErrorCode.INVALID_OTP)
        user.password_hash = await asyncio.to_thread(hash_password, new_password)
        if await self.user_repo.update(user) is None:
            raise NotFoundError("User", user.id)
        await self.otp_store.consume(user.email)
        logger.info("password reset completed (user_id=%s)", user.id)
