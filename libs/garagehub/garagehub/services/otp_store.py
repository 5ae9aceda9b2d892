"""One-time password codes for the password reset flow, kept in Redis."""

from __future__ import annotations

import hmac
import secrets

from redis.asyncio import Redis

OTP_MIN = 100_000
OTP_MAX = 999_999


def generate_otp() -> str:
    """Six digits in [OTP_MIN, OTP_MAX)."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN))


class OtpStore:
    def __init__(self, redis_client: Redis, *, ttl_seconds: int) -> None:
        self._redis = redis_client
        self._ttl_seconds = max(1, int(ttl_seconds))

    @staticmethod
    def key(email: str) -> str:
        return f"garagehub:otp:{str(email).strip().lower()}"

    async def issue(self, email: str) -> str:
        code = generate_otp()
        await self._redis.set(self.key(email), code, ex=self._ttl_seconds)
        return code

    async def verify(self, email: str, code: str) -> bool:
        stored = await self._redis.get(self.key(email))
        if stored is None:
            return False
        if isinstance(stored, bytes):
            stored = stored.decode("utf-8")
        return hmac.compare_digest(str(stored), str(code).strip())

    async def consume(self, email: str) -> None:
        await self._redis.delete(self.key(email))
