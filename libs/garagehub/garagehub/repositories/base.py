from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

import psycopg
from psycopg_pool import AsyncConnectionPool

from garagehub.config import Settings
from garagehub.models import utcnow


class DatabasePool:
    """Singleton connection pool manager."""

    _pool: AsyncConnectionPool | None = None

    @classmethod
    async def get_pool(cls, settings: Settings) -> AsyncConnectionPool:
        if cls._pool is None:
            cls._pool = AsyncConnectionPool(
                conninfo=settings.database_url,
                min_size=int(settings.postgres_pool_min_size),
                max_size=int(settings.postgres_pool_max_size),
                open=False,
            )
            await cls._pool.open()
        return cls._pool

    @classmethod
    async def close(cls) -> None:
        if cls._pool is not None:
            await cls._pool.close()
            cls._pool = None


class BaseRepository:
    def __init__(self, pool: AsyncConnectionPool) -> None:
        self.pool = pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[psycopg.AsyncConnection]:
        async with self.pool.connection() as conn:
            yield conn


def as_datetime(value: object) -> datetime:
    return value if isinstance(value, datetime) else utcnow()
