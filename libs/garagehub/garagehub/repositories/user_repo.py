from __future__ import annotations

import builtins

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from garagehub.models import User
from garagehub.repositories.base import BaseRepository, as_datetime

_COLUMNS = "id, name, email, password_hash, type, created_at"


class UserRepository(BaseRepository):
    def __init__(self, pool: AsyncConnectionPool) -> None:
        super().__init__(pool)

    @staticmethod
    def _from_row(row: dict[str, object]) -> User:
        return User(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            email=str(row.get("email") or ""),
            password_hash=str(row.get("password_hash") or ""),
            type=str(row.get("type") or ""),
            created_at=as_datetime(row.get("created_at")),
        )

    async def create(self, user: User) -> User:
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    f"INSERT INTO users ({_COLUMNS}) VALUES (%s,%s,%s,%s,%s,%s)",
                    (user.id, user.name, user.email, user.password_hash, user.type, user.created_at),
                )
            await conn.commit()
        return user

    async def get(self, user_id: str) -> User | None:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (user_id,))
                row = await cur.fetchone()
        return self._from_row(row) if row is not None else None

    async def get_by_email(self, email: str) -> User | None:
        """Oldest account wins when several share an email."""
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM users
                    WHERE lower(email)=lower(%s)
                    ORDER BY created_at ASC
                    LIMIT 1
                    """,
                    (email,),
                )
                row = await cur.fetchone()
        return self._from_row(row) if row is not None else None

    async def list(self) -> builtins.list[User]:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY created_at DESC")
                rows = await cur.fetchall()
        return [self._from_row(r) for r in rows]

    async def update(self, user: User) -> User | None:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    f"""
                    UPDATE users
                    SET name=%s, email=%s, password_hash=%s, type=%s
                    WHERE id=%s
                    RETURNING {_COLUMNS}
                    """,
                    (user.name, user.email, user.password_hash, user.type, user.id),
                )
                row = await cur.fetchone()
            await conn.commit()
        return self._from_row(row) if row is not None else None

    async def delete(self, user_id: str) -> bool:
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("DELETE FROM users WHERE id=%s", (user_id,))
                removed = int(cur.rowcount or 0)
            await conn.commit()
        return bool(removed)
