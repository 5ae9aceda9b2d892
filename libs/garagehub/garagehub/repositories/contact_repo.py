from __future__ import annotations

import builtins

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from garagehub.models import Contact
from garagehub.repositories.base import BaseRepository, as_datetime

_COLUMNS = "id, name, mobile_number, message, program, created_at"


class ContactRepository(BaseRepository):
    def __init__(self, pool: AsyncConnectionPool) -> None:
        super().__init__(pool)

    @staticmethod
    def _from_row(row: dict[str, object]) -> Contact:
        program = row.get("program")
        return Contact(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            mobile_number=str(row.get("mobile_number") or ""),
            message=str(row.get("message") or ""),
            program=str(program) if program is not None else None,
            created_at=as_datetime(row.get("created_at")),
        )

    async def create(self, contact: Contact) -> Contact:
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    f"INSERT INTO contacts ({_COLUMNS}) VALUES (%s,%s,%s,%s,%s,%s)",
                    (
                        contact.id,
                        contact.name,
                        contact.mobile_number,
                        contact.message,
                        contact.program,
                        contact.created_at,
                    ),
                )
            await conn.commit()
        return contact

    async def get(self, contact_id: str) -> Contact | None:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(f"SELECT {_COLUMNS} FROM contacts WHERE id=%s", (contact_id,))
                row = await cur.fetchone()
        return self._from_row(row) if row is not None else None

    async def list(self) -> builtins.list[Contact]:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(f"SELECT {_COLUMNS} FROM contacts ORDER BY created_at DESC")
                rows = await cur.fetchall()
        return [self._from_row(r) for r in rows]

    async def update(self, contact: Contact) -> Contact | None:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    f"""
                    UPDATE contacts
                    SET name=%s, mobile_number=%s, message=%s, program=%s
                    WHERE id=%s
                    RETURNING {_COLUMNS}
                    """,
                    (contact.name, contact.mobile_number, contact.message, contact.program, contact.id),
                )
                row = await cur.fetchone()
            await conn.commit()
        return self._from_row(row) if row is not None else None

    async def delete(self, contact_id: str) -> bool:
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("DELETE FROM contacts WHERE id=%s", (contact_id,))
                removed = int(cur.rowcount or 0)
            await conn.commit()
        return bool(removed)
