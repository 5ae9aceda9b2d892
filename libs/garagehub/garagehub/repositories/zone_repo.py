from __future__ import annotations

import builtins

from psycopg.errors import UniqueViolation
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from garagehub.exceptions import ConflictError
from garagehub.models import Zone
from garagehub.repositories.base import BaseRepository, as_datetime

_COLUMNS = "id, zone_name, zone_image, uploaded_by, created_at"


class ZoneRepository(BaseRepository):
    def __init__(self, pool: AsyncConnectionPool) -> None:
        super().__init__(pool)

    @staticmethod
    def _from_row(row: dict[str, object]) -> Zone:
        return Zone(
            id=str(row["id"]),
            zone_name=str(row.get("zone_name") or ""),
            zone_image=str(row.get("zone_image") or ""),
            uploaded_by=str(row.get("uploaded_by") or ""),
            created_at=as_datetime(row.get("created_at")),
        )

    async def create(self, zone: Zone) -> Zone:
        try:
            async with self.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        f"INSERT INTO zones ({_COLUMNS}) VALUES (%s,%s,%s,%s,%s)",
                        (zone.id, zone.zone_name, zone.zone_image, zone.uploaded_by, zone.created_at),
                    )
                await conn.commit()
        except UniqueViolation as exc:
            raise ConflictError(f"zone {zone.zone_name!r} already exists") from exc
        return zone

    async def get(self, zone_id: str) -> Zone | None:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(f"SELECT {_COLUMNS} FROM zones WHERE id=%s", (zone_id,))
                row = await cur.fetchone()
        return self._from_row(row) if row is not None else None

    async def list(self) -> builtins.list[Zone]:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(f"SELECT {_COLUMNS} FROM zones ORDER BY created_at DESC")
                rows = await cur.fetchall()
        return [self._from_row(r) for r in rows]

    async def update(self, zone: Zone) -> Zone | None:
        try:
            async with self.connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(
                        f"""
                        UPDATE zones
                        SET zone_name=%s, zone_image=%s, uploaded_by=%s
                        WHERE id=%s
                        RETURNING {_COLUMNS}
                        """,
                        (zone.zone_name, zone.zone_image, zone.uploaded_by, zone.id),
                    )
                    row = await cur.fetchone()
                await conn.commit()
        except UniqueViolation as exc:
            raise ConflictError(f"zone {zone.zone_name!r} already exists") from exc
        return self._from_row(row) if row is not None else None

    async def delete(self, zone_id: str) -> bool:
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("DELETE FROM zones WHERE id=%s", (zone_id,))
                removed = int(cur.rowcount or 0)
            await conn.commit()
        return bool(removed)

    async def list_blob_refs(self) -> builtins.list[str]:
        return [z.zone_image for z in await self.list() if z.zone_image]
