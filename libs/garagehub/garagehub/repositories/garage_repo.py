from __future__ import annotations

import builtins
import json

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from garagehub.models import Garage, Service
from garagehub.repositories.base import BaseRepository, as_datetime

_COLUMNS = "id, zone, name, location, main_image, gallery_images, services, created_at"


def _as_list(value: object) -> list:
    if isinstance(value, list):
        return list(value)
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str) and value.strip():
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return []
        return list(parsed) if isinstance(parsed, list) else []
    return []


class GarageRepository(BaseRepository):
    def __init__(self, pool: AsyncConnectionPool) -> None:
        super().__init__(pool)

    @staticmethod
    def _from_row(row: dict[str, object]) -> Garage:
        main_image = row.get("main_image")
        return Garage(
            id=str(row["id"]),
            zone=str(row.get("zone") or ""),
            name=str(row.get("name") or ""),
            location=str(row.get("location") or ""),
            main_image=str(main_image) if main_image else None,
            gallery_images=[str(x) for x in _as_list(row.get("gallery_images")) if x],
            services=[
                Service.from_dict(x) for x in _as_list(row.get("services")) if isinstance(x, dict)
            ],
            created_at=as_datetime(row.get("created_at")),
        )

    async def create(self, garage: Garage) -> Garage:
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    f"""
                    INSERT INTO garages ({_COLUMNS})
                    VALUES (%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        garage.id,
                        garage.zone,
                        garage.name,
                        garage.location,
                        garage.main_image,
                        Jsonb(list(garage.gallery_images)),
                        Jsonb([s.to_dict() for s in garage.services]),
                        garage.created_at,
                    ),
                )
            await conn.commit()
        return garage

    async def get(self, garage_id: str) -> Garage | None:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(f"SELECT {_COLUMNS} FROM garages WHERE id=%s", (garage_id,))
                row = await cur.fetchone()
        return self._from_row(row) if row is not None else None

    async def list(self, *, zone: str | None = None) -> builtins.list[Garage]:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                if zone is None:
                    await cur.execute(f"SELECT {_COLUMNS} FROM garages ORDER BY created_at DESC")
                else:
                    await cur.execute(
                        f"SELECT {_COLUMNS} FROM garages WHERE zone=%s ORDER BY created_at DESC",
                        (zone,),
                    )
                rows = await cur.fetchall()
        return [self._from_row(r) for r in rows]

    async def update(self, garage: Garage) -> Garage | None:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    f"""
                    UPDATE garages
                    SET zone=%s,
                        name=%s,
                        location=%s,
                        main_image=%s,
                        gallery_images=%s,
                        services=%s
                    WHERE id=%s
                    RETURNING {_COLUMNS}
                    """,
                    (
                        garage.zone,
                        garage.name,
                        garage.location,
                        garage.main_image,
                        Jsonb(list(garage.gallery_images)),
                        Jsonb([s.to_dict() for s in garage.services]),
                        garage.id,
                    ),
                )
                row = await cur.fetchone()
            await conn.commit()
        return self._from_row(row) if row is not None else None

    async def delete(self, garage_id: str) -> bool:
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("DELETE FROM garages WHERE id=%s", (garage_id,))
                removed = int(cur.rowcount or 0)
            await conn.commit()
        return bool(removed)

    async def list_blob_refs(self) -> builtins.list[str]:
        """Every image ref held by any garage (main, gallery, service)."""
        refs: builtins.list[str] = []
        for garage in await self.list():
            refs.extend(garage.blob_refs())
        return refs
