from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest
from psycopg.errors import UniqueViolation
from psycopg.types.json import Jsonb

from garagehub.exceptions import ConflictError
from garagehub.models import Garage, Service, Zone
from garagehub.repositories import GarageRepository, PaymentRepository, UserRepository, ZoneRepository

_T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class _FakeCursor:
    def __init__(self, rows: list[dict[str, object]], *, rowcount: int = 0, error: Exception | None = None):
        self._rows = rows
        self._error = error
        self.rowcount = rowcount
        self.executed: list[tuple[str, tuple[object, ...] | None]] = []

    async def execute(self, sql: str, params: tuple[object, ...] | None = None) -> None:
        self.executed.append((sql, params))
        if self._error is not None:
            raise self._error

    async def fetchall(self) -> list[dict[str, object]]:
        return list(self._rows)

    async def fetchone(self) -> dict[str, object] | None:
        return self._rows[0] if self._rows else None


class _FakeConn:
    def __init__(self, cursor: _FakeCursor):
        self._cursor = cursor
        self.commits = 0

    @asynccontextmanager
    async def cursor(self, *args, **kwargs):  # noqa: ANN002, ANN003
        yield self._cursor

    async def commit(self) -> None:
        self.commits += 1


class _FakePool:
    def __init__(self, rows: list[dict[str, object]] | None = None, **cursor_kwargs):  # noqa: ANN003
        self.cursor = _FakeCursor(list(rows or []), **cursor_kwargs)
        self.conn = _FakeConn(self.cursor)

    @asynccontextmanager
    async def connection(self):
        yield self.conn


def _garage_row(**overrides) -> dict[str, object]:
    row: dict[str, object] = {
        "id": "garage_1",
        "zone": "north",
        "name": "Joe's",
        "location": "Main St",
        "main_image": "uploads/m.png",
        "gallery_images": ["uploads/g.png"],
        "services": [{"name": "Oil Change", "price": 29.99, "image": "uploads/s.png"}],
        "created_at": _T0,
    }
    row.update(overrides)
    return row


@pytest.mark.asyncio
async def test_garage_repo_get_maps_jsonb_columns() -> None:
    repo = GarageRepository(_FakePool([_garage_row()]))
    garage = await repo.get("garage_1")

    assert garage is not None
    assert garage.gallery_images == ["uploads/g.png"]
    assert garage.services == [Service(name="Oil Change", price=29.99, image="uploads/s.png")]
    assert garage.created_at == _T0


@pytest.mark.asyncio
async def test_garage_repo_accepts_json_text_columns() -> None:
    repo = GarageRepository(
        _FakePool([_garage_row(gallery_images='["uploads/a.png"]', services="not json")])
    )
    garage = await repo.get("garage_1")
    assert garage is not None
    assert garage.gallery_images == ["uploads/a.png"]
    assert garage.services == []


@pytest.mark.asyncio
async def test_garage_repo_create_writes_services_as_jsonb() -> None:
    pool = _FakePool()
    garage = Garage(
        id="garage_1",
        zone="north",
        name="Joe's",
        location="Main St",
        services=[Service(name="Wash", price=10.0)],
        created_at=_T0,
    )
    await GarageRepository(pool).create(garage)

    sql, params = pool.cursor.executed[0]
    assert "INSERT INTO garages" in sql
    assert params is not None
    assert isinstance(params[6], Jsonb)
    assert params[6].obj == [{"name": "Wash", "price": 10.0, "image": None}]
    assert pool.conn.commits == 1


@pytest.mark.asyncio
async def test_garage_repo_list_filters_by_zone() -> None:
    pool = _FakePool([_garage_row()])
    garages = await GarageRepository(pool).list(zone="north")

    assert [g.id for g in garages] == ["garage_1"]
    sql, params = pool.cursor.executed[0]
    assert "WHERE zone=%s" in sql
    assert params == ("north",)


@pytest.mark.asyncio
async def test_garage_repo_update_returns_none_when_missing() -> None:
    repo = GarageRepository(_FakePool([]))
    assert await repo.update(Garage(id="x", zone="z", name="n", location="l")) is None


@pytest.mark.asyncio
async def test_garage_repo_list_blob_refs_covers_all_image_kinds() -> None:
    repo = GarageRepository(_FakePool([_garage_row(), _garage_row(id="garage_2", main_image=None)]))
    refs = await repo.list_blob_refs()
    assert refs.count("uploads/m.png") == 1
    assert refs.count("uploads/g.png") == 2
    assert refs.count("uploads/s.png") == 2


@pytest.mark.asyncio
async def test_delete_reports_whether_a_row_was_removed() -> None:
    assert await GarageRepository(_FakePool(rowcount=1)).delete("garage_1") is True
    assert await GarageRepository(_FakePool(rowcount=0)).delete("garage_1") is False


@pytest.mark.asyncio
async def test_zone_repo_maps_unique_violation_to_conflict() -> None:
    repo = ZoneRepository(_FakePool(error=UniqueViolation("duplicate key")))
    with pytest.raises(ConflictError):
        await repo.create(Zone(id="zone_1", zone_name="North", zone_image="uploads/z.png"))


@pytest.mark.asyncio
async def test_payment_repo_update_touches_updated_at() -> None:
    row = {
        "id": "payment_1",
        "name": "Ann",
        "email": "ann@example.com",
        "car_model": "Civic",
        "garage": "Joe's",
        "garage_id": "garage_1",
        "service": "Oil Change",
        "price": 29.99,
        "transaction_id": "tx-1",
        "qr_code_image": "uploads/q.png",
        "status": "Paid",
        "created_at": _T0,
        "updated_at": _T0,
    }
    pool = _FakePool([row])
    repo = PaymentRepository(pool)
    payment = await repo.get("payment_1")
    assert payment is not None and payment.status == "Paid"

    await repo.update(payment)
    assert payment.updated_at > _T0
    assert await repo.list_blob_refs() == ["uploads/q.png"]


@pytest.mark.asyncio
async def test_user_repo_get_by_email_is_case_insensitive() -> None:
    pool = _FakePool(
        [
            {
                "id": "user_1",
                "name": "Ann",
                "email": "Ann@Example.com",
                "password_hash": "h",
                "type": "customer",
                "created_at": _T0,
            }
        ]
    )
    user = await UserRepository(pool).get_by_email("ann@example.com")

    assert user is not None and user.id == "user_1"
    sql, params = pool.cursor.executed[0]
    assert "lower(email)=lower(%s)" in sql
    assert params == ("ann@example.com",)
