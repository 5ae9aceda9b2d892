from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from garagehub.config import Settings
from garagehub.exceptions import ConflictError, EmailDeliveryError
from garagehub.models import Contact, Garage, Payment, User, Zone

_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))


class FakeRedis:
    def __init__(self) -> None:
        self._kv: dict[str, str] = {}
        self.ttl: dict[str, int | None] = {}

    async def get(self, key: str) -> str | None:
        return self._kv.get(str(key))

    async def set(self, key: str, value: str, *, ex: int | None = None) -> bool:
        self._kv[str(key)] = str(value)
        self.ttl[str(key)] = ex
        return True

    async def delete(self, key: str) -> int:
        existed = str(key) in self._kv
        self._kv.pop(str(key), None)
        return 1 if existed else 0

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None


class FakeMailer:
    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self.fail = False

    async def send(self, *, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise EmailDeliveryError("smtp down")
        self.sent.append({"to": to, "subject": subject, "body": body})


@dataclass
class InMemoryPool:
    garages: dict[str, Garage] = field(default_factory=dict)
    zones: dict[str, Zone] = field(default_factory=dict)
    payments: dict[str, Payment] = field(default_factory=dict)
    users: dict[str, User] = field(default_factory=dict)
    contacts: dict[str, Contact] = field(default_factory=dict)


class _FakeRepository:
    table = ""

    def __init__(self, pool: InMemoryPool) -> None:
        self.pool = pool

    @property
    def rows(self) -> dict:
        return getattr(self.pool, self.table)

    async def create(self, record):
        self.rows[record.id] = replace(record)
        return record

    async def get(self, record_id: str):
        row = self.rows.get(str(record_id))
        return replace(row) if row is not None else None

    async def update(self, record):
        if record.id not in self.rows:
            return None
        self.rows[record.id] = replace(record)
        return record

    async def delete(self, record_id: str) -> bool:
        return self.rows.pop(str(record_id), None) is not None

    async def list(self):
        return sorted(self.rows.values(), key=lambda r: r.created_at, reverse=True)


class FakeGarageRepository(_FakeRepository):
    table = "garages"

    async def get(self, record_id: str):
        row = self.rows.get(str(record_id))
        if row is None:
            return None
        return replace(row, gallery_images=list(row.gallery_images), services=list(row.services))

    async def list(self, *, zone: str | None = None):
        items = await super().list()
        return [g for g in items if zone is None or g.zone == zone]


class FakeZoneRepository(_FakeRepository):
    table = "zones"

    def _check_unique(self, zone: Zone) -> None:
        for other in self.rows.values():
            if other.id != zone.id and other.zone_name == zone.zone_name:
                raise ConflictError(f"zone {zone.zone_name!r} already exists")

    async def create(self, record):
        self._check_unique(record)
        return await super().create(record)

    async def update(self, record):
        self._check_unique(record)
        return await super().update(record)


class FakePaymentRepository(_FakeRepository):
    table = "payments"

    async def update(self, record):
        record.touch()
        return await super().update(record)

    async def list(self, *, email: str | None = None):
        items = await super().list()
        return [p for p in items if email is None or p.email == email]


class FakeUserRepository(_FakeRepository):
    table = "users"

    async def get_by_email(self, email: str):
        matches = [u for u in self.rows.values() if u.email.lower() == str(email).lower()]
        matches.sort(key=lambda u: u.created_at)
        return replace(matches[0]) if matches else None


class FakeContactRepository(_FakeRepository):
    table = "contacts"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=str(tmp_path / "data"),
        log_dir=str(tmp_path / "logs"),
        upload_dir=str(tmp_path / "uploads"),
        upload_max_bytes=64 * 1024,
    )


@pytest.fixture()
def redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture()
def db_pool() -> InMemoryPool:
    return InMemoryPool()


@pytest.fixture(autouse=True)
def patch_repos(monkeypatch) -> None:
    monkeypatch.setattr("services.garage_service.GarageRepository", FakeGarageRepository)
    monkeypatch.setattr("services.zone_service.ZoneRepository", FakeZoneRepository)
    monkeypatch.setattr("services.payment_service.PaymentRepository", FakePaymentRepository)
    monkeypatch.setattr("services.user_service.UserRepository", FakeUserRepository)
    monkeypatch.setattr("services.contact_service.ContactRepository", FakeContactRepository)


@pytest.fixture()
def app(settings: Settings, redis: FakeRedis, mailer: FakeMailer, db_pool: InMemoryPool) -> FastAPI:
    from errors import register_exception_handlers
    from routes.contacts import router as contacts_router
    from routes.garages import router as garages_router
    from routes.health import router as health_router
    from routes.payments import router as payments_router
    from routes.users import router as users_router
    from routes.zones import router as zones_router

    test_app = FastAPI()
    test_app.state.redis = redis
    test_app.state.settings = settings
    test_app.state.db_pool = db_pool
    test_app.state.mailer = mailer
    register_exception_handlers(test_app)
    test_app.include_router(garages_router, prefix="/api")
    test_app.include_router(zones_router, prefix="/api")
    test_app.include_router(payments_router, prefix="/api/payments")
    test_app.include_router(payments_router, prefix="/api/payment")
    test_app.include_router(users_router, prefix="/api")
    test_app.include_router(contacts_router, prefix="/api")
    test_app.include_router(health_router)
    return test_app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
