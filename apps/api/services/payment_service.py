"""Payment CRUD; each payment carries the QR code image it was paid with."""

from __future__ import annotations

import logging
import math

from psycopg_pool import AsyncConnectionPool

from garagehub.config import Settings
from garagehub.exceptions import NotFoundError, ValidationError
from garagehub.models import DEFAULT_PAYMENT_STATUS, Payment, Upload, new_id, utcnow
from garagehub.repositories import PaymentRepository
from garagehub.services import BlobStore

logger = logging.getLogger(__name__)

QR_CODE_FIELD = "qrCodeImage"

_TEXT_FIELDS = ("name", "email", "car_model", "garage", "garage_id", "service", "transaction_id")


def _parse_price(value: str | float | None) -> float:
    try:
        price = float(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationError("price must be a number") from exc
    if not math.isfinite(price) or price < 0:
        raise ValidationError("price must be a non-negative number")
    return price


def _clean(value: str | None) -> str:
    return str(value or "").strip()


class PaymentService:
    def __init__(self, settings: Settings, pool: AsyncConnectionPool, blobs: BlobStore | None = None):
        self.settings = settings
        self.blobs = blobs or BlobStore(settings)
        self.payment_repo = PaymentRepository(pool)

    async def create_payment(self, *, fields: dict[str, str | None], qr_code: Upload | None) -> Payment:
        values = {k: _clean(fields.get(k)) for k in _TEXT_FIELDS}
        price_raw = _clean(fields.get("price"))
        if not all(values.values()) or not price_raw or qr_code is None:
            raise ValidationError("All fields are required")
        price = _parse_price(price_raw)

        ref = await self.blobs.store(qr_code.content, qr_code.filename, field=QR_CODE_FIELD)
        now = utcnow()
        payment = Payment(
            id=new_id("payment"),
            price=price,
            qr_code_image=ref,
            status=DEFAULT_PAYMENT_STATUS,
            created_at=now,
            updated_at=now,
            **values,
        )
        created = await self.payment_repo.create(payment)
        logger.info("payment created (id=%s, email=%s)", created.id, created.email)
        return created

    async def list_payments(self) -> list[Payment]:
        return await self.payment_repo.list()

    async def list_by_email(self, email: str) -> list[Payment]:
        payments = await self.payment_repo.list(email=email)
        if not payments:
            raise NotFoundError("Payment", message="No payments found for this email")
        return payments

    async def get_payment(self, payment_id: str) -> Payment:
        payment = await self.payment_repo.get(payment_id)
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        return payment

    async def update_payment(
        self, payment_id: str, *, fields: dict[str, str | None], qr_code: Upload | None
    ) -> tuple[Payment, list[str]]:
        payment = await self.get_payment(payment_id)
        for key in (*_TEXT_FIELDS, "status"):
            value = _clean(fields.get(key))
            if value:
                setattr(payment, key, value)
        price_raw = _clean(fields.get("price"))
        if price_raw:
            payment.price = _parse_price(price_raw)

        orphans: list[str] = []
        if qr_code is not None:
            ref = await self.blobs.store(qr_code.content, qr_code.filename, field=QR_CODE_FIELD)
            if payment.qr_code_image:
                orphans.append(payment.qr_code_image)
            payment.qr_code_image = ref

        saved = await self.payment_repo.update(payment)
        if saved is None:
            raise NotFoundError("Payment", payment_id)
        return saved, orphans

    async def delete_payment(self, payment_id: str) -> list[str]:
        payment = await self.get_payment(payment_id)
        if not await self.payment_repo.delete(payment_id):
            raise NotFoundError("Payment", payment_id)
        return [payment.qr_code_image] if payment.qr_code_image else []
