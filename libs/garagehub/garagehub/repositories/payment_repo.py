from __future__ import annotations

import builtins

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from garagehub.models import DEFAULT_PAYMENT_STATUS, Payment
from garagehub.repositories.base import BaseRepository, as_datetime

_COLUMNS = (
    "id, name, email, car_model, garage, garage_id, service, price, transaction_id, "
    "qr_code_image, status, created_at, updated_at"
)


class PaymentRepository(BaseRepository):
    def __init__(self, pool: AsyncConnectionPool) -> None:
        super().__init__(pool)

    @staticmethod
    def _from_row(row: dict[str, object]) -> Payment:
        return Payment(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            email=str(row.get("email") or ""),
            car_model=str(row.get("car_model") or ""),
            garage=str(row.get("garage") or ""),
            garage_id=str(row.get("garage_id") or ""),
            service=str(row.get("service") or ""),
            price=float(row.get("price") or 0.0),
            transaction_id=str(row.get("transaction_id") or ""),
            qr_code_image=str(row.get("qr_code_image") or ""),
            status=str(row.get("status") or DEFAULT_PAYMENT_STATUS),
            created_at=as_datetime(row.get("created_at")),
            updated_at=as_datetime(row.get("updated_at")),
        )

    @staticmethod
    def _params(payment: Payment) -> tuple[object, ...]:
        return (
            payment.name,
            payment.email,
            payment.car_model,
            payment.garage,
            payment.garage_id,
            payment.service,
            float(payment.price),
            payment.transaction_id,
            payment.qr_code_image,
            payment.status,
        )

    async def create(self, payment: Payment) -> Payment:
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    f"""
                    INSERT INTO payments ({_COLUMNS})
                    VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (payment.id, *self._params(payment), payment.created_at, payment.updated_at),
                )
            await conn.commit()
        return payment

    async def get(self, payment_id: str) -> Payment | None:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(f"SELECT {_COLUMNS} FROM payments WHERE id=%s", (payment_id,))
                row = await cur.fetchone()
        return self._from_row(row) if row is not None else None

    async def list(self, *, email: str | None = None) -> builtins.list[Payment]:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                if email is None:
                    await cur.execute(f"SELECT {_COLUMNS} FROM payments ORDER BY created_at DESC")
                else:
                    await cur.execute(
                        f"SELECT {_COLUMNS} FROM payments WHERE email=%s ORDER BY created_at DESC",
                        (email,),
                    )
                rows = await cur.fetchall()
        return [self._from_row(r) for r in rows]

    async def update(self, payment: Payment) -> Payment | None:
        payment.touch()
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    f"""
                    UPDATE payments
                    SET name=%s,
                        email=%s,
                        car_model=%s,
                        garage=%s,
                        garage_id=%s,
                        service=%s,
                        price=%s,
                        transaction_id=%s,
                        qr_code_image=%s,
                        status=%s,
                        updated_at=%s
                    WHERE id=%s
                    RETURNING {_COLUMNS}
                    """,
                    (*self._params(payment), payment.updated_at, payment.id),
                )
                row = await cur.fetchone()
            await conn.commit()
        return self._from_row(row) if row is not None else None

    async def delete(self, payment_id: str) -> bool:
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("DELETE FROM payments WHERE id=%s", (payment_id,))
                removed = int(cur.rowcount or 0)
            await conn.commit()
        return bool(removed)

    async def list_blob_refs(self) -> builtins.list[str]:
        return [p.qr_code_image for p in await self.list() if p.qr_code_image]
