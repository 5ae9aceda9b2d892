"""Payment model (a customer's booking of a garage service)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from garagehub.models.common import utcnow

DEFAULT_PAYMENT_STATUS = "Pending"


@dataclass
class Payment:
    id: str
    name: str
    email: str
    car_model: str
    garage: str
    garage_id: str
    service: str
    price: float
    transaction_id: str
    qr_code_image: str
    status: str = DEFAULT_PAYMENT_STATUS
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def touch(self) -> None:
        self.updated_at = utcnow()
