"""PostgreSQL repository layer (one repository per record type)."""

from garagehub.repositories.base import BaseRepository, DatabasePool
from garagehub.repositories.contact_repo import ContactRepository
from garagehub.repositories.garage_repo import GarageRepository
from garagehub.repositories.payment_repo import PaymentRepository
from garagehub.repositories.user_repo import UserRepository
from garagehub.repositories.zone_repo import ZoneRepository

__all__ = [
    "BaseRepository",
    "ContactRepository",
    "DatabasePool",
    "GarageRepository",
    "PaymentRepository",
    "UserRepository",
    "ZoneRepository",
]
