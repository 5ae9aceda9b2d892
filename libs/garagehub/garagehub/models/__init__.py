"""Core data models for GarageHub."""

from garagehub.models.common import Upload, new_id, utcnow
from garagehub.models.contact import Contact
from garagehub.models.garage import Garage, Service
from garagehub.models.payment import DEFAULT_PAYMENT_STATUS, Payment
from garagehub.models.user import User
from garagehub.models.zone import Zone

__all__ = [
    "Contact",
    "DEFAULT_PAYMENT_STATUS",
    "Garage",
    "Payment",
    "Service",
    "Upload",
    "User",
    "Zone",
    "new_id",
    "utcnow",
]
