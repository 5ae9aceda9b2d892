"""Reusable services (blob storage, garage synchronization, mail, OTP)."""

from garagehub.services.blob_store import BlobStore
from garagehub.services.garage_sync import (
    GaragePatch,
    GarageSynchronizer,
    Reconciliation,
    ServiceDescriptor,
)
from garagehub.services.mailer import Mailer
from garagehub.services.otp_store import OtpStore

__all__ = [
    "BlobStore",
    "GaragePatch",
    "GarageSynchronizer",
    "Mailer",
    "OtpStore",
    "Reconciliation",
    "ServiceDescriptor",
]
