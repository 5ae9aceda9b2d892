"""Canonical error codes surfaced to API clients."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"

    VALIDATION_FAILED = "VALIDATION_FAILED"
    UPLOAD_TOO_LARGE = "UPLOAD_TOO_LARGE"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_OTP = "INVALID_OTP"

    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    STORAGE_FAILED = "STORAGE_FAILED"
    EMAIL_FAILED = "EMAIL_FAILED"
