"""GarageHub exception hierarchy."""

from __future__ import annotations

from garagehub.error_codes import ErrorCode


class GarageHubError(Exception):
    """Base error for GarageHub."""

    error_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, *, error_code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class ConfigurationError(GarageHubError):
    """Raised when configuration is invalid."""


class ValidationError(GarageHubError):
    """Raised when required input is missing or malformed."""

    error_code = ErrorCode.VALIDATION_FAILED


class UploadTooLargeError(ValidationError):
    """Raised when an uploaded file exceeds the configured size limit."""

    error_code = ErrorCode.UPLOAD_TOO_LARGE

    def __init__(self, filename: str, max_bytes: int) -> None:
        super().__init__(f"file too large: {filename} (max {max_bytes} bytes)")
        self.filename = filename
        self.max_bytes = max_bytes


class InvalidCredentialsError(ValidationError):
    """Raised when a login password does not match."""

    error_code = ErrorCode.INVALID_CREDENTIALS


class NotFoundError(GarageHubError):
    """Raised when a referenced record is absent."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, record_id: str | None = None, *, message: str | None = None) -> None:
        super().__init__(message or f"{entity} not found")
        self.entity = entity
        self.record_id = record_id


class ConflictError(GarageHubError):
    """Raised when a store-level uniqueness constraint is violated."""

    error_code = ErrorCode.CONFLICT


class StorageError(GarageHubError):
    """Raised when the blob store or record store fails on I/O."""

    error_code = ErrorCode.STORAGE_FAILED


class EmailDeliveryError(GarageHubError):
    """Raised when an email cannot be delivered."""

    error_code = ErrorCode.EMAIL_FAILED
