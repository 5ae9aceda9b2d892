"""Uniform JSON error bodies: {"error": <ErrorCode>, "message": <detail>}."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from garagehub.error_codes import ErrorCode
from garagehub.exceptions import (
    ConflictError,
    GarageHubError,
    NotFoundError,
    UploadTooLargeError,
    ValidationError,
)

logger = logging.getLogger("garagehub.api")

_HTTP_CODES: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_FAILED,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.UPLOAD_TOO_LARGE,
    422: ErrorCode.VALIDATION_FAILED,
}


def status_for(exc: GarageHubError) -> int:
    # Subclasses first: UploadTooLargeError is also a ValidationError.
    if isinstance(exc, UploadTooLargeError):
        return 413
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    return 500


def error_body(code: ErrorCode | str, message: str, details: Any | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": str(getattr(code, "value", code)), "message": message}
    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GarageHubError)
    async def garagehub_error_handler(request: Request, exc: GarageHubError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status_code, content=error_body(exc.error_code, exc.message))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=error_body(
                ErrorCode.VALIDATION_FAILED, "invalid request", details=jsonable_errors(exc)
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = _HTTP_CODES.get(exc.status_code, ErrorCode.UNKNOWN)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=error_body(ErrorCode.UNKNOWN, str(exc)))


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for err in exc.errors():
        out.append(
            {
                "loc": [str(p) for p in err.get("loc", ())],
                "msg": str(err.get("msg", "")),
                "type": str(err.get("type", "")),
            }
        )
    return out
