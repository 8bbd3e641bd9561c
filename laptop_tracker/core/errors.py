from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException


class TrackerError(Exception):
    """Base class for errors raised by the stock and sales core."""

    code = "tracker_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(TrackerError, ValueError):
    """Bad quantity, non-positive price or malformed unit data."""

    code = "validation_error"
    status_code = 422

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}", details={"field": field})
        self.field = field


class NotFoundError(TrackerError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConsistencyError(TrackerError):
    """The store removed fewer units than a sale asked for."""

    code = "consistency_error"
    status_code = status.HTTP_409_CONFLICT


class CollaboratorUnavailable(TrackerError):
    """A read or write against the store failed."""

    code = "store_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def tracker_exception_handler(request: Request, exc: TrackerError):
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(status_code=exc.status_code, code="http_error", message=message, details=details)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=422,
        code="validation_error",
        message="Validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )


__all__ = [
    "CollaboratorUnavailable",
    "ConsistencyError",
    "ErrorEnvelope",
    "NotFoundError",
    "TrackerError",
    "ValidationError",
    "http_exception_handler",
    "tracker_exception_handler",
    "validation_exception_handler",
]
