"""
Domain errors raised by services and their mapping to HTTP responses.
Services raise these; routes stay thin and the app-level handler converts them.
"""
from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

# ---------------------------------------------------------------------------
# Validation codes surfaced to the owner UI as field-level errors
# ---------------------------------------------------------------------------

EMPTY_OR_TOO_LONG_MESSAGE = "EMPTY_OR_TOO_LONG_MESSAGE"
RADIUS_OUT_OF_RANGE = "RADIUS_OUT_OF_RANGE"
TITLE_TOO_LONG = "TITLE_TOO_LONG"
INVALID_MESSAGE_TYPE = "INVALID_MESSAGE_TYPE"
INVALID_OFFER_DETAILS = "INVALID_OFFER_DETAILS"
INVALID_EXPIRY = "INVALID_EXPIRY"
INVALID_COORDINATES = "INVALID_COORDINATES"
MISSING_FIELD = "MISSING_FIELD"

MSG_SEND_FAILED = "Failed to send message"


class DinewaveError(Exception):
    """Base class for errors that carry an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def detail(self) -> Any:
        return self.message


class ValidationError(DinewaveError):
    """Caller-fixable input problem, detected before any write."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, code: str, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.field = field

    @property
    def detail(self) -> dict[str, str | None]:
        return {"code": self.code, "field": self.field, "message": self.message}


class NotFoundError(DinewaveError):
    status_code = status.HTTP_404_NOT_FOUND


class MessageNotFoundError(NotFoundError):
    def __init__(self, message: str = "Message not found") -> None:
        super().__init__(message)


class RestaurantNotFoundError(NotFoundError):
    def __init__(self, message: str = "Restaurant not found") -> None:
        super().__init__(message)


class PersistenceError(DinewaveError):
    """Write failed and was rolled back; nothing from the operation is visible."""


def domain_error_to_http(exc: DinewaveError) -> HTTPException:
    """Map a domain error to the HTTPException the API returns."""
    return HTTPException(status_code=exc.status_code, detail=exc.detail)
