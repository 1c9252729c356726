"""
Error taxonomy and the single place where errors become HTTP responses.

Route handlers and services raise the exceptions below; they never build
status codes or inspect driver error codes themselves. Driver errors are
translated into StorageError at the storage boundary (see medinv.db.errors).

SECURITY PRINCIPLE: Don't expose internal details to users.
Log the full error internally, return a short message externally.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MedInvError(Exception):
    """Base class for every error the API knows how to render."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal server error"

    def __init__(self, message: str = "", details: str | None = None):
        super().__init__(message or self.error)
        self.message = message or self.error
        self.details = details

    def to_payload(self) -> dict:
        payload = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidRequest(MedInvError):
    """Missing or malformed input. Caller error, nothing was written."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid request"


class AuthenticationFailed(MedInvError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Authentication failed"


class OrderCreationFailed(MedInvError):
    """Storage fault while placing an order. The transaction was rolled back."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Failed to create order"

    def __init__(self, details: str, message: str = ""):
        super().__init__(message or self.error, details=details)


class InsufficientStock(OrderCreationFailed):
    """Raised only under the strict stock policy."""

    status_code = status.HTTP_409_CONFLICT
    error = "Insufficient stock"

    def __init__(self, medicine_id: int, requested: int):
        super().__init__(
            details=f"Medicine {medicine_id}: requested {requested} exceeds available stock"
        )
        self.medicine_id = medicine_id
        self.requested = requested


class ConnectionExhausted(MedInvError):
    """Connection pool at capacity. Retry later; nothing retries automatically."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "Database connection limit reached"


async def _medinv_error_handler(request: Request, exc: MedInvError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__} on {request.method} {request.url.path}: "
            f"{exc.message} ({exc.details})"
        )
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Body type errors are caller errors like any other missing field
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request body")
    error = f"{location}: {message}" if location else message
    logger.info(f"Bad request on {request.method} {request.url.path}: {error}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": error})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MedInvError, _medinv_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
