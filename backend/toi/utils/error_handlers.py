"""
Application error types and their HTTP surfaces.
"""
import logging

from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed input or invalid date math."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class NotFoundError(AppError):
    """Empty parent search or missing update target."""
    def __init__(self, message: str = "not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class ConflictError(AppError):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=409, details=details)


class UpstreamParseError(AppError):
    """An upstream answered with JSON (or a stream frame) we can't use."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=422, details=details)


class UpstreamConnectionError(AppError):
    """Transport failure talking to an upstream or to our own loopback surface."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=502, details=details)


def database_error_status(error: SQLAlchemyError) -> tuple[int, str]:
    """Map a database error to a status code and a short message."""
    if isinstance(error, IntegrityError):
        return 409, "This record already exists or references a missing record."
    return 500, "Database operation failed."


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
    }

    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )
