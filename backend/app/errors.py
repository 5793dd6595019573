"""
Service Error Types

Custom exceptions raised by the service layer. Each carries an HTTP status
code and a machine-readable error code so the surrounding API can render a
consistent error body without knowing about individual failure cases.

Usage:
    from app.errors import NotFoundError, ServiceError

    raise NotFoundError("Vocabulary not found", details={"vocabulary_id": 42})

    try:
        ...
    except ServiceError as e:
        body = e.to_dict()
"""

from typing import Optional


class ServiceError(Exception):
    """
    Base exception for service errors.

    Provides consistent error handling with:
    - HTTP status code
    - Error code for categorization
    - Optional details for debugging

    Example:
        raise ServiceError("Database connection failed", status_code=503)
    """

    status_code: int = 500
    error_code: str = "service_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        if error_code:
            self.error_code = error_code
        self.details = details

    def to_dict(self) -> dict:
        """Render the standard error body."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ServiceError):
    """
    Data validation error.

    Raised when input data fails validation, e.g. a review quality
    outside 0-5 or a quiz submission without answers.
    """

    status_code = 422
    error_code = "validation_error"


class NotFoundError(ServiceError):
    """
    Resource not found error.

    Raised when a requested resource doesn't exist.
    """

    status_code = 404
    error_code = "not_found"


class ConflictError(ServiceError):
    """
    Resource conflict error.

    Raised when creating something that already exists.
    """

    status_code = 409
    error_code = "conflict"


class AuthorizationError(ServiceError):
    """
    Authorization error.

    Raised when a user acts on a resource owned by someone else.
    """

    status_code = 403
    error_code = "forbidden"


class InvalidSessionStateError(ServiceError):
    """Raised when a quiz session transition is not allowed from its current state."""

    status_code = 409
    error_code = "invalid_session_state"
