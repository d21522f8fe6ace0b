"""Service-layer exceptions and their HTTP status mapping."""

from functools import wraps

from fastapi import status
from pymongo.errors import PyMongoError

from config.logging_utils import log_error


class ServiceError(Exception):
    """Base exception for NotifyDo service errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Raised when input is malformed or a required field is missing."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class AuthError(ServiceError):
    """Raised for bad credentials or a missing, invalid or expired token."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class AuthzError(ServiceError):
    """Raised when an authenticated user touches a record they do not own."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class NotFoundError(ServiceError):
    """Raised when the requested record does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class StoreError(ServiceError):
    """Raised when the document store fails. The message never leaks internals."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"


def store_errors(func):
    """Convert PyMongo failures raised by an async service call into StoreError."""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError as e:
            log_error(f"{func.__name__} failed: {type(e).__name__}: {e}", prefix="DB")
            raise StoreError() from e

    return wrapper
