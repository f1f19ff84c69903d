"""Core utilities and security modules."""

from rentflow.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    InsufficientStock,
    InvalidBookingStatus,
    NotFoundError,
    ProductNotAvailable,
    ValidationError,
)
from rentflow.core.security import (
    create_access_token,
    create_tokens,
    get_password_hash,
    verify_password,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "BadRequestError",
    "InsufficientStock",
    "InvalidBookingStatus",
    "NotFoundError",
    "ProductNotAvailable",
    "ValidationError",
    "create_access_token",
    "create_tokens",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
