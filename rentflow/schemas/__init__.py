"""Pydantic schemas for API validation."""

from rentflow.schemas.booking import (
    BookingCalculateRequest,
    BookingCalculateResponse,
    BookingCancelRequest,
    BookingCreate,
    BookingPaymentRequest,
    BookingResponse,
    BookingUpdate,
)
from rentflow.schemas.issue import IssueCreate, IssueResponse, IssueStatusUpdate
from rentflow.schemas.notification import NotificationCreate, NotificationResponse
from rentflow.schemas.product import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    StockUpdateRequest,
)
from rentflow.schemas.user import (
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordUpdate,
    TokenResponse,
    UserAdminUpdate,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)

__all__ = [
    # User
    "UserCreate",
    "UserLogin",
    "UserUpdate",
    "UserAdminUpdate",
    "UserResponse",
    "TokenResponse",
    "PasswordUpdate",
    "PasswordResetRequest",
    "PasswordResetConfirm",
    # Catalog
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "StockUpdateRequest",
    # Booking
    "BookingCreate",
    "BookingCalculateRequest",
    "BookingCalculateResponse",
    "BookingUpdate",
    "BookingCancelRequest",
    "BookingPaymentRequest",
    "BookingResponse",
    # Notification
    "NotificationCreate",
    "NotificationResponse",
    # Issue
    "IssueCreate",
    "IssueStatusUpdate",
    "IssueResponse",
]
