"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from rentflow.schemas.user import _validate_phone

StoredBookingStatus = Literal["pending", "confirmed", "picked-up", "returned", "cancelled"]
PaymentStatusValue = Literal["pending", "partial", "paid", "refunded"]
BookingStatusFilter = Literal[
    "pending", "confirmed", "picked-up", "returned", "cancelled", "overdue"
]


class CustomerDetails(BaseModel):
    """Contact details captured at checkout."""

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return _validate_phone(v)


class RentalPeriod(BaseModel):
    """Date range and quantity shared by quote and booking requests."""

    product_id: UUID
    start_date: date
    end_date: date
    quantity: int = Field(default=1, ge=1, le=1000)

    @model_validator(mode="after")
    def validate_dates(self):
        # equal dates are a one-day rental
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BookingCreate(RentalPeriod):
    """Schema for creating a booking."""

    customer: CustomerDetails
    notes: str | None = Field(None, max_length=1000)
    pickup_location: str | None = Field("Main Store", max_length=200)
    return_location: str | None = Field("Main Store", max_length=200)
    # Honoured for staff/admin callers only
    confirm: bool = False


class BookingCalculateRequest(RentalPeriod):
    """Schema for calculating booking price without creating."""


class BookingPriceBreakdown(BaseModel):
    """Schema for booking price breakdown."""

    unit_price: Decimal
    quantity: int
    days: int
    base_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_price: Decimal
    security_deposit: Decimal
    discount_percent: Decimal
    tax_percent: Decimal


class BookingCalculateResponse(BaseModel):
    """Schema for booking price calculation response."""

    available: bool
    stock: int
    price_breakdown: BookingPriceBreakdown
    unavailable_reason: str | None = None


class BookingUpdate(BaseModel):
    """Staff/admin update of status, payment and handling fields."""

    status: StoredBookingStatus | None = None
    payment_status: PaymentStatusValue | None = None
    staff_assigned_id: UUID | None = None
    notes: str | None = Field(None, max_length=1000)
    return_notes: str | None = Field(None, max_length=1000)
    reason: str | None = Field(None, max_length=1000)


class BookingCancelRequest(BaseModel):
    """Schema for canceling a booking."""

    reason: str | None = Field(None, max_length=1000)


class BookingPaymentRequest(BaseModel):
    """Outcome of the checkout payment step."""

    method: Literal["cash", "online"]
    amount: Decimal | None = Field(None, ge=0)


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_number: str

    # Customer
    customer_id: UUID | None
    customer_name: str
    customer_email: str
    customer_phone: str

    # Product
    product_id: UUID
    product_name: str
    product_base_price: Decimal

    # Rental period
    start_date: date
    end_date: date
    rental_days: int
    quantity: int
    pickup_location: str | None
    return_location: str | None

    # Pricing
    base_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_price: Decimal
    security_deposit: Decimal

    # Status
    status: str
    display_status: str
    payment_status: str
    payment_method: str | None
    amount_paid: Decimal

    # Handling
    staff_assigned_id: UUID | None
    notes: str | None
    return_notes: str | None
    cancellation_reason: str | None

    # Timestamps
    confirmed_at: datetime | None
    picked_up_at: datetime | None
    returned_at: datetime | None
    cancelled_at: datetime | None
    created_at: datetime
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int
