"""Booking endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.api.deps import get_current_active_user, get_current_admin, get_db, get_optional_user
from rentflow.core.permissions import is_operator, require_operator
from rentflow.domain.booking_state import ACTIVE_STATUSES, BookingStatus
from rentflow.domain.pricing import PricingConfig, get_pricing_config
from rentflow.models.booking import Booking
from rentflow.models.user import User
from rentflow.schemas.booking import (
    BookingCalculateRequest,
    BookingCalculateResponse,
    BookingCancelRequest,
    BookingCreate,
    BookingListResponse,
    BookingPaymentRequest,
    BookingResponse,
    BookingStatusFilter,
    BookingUpdate,
)
from rentflow.schemas.reporting import BookingStatsResponse
from rentflow.services import booking_service
from rentflow.services.reporting_service import reporting_service

router = APIRouter()


@router.post("/calculate", response_model=BookingCalculateResponse)
async def calculate_booking_price(
    request: BookingCalculateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    pricing: Annotated[PricingConfig, Depends(get_pricing_config)],
) -> BookingCalculateResponse:
    """Calculate booking price without creating a booking."""
    return await booking_service.calculate_booking(db, request, config=pricing)


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    pricing: Annotated[PricingConfig, Depends(get_pricing_config)],
    current_user: Annotated[User | None, Depends(get_optional_user)],
) -> Booking:
    """Create a new booking. Signing in is optional; guests check out with contact details."""
    return await booking_service.create_booking(
        db, booking_data, current_user=current_user, config=pricing
    )


@router.get("/", response_model=BookingListResponse)
async def list_bookings(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: BookingStatusFilter | None = Query(default=None, alias="status"),
    customer_id: UUID | None = Query(default=None),
    product_id: UUID | None = Query(default=None),
    start_from: date | None = Query(default=None),
    end_before: date | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> BookingListResponse:
    """List bookings. Customers see their own; staff and admins see all."""
    query = select(Booking)

    if is_operator(current_user):
        if customer_id:
            query = query.where(Booking.customer_id == customer_id)
    else:
        query = query.where(Booking.customer_id == current_user.id)

    if status_filter == BookingStatus.OVERDUE.value:
        query = query.where(
            Booking.status.in_([s.value for s in ACTIVE_STATUSES]),
            Booking.end_date < date.today(),
        )
    elif status_filter:
        query = query.where(Booking.status == status_filter)
    if product_id:
        query = query.where(Booking.product_id == product_id)
    if start_from:
        query = query.where(Booking.start_date >= start_from)
    if end_before:
        query = query.where(Booking.end_date <= end_before)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    offset = (page - 1) * page_size
    result = await db.execute(
        query.order_by(Booking.created_at.desc()).offset(offset).limit(page_size)
    )
    bookings = list(result.scalars().all())

    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/admin/stats", response_model=BookingStatsResponse)
async def get_booking_stats(
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Booking statistics for the admin dashboard."""
    return await reporting_service.get_booking_stats(db)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get booking details (owner, staff or admin)."""
    return await booking_service.get_booking_for_user(db, booking_id, current_user)


@router.put("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: UUID,
    updates: BookingUpdate,
    current_user: Annotated[User, Depends(require_operator)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Update status, payment status or handling details (staff/admin)."""
    booking = await booking_service.get_booking_for_user(db, booking_id, current_user)
    return await booking_service.update_booking(db, booking, updates)


@router.patch("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    request: BookingCancelRequest | None = None,
) -> Booking:
    """Cancel a booking. Customers may cancel their own; staff and admins any."""
    booking = await booking_service.get_booking_for_user(db, booking_id, current_user)
    reason = request.reason if request else None
    return await booking_service.cancel_booking(db, booking, reason=reason)


@router.post("/{booking_id}/payment", response_model=BookingResponse)
async def record_payment(
    booking_id: UUID,
    request: BookingPaymentRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Record the payment step of checkout (owner, staff or admin)."""
    booking = await booking_service.get_booking_for_user(db, booking_id, current_user)
    return await booking_service.record_payment(
        db, booking, method=request.method, amount=request.amount
    )
