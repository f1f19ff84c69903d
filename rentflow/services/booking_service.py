"""Booking workflow: creation, quotes, status changes, cancellation and payment.

Every function works on the caller's session and only flushes. The request
session commits once the handler returns, so a booking and the stock it
consumes are stored together or not at all.
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.core.exceptions import (
    AuthorizationError,
    BadRequestError,
    InsufficientStock,
    InvalidBookingStatus,
    NotFoundError,
    ProductNotAvailable,
)
from rentflow.core.permissions import is_operator
from rentflow.database import utc_now
from rentflow.domain.booking_state import BookingStatus, assert_booking_transition
from rentflow.domain.payment_state import PaymentMethod, PaymentStatus, assert_payment_transition
from rentflow.domain.pricing import PriceBreakdown, PricingConfig, compute_pricing, get_pricing_config, rental_days
from rentflow.domain.stock import StockOperation, adjust_stock
from rentflow.models.booking import Booking
from rentflow.models.product import Product
from rentflow.models.user import User
from rentflow.schemas.booking import (
    BookingCalculateRequest,
    BookingCalculateResponse,
    BookingCreate,
    BookingPriceBreakdown,
    BookingUpdate,
)
from rentflow.services.notification_service import notification_service
from rentflow.utils.identifiers import generate_booking_number

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    BookingStatus.CONFIRMED.value: ("Booking Confirmed", "Your booking {number} has been confirmed."),
    BookingStatus.PICKED_UP.value: ("Booking Picked Up", "Equipment for booking {number} has been picked up."),
    BookingStatus.RETURNED.value: ("Booking Returned", "Equipment for booking {number} has been returned. Thank you!"),
    BookingStatus.CANCELLED.value: ("Booking Cancelled", "Your booking {number} has been cancelled."),
}


async def get_product(db: AsyncSession, product_id: UUID, lock: bool = False) -> Product:
    """Load a product, optionally locking its row for a stock change."""
    query = select(Product).where(Product.id == product_id)
    if lock:
        query = query.with_for_update()
    result = await db.execute(query)
    product = result.scalar_one_or_none()
    if not product:
        raise NotFoundError("Product", str(product_id))
    return product


async def get_booking_for_user(db: AsyncSession, booking_id: UUID, user: User) -> Booking:
    """Load a booking the user is allowed to see: their own, or any for staff and admins."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFoundError("Booking", str(booking_id))
    if not is_operator(user) and booking.customer_id != user.id:
        raise AuthorizationError("You don't have permission to access this booking")
    return booking


def price_rental(
    product: Product,
    quantity: int,
    start_date,
    end_date,
    config: PricingConfig | None = None,
) -> tuple[int, PriceBreakdown]:
    """Billable days and price breakdown for renting ``quantity`` units of a product."""
    days = rental_days(start_date, end_date)
    breakdown = compute_pricing(
        product.base_price, quantity, days, config=config or get_pricing_config()
    )
    return days, breakdown


def _ensure_rentable(product: Product) -> None:
    if not product.is_active or not product.is_rentable:
        raise ProductNotAvailable()


async def calculate_booking(
    db: AsyncSession,
    request: BookingCalculateRequest,
    config: PricingConfig | None = None,
) -> BookingCalculateResponse:
    """Quote a rental and report whether stock currently covers it. Nothing is stored."""
    config = config or get_pricing_config()
    product = await get_product(db, request.product_id)
    days, breakdown = price_rental(
        product, request.quantity, request.start_date, request.end_date, config
    )

    unavailable_reason = None
    if not product.is_active or not product.is_rentable:
        unavailable_reason = "This product is not available for rent"
    elif request.quantity > product.stock:
        unavailable_reason = f"Only {product.stock} unit(s) available"

    return BookingCalculateResponse(
        available=unavailable_reason is None,
        stock=product.stock,
        unavailable_reason=unavailable_reason,
        price_breakdown=BookingPriceBreakdown(
            unit_price=product.base_price,
            quantity=request.quantity,
            days=days,
            base_amount=breakdown.base,
            discount_amount=breakdown.discount,
            tax_amount=breakdown.tax,
            total_price=breakdown.total,
            security_deposit=breakdown.deposit,
            discount_percent=config.discount_percent,
            tax_percent=config.tax_percent,
        ),
    )


async def _resolve_customer_id(
    db: AsyncSession, data: BookingCreate, current_user: User | None
) -> UUID | None:
    if current_user is None:
        return None
    if not is_operator(current_user):
        return current_user.id
    # Counter bookings are linked to a registered customer when the email matches
    result = await db.execute(select(User.id).where(User.email == data.customer.email.lower()))
    return result.scalar_one_or_none()


async def create_booking(
    db: AsyncSession,
    data: BookingCreate,
    current_user: User | None = None,
    config: PricingConfig | None = None,
) -> Booking:
    """Create a booking and take its quantity out of stock.

    Raises:
        NotFoundError: Product does not exist
        ProductNotAvailable: Product is inactive or not rentable
        InsufficientStock: Requested quantity exceeds available stock
    """
    product = await get_product(db, data.product_id, lock=True)
    _ensure_rentable(product)
    if data.quantity > product.stock:
        raise InsufficientStock(requested=data.quantity, available=product.stock)

    _, breakdown = price_rental(product, data.quantity, data.start_date, data.end_date, config)

    confirm = data.confirm and is_operator(current_user)
    now = utc_now()
    booking = Booking(
        booking_number=await generate_booking_number(db),
        customer_id=await _resolve_customer_id(db, data, current_user),
        customer_name=data.customer.name,
        customer_email=data.customer.email.lower(),
        customer_phone=data.customer.phone,
        product_id=product.id,
        product_name=product.name,
        product_base_price=product.base_price,
        start_date=data.start_date,
        end_date=data.end_date,
        quantity=data.quantity,
        pickup_location=data.pickup_location,
        return_location=data.return_location,
        base_amount=breakdown.base,
        discount_amount=breakdown.discount,
        tax_amount=breakdown.tax,
        total_price=breakdown.total,
        security_deposit=breakdown.deposit,
        status=BookingStatus.CONFIRMED.value if confirm else BookingStatus.PENDING.value,
        payment_status=PaymentStatus.PENDING.value,
        amount_paid=Decimal("0"),
        notes=data.notes,
        confirmed_at=now if confirm else None,
    )
    db.add(booking)
    adjust_stock(product, data.quantity, StockOperation.SUBTRACT)
    await db.flush()

    logger.info(
        "Booking %s created for product %s (qty %d, total %s, status %s)",
        booking.booking_number,
        product.id,
        booking.quantity,
        booking.total_price,
        booking.status,
    )

    await notification_service.notify_booking_event(
        db,
        booking,
        title="Booking Created",
        message=(
            f"Your booking {booking.booking_number} for {booking.quantity} x "
            f"{booking.product_name} has been received."
        ),
    )
    return booking


async def _restore_stock(db: AsyncSession, booking: Booking) -> None:
    result = await db.execute(
        select(Product).where(Product.id == booking.product_id).with_for_update()
    )
    product = result.scalar_one_or_none()
    if product is None:
        logger.warning(
            "Product %s for booking %s no longer exists; stock not restored",
            booking.product_id,
            booking.booking_number,
        )
        return
    adjust_stock(product, booking.quantity, StockOperation.ADD)


async def change_status(
    db: AsyncSession,
    booking: Booking,
    target: str,
    reason: str | None = None,
) -> Booking:
    """Move a booking to ``target`` and apply the side effects of entering that state.

    Writing the current status again is a no-op.

    Raises:
        ValidationError: The transition is not allowed
    """
    previous = booking.status
    if target == previous:
        return booking
    assert_booking_transition(previous, target)

    now = utc_now()
    booking.status = target
    if target == BookingStatus.CONFIRMED.value:
        booking.confirmed_at = now
    elif target == BookingStatus.PICKED_UP.value:
        booking.picked_up_at = now
    elif target == BookingStatus.RETURNED.value:
        booking.returned_at = now
        await _restore_stock(db, booking)
    elif target == BookingStatus.CANCELLED.value:
        booking.cancelled_at = now
        booking.cancellation_reason = reason
        # Equipment already handed out is not back on the shelf
        if previous != BookingStatus.PICKED_UP.value:
            await _restore_stock(db, booking)
        if booking.payment_status in (PaymentStatus.PAID.value, PaymentStatus.PARTIAL.value):
            booking.payment_status = PaymentStatus.REFUNDED.value

    await db.flush()
    logger.info("Booking %s status %s -> %s", booking.booking_number, previous, target)

    title, template = STATUS_MESSAGES[target]
    message = template.format(number=booking.booking_number)
    if target == BookingStatus.CANCELLED.value and reason:
        message = f"{message} Reason: {reason}"
    await notification_service.notify_booking_event(db, booking, title=title, message=message)
    return booking


async def update_booking(db: AsyncSession, booking: Booking, data: BookingUpdate) -> Booking:
    """Staff/admin update of status, payment status and handling fields."""
    if data.staff_assigned_id is not None:
        booking.staff_assigned_id = data.staff_assigned_id
    if data.notes is not None:
        booking.notes = data.notes
    if data.return_notes is not None:
        booking.return_notes = data.return_notes

    if data.payment_status is not None and data.payment_status != booking.payment_status:
        assert_payment_transition(booking.payment_status, data.payment_status)
        booking.payment_status = data.payment_status
        if data.payment_status == PaymentStatus.PAID.value:
            booking.amount_paid = booking.total_price

    if data.status is not None:
        await change_status(db, booking, data.status, reason=data.reason)

    await db.flush()
    return booking


async def cancel_booking(db: AsyncSession, booking: Booking, reason: str | None = None) -> Booking:
    """Cancel a booking that is still pending, confirmed or picked up.

    Raises:
        InvalidBookingStatus: The booking is already returned or cancelled
    """
    if booking.status == BookingStatus.CANCELLED.value:
        raise InvalidBookingStatus("Booking is already cancelled")
    if booking.status == BookingStatus.RETURNED.value:
        raise InvalidBookingStatus("Returned bookings cannot be cancelled")
    return await change_status(db, booking, BookingStatus.CANCELLED.value, reason=reason)


async def record_payment(
    db: AsyncSession,
    booking: Booking,
    method: str,
    amount: Decimal | None = None,
) -> Booking:
    """Record the checkout payment step.

    Online payments without an amount settle the remaining balance. Cash
    without an amount is collected at pickup and leaves the payment pending.
    A pending booking is confirmed once a payment choice is made.

    Raises:
        InvalidBookingStatus: Booking is closed or already settled
        BadRequestError: Amount is more than the outstanding balance
    """
    if booking.status in (BookingStatus.CANCELLED.value, BookingStatus.RETURNED.value):
        raise InvalidBookingStatus(f"Cannot record payment for a {booking.status} booking")
    if booking.payment_status in (PaymentStatus.PAID.value, PaymentStatus.REFUNDED.value):
        raise InvalidBookingStatus(f"Booking payment is already {booking.payment_status}")

    method = PaymentMethod(method)
    outstanding = booking.total_price - booking.amount_paid
    if amount is None and method is PaymentMethod.ONLINE:
        amount = outstanding
    if amount is not None and amount > outstanding:
        raise BadRequestError(
            f"Payment of {amount} exceeds the outstanding balance of {outstanding}"
        )

    target = booking.payment_status
    if amount:
        booking.amount_paid = booking.amount_paid + amount
        if booking.amount_paid >= booking.total_price:
            target = PaymentStatus.PAID.value
        else:
            target = PaymentStatus.PARTIAL.value

    if target != booking.payment_status:
        assert_payment_transition(booking.payment_status, target)
        booking.payment_status = target
    booking.payment_method = method.value
    await db.flush()

    logger.info(
        "Payment recorded for booking %s: method=%s amount=%s status=%s",
        booking.booking_number,
        method.value,
        amount,
        booking.payment_status,
    )

    if amount:
        await notification_service.notify_booking_event(
            db,
            booking,
            title="Payment Received",
            message=f"We received {amount} for booking {booking.booking_number}.",
            notification_type=notification_service.PAYMENT,
        )

    if booking.status == BookingStatus.PENDING.value:
        await change_status(db, booking, BookingStatus.CONFIRMED.value)
    return booking
