"""Admin dashboard statistics (read-only queries)."""

from collections import defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.domain.booking_state import ACTIVE_STATUSES, BookingStatus
from rentflow.domain.payment_state import PaymentStatus
from rentflow.domain.pricing import CENTS
from rentflow.models.booking import Booking
from rentflow.models.product import Product
from rentflow.models.user import User

# Products below this share of their total stock count as low
LOW_STOCK_RATIO = 0.2
MONTHS_REPORTED = 12
RECENT_USERS = 5
TOP_RATED_LIMIT = 5
TOP_RATED_MIN_RATING = 4.0


class ReportingService:
    """Read-only statistics for the admin dashboards."""

    async def get_booking_stats(self, db: AsyncSession, today: date | None = None) -> dict:
        """Booking counts, revenue from paid bookings and the last twelve months of activity."""
        today = today or date.today()
        active = [s.value for s in ACTIVE_STATUSES]

        total = await db.scalar(select(func.count(Booking.id))) or 0
        active_count = await db.scalar(
            select(func.count(Booking.id)).where(
                Booking.status.in_([BookingStatus.CONFIRMED.value, BookingStatus.PICKED_UP.value])
            )
        ) or 0
        overdue = await db.scalar(
            select(func.count(Booking.id)).where(
                Booking.status.in_(active), Booking.end_date < today
            )
        ) or 0
        pending_payments = await db.scalar(
            select(func.count(Booking.id)).where(
                Booking.payment_status == PaymentStatus.PENDING.value
            )
        ) or 0

        by_status = await db.execute(
            select(Booking.status, func.count(Booking.id)).group_by(Booking.status)
        )

        paid_totals = (
            await db.execute(
                select(Booking.total_price).where(
                    Booking.payment_status == PaymentStatus.PAID.value
                )
            )
        ).scalars().all()
        total_revenue = sum(paid_totals, Decimal("0"))
        average = (total_revenue / len(paid_totals)).quantize(CENTS) if paid_totals else Decimal("0")

        # Grouped by (year, month) of creation, newest first
        monthly: dict[tuple[int, int], dict] = defaultdict(
            lambda: {"count": 0, "revenue": Decimal("0")}
        )
        rows = await db.execute(select(Booking.created_at, Booking.total_price))
        for created_at, total_price in rows.all():
            bucket = monthly[(created_at.year, created_at.month)]
            bucket["count"] += 1
            bucket["revenue"] += total_price
        months = sorted(monthly.items(), reverse=True)[:MONTHS_REPORTED]

        return {
            "total_bookings": total,
            "active_bookings": active_count,
            "overdue_bookings": overdue,
            "pending_payments": pending_payments,
            "bookings_by_status": [
                {"status": status, "count": count} for status, count in by_status.all()
            ],
            "revenue": {
                "total_revenue": total_revenue,
                "average_booking_value": average,
            },
            "monthly_bookings": [
                {"year": year, "month": month, **values}
                for (year, month), values in months
            ],
        }

    async def get_product_stats(self, db: AsyncSession) -> dict:
        """Catalog size, stock health and the best rated products."""
        total = await db.scalar(select(func.count(Product.id))) or 0
        active = await db.scalar(
            select(func.count(Product.id)).where(
                Product.is_active.is_(True), Product.is_rentable.is_(True)
            )
        ) or 0
        out_of_stock = await db.scalar(
            select(func.count(Product.id)).where(Product.stock == 0)
        ) or 0
        low_stock = await db.scalar(
            select(func.count(Product.id)).where(
                Product.stock < Product.total_stock * LOW_STOCK_RATIO
            )
        ) or 0

        by_category = await db.execute(
            select(Product.category, func.count(Product.id))
            .where(Product.category.is_not(None))
            .group_by(Product.category)
        )
        top_rated = await db.execute(
            select(Product)
            .where(Product.rating >= TOP_RATED_MIN_RATING)
            .order_by(Product.rating.desc(), Product.review_count.desc())
            .limit(TOP_RATED_LIMIT)
        )

        return {
            "total_products": total,
            "active_products": active,
            "out_of_stock": out_of_stock,
            "low_stock": low_stock,
            "products_by_category": [
                {"category": category, "count": count} for category, count in by_category.all()
            ],
            "top_rated_products": [
                {
                    "id": p.id,
                    "name": p.name,
                    "rating": p.rating,
                    "review_count": p.review_count,
                }
                for p in top_rated.scalars().all()
            ],
        }

    async def get_user_stats(self, db: AsyncSession) -> dict:
        """Account counts by state and role, plus the newest sign-ups."""
        total = await db.scalar(select(func.count(User.id))) or 0
        active = await db.scalar(
            select(func.count(User.id)).where(User.is_active.is_(True))
        ) or 0
        verified = await db.scalar(
            select(func.count(User.id)).where(User.is_verified.is_(True))
        ) or 0
        by_role = await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
        recent = await db.execute(select(User).order_by(User.created_at.desc()).limit(RECENT_USERS))

        return {
            "total_users": total,
            "active_users": active,
            "verified_users": verified,
            "users_by_role": [{"role": role, "count": count} for role, count in by_role.all()],
            "recent_users": [
                {"id": u.id, "name": u.name, "email": u.email, "role": u.role}
                for u in recent.scalars().all()
            ],
        }


# Singleton instance
reporting_service = ReportingService()
