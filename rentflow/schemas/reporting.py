"""Admin report schemas."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel


class StatusCount(BaseModel):
    status: str
    count: int


class RevenueSummary(BaseModel):
    total_revenue: Decimal
    average_booking_value: Decimal


class MonthlyBookings(BaseModel):
    year: int
    month: int
    count: int
    revenue: Decimal


class BookingStatsResponse(BaseModel):
    total_bookings: int
    active_bookings: int
    overdue_bookings: int
    pending_payments: int
    bookings_by_status: list[StatusCount]
    revenue: RevenueSummary
    monthly_bookings: list[MonthlyBookings]


class CategoryCount(BaseModel):
    category: str
    count: int


class TopRatedProduct(BaseModel):
    id: UUID
    name: str
    rating: float
    review_count: int


class ProductStatsResponse(BaseModel):
    total_products: int
    active_products: int
    out_of_stock: int
    low_stock: int
    products_by_category: list[CategoryCount]
    top_rated_products: list[TopRatedProduct]


class RoleCount(BaseModel):
    role: str
    count: int


class RecentUser(BaseModel):
    id: UUID
    name: str
    email: str
    role: str


class UserStatsResponse(BaseModel):
    total_users: int
    active_users: int
    verified_users: int
    users_by_role: list[RoleCount]
    recent_users: list[RecentUser]
