"""Database models."""

from rentflow.models.booking import Booking
from rentflow.models.issue import Issue
from rentflow.models.notification import Notification
from rentflow.models.product import Category, Product
from rentflow.models.user import User

__all__ = [
    # User
    "User",
    # Catalog
    "Category",
    "Product",
    # Booking
    "Booking",
    # Notification
    "Notification",
    # Issue
    "Issue",
]
