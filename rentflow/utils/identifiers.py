"""Booking number and slug generation utilities."""

import random
import re
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

BOOKING_PREFIX = "RNT"


async def generate_booking_number(db: AsyncSession) -> str:
    """Generate a unique booking number in format RNT-XXXXXX.

    Args:
        db: Database session for uniqueness check

    Returns:
        str: Unique booking number like 'RNT-A3B7K9'
    """
    from rentflow.models.booking import Booking

    chars = string.ascii_uppercase + string.digits
    while True:
        booking_number = f"{BOOKING_PREFIX}-{''.join(random.choices(chars, k=6))}"

        result = await db.execute(
            select(Booking.id).where(Booking.booking_number == booking_number)
        )
        if result.scalar_one_or_none() is None:
            return booking_number


def slugify(value: str) -> str:
    """Lowercase, hyphen-separated, URL-safe form of a name.

    'Power Tools & Drills' -> 'power-tools-drills'
    """
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower())
    return slug.strip("-") or "category"


async def generate_category_slug(db: AsyncSession, name: str) -> str:
    """Slug for a category name, suffixed with a counter when already taken."""
    from rentflow.models.product import Category

    base = slugify(name)
    slug = base
    counter = 2
    while True:
        result = await db.execute(select(Category.id).where(Category.slug == slug))
        if result.scalar_one_or_none() is None:
            return slug
        slug = f"{base}-{counter}"
        counter += 1
