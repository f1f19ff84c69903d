"""In-app notification service.

Notifications are written through the caller's session inside a SAVEPOINT.
A failure to store one is logged and dropped so that the booking, payment or
status change that triggered it still goes through.
"""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.database import get_db_context, utc_now
from rentflow.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Creates and purges in-app notifications."""

    # Notification types
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    BOOKING = "booking"
    PAYMENT = "payment"
    SYSTEM = "system"

    async def notify(
        self,
        db: AsyncSession,
        user_id: UUID,
        title: str,
        message: str,
        notification_type: str = INFO,
        action_url: str | None = None,
        booking_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Notification | None:
        """Create an in-app notification.

        Args:
            db: Database session of the triggering request
            user_id: User to notify
            title: Notification title
            message: Notification body text
            notification_type: One of the type constants above
            action_url: Optional link into the client app
            booking_id: Related booking ID
            metadata: Extra key/value data for the client

        Returns:
            Notification | None: The stored notification, or None if it could not be saved
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            notification_type=notification_type,
            action_url=action_url,
            booking_id=booking_id,
            metadata_=metadata or {},
        )
        try:
            async with db.begin_nested():
                db.add(notification)
        except SQLAlchemyError:
            logger.exception("Failed to store notification '%s' for user %s", title, user_id)
            return None
        return notification

    async def notify_booking_event(
        self,
        db: AsyncSession,
        booking: Any,
        title: str,
        message: str,
        notification_type: str = BOOKING,
    ) -> Notification | None:
        """Notify a booking's registered customer. Guest bookings have nobody to notify."""
        if booking.customer_id is None:
            return None
        return await self.notify(
            db,
            user_id=booking.customer_id,
            title=title,
            message=message,
            notification_type=notification_type,
            action_url=f"/bookings/{booking.id}",
            booking_id=booking.id,
            metadata={"booking_number": booking.booking_number, "status": booking.status},
        )

    async def purge_expired_notifications(
        self, db: AsyncSession, now: datetime | None = None
    ) -> int:
        """Delete notifications whose expiry has passed.

        Returns:
            int: Number of notifications removed
        """
        result = await db.execute(
            delete(Notification).where(Notification.expires_at <= (now or utc_now()))
        )
        return result.rowcount or 0

    async def run_purge(self) -> int:
        """Purge in a session of its own, for scheduled runs."""
        async with get_db_context() as db:
            removed = await self.purge_expired_notifications(db)
        if removed:
            logger.info("Purged %d expired notifications", removed)
        return removed


# Singleton instance
notification_service = NotificationService()
