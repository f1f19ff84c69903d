"""Background task that purges expired notifications."""

import asyncio
import logging

from rentflow.config import settings
from rentflow.services.notification_service import notification_service

logger = logging.getLogger(__name__)

# Flag to stop the background task
_stop_purge = False


async def start_notification_purge_scheduler(interval_seconds: int | None = None) -> None:
    """Purge expired notifications every ``interval_seconds`` until stopped."""
    global _stop_purge
    _stop_purge = False
    interval = interval_seconds or settings.notification_purge_interval_seconds

    logger.info("Notification purge scheduler started (every %ss)", interval)

    while not _stop_purge:
        try:
            await notification_service.run_purge()
        except Exception:
            logger.exception("Scheduled notification purge failed")

        # Wait for next interval (check stop flag every second)
        slept = 0
        while slept < interval and not _stop_purge:
            step = min(1, interval - slept)
            await asyncio.sleep(step)
            slept += step

    logger.info("Notification purge scheduler stopped")


def stop_notification_purge_scheduler() -> None:
    """Signal the purge scheduler to stop."""
    global _stop_purge
    _stop_purge = True
