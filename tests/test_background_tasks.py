import unittest
from unittest.mock import AsyncMock, patch

from rentflow.core import background_tasks


class NotificationPurgeSchedulerTests(unittest.IsolatedAsyncioTestCase):
    async def test_keeps_running_after_a_failed_purge(self):
        calls = []

        async def fake_purge():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("database unavailable")
            background_tasks.stop_notification_purge_scheduler()
            return 0

        with patch.object(
            background_tasks.notification_service, "run_purge", new=AsyncMock(side_effect=fake_purge)
        ):
            with self.assertLogs("rentflow.core.background_tasks", level="ERROR"):
                await background_tasks.start_notification_purge_scheduler(interval_seconds=1)

        self.assertEqual(len(calls), 2)


if __name__ == "__main__":
    unittest.main()
