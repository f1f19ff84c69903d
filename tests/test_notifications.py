import unittest
from datetime import timedelta
from unittest.mock import patch

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from rentflow.database import utc_now
from rentflow.models import Notification
from rentflow.services.notification_service import notification_service
from tests.helpers import API, ApiTestCase


class NotificationEndpointTests(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.user = await self.create_user()

    async def add_notification(self, **overrides) -> Notification:
        values = {
            "user_id": self.user.id,
            "title": "Hello",
            "message": "Welcome to RentFlow",
            "notification_type": "info",
        }
        values.update(overrides)
        async with self.session_factory() as session:
            notification = Notification(**values)
            session.add(notification)
            await session.commit()
            return notification

    async def test_list_with_unread_count_and_filters(self):
        await self.add_notification(title="One")
        await self.add_notification(title="Two", notification_type="booking")
        await self.add_notification(title="Three", is_read=True)

        everything = await self.client.get(f"{API}/notifications/", headers=self.auth(self.user))
        self.assertEqual(everything.status_code, 200)
        self.assertEqual(everything.json()["total"], 3)
        self.assertEqual(everything.json()["unread_count"], 2)

        unread = await self.client.get(
            f"{API}/notifications/", params={"is_read": False}, headers=self.auth(self.user)
        )
        self.assertEqual({n["title"] for n in unread.json()["notifications"]}, {"One", "Two"})

        bookings = await self.client.get(
            f"{API}/notifications/", params={"type": "booking"}, headers=self.auth(self.user)
        )
        self.assertEqual([n["title"] for n in bookings.json()["notifications"]], ["Two"])

    async def test_expired_notifications_are_hidden(self):
        await self.add_notification(title="Fresh")
        expired = await self.add_notification(
            title="Stale", expires_at=utc_now() - timedelta(minutes=1)
        )

        listing = await self.client.get(f"{API}/notifications/", headers=self.auth(self.user))
        self.assertEqual([n["title"] for n in listing.json()["notifications"]], ["Fresh"])

        read = await self.client.patch(
            f"{API}/notifications/{expired.id}/read", headers=self.auth(self.user)
        )
        self.assertEqual(read.status_code, 404)

    async def test_mark_one_and_all_read(self):
        first = await self.add_notification(title="First")
        await self.add_notification(title="Second")

        one = await self.client.patch(
            f"{API}/notifications/{first.id}/read", headers=self.auth(self.user)
        )
        self.assertEqual(one.status_code, 200)
        self.assertTrue(one.json()["is_read"])
        self.assertIsNotNone(one.json()["read_at"])

        all_read = await self.client.patch(
            f"{API}/notifications/read-all", headers=self.auth(self.user)
        )
        self.assertEqual(all_read.status_code, 204)

        listing = await self.client.get(f"{API}/notifications/", headers=self.auth(self.user))
        self.assertEqual(listing.json()["unread_count"], 0)

    async def test_users_cannot_touch_each_others_notifications(self):
        notification = await self.add_notification()
        other = await self.create_user()

        response = await self.client.delete(
            f"{API}/notifications/{notification.id}", headers=self.auth(other)
        )
        self.assertEqual(response.status_code, 404)

    async def test_delete_notification(self):
        notification = await self.add_notification()

        response = await self.client.delete(
            f"{API}/notifications/{notification.id}", headers=self.auth(self.user)
        )
        self.assertEqual(response.status_code, 204)

        listing = await self.client.get(f"{API}/notifications/", headers=self.auth(self.user))
        self.assertEqual(listing.json()["total"], 0)

    async def test_admin_sends_notification(self):
        admin = await self.create_user(role="admin")

        response = await self.client.post(
            f"{API}/notifications/",
            json={
                "user_id": str(self.user.id),
                "title": "Store closed",
                "message": "We are closed on Monday",
                "notification_type": "warning",
                "metadata": {"date": "2025-12-01"},
            },
            headers=self.auth(admin),
        )

        self.assertEqual(response.status_code, 201, response.text)
        self.assertEqual(response.json()["metadata"], {"date": "2025-12-01"})

        listing = await self.client.get(f"{API}/notifications/", headers=self.auth(self.user))
        self.assertEqual(listing.json()["notifications"][0]["metadata"], {"date": "2025-12-01"})

    async def test_customer_cannot_send_notification(self):
        response = await self.client.post(
            f"{API}/notifications/",
            json={"user_id": str(self.user.id), "title": "Hi", "message": "Hi"},
            headers=self.auth(self.user),
        )
        self.assertEqual(response.status_code, 403)

    async def test_admin_purges_expired(self):
        admin = await self.create_user(role="admin")
        await self.add_notification(title="Fresh")
        await self.add_notification(title="Stale", expires_at=utc_now() - timedelta(days=1))

        response = await self.client.delete(
            f"{API}/notifications/expired", headers=self.auth(admin)
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"removed": 1})


class NotificationServiceTests(ApiTestCase):
    async def test_notify_stores_notification(self):
        user = await self.create_user()

        async with self.session_factory() as session:
            notification = await notification_service.notify(
                session, user.id, "Hi", "There", metadata={"k": "v"}
            )
            await session.commit()

        self.assertIsNotNone(notification)
        self.assertEqual(notification.metadata_, {"k": "v"})
        self.assertEqual(notification.notification_type, "info")

    async def test_storage_failure_is_swallowed(self):
        user = await self.create_user()

        async with self.session_factory() as session:
            with patch.object(
                session, "begin_nested", side_effect=OperationalError("INSERT", {}, Exception("locked"))
            ):
                with self.assertLogs("rentflow.services.notification_service", level="ERROR"):
                    result = await notification_service.notify(session, user.id, "Hi", "There")
            await session.commit()

            count = await session.scalar(select(func.count(Notification.id)))

        self.assertIsNone(result)
        self.assertEqual(count, 0)

    async def test_guest_bookings_notify_nobody(self):
        product = await self.create_product()
        booking = await self.book(product)

        self.assertIsNone(booking["customer_id"])
        async with self.session_factory() as session:
            count = await session.scalar(select(func.count(Notification.id)))
        self.assertEqual(count, 0)


if __name__ == "__main__":
    unittest.main()
