"""Shared fixtures for API tests: an in-memory database and ready-made records."""

import itertools
import unittest
from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

import httpx
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rentflow.core.security import create_tokens, get_password_hash
from rentflow.database import Base, get_db
from rentflow.main import app
from rentflow.models import Booking, Product, User

API = "/api/v1"
PASSWORD = "secret123"

_user_numbers = itertools.count(1)


def _use_explicit_transactions(engine) -> None:
    # Let SQLAlchemy issue BEGIN itself so SAVEPOINTs behave on SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


class ApiTestCase(unittest.IsolatedAsyncioTestCase):
    """Runs the app against a fresh in-memory SQLite database per test."""

    async def asyncSetUp(self):
        self.engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
        _use_explicit_transactions(self.engine)
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, autoflush=False
        )

        async def override_get_db():
            async with self.session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        app.dependency_overrides[get_db] = override_get_db
        self.client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://testserver"
        )

    async def asyncTearDown(self):
        await self.client.aclose()
        app.dependency_overrides.clear()
        await self.engine.dispose()

    # ------------------------------------------------------------------ records

    async def create_user(
        self,
        role: str = "customer",
        email: str | None = None,
        name: str = "Test User",
        is_active: bool = True,
    ) -> User:
        async with self.session_factory() as session:
            user = User(
                name=name,
                email=email or f"{role}{next(_user_numbers)}@example.com",
                password_hash=get_password_hash(PASSWORD),
                role=role,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            return user

    async def create_product(self, **overrides) -> Product:
        values = {
            "name": "Cordless Drill",
            "description": "18V cordless drill with two batteries",
            "category": "Power Tools",
            "base_price": Decimal("150.00"),
            "unit": "day",
            "stock": 5,
            "total_stock": 5,
        }
        values.update(overrides)
        async with self.session_factory() as session:
            product = Product(**values)
            session.add(product)
            await session.commit()
            return product

    async def get_product(self, product_id) -> Product:
        async with self.session_factory() as session:
            return await session.get(Product, UUID(str(product_id)))

    async def get_booking(self, booking_id) -> Booking:
        async with self.session_factory() as session:
            return await session.get(Booking, UUID(str(booking_id)))

    @staticmethod
    def auth(user: User) -> dict[str, str]:
        token = create_tokens(str(user.id), user.email, user.role)["access_token"]
        return {"Authorization": f"Bearer {token}"}

    # ----------------------------------------------------------------- payloads

    @staticmethod
    def booking_payload(product: Product, quantity: int = 1, days: int = 3, **overrides) -> dict:
        start = date.today() + timedelta(days=1)
        payload = {
            "product_id": str(product.id),
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=days)).isoformat(),
            "quantity": quantity,
            "customer": {
                "name": "Jane Renter",
                "email": "jane@example.com",
                "phone": "+1 555 123 4567",
            },
        }
        payload.update(overrides)
        return payload

    async def book(self, product: Product, user: User | None = None, **kwargs) -> dict:
        headers = self.auth(user) if user else {}
        response = await self.client.post(
            f"{API}/bookings/", json=self.booking_payload(product, **kwargs), headers=headers
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()
