#!/usr/bin/env python3
"""Create an admin user, or reset an existing account to admin."""

import asyncio

from sqlalchemy import select

from rentflow.core.security import get_password_hash
from rentflow.database import close_db, get_db_context, init_db
from rentflow.models.user import User


async def create_admin(
    email: str = "admin@rentflow.local",
    password: str = "Admin@123",
    name: str = "RentFlow Admin",
    create_tables: bool = False,
) -> None:
    """Create an admin user if it doesn't exist, otherwise refresh its password and role."""
    if create_tables:
        await init_db()

    async with get_db_context() as session:
        result = await session.execute(select(User).where(User.email == email))
        existing = result.scalar_one_or_none()

        if existing:
            existing.password_hash = get_password_hash(password)
            existing.role = "admin"
            existing.is_verified = True
            existing.is_active = True
            existing.name = name
            print(f"Updated existing admin user: {email}")
        else:
            session.add(
                User(
                    name=name,
                    email=email,
                    password_hash=get_password_hash(password),
                    role="admin",
                    is_verified=True,
                    is_active=True,
                )
            )
            print(f"Created admin user: {email}")

    await close_db()

    print(f"Email: {email}")
    print(f"Password: {password}")
    print("Role: admin")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", default="admin@rentflow.local", help="Admin email")
    parser.add_argument("--password", default="Admin@123", help="Admin password")
    parser.add_argument("--name", default="RentFlow Admin", help="Display name")
    parser.add_argument(
        "--create-tables", action="store_true", help="Create database tables first"
    )

    args = parser.parse_args()

    asyncio.run(
        create_admin(
            email=args.email,
            password=args.password,
            name=args.name,
            create_tables=args.create_tables,
        )
    )
