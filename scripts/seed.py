#!/usr/bin/env python3
"""Seed database with demo data.

Creates:
- One system admin
- Store owners, each with one store
- Normal users with a few ratings

Seed script is idempotent: existing emails are skipped, existing ratings
are left alone.

Usage:
    python -m scripts.seed            # tables must exist (alembic upgrade head)
    python -m scripts.seed --create   # create tables first (local dev)

Optional env vars:
    SEED_ADMIN_EMAIL, SEED_ADMIN_PASSWORD
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from storerate.services.access import Role  # noqa: E402
from storerate.services.errors import ConflictError  # noqa: E402
from storerate.services.ratings import RatingStore, get_rating  # noqa: E402
from storerate.services.stores import create_store  # noqa: E402
from storerate.services.users import create_user, get_user_by_email  # noqa: E402
from storerate.settings import get_settings  # noqa: E402
from storerate.stores.postgres import create_database  # noqa: E402

load_dotenv()

DEMO_PASSWORD = "Demo@1234"

ADMIN = {
    "name": "Platform Administrator Account",
    "email": os.getenv("SEED_ADMIN_EMAIL", "admin@storerate.example.com"),
    "password": os.getenv("SEED_ADMIN_PASSWORD", "Admin@1234"),
    "address": "1 Admin Plaza",
}

OWNERS = [
    {
        "name": "Corner Grocery Owner Account",
        "email": "owner.grocery@storerate.example.com",
        "address": "12 Market Street",
        "store": {"name": "Corner Grocery", "email": "hello@cornergrocery.example.com", "address": "12 Market Street"},
    },
    {
        "name": "Night Owl Books Owner Account",
        "email": "owner.books@storerate.example.com",
        "address": "48 Library Lane",
        "store": {"name": "Night Owl Books", "email": "shop@nightowlbooks.example.com", "address": "48 Library Lane"},
    },
    {
        "name": "Daily Grind Coffee Owner Account",
        "email": "owner.coffee@storerate.example.com",
        "address": "7 Bean Avenue",
        "store": {"name": "Daily Grind Coffee", "email": "brew@dailygrind.example.com", "address": "7 Bean Avenue"},
    },
]

USERS = [
    {"name": "Alexandra Catherine Smith", "email": "alex@storerate.example.com", "address": "3 Elm Road"},
    {"name": "Benjamin Alexander Jones", "email": "ben@storerate.example.com", "address": "99 Oak Street"},
]

# (user email, store email, rating)
RATINGS = [
    ("alex@storerate.example.com", "hello@cornergrocery.example.com", 5),
    ("alex@storerate.example.com", "shop@nightowlbooks.example.com", 4),
    ("ben@storerate.example.com", "hello@cornergrocery.example.com", 3),
    ("ben@storerate.example.com", "brew@dailygrind.example.com", 5),
]


async def ensure_user(session: AsyncSession, role: Role, **fields: str) -> int:
    """Create a user unless the email exists; return the id."""
    existing = await get_user_by_email(session, fields["email"])
    if existing is not None:
        print(f"  ⏭️  {fields['email']} (exists)")
        return existing.id
    user = await create_user(session, role=role, **fields)
    print(f"  ✅ {fields['email']} ({role.value})")
    return user.id


async def seed_database(create_tables: bool = False) -> None:
    """Seed all demo data."""
    db = create_database(get_settings())
    try:
        if create_tables:
            await db.create_tables()

        async with db.session() as session:
            print("👤 Users")
            await ensure_user(session, Role.SYSTEM_ADMIN, **ADMIN)
            for owner in OWNERS:
                await ensure_user(
                    session,
                    Role.STORE_OWNER,
                    name=owner["name"],
                    email=owner["email"],
                    password=DEMO_PASSWORD,
                    address=owner["address"],
                )
            user_ids = {}
            for u in USERS:
                user_ids[u["email"]] = await ensure_user(session, Role.USER, password=DEMO_PASSWORD, **u)

            print("🏪 Stores")
            store_ids = {}
            for owner in OWNERS:
                store = owner["store"]
                try:
                    created = await create_store(session, owner_email=owner["email"], **store)
                    store_ids[store["email"]] = created.id
                    print(f"  ✅ {store['name']}")
                except ConflictError:
                    print(f"  ⏭️  {store['name']} (exists)")

            print("⭐ Ratings")
            ratings = RatingStore(session)
            for user_email, store_email, value in RATINGS:
                store_id = store_ids.get(store_email)
                if store_id is None:
                    continue
                if await get_rating(session, user_ids[user_email], store_id) is not None:
                    continue
                await ratings.submit(user_ids[user_email], store_id, value)
                print(f"  ✅ {user_email} → {store_email}: {value}")
    finally:
        await db.dispose()

    print("Done.")


if __name__ == "__main__":
    asyncio.run(seed_database(create_tables="--create" in sys.argv[1:]))
