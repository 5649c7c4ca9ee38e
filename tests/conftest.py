"""Shared fixtures.

Each test gets a fresh SQLite database file (via aiosqlite) behind the same
`Database` handle the app uses in production.
"""

import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from storerate.main import create_app  # noqa: E402
from storerate.models import Store, User  # noqa: E402
from storerate.services.access import Role  # noqa: E402
from storerate.services.auth import create_access_token  # noqa: E402
from storerate.services.stores import create_store  # noqa: E402
from storerate.services.users import create_user  # noqa: E402
from storerate.stores.postgres import Database  # noqa: E402

PASSWORD = "Secret@123"


@pytest.fixture
async def db(tmp_path):
    """Empty schema in a throwaway SQLite file."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.create_tables()
    yield database
    await database.dispose()


@pytest.fixture
async def session(db: Database):
    """Session for service-level tests."""
    async with db.session() as s:
        yield s


@pytest.fixture
async def client(db: Database):
    """HTTP client bound to an app using the test database."""
    app = create_app(database=db)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


def auth_header(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


async def make_user(
    db: Database,
    email: str,
    role: Role = Role.USER,
    name: str = "Test Account Person Name",
    address: str = "1 Test Street",
) -> User:
    async with db.session() as s:
        return await create_user(s, name=name, email=email, password=PASSWORD, address=address, role=role)


async def make_store(
    db: Database,
    name: str,
    email: str | None = None,
    owner_email: str | None = None,
    address: str = "1 Market Street",
) -> Store:
    """Create a store; a store_owner account is created when none is given."""
    email = email or f"{name.lower().replace(' ', '-')}@stores.example.com"
    if owner_email is None:
        owner_email = f"owner-{email}"
        await make_user(db, owner_email, role=Role.STORE_OWNER)
    async with db.session() as s:
        return await create_store(s, name=name, email=email, address=address, owner_email=owner_email)
