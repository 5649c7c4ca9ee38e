"""Account service: creation, authentication, password changes, admin listing."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.models import Store, User
from storerate.schemas import Paginated, UserDetail, UserOut
from storerate.services.access import Role
from storerate.services.auth import hash_password, verify_password
from storerate.services.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from storerate.services.query import USER_SORT, PageParams, like_pattern, order_clauses, total_pages
from storerate.services.ratings import RatingStore

logger = logging.getLogger("uvicorn.error")

EMAIL_TAKEN_MESSAGE = "User already exists with this email"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_user(session: AsyncSession, user_id: int) -> User:
    """Fetch a user by id.

    Raises:
        NotFoundError: If no such user exists.
    """
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found", {"user_id": user_id})
    return user


async def create_user(
    session: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    address: str = "",
    role: Role = Role.USER,
) -> User:
    """Create an account.

    Email uniqueness is enforced by the users.email unique index; a violation
    becomes a ConflictError.
    """
    email = normalize_email(email)
    if await get_user_by_email(session, email) is not None:
        raise ConflictError(EMAIL_TAKEN_MESSAGE, {"email": email})

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        address=address,
        role=role,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(EMAIL_TAKEN_MESSAGE, {"email": email})

    user_id = user.id
    await session.commit()
    logger.info(f"[users] created user_id={user_id} role={role.value}")
    return user


async def authenticate(session: AsyncSession, email: str, password: str) -> User:
    """Return the user owning these credentials.

    Raises:
        AuthenticationError: Unknown email or wrong password (same message for both).
    """
    user = await get_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("[auth] login rejected")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
    return user


async def change_password(
    session: AsyncSession,
    user_id: int,
    current_password: str,
    new_password: str,
) -> None:
    """Replace a user's password after checking the current one.

    Raises:
        NotFoundError: The user no longer exists.
        ValidationError: The current password is wrong.
    """
    user = await get_user(session, user_id)
    if not verify_password(current_password, user.password_hash):
        raise ValidationError(
            "Current password is incorrect",
            fields={"currentPassword": "Current password is incorrect"},
        )
    user.password_hash = hash_password(new_password)
    await session.commit()
    logger.info(f"[users] password changed user_id={user_id}")


def parse_role_filter(role: str | None) -> Role | None:
    """Turn the optional `role` query parameter into a Role.

    Empty means "no filter"; anything that is not a known role is rejected.
    """
    if not role:
        return None
    try:
        return Role(role)
    except ValueError:
        raise ValidationError("Validation failed", fields={"role": "Invalid role"})


async def list_users(
    session: AsyncSession,
    *,
    search: str = "",
    role: Role | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: PageParams = PageParams(),
) -> Paginated[UserOut]:
    """Admin user listing with search, role filter and whitelisted sorting."""
    filters = []
    if search:
        pattern = like_pattern(search)
        filters.append(
            or_(
                User.name.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
                User.address.ilike(pattern, escape="\\"),
            )
        )
    if role is not None:
        filters.append(User.role == role)

    columns = {
        "name": User.name,
        "email": User.email,
        "role": User.role,
        "created_at": User.created_at,
    }
    query = (
        select(User)
        .where(*filters)
        .order_by(*order_clauses(USER_SORT, columns, sort_by, sort_order, tiebreaker=User.id))
        .limit(page.limit)
        .offset(page.offset)
    )
    result = await session.execute(query)
    users = result.scalars().all()

    count_result = await session.execute(select(func.count(User.id)).where(*filters))
    total_count = int(count_result.scalar_one())

    return Paginated[UserOut](
        data=[UserOut.model_validate(u) for u in users],
        total_count=total_count,
        total_pages=total_pages(total_count, page.limit),
        current_page=page.page,
    )


async def get_user_detail(session: AsyncSession, user_id: int) -> UserDetail:
    """Admin view of one user; a store owner's entry includes their store rating."""
    user = await get_user(session, user_id)
    detail = UserDetail.model_validate(user)

    if user.role == Role.STORE_OWNER:
        result = await session.execute(select(Store).where(Store.owner_id == user.id))
        store = result.scalar_one_or_none()
        if store is not None:
            detail.store_id = store.id
            detail.store_name = store.name
            detail.average_rating = await RatingStore(session).average_rating(store.id)

    return detail
