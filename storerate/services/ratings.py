"""Rating store: one score per (user, store), plus aggregates.

Upsert rules:
- submit() inserts the first rating of a user for a store
- a second submit() for the same pair is a Conflict; callers must update()
- update() changes the value in place and bumps updated_at; it never inserts

Race safety comes from the `uq_ratings_user_store` constraint. Two concurrent
submits both reach INSERT; the loser gets an IntegrityError which is turned
into a Conflict after re-reading the row.

Aggregates return None for "no ratings yet", never 0.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.models import Rating, Store, User
from storerate.models.rating import is_valid_rating_value
from storerate.schemas import MyRatingRow, Paginated
from storerate.schemas.ratings import RATING_RANGE_MESSAGE
from storerate.services.errors import ConflictError, NotFoundError, ValidationError
from storerate.services.query import PageParams, total_pages

logger = logging.getLogger("uvicorn.error")

Clock = Callable[[], datetime]

ALREADY_RATED_MESSAGE = "You have already rated this store. Use update rating instead."
RATING_NOT_FOUND_MESSAGE = "Rating not found. Submit a new rating instead."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_rating_value(value: Any) -> int:
    """Return `value` if it is an int in [1, 5].

    Raises:
        ValidationError: For bools, floats (even 3.0), strings and out-of-range ints.
    """
    if not is_valid_rating_value(value):
        raise ValidationError("Validation failed", fields={"rating": RATING_RANGE_MESSAGE})
    return value


def as_average(value: object) -> float | None:
    """Normalize an AVG() result (float on SQLite, Decimal on Postgres)."""
    if value is None:
        return None
    return float(value)


@dataclass
class PlatformTotals:
    """Unfiltered aggregates."""

    total_users: int
    total_stores: int
    total_ratings: int
    average_rating: float | None


async def _store_exists(session: AsyncSession, store_id: int) -> bool:
    result = await session.execute(select(Store.id).where(Store.id == store_id))
    return result.scalar_one_or_none() is not None


async def get_rating(session: AsyncSession, user_id: int, store_id: int) -> Rating | None:
    """Fetch the rating a user gave a store, if any."""
    result = await session.execute(
        select(Rating).where(Rating.user_id == user_id, Rating.store_id == store_id)
    )
    return result.scalar_one_or_none()


class RatingStore:
    """Upsert and aggregate operations over the ratings table.

    Args:
        session: Session for the current unit of work.
        clock: Source of "now" for created_at / updated_at.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utc_now) -> None:
        self.session = session
        self.clock = clock

    # --------------------------------------------------------
    # Upsert
    # --------------------------------------------------------

    async def submit(self, user_id: int, store_id: int, value: Any) -> Rating:
        """Insert the first rating of `user_id` for `store_id`.

        Raises:
            ValidationError: value is not an int in [1, 5]. Nothing is written.
            NotFoundError: the store does not exist.
            ConflictError: the user already rated this store.
        """
        rating_value = validate_rating_value(value)

        if not await _store_exists(self.session, store_id):
            raise NotFoundError("Store not found", {"store_id": store_id})

        now = self.clock()
        rating = Rating(
            user_id=user_id,
            store_id=store_id,
            rating=rating_value,
            created_at=now,
            updated_at=now,
        )
        self.session.add(rating)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            await self._raise_for_failed_insert(user_id, store_id)
            raise

        await self.session.commit()
        logger.info(f"[ratings] submitted user_id={user_id} store_id={store_id} rating={rating_value}")
        return rating

    async def _raise_for_failed_insert(self, user_id: int, store_id: int) -> None:
        """Classify an IntegrityError from INSERT into a domain error."""
        if await get_rating(self.session, user_id, store_id) is not None:
            logger.info(f"[ratings] duplicate submit rejected user_id={user_id} store_id={store_id}")
            raise ConflictError(ALREADY_RATED_MESSAGE, {"store_id": store_id})
        if not await _store_exists(self.session, store_id):
            raise NotFoundError("Store not found", {"store_id": store_id})

    async def update(self, user_id: int, store_id: int, value: Any) -> Rating:
        """Change an existing rating in place.

        Raises:
            ValidationError: value is not an int in [1, 5]. Nothing is written.
            NotFoundError: the user has not rated this store yet.
        """
        rating_value = validate_rating_value(value)

        rating = await get_rating(self.session, user_id, store_id)
        if rating is None:
            raise NotFoundError(RATING_NOT_FOUND_MESSAGE, {"store_id": store_id})

        rating.rating = rating_value
        rating.updated_at = self.clock()
        await self.session.commit()
        logger.info(f"[ratings] updated user_id={user_id} store_id={store_id} rating={rating_value}")
        return rating

    # --------------------------------------------------------
    # Aggregates
    # --------------------------------------------------------

    async def average_rating(self, store_id: int) -> float | None:
        """Mean rating of a store, or None when it has no ratings."""
        result = await self.session.execute(
            select(func.avg(Rating.rating)).where(Rating.store_id == store_id)
        )
        return as_average(result.scalar_one())

    async def rating_count(self, store_id: int) -> int:
        """Number of ratings a store has received."""
        result = await self.session.execute(
            select(func.count(Rating.id)).where(Rating.store_id == store_id)
        )
        return int(result.scalar_one())

    async def user_average(self, user_id: int) -> float | None:
        """Mean of the ratings a user has given, or None if none."""
        result = await self.session.execute(
            select(func.avg(Rating.rating)).where(Rating.user_id == user_id)
        )
        return as_average(result.scalar_one())

    async def user_rating_count(self, user_id: int) -> int:
        """Number of ratings a user has given."""
        result = await self.session.execute(
            select(func.count(Rating.id)).where(Rating.user_id == user_id)
        )
        return int(result.scalar_one())

    async def platform_totals(self) -> PlatformTotals:
        """Counts across the whole platform."""
        users = await self.session.execute(select(func.count(User.id)))
        stores = await self.session.execute(select(func.count(Store.id)))
        ratings = await self.session.execute(
            select(func.count(Rating.id), func.avg(Rating.rating))
        )
        rating_count, avg = ratings.one()
        return PlatformTotals(
            total_users=int(users.scalar_one()),
            total_stores=int(stores.scalar_one()),
            total_ratings=int(rating_count),
            average_rating=as_average(avg),
        )


def round_average(value: float | None, ndigits: int = 1) -> float | None:
    """Round an average for display, keeping None as "no data"."""
    if value is None:
        return None
    return round(value, ndigits)


async def list_user_ratings(
    session: AsyncSession,
    user_id: int,
    *,
    page: PageParams = PageParams(),
) -> Paginated[MyRatingRow]:
    """Ratings a user has given, most recently changed first."""
    result = await session.execute(
        select(
            Rating.id,
            Rating.rating,
            Rating.created_at,
            Rating.updated_at,
            Store.id,
            Store.name,
            Store.address,
        )
        .join(Store, Store.id == Rating.store_id)
        .where(Rating.user_id == user_id)
        .order_by(Rating.updated_at.desc(), Rating.id.desc())
        .limit(page.limit)
        .offset(page.offset)
    )
    data = [
        MyRatingRow(
            id=rating_id,
            rating=value,
            created_at=created_at,
            updated_at=updated_at,
            store_id=store_id,
            store_name=store_name,
            store_address=store_address,
        )
        for rating_id, value, created_at, updated_at, store_id, store_name, store_address in result.all()
    ]

    total_count = await RatingStore(session).user_rating_count(user_id)
    return Paginated[MyRatingRow](
        data=data,
        total_count=total_count,
        total_pages=total_pages(total_count, page.limit),
        current_page=page.page,
    )
