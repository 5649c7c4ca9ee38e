"""Dashboard statistics.

- Admin dashboard: platform totals
- Platform stats: totals, top-rated stores, latest ratings
- User stats: the caller's own rating activity

Averages are rounded to one decimal for display; "no ratings" stays None.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.models import Rating, Store, User
from storerate.schemas import AdminDashboard, PlatformStats, RecentRating, StoreSummary, UserStats
from storerate.services.ratings import RatingStore, as_average, round_average

TOP_STORES_LIMIT = 5
PLATFORM_RECENT_LIMIT = 10
USER_RECENT_LIMIT = 5


async def get_admin_dashboard(session: AsyncSession) -> AdminDashboard:
    """Counts of users, stores and ratings."""
    totals = await RatingStore(session).platform_totals()
    return AdminDashboard(
        total_users=totals.total_users,
        total_stores=totals.total_stores,
        total_ratings=totals.total_ratings,
        average_rating=round_average(totals.average_rating),
    )


async def get_platform_stats(session: AsyncSession) -> PlatformStats:
    """Totals plus the best-rated stores and the latest ratings."""
    totals = await RatingStore(session).platform_totals()

    avg = func.avg(Rating.rating)
    count = func.count(Rating.id)
    top_result = await session.execute(
        select(Store, avg.label("average_rating"), count.label("total_ratings"))
        .join(Rating, Rating.store_id == Store.id)
        .group_by(Store.id)
        .order_by(avg.desc(), count.desc(), Store.id.asc())
        .limit(TOP_STORES_LIMIT)
    )
    top_stores = [
        StoreSummary(
            id=store.id,
            name=store.name,
            email=store.email,
            address=store.address,
            average_rating=as_average(average_rating),
            total_ratings=int(total_ratings),
            created_at=store.created_at,
        )
        for store, average_rating, total_ratings in top_result.all()
    ]

    recent_result = await session.execute(
        select(Rating.id, Rating.rating, Rating.created_at, Store.name, User.name)
        .join(Store, Store.id == Rating.store_id)
        .join(User, User.id == Rating.user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .limit(PLATFORM_RECENT_LIMIT)
    )
    recent = [
        RecentRating(
            id=rating_id,
            rating=value,
            created_at=created_at,
            store_name=store_name,
            user_name=user_name,
        )
        for rating_id, value, created_at, store_name, user_name in recent_result.all()
    ]

    return PlatformStats(
        total_stores=totals.total_stores,
        total_ratings=totals.total_ratings,
        average_rating=round_average(totals.average_rating),
        top_stores=top_stores,
        recent_ratings=recent,
    )


async def get_user_stats(session: AsyncSession, user_id: int) -> UserStats:
    """A normal user's rating activity."""
    ratings = RatingStore(session)
    total_stores = await session.execute(select(func.count(Store.id)))

    recent_result = await session.execute(
        select(Rating.id, Rating.rating, Rating.created_at, Store.name, Store.address)
        .join(Store, Store.id == Rating.store_id)
        .where(Rating.user_id == user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .limit(USER_RECENT_LIMIT)
    )
    recent = [
        RecentRating(
            id=rating_id,
            rating=value,
            created_at=created_at,
            store_name=store_name,
            store_address=store_address,
        )
        for rating_id, value, created_at, store_name, store_address in recent_result.all()
    ]

    return UserStats(
        total_stores=int(total_stores.scalar_one()),
        my_ratings=await ratings.user_rating_count(user_id),
        average_rating=round_average(await ratings.user_average(user_id)),
        recent_ratings=recent,
    )
