"""Store service: creation, catalogue listings, owner views.

Ranking/aggregation per store:
- averageRating = AVG(ratings.rating), null when the store has no ratings
- totalRatings = COUNT(ratings.id)

Both come from one grouped subquery joined onto stores, so listings can
sort by averageRating without grouping over every store column.
"""

import logging

from sqlalchemy import ColumnElement, Subquery, and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from storerate.models import Rating, Store, User
from storerate.schemas import (
    AdminStoreRow,
    OwnerDashboard,
    Paginated,
    StoreDetail,
    StoreRatingRow,
    StoreSummary,
)
from storerate.services.access import Role
from storerate.services.errors import ConflictError, NotFoundError, ValidationError
from storerate.services.query import (
    ADMIN_STORE_SORT,
    OWNER_RATING_SORT,
    STORE_BROWSE_SORT,
    PageParams,
    like_pattern,
    order_clauses,
    total_pages,
)
from storerate.services.ratings import as_average
from storerate.services.users import get_user_by_email, normalize_email

logger = logging.getLogger("uvicorn.error")

STORE_EMAIL_TAKEN_MESSAGE = "Store already exists with this email"
OWNER_INVALID_MESSAGE = "Owner not found or user is not a store owner"
OWNER_HAS_STORE_MESSAGE = "This owner already has a store"
OWNER_STORE_NOT_FOUND_MESSAGE = "Store not found for this owner"


def rating_stats_subquery() -> Subquery:
    """Per-store average and count, one row per rated store."""
    return (
        select(
            Rating.store_id.label("store_id"),
            func.avg(Rating.rating).label("average_rating"),
            func.count(Rating.id).label("total_ratings"),
        )
        .group_by(Rating.store_id)
        .subquery("rating_stats")
    )


def _search_filter(search: str, *columns: ColumnElement[str]) -> ColumnElement[bool]:
    pattern = like_pattern(search)
    return or_(*(c.ilike(pattern, escape="\\") for c in columns))


async def _get_store(session: AsyncSession, store_id: int) -> Store:
    store = await session.get(Store, store_id)
    if store is None:
        raise NotFoundError("Store not found", {"store_id": store_id})
    return store


# ============================================================
# Creation
# ============================================================


async def create_store(
    session: AsyncSession,
    *,
    name: str,
    email: str,
    address: str,
    owner_email: str,
) -> Store:
    """Create a store owned by an existing store_owner account.

    Raises:
        ConflictError: Store email already used, or the owner already has a store.
        ValidationError: Owner email unknown or not a store_owner.
    """
    email = normalize_email(email)

    existing = await session.execute(select(Store.id).where(Store.email == email))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(STORE_EMAIL_TAKEN_MESSAGE, {"email": email})

    owner = await get_user_by_email(session, owner_email)
    if owner is None or owner.role != Role.STORE_OWNER:
        raise ValidationError(OWNER_INVALID_MESSAGE, fields={"ownerEmail": OWNER_INVALID_MESSAGE})

    owned = await session.execute(select(Store.id).where(Store.owner_id == owner.id))
    if owned.scalar_one_or_none() is not None:
        raise ConflictError(OWNER_HAS_STORE_MESSAGE, {"ownerEmail": owner.email})

    owner_id = owner.id
    owner_email = owner.email
    store = Store(name=name, email=email, address=address, owner_id=owner_id)
    session.add(store)
    try:
        await session.flush()
    except IntegrityError:
        # Lost a race on stores.email or stores.owner_id
        await session.rollback()
        owned = await session.execute(select(Store.id).where(Store.owner_id == owner_id))
        if owned.scalar_one_or_none() is not None:
            raise ConflictError(OWNER_HAS_STORE_MESSAGE, {"ownerEmail": owner_email})
        raise ConflictError(STORE_EMAIL_TAKEN_MESSAGE, {"email": email})

    store_id = store.id
    await session.commit()
    logger.info(f"[stores] created store_id={store_id} owner_id={owner_id}")
    return store


# ============================================================
# Catalogue
# ============================================================


async def browse_stores(
    session: AsyncSession,
    *,
    viewer_id: int | None = None,
    search: str = "",
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: PageParams = PageParams(page=1, limit=12),
) -> Paginated[StoreSummary]:
    """Store catalogue with aggregates; includes the viewer's own rating when given."""
    stats = rating_stats_subquery()
    columns = [
        Store,
        stats.c.average_rating,
        func.coalesce(stats.c.total_ratings, 0).label("total_ratings"),
    ]
    mine = None
    if viewer_id is not None:
        mine = aliased(Rating, name="my_rating")
        columns.append(mine.rating.label("user_rating"))

    filters = []
    if search:
        filters.append(_search_filter(search, Store.name, Store.address))

    sort_columns = {
        "name": Store.name,
        "averageRating": stats.c.average_rating,
        "created_at": Store.created_at,
    }
    query = select(*columns).outerjoin(stats, stats.c.store_id == Store.id)
    if mine is not None:
        query = query.outerjoin(mine, and_(mine.store_id == Store.id, mine.user_id == viewer_id))
    query = (
        query.where(*filters)
        .order_by(*order_clauses(STORE_BROWSE_SORT, sort_columns, sort_by, sort_order, tiebreaker=Store.id))
        .limit(page.limit)
        .offset(page.offset)
    )
    result = await session.execute(query)

    data = []
    for row in result.all():
        store = row[0]
        data.append(
            StoreSummary(
                id=store.id,
                name=store.name,
                email=store.email,
                address=store.address,
                average_rating=as_average(row.average_rating),
                total_ratings=int(row.total_ratings),
                created_at=store.created_at,
                user_rating=row.user_rating if mine is not None else None,
            )
        )

    total_count = await _count_stores(session, filters)
    return Paginated[StoreSummary](
        data=data,
        total_count=total_count,
        total_pages=total_pages(total_count, page.limit),
        current_page=page.page,
    )


async def list_admin_stores(
    session: AsyncSession,
    *,
    search: str = "",
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: PageParams = PageParams(),
) -> Paginated[AdminStoreRow]:
    """Admin store listing: aggregates plus owner contact."""
    stats = rating_stats_subquery()
    owner = aliased(User, name="owner")

    filters = []
    if search:
        filters.append(_search_filter(search, Store.name, Store.email, Store.address))

    sort_columns = {
        "name": Store.name,
        "email": Store.email,
        "created_at": Store.created_at,
        "averageRating": stats.c.average_rating,
    }
    query = (
        select(
            Store,
            stats.c.average_rating,
            func.coalesce(stats.c.total_ratings, 0).label("total_ratings"),
            owner.name.label("owner_name"),
            owner.email.label("owner_email"),
        )
        .outerjoin(stats, stats.c.store_id == Store.id)
        .outerjoin(owner, owner.id == Store.owner_id)
        .where(*filters)
        .order_by(*order_clauses(ADMIN_STORE_SORT, sort_columns, sort_by, sort_order, tiebreaker=Store.id))
        .limit(page.limit)
        .offset(page.offset)
    )
    result = await session.execute(query)

    data = [
        AdminStoreRow(
            id=row[0].id,
            name=row[0].name,
            email=row[0].email,
            address=row[0].address,
            average_rating=as_average(row.average_rating),
            total_ratings=int(row.total_ratings),
            created_at=row[0].created_at,
            owner_name=row.owner_name,
            owner_email=row.owner_email,
        )
        for row in result.all()
    ]

    total_count = await _count_stores(session, filters)
    return Paginated[AdminStoreRow](
        data=data,
        total_count=total_count,
        total_pages=total_pages(total_count, page.limit),
        current_page=page.page,
    )


async def _count_stores(session: AsyncSession, filters: list[ColumnElement[bool]]) -> int:
    result = await session.execute(select(func.count(Store.id)).where(*filters))
    return int(result.scalar_one())


async def get_store_detail(session: AsyncSession, store_id: int) -> StoreDetail:
    """One store with aggregates and owner.

    Raises:
        NotFoundError: Unknown store id.
    """
    stats = rating_stats_subquery()
    owner = aliased(User, name="owner")
    result = await session.execute(
        select(
            Store,
            stats.c.average_rating,
            func.coalesce(stats.c.total_ratings, 0).label("total_ratings"),
            owner.name.label("owner_name"),
            owner.email.label("owner_email"),
        )
        .outerjoin(stats, stats.c.store_id == Store.id)
        .outerjoin(owner, owner.id == Store.owner_id)
        .where(Store.id == store_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Store not found", {"store_id": store_id})

    store = row[0]
    return StoreDetail(
        id=store.id,
        name=store.name,
        email=store.email,
        address=store.address,
        average_rating=as_average(row.average_rating),
        total_ratings=int(row.total_ratings),
        created_at=store.created_at,
        owner_id=store.owner_id,
        owner_name=row.owner_name,
        owner_email=row.owner_email,
    )


async def list_store_ratings(
    session: AsyncSession,
    store_id: int,
    *,
    page: PageParams = PageParams(),
) -> Paginated[StoreRatingRow]:
    """Ratings on one store, newest first, with the rater's name."""
    await _get_store(session, store_id)
    return await _ratings_page(
        session,
        store_id,
        order_by=[Rating.created_at.desc(), Rating.id.desc()],
        page=page,
        include_email=False,
    )


# ============================================================
# Store owner
# ============================================================


async def get_owned_store(session: AsyncSession, owner_id: int) -> Store:
    """The store owned by `owner_id`.

    Raises:
        NotFoundError: The owner has no store.
    """
    result = await session.execute(select(Store).where(Store.owner_id == owner_id))
    store = result.scalar_one_or_none()
    if store is None:
        raise NotFoundError(OWNER_STORE_NOT_FOUND_MESSAGE, {"owner_id": owner_id})
    return store


async def get_owner_dashboard(session: AsyncSession, owner_id: int) -> OwnerDashboard:
    """Own store with its average (null if unrated) and rating count."""
    store = await get_owned_store(session, owner_id)
    result = await session.execute(
        select(func.avg(Rating.rating), func.count(Rating.id)).where(Rating.store_id == store.id)
    )
    avg, count = result.one()
    return OwnerDashboard(
        id=store.id,
        name=store.name,
        email=store.email,
        address=store.address,
        average_rating=as_average(avg),
        total_ratings=int(count),
    )


async def list_owned_store_ratings(
    session: AsyncSession,
    owner_id: int,
    *,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: PageParams = PageParams(),
) -> Paginated[StoreRatingRow]:
    """Who rated the owner's store, sortable by created_at, rating or userName."""
    store = await get_owned_store(session, owner_id)
    sort_columns = {
        "created_at": Rating.created_at,
        "rating": Rating.rating,
        "userName": User.name,
    }
    return await _ratings_page(
        session,
        store.id,
        order_by=order_clauses(OWNER_RATING_SORT, sort_columns, sort_by, sort_order, tiebreaker=Rating.id),
        page=page,
        include_email=True,
    )


async def _ratings_page(
    session: AsyncSession,
    store_id: int,
    *,
    order_by: list[ColumnElement],
    page: PageParams,
    include_email: bool,
) -> Paginated[StoreRatingRow]:
    result = await session.execute(
        select(Rating.id, Rating.rating, Rating.created_at, User.name, User.email)
        .join(User, User.id == Rating.user_id)
        .where(Rating.store_id == store_id)
        .order_by(*order_by)
        .limit(page.limit)
        .offset(page.offset)
    )
    data = [
        StoreRatingRow(
            id=rating_id,
            rating=value,
            created_at=created_at,
            user_name=user_name,
            user_email=user_email if include_email else None,
        )
        for rating_id, value, created_at, user_name, user_email in result.all()
    ]

    count_result = await session.execute(
        select(func.count(Rating.id)).where(Rating.store_id == store_id)
    )
    total_count = int(count_result.scalar_one())
    return Paginated[StoreRatingRow](
        data=data,
        total_count=total_count,
        total_pages=total_pages(total_count, page.limit),
        current_page=page.page,
    )
