"""Normal user endpoints.

GET  /user/stats                     - own rating activity
GET  /user/stores                    - browse stores with own rating
POST /user/stores/{storeId}/rating   - first rating for a store
PUT  /user/stores/{storeId}/rating   - change an existing rating
GET  /user/my-ratings                - ratings given, newest change first
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.routes.deps import get_db_session, paging, require
from storerate.schemas import (
    MyRatingRow,
    Paginated,
    Principal,
    RatingRequest,
    RatingResponse,
    StoreSummary,
    UserStats,
)
from storerate.services.access import Permission
from storerate.services.query import PageParams
from storerate.services.ratings import RatingStore, list_user_ratings
from storerate.services.stats import get_user_stats
from storerate.services.stores import browse_stores

router = APIRouter()


@router.get("/stats", response_model=UserStats)
async def stats(
    principal: Principal = Depends(require(Permission.VIEW_OWN_STATS)),
    session: AsyncSession = Depends(get_db_session),
) -> UserStats:
    """Counts and recent ratings for the caller."""
    return await get_user_stats(session, principal.id)


@router.get("/stores", response_model=Paginated[StoreSummary])
async def stores(
    search: str = Query(default="", max_length=200, description="Matches name or address"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    page: PageParams = Depends(paging(default_limit=12)),
    principal: Principal = Depends(require(Permission.BROWSE_STORES)),
    session: AsyncSession = Depends(get_db_session),
) -> Paginated[StoreSummary]:
    """Browse stores; each row carries the caller's own rating (`userRating`)."""
    return await browse_stores(
        session,
        viewer_id=principal.id,
        search=search.strip(),
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
    )


@router.post("/stores/{store_id}/rating", response_model=RatingResponse, status_code=201)
async def submit_rating(
    request: RatingRequest,
    store_id: int = Path(ge=1),
    principal: Principal = Depends(require(Permission.SUBMIT_RATING)),
    session: AsyncSession = Depends(get_db_session),
) -> RatingResponse:
    """Submit the caller's first rating for a store.

    Raises:
        400 if the value is invalid or the store was already rated (use PUT).
        404 if the store does not exist.
    """
    rating = await RatingStore(session).submit(principal.id, store_id, request.rating)
    return RatingResponse(
        message="Rating submitted successfully",
        rating=rating.rating,
        store_id=store_id,
        updated_at=rating.updated_at,
    )


@router.put("/stores/{store_id}/rating", response_model=RatingResponse)
async def update_rating(
    request: RatingRequest,
    store_id: int = Path(ge=1),
    principal: Principal = Depends(require(Permission.UPDATE_RATING)),
    session: AsyncSession = Depends(get_db_session),
) -> RatingResponse:
    """Change the caller's rating for a store.

    Raises:
        400 if the value is invalid.
        404 if the caller has not rated this store yet (use POST).
    """
    rating = await RatingStore(session).update(principal.id, store_id, request.rating)
    return RatingResponse(
        message="Rating updated successfully",
        rating=rating.rating,
        store_id=store_id,
        updated_at=rating.updated_at,
    )


@router.get("/my-ratings", response_model=Paginated[MyRatingRow])
async def my_ratings(
    page: PageParams = Depends(paging(default_limit=10)),
    principal: Principal = Depends(require(Permission.LIST_OWN_RATINGS)),
    session: AsyncSession = Depends(get_db_session),
) -> Paginated[MyRatingRow]:
    """Ratings the caller has given."""
    return await list_user_ratings(session, principal.id, page=page)
