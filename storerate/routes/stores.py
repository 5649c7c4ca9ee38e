"""Store catalogue endpoints, available to every signed-in role.

GET /stores                - browse stores with aggregates
GET /stores/stats          - platform totals, top stores, latest ratings
GET /stores/{id}           - one store
GET /stores/{id}/ratings   - ratings on one store
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.routes.deps import get_db_session, paging, require
from storerate.schemas import Paginated, PlatformStats, Principal, StoreDetail, StoreRatingRow, StoreSummary
from storerate.services.access import Permission
from storerate.services.query import PageParams
from storerate.services.stats import get_platform_stats
from storerate.services.stores import browse_stores, get_store_detail, list_store_ratings

router = APIRouter()


@router.get("", response_model=Paginated[StoreSummary])
async def list_stores(
    search: str = Query(default="", max_length=200, description="Matches name or address"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    page: PageParams = Depends(paging(default_limit=12)),
    _: Principal = Depends(require(Permission.BROWSE_STORES)),
    session: AsyncSession = Depends(get_db_session),
) -> Paginated[StoreSummary]:
    """Browse stores. Unknown `sortBy` values sort by name."""
    return await browse_stores(
        session,
        search=search.strip(),
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
    )


@router.get("/stats", response_model=PlatformStats)
async def stats(
    _: Principal = Depends(require(Permission.BROWSE_STORES)),
    session: AsyncSession = Depends(get_db_session),
) -> PlatformStats:
    """Platform-wide rating statistics."""
    return await get_platform_stats(session)


@router.get("/{store_id}", response_model=StoreDetail)
async def get_store(
    store_id: int = Path(ge=1),
    _: Principal = Depends(require(Permission.BROWSE_STORES)),
    session: AsyncSession = Depends(get_db_session),
) -> StoreDetail:
    """One store with owner and aggregates."""
    return await get_store_detail(session, store_id)


@router.get("/{store_id}/ratings", response_model=Paginated[StoreRatingRow])
async def get_store_ratings(
    store_id: int = Path(ge=1),
    page: PageParams = Depends(paging(default_limit=10)),
    _: Principal = Depends(require(Permission.BROWSE_STORES)),
    session: AsyncSession = Depends(get_db_session),
) -> Paginated[StoreRatingRow]:
    """Ratings on one store, newest first."""
    return await list_store_ratings(session, store_id, page=page)
