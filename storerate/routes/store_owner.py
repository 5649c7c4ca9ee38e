"""Store owner endpoints.

GET /store/dashboard - own store with average rating and count
GET /store/ratings   - who rated the store, sortable and paginated
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.routes.deps import get_db_session, paging, require
from storerate.schemas import OwnerDashboard, Paginated, Principal, StoreRatingRow
from storerate.services.access import Permission
from storerate.services.query import PageParams
from storerate.services.stores import get_owner_dashboard, list_owned_store_ratings

router = APIRouter()


@router.get("/dashboard", response_model=OwnerDashboard)
async def dashboard(
    principal: Principal = Depends(require(Permission.VIEW_OWNED_STORE)),
    session: AsyncSession = Depends(get_db_session),
) -> OwnerDashboard:
    """The caller's store; averageRating is null until someone rates it."""
    return await get_owner_dashboard(session, principal.id)


@router.get("/ratings", response_model=Paginated[StoreRatingRow])
async def ratings(
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    page: PageParams = Depends(paging(default_limit=10)),
    principal: Principal = Depends(require(Permission.LIST_OWNED_STORE_RATINGS)),
    session: AsyncSession = Depends(get_db_session),
) -> Paginated[StoreRatingRow]:
    """Ratings on the caller's store. Unknown `sortBy` values sort by created_at."""
    return await list_owned_store_ratings(
        session,
        principal.id,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
    )
