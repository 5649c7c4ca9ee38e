"""System admin endpoints.

GET  /admin/dashboard    - platform counts
GET  /admin/users        - search / filter / sort / page users
POST /admin/users        - create a user of any role
GET  /admin/users/{id}   - user detail (store owners include their rating)
GET  /admin/stores       - search / sort / page stores with owner and rating
POST /admin/stores       - create a store for a store_owner
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.routes.deps import get_db_session, paging, require
from storerate.schemas import (
    AdminDashboard,
    AdminStoreRow,
    CreatedStoreResponse,
    CreatedUserResponse,
    CreateStoreRequest,
    CreateUserRequest,
    Paginated,
    Principal,
    UserDetail,
    UserOut,
)
from storerate.services.access import Permission
from storerate.services.query import PageParams
from storerate.services.stats import get_admin_dashboard
from storerate.services.stores import create_store, list_admin_stores
from storerate.services.users import create_user, get_user_detail, list_users, parse_role_filter

router = APIRouter()


@router.get("/dashboard", response_model=AdminDashboard)
async def dashboard(
    _: Principal = Depends(require(Permission.VIEW_ADMIN_DASHBOARD)),
    session: AsyncSession = Depends(get_db_session),
) -> AdminDashboard:
    """Total users, stores and ratings."""
    return await get_admin_dashboard(session)


# ============================================================
# Users
# ============================================================


@router.get("/users", response_model=Paginated[UserOut])
async def get_users(
    search: str = Query(default="", max_length=200, description="Matches name, email or address"),
    role: str = Query(default="", description="Exact role filter"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    page: PageParams = Depends(paging(default_limit=10)),
    _: Principal = Depends(require(Permission.LIST_USERS)),
    session: AsyncSession = Depends(get_db_session),
) -> Paginated[UserOut]:
    """List users. Unknown `sortBy` values sort by created_at."""
    return await list_users(
        session,
        search=search.strip(),
        role=parse_role_filter(role),
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
    )


@router.post("/users", response_model=CreatedUserResponse, status_code=201)
async def post_user(
    request: CreateUserRequest,
    _: Principal = Depends(require(Permission.CREATE_USER)),
    session: AsyncSession = Depends(get_db_session),
) -> CreatedUserResponse:
    """Create a user with the given role."""
    user = await create_user(
        session,
        name=request.name,
        email=request.email,
        password=request.password,
        address=request.address,
        role=request.role,
    )
    return CreatedUserResponse(message="User created successfully", user_id=user.id)


@router.get("/users/{user_id}", response_model=UserDetail)
async def get_user(
    user_id: int = Path(ge=1),
    _: Principal = Depends(require(Permission.LIST_USERS)),
    session: AsyncSession = Depends(get_db_session),
) -> UserDetail:
    """One user."""
    return await get_user_detail(session, user_id)


# ============================================================
# Stores
# ============================================================


@router.get("/stores", response_model=Paginated[AdminStoreRow])
async def get_stores(
    search: str = Query(default="", max_length=200, description="Matches name, email or address"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    page: PageParams = Depends(paging(default_limit=10)),
    _: Principal = Depends(require(Permission.LIST_ALL_STORES)),
    session: AsyncSession = Depends(get_db_session),
) -> Paginated[AdminStoreRow]:
    """List stores. Unknown `sortBy` values sort by created_at."""
    return await list_admin_stores(
        session,
        search=search.strip(),
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
    )


@router.post("/stores", response_model=CreatedStoreResponse, status_code=201)
async def post_store(
    request: CreateStoreRequest,
    _: Principal = Depends(require(Permission.CREATE_STORE)),
    session: AsyncSession = Depends(get_db_session),
) -> CreatedStoreResponse:
    """Create a store owned by an existing store_owner."""
    store = await create_store(
        session,
        name=request.name,
        email=request.email,
        address=request.address,
        owner_email=request.owner_email,
    )
    return CreatedStoreResponse(message="Store created successfully", store_id=store.id)
