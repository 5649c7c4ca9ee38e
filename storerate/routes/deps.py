"""Shared route dependencies: DB session, caller identity, permissions, paging."""

import logging
from collections.abc import AsyncGenerator, Callable, Coroutine
from typing import Any

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.models import User
from storerate.schemas import Principal
from storerate.services.access import Permission, is_allowed
from storerate.services.auth import decode_access_token
from storerate.services.errors import AuthenticationError, PermissionDeniedError
from storerate.services.query import MAX_PAGE_SIZE, PageParams
from storerate.stores.postgres import Database

logger = logging.getLogger("uvicorn.error")

bearer_scheme = HTTPBearer(auto_error=False)


def get_database(request: Request) -> Database:
    """The Database handle attached to the app at startup."""
    db: Database | None = getattr(request.app.state, "db", None)
    if db is None:
        raise RuntimeError("Database not initialized")
    return db


async def get_db_session(db: Database = Depends(get_database)) -> AsyncGenerator[AsyncSession, None]:
    """One session per request."""
    async with db.session() as session:
        yield session


async def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> Principal:
    """Resolve the bearer token to the calling user.

    The role comes from the database, not the token, so role changes apply
    to tokens already issued.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token, authorization denied")

    claims = decode_access_token(credentials.credentials)
    user = await session.get(User, claims.user_id)
    if user is None:
        logger.warning(f"[auth] token for missing user_id={claims.user_id}")
        raise AuthenticationError("Token is not valid")

    return Principal(id=user.id, name=user.name, email=user.email, role=user.role)


def require(permission: Permission) -> Callable[..., Coroutine[Any, Any, Principal]]:
    """Dependency factory: the caller must hold `permission`."""

    async def _guard(principal: Principal = Depends(get_principal)) -> Principal:
        if not is_allowed(principal.role, permission):
            logger.warning(
                f"[auth] denied user_id={principal.id} role={principal.role.value} permission={permission.value}"
            )
            raise PermissionDeniedError("Access denied. Insufficient permissions.")
        return principal

    return _guard


def paging(default_limit: int = 10) -> Callable[..., PageParams]:
    """Dependency factory for `page` / `limit` query parameters."""

    def _params(
        page: int = Query(default=1, ge=1, description="1-based page number"),
        limit: int = Query(default=default_limit, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
    ) -> PageParams:
        return PageParams(page=page, limit=limit)

    return _params
