"""Query helpers for list endpoints.

Sorting:
- Every resource declares a fixed whitelist of public sort keys and a default.
- A user-supplied sort key is looked up in that whitelist; anything else
  (typos, unknown columns, injection attempts) resolves to the default.
- Resolved keys are mapped to SQLAlchemy column expressions by the caller,
  so request text never reaches the SQL string.

Pagination:
- page >= 1, 1 <= limit <= MAX_PAGE_SIZE
- totalPages = ceil(totalCount / limit)
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class SortWhitelist:
    """Allowed sort keys for one resource."""

    allowed: frozenset[str]
    default_key: str
    default_order: str = "desc"

    def resolve_key(self, sort_by: str | None) -> str:
        """Return `sort_by` if whitelisted, otherwise the default key."""
        if sort_by is not None and sort_by in self.allowed:
            return sort_by
        return self.default_key


# Per-resource whitelists
USER_SORT = SortWhitelist(
    allowed=frozenset({"name", "email", "role", "created_at"}),
    default_key="created_at",
    default_order="desc",
)
ADMIN_STORE_SORT = SortWhitelist(
    allowed=frozenset({"name", "email", "created_at", "averageRating"}),
    default_key="created_at",
    default_order="desc",
)
STORE_BROWSE_SORT = SortWhitelist(
    allowed=frozenset({"name", "averageRating", "created_at"}),
    default_key="name",
    default_order="asc",
)
OWNER_RATING_SORT = SortWhitelist(
    allowed=frozenset({"created_at", "rating", "userName"}),
    default_key="created_at",
    default_order="desc",
)


def resolve_ascending(sort_order: str | None, default_order: str = "desc") -> bool:
    """Only "asc" (any case) sorts ascending; any other given value sorts descending."""
    order = sort_order if sort_order else default_order
    return order.strip().lower() == "asc"


def order_clauses(
    whitelist: SortWhitelist,
    columns: Mapping[str, ColumnElement[Any]],
    sort_by: str | None,
    sort_order: str | None,
    tiebreaker: ColumnElement[Any] | None = None,
) -> list[ColumnElement[Any]]:
    """Build ORDER BY clauses for a whitelisted sort request.

    Args:
        whitelist: Resource whitelist.
        columns: Mapping from every whitelisted key to its column expression.
        sort_by: Raw, untrusted sort key from the request.
        sort_order: Raw, untrusted sort order from the request.
        tiebreaker: Optional column appended (ascending) for stable paging.

    Returns:
        List of ORDER BY expressions.
    """
    key = whitelist.resolve_key(sort_by)
    column = columns[key]
    ascending = resolve_ascending(sort_order, whitelist.default_order)
    clause = column.asc() if ascending else column.desc()
    clauses = [clause.nulls_last()]
    if tiebreaker is not None:
        clauses.append(tiebreaker.asc())
    return clauses


@dataclass(frozen=True)
class PageParams:
    """Validated paging window."""

    page: int = 1
    limit: int = 10

    def __post_init__(self) -> None:
        if self.page < 1:
            object.__setattr__(self, "page", 1)
        if self.limit < 1:
            object.__setattr__(self, "limit", 1)
        elif self.limit > MAX_PAGE_SIZE:
            object.__setattr__(self, "limit", MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def total_pages(total_count: int, limit: int) -> int:
    """ceil(total_count / limit); 0 when there is nothing to show."""
    if total_count <= 0 or limit <= 0:
        return 0
    return math.ceil(total_count / limit)


def like_pattern(search: str) -> str:
    """Build a substring LIKE pattern, escaping LIKE wildcards in user text."""
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
