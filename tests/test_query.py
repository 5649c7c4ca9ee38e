"""Tests for sort whitelists and paging helpers."""

import pytest
from sqlalchemy import column

from storerate.services.query import (
    ADMIN_STORE_SORT,
    MAX_PAGE_SIZE,
    OWNER_RATING_SORT,
    STORE_BROWSE_SORT,
    USER_SORT,
    PageParams,
    like_pattern,
    order_clauses,
    resolve_ascending,
    total_pages,
)


@pytest.mark.parametrize(
    "whitelist",
    [USER_SORT, ADMIN_STORE_SORT, STORE_BROWSE_SORT, OWNER_RATING_SORT],
)
@pytest.mark.parametrize("sort_by", [None, "", "nonexistent_col", "; DROP TABLE users", "password_hash"])
def test_unknown_sort_key_falls_back_to_default(whitelist, sort_by):
    assert whitelist.resolve_key(sort_by) == whitelist.default_key


def test_whitelisted_sort_key_is_kept():
    assert USER_SORT.resolve_key("email") == "email"
    assert ADMIN_STORE_SORT.resolve_key("averageRating") == "averageRating"
    assert OWNER_RATING_SORT.resolve_key("userName") == "userName"


def test_sort_keys_are_case_sensitive():
    assert STORE_BROWSE_SORT.resolve_key("NAME") == "name"
    assert USER_SORT.resolve_key("Email") == "created_at"


def test_default_keys():
    assert USER_SORT.default_key == "created_at"
    assert ADMIN_STORE_SORT.default_key == "created_at"
    assert STORE_BROWSE_SORT.default_key == "name"
    assert STORE_BROWSE_SORT.default_order == "asc"
    assert OWNER_RATING_SORT.default_key == "created_at"


@pytest.mark.parametrize(
    "sort_order,expected",
    [("asc", True), ("ASC", True), (" asc ", True), ("desc", False), ("sideways", False)],
)
def test_resolve_ascending(sort_order, expected):
    assert resolve_ascending(sort_order) is expected


def test_resolve_ascending_uses_default_when_missing():
    assert resolve_ascending(None, "asc") is True
    assert resolve_ascending("", "asc") is True
    assert resolve_ascending(None, "desc") is False


def test_order_clauses_never_embed_request_text():
    columns = {"created_at": column("created_at"), "name": column("name")}
    clauses = order_clauses(
        USER_SORT,
        columns,
        "name; DROP TABLE users",
        "asc; DELETE FROM ratings",
        tiebreaker=column("id"),
    )
    rendered = " ".join(str(c) for c in clauses)
    assert "DROP" not in rendered
    assert "DELETE" not in rendered
    assert rendered.startswith("created_at DESC")
    assert rendered.endswith("id ASC")


def test_order_clauses_respect_valid_request():
    columns = {"name": column("name")}
    clauses = order_clauses(STORE_BROWSE_SORT, columns, "name", "desc")
    assert len(clauses) == 1
    assert str(clauses[0]).startswith("name DESC")


def test_page_params_clamp():
    params = PageParams(page=0, limit=500)
    assert params.page == 1
    assert params.limit == MAX_PAGE_SIZE

    assert PageParams(page=3, limit=10).offset == 20
    assert PageParams(page=1, limit=0).limit == 1


@pytest.mark.parametrize(
    "total_count,limit,expected",
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (21, 10, 3)],
)
def test_total_pages(total_count, limit, expected):
    assert total_pages(total_count, limit) == expected


def test_like_pattern_escapes_wildcards():
    assert like_pattern("cafe") == "%cafe%"
    assert like_pattern("50%_off") == "%50\\%\\_off%"
    assert like_pattern("a\\b") == "%a\\\\b%"
