"""Tests for account, store and dashboard services."""

import pytest

from storerate.models import Store
from storerate.services.access import Role
from storerate.services.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from storerate.services.ratings import RatingStore
from storerate.services.stats import get_admin_dashboard, get_platform_stats, get_user_stats
from storerate.services.stores import (
    OWNER_HAS_STORE_MESSAGE,
    OWNER_INVALID_MESSAGE,
    STORE_EMAIL_TAKEN_MESSAGE,
    browse_stores,
    create_store,
    get_owner_dashboard,
    get_store_detail,
    list_owned_store_ratings,
)
from storerate.services.users import (
    authenticate,
    change_password,
    create_user,
    get_user_detail,
    list_users,
    parse_role_filter,
)
from tests.conftest import PASSWORD, make_store, make_user


# ============================================================
# Accounts
# ============================================================


@pytest.mark.asyncio
async def test_create_user_normalizes_email_and_rejects_duplicates(session):
    user = await create_user(
        session,
        name="Someone With A Long Name",
        email="  Mixed.Case@Example.COM ",
        password=PASSWORD,
    )
    assert user.email == "mixed.case@example.com"
    assert user.role == Role.USER
    assert user.password_hash != PASSWORD

    with pytest.raises(ConflictError):
        await create_user(
            session,
            name="Someone Else Entirely Here",
            email="mixed.case@example.com",
            password=PASSWORD,
        )


@pytest.mark.asyncio
async def test_authenticate(db, session):
    await make_user(db, "login@example.com")

    user = await authenticate(session, "LOGIN@example.com", PASSWORD)
    assert user.email == "login@example.com"

    with pytest.raises(AuthenticationError):
        await authenticate(session, "login@example.com", "Wrong@1234")
    with pytest.raises(AuthenticationError):
        await authenticate(session, "nobody@example.com", PASSWORD)


@pytest.mark.asyncio
async def test_change_password(db, session):
    user = await make_user(db, "pw@example.com")

    with pytest.raises(ValidationError) as exc_info:
        await change_password(session, user.id, "Wrong@1234", "Fresh#5678")
    assert "currentPassword" in exc_info.value.fields

    await change_password(session, user.id, PASSWORD, "Fresh#5678")
    assert (await authenticate(session, "pw@example.com", "Fresh#5678")).id == user.id


def test_parse_role_filter():
    assert parse_role_filter(None) is None
    assert parse_role_filter("") is None
    assert parse_role_filter("store_owner") == Role.STORE_OWNER
    with pytest.raises(ValidationError):
        parse_role_filter("superuser")


@pytest.mark.asyncio
async def test_list_users_search_and_role_filter(db, session):
    await make_user(db, "alice@example.com", name="Alice Wonderland Smithers")
    await make_user(db, "bob@example.com", name="Bob Builder Johnson Jr", role=Role.STORE_OWNER)
    await make_user(db, "carol@example.com", name="Carol 100% Real Person")

    owners = await list_users(session, role=Role.STORE_OWNER)
    assert [u.email for u in owners.data] == ["bob@example.com"]

    found = await list_users(session, search="wonderland")
    assert [u.email for u in found.data] == ["alice@example.com"]

    # LIKE wildcards in the search text match literally
    literal = await list_users(session, search="100%")
    assert [u.email for u in literal.data] == ["carol@example.com"]

    by_name = await list_users(session, sort_by="name", sort_order="asc")
    assert [u.name for u in by_name.data][0] == "Alice Wonderland Smithers"
    assert by_name.total_count == 3


@pytest.mark.asyncio
async def test_user_detail_for_owner_includes_store_rating(db, session):
    owner = await make_user(db, "lake-owner@example.com", role=Role.STORE_OWNER)
    store = await make_store(db, "Lakeside Books", owner_email="lake-owner@example.com")
    rater = await make_user(db, "reader@example.com")
    await RatingStore(session).submit(rater.id, store.id, 3)

    detail = await get_user_detail(session, owner.id)
    assert detail.store_id == store.id
    assert detail.store_name == "Lakeside Books"
    assert detail.average_rating == pytest.approx(3.0)

    with pytest.raises(NotFoundError):
        await get_user_detail(session, 9999)


# ============================================================
# Stores
# ============================================================


@pytest.mark.asyncio
async def test_create_store_requires_store_owner(db, session):
    await make_user(db, "plain@example.com")

    with pytest.raises(ValidationError) as exc_info:
        await create_store(
            session, name="Nope Shop", email="nope@example.com", address="x", owner_email="plain@example.com"
        )
    assert exc_info.value.fields == {"ownerEmail": OWNER_INVALID_MESSAGE}

    with pytest.raises(ValidationError):
        await create_store(
            session, name="Nope Shop", email="nope@example.com", address="x", owner_email="ghost@example.com"
        )


@pytest.mark.asyncio
async def test_create_store_conflicts(db, session):
    await make_user(db, "first-owner@example.com", role=Role.STORE_OWNER)
    await make_user(db, "second-owner@example.com", role=Role.STORE_OWNER)
    await create_store(
        session, name="First Shop", email="shop@example.com", address="x", owner_email="first-owner@example.com"
    )

    # Store email taken
    with pytest.raises(ConflictError):
        await create_store(
            session, name="Second", email="SHOP@example.com", address="y", owner_email="second-owner@example.com"
        )
    # Owner already has a store
    with pytest.raises(ConflictError):
        await create_store(
            session, name="Second", email="other@example.com", address="y", owner_email="first-owner@example.com"
        )


def _lose_race_before_flush(monkeypatch, session, db, winner: dict) -> None:
    """Commit `winner` from another session right before `session` flushes."""
    real_flush = session.flush

    async def flush_after_rival(*args, **kwargs):
        async with db.session() as rival:
            rival.add(Store(**winner))
        await real_flush(*args, **kwargs)

    monkeypatch.setattr(session, "flush", flush_after_rival)


@pytest.mark.asyncio
async def test_create_store_lost_owner_race_reports_owner_conflict(db, session, monkeypatch):
    owner = await make_user(db, "racer@example.com", role=Role.STORE_OWNER)
    _lose_race_before_flush(
        monkeypatch,
        session,
        db,
        {"name": "Winner", "email": "winner@example.com", "address": "x", "owner_id": owner.id},
    )

    with pytest.raises(ConflictError) as exc_info:
        await create_store(
            session, name="Loser", email="loser@example.com", address="y", owner_email="racer@example.com"
        )
    assert exc_info.value.message == OWNER_HAS_STORE_MESSAGE


@pytest.mark.asyncio
async def test_create_store_lost_email_race_reports_email_conflict(db, session, monkeypatch):
    await make_user(db, "late-owner@example.com", role=Role.STORE_OWNER)
    rival_owner = await make_user(db, "quick-owner@example.com", role=Role.STORE_OWNER)
    _lose_race_before_flush(
        monkeypatch,
        session,
        db,
        {"name": "Quick", "email": "shared@example.com", "address": "x", "owner_id": rival_owner.id},
    )

    with pytest.raises(ConflictError) as exc_info:
        await create_store(
            session, name="Late", email="shared@example.com", address="y", owner_email="late-owner@example.com"
        )
    assert exc_info.value.message == STORE_EMAIL_TAKEN_MESSAGE


@pytest.mark.asyncio
async def test_browse_stores_aggregates_and_viewer_rating(db, session):
    apple = await make_store(db, "Apple Orchard Stand")
    await make_store(db, "Zebra Pet Supplies")
    viewer = await make_user(db, "viewer@example.com")
    other = await make_user(db, "other@example.com")
    ratings = RatingStore(session)
    await ratings.submit(viewer.id, apple.id, 5)
    await ratings.submit(other.id, apple.id, 2)

    page = await browse_stores(session, viewer_id=viewer.id)
    assert [s.name for s in page.data] == ["Apple Orchard Stand", "Zebra Pet Supplies"]
    assert page.data[0].average_rating == pytest.approx(3.5)
    assert page.data[0].total_ratings == 2
    assert page.data[0].user_rating == 5
    assert page.data[1].average_rating is None
    assert page.data[1].total_ratings == 0
    assert page.data[1].user_rating is None

    # Unrated stores sort last either way
    best = await browse_stores(session, sort_by="averageRating", sort_order="desc")
    assert best.data[-1].name == "Zebra Pet Supplies"
    worst = await browse_stores(session, sort_by="averageRating", sort_order="asc")
    assert worst.data[-1].name == "Zebra Pet Supplies"

    searched = await browse_stores(session, search="orchard")
    assert searched.total_count == 1


@pytest.mark.asyncio
async def test_store_detail_not_found(session):
    with pytest.raises(NotFoundError):
        await get_store_detail(session, 12345)


@pytest.mark.asyncio
async def test_owner_dashboard_and_ratings(db, session):
    owner = await make_user(db, "boss@example.com", role=Role.STORE_OWNER)
    store = await make_store(db, "Boss Hardware", owner_email="boss@example.com")

    dashboard = await get_owner_dashboard(session, owner.id)
    assert dashboard.id == store.id
    assert dashboard.average_rating is None
    assert dashboard.total_ratings == 0

    amy = await make_user(db, "amy@example.com", name="Amy Adams From Accounting")
    zed = await make_user(db, "zed@example.com", name="Zed Zimmerman The Third")
    ratings = RatingStore(session)
    await ratings.submit(zed.id, store.id, 1)
    await ratings.submit(amy.id, store.id, 4)

    rows = await list_owned_store_ratings(session, owner.id, sort_by="userName", sort_order="asc")
    assert [r.user_name for r in rows.data] == ["Amy Adams From Accounting", "Zed Zimmerman The Third"]
    assert rows.data[0].user_email == "amy@example.com"

    newest_first = await list_owned_store_ratings(session, owner.id)
    assert [r.rating for r in newest_first.data] == [4, 1]


@pytest.mark.asyncio
async def test_owner_without_store_is_not_found(db, session):
    owner = await make_user(db, "storeless@example.com", role=Role.STORE_OWNER)
    with pytest.raises(NotFoundError):
        await get_owner_dashboard(session, owner.id)


# ============================================================
# Dashboards
# ============================================================


@pytest.mark.asyncio
async def test_dashboards(db, session):
    empty = await get_admin_dashboard(session)
    assert empty.total_users == 0
    assert empty.average_rating is None

    good = await make_store(db, "Good Coffee House")
    okay = await make_store(db, "Okay Sandwich Bar")
    await make_store(db, "Unrated Noodle Place")
    u1 = await make_user(db, "u1@example.com")
    u2 = await make_user(db, "u2@example.com")
    ratings = RatingStore(session)
    await ratings.submit(u1.id, good.id, 5)
    await ratings.submit(u2.id, good.id, 4)
    await ratings.submit(u1.id, okay.id, 3)

    admin = await get_admin_dashboard(session)
    assert admin.total_users == 5
    assert admin.total_stores == 3
    assert admin.total_ratings == 3
    assert admin.average_rating == 4.0

    platform = await get_platform_stats(session)
    assert [s.name for s in platform.top_stores] == ["Good Coffee House", "Okay Sandwich Bar"]
    assert platform.top_stores[0].average_rating == pytest.approx(4.5)
    assert len(platform.recent_ratings) == 3

    mine = await get_user_stats(session, u1.id)
    assert mine.total_stores == 3
    assert mine.my_ratings == 2
    assert mine.average_rating == 4.0
    assert {r.store_name for r in mine.recent_ratings} == {"Good Coffee House", "Okay Sandwich Bar"}
