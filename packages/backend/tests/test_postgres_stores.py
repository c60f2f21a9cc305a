"""PostgreSQL store tests.

Learn: Two halves:

1. Against a real database (`pg_session`, savepoint rollback per test):
   the users ⋈ tokens join, uniqueness, foreign keys, cascades. These
   skip when PostgreSQL isn't reachable.
2. Against a mocked AsyncSession: driver and connection failures must
   come out of every store as StoreError, never as "not found".
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from fitlog.auth.tokens import SCOPE_AUTHENTICATION, generate_token
from fitlog.db.models import User, Workout, WorkoutEntry
from fitlog.errors import StoreError, UserAlreadyExists
from fitlog.stores.postgres import (
    PostgresTokenStore,
    PostgresUserStore,
    PostgresWorkoutStore,
)


def _user(username: str, email: str = None) -> User:
    return User(
        username=username,
        email=email or f"{username}@example.com",
        password_hash=b"$2b$04$placeholder",
    )


async def _entry_count(session, workout_id: int) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(WorkoutEntry)
        .where(WorkoutEntry.workout_id == workout_id)
    )
    return result.scalar_one()


# ═══════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_and_fetch_user(pg_session):
    users = PostgresUserStore(pg_session)

    user = await users.create(_user("pg_runner"))

    assert user.id is not None
    assert user.created_at is not None
    assert (await users.get_by_username("pg_runner")).id == user.id
    assert (await users.get_by_id(user.id)).email == "pg_runner@example.com"
    assert await users.get_by_username("nobody_here") is None


@pytest.mark.asyncio
async def test_duplicate_user_rolls_back_and_session_survives(pg_session):
    users = PostgresUserStore(pg_session)
    await users.create(_user("taken_name", "taken@example.com"))

    with pytest.raises(UserAlreadyExists):
        await users.create(_user("taken_name", "other@example.com"))
    pg_session.expunge_all()

    # The failed insert was rolled back; the session is still usable
    assert (await users.create(_user("next_name"))).id is not None
    result = await pg_session.execute(
        select(func.count()).select_from(User).where(User.username == "taken_name")
    )
    assert result.scalar_one() == 1


@pytest.mark.asyncio
async def test_search_is_case_insensitive_and_escaped(pg_session):
    users = PostgresUserStore(pg_session)
    for name in ("Under_Score", "underXscore", "plain_name"):
        await users.create(_user(name))

    found = await users.search_by_username("r_s")

    assert [u.username for u in found] == ["Under_Score"]
    assert len(await users.search_by_username("UNDER")) == 2


# ═══════════════════════════════════════════════════════════
# Tokens
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_token_lookup_filters_scope_and_expiry(pg_session):
    users = PostgresUserStore(pg_session)
    tokens = PostgresTokenStore(pg_session)
    owner = await users.create(_user("token_owner"))

    live = generate_token(owner.id, timedelta(hours=1), SCOPE_AUTHENTICATION)
    expired = generate_token(owner.id, timedelta(seconds=-1), SCOPE_AUTHENTICATION)
    reset = generate_token(owner.id, timedelta(hours=1), "password-reset")
    for token in (live, expired, reset):
        await tokens.insert(token)

    now = datetime.now(timezone.utc)
    assert (await users.get_by_token(SCOPE_AUTHENTICATION, live.hash, now)).id == owner.id
    assert await users.get_by_token(SCOPE_AUTHENTICATION, expired.hash, now) is None
    assert await users.get_by_token(SCOPE_AUTHENTICATION, reset.hash, now) is None
    assert await users.get_by_token(SCOPE_AUTHENTICATION, b"\x00" * 32, now) is None
    # Expiry is compared against the caller's clock, not the database's
    later = now + timedelta(hours=2)
    assert await users.get_by_token(SCOPE_AUTHENTICATION, live.hash, later) is None


@pytest.mark.asyncio
async def test_token_for_unknown_user_is_store_error(pg_session):
    tokens = PostgresTokenStore(pg_session)

    with pytest.raises(StoreError):
        await tokens.insert(
            generate_token(987654, timedelta(hours=1), SCOPE_AUTHENTICATION)
        )


@pytest.mark.asyncio
async def test_delete_all_for_user_is_scoped(pg_session):
    users = PostgresUserStore(pg_session)
    tokens = PostgresTokenStore(pg_session)
    owner = await users.create(_user("logout_owner"))
    other = await users.create(_user("other_owner"))

    for _ in range(2):
        await tokens.insert(generate_token(owner.id, timedelta(hours=1), SCOPE_AUTHENTICATION))
    kept = generate_token(owner.id, timedelta(hours=1), "password-reset")
    await tokens.insert(kept)
    theirs = generate_token(other.id, timedelta(hours=1), SCOPE_AUTHENTICATION)
    await tokens.insert(theirs)

    assert await tokens.delete_all_for_user(owner.id, SCOPE_AUTHENTICATION) == 2

    now = datetime.now(timezone.utc)
    assert await users.get_by_token("password-reset", kept.hash, now) is not None
    assert await users.get_by_token(SCOPE_AUTHENTICATION, theirs.hash, now) is not None


# ═══════════════════════════════════════════════════════════
# Workouts
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_workout_entries_replaced_and_cascaded(pg_session):
    owner = await PostgresUserStore(pg_session).create(_user("pg_lifter"))
    workouts = PostgresWorkoutStore(pg_session)

    workout = Workout(user_id=owner.id, title="Legs")
    workout.entries = [
        WorkoutEntry(exercise_name="Lunge", sets=3, reps=10, order_index=1),
        WorkoutEntry(exercise_name="Squat", sets=5, reps=5, order_index=0),
    ]
    created = await workouts.create(workout)
    assert await workouts.get_owner(created.id) == owner.id

    # Reload from the database, not the identity map
    pg_session.expunge_all()
    fetched = await workouts.get(created.id)
    assert [e.exercise_name for e in fetched.entries] == ["Squat", "Lunge"]

    fetched.entries = [WorkoutEntry(exercise_name="Dips", sets=3, reps=12, order_index=0)]
    await workouts.update(fetched)
    assert await _entry_count(pg_session, created.id) == 1

    assert await workouts.delete(created.id) is True
    assert await workouts.delete(created.id) is False
    assert await workouts.get_owner(created.id) is None
    assert await _entry_count(pg_session, created.id) == 0


# ═══════════════════════════════════════════════════════════
# Failure boundary (no database needed)
# ═══════════════════════════════════════════════════════════


def _broken_session(exc: BaseException) -> MagicMock:
    session = MagicMock(spec=AsyncSession)
    session.execute.side_effect = exc
    session.get.side_effect = exc
    session.commit.side_effect = exc
    return session


CONNECTION_ERRORS = [
    OperationalError("SELECT 1", {}, Exception("server closed the connection")),
    ConnectionResetError("connection reset by peer"),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("exc", CONNECTION_ERRORS)
async def test_token_lookup_outage_is_store_error(exc):
    users = PostgresUserStore(_broken_session(exc))

    with pytest.raises(StoreError):
        await users.get_by_token(SCOPE_AUTHENTICATION, b"\x00" * 32, datetime.now(timezone.utc))


@pytest.mark.asyncio
@pytest.mark.parametrize("exc", CONNECTION_ERRORS)
async def test_reads_outage_is_store_error(exc):
    session = _broken_session(exc)

    with pytest.raises(StoreError):
        await PostgresUserStore(session).get_by_id(1)
    with pytest.raises(StoreError):
        await PostgresWorkoutStore(session).get_owner(1)


@pytest.mark.asyncio
async def test_failed_commit_is_store_error_and_rolls_back():
    session = _broken_session(CONNECTION_ERRORS[0])

    with pytest.raises(StoreError):
        await PostgresTokenStore(session).insert(
            generate_token(1, timedelta(hours=1), SCOPE_AUTHENTICATION)
        )
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_integrity_error_on_create_is_user_already_exists():
    session = MagicMock(spec=AsyncSession)
    session.commit.side_effect = IntegrityError(
        "INSERT INTO users", {}, Exception("duplicate key value")
    )

    with pytest.raises(UserAlreadyExists):
        await PostgresUserStore(session).create(_user("dupe_name"))
    session.rollback.assert_awaited_once()
    session.refresh.assert_not_awaited()
