"""Storage layer.

Learn: Routes never build stores themselves — they Depends() on the
providers below, which wire the PostgreSQL stores to the request's
session. Tests swap in the memory stores with app.dependency_overrides,
the same way the db session is overridden.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fitlog.db.engine import get_db
from fitlog.stores.base import TokenStore, UserStore, WorkoutStore
from fitlog.stores.postgres import (
    PostgresTokenStore,
    PostgresUserStore,
    PostgresWorkoutStore,
)


def get_user_store(db: AsyncSession = Depends(get_db)) -> UserStore:
    return PostgresUserStore(db)


def get_token_store(db: AsyncSession = Depends(get_db)) -> TokenStore:
    return PostgresTokenStore(db)


def get_workout_store(db: AsyncSession = Depends(get_db)) -> WorkoutStore:
    return PostgresWorkoutStore(db)


__all__ = [
    "TokenStore",
    "UserStore",
    "WorkoutStore",
    "get_token_store",
    "get_user_store",
    "get_workout_store",
]
