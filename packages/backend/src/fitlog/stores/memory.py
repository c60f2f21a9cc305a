"""In-memory stores — same contracts as fitlog.stores.postgres, no database.

Learn: Used by the test suite and handy for local experiments. All three
stores share one MemoryDatabase so the users ⋈ tokens lookup works the
same way it does in PostgreSQL, including the foreign keys (a token or
workout for an unknown user is a StoreError) and cascades (deleting a
workout drops its entries).

Stores hand out copies of their rows. Mutating a returned object changes
nothing until it is passed back to update(), which is what a session
would give you after a rollback.
"""

import itertools
from datetime import datetime, timezone
from typing import Optional, TypeVar

from sqlalchemy import inspect

from fitlog.auth.tokens import Token
from fitlog.db.models import AuthToken, User, Workout, WorkoutEntry
from fitlog.errors import StoreError, UserAlreadyExists

M = TypeVar("M", User, AuthToken, Workout, WorkoutEntry)


def _clone(obj: M) -> M:
    """Copy the column attributes of a model into a fresh transient instance."""
    mapper = inspect(type(obj))
    return type(obj)(**{attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs})


def _clone_workout(workout: Workout) -> Workout:
    copy = _clone(workout)
    copy.entries = [_clone(e) for e in workout.entries]
    return copy


class MemoryDatabase:
    """Tables as dicts, plus per-table id sequences."""

    def __init__(self):
        self.users: dict[int, User] = {}
        self.tokens: dict[bytes, AuthToken] = {}
        self.workouts: dict[int, Workout] = {}
        self.user_ids = itertools.count(1)
        self.workout_ids = itertools.count(1)
        self.entry_ids = itertools.count(1)

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)


class MemoryUserStore:
    def __init__(self, db: MemoryDatabase):
        self.db = db

    def _check_unique(self, user: User) -> None:
        for other in self.db.users.values():
            if other.id == user.id:
                continue
            if other.username == user.username or other.email == user.email:
                raise UserAlreadyExists("username or email already registered")

    async def create(self, user: User) -> User:
        self._check_unique(user)
        now = self.db.now()
        user.id = next(self.db.user_ids)
        user.bio = user.bio or ""
        user.created_at = now
        user.updated_at = now
        self.db.users[user.id] = _clone(user)
        return user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        user = self.db.users.get(user_id)
        return _clone(user) if user else None

    async def get_by_username(self, username: str) -> Optional[User]:
        for user in self.db.users.values():
            if user.username == username:
                return _clone(user)
        return None

    async def search_by_username(self, fragment: str) -> list[User]:
        needle = fragment.lower()
        found = [u for u in self.db.users.values() if needle in u.username.lower()]
        return [_clone(u) for u in sorted(found, key=lambda u: u.username)]

    async def get_by_token(
        self, scope: str, token_hash: bytes, now: datetime
    ) -> Optional[User]:
        row = self.db.tokens.get(token_hash)
        if row is None or row.scope != scope or row.expiry <= now:
            return None
        return await self.get_by_id(row.user_id)

    async def update(self, user: User) -> User:
        if user.id not in self.db.users:
            raise StoreError(f"user {user.id} does not exist")
        self._check_unique(user)
        user.updated_at = self.db.now()
        self.db.users[user.id] = _clone(user)
        return user


class MemoryTokenStore:
    def __init__(self, db: MemoryDatabase):
        self.db = db

    async def insert(self, token: Token) -> None:
        if token.user_id not in self.db.users:
            raise StoreError(f"token references unknown user {token.user_id}")
        if token.hash in self.db.tokens:
            raise StoreError("duplicate token hash")
        self.db.tokens[token.hash] = AuthToken(
            hash=token.hash,
            user_id=token.user_id,
            expiry=token.expiry,
            scope=token.scope,
        )

    async def delete_all_for_user(self, user_id: int, scope: str) -> int:
        doomed = [
            h for h, row in self.db.tokens.items()
            if row.user_id == user_id and row.scope == scope
        ]
        for h in doomed:
            del self.db.tokens[h]
        return len(doomed)


class MemoryWorkoutStore:
    def __init__(self, db: MemoryDatabase):
        self.db = db

    def _stamp_entries(self, workout: Workout, now: datetime) -> None:
        for entry in workout.entries:
            if entry.id is None:
                entry.id = next(self.db.entry_ids)
                entry.created_at = now
            entry.workout_id = workout.id
            entry.notes = entry.notes or ""
            entry.updated_at = now
        workout.entries.sort(key=lambda e: e.order_index)

    async def create(self, workout: Workout) -> Workout:
        if workout.user_id not in self.db.users:
            raise StoreError(f"workout references unknown user {workout.user_id}")
        now = self.db.now()
        workout.id = next(self.db.workout_ids)
        workout.description = workout.description or ""
        workout.duration_minutes = workout.duration_minutes or 0
        workout.calories_burned = workout.calories_burned or 0
        workout.created_at = now
        workout.updated_at = now
        self._stamp_entries(workout, now)
        self.db.workouts[workout.id] = _clone_workout(workout)
        return workout

    async def get(self, workout_id: int) -> Optional[Workout]:
        workout = self.db.workouts.get(workout_id)
        return _clone_workout(workout) if workout else None

    async def update(self, workout: Workout) -> Workout:
        if workout.id not in self.db.workouts:
            raise StoreError(f"workout {workout.id} does not exist")
        now = self.db.now()
        workout.updated_at = now
        self._stamp_entries(workout, now)
        self.db.workouts[workout.id] = _clone_workout(workout)
        return workout

    async def delete(self, workout_id: int) -> bool:
        return self.db.workouts.pop(workout_id, None) is not None

    async def get_owner(self, workout_id: int) -> Optional[int]:
        workout = self.db.workouts.get(workout_id)
        return workout.user_id if workout else None
