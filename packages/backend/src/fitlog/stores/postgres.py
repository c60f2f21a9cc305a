"""PostgreSQL stores — SQLAlchemy async implementations of fitlog.stores.base.

Learn: Each store wraps the request's AsyncSession. Writes go through
`transaction()` so a multi-row write (a workout plus its entries) either
lands completely or not at all. Driver and connection errors are turned
into StoreError here, at the boundary, so an outage never masquerades
as "token not found" further up.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fitlog.auth.tokens import Token
from fitlog.db.engine import transaction
from fitlog.db.models import AuthToken, User, Workout
from fitlog.errors import StoreError, UserAlreadyExists


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (SQLAlchemyError, OSError) as e:
        raise StoreError(f"{operation} failed: {e}") from e


class PostgresUserStore:
    """Users table, plus the users ⋈ tokens lookup."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user: User) -> User:
        with _store_errors("user.create"):
            try:
                async with transaction(self.db):
                    self.db.add(user)
            except IntegrityError as e:
                raise UserAlreadyExists("username or email already registered") from e
            await self.db.refresh(user)
        return user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        with _store_errors("user.get_by_id"):
            return await self.db.get(User, user_id)

    async def get_by_username(self, username: str) -> Optional[User]:
        with _store_errors("user.get_by_username"):
            result = await self.db.execute(
                select(User).where(User.username == username)
            )
            return result.scalars().first()

    async def search_by_username(self, fragment: str) -> list[User]:
        with _store_errors("user.search_by_username"):
            result = await self.db.execute(
                select(User)
                .where(User.username.icontains(fragment, autoescape=True))
                .order_by(User.username)
            )
            return list(result.scalars().all())

    async def get_by_token(
        self, scope: str, token_hash: bytes, now: datetime
    ) -> Optional[User]:
        q = (
            select(User)
            .join(AuthToken, AuthToken.user_id == User.id)
            .where(
                AuthToken.hash == token_hash,
                AuthToken.scope == scope,
                AuthToken.expiry > now,
            )
        )
        with _store_errors("user.get_by_token"):
            result = await self.db.execute(q)
            return result.scalars().first()

    async def update(self, user: User) -> User:
        with _store_errors("user.update"):
            try:
                async with transaction(self.db):
                    self.db.add(user)
            except IntegrityError as e:
                raise UserAlreadyExists("username or email already registered") from e
            await self.db.refresh(user)
        return user


class PostgresTokenStore:
    """Tokens table. Only hashes are written."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, token: Token) -> None:
        row = AuthToken(
            hash=token.hash,
            user_id=token.user_id,
            expiry=token.expiry,
            scope=token.scope,
        )
        with _store_errors("token.insert"):
            async with transaction(self.db):
                self.db.add(row)

    async def delete_all_for_user(self, user_id: int, scope: str) -> int:
        with _store_errors("token.delete_all_for_user"):
            async with transaction(self.db):
                result = await self.db.execute(
                    delete(AuthToken).where(
                        AuthToken.scope == scope,
                        AuthToken.user_id == user_id,
                    )
                )
        return result.rowcount


class PostgresWorkoutStore:
    """Workouts and entries. Entries cascade with their workout."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, workout: Workout) -> Workout:
        with _store_errors("workout.create"):
            async with transaction(self.db):
                self.db.add(workout)
            await self.db.refresh(workout)
        return workout

    async def get(self, workout_id: int) -> Optional[Workout]:
        with _store_errors("workout.get"):
            return await self.db.get(Workout, workout_id)

    async def update(self, workout: Workout) -> Workout:
        """Replaced entries are removed by the delete-orphan cascade."""
        with _store_errors("workout.update"):
            async with transaction(self.db):
                self.db.add(workout)
            await self.db.refresh(workout)
        return workout

    async def delete(self, workout_id: int) -> bool:
        with _store_errors("workout.delete"):
            async with transaction(self.db):
                result = await self.db.execute(
                    delete(Workout).where(Workout.id == workout_id)
                )
        return result.rowcount > 0

    async def get_owner(self, workout_id: int) -> Optional[int]:
        with _store_errors("workout.get_owner"):
            result = await self.db.execute(
                select(Workout.user_id).where(Workout.id == workout_id)
            )
            return result.scalar_one_or_none()
