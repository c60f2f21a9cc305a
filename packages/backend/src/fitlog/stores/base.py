"""Storage contracts.

Learn: Services depend on these protocols, never on a concrete backend.
Two implementations satisfy them:

- fitlog.stores.postgres — SQLAlchemy async, production
- fitlog.stores.memory — dict-backed, tests and local experiments

Contract shared by every method:
- "not found" is a normal result: None (or False for delete)
- infrastructure failure raises StoreError, never returns None
- a method returns only after its writes are committed
"""

from datetime import datetime
from typing import Optional, Protocol

from fitlog.auth.tokens import Token
from fitlog.db.models import User, Workout


class UserStore(Protocol):
    """Users and the token → user lookup."""

    async def create(self, user: User) -> User:
        """Insert a user, filling id/created_at/updated_at.

        Raises UserAlreadyExists on a duplicate username or email.
        """
        ...

    async def get_by_id(self, user_id: int) -> Optional[User]: ...

    async def get_by_username(self, username: str) -> Optional[User]: ...

    async def search_by_username(self, fragment: str) -> list[User]:
        """Users whose username contains fragment, case-insensitive."""
        ...

    async def get_by_token(
        self, scope: str, token_hash: bytes, now: datetime
    ) -> Optional[User]:
        """User owning a token with this hash and scope that expires after now."""
        ...

    async def update(self, user: User) -> User:
        """Persist username/email/bio changes and bump updated_at."""
        ...


class TokenStore(Protocol):
    """Persisted token hashes."""

    async def insert(self, token: Token) -> None: ...

    async def delete_all_for_user(self, user_id: int, scope: str) -> int:
        """Delete every token of user_id in scope. Returns rows deleted."""
        ...


class WorkoutStore(Protocol):
    """Workouts and their entries, written atomically."""

    async def create(self, workout: Workout) -> Workout:
        """Insert the workout and all its entries in one transaction."""
        ...

    async def get(self, workout_id: int) -> Optional[Workout]: ...

    async def update(self, workout: Workout) -> Workout:
        """Update fields and replace entries in one transaction."""
        ...

    async def delete(self, workout_id: int) -> bool: ...

    async def get_owner(self, workout_id: int) -> Optional[int]: ...
