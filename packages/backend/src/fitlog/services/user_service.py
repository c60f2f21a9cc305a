"""User service — registration, credential checks, profile updates.

Learn: Input shape (username length, email format, password length) is
validated by the pydantic schemas before we get here. This layer owns
the rules that need the store or the password hash.

authenticate() gives every failure the same outward shape
(InvalidCredentials): unknown username, wrong password, and a corrupt
stored hash all look alike to the caller. They are logged differently —
a corrupt hash is an error someone must look at, a wrong password is not.
"""

from typing import Optional

import structlog

from fitlog.auth.password import Password
from fitlog.db.models import User
from fitlog.errors import InvalidCredentials, VerificationError
from fitlog.stores.base import UserStore

logger = structlog.get_logger()


class UserService:
    """Business logic for user accounts."""

    def __init__(self, users: UserStore):
        self.users = users

    async def register(
        self, username: str, email: str, password: str, bio: str = ""
    ) -> User:
        credential = Password()
        credential.set(password)

        user = User(
            username=username,
            email=email,
            bio=bio,
            password_hash=credential.hash,
        )
        user = await self.users.create(user)
        logger.info("fitlog.user.registered", user_id=user.id)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        user = await self.users.get_by_username(username)
        if user is None:
            logger.warning("fitlog.auth.login_unknown_user")
            raise InvalidCredentials("invalid username or password")

        try:
            matched = Password(user.password_hash).matches(password)
        except VerificationError:
            logger.error(
                "fitlog.auth.password_hash_unusable", user_id=user.id, exc_info=True
            )
            raise InvalidCredentials("invalid username or password")

        if not matched:
            logger.warning("fitlog.auth.login_bad_password", user_id=user.id)
            raise InvalidCredentials("invalid username or password")
        return user

    async def update_profile(
        self,
        user: User,
        *,
        username: Optional[str] = None,
        email: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> User:
        if username is not None:
            user.username = username
        if email is not None:
            user.email = email
        if bio is not None:
            user.bio = bio
        user = await self.users.update(user)
        logger.info("fitlog.user.updated", user_id=user.id)
        return user

    async def search(self, fragment: str) -> list[User]:
        """Users whose username contains fragment, case-insensitive."""
        return await self.users.search_by_username(fragment)
