"""Token service — issue tokens and resolve them back to users.

Learn: TokenIssuer and TokenResolver are the two halves of bearer auth:

1. issue → generate_token() → TokenStore.insert() → return plaintext once
2. resolve → sha256(plaintext) → UserStore.get_by_token(scope, hash, now)

Issuance is all-or-nothing: if the insert fails, the caller gets the
StoreError and never sees the plaintext of a token that was not recorded.

Resolution collapses "unknown", "wrong scope" and "expired" into one
TokenNotFoundOrExpired so a caller can't probe which tokens ever existed.
Store failures are NOT collapsed — they propagate as StoreError and get
logged as outages by the app's error handler.
"""

from datetime import datetime, timedelta, timezone

import structlog

from fitlog.auth.tokens import Token, generate_token, token_digest
from fitlog.db.models import User
from fitlog.errors import TokenNotFoundOrExpired
from fitlog.stores.base import TokenStore, UserStore

logger = structlog.get_logger()


class TokenIssuer:
    """Creates and durably records tokens."""

    def __init__(self, tokens: TokenStore):
        self.tokens = tokens

    async def issue(self, user_id: int, ttl: timedelta, scope: str) -> Token:
        token = generate_token(user_id, ttl, scope)
        await self.tokens.insert(token)
        logger.info(
            "fitlog.token.issued",
            user_id=user_id,
            scope=scope,
            expiry=token.expiry.isoformat(),
        )
        return token

    async def revoke_all(self, user_id: int, scope: str) -> int:
        """Delete every token user_id holds in scope."""
        deleted = await self.tokens.delete_all_for_user(user_id, scope)
        logger.info(
            "fitlog.token.revoked_all", user_id=user_id, scope=scope, deleted=deleted
        )
        return deleted


class TokenResolver:
    """Maps a presented token plaintext to its live owner."""

    def __init__(self, users: UserStore):
        self.users = users

    async def resolve(self, scope: str, plaintext: str) -> User:
        now = datetime.now(timezone.utc)
        user = await self.users.get_by_token(scope, token_digest(plaintext), now)
        if user is None:
            raise TokenNotFoundOrExpired("token not found or expired")
        return user
