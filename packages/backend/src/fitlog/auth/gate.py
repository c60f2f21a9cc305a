"""Authentication gate — Authorization header → Identity.

Learn: One pass per request, four outcomes:

    no header                    → ANONYMOUS          (NoHeader → Resolved)
    not exactly "Bearer <token>" → MalformedCredentials (Malformed → Rejected)
    token resolves               → Identity(user)     (Resolving → Resolved)
    token doesn't resolve        → TokenNotFoundOrExpired (→ Rejected)

A malformed header is rejected before any store access. The gate knows
nothing about HTTP responses; fitlog.auth.dependencies turns its errors
into 401s.
"""

from typing import Optional

import structlog

from fitlog.auth.identity import ANONYMOUS, Identity
from fitlog.auth.tokens import SCOPE_AUTHENTICATION
from fitlog.errors import MalformedCredentials, TokenNotFoundOrExpired
from fitlog.services.token_service import TokenResolver

logger = structlog.get_logger()

BEARER = "Bearer"


def parse_bearer(header: str) -> str:
    """Extract the token from `Bearer <token>`. Anything else is malformed."""
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != BEARER or not parts[1]:
        raise MalformedCredentials("authorization header must be 'Bearer <token>'")
    return parts[1]


class AuthenticationGate:
    """Resolves the request's Identity from its Authorization header."""

    def __init__(self, resolver: TokenResolver, scope: str = SCOPE_AUTHENTICATION):
        self.resolver = resolver
        self.scope = scope

    async def identify(self, authorization: Optional[str]) -> Identity:
        if not authorization:
            return ANONYMOUS

        try:
            plaintext = parse_bearer(authorization)
        except MalformedCredentials:
            logger.warning("fitlog.auth.malformed_header")
            raise

        try:
            user = await self.resolver.resolve(self.scope, plaintext)
        except TokenNotFoundOrExpired:
            logger.warning("fitlog.auth.token_rejected", scope=self.scope)
            raise

        structlog.contextvars.bind_contextvars(user_id=user.id)
        return Identity(user)
