"""Authorization checks on a resolved Identity.

Learn: Two policies cover every protected operation:

1. require_authenticated — anonymous callers stop here (401)
2. require_owner — the caller must own the resource (403)

AuthorizationGuard.require_owned runs them in the only safe order:
authenticated → resource exists → caller owns it. A missing resource is
always reported as not-found, even to a caller who would not own it.
"""

from typing import Awaitable, Callable, Optional

import structlog

from fitlog.auth.identity import Identity
from fitlog.db.models import User
from fitlog.errors import Forbidden, ResourceNotFound, Unauthenticated

logger = structlog.get_logger()

# resource_id → owner user_id, or None when the resource does not exist
OwnerLookup = Callable[[int], Awaitable[Optional[int]]]


def require_authenticated(identity: Identity) -> User:
    """Return the identity's user, or raise Unauthenticated."""
    if identity.is_anonymous:
        raise Unauthenticated("authentication required")
    return identity.user


def require_owner(identity: Identity, owner_id: int) -> None:
    """Raise Forbidden unless identity is the user owner_id."""
    user = require_authenticated(identity)
    if user.id != owner_id:
        raise Forbidden(f"user {user.id} does not own this resource")


class AuthorizationGuard:
    """Ownership enforcement for one resource type."""

    def __init__(self, owner_lookup: OwnerLookup, resource: str = "resource"):
        self.owner_lookup = owner_lookup
        self.resource = resource

    async def require_owned(self, identity: Identity, resource_id: int) -> User:
        """Authenticated → exists → owned. Returns the acting user."""
        user = require_authenticated(identity)

        owner_id = await self.owner_lookup(resource_id)
        if owner_id is None:
            raise ResourceNotFound(f"{self.resource} {resource_id} not found")

        try:
            require_owner(identity, owner_id)
        except Forbidden:
            logger.warning(
                "fitlog.auth.forbidden",
                resource=self.resource,
                resource_id=resource_id,
                user_id=user.id,
            )
            raise
        return user
