"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers and at router level.

- authenticate → Identity (ANONYMOUS or a user); 401 on a bad header/token
- get_current_user → User; 401 when the identity is anonymous

`authenticate` is attached to the whole API router in fitlog.api, so it
runs before every handler. FastAPI caches a dependency per request, so a
handler that also declares it gets the same Identity without a second
store lookup.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Response

from fitlog.auth.gate import AuthenticationGate
from fitlog.auth.guard import require_authenticated
from fitlog.auth.identity import Identity
from fitlog.db.models import User
from fitlog.errors import MalformedCredentials, TokenNotFoundOrExpired, Unauthenticated
from fitlog.services.token_service import TokenResolver
from fitlog.stores import UserStore, get_user_store

# Also on rejections: FastAPI drops headers set on the injected Response
# when a dependency raises
BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer", "Vary": "Authorization"}


def get_token_resolver(users: UserStore = Depends(get_user_store)) -> TokenResolver:
    return TokenResolver(users)


async def authenticate(
    response: Response,
    authorization: Optional[str] = Header(None),
    resolver: TokenResolver = Depends(get_token_resolver),
) -> Identity:
    """Resolve the request's identity (required for every API route)."""
    # Responses differ by credential; caches must key on it
    response.headers["Vary"] = "Authorization"

    gate = AuthenticationGate(resolver)
    try:
        return await gate.identify(authorization)
    except MalformedCredentials:
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header",
            headers=BEARER_CHALLENGE,
        )
    except TokenNotFoundOrExpired:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers=BEARER_CHALLENGE,
        )


async def get_current_user(identity: Identity = Depends(authenticate)) -> User:
    """Authenticated user or 401 — for routes that only make sense logged in."""
    try:
        return require_authenticated(identity)
    except Unauthenticated:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers=BEARER_CHALLENGE,
        )
