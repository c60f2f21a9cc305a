"""Token API — log in for a bearer token, or drop all of them.

Learn: POST /tokens/authentication is the login endpoint. Unknown
username, wrong password and an unusable stored hash all produce the
same 401 — the service logs which one it was.

The plaintext token appears in this response and nowhere else; the
server only keeps its SHA-256. Logging in again does not invalidate
earlier tokens. DELETE clears every authentication token the caller
holds (log out everywhere).
"""

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException

from fitlog.auth.dependencies import BEARER_CHALLENGE, get_current_user
from fitlog.auth.tokens import SCOPE_AUTHENTICATION
from fitlog.config import settings
from fitlog.db.models import User
from fitlog.errors import InvalidCredentials
from fitlog.schemas.token import TokenCreate, TokenRead
from fitlog.services.token_service import TokenIssuer
from fitlog.services.user_service import UserService
from fitlog.stores import TokenStore, UserStore, get_token_store, get_user_store

router = APIRouter(prefix="/tokens")


def _issuer(tokens: TokenStore = Depends(get_token_store)) -> TokenIssuer:
    return TokenIssuer(tokens)


def _users(users: UserStore = Depends(get_user_store)) -> UserService:
    return UserService(users)


@router.post("/authentication", response_model=TokenRead, status_code=201)
async def create_authentication_token(
    body: TokenCreate,
    users: UserService = Depends(_users),
    issuer: TokenIssuer = Depends(_issuer),
):
    """Exchange username + password for a bearer token."""
    try:
        user = await users.authenticate(body.username, body.password)
    except InvalidCredentials:
        raise HTTPException(
            status_code=401,
            detail="Invalid username or password",
            headers=BEARER_CHALLENGE,
        )

    token = await issuer.issue(
        user.id,
        timedelta(hours=settings.auth_token_ttl_hours),
        SCOPE_AUTHENTICATION,
    )
    return TokenRead(token=token.plaintext, expiry=token.expiry)


@router.delete("/authentication")
async def delete_authentication_tokens(
    user: User = Depends(get_current_user),
    issuer: TokenIssuer = Depends(_issuer),
):
    """Revoke every authentication token of the caller, including this one."""
    deleted = await issuer.revoke_all(user.id, SCOPE_AUTHENTICATION)
    return {"deleted": deleted}
