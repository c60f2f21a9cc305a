"""Token API tests — login, bearer auth through the gate, logout.

Learn: The gate's four outcomes as seen over HTTP:
no header → anonymous, malformed → 401, unknown/expired → 401,
valid → the caller's user.
"""

from datetime import datetime, timedelta, timezone

import pytest

from fitlog.auth.tokens import SCOPE_AUTHENTICATION, TOKEN_LENGTH
from fitlog.services.token_service import TokenIssuer


def vary_values(response) -> list[str]:
    return [v.strip() for v in response.headers.get("Vary", "").split(",")]


async def _register(client, username: str):
    r = await client.post(
        "/api/v1/users",
        json={
            "username": username,
            "email": f"{username}@example.com",
            "password": "password1234",
        },
    )
    assert r.status_code == 201
    return r.json()


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_returns_token_and_expiry(client):
    await _register(client, "token_getter")

    r = await client.post(
        "/api/v1/tokens/authentication",
        json={"username": "token_getter", "password": "password1234"},
    )

    assert r.status_code == 201
    body = r.json()
    assert len(body["token"]) == TOKEN_LENGTH
    expiry = datetime.fromisoformat(body["expiry"].replace("Z", "+00:00"))
    remaining = expiry - datetime.now(timezone.utc)
    assert timedelta(hours=23) < remaining <= timedelta(hours=24)
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username,password",
    [("token_getter", "wrongpass12"), ("nobody_home", "password1234")],
)
async def test_login_failures_look_alike(client, username, password):
    await _register(client, "token_getter")

    r = await client.post(
        "/api/v1/tokens/authentication",
        json={"username": username, "password": password},
    )

    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid username or password"


@pytest.mark.asyncio
async def test_login_with_corrupt_stored_hash(client, memory_db):
    """An unusable hash is a failed login, not a crash."""
    user = await _register(client, "broken_hash")
    memory_db.users[user["id"]].password_hash = b"garbage"

    r = await client.post(
        "/api/v1/tokens/authentication",
        json={"username": "broken_hash", "password": "password1234"},
    )
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Presenting tokens
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "header",
    ["Token abc", "Bearer", "Bearer a b", "bearer ABC"],
)
async def test_malformed_authorization_header(client, header):
    r = await client.get("/api/v1/users/me", headers={"Authorization": header})

    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid authorization header"
    assert r.headers["WWW-Authenticate"] == "Bearer"
    assert "Authorization" in vary_values(r)


@pytest.mark.asyncio
async def test_unknown_token(client):
    r = await client.get(
        "/api/v1/users/me", headers={"Authorization": "Bearer " + "A" * 52}
    )

    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid or expired token"
    assert "Authorization" in vary_values(r)


@pytest.mark.asyncio
async def test_bad_token_rejected_even_on_public_routes(client):
    """The gate runs before every handler, not only protected ones."""
    r = await client.get(
        "/api/v1/workouts/1", headers={"Authorization": "Bearer " + "A" * 52}
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_expired_token(client, token_store):
    user = await _register(client, "expired_one")
    token = await TokenIssuer(token_store).issue(
        user["id"], timedelta(seconds=-1), SCOPE_AUTHENTICATION
    )

    r = await client.get(
        "/api/v1/users/me", headers={"Authorization": f"Bearer {token.plaintext}"}
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_token_of_other_scope_is_not_a_login(client, token_store):
    user = await _register(client, "reset_holder")
    token = await TokenIssuer(token_store).issue(
        user["id"], timedelta(hours=1), "password-reset"
    )

    r = await client.get(
        "/api/v1/users/me", headers={"Authorization": f"Bearer {token.plaintext}"}
    )
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Logout
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_logout_everywhere(client, login):
    first = await login("multi_device")
    second = await login("multi_device")

    r = await client.delete("/api/v1/tokens/authentication", headers=first)
    assert r.status_code == 200
    assert r.json() == {"deleted": 2}

    for headers in (first, second):
        r = await client.get("/api/v1/users/me", headers=headers)
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_logout_needs_a_token(client):
    r = await client.delete("/api/v1/tokens/authentication")
    assert r.status_code == 401
