"""Opaque bearer token generation.

Learn: Tokens are random, not self-describing (no JWT). The server keeps
only sha256(plaintext) plus owner, scope and expiry, so every request
costs one store lookup but any token can be deleted server-side.

    32 random bytes → unpadded base32 (52 chars) → plaintext
    sha256(plaintext)                            → hash (stored)
"""

import base64
import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from fitlog.errors import RandomnessError

SCOPE_AUTHENTICATION = "authentication"

TOKEN_BYTES = 32
TOKEN_LENGTH = 52  # base32 of 32 bytes, padding stripped


@dataclass
class Token:
    """An issued token. `plaintext` is handed to the client exactly once."""

    plaintext: str = field(repr=False)
    hash: bytes = field(repr=False)
    user_id: int
    expiry: datetime
    scope: str


def token_digest(plaintext: str) -> bytes:
    """SHA-256 of the token plaintext — what the store keeps and matches on."""
    return hashlib.sha256(plaintext.encode("utf-8")).digest()


def generate_token(user_id: int, ttl: timedelta, scope: str) -> Token:
    """Create a new token for user_id, valid for ttl.

    Does not persist anything — see TokenIssuer.issue for that.
    """
    try:
        raw = secrets.token_bytes(TOKEN_BYTES)
    except (OSError, NotImplementedError) as e:
        raise RandomnessError(f"secure random source unavailable: {e}") from e

    plaintext = base64.b32encode(raw).decode("ascii").rstrip("=")
    return Token(
        plaintext=plaintext,
        hash=token_digest(plaintext),
        user_id=user_id,
        expiry=datetime.now(timezone.utc) + ttl,
        scope=scope,
    )
