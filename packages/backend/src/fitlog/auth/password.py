"""Password hashing and verification.

Learn: Uses bcrypt for password hashing. bcrypt salts every hash itself
and embeds cost and salt in its output ("$2b$13$<salt><digest>"), so the
stored value is self-describing and two hashes of the same password
never match byte-for-byte.

The cost factor (FITLOG_BCRYPT_ROUNDS, default 13) is deliberately
expensive. Hashing runs synchronously on the serving worker — there is
no timeout around it.

bcrypt only reads the first 72 bytes of a secret; we truncate explicitly
so newer bcrypt releases (which raise on longer input) behave the same.
"""

from typing import Optional

import bcrypt

from fitlog.config import settings
from fitlog.errors import HashingError, VerificationError

BCRYPT_MAX_BYTES = 72


def _secret_bytes(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plaintext: str, rounds: Optional[int] = None) -> bytes:
    """Hash a password with a fresh salt. Raises HashingError on failure."""
    try:
        salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
        return bcrypt.hashpw(_secret_bytes(plaintext), salt)
    except (ValueError, TypeError) as e:
        raise HashingError(f"bcrypt hashing failed: {e}") from e


def verify_password(plaintext: str, password_hash: Optional[bytes]) -> bool:
    """Check a password against a stored hash.

    A wrong password is a normal False. A missing or unparseable hash
    is a VerificationError — that is a data problem, not a bad guess.
    """
    if not password_hash:
        raise VerificationError("no password hash stored")
    try:
        return bcrypt.checkpw(_secret_bytes(plaintext), password_hash)
    except (ValueError, TypeError) as e:
        raise VerificationError(f"stored password hash is invalid: {e}") from e


class Password:
    """A user's password credential.

    Learn: `plaintext` only lives for the duration of the set()/matches()
    call that received it; only `hash` is persisted (User.password_hash).

        password = Password()
        password.set("password1234")
        password.matches("password1234")   # True
        password.matches("wrongpass12")    # False
    """

    def __init__(self, hash: Optional[bytes] = None):
        self.hash = hash

    def set(self, plaintext: str) -> None:
        """Replace the stored hash with a freshly salted hash of plaintext."""
        self.hash = hash_password(plaintext)

    def matches(self, candidate: str) -> bool:
        """Constant-time comparison of candidate against the stored hash."""
        return verify_password(candidate, self.hash)
