"""Domain error taxonomy.

Learn: Services raise these; API routes translate them to HTTP status
codes. The base classes map one-to-one onto the externally visible
outcome (400/401/403/404/409/500) so a route can catch a whole family
at once. Subclasses exist for logging — the caller never sees which
sub-case of an authentication failure occurred.
"""


class FitlogError(Exception):
    """Base class for all fitlog domain errors."""


# ─── Validation ─────────────────────────────────────────


class ValidationError(FitlogError):
    """Malformed input, rejected before any store access."""


class MalformedCredentials(ValidationError):
    """Authorization header is present but not `Bearer <token>`."""


# ─── Authentication ─────────────────────────────────────


class AuthenticationError(FitlogError):
    """The caller could not be authenticated."""


class TokenNotFoundOrExpired(AuthenticationError):
    """No live token matches. Unknown, wrong-scope and expired look the same."""


class InvalidCredentials(AuthenticationError):
    """Username/password pair did not match a user."""


class Unauthenticated(AuthenticationError):
    """An anonymous caller reached an operation that needs a user."""


# ─── Authorization ──────────────────────────────────────


class AuthorizationError(FitlogError):
    """Authenticated, but not allowed to act on this resource."""


class Forbidden(AuthorizationError):
    """The caller does not own the resource."""


# ─── Not found / conflict ───────────────────────────────


class NotFoundError(FitlogError):
    """A referenced resource or user does not exist."""


class ResourceNotFound(NotFoundError):
    """Ownership lookup found no such resource."""


class ConflictError(FitlogError):
    """The write would violate a uniqueness rule."""


class UserAlreadyExists(ConflictError):
    """Username or email is already registered."""


# ─── Internal ───────────────────────────────────────────


class InternalError(FitlogError):
    """Failure unrelated to the caller's input. Logged, never detailed."""


class HashingError(InternalError):
    """bcrypt could not produce a password hash."""


class VerificationError(InternalError):
    """A stored password hash could not be compared (missing or corrupt)."""


class RandomnessError(InternalError):
    """The OS random source is unavailable."""


class StoreError(InternalError):
    """The backing store failed (connectivity, constraint, commit)."""
