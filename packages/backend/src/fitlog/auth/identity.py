"""Request identity: an authenticated user, or the anonymous sentinel.

Learn: The authentication dependency resolves exactly one Identity per
request and FastAPI passes it explicitly to every handler and service
that asks for it. Nothing reads identity from a global — a handler that
didn't declare the dependency simply has no identity to misuse.
"""

from typing import Optional

from fitlog.db.models import User


class Identity:
    """Who is making the request.

    Use ANONYMOUS for unauthenticated callers; never construct an
    Identity with user=None yourself.
    """

    __slots__ = ("user",)

    def __init__(self, user: Optional[User] = None):
        self.user = user

    @property
    def is_anonymous(self) -> bool:
        return self.user is None

    @property
    def user_id(self) -> Optional[int]:
        return None if self.user is None else self.user.id

    def __repr__(self) -> str:
        if self.user is None:
            return "Identity(anonymous)"
        return f"Identity(user_id={self.user.id})"


ANONYMOUS = Identity()
