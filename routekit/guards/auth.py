"""Authentication guard."""

from __future__ import annotations

from routekit.core.context import ExecutionContext
from routekit.core.errors import UnauthorizedError


class AuthGuard:
    """Require a caller identity on the request.

    Identity is attached upstream (see ``BearerAuthMiddleware``).  A missing
    identity fails with ``UnauthorizedError`` rather than the generic
    forbidden outcome.
    """

    def __init__(self, *, public_key: str = "public") -> None:
        self._public_key = public_key

    def can_activate(self, context: ExecutionContext) -> bool:
        if context.get_metadata(self._public_key):
            return True
        if context.request.user is None:
            raise UnauthorizedError("Missing or invalid credentials")
        return True
