"""Role-based admission guard."""

from __future__ import annotations

from typing import Any, Literal

from routekit.core.context import ExecutionContext

ROLES_KEY = "roles"


def roles(*names: str) -> dict[str, Any]:
    """Metadata entry declaring the roles a route requires."""
    return {ROLES_KEY: tuple(names)}


class RolesGuard:
    """Admit callers whose roles cover the roles declared on the route.

    Routes without declared roles are open.  With ``match="all"`` the caller
    must hold every declared role; with ``match="any"`` one is enough.
    """

    def __init__(self, *, match: Literal["all", "any"] = "all", metadata_key: str = ROLES_KEY) -> None:
        self._match = match
        self._key = metadata_key

    def can_activate(self, context: ExecutionContext) -> bool:
        required = context.get_metadata(self._key)
        if not required:
            return True
        user = context.request.user
        if user is None:
            return False
        return user.has_roles(set(required), match=self._match)
