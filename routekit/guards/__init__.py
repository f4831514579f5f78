"""Route guards: admission checks run before parameter processing."""

from routekit.guards.auth import AuthGuard
from routekit.guards.chain import FORBIDDEN_MESSAGE, GuardChain
from routekit.guards.roles import ROLES_KEY, RolesGuard, roles

__all__ = [
    "AuthGuard",
    "FORBIDDEN_MESSAGE",
    "GuardChain",
    "ROLES_KEY",
    "RolesGuard",
    "roles",
]
