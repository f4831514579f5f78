"""Bearer token authentication middleware."""

from __future__ import annotations

import hmac
from collections.abc import Mapping

from loguru import logger

from routekit.core.models import HttpRequest, Principal
from routekit.core.ports import MiddlewareNext
from routekit.core.response import ResponseHandle


def _bearer_token(auth_header: str | None) -> str | None:
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()  # Remove "Bearer " prefix
    return token or None


class BearerAuthMiddleware:
    """Resolve ``Authorization: Bearer <token>`` to a ``Principal``.

    Unknown or missing tokens leave ``request.user`` unset; rejecting the
    call is the job of ``AuthGuard`` on the routes that need it.
    """

    def __init__(self, tokens: Mapping[str, Principal]) -> None:
        self._tokens = dict(tokens)

    async def __call__(self, request: HttpRequest, response: ResponseHandle, next: MiddlewareNext) -> None:
        token = _bearer_token(request.header("Authorization"))
        if token is not None:
            request.user = self._lookup(token)
            if request.user is None:
                logger.debug("unknown bearer token for {} {}", request.method, request.path)
        await next()

    def _lookup(self, token: str) -> Principal | None:
        match: Principal | None = None
        for candidate, principal in self._tokens.items():
            # compare against every entry to keep timing independent of position
            if hmac.compare_digest(candidate, token):
                match = principal
        return match
