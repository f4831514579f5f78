"""Request id propagation middleware."""

from __future__ import annotations

import re
import uuid

from routekit.core.models import HttpRequest
from routekit.core.ports import MiddlewareNext
from routekit.core.response import ResponseHandle

REQUEST_ID_HEADER = "X-Request-Id"
_VALID_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


class RequestIdMiddleware:
    """Attach ``state["request_id"]`` and echo it as a response header.

    A well-formed incoming ``X-Request-Id`` is reused; anything else is
    replaced with a fresh id.
    """

    def __init__(self, *, header: str = REQUEST_ID_HEADER) -> None:
        self._header = header

    async def __call__(self, request: HttpRequest, response: ResponseHandle, next: MiddlewareNext) -> None:
        incoming = (request.header(self._header) or "").strip()
        request_id = incoming if _VALID_ID_RE.match(incoming) else uuid.uuid4().hex
        request.state["request_id"] = request_id
        response.set_header(self._header, request_id)
        await next()
