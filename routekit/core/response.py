"""Response handle enforcing a single write per call."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from routekit.core.errors import ResponseAlreadySentError
from routekit.core.ports import ResponseWriter


class ResponseHandle:
    """Wraps the transport writer for one call.

    Headers may be staged by any stage before the write; the body and status
    go out exactly once.
    """

    __slots__ = ("_writer", "_headers", "_sent", "status_code", "body")

    def __init__(self, writer: ResponseWriter) -> None:
        self._writer = writer
        self._headers: dict[str, str] = {}
        self._sent = False
        self.status_code: int | None = None
        self.body: Any = None

    @property
    def sent(self) -> bool:
        return self._sent

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def set_header(self, name: str, value: str) -> None:
        if self._sent:
            raise ResponseAlreadySentError(f"cannot set header {name!r}: response already sent")
        self._headers[name] = value

    def write(self, status_code: int, body: Any, headers: Mapping[str, str] | None = None) -> None:
        if self._sent:
            raise ResponseAlreadySentError(
                f"response already sent with status {self.status_code}; refusing status {status_code}"
            )
        if headers:
            self._headers.update(headers)
        self._sent = True
        self.status_code = status_code
        self.body = body
        self._writer.write(status_code, body, dict(self._headers))


@dataclass
class RecordingWriter:
    """In-process transport writer that keeps every write for inspection."""

    writes: list[tuple[int, Any, dict[str, str]]] = field(default_factory=list)

    def write(self, status_code: int, body: Any, headers: Mapping[str, str] | None = None) -> None:
        self.writes.append((status_code, body, dict(headers or {})))

    @property
    def last(self) -> tuple[int, Any, dict[str, str]] | None:
        return self.writes[-1] if self.writes else None
