"""Data models for the request pipeline core."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from routekit.core.context import ExecutionContext

type ParamSource = Literal["body", "query", "param", "header", "custom"]


@dataclass(frozen=True, slots=True, kw_only=True)
class Principal:
    """Authenticated caller attached to the request by middleware."""

    id: str
    roles: frozenset[str] = frozenset()

    def has_roles(self, required: set[str] | frozenset[str], *, match: str = "all") -> bool:
        if not required:
            return True
        if match == "any":
            return bool(self.roles & required)
        return required <= self.roles


@dataclass(slots=True, kw_only=True)
class HttpRequest:
    """Raw inbound request as handed over by the transport.

    Attributes:
        method: Upper-cased HTTP method.
        path: Request path, always starting with ``/``.
        headers: Header mapping; keys are stored lower-cased.
        query: Parsed query string values.
        params: Path parameters, attached when the route is matched.
        body: Decoded body (already deserialized by the transport).
        user: Caller identity, set by authentication middleware.
        state: Free-form fields attached by middleware for downstream stages.
    """

    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)
    body: Any = None
    user: Principal | None = None
    state: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if not self.path.startswith("/"):
            self.path = "/" + self.path
        self.headers = {str(k).lower(): str(v) for k, v in self.headers.items()}

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    @property
    def url(self) -> str:
        if not self.query:
            return self.path
        query = "&".join(f"{k}={v}" for k, v in self.query.items())
        return f"{self.path}?{query}"


@dataclass(frozen=True, slots=True, kw_only=True)
class ArgumentMetadata:
    """What a pipe knows about the parameter it is transforming."""

    type: ParamSource
    metatype: Any = None
    data: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ParamSpec:
    """Declared handler parameter and where its raw value comes from.

    ``key`` defaults to ``name`` for query/param/header sources.  A body
    parameter without ``key`` receives the whole body.  ``custom`` sources
    call ``factory`` with the execution context.
    """

    name: str
    source: ParamSource = "body"
    key: str | None = None
    metatype: Any = None
    pipes: tuple[Any, ...] = ()
    factory: Callable[[ExecutionContext], Any] | None = None

    def argument_metadata(self) -> ArgumentMetadata:
        data = self.key
        if data is None and self.source != "body":
            data = self.name
        return ArgumentMetadata(type=self.source, metatype=self.metatype, data=data)


@dataclass(frozen=True, slots=True, kw_only=True)
class PipelineResult:
    """Terminal outcome of one call: a payload or an error, never both."""

    status_code: int
    body: Any
    headers: Mapping[str, str] = field(default_factory=dict)
    payload: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
