"""Execution context and declared route metadata."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from routekit.core.models import HttpRequest
    from routekit.core.registry import RouteBinding
    from routekit.core.response import ResponseHandle

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Metadata:
    """Read-only metadata bag with method-over-controller lookup."""

    handler: Mapping[str, Any] = _EMPTY
    controller: Mapping[str, Any] = _EMPTY

    def __post_init__(self) -> None:
        object.__setattr__(self, "handler", MappingProxyType(dict(self.handler)))
        object.__setattr__(self, "controller", MappingProxyType(dict(self.controller)))

    def get(self, key: str, default: Any = None) -> Any:
        """Nearest declaration wins: handler level, then controller level."""
        if key in self.handler:
            return self.handler[key]
        if key in self.controller:
            return self.controller[key]
        return default

    def merged(self, key: str) -> list[Any]:
        """Concatenate sequence values declared at controller and handler level."""
        out: list[Any] = []
        for scope in (self.controller, self.handler):
            value = scope.get(key)
            if value is None:
                continue
            if isinstance(value, (list, tuple, set, frozenset)):
                out.extend(value)
            else:
                out.append(value)
        return out

    def __contains__(self, key: object) -> bool:
        return key in self.handler or key in self.controller

    def __iter__(self) -> Iterator[str]:
        seen = dict.fromkeys([*self.handler, *self.controller])
        return iter(seen)

    def as_dict(self) -> dict[str, Any]:
        return {key: self.get(key) for key in self}


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """Per-call descriptor of the target route.

    Created once by the orchestrator and discarded when the call completes.
    ``route`` is ``None`` only when no route matched the request.
    """

    request: HttpRequest
    response: ResponseHandle
    route: RouteBinding | None = None
    metadata: Metadata = field(default_factory=Metadata)

    @property
    def handler(self) -> Callable[..., Any] | None:
        return self.route.handler if self.route is not None else None

    @property
    def handler_name(self) -> str:
        return self.route.name if self.route is not None else "<unmatched>"

    @property
    def controller_name(self) -> str | None:
        return self.route.controller_name if self.route is not None else None

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)
