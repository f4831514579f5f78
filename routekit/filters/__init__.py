"""Exception filters and the per-call exception boundary."""

from routekit.filters.boundary import (
    BoundaryState,
    DefaultExceptionFilter,
    ExceptionBoundary,
    filter_matches,
)
from routekit.filters.http_exception import HttpExceptionFilter

__all__ = [
    "BoundaryState",
    "DefaultExceptionFilter",
    "ExceptionBoundary",
    "HttpExceptionFilter",
    "filter_matches",
]
