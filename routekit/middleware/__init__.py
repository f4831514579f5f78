"""Middleware: outermost, route-agnostic request stages."""

from routekit.middleware.auth import BearerAuthMiddleware
from routekit.middleware.chain import MiddlewareBinding, MiddlewareChain, MiddlewareConsumer, RouteSpec
from routekit.middleware.logger import LoggerMiddleware
from routekit.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware

__all__ = [
    "BearerAuthMiddleware",
    "LoggerMiddleware",
    "MiddlewareBinding",
    "MiddlewareChain",
    "MiddlewareConsumer",
    "REQUEST_ID_HEADER",
    "RequestIdMiddleware",
    "RouteSpec",
]
