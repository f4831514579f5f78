"""Interceptors: onion wrappers around pipes and the route handler."""

from routekit.interceptors.cache import CACHE_KEY, CACHE_TTL_KEY, NO_CACHE_KEY, CacheInterceptor
from routekit.interceptors.chain import CallHandler, InterceptorChain
from routekit.interceptors.logging import LoggingInterceptor
from routekit.interceptors.timeout import DEFAULT_TIMEOUT_MS, TimeoutInterceptor
from routekit.interceptors.transform import TransformInterceptor

__all__ = [
    "CACHE_KEY",
    "CACHE_TTL_KEY",
    "CacheInterceptor",
    "CallHandler",
    "DEFAULT_TIMEOUT_MS",
    "InterceptorChain",
    "LoggingInterceptor",
    "NO_CACHE_KEY",
    "TimeoutInterceptor",
    "TransformInterceptor",
]
