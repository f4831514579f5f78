"""Application wiring."""

from routekit.app.bootstrap import build_pipeline, default_interceptors

__all__ = ["build_pipeline", "default_interceptors"]
