"""
routekit - composable request pipeline: middleware, guards, pipes,
interceptors and exception filters around a route handler.
"""

__version__ = "0.1.0"
__logo__ = "🚦"

from routekit.app.bootstrap import build_pipeline
from routekit.config.schema import PipelineSettings
from routekit.core import (
    ControllerDefinition,
    ExecutionContext,
    HttpRequest,
    ParamSpec,
    PipelineResult,
    Principal,
    RecordingWriter,
    RouteDefinition,
    RouteRegistry,
    StructuredError,
)
from routekit.core.pipeline import GlobalComponents, RequestPipeline

__all__ = [
    "ControllerDefinition",
    "ExecutionContext",
    "GlobalComponents",
    "HttpRequest",
    "ParamSpec",
    "PipelineResult",
    "PipelineSettings",
    "Principal",
    "RecordingWriter",
    "RequestPipeline",
    "RouteDefinition",
    "RouteRegistry",
    "StructuredError",
    "__logo__",
    "__version__",
    "build_pipeline",
]
