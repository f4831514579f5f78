"""Telemetry backends for pipeline observability."""

from routekit.telemetry.base import TelemetryPort
from routekit.telemetry.inmemory import InMemoryTelemetry

__all__ = ["InMemoryTelemetry", "TelemetryPort"]
