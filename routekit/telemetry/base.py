"""Base telemetry port protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TelemetryPort(Protocol):
    """Protocol for telemetry backends.

    The pipeline records:
    - Counters: requests, errors by kind, guard denials
    - Timing: end-to-end call duration
    """

    def incr(self, name: str, value: int = 1, labels: tuple[tuple[str, str], ...] = ()) -> None:
        """Increase a named counter by ``value`` with optional labels.

        Args:
            name: Metric name (e.g., "requests_total")
            value: Amount to increment (default 1)
            labels: Optional label tuples (e.g., (("route", "GET /cats"), ("status", "200")))
        """

    def timing(
        self, name: str, value: float, labels: tuple[tuple[str, str], ...] = ()
    ) -> None:
        """Record timing of an operation in seconds.

        Args:
            name: Metric name (e.g., "request_duration_seconds")
            value: Duration in seconds
            labels: Optional label tuples
        """
