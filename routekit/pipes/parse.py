"""Parsing pipes for path, query and header values."""

from __future__ import annotations

import math
import re
from typing import Any

from routekit.core.errors import error_for_status
from routekit.core.models import ArgumentMetadata

_INT_RE = re.compile(r"^-?[0-9]+$")


class _ParsePipe:
    """Shared error policy: fail with ``error_status`` (400 by default)."""

    expected = "value"

    def __init__(self, *, error_status: int = 400, optional: bool = False) -> None:
        self._error_status = int(error_status)
        self._optional = optional

    def transform(self, value: Any, metadata: ArgumentMetadata) -> Any:
        del metadata
        if value is None and self._optional:
            return None
        return self.parse(value)

    def parse(self, value: Any) -> Any:
        raise NotImplementedError

    def fail(self) -> Exception:
        return error_for_status(self._error_status, f"Validation failed ({self.expected} is expected)")


class ParseIntPipe(_ParsePipe):
    expected = "numeric string"

    def parse(self, value: Any) -> int:
        if isinstance(value, bool):
            raise self.fail()
        if isinstance(value, int):
            return value
        if isinstance(value, str) and _INT_RE.match(value.strip()):
            return int(value.strip())
        raise self.fail()


class ParseFloatPipe(_ParsePipe):
    expected = "numeric string"

    def parse(self, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise self.fail()
        try:
            parsed = float(value)
        except ValueError:
            raise self.fail() from None
        if not math.isfinite(parsed):
            raise self.fail()
        return parsed


class ParseBoolPipe(_ParsePipe):
    expected = "boolean string"

    def parse(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value in ("true", "false"):
            return value == "true"
        raise self.fail()
