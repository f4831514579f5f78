"""Schema validation pipe backed by pydantic."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from loguru import logger
from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from routekit.core.errors import BadRequestError
from routekit.core.models import ArgumentMetadata

# Declared types that carry no validation rules of their own.
_NATIVE_TYPES: frozenset[Any] = frozenset({str, bool, int, float, list, dict, object, Any})


@lru_cache(maxsize=256)
def _cached_adapter(metatype: Any) -> TypeAdapter[Any]:
    return TypeAdapter(metatype)


def _adapter(metatype: Any) -> TypeAdapter[Any] | None:
    """Adapter for ``metatype``, or ``None`` when the type declares no schema."""
    try:
        try:
            return _cached_adapter(metatype)
        except TypeError:
            return TypeAdapter(metatype)
    except PydanticSchemaGenerationError:
        logger.debug("no validation schema for {!r}; passing value through", metatype)
        return None


class ValidationPipe:
    """Validate domain-typed parameters, then pass the raw value on.

    The raw value is converted into an instance of the declared type only to
    run its field rules; the original value is what reaches the handler.
    """

    def __init__(self, *, message: str = "Validation failed") -> None:
        self._message = message

    def transform(self, value: Any, metadata: ArgumentMetadata) -> Any:
        metatype = metadata.metatype
        if metatype is None or not self.to_validate(metatype):
            return value

        adapter = _adapter(metatype)
        if adapter is None:
            return value

        try:
            adapter.validate_python(value)
        except ValidationError as exc:
            violations = tuple(_format_violation(err, metadata) for err in exc.errors())
            logger.debug("validation failed for {}: {} violation(s)", metadata.data or metadata.type, len(violations))
            raise BadRequestError(self._message, violations=violations, cause=exc) from exc
        return value

    @staticmethod
    def to_validate(metatype: Any) -> bool:
        try:
            return metatype not in _NATIVE_TYPES
        except TypeError:
            # unhashable annotations are never native
            return True


def _format_violation(err: Any, metadata: ArgumentMetadata) -> str:
    loc = ".".join(str(part) for part in err.get("loc", ()))
    field = loc or metadata.data or metadata.type
    return f"{field}: {err.get('msg', 'invalid value')}"
