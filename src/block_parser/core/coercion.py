"""Schema-driven coercion of resolved attribute values.

Coercion never raises. Malformed input degrades to the type's empty or zero
value so a single bad attribute cannot fail the parse of a document.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import json
import logging
import math
from typing import Any

from .types import AttributeType

logger = logging.getLogger(__name__)


def to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        # JSON spelling keeps true/false/null and nested values readable
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def to_boolean(value: Any) -> bool:
    try:
        return bool(value)
    except Exception:  # noqa: BLE001 - objects with a broken __bool__
        return False


def to_object(value: Any) -> dict[str, Any]:
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, str | bytes) or value is None:
        return {}
    try:
        return dict(value)
    except (TypeError, ValueError):
        return {}


def to_null(value: Any) -> None:  # noqa: ARG001
    return None


def to_array(value: Any) -> list[Any]:
    if isinstance(value, Mapping) or value is None:
        return []
    if isinstance(value, Iterable):
        try:
            return list(value)
        except Exception:  # noqa: BLE001 - iterators failing mid-way
            return []
    return []


def _parse_number(value: Any) -> int | float:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int | float):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0
        try:
            return int(stripped)
        except ValueError:
            return float(stripped)
    raise TypeError(f"cannot interpret {type(value).__name__} as a number")


def to_number(value: Any) -> int | float:
    try:
        number = _parse_number(value)
    except (TypeError, ValueError):
        return 0
    if isinstance(number, float) and not math.isfinite(number):
        return 0
    return number


def to_integer(value: Any) -> int:
    number = to_number(value)
    return int(number)


_COERCERS: dict[AttributeType, Callable[[Any], Any]] = {
    AttributeType.STRING: to_string,
    AttributeType.BOOLEAN: to_boolean,
    AttributeType.OBJECT: to_object,
    AttributeType.NULL: to_null,
    AttributeType.ARRAY: to_array,
    AttributeType.INTEGER: to_integer,
    AttributeType.NUMBER: to_number,
}


def coerce_value(value: Any, declared_type: AttributeType | str | None) -> Any:
    """Coerce `value` to `declared_type`.

    Unknown or absent types return the value unchanged.
    """
    try:
        attribute_type = AttributeType(declared_type)
    except ValueError:
        if declared_type is not None:
            logger.debug("No coercion for unknown attribute type %r", declared_type)
        return value
    return _COERCERS[attribute_type](value)
