"""Value model shared by the evaluator, the guards and the renderer.

Context values are plain Python objects. ``kind_of`` maps each one onto a
closed set of kinds so that truthiness, stringification and loop dispatch can
all branch on the same classification.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

import msgspec
from jinja2 import Undefined


class ValueKind(str, Enum):
    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    # Host objects handed in by the caller (functions, dates, ...)
    OPAQUE = "opaque"


def kind_of(value: Any) -> ValueKind:
    """Classify a value. ``bool`` must be tested before ``int``."""
    if value is None or isinstance(value, Undefined):
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return ValueKind.SEQUENCE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    return ValueKind.OPAQUE


def is_absent(value: Any) -> bool:
    """True for the values ``??`` falls back on: null and the empty string."""
    kind = kind_of(value)
    return kind is ValueKind.NULL or (kind is ValueKind.STRING and value == "")


def truthy(value: Any) -> bool:
    """Coerce a value for #if."""
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        return False
    if kind is ValueKind.BOOL:
        return value
    if kind in (ValueKind.INT, ValueKind.FLOAT):
        return value != 0
    if kind in (ValueKind.STRING, ValueKind.SEQUENCE, ValueKind.MAPPING):
        return len(value) > 0
    return True


def stringify(value: Any) -> str:
    """Render a value into output text. Null renders as the empty string."""
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        return ""
    if kind is ValueKind.BOOL:
        return "true" if value else "false"
    if kind is ValueKind.INT:
        return str(value)
    if kind is ValueKind.FLOAT:
        return _format_float(value)
    if kind is ValueKind.STRING:
        return value
    if kind is ValueKind.SEQUENCE:
        return msgspec.json.encode(list(value), enc_hook=str).decode()
    if kind is ValueKind.MAPPING:
        return msgspec.json.encode(dict(value), enc_hook=str).decode()
    return str(value)


def _format_float(value: float) -> str:
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)
