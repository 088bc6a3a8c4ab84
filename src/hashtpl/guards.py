"""Guard primitives substituted for raw member/index access and ``??``.

These are registered as globals in the expression environment; the
preprocessor rewrites expression text so that it calls them.
"""

from __future__ import annotations

from typing import Any

from hashtpl.values import ValueKind, is_absent, kind_of


def guard_member(value: Any, path: str) -> Any:
    """Walk a dotted ``path`` through nested mappings.

    Returns None as soon as a segment is missing or the current value is not
    a mapping.

    Example:
        >>> guard_member({"user": {"name": "ada"}}, "user.name")
        'ada'
        >>> guard_member({"user": {}}, "user.profile.address") is None
        True
    """
    current = value
    for segment in path.split("."):
        if kind_of(current) is not ValueKind.MAPPING:
            return None
        current = current.get(segment)
    return None if kind_of(current) is ValueKind.NULL else current


def guard_index(collection: Any, index: Any) -> Any:
    """Index a sequence, string or mapping, yielding None instead of failing."""
    kind = kind_of(collection)
    if kind is ValueKind.MAPPING:
        try:
            return collection.get(index)
        except TypeError:
            # unhashable key
            return None
    if kind not in (ValueKind.SEQUENCE, ValueKind.STRING):
        return None
    if kind_of(index) is not ValueKind.INT:
        return None
    if index < 0 or index >= len(collection):
        return None
    return collection[index]


def coalesce(value: Any, fallback: Any) -> Any:
    """Return ``fallback`` iff ``value`` is null or the empty string."""
    return fallback if is_absent(value) else value


class Present:
    """Box for a non-absent left operand of ``??``.

    Always truthy, so ``coalesce_probe(a) or b`` only evaluates ``b`` when the
    probe returned None.
    """

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __bool__(self) -> bool:
        return True


def coalesce_probe(value: Any) -> Present | None:
    return None if is_absent(value) else Present(value)


def coalesce_pick(result: Any) -> Any:
    return result.value if isinstance(result, Present) else result


GUARD_GLOBALS = {
    "guard_member": guard_member,
    "guard_index": guard_index,
    "coalesce": coalesce,
    "coalesce_probe": coalesce_probe,
    "coalesce_pick": coalesce_pick,
}
