"""Rewrites payload values into transport-safe primitives."""

from typing import Any

PRIMITIVES = (str, int, float, bool, type(None))


def sanitize(value: Any) -> Any:
    """
    Return a copy of value built only from primitives, lists, tuples and dicts.

    Anything else is replaced by its repr. Mapping keys that are not strings
    are converted with str(). Applying sanitize to its own output returns an
    equal value.
    """
    return _sanitize(value, set())


def _sanitize(value: Any, seen: set[int]) -> Any:
    if isinstance(value, PRIMITIVES):
        return value

    if isinstance(value, (dict, list, tuple)):
        if id(value) in seen:
            return "<recursion>"
        seen.add(id(value))
        try:
            if isinstance(value, dict):
                return {
                    key if isinstance(key, str) else str(key): _sanitize(item, seen)
                    for key, item in value.items()
                }
            items = [_sanitize(item, seen) for item in value]
            return tuple(items) if isinstance(value, tuple) else items
        finally:
            seen.discard(id(value))

    return _describe(value)


def _describe(value: Any) -> str:
    try:
        return repr(value)
    except Exception:
        return f"<{type(value).__name__}>"
