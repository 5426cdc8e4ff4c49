from __future__ import annotations

import inspect
from collections.abc import Mapping, Set
from typing import Any, Callable, Optional

from .types import Scope


def is_table(value: Any) -> bool:
    """Mappings, sets and non-string sequences compare structurally."""
    return isinstance(value, (Mapping, list, tuple, Set))


def deep_equal(lhs: Any, rhs: Any) -> bool:
    if lhs is rhs:
        return True

    match (lhs, rhs):
        case (Mapping(), Mapping()):
            left, right = _tag_keys(lhs), _tag_keys(rhs)
            if left.keys() != right.keys():
                return False
            return all(deep_equal(val, right[key]) for key, val in left.items())
        case ((list() | tuple()), (list() | tuple())):
            return len(lhs) == len(rhs) and all(
                deep_equal(a, b) for a, b in zip(lhs, rhs)
            )
        case (Set(), Set()):
            return lhs == rhs
        case _ if is_table(lhs) or is_table(rhs):
            return False
        # booleans are not numbers here, even though True == 1
        case _ if isinstance(lhs, bool) != isinstance(rhs, bool):
            return False
        case _:
            return bool(lhs == rhs)


def _tag_keys(table: Mapping) -> dict:
    # keeps True and 1 apart as keys, matching the rule for values
    return {(isinstance(key, bool), key): val for key, val in table.items()}


def value_in_table(table: Any, value: Any) -> bool:
    if isinstance(table, Mapping):
        for key, val in table.items():
            if deep_equal(key, value) or deep_equal(val, value):
                return True
        return False

    for existing in table:
        if deep_equal(existing, value):
            return True

    return False


def quote(obj: Any) -> str:
    """Quote strings nicely, and coerce non-strings into their repr."""
    if isinstance(obj, str):
        escaped = obj.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    return repr(obj)


def type_name(value: Any) -> str:
    if value is None:
        return "None"

    return type(value).__name__


def call_with_scope(fn: Callable[..., Any], scope: Optional[Scope]) -> Any:
    """Call a hook or body, passing the scope only when it takes an argument."""
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return fn(scope)

    for param in params:
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD, param.VAR_POSITIONAL):
            return fn(scope)

    return fn()


def accepts_keyword(fn: Callable[..., Any], name: str) -> bool:
    try:
        params = inspect.signature(fn).parameters
    except (TypeError, ValueError):
        return False

    param = params.get(name)
    if param is not None:
        return param.kind in (param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY)

    return any(p.kind is p.VAR_KEYWORD for p in params.values())
