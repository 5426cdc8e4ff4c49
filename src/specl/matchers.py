from __future__ import annotations

import re
from collections.abc import Mapping, Set
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple
from typing_extensions import Protocol

from .types import MatcherUsageError
from .utils import deep_equal, quote, type_name, value_in_table

MatchResult = Tuple[bool, str]

class Matcher(Protocol):
    def __call__(self, actual: Any, *args: Any) -> MatchResult: ...

class MatcherRegistry:
    """Name -> predicate mapping consulted on every expectation call."""

    def __init__(self, entries: Optional[Dict[str, Matcher]]=None):
        self._entries: Dict[str, Matcher] = dict(entries or {})

    def register(self, name: str) -> Callable[[Matcher], Matcher]:
        def dec(fn: Matcher) -> Matcher:
            self._entries[name] = fn
            return fn

        return dec

    def get(self, name: str) -> Optional[Matcher]:
        return self._entries.get(name)

    def names(self) -> List[str]:
        return sorted(self._entries)

    def copy(self) -> 'MatcherRegistry':
        return MatcherRegistry(self._entries)

    def __setitem__(self, name: str, fn: Matcher) -> None:
        self._entries[name] = fn

    def __getitem__(self, name: str) -> Matcher:
        return self._entries[name]

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MatcherRegistry({self.names()!r})"

matchers = MatcherRegistry()

def register_matcher(name: str) -> Callable[[Matcher], Matcher]:
    return matchers.register(name)

@register_matcher("equal")
def _equal(actual: Any, expected: Any) -> MatchResult:
    """Deep comparison: matches if both values share the same structure."""
    message = f"expecting {quote(expected)}, but got {quote(actual)}"

    return deep_equal(actual, expected), message

@register_matcher("be")
def _be(actual: Any, expected: Any) -> MatchResult:
    """Identity: only matches when both are the same object."""
    message = f"expecting exactly {quote(expected)}, but got {quote(actual)}"

    return actual is expected, message

@register_matcher("error")
def _error(actual: Any, expected: str = "", *args: Any) -> MatchResult:
    if not callable(actual):
        raise MatcherUsageError(f"'error' matcher: callable expected, but got {type_name(actual)}")

    try:
        actual(*args)
    except Exception as exc:
        text = str(exc)
        message = f"expecting an error containing {quote(expected)}, and got\n{quote(text)}"
        return expected in text, message

    return False, f"expecting an error containing {quote(expected)}, and got no error"

@register_matcher("match")
def _match(actual: Any, pattern: str) -> MatchResult:
    if not isinstance(actual, str):
        raise MatcherUsageError(f"'match' matcher: string expected, but got {type_name(actual)}")

    message = f"expecting string matching {quote(pattern)}, but got {quote(actual)}"

    return re.search(pattern, actual) is not None, message

@register_matcher("contain")
def _contain(actual: Any, expected: Any) -> MatchResult:
    if isinstance(actual, str) and isinstance(expected, str):
        message = f"expecting string containing {quote(expected)}, but got {quote(actual)}"
        return expected in actual, message

    if isinstance(actual, (Mapping, list, tuple, Set)):
        message = f"expecting table containing {quote(expected)}, but got {quote(actual)}"
        return value_in_table(actual, expected), message

    raise MatcherUsageError(
        f"'contain' matcher: string or table expected, but got {type_name(actual)}"
    )
