"""Expectation proxies and the per-run recorder they write into.

``expect(subject).should_equal(x)`` resolves ``equal`` in the matcher
registry at call time; ``should_not_equal`` runs the same predicate and
inverts both its verdict and its message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from .matchers import MatcherRegistry, matchers as default_matchers
from .types import Expectation, RunStats, UnknownMatcherError

_SHOULD = "should_"
_SHOULD_NOT = "should_not_"

def parse_matcher_name(attr: str) -> Optional[Tuple[bool, str]]:
    """Split ``should_not_<m>`` / ``should_<m>`` into ``(negated, m)``."""
    if attr.startswith(_SHOULD_NOT):
        return True, attr[len(_SHOULD_NOT):]

    if attr.startswith(_SHOULD):
        return False, attr[len(_SHOULD):]

    return None

@dataclass
class ExpectationRecorder:
    stats: RunStats = field(default_factory=RunStats)
    expectations: List[Expectation] = field(default_factory=list)

    def record(self, status: bool, message: str) -> Expectation:
        expectation = Expectation(status=status, message=message)

        if status:
            self.stats.passed += 1
        else:
            self.stats.failed += 1

        self.expectations.append(expectation)
        return expectation

    def reset(self) -> None:
        self.expectations = []

    def drain(self) -> List[Expectation]:
        """Hand over the current example's expectations and start a new list."""
        drained = self.expectations
        self.expectations = []
        return drained

class ExpectationProxy:
    __slots__ = ("_subject", "_recorder", "_matchers")

    def __init__(self, subject: Any, recorder: ExpectationRecorder, registry: MatcherRegistry):
        self._subject = subject
        self._recorder = recorder
        self._matchers = registry

    def __getattr__(self, attr: str) -> Callable[..., Expectation]:
        parsed = parse_matcher_name(attr)
        if parsed is None:
            raise AttributeError(f"expectation has no attribute '{attr}'; use should_<matcher> or should_not_<matcher>")

        negated, name = parsed

        def invoke(*args: Any) -> Expectation:
            matcher = self._matchers.get(name)
            if matcher is None:
                raise UnknownMatcherError(name)

            success, message = matcher(self._subject, *args)
            success = bool(success)

            if negated:
                success = not success
                message = f"not {message}"

            return self._recorder.record(success, message)

        invoke.__name__ = attr
        return invoke

    def __repr__(self) -> str:
        return f"expect({self._subject!r})"

def make_expect(recorder: ExpectationRecorder, registry: Optional[MatcherRegistry]=None) -> Callable[[Any], ExpectationProxy]:
    """Build the ``expect`` entry point bound into each example's scope."""
    registry = registry if registry is not None else default_matchers

    def expect(subject: Any) -> ExpectationProxy:
        return ExpectationProxy(subject, recorder, registry)

    return expect
