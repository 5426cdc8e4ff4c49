"""Behavior-specification runner: nested example trees, matchers, formatters."""

from .config import RunConfig
from .engine import ExecutionEngine
from .expect import ExpectationProxy, ExpectationRecorder, make_expect
from .formatters import Formatter, ProgressFormatter, ReportFormatter
from .matchers import MatcherRegistry, matchers, register_matcher
from .runner import run
from .tree import coerce_node, iter_examples, strip_classifier
from .types import (
    Example, ExampleError, Expectation, FormatterError, Group, HookError,
    MatcherUsageError, RunStats, Scope, ScopeLookupError, SpecStructureError,
    SpeclError, UnknownMatcherError,
)

__version__ = "0.2.0"

__all__ = [
    "Example",
    "ExampleError",
    "ExecutionEngine",
    "Expectation",
    "ExpectationProxy",
    "ExpectationRecorder",
    "Formatter",
    "FormatterError",
    "Group",
    "HookError",
    "MatcherRegistry",
    "MatcherUsageError",
    "ProgressFormatter",
    "ReportFormatter",
    "RunConfig",
    "RunStats",
    "Scope",
    "ScopeLookupError",
    "SpecStructureError",
    "SpeclError",
    "UnknownMatcherError",
    "coerce_node",
    "iter_examples",
    "make_expect",
    "matchers",
    "register_matcher",
    "run",
    "strip_classifier",
]
