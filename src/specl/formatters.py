"""Formatters: output sinks that receive run lifecycle callbacks."""

from __future__ import annotations

import sys
import traceback
from abc import ABC, abstractmethod
from typing import Any, List, Optional, TextIO

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText, StyleAndTextTuples

from .config import RunConfig, debug_py_trace_enabled
from .types import Expectation, FormatterError, RunStats

FORMATTER_HOOKS = ("header", "spec", "example", "expectations", "footer")

# Output role -> prompt_toolkit style string.
ROLE_STYLE = {
    "spec": "bold",
    "example": "",
    "passed": "ansigreen",
    "failed": "bold ansired",
    "error": "bold ansired",
    "summary": "bold",
    "timing": "ansigray",
    "trace": "italic ansigray",
}

INDENT = "  "


class Formatter(ABC):
    def __init__(self, file: Optional[TextIO]=None):
        self.file = file

    def emit(self, fragments: StyleAndTextTuples, end: str="\n") -> None:
        print_formatted_text(FormattedText(fragments), end=end, file=self.file if self.file is not None else sys.stdout, flush=True)

    def configure(self, config: RunConfig) -> None:
        """Called by the engine with the run configuration before `header`."""

    @abstractmethod
    def header(self) -> None: ...

    @abstractmethod
    def spec(self, description: str, depth: int=0) -> None: ...

    @abstractmethod
    def example(self, description: str, depth: int=0) -> None: ...

    @abstractmethod
    def expectations(self, expectations: List[Expectation], depth: int=0) -> None: ...

    @abstractmethod
    def footer(self, stats: RunStats) -> None: ...


def check_formatter(formatter: Any) -> Any:
    """Reject objects that do not implement every formatter hook."""
    missing = [hook for hook in FORMATTER_HOOKS if not callable(getattr(formatter, hook, None))]

    if missing:
        raise FormatterError(
            f"{type(formatter).__name__} is not a formatter; missing hooks: {', '.join(missing)}"
        )

    return formatter


class ReportFormatter(Formatter):
    """Verbose formatter: every spec and example, then each failed expectation."""

    def __init__(self, file: Optional[TextIO]=None, py_trace: Optional[bool]=None):
        super().__init__(file)
        # None follows the run configuration, then SPECL_DEBUG_PY_TRACE
        self.py_trace = py_trace
        self._explicit_trace = py_trace is not None

    def configure(self, config: RunConfig) -> None:
        if not self._explicit_trace:
            self.py_trace = config.py_trace

    def header(self) -> None:
        pass

    def spec(self, description: str, depth: int=0) -> None:
        self.emit([(ROLE_STYLE["spec"], INDENT * depth + description)])

    def example(self, description: str, depth: int=0) -> None:
        self.emit([(ROLE_STYLE["example"], INDENT * depth + description)])

    def expectations(self, expectations: List[Expectation], depth: int=0) -> None:
        indent = INDENT * depth

        for i, expectation in enumerate(expectations, start=1):
            if expectation.status:
                continue

            message = expectation.message.replace("\n", "\n" + indent + INDENT)
            self.emit([
                (ROLE_STYLE["failed"], f"{indent}- FAILED expectation {i}: "),
                ("", message),
            ])

    def footer(self, stats: RunStats) -> None:
        elapsed = stats.elapsed()
        total = stats.total

        self.emit([])
        if total:
            percent = 100 * stats.passed / total
            self.emit([(ROLE_STYLE["summary"], f"Met {percent:.2f}% of {total} expectations.")])
        else:
            self.emit([(ROLE_STYLE["summary"], "No expectations were run.")])

        self.emit([
            (ROLE_STYLE["passed"], f"{stats.passed} passed"),
            ("", ", and "),
            (ROLE_STYLE["failed"] if stats.failed else "", f"{stats.failed} failed"),
            (ROLE_STYLE["timing"], f" in {elapsed:.6f} seconds."),
        ])

        for err in stats.errors:
            self.emit([(ROLE_STYLE["error"], f"- ERROR in {err}")])

            if self._trace_enabled():
                trace = "".join(traceback.format_exception(type(err.error), err.error, err.error.__traceback__))
                self.emit([(ROLE_STYLE["trace"], trace.rstrip("\n"))])

    def _trace_enabled(self) -> bool:
        if self.py_trace is None:
            return debug_py_trace_enabled()
        return self.py_trace


class ProgressFormatter(Formatter):
    """Terse formatter: one character per expectation."""

    def header(self) -> None:
        self.emit([("", ">")], end="")

    def spec(self, description: str, depth: int=0) -> None:
        pass

    def example(self, description: str, depth: int=0) -> None:
        pass

    def expectations(self, expectations: List[Expectation], depth: int=0) -> None:
        fragments: StyleAndTextTuples = [("", "\b")]

        for expectation in expectations:
            if expectation.status:
                fragments.append((ROLE_STYLE["passed"], "."))
            else:
                fragments.append((ROLE_STYLE["failed"], "F"))

        fragments.append(("", ">"))
        self.emit(fragments, end="")

    def footer(self, stats: RunStats) -> None:
        elapsed = stats.elapsed()
        self.emit([("", "\b ")])

        if stats.failed == 0:
            summary: StyleAndTextTuples = [(ROLE_STYLE["passed"], "All expectations met, ")]
        else:
            summary = [(ROLE_STYLE["failed"], f"{stats.passed} passed, and {stats.failed} failed ")]

        self.emit(summary + [(ROLE_STYLE["timing"], f"in {elapsed:.6f} seconds.")])

        if stats.errors:
            self.emit([(ROLE_STYLE["error"], f"{len(stats.errors)} example(s) aborted with an error:")])
            for err in stats.errors:
                self.emit([(ROLE_STYLE["error"], f"- {err}")])


def default_formatter(file: Optional[TextIO]=None) -> Formatter:
    return ProgressFormatter(file)
