from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Tuple

from .config import RunConfig
from .expect import ExpectationRecorder, make_expect
from .formatters import check_formatter
from .matchers import MatcherRegistry, matchers as default_matchers
from .tree import coerce_node, describe_raw, is_group, strip_classifier
from .types import (
    Example, ExampleError, Group, Hook, HookError, RunStats, Scope, SpecStructureError,
)
from .utils import accepts_keyword, call_with_scope

logger = logging.getLogger(__name__)

Path = Tuple[str, ...]

class ExecutionEngine:
    """Walks an example tree depth-first, one run at a time, on one thread."""

    def __init__(self, formatter: Any, matchers: Optional[MatcherRegistry]=None, config: Optional[RunConfig]=None):
        self.formatter = check_formatter(formatter)
        self.matchers = matchers if matchers is not None else default_matchers
        self.config = config if config is not None else RunConfig.from_env()
        self.recorder = ExpectationRecorder()

    @property
    def stats(self) -> RunStats:
        return self.recorder.stats

    def run(self, tree: Iterable[Any]) -> bool:
        self.recorder = ExpectationRecorder()
        root = Scope()

        logger.debug("Starting run")
        configure = getattr(self.formatter, "configure", None)
        if callable(configure):
            configure(self.config)
        self.formatter.header()

        try:
            self.run_nodes(tree, root, (), 0)
        finally:
            self.formatter.footer(self.stats)

        stats = self.stats
        logger.info(f"Run complete: {stats.passed} passed, {stats.failed} failed, {len(stats.errors)} aborted")

        return stats.ok

    def run_nodes(self, nodes: Iterable[Any], scope: Scope, path: Path, depth: int) -> None:
        for raw in nodes:
            self.run_node(raw, scope, path, depth)

    def run_node(self, raw: Any, scope: Scope, path: Path, depth: int) -> None:
        try:
            node = coerce_node(raw)
        except SpecStructureError as exc:
            self._abort(path + (describe_raw(raw),), exc, "structure")
            return

        if is_group(node):
            self.run_group(node, scope, path, depth)
        else:
            self.run_example(node, scope, path, depth)

    def run_group(self, group: Group, scope: Scope, path: Path, depth: int) -> None:
        here = path + (group.description,)
        logger.debug(f"Entering group {' > '.join(here)}")

        self._announce(self.formatter.spec, strip_classifier(group.description), depth)

        group_scope = scope.derive()
        self._call_hook(group, "before", group.before, group_scope)

        for raw in group.children:
            child_scope = group_scope.derive()
            self._call_hook(group, "before_each", group.before_each, child_scope)
            self.run_node(raw, child_scope, here, depth + 1)
            self._call_hook(group, "after_each", group.after_each, child_scope)

        self._call_hook(group, "after", group.after, group_scope)

    def run_example(self, example: Example, scope: Scope, path: Path, depth: int) -> None:
        here = path + (example.description,)
        logger.debug(f"Running example {' > '.join(here)}")

        self._announce(self.formatter.example, strip_classifier(example.description), depth)

        self.recorder.reset()
        example_scope = scope.derive()
        example_scope.define("expect", make_expect(self.recorder, self.matchers))

        try:
            call_with_scope(example.body, example_scope)
        except Exception as exc:
            self._abort(here, exc, "example")
        finally:
            self.formatter.expectations(self.recorder.drain(), depth + 1)

    def _announce(self, hook: Any, description: str, depth: int) -> None:
        if accepts_keyword(hook, "depth"):
            hook(description, depth=depth)
        else:
            hook(description)

    def _call_hook(self, group: Group, phase: str, hook: Optional[Hook], scope: Scope) -> None:
        if hook is None:
            return

        try:
            call_with_scope(hook, scope)
        except Exception as exc:
            raise HookError(group.description, phase, exc) from exc

    def _abort(self, path: Path, exc: Exception, phase: str) -> None:
        if self.config.fail_fast:
            raise exc

        logger.warning(f"Aborted {phase} {' > '.join(path)}: {type(exc).__name__}: {exc}")
        self.stats.errors.append(ExampleError(path=path, error=exc, phase=phase))
