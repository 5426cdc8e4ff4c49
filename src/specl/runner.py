from __future__ import annotations

import importlib.util
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, List, Optional

from .config import RunConfig
from .engine import ExecutionEngine
from .formatters import default_formatter
from .matchers import MatcherRegistry
from .tree import example_paths
from .types import SpeclError

logger = logging.getLogger(__name__)

def run(tree: Iterable[Any], formatter: Any=None, *, matchers: Optional[MatcherRegistry]=None, config: Optional[RunConfig]=None) -> bool:
    """Run every example in ``tree``; True iff no expectation failed and nothing aborted."""
    if formatter is None:
        formatter = default_formatter()

    engine = ExecutionEngine(formatter, matchers=matchers, config=config)
    return engine.run(tree)

def load_specs(path: str) -> List[Any]:
    """Import a Python module by path and return its ``specs`` attribute."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"spec module not found: {path}")

    module_name = f"specl_specs_{p.stem}"
    spec = importlib.util.spec_from_file_location(module_name, p)
    if spec is None or spec.loader is None:
        raise SpeclError(f"cannot import spec module: {path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    specs = getattr(module, "specs", None)
    if not isinstance(specs, (list, tuple)):
        raise SpeclError(f"{path} does not define a 'specs' list")

    logger.debug(f"Loaded {len(specs)} top-level specs from {path}")
    return list(specs)

def main(argv: Optional[List[str]]=None) -> None:
    fail_fast: Optional[bool] = None
    list_only = False
    paths: List[str] = []

    for token in (sys.argv[1:] if argv is None else argv):
        if token == "--fail-fast":
            fail_fast = True
            continue

        if token == "--list":
            list_only = True
            continue

        if token.startswith("-"):
            print(f"Unexpected argument: {token}", file=sys.stderr)
            raise SystemExit(2)

        paths.append(token)

    if not paths:
        print("usage: specl [--fail-fast] [--list] SPEC_MODULE...", file=sys.stderr)
        raise SystemExit(2)

    tree: List[Any] = []
    try:
        for path in paths:
            tree.extend(load_specs(path))
    except (FileNotFoundError, SpeclError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2) from None

    if list_only:
        try:
            lines = example_paths(tree)
        except SpeclError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            raise SystemExit(2) from None

        for line in lines:
            print(line)
        raise SystemExit(0)

    config = RunConfig.from_env().with_overrides(fail_fast=fail_fast)
    ok = run(tree, config=config)
    raise SystemExit(0 if ok else 1)

if __name__ == "__main__":
    main()
