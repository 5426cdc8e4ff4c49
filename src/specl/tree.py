"""Helpers for building and walking example trees.

A tree is a sequence of nodes. Nodes are ``Group``/``Example`` instances or
the nested literal shape::

    [
        {"describe a stack": {
            "before": lambda env: env.define("items", []),
            "children": [
                {"it starts empty": lambda env: env.expect(env.items).should_equal([])},
            ],
        }},
    ]

A description mapped to a list is a group with those children; mapped to a
callable it is an example. Coercion happens lazily, one node at a time, so a
malformed node only aborts its own branch.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Iterable, Iterator, List, Tuple, TypeGuard

from .types import HOOK_PHASES, Example, Group, Node, SpecStructureError

_CLASSIFIER_RE = re.compile(r"^[^\W_]+\s+")

_GROUP_KEYS = frozenset(HOOK_PHASES) | {"children"}


def strip_classifier(description: str) -> str:
    """Drop the leading classifier word: 'describe X' -> 'X'."""
    return _CLASSIFIER_RE.sub("", description, count=1)


def is_group(node: object) -> TypeGuard[Group]:
    return isinstance(node, Group)


def is_example(node: object) -> TypeGuard[Example]:
    return isinstance(node, Example)


def describe_raw(raw: Any) -> str:
    if isinstance(raw, (Group, Example)):
        return raw.description

    if isinstance(raw, Mapping) and len(raw) == 1:
        return str(next(iter(raw)))

    return repr(raw)


def coerce_node(raw: Any) -> Node:
    if isinstance(raw, (Group, Example)):
        return raw

    if not isinstance(raw, Mapping):
        raise SpecStructureError(f"malformed spec: expected a node, got {type(raw).__name__}")

    # There is only one, otherwise we can't maintain example order.
    if len(raw) != 1:
        raise SpecStructureError(
            f"malformed spec: each node needs exactly one description, got {list(raw)!r}"
        )

    description, definition = next(iter(raw.items()))

    if not isinstance(description, str):
        raise SpecStructureError(f"malformed spec: description must be a string, got {description!r}")

    if callable(definition):
        return Example(description, definition)

    if isinstance(definition, (list, tuple)):
        return Group(description, list(definition))

    if isinstance(definition, Mapping):
        return _coerce_group_options(description, definition)

    # Oh dear, most likely the nesting is not quite right!
    raise SpecStructureError(f"malformed spec in {description!r}")


def _coerce_group_options(description: str, options: Mapping[str, Any]) -> Group:
    if "body" in options:
        raise SpecStructureError(
            f"malformed spec in {description!r}: a node cannot carry both children and a body"
        )

    unknown = [k for k in options if k not in _GROUP_KEYS]
    if unknown:
        raise SpecStructureError(f"malformed spec in {description!r}: unknown keys {unknown!r}")

    children = options.get("children", [])

    return Group(
        description,
        children,
        before=options.get("before"),
        after=options.get("after"),
        before_each=options.get("before_each"),
        after_each=options.get("after_each"),
    )


def iter_examples(tree: Iterable[Any], path: Tuple[str, ...]=()) -> Iterator[Tuple[Tuple[str, ...], Example]]:
    """Lazily yield ``(path, example)`` for every leaf in declaration order."""
    for raw in tree:
        node = coerce_node(raw)
        here = path + (node.description,)

        if is_example(node):
            yield here, node
        else:
            yield from iter_examples(node.children, here)


def count_examples(tree: Iterable[Any]) -> int:
    return sum(1 for _ in iter_examples(tree))


def example_paths(tree: Iterable[Any]) -> List[str]:
    return [" > ".join(strip_classifier(p) for p in path) for path, _ in iter_examples(tree)]
