from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple
from typing_extensions import TypeAlias

# ---------- Example tree ----------

Hook: TypeAlias = Callable[..., Any]
Body: TypeAlias = Callable[..., Any]

@dataclass
class Example:
    description: str
    body: Body

    def __post_init__(self) -> None:
        if not callable(self.body):
            raise SpecStructureError(f"malformed spec in {self.description!r}: example body is not callable")

@dataclass
class Group:
    description: str
    children: Sequence[Any] = field(default_factory=list)
    before: Optional[Hook] = None
    after: Optional[Hook] = None
    before_each: Optional[Hook] = None
    after_each: Optional[Hook] = None

    def __post_init__(self) -> None:
        if isinstance(self.children, (str, bytes)) or not isinstance(self.children, (list, tuple)):
            raise SpecStructureError(f"malformed spec in {self.description!r}: children must be a list")

        for phase in HOOK_PHASES:
            hook = getattr(self, phase)
            if hook is not None and not callable(hook):
                raise SpecStructureError(f"malformed spec in {self.description!r}: '{phase}' is not callable")

HOOK_PHASES = ("before", "after", "before_each", "after_each")

Node: TypeAlias = Group | Example

# ---------- Expectations & stats ----------

@dataclass(frozen=True)
class Expectation:
    status: bool
    message: str

@dataclass
class ExampleError:
    """An example or node that aborted instead of completing."""
    path: Tuple[str, ...]
    error: BaseException
    phase: str = "example"

    @property
    def location(self) -> str:
        return " > ".join(self.path)

    def __str__(self) -> str:
        return f"{self.location}: {type(self.error).__name__}: {self.error}"

@dataclass
class RunStats:
    passed: int = 0
    failed: int = 0
    start_time: float = field(default_factory=time.perf_counter)
    errors: List[ExampleError] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.passed + self.failed

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0

        return 100 * self.passed / self.total

    @property
    def ok(self) -> bool:
        return self.failed == 0 and not self.errors

    def elapsed(self) -> float:
        return time.perf_counter() - self.start_time

# ---------- Scope chain ----------

_MISSING = object()

class Scope:
    """Variable frame whose reads fall back to its parent; writes stay local."""

    __slots__ = ("_parent", "_vars")

    def __init__(self, parent: Optional['Scope']=None, **bindings: Any):
        object.__setattr__(self, "_parent", parent)
        object.__setattr__(self, "_vars", dict(bindings))

    @property
    def parent(self) -> Optional['Scope']:
        return self._parent

    def derive(self) -> 'Scope':
        return Scope(parent=self)

    def define(self, name: str, val: Any) -> None:
        self._vars[name] = val

    def lookup(self, name: str) -> Any:
        scope: Optional[Scope] = self

        while scope is not None:
            if name in scope._vars:
                return scope._vars[name]
            scope = scope._parent

        raise ScopeLookupError(name)

    def get(self, name: str, default: Any=None) -> Any:
        try:
            return self.lookup(name)
        except ScopeLookupError:
            return default

    def local_names(self) -> List[str]:
        return list(self._vars)

    def owns(self, name: str) -> bool:
        return name in self._vars

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name, _MISSING) is not _MISSING

    def __getitem__(self, name: str) -> Any:
        return self.lookup(name)

    def __setitem__(self, name: str, val: Any) -> None:
        self.define(name, val)

    def __iter__(self) -> Iterator[str]:
        seen: Dict[str, None] = {}
        scope: Optional[Scope] = self

        while scope is not None:
            for name in scope._vars:
                seen.setdefault(name, None)
            scope = scope._parent

        return iter(seen)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name in Scope.__slots__:
            raise AttributeError(name)

        try:
            return self.lookup(name)
        except ScopeLookupError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, val: Any) -> None:
        # attribute reads would find the Scope member, not the variable
        if hasattr(type(self), name):
            raise AttributeError(
                f"'{name}' is a Scope member; bind it with scope[{name!r}] = ... instead"
            )
        self.define(name, val)

    def __delattr__(self, name: str) -> None:
        if name not in self._vars:
            raise AttributeError(name)
        del self._vars[name]

    def __repr__(self) -> str:
        depth = 0
        scope = self._parent

        while scope is not None:
            depth += 1
            scope = scope._parent

        return f"Scope(depth={depth}, locals={self.local_names()!r})"

# ---------- Exceptions (keep Specl* canonical) ----------

class SpeclError(Exception):
    pass

class ScopeLookupError(SpeclError, KeyError):
    def __init__(self, name: str):
        super().__init__(f"Name '{name}' not found")
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])

class SpecStructureError(SpeclError):
    pass

class UnknownMatcherError(SpeclError, AttributeError):
    def __init__(self, name: str):
        super().__init__(f"unknown matcher '{name}'")
        self.matcher = name

class MatcherUsageError(SpeclError, TypeError):
    pass

class FormatterError(SpeclError, TypeError):
    pass

class HookError(SpeclError):
    def __init__(self, description: str, phase: str, error: BaseException):
        super().__init__(f"'{phase}' hook failed in {description!r}: {type(error).__name__}: {error}")
        self.description = description
        self.phase = phase
        self.error = error
