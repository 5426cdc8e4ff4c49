from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

_TRUTHY = ("1", "true", "yes", "on")

FAIL_FAST_ENV = "SPECL_FAIL_FAST"
PY_TRACE_ENV = "SPECL_DEBUG_PY_TRACE"


def env_flag(name: str, environ: Optional[Mapping[str, str]]=None) -> bool:
    env = os.environ if environ is None else environ
    return env.get(name, "").strip().lower() in _TRUTHY


def debug_py_trace_enabled() -> bool:
    return env_flag(PY_TRACE_ENV)


@dataclass(frozen=True)
class RunConfig:
    fail_fast: bool = False
    py_trace: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]]=None) -> RunConfig:
        return cls(
            fail_fast=env_flag(FAIL_FAST_ENV, environ),
            py_trace=env_flag(PY_TRACE_ENV, environ),
        )

    def with_overrides(self, fail_fast: Optional[bool]=None, py_trace: Optional[bool]=None) -> RunConfig:
        cfg = self
        if fail_fast is not None:
            cfg = replace(cfg, fail_fast=fail_fast)
        if py_trace is not None:
            cfg = replace(cfg, py_trace=py_trace)
        return cfg
