from __future__ import annotations

import io
from pathlib import Path
from textwrap import dedent

import pytest

from specl import run
from specl.runner import load_specs, main
from specl.types import SpeclError
from tests.support.harness import HookError, RecordingFormatter, RunConfig, output_of

PASSING_SPECS = dedent(
    """\
    specs = [
        {"describe arithmetic": [
            {"it adds": lambda env: env.expect(1 + 1).should_equal(2)},
            {"it errors": lambda env: env.expect(lambda: 1 / 0).should_error("division")},
        ]},
    ]
    """
)

FAILING_SPECS = dedent(
    """\
    specs = [
        {"describe strings": [
            {"it matches": lambda env: env.expect("abc").should_match("^x")},
        ]},
    ]
    """
)


def _write(tmp_path: Path, name: str, source: str) -> str:
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return str(path)


def test_run_returns_true_when_everything_passes() -> None:
    fmt = RecordingFormatter()
    tree = [{"describe ok": [{"it passes": lambda env: env.expect("abc").should_contain("b")}]}]

    assert run(tree, fmt) is True
    assert fmt.footer_stats is not None
    assert fmt.footer_stats.passed == 1


def test_run_scenario_error_matcher() -> None:
    def raises() -> None:
        raise ValueError("bad value")

    fmt = RecordingFormatter()
    tree = [{"describe errors": [
        {"it matches bad": lambda env: env.expect(raises).should_error("bad")},
        {"it misses good": lambda env: env.expect(raises).should_error("good")},
    ]}]

    assert run(tree, fmt) is False
    assert fmt.calls[3] == ("expectations", [True])
    assert fmt.calls[5] == ("expectations", [False])


def test_run_scenario_contain() -> None:
    fmt = RecordingFormatter()
    tree = [{"describe contain": [
        {"it finds": lambda env: env.expect([1, 2, 3]).should_contain(2)},
        {"it misuses": lambda env: env.expect(7).should_contain(2)},
    ]}]

    assert run(tree, fmt, config=RunConfig()) is False
    assert fmt.footer_stats.passed == 1
    assert fmt.footer_stats.failed == 0
    assert len(fmt.footer_stats.errors) == 1


def test_run_uses_progress_formatter_by_default(capsys: pytest.CaptureFixture[str]) -> None:
    assert run([{"describe d": [{"it e": lambda env: env.expect(1).should_be(1)}]}]) is True

    out = capsys.readouterr().out.replace("\r", "")
    assert "All expectations met" in out


def test_run_propagates_hook_errors() -> None:
    def after(env) -> None:
        raise RuntimeError("teardown")

    with pytest.raises(HookError):
        run([{"describe h": {"after": after, "children": []}}], RecordingFormatter())


def test_load_specs(tmp_path: Path) -> None:
    specs = load_specs(_write(tmp_path, "arith_spec.py", PASSING_SPECS))

    assert len(specs) == 1
    assert "describe arithmetic" in specs[0]


def test_load_specs_requires_specs_list(tmp_path: Path) -> None:
    path = _write(tmp_path, "empty_spec.py", "x = 1\n")

    with pytest.raises(SpeclError):
        load_specs(path)


def test_load_specs_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_specs(str(tmp_path / "nope.py"))


@pytest.mark.parametrize(
    "source, code",
    [
        pytest.param(PASSING_SPECS, 0, id="passing"),
        pytest.param(FAILING_SPECS, 1, id="failing"),
    ],
)
def test_main_exit_codes(tmp_path: Path, capsys: pytest.CaptureFixture[str], source: str, code: int) -> None:
    path = _write(tmp_path, "cli_spec.py", source)

    with pytest.raises(SystemExit) as exc_info:
        main([path])

    assert exc_info.value.code == code
    capsys.readouterr()


def test_main_list(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write(tmp_path, "list_spec.py", PASSING_SPECS)

    with pytest.raises(SystemExit) as exc_info:
        main(["--list", path])

    assert exc_info.value.code == 0
    assert capsys.readouterr().out.splitlines() == ["arithmetic > adds", "arithmetic > errors"]


@pytest.mark.parametrize(
    "argv",
    [
        pytest.param([], id="no-paths"),
        pytest.param(["--bogus"], id="unknown-flag"),
        pytest.param(["/definitely/not/here_spec.py"], id="missing-file"),
    ],
)
def test_main_usage_errors(capsys: pytest.CaptureFixture[str], argv) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)

    assert exc_info.value.code == 2
    assert capsys.readouterr().err


def test_main_fail_fast_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = dedent(
        """\
        def boom(env):
            raise RuntimeError("stop")

        specs = [{"describe ff": [{"it stops": boom}]}]
        """
    )
    path = _write(tmp_path, "ff_spec.py", source)

    with pytest.raises(RuntimeError, match="stop"):
        main(["--fail-fast", path])
    capsys.readouterr()


def test_report_output_through_run() -> None:
    from specl.formatters import ReportFormatter

    buf = io.StringIO()
    run([{"describe Report": [{"it prints": lambda env: env.expect(2).should_be(3)}]}], ReportFormatter(file=buf))

    out = output_of(buf)
    assert out.startswith("Report\n  prints\n")
    assert "- FAILED expectation 1: expecting exactly 3, but got 2" in out


def test_run_config_enables_report_trace() -> None:
    from specl.formatters import ReportFormatter

    def aborts(env) -> None:
        raise RuntimeError("broken fixture")

    buf = io.StringIO()
    ok = run([{"describe Trace": [{"it aborts": aborts}]}], ReportFormatter(file=buf), config=RunConfig(py_trace=True))

    out = output_of(buf)
    assert ok is False
    assert "Traceback (most recent call last)" in out
    assert "RuntimeError: broken fixture" in out
