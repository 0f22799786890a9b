"""Pytest configuration & custom summary hook.

Also puts the project root on sys.path so `benchrun` and `benches` import
without an install, and provides small suite builders shared by the tests.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `import benchrun` works
_root = Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter,
    exitstatus: int,
    config: pytest.Config,
) -> None:  # noqa: D401
    """Append a compact custom summary at the end of test session."""
    stats = terminalreporter.stats
    collected = terminalreporter._numcollected  # type: ignore[attr-defined]
    passed = len(stats.get("passed", []))
    failed = len(stats.get("failed", []))
    errors = len(stats.get("error", []))
    skipped = len(stats.get("skipped", []))
    xfailed = len(stats.get("xfailed", []))
    xpassed = len(stats.get("xpassed", []))

    terminalreporter.section("Custom summary", sep="=")
    terminalreporter.write_line(
        "Collected: "
        f"{collected} | Passed: {passed} | Failed: {failed} | "
        f"Errors: {errors} | Skipped: {skipped} | "
        f"xfailed: {xfailed} | xpassed: {xpassed}"
    )
    if failed:
        terminalreporter.write_line("Failed tests:")
        for rep in stats["failed"]:
            terminalreporter.write_line(f"  - {rep.nodeid}")


from benchrun.implicit import IMPLICIT_DEFINE_NAMES  # noqa: E402
from benchrun.models import BenchCase, BenchSuite  # noqa: E402

SUITE_NAMES = IMPLICIT_DEFINE_NAMES + ("X", "Y")


def _noop(cfg):
    pass


@pytest.fixture
def make_suite():
    """Build a one-case suite with ``X``/``Y`` defines after the implicit ones."""

    def build(rows=None, run=_noop, if_=None, case_name="case", suite_name="suite"):
        case = BenchCase(name=case_name, run=run, defines=rows, if_=if_)
        return BenchSuite(name=suite_name, cases=(case,), define_names=SUITE_NAMES)

    return build
