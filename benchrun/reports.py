"""Summary and listing reports over the selected suites and cases.

Tables keep the column layout of the classic bench runner so existing
tooling that scrapes them keeps working. Permutation counts are shown as
``filtered/total`` where ``filtered`` excludes permutations rejected by a
case's ``if_`` predicate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, TextIO

from benchrun.models import BenchSuite, flags_text
from benchrun.runner import BenchRunner

MIN_NAME_WIDTH = 23


@dataclass
class PermCount:
    total: int = 0
    filtered: int = 0

    def __str__(self) -> str:
        return f"{self.filtered}/{self.total}"


def _name_width(names) -> int:
    width = max([MIN_NAME_WIDTH, *(len(n) for n in names)])
    # round up to 4k-1 so the following two-space gap lands on a tab stop
    return 4 * ((width + 1 + 4 - 1) // 4) - 1


def _count(runner: BenchRunner, suite, case, bench_id, perms: PermCount) -> None:
    for perm in runner.permutations(suite, case, bench_id):
        perms.total += 1
        if case.if_ is not None and not case.if_(perm.defines):
            continue
        perms.filtered += 1


def summary(runner: BenchRunner, out: TextIO) -> None:
    print(f"{'':<23}  {'flags':>7} {'suites':>7} {'cases':>7} {'perms':>15}", file=out)
    suites = 0
    cases = 0
    flags = 0
    perms = PermCount()
    for bench_id in runner.ids:
        for suite in runner.suites:
            runner.registry.define_suite(suite)
            for case in suite.cases:
                if not bench_id.matches(suite, case):
                    continue
                cases += 1
                _count(runner, suite, case, bench_id, perms)
            suites += 1
            flags |= suite.flags
    print(
        f"{'TOTAL':<23}  {flags_text(flags):>7} {suites:>7} {cases:>7} {str(perms):>15}",
        file=out,
    )


def list_suites(runner: BenchRunner, out: TextIO) -> None:
    width = _name_width(s.name for s in runner.suites)
    print(f"{'suite':<{width}}  {'flags':>7} {'cases':>7} {'perms':>15}", file=out)
    for bench_id in runner.ids:
        for suite in runner.suites:
            runner.registry.define_suite(suite)
            cases = 0
            perms = PermCount()
            for case in suite.cases:
                if not bench_id.matches(suite, case):
                    continue
                cases += 1
                _count(runner, suite, case, bench_id, perms)
            # no benches found?
            if not cases:
                continue
            print(
                f"{suite.name:<{width}}  {flags_text(suite.flags):>7} {cases:>7} {str(perms):>15}",
                file=out,
            )


def list_cases(runner: BenchRunner, out: TextIO) -> None:
    width = _name_width(c.name for s in runner.suites for c in s.cases)
    print(f"{'case':<{width}}  {'flags':>7} {'perms':>15}", file=out)
    for bench_id, suite, case in runner.matching():
        perms = PermCount()
        _count(runner, suite, case, bench_id, perms)
        print(f"{case.name:<{width}}  {flags_text(case.flags):>7} {str(perms):>15}", file=out)


def list_suite_paths(runner: BenchRunner, out: TextIO) -> None:
    width = _name_width(s.name for s in runner.suites)
    print(f"{'suite':<{width}}  path", file=out)
    for bench_id in runner.ids:
        for suite in runner.suites:
            if not any(bench_id.matches(suite, case) for case in suite.cases):
                continue
            print(f"{suite.name:<{width}}  {suite.path or ''}", file=out)


def list_case_paths(runner: BenchRunner, out: TextIO) -> None:
    width = _name_width(c.name for s in runner.suites for c in s.cases)
    print(f"{'case':<{width}}  path", file=out)
    for bench_id in runner.ids:
        for suite in runner.suites:
            for case in suite.cases:
                if bench_id.matches(suite, case):
                    print(f"{case.name:<{width}}  {case.path or ''}", file=out)


class DefineValues:
    """Distinct values per define name, both in first-seen order."""

    def __init__(self) -> None:
        self.values: Dict[str, List[int]] = {}

    def add(self, runner: BenchRunner, d: int) -> None:
        name = runner.registry.name(d) or "(unknown)"
        value = runner.registry.value(d)
        values = self.values.setdefault(name, [])
        if value not in values:
            values.append(value)

    def write(self, out: TextIO) -> None:
        for name, values in self.values.items():
            print(f"{name}={','.join(str(v) for v in values)}", file=out)


def _collect_defines(runner: BenchRunner, permutation_only: bool) -> DefineValues:
    defines = DefineValues()
    registry = runner.registry
    for bench_id, suite, case in runner.matching():
        for _ in runner.permutations(suite, case, bench_id):
            for d in range(registry.count):
                if registry.is_varying(d) or (
                    not permutation_only and d < registry.implicit_count
                ):
                    defines.add(runner, d)
    return defines


def list_defines(runner: BenchRunner, out: TextIO) -> None:
    _collect_defines(runner, permutation_only=False).write(out)


def list_permutation_defines(runner: BenchRunner, out: TextIO) -> None:
    _collect_defines(runner, permutation_only=True).write(out)


def list_implicit_defines(runner: BenchRunner, out: TextIO) -> None:
    registry = runner.registry
    # installing an empty suite sizes the slots and maps any overrides
    registry.define_suite(BenchSuite(name="", cases=()))
    registry.select_permutation(0)
    defines = DefineValues()
    for d in range(registry.implicit_count):
        defines.add(runner, d)
    defines.write(out)


REPORTS = {
    "summary": summary,
    "list_suites": list_suites,
    "list_cases": list_cases,
    "list_suite_paths": list_suite_paths,
    "list_case_paths": list_case_paths,
    "list_defines": list_defines,
    "list_permutation_defines": list_permutation_defines,
    "list_implicit_defines": list_implicit_defines,
}
