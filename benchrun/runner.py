from __future__ import annotations

import logging
import sys
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Iterator, List, Optional, Sequence, TextIO, Tuple

from benchrun.config import RunnerOptions
from benchrun.defines import DefineRegistry
from benchrun.implicit import (
    BADBLOCK_BEHAVIOR_i,
    BLOCK_COUNT_i,
    BLOCK_CYCLES_i,
    BLOCK_SIZE_i,
    CACHE_SIZE_i,
    CRYSTAL_SIZE_i,
    ERASE_CYCLES_i,
    ERASE_VALUE_i,
    FRAGMENT_SIZE_i,
    INLINE_SIZE_i,
    LOOKAHEAD_SIZE_i,
    POWERLOSS_BEHAVIOR_i,
    PROG_SIZE_i,
    READ_SIZE_i,
    SHRUB_SIZE_i,
)
from benchrun.measure import BenchRecorder, Measurement
from benchrun.models import BenchBdConfig, BenchCase, BenchConfig, BenchId, BenchSuite
from benchrun.overrides import StepRange, parse_bench_id, parse_define, parse_step
from benchrun.permutations import Permutation, case_permutations

logger = logging.getLogger("benchrun.runner")

BdFactory = Callable[[BenchConfig, BenchBdConfig], Any]


@dataclass
class RunRecord:
    """One executed permutation and the measurements its bench printed."""

    suite: str
    case: str
    identity: str
    step: int
    measurements: List[Measurement] = field(default_factory=list)

    def to_dict(self):
        return {
            "suite": self.suite,
            "case": self.case,
            "id": self.identity,
            "step": self.step,
            "measurements": [asdict(m) for m in self.measurements],
        }


class BenchRunner:
    """Enumerates and executes bench permutations in a fixed order.

    For every bench id, suite and matching case the permutations are
    enumerated (rows outermost, flat index innermost, duplicates dropped)
    and each one advances a single global step counter. Only steps selected
    by ``step_range`` execute; the rest are counted and skipped silently.
    Bench bodies run synchronously, one at a time.
    """

    def __init__(
        self,
        suites: Sequence[BenchSuite],
        registry: Optional[DefineRegistry] = None,
        ids: Optional[Sequence[BenchId]] = None,
        step_range: Optional[StepRange] = None,
        disk_path: Optional[str] = None,
        read_sleep: float = 0.0,
        prog_sleep: float = 0.0,
        erase_sleep: float = 0.0,
        bd_factory: Optional[BdFactory] = None,
        out: Optional[TextIO] = None,
    ) -> None:
        self.suites = list(suites)
        self.registry = registry if registry is not None else DefineRegistry()
        self.ids = list(ids) if ids else [BenchId()]
        self.step_range = step_range if step_range is not None else StepRange()
        self.disk_path = disk_path
        self.sleeps = (read_sleep, prog_sleep, erase_sleep)
        self.bd_factory = bd_factory
        self.out = out if out is not None else sys.stdout
        self.recorder = BenchRecorder(self.out)
        self.step = 0

    @classmethod
    def from_options(
        cls,
        suites: Sequence[BenchSuite],
        options: RunnerOptions,
        ids: Sequence[str] = (),
        bd_factory: Optional[BdFactory] = None,
        out: Optional[TextIO] = None,
    ) -> "BenchRunner":
        """Build a runner from parsed options.

        Raises:
            MalformedOverride: On an invalid ``-D`` value.
            MalformedStep: On an invalid ``--step`` value.
        """
        registry = DefineRegistry()
        registry.set_overrides([parse_define(d) for d in options.defines])
        step_range = parse_step(options.step) if options.step else StepRange()
        return cls(
            suites,
            registry=registry,
            ids=[parse_bench_id(i) for i in ids],
            step_range=step_range,
            disk_path=options.disk,
            read_sleep=options.read_sleep,
            prog_sleep=options.prog_sleep,
            erase_sleep=options.erase_sleep,
            bd_factory=bd_factory,
            out=out,
        )

    # --- enumeration shared with the reports ---
    def matching(self) -> Iterator[Tuple[BenchId, BenchSuite, BenchCase]]:
        """Yield ``(id, suite, case)`` for every selected case, installing each suite."""
        for bench_id in self.ids:
            for suite in self.suites:
                self.registry.define_suite(suite)
                for case in suite.cases:
                    if bench_id.matches(suite, case):
                        yield bench_id, suite, case

    def permutations(
        self, suite: BenchSuite, case: BenchCase, bench_id: BenchId
    ) -> Iterator[Permutation]:
        return case_permutations(self.registry, suite, case, bench_id.defines)

    # --- execution ---
    def run(self) -> List[RunRecord]:
        records: List[RunRecord] = []
        for bench_id, suite, case in self.matching():
            for perm in self.permutations(suite, case, bench_id):
                record = self._run_permutation(suite, case, perm)
                if record is not None:
                    records.append(record)
        logger.info("Executed %d permutations over %d steps", len(records), self.step)
        return records

    def _run_permutation(
        self, suite: BenchSuite, case: BenchCase, perm: Permutation
    ) -> Optional[RunRecord]:
        step = self.step
        self.step += 1
        if not self.step_range.includes(step):
            return None

        if case.if_ is not None and not case.if_(perm.defines):
            print(f"skipped {perm.identity}", file=self.out)
            return None

        cfg = self.build_config(perm)
        if self.bd_factory is not None:
            cfg.bd = self.bd_factory(cfg, cfg.bdcfg)
        self.recorder.reset(cfg)
        cfg.recorder = self.recorder

        logger.debug(
            "Step %d: %s/%s row=%d perm=%d", step, suite.name, case.name, perm.row, perm.index
        )
        print(f"running {perm.identity}", file=self.out)
        try:
            case.run(cfg)
            print(f"finished {perm.identity}", file=self.out)
        finally:
            close = getattr(cfg.bd, "close", None)
            if close is not None:
                close()

        return RunRecord(
            suite=suite.name,
            case=case.name,
            identity=perm.identity,
            step=step,
            measurements=list(self.recorder.measurements),
        )

    def build_config(self, perm: Permutation) -> BenchConfig:
        """Resolve the storage and block device configuration of ``perm``."""
        d = perm.defines
        read_sleep, prog_sleep, erase_sleep = self.sleeps
        bdcfg = BenchBdConfig(
            disk_path=self.disk_path,
            read_sleep=read_sleep,
            prog_sleep=prog_sleep,
            erase_sleep=erase_sleep,
            erase_value=d[ERASE_VALUE_i],
            erase_cycles=d[ERASE_CYCLES_i],
            badblock_behavior=d[BADBLOCK_BEHAVIOR_i],
            powerloss_behavior=d[POWERLOSS_BEHAVIOR_i],
        )
        return BenchConfig(
            read_size=d[READ_SIZE_i],
            prog_size=d[PROG_SIZE_i],
            block_size=d[BLOCK_SIZE_i],
            block_count=d[BLOCK_COUNT_i],
            block_cycles=d[BLOCK_CYCLES_i],
            cache_size=d[CACHE_SIZE_i],
            inline_size=d[INLINE_SIZE_i],
            shrub_size=d[SHRUB_SIZE_i],
            fragment_size=d[FRAGMENT_SIZE_i],
            crystal_size=d[CRYSTAL_SIZE_i],
            lookahead_size=d[LOOKAHEAD_SIZE_i],
            defines=d,
            bdcfg=bdcfg,
        )
