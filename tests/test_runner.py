"""Tests for the run loop: step filtering, predicates, configs and devices."""

from __future__ import annotations

import io

import pytest

from benchrun.config import RunnerOptions
from benchrun.errors import MalformedOverride
from benchrun.models import define_row
from benchrun.overrides import StepRange
from benchrun.runner import BenchRunner
from conftest import SUITE_NAMES


class FakeBd:
    def __init__(self, cfg, bdcfg):
        self.cfg = cfg
        self.bdcfg = bdcfg
        self.readed = 0
        self.proged = 0
        self.erased = 0
        self.closed = False

    def close(self):
        self.closed = True


def _collecting_suite(make_suite, seen, **kwargs):
    def run(cfg):
        seen.append(cfg)
        cfg.recorder.result("x", 0, cfg.defines.X, cfg.defines.X * 10)

    rows = [define_row(SUITE_NAMES, {"X": [1, 2, 3]})]
    return make_suite(rows=rows, run=run, **kwargs)


def test_runs_every_permutation_in_order(make_suite):
    seen = []
    out = io.StringIO()
    records = BenchRunner([_collecting_suite(make_suite, seen)], out=out).run()

    assert len(seen) == 3
    assert [r.step for r in records] == [0, 1, 2]
    assert [r.identity for r in records] == ["case:g11", "case:g12", "case:g13"]
    assert [r.measurements[0].result for r in records] == [10, 20, 30]
    assert out.getvalue().splitlines() == [
        "running case:g11",
        "benched x 0 1 10",
        "finished case:g11",
        "running case:g12",
        "benched x 0 2 20",
        "finished case:g12",
        "running case:g13",
        "benched x 0 3 30",
        "finished case:g13",
    ]


def test_step_filter_counts_every_permutation(make_suite):
    seen = []
    out = io.StringIO()
    suite = _collecting_suite(make_suite, seen)
    runner = BenchRunner([suite, suite], step_range=StepRange(1, 5, 2), out=out)
    records = runner.run()
    assert [r.step for r in records] == [1, 3]
    assert [r.identity for r in records] == ["case:g12", "case:g11"]
    assert runner.step == 6


def test_predicate_skips(make_suite):
    seen = []
    out = io.StringIO()
    suite = _collecting_suite(make_suite, seen, if_=lambda d: d.X != 2)
    records = BenchRunner([suite], out=out).run()
    assert [r.identity for r in records] == ["case:g11", "case:g13"]
    assert "skipped case:g12" in out.getvalue().splitlines()


def test_config_and_device(make_suite):
    seen = []
    devices = []

    def factory(cfg, bdcfg):
        devices.append(FakeBd(cfg, bdcfg))
        return devices[-1]

    runner = BenchRunner(
        [_collecting_suite(make_suite, seen)],
        disk_path="disk.img",
        read_sleep=0.25,
        bd_factory=factory,
        out=io.StringIO(),
    )
    runner.run()
    cfg = seen[0]
    assert cfg.block_size == 4096
    assert cfg.block_count == 256
    assert cfg.cache_size == 16
    assert cfg.lookahead_size == 16
    assert cfg.block_cycles == -1
    assert cfg.bd is devices[0]
    assert cfg.bdcfg.disk_path == "disk.img"
    assert cfg.bdcfg.read_sleep == 0.25
    assert cfg.bdcfg.erase_value == 0xFF
    assert all(bd.closed for bd in devices)
    assert len(devices) == 3


def test_bench_faults_propagate_and_device_is_closed(make_suite):
    devices = []

    def factory(cfg, bdcfg):
        devices.append(FakeBd(cfg, bdcfg))
        return devices[-1]

    def run(cfg):
        raise RuntimeError("boom")

    runner = BenchRunner([make_suite(run=run)], bd_factory=factory, out=io.StringIO())
    with pytest.raises(RuntimeError, match="boom"):
        runner.run()
    assert devices[0].closed


def test_ids_select_cases(make_suite):
    seen = []
    suites = [
        _collecting_suite(make_suite, seen, case_name="a", suite_name="s1"),
        _collecting_suite(make_suite, seen, case_name="b", suite_name="s2"),
    ]
    runner = BenchRunner.from_options(suites, RunnerOptions(), ids=["b", "s1"], out=io.StringIO())
    records = runner.run()
    assert [r.case for r in records] == ["b", "b", "b", "a", "a", "a"]


def test_from_options_overrides_and_replay(make_suite):
    seen = []
    out = io.StringIO()
    options = RunnerOptions(defines=["Y=7"], step="0,10")
    suite = _collecting_suite(make_suite, seen)
    records = BenchRunner.from_options([suite], options, ids=["case:g12"], out=out).run()
    assert [r.identity for r in records] == ["case:g12h17"]
    assert seen[0].defines.Y == 7


def test_from_options_rejects_malformed_define(make_suite):
    with pytest.raises(MalformedOverride):
        BenchRunner.from_options([make_suite()], RunnerOptions(defines=["Y"]))
