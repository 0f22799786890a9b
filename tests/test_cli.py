"""End-to-end tests of the command line front end over the example suites."""

from __future__ import annotations

import io
import logging

import pytest

from benchrun.cli import EXIT_ERROR, main
from benchrun.trace import TRACE_LOGGER


def _main(args):
    out = io.StringIO()
    status = main(["--suites", "benches", *args], out=out)
    return status, out.getvalue().splitlines()


def test_list_cases_counts_deduplicated_permutations():
    status, lines = _main(["-L"])
    assert status == 0
    rows = {line.split()[0]: line.split()[-1] for line in lines[1:]}
    assert rows == {
        "bench_sort_shuffle": "8/8",
        "bench_sort_prng": "3/3",
        "bench_layout_chunks": "5/6",
    }


def test_run_one_case_and_write_results(tmp_path):
    status, lines = _main(["--results-dir", str(tmp_path), "bench_sort_prng"])
    assert status == 0
    assert sum(line.startswith("running bench_sort_prng:") for line in lines) == 3
    assert sum(line.startswith("benched mean_byte 0 1024 ") for line in lines) == 3
    (batch,) = tmp_path.iterdir()
    assert (batch / "results.csv").is_file()


def test_define_override_and_step(tmp_path):
    status, lines = _main(["-D", "N=4", "--step", "0,2", "bench_sort_shuffle"])
    assert status == 0
    running = [line for line in lines if line.startswith("running")]
    assert len(running) == 2


def test_replay_identity_from_a_previous_run():
    _, lines = _main(["bench_sort_shuffle"])
    identity = next(line for line in lines if line.startswith("running")).split()[1]
    status, replay = _main([identity])
    assert status == 0
    assert [line for line in replay if line.startswith("running")] == [f"running {identity}"]


@pytest.mark.parametrize(
    "args, message",
    [(["-D", "N=range(0)"], "invalid define"), (["--step", "x"], "invalid step")],
)
def test_malformed_input_exits_with_error(args, message, capsys):
    status, _ = _main(args)
    assert status == EXIT_ERROR
    assert message in capsys.readouterr().err


def test_config_file_and_trace(tmp_path):
    trace_logger = logging.getLogger(TRACE_LOGGER)
    before = (trace_logger.level, trace_logger.propagate, list(trace_logger.handlers))
    trace_path = tmp_path / "trace.txt"
    config = tmp_path / "config.yaml"
    config.write_text(
        f"suites: benches\ndefines: [N=2]\ntrace: {{path: {trace_path}}}\n",
        encoding="utf-8",
    )
    out = io.StringIO()
    status = main(["--config", str(config), "bench_sort_prng"], out=out)
    assert status == 0
    assert "benched mean_byte 0 2 " in out.getvalue()
    traced = trace_path.read_text(encoding="utf-8").splitlines()
    assert len(traced) == 3
    assert traced[0].endswith(":trace: prng fill n=2 seed=0")
    assert (trace_logger.level, trace_logger.propagate, list(trace_logger.handlers)) == before
