"""Command line front end of the bench runner.

    python -m benchrun [options] [bench_id ...]

A bench id is a suite or case name, optionally with a path and ``.toml``
suffix, optionally followed by ``:`` and a permutation identity printed by an
earlier run to replay exactly that permutation.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from typing import Any, Dict, Optional, Sequence

from benchrun.config import RunnerOptions, load_config, merge_options, options_from_config
from benchrun.errors import MalformedOverride, MalformedStep
from benchrun.reports import REPORTS
from benchrun.results import write_results
from benchrun.runner import BenchRunner
from benchrun.trace import TRACE_LOGGER, TraceWriter, install_trace

logger = logging.getLogger("benchrun")

EXIT_ERROR = 255


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="benchrun",
        description="Run parameterized benchmark suites over every define permutation.",
    )
    parser.add_argument("bench_ids", nargs="*", metavar="bench_id")

    ops = parser.add_argument_group("reports")
    report = dict(dest="op", action="store_const", default="run")
    ops.add_argument("-Y", "--summary", const="summary", help="Show quick summary.", **report)
    ops.add_argument("-l", "--list-suites", const="list_suites", help="List bench suites.", **report)
    ops.add_argument("-L", "--list-cases", const="list_cases", help="List bench cases.", **report)
    ops.add_argument(
        "--list-suite-paths",
        const="list_suite_paths",
        help="List the path for each bench suite.",
        **report,
    )
    ops.add_argument(
        "--list-case-paths",
        const="list_case_paths",
        help="List the path and line number for each bench case.",
        **report,
    )
    ops.add_argument(
        "--list-defines",
        const="list_defines",
        help="List all defines in this bench-runner.",
        **report,
    )
    ops.add_argument(
        "--list-permutation-defines",
        const="list_permutation_defines",
        help="List explicit defines in this bench-runner.",
        **report,
    )
    ops.add_argument(
        "--list-implicit-defines",
        const="list_implicit_defines",
        help="List implicit defines in this bench-runner.",
        **report,
    )

    cfg = parser.add_argument_group("configuration")
    cfg.add_argument("--config", help="YAML configuration file.")
    cfg.add_argument("--suites", help="Module exposing a SUITES list (default: benches).")
    cfg.add_argument(
        "-D", "--define", dest="defines", action="append", metavar="NAME=VALUES",
        help="Override a bench define.",
    )
    cfg.add_argument(
        "-s", "--step",
        help="Comma-separated range of bench permutations to run (start,stop,step).",
    )
    cfg.add_argument("-d", "--disk", help="Direct block device operations to this file.")
    cfg.add_argument("-t", "--trace", help="Direct trace output to this file.")
    cfg.add_argument(
        "--trace-backtrace", action="store_const", const=True, default=None,
        help="Include a backtrace with every trace statement.",
    )
    cfg.add_argument("--trace-period", type=int, help="Sample trace output at this period in cycles.")
    cfg.add_argument("--trace-freq", type=int, help="Sample trace output at this frequency in hz.")
    cfg.add_argument("--read-sleep", type=float, help="Artificial read delay in seconds.")
    cfg.add_argument("--prog-sleep", type=float, help="Artificial prog delay in seconds.")
    cfg.add_argument("--erase-sleep", type=float, help="Artificial erase delay in seconds.")
    cfg.add_argument("--results-dir", help="Write results.json/results.csv under this directory.")
    cfg.add_argument("--log-level", help="Logging level (default: WARNING).")
    return parser


def load_suites(module_name: str):
    """Import ``module_name`` and return ``(SUITES, make_bd or None)``."""
    module = importlib.import_module(module_name)
    suites = getattr(module, "SUITES", None)
    if suites is None:
        raise ValueError(f"Module {module_name} does not define SUITES")
    return list(suites), getattr(module, "make_bd", None)


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "suites": args.suites,
        "defines": args.defines,
        "step": args.step,
        "disk": args.disk,
        "trace": args.trace,
        "trace_period": args.trace_period,
        "trace_freq": args.trace_freq,
        "trace_backtrace": args.trace_backtrace,
        "read_sleep": args.read_sleep,
        "prog_sleep": args.prog_sleep,
        "erase_sleep": args.erase_sleep,
        "results_dir": args.results_dir,
        "log_level": args.log_level,
    }


def main(argv: Optional[Sequence[str]] = None, out=None) -> int:
    args = build_parser().parse_args(argv)
    out = out if out is not None else sys.stdout

    base = options_from_config(load_config(args.config)) if args.config else RunnerOptions()
    options = merge_options(base, _cli_overrides(args))

    logging.basicConfig(
        level=getattr(logging, str(options.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    suites, make_bd = load_suites(options.suites)
    logger.info("Loaded %d suites from %s", len(suites), options.suites)
    try:
        runner = BenchRunner.from_options(
            suites, options, ids=args.bench_ids, bd_factory=make_bd, out=out
        )
    except MalformedOverride as e:
        print(f"error: invalid define: {e}", file=sys.stderr)
        return EXIT_ERROR
    except MalformedStep as e:
        print(f"error: invalid step: {e}", file=sys.stderr)
        return EXIT_ERROR

    handler = None
    trace_logger = logging.getLogger(TRACE_LOGGER)
    trace_state = (trace_logger.level, trace_logger.propagate)
    if options.trace:
        handler = install_trace(
            TraceWriter(
                options.trace,
                period=options.trace_period,
                freq=options.trace_freq,
                backtrace=options.trace_backtrace,
            )
        )
    try:
        if args.op != "run":
            REPORTS[args.op](runner, out)
            return 0
        records = runner.run()
        if options.results_dir:
            write_results(records, options.results_dir)
        return 0
    finally:
        if handler is not None:
            trace_logger.removeHandler(handler)
            handler.close()
            trace_logger.setLevel(trace_state[0])
            trace_logger.propagate = trace_state[1]


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
