"""Plot a results.csv written by the bench runner.

Usage:
    python scripts/plot_results.py results/benches/20260101_120000/results.csv --metric result
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from benchrun.plot import METRICS, plot_results_csv  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("csv_path")
    parser.add_argument("--metric", choices=METRICS, default="readed")
    parser.add_argument("--out", default=None)
    args = parser.parse_args()

    if not os.path.isfile(args.csv_path):
        print(f"No such file: {args.csv_path}", file=sys.stderr)
        return 1
    out = plot_results_csv(args.csv_path, args.out, metric=args.metric)
    print(f"[OK] {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
