from __future__ import annotations

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

from benchrun.runner import RunRecord

logger = logging.getLogger("benchrun.results")

CSV_COLUMNS = [
    "suite",
    "case",
    "id",
    "meas",
    "iter",
    "size",
    "readed",
    "proged",
    "erased",
    "result",
]


def measurement_rows(records: Sequence[RunRecord]) -> List[Dict[str, Any]]:
    """Flatten run records into one row per measurement."""
    rows: List[Dict[str, Any]] = []
    for record in records:
        for m in record.measurements:
            rows.append(
                {
                    "suite": record.suite,
                    "case": record.case,
                    "id": record.identity,
                    "meas": m.meas,
                    "iter": m.iter,
                    "size": m.size,
                    "readed": m.readed,
                    "proged": m.proged,
                    "erased": m.erased,
                    "result": m.result,
                }
            )
    return rows


def write_results(records: Sequence[RunRecord], base_results_dir: str) -> Path:
    """Persist a batch of run records under a fresh timestamped directory.

    Earlier batches are kept; each call writes ``results.json`` (one entry per
    executed permutation) and ``results.csv`` (one row per measurement).

    Returns:
        The timestamp directory.
    """
    base_dir = Path(base_results_dir)
    base_dir.mkdir(parents=True, exist_ok=True)
    timestamp_dir = base_dir / datetime.now().strftime("%Y%m%d_%H%M%S")
    suffix = 1
    while timestamp_dir.exists():
        timestamp_dir = base_dir / f"{datetime.now().strftime('%Y%m%d_%H%M%S')}_{suffix}"
        suffix += 1
    timestamp_dir.mkdir(parents=True)

    json_path = timestamp_dir / "results.json"
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in records], f, indent=2)

    csv_path = timestamp_dir / "results.csv"
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for row in measurement_rows(records):
            writer.writerow(row)
    logger.info("Results written: %s", timestamp_dir)
    return timestamp_dir


def load_results_csv(path: Path) -> List[Dict[str, Any]]:
    """Read a results CSV back, converting numeric columns (blank -> None)."""
    rows: List[Dict[str, Any]] = []
    with open(path, "r", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            parsed: Dict[str, Any] = dict(row)
            for key in ("iter", "size", "readed", "proged", "erased"):
                parsed[key] = int(row[key]) if row.get(key) else None
            parsed["result"] = float(row["result"]) if row.get("result") else None
            rows.append(parsed)
    return rows
