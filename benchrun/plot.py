from collections import defaultdict
from pathlib import Path
from typing import Optional

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402

from benchrun.results import load_results_csv  # noqa: E402

METRICS = ("readed", "proged", "erased", "result")


def plot_results_csv(csv_path, out_path: Optional[str] = None, metric: str = "readed") -> Path:
    """Draw one line per (case, measurement) with ``size`` on the x axis.

    Rows missing the requested metric are ignored, so ``result`` plots only
    pick up explicit results and the io metrics only start/stop ranges.
    """
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric}")
    rows = load_results_csv(Path(csv_path))
    series = defaultdict(list)
    for row in rows:
        if row[metric] is None:
            continue
        series[f"{row['case']}/{row['meas']}"].append((row["size"], row[metric]))

    fig, ax = plt.subplots(figsize=(10, 6), constrained_layout=True)
    for label, points in sorted(series.items()):
        points.sort()
        ax.plot(
            [p[0] for p in points],
            [p[1] for p in points],
            marker="o",
            markersize=3,
            linewidth=1.2,
            label=label,
        )
    ax.set_xlabel("size", fontsize=12)
    ax.set_ylabel(metric, fontsize=12)
    ax.set_title(f"{Path(csv_path).parent.name}: {metric}", fontsize=14, fontweight="bold")
    ax.grid(True, alpha=0.25, linestyle="--", linewidth=0.7)
    if series:
        ax.legend(loc="upper left", fontsize=8, frameon=False)

    if out_path is None:
        out = Path(csv_path).with_name(f"plot_{metric}.png")
    else:
        out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, dpi=180)
    plt.close(fig)
    return out
