"""
Visualization of dead reckoning deviations.

All functions return matplotlib Figure objects for flexible display/saving.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from drcheck.eval.types import EvaluationOutcome, PairEvaluation, ToleranceConfig

COLORS = ["blue", "red", "green", "orange", "purple"]


def _series(pairs: Sequence[PairEvaluation], attr: str, t0: datetime) -> Tuple[np.ndarray, np.ndarray]:
    """Seconds since t0 and the deviation values that exist."""
    points = [
        ((p.current_time - t0).total_seconds(), getattr(p, attr))
        for p in pairs
        if getattr(p, attr) is not None
    ]
    if not points:
        return np.array([]), np.array([])
    time, values = zip(*points)
    return np.asarray(time, dtype=np.float64), np.asarray(values, dtype=np.float64)


def plot_deviation_time(
    pairs_by_object: Mapping[str, Sequence[PairEvaluation]],
    tolerances: Optional[ToleranceConfig] = None,
    title: str = "Dead Reckoning Deviation vs Time",
) -> plt.Figure:
    """
    Plot position and orientation deviations of every compared pair.

    Args:
        pairs_by_object: PairEvaluation records per object id
        tolerances: If given, the tolerance bands are shaded
        title: Plot title

    Returns:
        fig: Matplotlib figure with a position and an orientation panel
    """
    fig, (ax_pos, ax_ori) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    for i, (object_id, pairs) in enumerate(pairs_by_object.items()):
        color = COLORS[i % len(COLORS)]

        if not pairs:
            continue
        t0 = pairs[0].previous_time

        t, dev = _series(pairs, "position_deviation", t0)
        if t.size:
            ax_pos.plot(t, dev, "o-", color=color, linewidth=1.5, markersize=4, label=object_id)

        t, dev = _series(pairs, "orientation_deviation", t0)
        if t.size:
            ax_ori.plot(t, dev, "o-", color=color, linewidth=1.5, markersize=4, label=object_id)

        failed = [p for p in pairs if not p.success and p.position_deviation is not None]
        if failed:
            t_fail, dev_fail = _series(failed, "position_deviation", t0)
            ax_pos.plot(t_fail, dev_fail, "x", color="black", markersize=8)

    if tolerances is not None:
        ax_pos.axhspan(tolerances.position_min, tolerances.position_max,
                       color="green", alpha=0.1, label="Tolerance band")
        ax_ori.axhspan(tolerances.orientation_min, tolerances.orientation_max,
                       color="green", alpha=0.1, label="Tolerance band")

    ax_pos.set_ylabel("Position Deviation (m)", fontsize=11)
    ax_pos.set_title("Position", fontsize=12, fontweight="bold")
    ax_ori.set_ylabel("Orientation Deviation (rad)", fontsize=11)
    ax_ori.set_xlabel("Time (s)", fontsize=11)
    ax_ori.set_title("Orientation", fontsize=12, fontweight="bold")
    for ax in (ax_pos, ax_ori):
        ax.grid(True, alpha=0.3)
        if ax.get_legend_handles_labels()[0]:
            ax.legend(fontsize=9)

    fig.suptitle(title, fontsize=14, fontweight="bold")
    plt.tight_layout()
    return fig


def plot_success_rates(outcome: EvaluationOutcome, title: str = "Success Rate per Object") -> plt.Figure:
    """Bar chart of successes and failures per object."""
    fig, ax = plt.subplots(figsize=(10, 6))

    names = list(outcome.per_object_counts)
    successes = [outcome.per_object_counts[n].successes for n in names]
    failures = [outcome.per_object_counts[n].failures for n in names]
    x = np.arange(len(names))

    ax.bar(x, successes, color="green", alpha=0.7, label="Successes", edgecolor="black")
    ax.bar(x, failures, bottom=successes, color="red", alpha=0.7, label="Failures", edgecolor="black")
    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=30, ha="right")
    ax.set_ylabel("Pairs", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=10)
    ax.grid(True, axis="y", alpha=0.3)

    plt.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    out_dir: Union[str, Path],
    name: str,
    formats: Sequence[str] = ("png",),
    dpi: int = 150,
    close: bool = True,
) -> List[Path]:
    """Write a report figure as <out_dir>/<name>.<format> for each format.

    The directory is created when missing. Formats may be given with or
    without a leading dot. The figure is closed after writing unless close
    is False.

    Returns:
        Written paths, in the order of formats.
    """
    target = Path(out_dir)
    target.mkdir(parents=True, exist_ok=True)

    written = [target / f"{name}.{suffix.lstrip('.')}" for suffix in formats]
    for path in written:
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
    if close:
        plt.close(fig)
    return written
