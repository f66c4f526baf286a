"""
Evaluation and Visualization Module.

Modules:
    history: Per-object time-ordered sample store
    metrics: Position and orientation deviation
    evaluator: Pair scoring and aggregation
    types: Tolerances, pair records, counts and outcome
    plots: Deviation and success-rate figures
"""

from .evaluator import Evaluator, elapsed_seconds
from .history import SampleHistory
from .metrics import orientation_axis_deviation, orientation_deviation, position_deviation
from .plots import plot_deviation_time, plot_success_rates, save_figure
from .types import (
    EvaluationOutcome,
    ObjectCounts,
    PairEvaluation,
    PairStatus,
    ToleranceConfig,
)

__all__ = [
    # Evaluation
    "Evaluator",
    "elapsed_seconds",
    "SampleHistory",
    # Metrics
    "position_deviation",
    "orientation_deviation",
    "orientation_axis_deviation",
    # Types
    "EvaluationOutcome",
    "ObjectCounts",
    "PairEvaluation",
    "PairStatus",
    "ToleranceConfig",
    # Plots
    "plot_deviation_time",
    "plot_success_rates",
    "save_figure",
]
