"""Data types for dead reckoning conformance evaluation.

This module defines the tolerance configuration, the record kept for every
compared pair of samples, and the aggregated outcome of a run.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set

import numpy as np


@dataclass(frozen=True)
class ToleranceConfig:
    """Inclusive tolerance bands applied to each compared pair.

    Attributes:
        position_min: Lower bound of the position deviation band [m].
        position_max: Upper bound of the position deviation band [m].
        orientation_min: Lower bound of the orientation deviation band [rad].
        orientation_max: Upper bound of the orientation deviation band [rad].
        require_both: If True, a pair passes only when position and (where
                      computed) orientation are both inside their bands.
                      Otherwise either one is enough.
        timestamp_required: If True, any object that sent an update without
                            a usable time tag fails the run.

    Example:
        >>> tol = ToleranceConfig(position_min=0.0, position_max=1.0,
        ...                       orientation_min=0.0, orientation_max=0.5)
        >>> tol.position_in_band(1.0)
        True
    """

    position_min: float = 0.1
    position_max: float = 1.0
    orientation_min: float = 0.1
    orientation_max: float = 1.0
    require_both: bool = False
    timestamp_required: bool = False

    def __post_init__(self) -> None:
        """Validate the bands."""
        for kind in ("position", "orientation"):
            lower = getattr(self, f"{kind}_min")
            upper = getattr(self, f"{kind}_max")
            if not (np.isfinite(lower) and np.isfinite(upper)):
                raise ValueError(f"{kind} thresholds must be finite, got [{lower}, {upper}]")
            if lower < 0:
                raise ValueError(f"{kind}_min must be non-negative, got {lower}")
            if lower > upper:
                raise ValueError(f"{kind}_min ({lower}) exceeds {kind}_max ({upper})")

    def position_in_band(self, deviation: float) -> bool:
        return self.position_min <= deviation <= self.position_max

    def orientation_in_band(self, deviation: float) -> bool:
        return self.orientation_min <= deviation <= self.orientation_max


class PairStatus(Enum):
    """How a consecutive pair of samples was judged."""

    PASSED = "passed"
    SKIPPED_STATIC = "skipped_static"
    SKIPPED_FROZEN = "skipped_frozen"
    INVALID_MODEL = "invalid_model"
    COMPUTATION_FAILED = "computation_failed"
    FAILED = "failed"

    @property
    def is_success(self) -> bool:
        return self in (PairStatus.PASSED, PairStatus.SKIPPED_STATIC, PairStatus.SKIPPED_FROZEN)


@dataclass(frozen=True, eq=False)
class PairEvaluation:
    """Result of comparing one sample against the extrapolation of its predecessor.

    Deviation and prediction fields are None when no extrapolation was run
    (static, frozen or invalid model), and orientation fields are None when
    the model does not compute orientation.
    """

    object_id: str
    previous_time: datetime
    current_time: datetime
    model: int
    status: PairStatus
    elapsed: float = 0.0
    predicted_position: Optional[np.ndarray] = None
    actual_position: Optional[np.ndarray] = None
    predicted_orientation: Optional[np.ndarray] = None
    actual_orientation: Optional[np.ndarray] = None
    position_deviation: Optional[float] = None
    orientation_deviation: Optional[float] = None
    reason: str = ""

    @property
    def success(self) -> bool:
        return self.status.is_success


@dataclass
class ObjectCounts:
    """Running success and failure counts of one object (or of the whole run)."""

    successes: int = 0
    failures: int = 0

    def record(self, success: bool) -> None:
        if success:
            self.successes += 1
        else:
            self.failures += 1

    @property
    def total(self) -> int:
        return self.successes + self.failures

    @property
    def success_rate(self) -> float:
        """successes / (successes + failures); NaN when nothing was compared."""
        return self.successes / self.total if self.total else math.nan


@dataclass
class EvaluationOutcome:
    """Aggregate result of an evaluation run.

    Attributes:
        success: False if any pair failed, or timestamps are required and
                 some object sent non-timestamped updates.
        per_object_counts: ObjectCounts for every object with at least two samples.
        totals: ObjectCounts over all objects.
        non_timestamped_objects: Ids of objects that sent updates without a
                                 usable time tag.
        pairs: PairEvaluation records per object, in timestamp order.
    """

    success: bool
    per_object_counts: Dict[str, ObjectCounts] = field(default_factory=dict)
    totals: ObjectCounts = field(default_factory=ObjectCounts)
    non_timestamped_objects: Set[str] = field(default_factory=set)
    pairs: Dict[str, List[PairEvaluation]] = field(default_factory=dict)

    @property
    def total_successes(self) -> int:
        return self.totals.successes

    @property
    def total_failures(self) -> int:
        return self.totals.failures

    @property
    def success_rate(self) -> float:
        return self.totals.success_rate

    def failed_pairs(self) -> List[PairEvaluation]:
        return [p for records in self.pairs.values() for p in records if not p.success]
