"""
Dead reckoning models.

- dead_reckoning: DR models 2-9 as a strategy table of position and
  orientation extrapolations, plus the shared DR, R1 and R2 matrices.
"""

from .dead_reckoning import (
    DR_ALGORITHMS,
    DRM_NAMES,
    MAX_MODEL,
    STATIC_MODEL,
    DeadReckoner,
    DeadReckoningResult,
    DrAlgorithm,
    angular_accel_term,
    create_dead_reckoner,
    first_integral,
    rotation_increment,
    second_integral,
)

__all__ = [
    "DR_ALGORITHMS",
    "DRM_NAMES",
    "MAX_MODEL",
    "STATIC_MODEL",
    "DeadReckoner",
    "DeadReckoningResult",
    "DrAlgorithm",
    "angular_accel_term",
    "create_dead_reckoner",
    "first_integral",
    "rotation_increment",
    "second_integral",
]
