"""
Deviation metrics between a dead reckoned state and a received one.
"""

from typing import Sequence

import numpy as np

from drcheck.utils.angles import abs_angle_diff


def position_deviation(predicted: Sequence[float], actual: Sequence[float]) -> float:
    """
    Euclidean distance between predicted and actual positions.

    Args:
        predicted: Dead reckoned position [x, y, z]
        actual: Received position [x, y, z]

    Returns:
        Distance in the units of the positions (metres)

    Raises:
        ValueError: If inputs have incompatible shapes
    """
    predicted = np.asarray(predicted, dtype=np.float64)
    actual = np.asarray(actual, dtype=np.float64)
    if predicted.shape != actual.shape:
        raise ValueError(f"Shape mismatch: predicted {predicted.shape} vs actual {actual.shape}")
    return float(np.linalg.norm(actual - predicted))


def orientation_axis_deviation(predicted: Sequence[float], actual: Sequence[float]) -> np.ndarray:
    """Per-axis |atan2(sin Δ, cos Δ)| for Euler angles [phi, theta, psi]."""
    predicted = np.asarray(predicted, dtype=np.float64)
    actual = np.asarray(actual, dtype=np.float64)
    if predicted.shape != actual.shape:
        raise ValueError(f"Shape mismatch: predicted {predicted.shape} vs actual {actual.shape}")
    return abs_angle_diff(predicted, actual)


def orientation_deviation(predicted: Sequence[float], actual: Sequence[float]) -> float:
    """
    Combined orientation deviation.

    Each axis difference is wrapped to [-π, π] before the Euclidean norm is
    taken, so the result does not change when any input angle is shifted
    by a multiple of 2π.

    Example:
        >>> a = orientation_deviation([0, 0, 0], [0, 0, 2 * np.pi - 0.01])
        >>> b = orientation_deviation([0, 0, 0], [0, 0, -0.01])
        >>> bool(np.isclose(a, b))
        True
    """
    return float(np.linalg.norm(orientation_axis_deviation(predicted, actual)))
