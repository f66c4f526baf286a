"""
Angle wrapping utilities.

Orientation deviations are measured on Euler angles, which are cyclic: a
predicted yaw of +179° and a reported yaw of -179° differ by 2°, not 358°.
All differences here are taken through atan2(sin, cos) so they land in
[-π, π] regardless of how many turns either input carries.
"""

from typing import Union

import numpy as np


def wrap_angle(angle: float) -> float:
    """
    Wrap angle to [-π, π] range.

    Args:
        angle: Angle in radians (any value)

    Returns:
        Wrapped angle in range [-π, π]

    Example:
        >>> round(wrap_angle(3.5 * np.pi), 6)
        -1.570796
    """
    return float(np.arctan2(np.sin(angle), np.cos(angle)))


def wrap_angle_array(angles: np.ndarray) -> np.ndarray:
    """Vectorized wrap_angle()."""
    angles = np.asarray(angles, dtype=np.float64)
    return np.arctan2(np.sin(angles), np.cos(angles))


def angle_diff(angle1: Union[float, np.ndarray],
               angle2: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Shortest signed angular difference angle1 - angle2 in [-π, π].

    Args:
        angle1: First angle(s) in radians (e.g. dead reckoned)
        angle2: Second angle(s) in radians (e.g. received)

    Returns:
        Wrapped difference, scalar or array matching the inputs

    Example:
        >>> round(angle_diff(0.0, 2 * np.pi - 0.01), 6)
        0.01
    """
    if isinstance(angle1, np.ndarray) or isinstance(angle2, np.ndarray):
        return wrap_angle_array(np.asarray(angle1) - np.asarray(angle2))
    return wrap_angle(angle1 - angle2)


def abs_angle_diff(angles1: np.ndarray, angles2: np.ndarray) -> np.ndarray:
    """Per-axis magnitude of the wrapped difference between two angle sets."""
    return np.abs(angle_diff(np.asarray(angles1, dtype=np.float64),
                             np.asarray(angles2, dtype=np.float64)))
