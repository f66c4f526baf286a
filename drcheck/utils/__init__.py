"""
Utility functions shared by the dead reckoning checker.

This module provides angle wrapping, the 0/0 limit substitution used by the
closed-form dead reckoning matrices, and the logging helpers.
"""

from .angles import wrap_angle, wrap_angle_array, angle_diff, abs_angle_diff
from .numerics import limit_ratio
from .diagnostics import default_logger, resolve_logger, fmt, fmt_xyz, fmt_euler

__all__ = [
    'wrap_angle',
    'wrap_angle_array',
    'angle_diff',
    'abs_angle_diff',
    'limit_ratio',
    'default_logger',
    'resolve_logger',
    'fmt',
    'fmt_xyz',
    'fmt_euler',
]
