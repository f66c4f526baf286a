"""Vector and orientation primitives for dead reckoning.

- vectors: 3-vector helpers (magnitude, skew, outer product, size check)
- rotations: Euler angles (phi, theta, psi) <-> orientation matrix
"""

from drcheck.coords.rotations import initial_orientation, recover_euler_angles
from drcheck.coords.vectors import (
    VECTOR_LENGTH,
    as_vector,
    check_size,
    magnitude,
    outer_self,
    skew,
    zero_vector,
)

__all__ = [
    "VECTOR_LENGTH",
    "as_vector",
    "check_size",
    "magnitude",
    "outer_self",
    "skew",
    "zero_vector",
    "initial_orientation",
    "recover_euler_angles",
]
