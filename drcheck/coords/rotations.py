"""Euler angle / rotation matrix conversions for dead reckoning.

Conventions:
- Euler angles: [phi, theta, psi] = [roll, pitch, yaw] in radians,
  3-2-1 sequence (psi about z, then theta about y, then phi about x)
- The orientation matrix R built here maps world-frame vectors into the
  body frame (its first row is the body x-axis expressed in world axes);
  R.T maps body-frame vectors back to the world frame.

Reference: IEEE 1278.1 (DIS) Annex E, dead reckoning orientation matrices
"""

import numpy as np
from numpy.typing import NDArray


def initial_orientation(phi: float, theta: float, psi: float) -> NDArray[np.float64]:
    """Build the orientation matrix R0 from Euler angles.

    Args:
        phi: Roll angle φ in radians.
        theta: Pitch angle θ in radians.
        psi: Yaw angle ψ in radians.

    Returns:
        3x3 orientation matrix R0.

    Example:
        >>> R = initial_orientation(0.0, 0.0, np.pi / 2)
        >>> np.round(R @ np.array([0.0, 1.0, 0.0]), 6)  # world y is body x
        array([ 1.,  0.,  0.])
    """
    cphi, sphi = np.cos(phi), np.sin(phi)
    cth, sth = np.cos(theta), np.sin(theta)
    cpsi, spsi = np.cos(psi), np.sin(psi)

    return np.array(
        [
            [cth * cpsi, cth * spsi, -sth],
            [
                sphi * sth * cpsi - cphi * spsi,
                sphi * sth * spsi + cphi * cpsi,
                sphi * cth,
            ],
            [
                cphi * sth * cpsi + sphi * spsi,
                cphi * sth * spsi - sphi * cpsi,
                cphi * cth,
            ],
        ],
        dtype=np.float64,
    )


def recover_euler_angles(R: NDArray[np.float64]) -> NDArray[np.float64]:
    """Recover [phi, theta, psi] from an orientation matrix.

    Inverse of initial_orientation() away from the pitch singularity:

        theta = asin(-R[0,2])
        psi   = acos(R[0,0] / cos(theta)) * sign(R[0,1])
        phi   = acos(R[2,2] / cos(theta)) * sign(R[1,2])

    At theta = ±90° (or whenever the acos argument leaves [-1, 1]) phi or
    psi comes out as NaN; both are then set to zero and theta is kept as
    computed.

    Args:
        R: 3x3 orientation matrix (not required to be orthonormal).

    Returns:
        Euler angles [phi, theta, psi] in radians.

    Raises:
        ValueError: If R is not a 3x3 matrix.
    """
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        raise ValueError(f"Expected 3x3 matrix, got shape {R.shape}")

    with np.errstate(divide="ignore", invalid="ignore"):
        theta = np.arcsin(-R[0, 2])
        cth = np.cos(theta)
        psi = np.arccos(R[0, 0] / cth) * np.sign(R[0, 1])
        phi = np.arccos(R[2, 2] / cth) * np.sign(R[1, 2])

    if np.isnan(phi) or np.isnan(psi):
        phi = 0.0
        psi = 0.0

    return np.array([phi, theta, psi], dtype=np.float64)
