"""
Dead reckoning algorithms (DR models 2-9).

Each DR model number selects a closed-form extrapolation of an entity's
state at time 0 to time Δt:

    Model  Name      Position                                Orientation
    -----  --------  --------------------------------------  -----------
    2      DRM_FPW   p0 + v0 Δt                              not computed
    3      DRM_RPW   p0 + v0 Δt + ½ a0 Δt²                   DR(ω,Δt) R0
    4      DRM_RVW   p0 + v0 Δt + ½ a0 Δt²                   DR(ω,Δt) R0
    5      DRM_FVW   as model 4                              as model 4
    6      DRM_FPB   as model 4                              as model 4
    7      DRM_RPB   R0ᵗ R1(ω,Δt) v0 + p0                    DR(ω,Δt) R0
    8      DRM_RVB   as model 7                              as model 7
    9      DRM_FVB   R0ᵗ (R1 v0 + R2 (a0 - [ω]x v0)) + p0    not computed

Model 1 (Static) is recognised but never extrapolated. Models 5 and 6 share
the closed form of model 4, and model 8 shares that of model 7.

Algorithms are entries of the DR_ALGORITHMS strategy table; running one
returns a DeadReckoningResult value and never stores state.

Frame conventions:
    - p, v, a: world frame (models 2-6) or body frame (v, a for 7-9)
    - ω: body-axis angular velocity [rad/s]
    - Euler angles: [phi, theta, psi] in radians, see coords.rotations

References:
    IEEE 1278.1 (DIS) Annex E - Dead reckoning
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from drcheck.coords.rotations import initial_orientation, recover_euler_angles
from drcheck.coords.vectors import (
    as_vector,
    check_size,
    magnitude,
    outer_self,
    skew,
    zero_vector,
)
from drcheck.utils.diagnostics import resolve_logger
from drcheck.utils.numerics import limit_ratio

STATIC_MODEL = 1
MAX_MODEL = 9

DRM_NAMES: Dict[int, str] = {
    0: "Other",
    1: "Static",
    2: "DRM_FPW",
    3: "DRM_RPW",
    4: "DRM_RVW",
    5: "DRM_FVW",
    6: "DRM_FPB",
    7: "DRM_RPB",
    8: "DRM_RVB",
    9: "DRM_FVB",
}


# ============================================================================
# Shared matrices
# ============================================================================

def rotation_increment(omega: NDArray[np.float64], dt: float) -> NDArray[np.float64]:
    """
    Orientation increment matrix DR(ω, Δt).

        DR = ωωᵗ (1 - cos(|ω|Δt)) / |ω|²  +  I cos(|ω|Δt)  -  [ω]x sin(|ω|) Δt / |ω|

    The skew term uses sin(|ω|)·Δt rather than sin(|ω|Δt); the two agree
    for Δt = 1 s.

    Args:
        omega: Body-axis angular velocity, shape (3,). Units: rad/s.
        dt: Elapsed time in seconds.

    Returns:
        3x3 matrix such that R1 = DR @ R0.
    """
    w = magnitude(omega)
    wdt = w * dt

    scale_outer = limit_ratio(1.0 - np.cos(wdt), w * w)
    scale_identity = limit_ratio(np.cos(wdt), 1.0)
    scale_skew = limit_ratio(np.sin(w) * dt, w)

    return (
        outer_self(omega) * scale_outer
        + np.eye(3) * scale_identity
        - skew(omega) * scale_skew
    )


def first_integral(omega: NDArray[np.float64], dt: float) -> NDArray[np.float64]:
    """
    First integral R1(ω, Δt) of the body rotation, used for body-axis velocity.

        R1 = ωωᵗ (|ω|Δt - sin(|ω|Δt)) / |ω|³  +  I sin(|ω|Δt) / |ω|
             +  [ω]x (1 - cos(|ω|Δt)) / |ω|²

    With ω = 0 every quotient is 0/0 and is replaced by 0.
    """
    w = magnitude(omega)
    wdt = w * dt

    scale_outer = limit_ratio(wdt - np.sin(wdt), w ** 3)
    scale_identity = limit_ratio(np.sin(wdt), w)
    scale_skew = limit_ratio(1.0 - np.cos(wdt), w ** 2)

    return (
        outer_self(omega) * scale_outer
        + np.eye(3) * scale_identity
        + skew(omega) * scale_skew
    )


def second_integral(omega: NDArray[np.float64], dt: float) -> NDArray[np.float64]:
    """
    Second integral R2(ω, Δt) of the body rotation, used for body-axis acceleration.

        R2 = ωωᵗ (½|ω|²Δt² - cos(|ω|Δt) - |ω|Δt sin(|ω|Δt) + 1) / |ω|⁴
             +  I (cos(|ω|Δt) + |ω|Δt sin(|ω|Δt) - 1) / |ω|²
             +  [ω]x (sin(|ω|Δt) - |ω|Δt cos(|ω|Δt)) / |ω|³
    """
    w = magnitude(omega)
    wdt = w * dt

    scale_outer = limit_ratio(0.5 * wdt ** 2 - np.cos(wdt) - wdt * np.sin(wdt) + 1.0, w ** 4)
    scale_identity = limit_ratio(np.cos(wdt) + wdt * np.sin(wdt) - 1.0, w ** 2)
    scale_skew = limit_ratio(np.sin(wdt) - wdt * np.cos(wdt), w ** 3)

    return (
        outer_self(omega) * scale_outer
        + np.eye(3) * scale_identity
        + skew(omega) * scale_skew
    )


def angular_accel_term(
    accel: NDArray[np.float64],
    omega: NDArray[np.float64],
    velocity: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Time derivative of body velocity at t0: a0 - [ω]x v0."""
    return accel - skew(omega) @ velocity


# ============================================================================
# Position and orientation models
# ============================================================================

def _linear_position(p0, v0, a0, R0, omega, dt):
    return p0 + v0 * dt + 0.5 * a0 * dt * dt


def _body_rate_position(p0, v0, a0, R0, omega, dt):
    return R0.T @ (first_integral(omega, dt) @ v0) + p0


def _body_accel_position(p0, v0, a0, R0, omega, dt):
    body_displacement = (
        first_integral(omega, dt) @ v0
        + second_integral(omega, dt) @ angular_accel_term(a0, omega, v0)
    )
    return R0.T @ body_displacement + p0


def _rotated_orientation(R0, omega, dt):
    return recover_euler_angles(rotation_increment(omega, dt) @ R0)


PositionModel = Callable[..., NDArray[np.float64]]
OrientationModel = Callable[..., NDArray[np.float64]]


@dataclass(frozen=True)
class DrAlgorithm:
    """
    Entry of the dead reckoning strategy table.

    Attributes:
        model: DR model number (2-9).
        position: Position model f(p0, v0, a0, R0, ω, Δt) -> p1.
        orientation: Orientation model f(R0, ω, Δt) -> [phi, theta, psi],
                     or None when the model does not extrapolate orientation.
        ignored_inputs: Inputs forced to zero before the models are run.
    """

    model: int
    position: PositionModel
    orientation: Optional[OrientationModel] = None
    ignored_inputs: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return DRM_NAMES[self.model]

    @property
    def computes_orientation(self) -> bool:
        return self.orientation is not None


DR_ALGORITHMS: Dict[int, DrAlgorithm] = {
    2: DrAlgorithm(2, _linear_position, None,
                   ignored_inputs=("acceleration", "orientation", "angular_velocity")),
    3: DrAlgorithm(3, _linear_position, _rotated_orientation),
    4: DrAlgorithm(4, _linear_position, _rotated_orientation),
    5: DrAlgorithm(5, _linear_position, _rotated_orientation),
    6: DrAlgorithm(6, _linear_position, _rotated_orientation),
    7: DrAlgorithm(7, _body_rate_position, _rotated_orientation),
    8: DrAlgorithm(8, _body_rate_position, _rotated_orientation),
    9: DrAlgorithm(9, _body_accel_position, None),
}


# ============================================================================
# Public interface
# ============================================================================

@dataclass(frozen=True)
class DeadReckoningResult:
    """
    Extrapolated state at time Δt.

    Attributes:
        position: Dead reckoned position [x, y, z].
        orientation: Dead reckoned Euler angles [phi, theta, psi]; zeros when
                     the model does not compute orientation.
        orientation_calculated: Whether orientation was extrapolated.
        note: Why orientation is unavailable, if it is.
    """

    position: NDArray[np.float64]
    orientation: NDArray[np.float64]
    orientation_calculated: bool
    note: Optional[str] = None


class DeadReckoner:
    """
    A DR algorithm bound to a diagnostics logger.

    Instances hold no computation state: dead_reckon() returns the result
    directly, so the same instance can be reused for any number of pairs.

    Example:
        >>> dr = create_dead_reckoner(4)
        >>> result = dr.dead_reckon([0, 0, 0], [10, 0, 0], [0, 0, 0],
        ...                         [0, 0, 0], [0, 0, 0], 1.0)
        >>> result.position
        array([10.,  0.,  0.])
    """

    def __init__(self, algorithm: DrAlgorithm, logger: Optional[logging.Logger] = None):
        self.algorithm = algorithm
        self.logger = resolve_logger(logger)

    @property
    def model(self) -> int:
        return self.algorithm.model

    @property
    def computes_orientation(self) -> bool:
        return self.algorithm.computes_orientation

    def is_orientation_calculated(self) -> bool:
        return self.algorithm.computes_orientation

    def dead_reckon(
        self,
        p0: Sequence[float],
        v0: Sequence[float],
        a0: Sequence[float],
        euler0: Sequence[float],
        omega0: Sequence[float],
        dt: float,
    ) -> Optional[DeadReckoningResult]:
        """
        Extrapolate the state at time 0 by dt seconds.

        Args:
            p0: Position at time 0, shape (3,).
            v0: Velocity at time 0, shape (3,).
            a0: Acceleration at time 0, shape (3,).
            euler0: Euler angles [phi, theta, psi] at time 0, shape (3,).
            omega0: Body-axis angular velocity at time 0, shape (3,).
            dt: Elapsed time in seconds.

        Returns:
            DeadReckoningResult, or None if any input does not have exactly
            three components (the error is logged and nothing is computed).
        """
        if not check_size(p0, v0, a0, euler0, omega0):
            self.logger.error("Incorrect input vector length passed into dead reckoning algorithm %d",
                              self.model)
            return None

        inputs = {
            "position": as_vector(p0),
            "velocity": as_vector(v0),
            "acceleration": as_vector(a0),
            "orientation": as_vector(euler0),
            "angular_velocity": as_vector(omega0),
        }
        for name in self.algorithm.ignored_inputs:
            inputs[name] = zero_vector()

        R0 = initial_orientation(*inputs["orientation"])
        omega = inputs["angular_velocity"]

        position = self.algorithm.position(
            inputs["position"], inputs["velocity"], inputs["acceleration"], R0, omega, dt
        )

        if self.algorithm.orientation is None:
            note = f"Algorithm {self.model} does not provide orientation calculation"
            self.logger.debug(note)
            return DeadReckoningResult(position, zero_vector(), False, note)

        orientation = self.algorithm.orientation(R0, omega, dt)
        return DeadReckoningResult(position, orientation, True)

    def __repr__(self) -> str:
        return f"DeadReckon{self.model}"


def create_dead_reckoner(model: int, logger: Optional[logging.Logger] = None) -> Optional[DeadReckoner]:
    """
    Look up the dead reckoner for a DR model number.

    Args:
        model: DR model number.
        logger: Diagnostics channel for the reckoner.

    Returns:
        DeadReckoner for models 2-9; None for model 1, which is static and
        is not dead reckoned.

    Raises:
        ValueError: For any other model number.
    """
    logger = resolve_logger(logger)

    if model == STATIC_MODEL:
        logger.info("Algorithm 1 is static and does not dead reckon.")
        return None

    algorithm = DR_ALGORITHMS.get(model)
    if algorithm is None:
        msg = f"Incorrect algorithm provided: {model}"
        logger.error(msg)
        raise ValueError(msg)

    logger.debug("Creating DeadReckon%d instance.", model)
    return DeadReckoner(algorithm, logger)
