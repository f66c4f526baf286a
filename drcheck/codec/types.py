"""
Data structures produced by the codec.

A SpatialSample is the logical content of one Spatial attribute update:
the DR model in use and whichever kinematic fields that model carries.
Fields the model does not carry are zero-filled.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from drcheck.coords.vectors import zero_vector

ACCELERATION_MODELS = frozenset({4, 5, 8, 9})
ANGULAR_VELOCITY_MODELS = frozenset({3, 4, 7, 8})

VECTOR_FIELDS: Tuple[str, ...] = (
    "position",
    "orientation",
    "velocity",
    "acceleration",
    "angular_velocity",
)


def _read_only(values) -> np.ndarray:
    arr = np.array(values, dtype=np.float64).reshape(-1)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class SpatialSample:
    """
    One decoded Spatial update.

    Attributes:
        discriminant: DR model number (0-9) taken from the variant record.
        position: World location [x, y, z] in metres.
        is_frozen: True if the entity reports itself as frozen.
        orientation: Euler angles [phi, theta, psi] in radians.
        velocity: Velocity vector [m/s].
        acceleration: Acceleration vector [m/s²] (DR models 4, 5, 8, 9).
        angular_velocity: Body-axis angular velocity [rad/s]
                          (DR models 3, 4, 7, 8).

    Vector fields are stored as read-only float64 arrays. Their length is
    not enforced here; the dead reckoning layer rejects malformed vectors.

    Example:
        >>> sample = SpatialSample(4, position=[0.0, 0.0, 0.0],
        ...                        velocity=[10.0, 0.0, 0.0])
        >>> sample.acceleration
        array([0., 0., 0.])
    """

    discriminant: int
    position: np.ndarray
    is_frozen: bool = False
    orientation: np.ndarray = field(default_factory=zero_vector)
    velocity: np.ndarray = field(default_factory=zero_vector)
    acceleration: np.ndarray = field(default_factory=zero_vector)
    angular_velocity: np.ndarray = field(default_factory=zero_vector)

    def __post_init__(self) -> None:
        if not isinstance(self.discriminant, (int, np.integer)):
            raise TypeError(f"discriminant must be an integer, got {type(self.discriminant)}")
        object.__setattr__(self, "discriminant", int(self.discriminant))
        object.__setattr__(self, "is_frozen", bool(self.is_frozen))
        for name in VECTOR_FIELDS:
            object.__setattr__(self, name, _read_only(getattr(self, name)))

    @property
    def carries_acceleration(self) -> bool:
        return self.discriminant in ACCELERATION_MODELS

    @property
    def carries_angular_velocity(self) -> bool:
        return self.discriminant in ANGULAR_VELOCITY_MODELS

    def __repr__(self) -> str:
        return (
            f"SpatialSample(discriminant={self.discriminant}, "
            f"position={self.position.tolist()}, is_frozen={self.is_frozen}, "
            f"orientation={self.orientation.tolist()}, velocity={self.velocity.tolist()}, "
            f"acceleration={self.acceleration.tolist()}, "
            f"angular_velocity={self.angular_velocity.tolist()})"
        )
