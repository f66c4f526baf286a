"""3-vector primitives used by the dead reckoning algorithms.

Conventions:
- Vectors are NumPy float64 arrays of shape (3,)
- Matrices are NumPy float64 arrays of shape (3, 3), indexed 0-based
- Shapes are checked once, at the entry of the algorithm layer, with
  check_size(); the primitives below assume valid input.

Matrix addition, scaling, products and transposes are plain NumPy
operations (``A + B``, ``s * A``, ``A @ B``, ``A.T``).
"""

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

VECTOR_LENGTH = 3


def as_vector(values: Sequence[float]) -> NDArray[np.float64]:
    """Convert a sequence to a flat float64 array without checking its length."""
    return np.asarray(values, dtype=np.float64).reshape(-1)


def zero_vector() -> NDArray[np.float64]:
    return np.zeros(VECTOR_LENGTH, dtype=np.float64)


def check_size(*vectors: Sequence[float]) -> bool:
    """Return True if at least one vector is given and all have 3 elements.

    Example:
        >>> check_size([1.0, 2.0, 3.0], [0.0, 0.0, 0.0])
        True
        >>> check_size([1.0, 2.0])
        False
    """
    return len(vectors) > 0 and all(np.size(v) == VECTOR_LENGTH for v in vectors)


def magnitude(v: NDArray[np.float64]) -> float:
    """Euclidean norm sqrt(v·v)."""
    return float(np.sqrt(np.dot(v, v)))


def skew(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Skew-symmetric (cross product) matrix of v.

    skew(v) @ u equals np.cross(v, u).

        skew(v) = [[  0, -vz,  vy],
                   [ vz,   0, -vx],
                   [-vy,  vx,   0]]

    Args:
        v: Vector [vx, vy, vz].

    Returns:
        3x3 matrix with skew(v).T == -skew(v).
    """
    vx, vy, vz = v
    return np.array(
        [
            [0.0, -vz, vy],
            [vz, 0.0, -vx],
            [-vy, vx, 0.0],
        ],
        dtype=np.float64,
    )


def outer_self(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Outer product v vᵗ (3x3, symmetric, rank 1)."""
    return np.outer(v, v).astype(np.float64)
