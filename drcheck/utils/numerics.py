"""
Limit substitution for removable singularities.

The closed-form dead reckoning matrices divide trigonometric expressions by
powers of |ω|. When the angular velocity is exactly zero every one of those
quotients is 0/0, and each is replaced by 0.

Note that this includes the identity factor sin(|ω|Δt)/|ω| of R1, whose
analytic limit is Δt: with ω = 0 the body-axis models 7 and 8 predict no
displacement. The substitution is nevertheless applied uniformly to
every factor.
"""

import numpy as np


def limit_ratio(numerator: float, denominator: float) -> float:
    """
    Compute numerator / denominator, mapping an undefined result to 0.

    Only NaN is substituted; a finite numerator over a zero denominator
    still yields ±inf so that genuine errors stay visible.

    Args:
        numerator: Scale factor numerator
        denominator: Scale factor denominator (a power of |ω|)

    Returns:
        The quotient, or 0.0 where it is NaN

    Example:
        >>> limit_ratio(0.0, 0.0)
        0.0
        >>> limit_ratio(1.0, 4.0)
        0.25
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        value = np.float64(numerator) / np.float64(denominator)
    if np.isnan(value):
        return 0.0
    return float(value)
