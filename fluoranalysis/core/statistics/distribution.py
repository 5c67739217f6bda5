"""Normal distribution helpers."""

import math

from fluoranalysis.core.errors import InvalidParameterError

# Coefficients of Acklam's rational approximation
_A = (
    -3.969683028665376e+01,
    2.209460984245205e+02,
    -2.759285104469687e+02,
    1.383577518672690e+02,
    -3.066479806614716e+01,
    2.506628277459239e+00,
)
_B = (
    -5.447609879822406e+01,
    1.615858368580409e+02,
    -1.556989798598866e+02,
    6.680131188771972e+01,
    -1.328068155288572e+01,
)
_C = (
    -7.784894002430293e-03,
    -3.223964580411365e-01,
    -2.400758277161838e+00,
    -2.549732539343734e+00,
    4.374664141464968e+00,
    2.938163982698783e+00,
)
_D = (
    7.784695709041462e-03,
    3.224671290700398e-01,
    2.445134137142996e+00,
    3.754408661907416e+00,
)

_P_LOW = 0.02425
_P_HIGH = 1.0 - _P_LOW


def inverse_normal_cdf(p: float) -> float:
    """Compute the standard normal quantile (inverse CDF) of ``p``.

    Uses Peter Acklam's rational approximation, which has a relative error
    below 1.15e-9 over the open interval (0, 1).

    Args:
        p: Probability in [0, 1]

    Returns:
        The quantile z such that Phi(z) = p. Returns -inf for p == 0 and
        +inf for p == 1.

    Raises:
        InvalidParameterError: If p is outside [0, 1] or NaN
    """
    if not 0.0 <= p <= 1.0:
        raise InvalidParameterError("p", f"the probability must be between 0.0 and 1.0 but got {p}.")
    if p == 0.0:
        return -math.inf
    if p == 1.0:
        return math.inf

    if p < _P_LOW:
        # lower tail
        q = math.sqrt(-2.0 * math.log(p))
        return (((((_C[0] * q + _C[1]) * q + _C[2]) * q + _C[3]) * q + _C[4]) * q + _C[5]) / \
            ((((_D[0] * q + _D[1]) * q + _D[2]) * q + _D[3]) * q + 1.0)

    if p > _P_HIGH:
        # upper tail
        q = math.sqrt(-2.0 * math.log(1.0 - p))
        return -(((((_C[0] * q + _C[1]) * q + _C[2]) * q + _C[3]) * q + _C[4]) * q + _C[5]) / \
            ((((_D[0] * q + _D[1]) * q + _D[2]) * q + _D[3]) * q + 1.0)

    q = p - 0.5
    r = q * q
    return (((((_A[0] * r + _A[1]) * r + _A[2]) * r + _A[3]) * r + _A[4]) * r + _A[5]) * q / \
        (((((_B[0] * r + _B[1]) * r + _B[2]) * r + _B[3]) * r + _B[4]) * r + 1.0)
