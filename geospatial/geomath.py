"""
Geodetic Math Kernel.

Angle reduction, conformal latitude and polynomial helpers shared by the
Transverse Mercator and Polar Stereographic projections.

Scientific Context
------------------
Domain: Mathematical geodesy
Model: Conformal latitude on an ellipsoid of revolution

The conformal latitude χ of a geodetic latitude φ is handled through the
tangents τ = tan φ and τ' = tan χ. The forward map τ → τ' is closed form;
the inverse needs a short Newton iteration that converges to full double
precision in at most two steps for WGS84.

Angle differences are computed with an error-free transformation so that
results exactly at ±180° keep a meaningful sign.

References
----------
- Karney, C.F.F. (2011). Transverse Mercator with an accuracy of a few
  nanometers. Journal of Geodesy, 85(8), 475-485.
- Knuth, D.E. (1997). The Art of Computer Programming, Vol. 2, §4.2.2
  (TwoSum).
"""

import math
from typing import Sequence, Tuple
import numpy as np


# Angle constants in degrees
QD: float = 90.0
HD: float = 180.0
TD: float = 360.0

DBL_EPSILON: float = float(np.finfo(np.float64).eps)

# Newton iteration controls for tauf
TAUF_MAX_ITERATIONS: int = 5
TAUF_TOLERANCE: float = math.sqrt(DBL_EPSILON) / 10
TAU_MAX: float = 2 / math.sqrt(DBL_EPSILON)


def ang_normalize(x: float) -> float:
    """Reduce an angle to the range [-180, 180].

    Parameters
    ----------
    x : float
        Angle in degrees.

    Returns
    -------
    float
        Equivalent angle in [-180, 180]. An input that reduces to exactly
        ±180 keeps the sign of ``x``.
    """
    y = math.remainder(x, TD)
    return math.copysign(HD, x) if abs(y) == HD else y


def sum_error(u: float, v: float) -> Tuple[float, float]:
    """Error-free sum of two floats.

    Returns
    -------
    Tuple[float, float]
        (s, t) with s = round(u + v) and t = u + v - s exactly.
    """
    s = u + v
    up = s - v
    vpp = s - up
    up -= u
    vpp -= v
    # u + v = s + t
    t = -(up + vpp) if s != 0 else s
    return s, t


def ang_diff(x: float, y: float) -> float:
    """Compute y - x reduced to [-180, 180] without loss of accuracy.

    Parameters
    ----------
    x, y : float
        Angles in degrees.

    Returns
    -------
    float
        The difference. When it is 0 or ±180 its sign follows the sign of
        the exact (unrounded) difference.
    """
    d, t = sum_error(math.remainder(-x, TD), math.remainder(y, TD))
    d, e = sum_error(math.remainder(d, TD), t)
    if d == 0 or abs(d) == HD:
        d = math.copysign(d, (y - x) if e == 0 else -e)
    return d


def eatanhe(x: float, es: float) -> float:
    """Evaluate e·atanh(e·x) for a signed eccentricity.

    A negative ``es`` denotes a prolate ellipsoid, where the expression
    continues analytically to -|e|·atan(|e|·x).
    """
    if es >= 0:
        return es * np.arctanh(es * x)
    return -es * np.arctan(es * x)


def taupf(tau: float, es: float) -> float:
    """Tangent of the conformal latitude from the tangent of the geodetic latitude.

    Parameters
    ----------
    tau : float
        tan φ.
    es : float
        Signed eccentricity of the ellipsoid.

    Returns
    -------
    float
        τ' = tan χ. Non-finite input is returned unchanged.
    """
    if not np.isfinite(tau):
        return tau
    tau1 = np.hypot(1.0, tau)
    sig = np.sinh(eatanhe(tau / tau1, es))
    return float(np.hypot(1.0, sig) * tau - sig * tau1)


def tauf(taup: float, es: float) -> float:
    """Tangent of the geodetic latitude from the tangent of the conformal latitude.

    Inverts :func:`taupf` with Newton's method.

    Parameters
    ----------
    taup : float
        τ' = tan χ.
    es : float
        Signed eccentricity of the ellipsoid.

    Returns
    -------
    float
        τ = tan φ.

    Notes
    -----
    The seed is τ'/(1 - e²), or τ'·exp(eatanhe(1)) for |τ'| > 70 where the
    asymptotic form is better. Iteration stops after
    ``TAUF_MAX_ITERATIONS`` steps or once the correction falls below
    ``TAUF_TOLERANCE·max(1, |τ'|)``. Seeds at or beyond ``TAU_MAX`` are
    already exact to double precision.
    """
    e2m = 1.0 - es**2
    tau = taup * np.exp(eatanhe(1.0, es)) if abs(taup) > 70 else taup / e2m
    stol = TAUF_TOLERANCE * max(1.0, abs(taup))

    if not abs(tau) < TAU_MAX:
        return float(tau)

    for _ in range(TAUF_MAX_ITERATIONS):
        taupa = taupf(tau, es)
        dtau = ((taup - taupa) * (1 + e2m * tau**2)
                / (e2m * np.hypot(1.0, tau) * np.hypot(1.0, taupa)))
        tau += dtau
        if not abs(dtau) >= stol:
            break

    return float(tau)


def polyval(coeffs: Sequence[float], x: float) -> float:
    """Evaluate a polynomial with Horner's method.

    Parameters
    ----------
    coeffs : sequence of float
        Coefficients, highest degree first. An empty sequence is the
        zero polynomial.
    x : float
        Evaluation point.
    """
    acc = 0.0
    for c in coeffs:
        acc = acc * x + c
    return acc
