# delay_fdtd/physics/special_functions.py

import cmath
import math
import numpy as np
from scipy.special import gammaln

# ==============================================================================
# Lower incomplete gamma function of integer order at complex argument
# ==============================================================================

def safe_exp(w: complex) -> complex:
    """Complex exponential that overflows to inf instead of raising."""
    with np.errstate(over='ignore', invalid='ignore'):
        return complex(np.exp(np.complex128(w)))

def _series_lower_gamma(s: int, z: complex, log_scale: complex, max_terms: int) -> complex:
    # gamma(s, z) = z^s e^{-z} sum_k z^k / (s (s+1) ... (s+k))
    term = 1.0 / s
    total = term
    for m in range(1, max_terms):
        term *= z / (s + m)
        total += term
        if abs(term) < 1e-17 * abs(total):
            break
    return safe_exp(s * cmath.log(z) - z + log_scale) * total

def _closed_form_lower_gamma(s: int, z: complex, log_scale: complex) -> complex:
    # gamma(s, z) = (s-1)! * (1 - e^{-z} sum_{m<s} z^m / m!)
    partial = 0j
    term = 1.0 + 0j
    for m in range(s):
        if m > 0:
            term *= z / m
        partial += term
    return safe_exp(gammaln(s) + log_scale) * (1.0 - safe_exp(-z) * partial)

def lower_incomplete_gamma(s: int, z: complex, log_scale: complex = 0j, max_terms: int = 500) -> complex:
    """
    Non-regularized lower incomplete gamma function gamma(s, z) for a positive
    integer order s and complex z, multiplied by exp(log_scale).

    The scale factor is folded into the exponent so that large prefactors
    (e.g. p^{-(n+1)} in the plane-wave boundary series) do not overflow on
    their own. The power series is used while |z| < s, where its terms
    decrease monotonically; otherwise the finite closed form for integer s.
    """
    if s < 1 or int(s) != s:
        raise ValueError(f"lower_incomplete_gamma: order must be a positive integer, got {s}")
    s = int(s)
    z = complex(z)
    if z == 0:
        return 0j
    if abs(z) < s:
        return _series_lower_gamma(s, z, log_scale, max_terms)
    return _closed_form_lower_gamma(s, z, log_scale)

def log_factorial(n: int) -> float:
    """ln(n!) through scipy's log-gamma."""
    return float(gammaln(n + 1))

def is_finite(value: complex) -> bool:
    return math.isfinite(value.real) and math.isfinite(value.imag)

def regularized_lower_gamma(s: int, z: complex, log_scale: complex = 0j, max_terms: int = 500) -> complex:
    """P(s, z) = gamma(s, z) / (s-1)!, multiplied by exp(log_scale)."""
    return lower_incomplete_gamma(s, z, log_scale=log_scale - gammaln(s), max_terms=max_terms)
