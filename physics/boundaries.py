# delay_fdtd/physics/boundaries.py

import cmath
import math
import sys
import numpy as np
from tqdm import tqdm

from .special_functions import regularized_lower_gamma, log_factorial, safe_exp, is_finite
from .wavepackets import one_photon_exponential

EPSILON = sys.float_info.epsilon

# ==============================================================================
# 1. Temporal factors e(t) of the solution in x<=-a
# ==============================================================================

def _series_converged(term: complex, total: complex) -> bool:
    # the series converges fast; cutting it also keeps the terms from overflowing
    return (not is_finite(term)) or abs(term) < EPSILON * abs(total)

def plane_wave_excitation(j: int, context) -> complex:
    """e(t) at t=j*Delta for the two-photon plane-wave input."""
    if context.Gamma == 0:
        return 0j
    t = j * context.Delta
    td = context.td
    k, w0, gamma = context.k, context.w0, context.Gamma
    p = k - w0 + 0.5j * gamma
    log_p = cmath.log(p)

    e_t = (1j * math.sqrt(0.5 * gamma) * cmath.exp(-0.5j * k * td)
           * (cmath.exp(-1j * k * t) - cmath.exp(-1j * w0 * t - 0.5 * gamma * t)) / p)

    total = 0j
    for n in range(1, j // context.nx + 1):
        tau = t - n * td
        if tau <= 0:
            term = 0j
        else:
            log_prefactor = (n - 0.5) * math.log(0.5 * gamma)
            decay = safe_exp(n * math.log(tau) + n * (1j * w0 * td + 0.5 * gamma * td)
                             - 1j * w0 * t - 0.5 * gamma * t - log_factorial(n) + log_prefactor)
            # the drive convolved with u^n/n! over [0, tau] gives P(n+1, -i p tau)
            drive = (k - w0) * regularized_lower_gamma(
                n + 1, -1j * p * tau,
                log_scale=n * cmath.log(1j) + 1j * n * k * td - 1j * k * t - (n + 1) * log_p + log_prefactor,
            )
            term = decay + drive
        if _series_converged(term, total):
            break
        total += term

    e_t -= cmath.exp(-0.5j * k * td) * total
    return e_t

def exponential_excitation(j: int, context) -> complex:
    """e(t) at t=j*Delta for the single-photon exponential input."""
    t = j * context.Delta
    td = context.td
    W = context.W

    total = 0j
    for n in range(1, j // context.nx + 1):
        base = 0.5 * context.Gamma * cmath.exp(W * td) * (t - n * td)
        if base == 0:
            term = 0j
        else:
            term = safe_exp(n * cmath.log(base) - log_factorial(n))
        if _series_converged(term, total):
            break
        total += term

    return cmath.exp(-W * t) * (1.0 + total)

# ==============================================================================
# 2. Pointwise boundary values psi[j][i] in x<=-a
# ==============================================================================

def _abort_if_not_finite(value: complex, name: str, j: int, i: int) -> complex:
    if not is_finite(value):
        raise FloatingPointError(f"{name}: non-finite value is produced (at j={j} and i={i}). Abort!")
    return value

def plane_wave_BC(j: int, i: int, context) -> complex:
    """psi(x,t) = sqrt(2) e^{ik(x-t)} e(t) for the incident plane wave."""
    x = (i - context.origin_index) * context.Delta
    t = j * context.Delta
    value = math.sqrt(2.0) * cmath.exp(1j * context.k * (x - t)) * plane_wave_excitation(j, context)
    return _abort_if_not_finite(value, 'plane_wave_BC', j, i)

def exponential_BC(j: int, i: int, context) -> complex:
    """psi(x,t) = psi(x-t, 0) e(t) for the exponential wavepacket."""
    profile = one_photon_exponential((i - context.origin_index) - j, context.k, context.alpha,
                                     context.Gamma, context.nx, context.Delta)
    value = profile * exponential_excitation(j, context)
    return _abort_if_not_finite(value, 'exponential_BC', j, i)

# ==============================================================================
# 3. Row providers (one e(t) per row, vectorized over the strip columns)
# ==============================================================================

def _check_row(row: np.ndarray, name: str, j: int) -> np.ndarray:
    bad = np.flatnonzero(~np.isfinite(row))
    if bad.size:
        raise FloatingPointError(f"{name}: non-finite value is produced (at j={j} and i={bad[0]}). Abort!")
    return row

def plane_wave_boundary_row(j: int, context) -> np.ndarray:
    columns = np.arange(context.nx + 1)
    x = (columns - context.origin_index) * context.Delta
    t = j * context.Delta
    row = math.sqrt(2.0) * np.exp(1j * context.k * (x - t)) * plane_wave_excitation(j, context)
    return _check_row(row, 'plane_wave_BC', j)

def exponential_boundary_row(j: int, context) -> np.ndarray:
    e_t = exponential_excitation(j, context)
    row = np.array([
        one_photon_exponential((i - context.origin_index) - j, context.k, context.alpha,
                               context.Gamma, context.nx, context.Delta)
        for i in range(context.nx + 1)
    ], dtype=np.complex128) * e_t
    return _check_row(row, 'exponential_BC', j)

def zero_initial_strip(context) -> np.ndarray:
    return np.zeros(2 * context.Nx + 1, dtype=np.complex128)

def exponential_initial_strip(context) -> np.ndarray:
    # psit0[i] sits at x/Delta = i - Nx
    return np.array([
        one_photon_exponential(i - context.Nx, context.k, context.alpha,
                               context.Gamma, context.nx, context.Delta)
        for i in range(2 * context.Nx + 1)
    ], dtype=np.complex128)

# ==============================================================================
# 4. Registries
# ==============================================================================

initial_condition_registry = {
    1: zero_initial_strip,
    2: exponential_initial_strip,
}

boundary_condition_registry = {
    1: plane_wave_boundary_row,
    2: exponential_boundary_row,
}

# ==============================================================================
# 5. Strip generators
# ==============================================================================

def initial_condition(context) -> np.ndarray:
    """psi(x, 0) for x/Delta in [-Nx, Nx]."""
    if context.init_cond not in initial_condition_registry:
        raise ValueError(f"initial_condition: invalid option init_cond={context.init_cond}. Abort!")
    return initial_condition_registry[context.init_cond](context)

def boundary_condition(context, quiet: bool = False) -> np.ndarray:
    """
    psi in the first nx+1 columns, x/Delta in [-(Nx+nx+1), -(Nx+1)], for
    every time step. These columns feed the delay term of the recurrence.
    """
    if context.init_cond not in boundary_condition_registry:
        raise ValueError(f"boundary_condition: invalid option init_cond={context.init_cond}. Abort!")
    provider = boundary_condition_registry[context.init_cond]

    try:
        psix0 = np.zeros((context.Ny, context.nx + 1), dtype=np.complex128)
    except MemoryError as e:
        raise MemoryError(f"boundary_condition: cannot allocate {context.Ny}x{context.nx + 1} strip. Abort!") from e

    for j in tqdm(range(context.Ny), desc="  [Seed] boundary strip", leave=False, disable=quiet):
        psix0[j, :] = provider(j, context)
    return psix0
