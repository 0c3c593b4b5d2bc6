# delay_fdtd/physics/wavepackets.py

import cmath
import math

# ==============================================================================
# 1. Closed-form wavepackets (plain Python, also compiled by numba)
# ==============================================================================

def one_photon_exponential(x, k, alpha, gamma, nx, delta):
    """
    Exponential wavepacket with a sharp wavefront at the emitter x=-a.
    x is unit-less (true x = x * delta) and measured from the origin.
    """
    if x > -0.5 * nx:
        return 0j
    a_g = alpha * gamma
    return 1j * math.sqrt(a_g) * cmath.exp((1j * k * x + 0.5 * a_g * (x + 0.5 * nx)) * delta)

def _no_two_photon_input(x1, x2):
    return 0j

# ==============================================================================
# 2. Input condition configurations
# ==============================================================================

input_condition_configs = {
    1: {
        'name': 'two_photon_plane_wave',
        'required': (),
        'two_photon': True,
        'description': "Two photons in the same plane wave exp(ik(x1+x2))."
    },
    2: {
        'name': 'single_photon_exponential',
        'required': ('alpha',),
        'two_photon': False,
        'description': "One photon in an exponential wavepacket with its wavefront at x=-a."
    },
    3: {
        'name': 'two_photon_exponential',
        'required': ('alpha',),
        'two_photon': True,
        'description': "Two photons in exponential wavepackets, identical or distinguishable."
    },
}

def is_two_photon(init_cond: int) -> bool:
    config = input_condition_configs.get(init_cond)
    return bool(config and config['two_photon'])

# ==============================================================================
# 3. Two-photon input chi(x1, x2, t=0)
# ==============================================================================

def make_two_photon_input(context, jit=None):
    """
    Build chi(x1, x2) at t=0 for the input condition of the context.
    Coordinates are unit-less. When jit is given (e.g. numba.njit) the
    returned function and the wavepacket it calls are compiled with it.
    """
    jit = jit or (lambda f: f)
    k, delta, gamma, nx = context.k, context.Delta, context.Gamma, context.nx

    if context.init_cond == 1:
        def chi(x1, x2):
            return cmath.exp(1j * k * (x1 + x2) * delta)
        return jit(chi)

    if context.init_cond == 3:
        phi = jit(one_photon_exponential)
        if context.identical_photons:
            alpha = context.alpha

            def chi(x1, x2):
                return (phi(x1, k, alpha, gamma, nx, delta)
                        * phi(x2, k, alpha, gamma, nx, delta))
            return jit(chi)

        k1, k2 = context.k1, context.k2
        alpha1, alpha2 = context.alpha1, context.alpha2
        norm = context.A / math.sqrt(2.0)

        def chi(x1, x2):
            return norm * (phi(x1, k1, alpha1, gamma, nx, delta) * phi(x2, k2, alpha2, gamma, nx, delta)
                           + phi(x2, k1, alpha1, gamma, nx, delta) * phi(x1, k2, alpha2, gamma, nx, delta))
        return jit(chi)

    raise ValueError(f"two_photon_input: init_cond={context.init_cond} is not a two-photon input")

def make_recurrence_input(context, jit=None):
    """chi for the recurrence; a zero function for single-photon inputs."""
    if is_two_photon(context.init_cond):
        return make_two_photon_input(context, jit)
    jit = jit or (lambda f: f)
    return jit(_no_two_photon_input)

def two_photon_input(x1, x2, context) -> complex:
    """Evaluate chi(x1, x2, 0) once; raises ValueError for single-photon inputs."""
    return make_two_photon_input(context)(x1, x2)
