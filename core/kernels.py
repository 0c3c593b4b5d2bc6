# delay_fdtd/core/kernels.py

import math
from collections import namedtuple

from physics.wavepackets import make_recurrence_input

# ==============================================================================
#                 Recurrence kernels (plain Python or numba-compiled)
# ==============================================================================

RecurrenceKernels = namedtuple(
    'RecurrenceKernels',
    ['square_average', 'bar_average', 'two_photon_input', 'update_cell', 'advance_segment', 'advance_rows'],
)

def _identity(func):
    return func

def create_recurrence_kernels(context, jit=None) -> RecurrenceKernels:
    """
    Factory building the update rule for one SimulationContext.

    The context values are captured as constants of the returned functions.
    With jit=None they run as plain Python; with jit=numba.njit(...) the very
    same source is compiled.
    """
    jit = jit or _identity

    nx = context.nx
    half_nx = nx // 2
    ntotal = context.Ntotal
    first_column = context.first_column
    minus_a = context.minus_a_index
    plus_a = context.plus_a_index
    origin = context.origin_index
    inv_delta = 1.0 / context.Delta
    half_gamma = 0.5 * context.Gamma
    sqrt_gamma = math.sqrt(context.Gamma)
    quarter_w = 0.25 * context.W
    prefactor = inv_delta + quarter_w
    two_photon = context.init_cond in (1, 3)

    chi = make_recurrence_input(context, jit)

    @jit
    def square_average(psi, j, i):
        # (j, i) is the upper right corner of the square
        if i < 1:
            raise IndexError("square_average: beyond left boundary")
        if i > ntotal - 1:
            raise IndexError("square_average: beyond right boundary")
        if j < 1:
            return 0j
        return (psi[j - 1, i - 1] + psi[j - 1, i] + psi[j, i - 1] + psi[j, i]) / 4.0

    @jit
    def bar_average(psi, j, i):
        # (j, i) is the right end of the bar
        if i < 1:
            raise IndexError("bar_average: beyond left boundary")
        if i > ntotal - 1:
            raise IndexError("bar_average: beyond right boundary")
        if j < 0:
            return 0j
        return (psi[j, i] + psi[j, i - 1]) / 2.0

    @jit
    def update_cell(psi, j, i):
        """Advance psi[j][i]; returns False if the new value is not finite."""
        # next to the 1st light cone in tile B1, and next to the 2nd light cone:
        # strictly zero, psi is zero initialized
        if (j < nx and i == j + minus_a + 1) or i == j + plus_a + 1:
            return True

        # free propagation (decay included)
        value = (inv_delta - quarter_w) * psi[j - 1, i - 1] - quarter_w * (psi[j - 1, i] + psi[j, i - 1])

        # delay term: psi(x-2a, t-2a) theta(t-2a)
        if j > nx:
            value += half_gamma * square_average(psi, j - nx, i - nx)

        # left light cone: psi(-x-2a, t-x-a) and -psi(-x, t-x-a), theta(x+a) theta(t-x-a)
        if i > minus_a and j - i >= -minus_a:
            on_light_cone = 0.5 if j - i == -minus_a else 1.0
            t_left = j - (i - origin) - half_nx
            value -= half_gamma * bar_average(psi, t_left, 2 * origin - i - nx + 1) * on_light_cone
            value += half_gamma * bar_average(psi, t_left, 2 * origin - i + 1) * on_light_cone

        # right light cone: psi(2a-x, t-x+a) and -psi(-x, t-x+a), theta(x-a) theta(t-x+a)
        if i > plus_a and j - i >= -plus_a:
            on_light_cone = 0.5 if j - i == -plus_a else 1.0
            t_right = j - (i - origin) + half_nx
            value -= half_gamma * bar_average(psi, t_right, 2 * origin - i + nx + 1) * on_light_cone
            value += half_gamma * bar_average(psi, t_right, 2 * origin - i + 1) * on_light_cone

        # two-photon input: 2*(chi(x-t, -a-t, 0) - chi(x-t, a-t, 0)), nonzero for t-x-a>=0;
        # the +0.5 comes from expanding at the center of the square
        if two_photon and j - i >= -minus_a:
            on_light_cone = 0.5 if j - i == -minus_a else 1.0
            value += sqrt_gamma * on_light_cone * chi((i - origin) - j, -half_nx - j + 0.5)
            if j > nx:
                value -= sqrt_gamma * on_light_cone * chi((i - origin) - j, half_nx - j + 0.5)

        value /= prefactor
        psi[j, i] = value
        return math.isfinite(value.real) and math.isfinite(value.imag)

    @jit
    def advance_segment(psi, j, i_start, i_stop):
        """Columns [i_start, i_stop) of row j; returns the first bad column or -1."""
        for i in range(i_start, i_stop):
            if not update_cell(psi, j, i):
                return i
        return -1

    @jit
    def advance_rows(psi, j_start, j_stop):
        """Rows [j_start, j_stop), all solved columns; returns (j, i) of the first bad cell or (-1, -1)."""
        for j in range(j_start, j_stop):
            bad = advance_segment(psi, j, first_column, ntotal)
            if bad >= 0:
                return j, bad
        return -1, -1

    return RecurrenceKernels(
        square_average=square_average,
        bar_average=bar_average,
        two_photon_input=chi,
        update_cell=update_cell,
        advance_segment=advance_segment,
        advance_rows=advance_rows,
    )
