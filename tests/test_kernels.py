# delay_fdtd/tests/test_kernels.py

import numpy as np
import pytest

from conftest import make_params
from core.grid import Grid
from core.kernels import create_recurrence_kernels
from core.backends import get_backend
from core.scheduler import WavefrontScheduler
from physics.boundaries import plane_wave_excitation
from simulation_setup import setup_simulation_environment

def _kernels(**overrides):
    grid = Grid(make_params(**overrides))
    return grid, create_recurrence_kernels(grid.make_context())

def _random_psi(grid, seed=0):
    rng = np.random.default_rng(seed)
    return rng.normal(size=(grid.Ny, grid.Ntotal)) + 1j * rng.normal(size=(grid.Ny, grid.Ntotal))

# ==============================================================================
# Averages
# ==============================================================================

def test_square_average_is_mean_of_the_square():
    grid, kernels = _kernels()
    psi = _random_psi(grid)
    for j in range(1, grid.Ny):
        for i in range(1, grid.Ntotal):
            expected = (psi[j - 1, i - 1] + psi[j - 1, i] + psi[j, i - 1] + psi[j, i]) / 4
            assert kernels.square_average(psi, j, i) == pytest.approx(expected)

def test_bar_average_is_mean_of_the_bar():
    grid, kernels = _kernels()
    psi = _random_psi(grid)
    for j in range(grid.Ny):
        for i in range(1, grid.Ntotal):
            assert kernels.bar_average(psi, j, i) == pytest.approx((psi[j, i] + psi[j, i - 1]) / 2)

def test_averages_vanish_before_time_zero():
    grid, kernels = _kernels()
    psi = _random_psi(grid)
    assert kernels.square_average(psi, 0, 3) == 0
    assert kernels.square_average(psi, -4, 3) == 0
    assert kernels.bar_average(psi, -1, 3) == 0
    assert kernels.bar_average(psi, -7, 3) == 0

@pytest.mark.parametrize("name", ["square_average", "bar_average"])
def test_averages_reject_columns_out_of_range(name):
    grid, kernels = _kernels()
    psi = _random_psi(grid)
    average = getattr(kernels, name)
    with pytest.raises(IndexError):
        average(psi, 2, 0)
    with pytest.raises(IndexError):
        average(psi, 2, grid.Ntotal)
    average(psi, 2, grid.Ntotal - 1)

# ==============================================================================
# Update rule
# ==============================================================================

def test_light_cone_cell_gets_half_the_correction():
    # nx=4, Nx=6: x=-a at i=9, x=+a at i=13, origin at i=11
    grid, kernels = _kernels(nx=4, Nx=6, Ny=4, Gamma=0.8, w0=0.3, init_cond=2, alpha=1.0)
    ctx = grid.make_context()
    W = ctx.W
    prefactor = 1 / ctx.Delta + 0.25 * W
    t_idx, x_idx = np.meshgrid(np.arange(grid.Ny), np.arange(grid.Ntotal), indexing='ij')
    base = (x_idx + 1) + 0.5j * t_idx

    j = 2
    # i=11 lies on the left light cone (j-i == -minus_a), i=10 strictly inside
    for i, weight in ((11, 0.5), (10, 1.0)):
        psi = base.astype(np.complex128)
        free = (1 / ctx.Delta - 0.25 * W) * psi[j - 1, i - 1] - 0.25 * W * (psi[j - 1, i] + psi[j, i - 1])
        t_left = j - (i - ctx.origin_index) - ctx.nx // 2
        x_mirror = 2 * ctx.origin_index - i - ctx.nx + 1
        x_image = 2 * ctx.origin_index - i + 1
        full = 0.5 * ctx.Gamma * ((psi[t_left, x_image] + psi[t_left, x_image - 1]) / 2
                                  - (psi[t_left, x_mirror] + psi[t_left, x_mirror - 1]) / 2)

        assert kernels.update_cell(psi, j, i)
        correction = psi[j, i] * prefactor - free
        assert correction == pytest.approx(weight * full)
        assert full != 0

def test_right_light_cone_cell_gets_half_the_correction():
    # nx=4, Nx=6: x=+a at i=13, origin at i=11
    grid, kernels = _kernels(nx=4, Nx=6, Ny=4, Gamma=0.8, w0=0.3, init_cond=2, alpha=1.0)
    ctx = grid.make_context()
    W = ctx.W
    prefactor = 1 / ctx.Delta + 0.25 * W
    t_idx, x_idx = np.meshgrid(np.arange(grid.Ny), np.arange(grid.Ntotal), indexing='ij')
    base = (x_idx + 1) + 0.5j * t_idx

    j = 2
    # i=15 lies on the right light cone (j-i == -plus_a), i=14 strictly inside;
    # both are outside the left light cone
    for i, weight in ((15, 0.5), (14, 1.0)):
        psi = base.astype(np.complex128)
        free = (1 / ctx.Delta - 0.25 * W) * psi[j - 1, i - 1] - 0.25 * W * (psi[j - 1, i] + psi[j, i - 1])
        t_right = j - (i - ctx.origin_index) + ctx.nx // 2
        x_mirror = 2 * ctx.origin_index - i + ctx.nx + 1
        x_image = 2 * ctx.origin_index - i + 1
        full = 0.5 * ctx.Gamma * ((psi[t_right, x_image] + psi[t_right, x_image - 1]) / 2
                                  - (psi[t_right, x_mirror] + psi[t_right, x_mirror - 1]) / 2)

        assert kernels.update_cell(psi, j, i)
        correction = psi[j, i] * prefactor - free
        assert correction == pytest.approx(weight * full)
        assert full != 0

def test_two_photon_injection_gets_half_weight_on_the_light_cone():
    # on an empty grid only the injected two-photon input survives
    grid, kernels = _kernels(nx=4, Nx=6, Ny=6, k=0.7)
    ctx = grid.make_context()
    prefactor = 1 / ctx.Delta + 0.25 * ctx.W
    j = ctx.nx

    def injected(i):
        return np.sqrt(ctx.Gamma) * np.exp(1j * ctx.k * ((i - ctx.origin_index) - j - ctx.nx / 2 - j + 0.5) * ctx.Delta)

    for i, weight in ((j + ctx.minus_a_index, 0.5), (j + ctx.minus_a_index - 1, 1.0), (j + ctx.minus_a_index + 1, 0.0)):
        psi = np.zeros((grid.Ny, grid.Ntotal), dtype=np.complex128)
        assert kernels.update_cell(psi, j, i)
        assert psi[j, i] * prefactor == pytest.approx(weight * injected(i), abs=1e-14)

def test_skipped_cells_stay_zero():
    grid, kernels = _kernels(Ny=4)
    psi = np.zeros((grid.Ny, grid.Ntotal), dtype=np.complex128)
    psi[:, :grid.nx + 1] = 1.0
    # next to the second light cone
    j = 1
    i = j + grid.plus_a_index + 1
    assert kernels.update_cell(psi, j, i)
    assert psi[j, i] == 0

def test_update_cell_reports_non_finite_values():
    grid, kernels = _kernels(Ny=3)
    psi = np.zeros((grid.Ny, grid.Ntotal), dtype=np.complex128)
    psi[0, grid.first_column] = np.inf
    assert not kernels.update_cell(psi, 1, grid.first_column + 1)
    # psi[0][first_column] already feeds the first solved cell of row 1
    assert kernels.advance_segment(psi, 1, grid.first_column, grid.Ntotal) == grid.first_column

def test_zero_coupling_is_a_pure_shift():
    params = make_params(Nx=6, Ny=8, Gamma=0.0, w0=0.0, k=0.5)
    grid = Grid(params)
    rng = np.random.default_rng(3)
    psit0 = rng.normal(size=2 * grid.Nx + 1) + 1j * rng.normal(size=2 * grid.Nx + 1)
    psix0 = rng.normal(size=(grid.Ny, grid.nx + 1)) + 1j * rng.normal(size=(grid.Ny, grid.nx + 1))
    grid.load_conditions(psit0, psix0)
    expected = grid.psi.copy()

    backend = get_backend(params, grid)
    backend.advance_rows(1, grid.Ny)

    for j in range(1, grid.Ny):
        for i in range(grid.first_column, grid.Ntotal):
            skipped = (j < grid.nx and i == j + grid.minus_a_index + 1) or i == j + grid.plus_a_index + 1
            expected[j, i] = 0 if skipped else expected[j - 1, i - 1]
    np.testing.assert_allclose(grid.psi, expected, atol=1e-12)

    # every value is the initial strip moved along x=t, except on the skipped diagonals
    j = grid.Ny - 1
    for i in range(grid.first_column + j, grid.Ntotal):
        d = i - j
        if d in (grid.minus_a_index + 1, grid.plus_a_index + 1):
            assert grid.psi[j, i] == 0
        else:
            assert grid.psi[j, i] == pytest.approx(psit0[d - grid.first_column])

# ==============================================================================
# End-to-end against a straightforward reference recursion
# ==============================================================================

def _reference_solution(grid):
    """Plain loops over psi with a plane-wave pair, written out term by term."""
    psi = grid.psi.copy()
    nx, Delta, Gamma, k = grid.nx, grid.Delta, grid.Gamma, grid.k
    m, p, o = grid.minus_a_index, grid.plus_a_index, grid.origin_index
    W = 1j * grid.w0 + Gamma / 2

    def square(t, x):
        return 0 if t < 1 else (psi[t - 1, x - 1] + psi[t - 1, x] + psi[t, x - 1] + psi[t, x]) / 4

    def bar(t, x):
        return 0 if t < 0 else (psi[t, x] + psi[t, x - 1]) / 2

    def chi(x1, x2):
        return np.exp(1j * k * (x1 + x2) * Delta)

    for j in range(1, grid.Ny):
        for i in range(nx + 1, grid.Ntotal):
            if (j < nx and i == j + m + 1) or i == j + p + 1:
                continue
            v = (1 / Delta - W / 4) * psi[j - 1, i - 1] - W / 4 * (psi[j - 1, i] + psi[j, i - 1])
            if j > nx:
                v += Gamma / 2 * square(j - nx, i - nx)
            if i > m and j - i >= -m:
                w = 0.5 if j - i == -m else 1.0
                v -= Gamma / 2 * w * bar(j - (i - o) - nx // 2, 2 * o - i - nx + 1)
                v += Gamma / 2 * w * bar(j - (i - o) - nx // 2, 2 * o - i + 1)
            if i > p and j - i >= -p:
                w = 0.5 if j - i == -p else 1.0
                v -= Gamma / 2 * w * bar(j - (i - o) + nx // 2, 2 * o - i + nx + 1)
                v += Gamma / 2 * w * bar(j - (i - o) + nx // 2, 2 * o - i + 1)
            if j - i >= -m:
                w = 0.5 if j - i == -m else 1.0
                v += np.sqrt(Gamma) * w * chi((i - o) - j, -nx / 2 - j + 0.5)
                if j > nx:
                    v -= np.sqrt(Gamma) * w * chi((i - o) - j, nx / 2 - j + 0.5)
            psi[j, i] = v / (1 / Delta + W / 4)
    return psi

def _solve(params):
    grid = setup_simulation_environment(params)
    reference = _reference_solution(grid)
    backend = get_backend(params, grid)
    scheduler = WavefrontScheduler(params['num_workers'], grid.nx, grid.nx + 1, grid.Ntotal,
                                   segment=params['segment_length'], quiet=True)
    scheduler.run(backend, grid.Ny)
    return grid.psi, reference

@pytest.mark.parametrize("backend, workers, segment", [
    ("python", 1, 1),
    ("numba", 1, 1),
    ("python", 2, 1),
    ("python", 3, 2),
    ("numba", 3, 4),
])
def test_end_to_end_matches_reference(backend, workers, segment):
    psi, reference = _solve(make_params(backend=backend, num_workers=workers, segment_length=segment))
    np.testing.assert_allclose(psi, reference, rtol=0, atol=1e-5)
    assert np.any(psi[1:, 3:] != 0)

@pytest.mark.parametrize("workers, segment", [(2, 1), (4, 1), (3, 5), (4, 64)])
def test_parallel_run_reproduces_sequential_run(workers, segment):
    overrides = dict(nx=4, Nx=8, Ny=24, Delta=0.05, k=1.3, w0=0.9, Gamma=2.0)
    sequential, _ = _solve(make_params(num_workers=1, **overrides))
    parallel, _ = _solve(make_params(num_workers=workers, segment_length=segment, **overrides))
    np.testing.assert_array_equal(parallel, sequential)

def test_first_row_of_the_small_scenario():
    # nx=2, Nx=5, Delta=0.1, k=w0=0, Gamma=1, worked out by hand:
    #   W = 1/2, the prefactor is 1/Delta + W/4 = 10.125
    #   boundary: psi(t) = 2 (1 - exp(-t/2)) for t < 2*td, the initial row is zero
    #   psi[1][3] = (-W/4 * psi[1][2] + 1) / 10.125 with the plane-wave pair input 1
    #   psi[1][4] = (-W/4 * psi[1][3] + 1) / 10.125
    grid = setup_simulation_environment(make_params())
    get_backend(grid.params, grid).advance_rows(1, 2)
    assert grid.psi[1, 2] == pytest.approx(0.0975411509985720, abs=1e-12)
    assert grid.psi[1, 3] == pytest.approx(0.0975612203580423, abs=1e-12)
    assert grid.psi[1, 4] == pytest.approx(0.0975609725881723, abs=1e-12)

@pytest.mark.parametrize("k, w0", [(3.0, 2.0), (0.5, 0.3)])
def test_solution_left_of_the_emitter_follows_the_boundary_closed_form(k, w0):
    # left of x=-a the field is the incident wave times e(t); the recurrence
    # must reproduce the closed form that seeds the boundary strip
    params = make_params(nx=20, Nx=60, Ny=300, Delta=0.02, Gamma=1.5, k=k, w0=w0, backend='numba')
    grid = setup_simulation_environment(params)
    get_backend(params, grid).advance_rows(1, grid.Ny)
    ctx = grid.make_context()

    columns = np.arange(grid.first_column, grid.minus_a_index - 1)
    x = (columns - grid.origin_index) * grid.Delta
    worst = 0.0
    for j in range(grid.Ny):
        t = j * grid.Delta
        exact = np.sqrt(2.0) * np.exp(1j * k * (x - t)) * plane_wave_excitation(j, ctx)
        worst = max(worst, float(np.max(np.abs(grid.psi[j, columns] - exact))))
    assert worst < 1e-2
    assert np.max(np.abs(grid.psi)) < 2.0
