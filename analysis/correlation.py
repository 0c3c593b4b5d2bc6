# delay_fdtd/analysis/correlation.py

import numpy as np
from typing import Iterator, Tuple
from scipy.integrate import trapezoid

def chi_row_range(grid) -> range:
    """
    Time rows j for which chi(a+Delta, a+Delta+tau, t=j*Delta) is well defined:
    j >= Nx+nx/2+1, after the first light cone reaches the boundary x=Nx*Delta.
    """
    return range(grid.Nx + grid.nx // 2 + 1, grid.Ny + 1)

def chi_row(grid, j: int) -> np.ndarray:
    """chi for tau = i*Delta, 0 <= i <= Nx-nx/2, at t = j*Delta."""
    psi = grid.psi
    nx, minus_a, plus_a = grid.nx, grid.minus_a_index, grid.plus_a_index
    tau = np.arange(grid.Nx - nx // 2 + 1)

    plane_wave = np.exp(1j * grid.k * (nx + 2 + tau - 2 * j) * grid.Delta)
    scattered = (psi[j - (nx + tau + 1), minus_a - tau]
                 - psi[j - (tau + 1), plus_a - tau]
                 + psi[j - (nx + 1), minus_a + tau]
                 - psi[j - 1, plus_a + tau])
    return plane_wave - np.sqrt(grid.Gamma) / 2.0 * scattered

def iter_chi_rows(grid) -> Iterator[np.ndarray]:
    """Compute chi row by row, so that nothing beyond one row is stored."""
    for j in chi_row_range(grid):
        yield chi_row(grid, j)

def psi_square_integral(grid) -> Tuple[np.ndarray, np.ndarray]:
    """(t, integral of |psi(x,t)|^2 dx over x/Delta in [-Nx, Nx]) for every time step."""
    density = np.abs(grid.psi[:, grid.nx + 1:]) ** 2
    return grid.t_coords(), trapezoid(density, dx=grid.Delta, axis=1)
