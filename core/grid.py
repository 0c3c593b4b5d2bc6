# delay_fdtd/core/grid.py

import numpy as np
from typing import Dict, Any

from config import sanity_check
from .context import SimulationContext

class Grid:
    """
    Space-time grid of the wavefunction psi(x, t), stored as psi[t][x].

    Layout along x (array index i):

        i = 0 ... nx        boundary strip, x/Delta in [-(Nx+nx+1), -(Nx+1)]
        i = nx+1 ... Ntotal-1  solved region, x/Delta in [-Nx, Nx]

    Row t=0 of the solved region holds the initial condition. The emitter at
    x=-a sits at i=Nx+nx/2+1, its mirror image at x=+a at i=Nx+3nx/2+1,
    the origin at i=Nx+nx+1.
    """
    def __init__(self, params: Dict[str, Any]):
        sanity_check(params)
        self.params = params

        # --- spacetime ---
        self.nx = int(params['nx'])
        self.Nx = int(params['Nx'])
        self.Ntotal = 2 * self.Nx + self.nx + 2
        self.Ny = int(params['Ny'])
        self.Delta = float(params['Delta'])
        self.Lx = 2 * self.Nx * self.Delta
        self.Ly = (self.Ny - 1) * self.Delta
        self.plus_a_index = self.Nx + 3 * self.nx // 2 + 1
        self.minus_a_index = self.Nx + self.nx // 2 + 1
        self.origin_index = self.Nx + self.nx + 1

        # --- physics ---
        self.k = float(params['k'])
        self.w0 = float(params['w0'])
        self.Gamma = float(params['Gamma'])
        self.init_cond = int(params['init_cond'])

        # --- arrays, allocated later ---
        self._buffer = None
        self.psi = None
        self.psit0 = None
        self.psix0 = None

    def make_context(self) -> SimulationContext:
        p = self.params
        alpha = p.get('alpha')
        return SimulationContext(
            nx=self.nx, Nx=self.Nx, Ny=self.Ny, Ntotal=self.Ntotal, Delta=self.Delta,
            k=self.k, w0=self.w0, Gamma=self.Gamma, init_cond=self.init_cond,
            minus_a_index=self.minus_a_index, plus_a_index=self.plus_a_index,
            origin_index=self.origin_index,
            alpha=float(alpha) if alpha is not None else 0.0,
            identical_photons=bool(p.get('identical_photons', True)),
            A=float(p.get('A', 1.0)),
            k1=float(p.get('k1') or 0.0), k2=float(p.get('k2') or 0.0),
            alpha1=float(p.get('alpha1') or 0.0), alpha2=float(p.get('alpha2') or 0.0),
        )

    # --------------------------------------------------------------------------
    # storage
    # --------------------------------------------------------------------------

    def initialize_psi(self):
        """Allocate one flat zeroed buffer and expose it as the (Ny, Ntotal) view psi."""
        try:
            self._buffer = np.zeros(self.Ny * self.Ntotal, dtype=np.complex128)
        except MemoryError as e:
            raise MemoryError(f"initialize_psi: cannot allocate memory for {self.Ny}x{self.Ntotal} grid. Abort!") from e
        self.psi = self._buffer.reshape(self.Ny, self.Ntotal)

    def load_conditions(self, psit0: np.ndarray, psix0: np.ndarray):
        """Copy the boundary strip into the left columns and the initial strip into row 0."""
        if self.psi is None:
            self.initialize_psi()
        if psit0.shape != (2 * self.Nx + 1,):
            raise ValueError(f"shape mismatch: initial strip {psit0.shape} != {(2 * self.Nx + 1,)}")
        if psix0.shape != (self.Ny, self.nx + 1):
            raise ValueError(f"shape mismatch: boundary strip {psix0.shape} != {(self.Ny, self.nx + 1)}")
        self.psit0 = psit0
        self.psix0 = psix0
        self.psi[:, :self.nx + 1] = psix0
        self.psi[0, self.nx + 1:] = psit0

    def free_initial_boundary_conditions(self):
        """Drop the strips once they live in psi."""
        self.psit0 = None
        self.psix0 = None

    def at(self, t: int, x: int) -> complex:
        """Bounds-checked read of psi[t][x]."""
        if not (0 <= t < self.Ny and 0 <= x < self.Ntotal):
            raise IndexError(f"Grid.at: (t={t}, x={x}) is outside the {self.Ny}x{self.Ntotal} grid")
        return self._buffer[t * self.Ntotal + x]

    @property
    def first_column(self) -> int:
        """First column solved by the recurrence (x = -Nx*Delta)."""
        return self.nx + 1

    # --------------------------------------------------------------------------
    # coordinates
    # --------------------------------------------------------------------------

    def x_coords(self) -> np.ndarray:
        """Physical x of every column."""
        return (np.arange(self.Ntotal) - self.origin_index) * self.Delta

    def t_coords(self) -> np.ndarray:
        return np.arange(self.Ny) * self.Delta

    def summary(self) -> str:
        return (f"nx = {self.nx}, Nx = {self.Nx}, Ntotal = {self.Ntotal}, Ny = {self.Ny}, "
                f"Delta = {self.Delta:.3f}, k = {self.k:.3f}, w0 = {self.w0:.3f}, "
                f"Gamma = {self.Gamma:.3f}, Lx = {self.Lx:.3f}, Ly = {self.Ly:.3f}")

    def __repr__(self) -> str:
        return f"Grid(nx={self.nx}, Nx={self.Nx}, Ny={self.Ny}, Delta={self.Delta})"
