# delay_fdtd/core/context.py

from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationContext:
    """
    Immutable constants of one run, handed to every recurrence kernel.

    Replaces process-wide state: the kernels are built from a context and
    capture its values, so two grids never share a coupling constant.
    """
    nx: int
    Nx: int
    Ny: int
    Ntotal: int
    Delta: float
    k: float
    w0: float
    Gamma: float
    init_cond: int
    minus_a_index: int
    plus_a_index: int
    origin_index: int
    alpha: float = 0.0
    identical_photons: bool = True
    A: float = 1.0
    k1: float = 0.0
    k2: float = 0.0
    alpha1: float = 0.0
    alpha2: float = 0.0

    @property
    def W(self) -> complex:
        """W = i*w0 + Gamma/2, the complex decay/drive rate."""
        return 1j * self.w0 + 0.5 * self.Gamma

    @property
    def first_column(self) -> int:
        """First column solved by the recurrence (x = -Nx*Delta)."""
        return self.nx + 1

    @property
    def td(self) -> float:
        """Delay time nx*Delta."""
        return self.nx * self.Delta
