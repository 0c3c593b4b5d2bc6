# delay_fdtd/core/base.py

from abc import ABC, abstractmethod
from typing import Dict, Any

from .kernels import create_recurrence_kernels

class Backend(ABC):
    """
    Abstract recurrence backend.
    Concrete backends only decide how the shared kernel source is compiled;
    advancing the grid and the fault reporting live here.
    """
    def __init__(self, params: Dict[str, Any], grid):
        self.params = params
        self.grid = grid
        self.context = grid.make_context()
        self.is_quiet = params.get('quiet_mode', False)
        self.kernels = None
        self.jit = None     # set by subclasses: None (plain Python) or a numba decorator
        self._setup_backend_specifics()

    @abstractmethod
    def _setup_backend_specifics(self):
        """Set backend specific attributes such as self.jit."""
        pass

    @abstractmethod
    def setup_computation(self):
        """Build (and compile, if needed) the recurrence kernels."""
        pass

    def _build_kernels(self):
        self.kernels = create_recurrence_kernels(self.context, self.jit)

    def advance_rows(self, j_start: int, j_stop: int):
        """Solve rows [j_start, j_stop) in causal order."""
        j, i = self.kernels.advance_rows(self.grid.psi, j_start, j_stop)
        if j >= 0:
            raise FloatingPointError(f"recurrence: non-finite value is produced (at j={j} and i={i}). Abort!")

    def advance_segment(self, j: int, i_start: int, i_stop: int):
        """Solve columns [i_start, i_stop) of row j."""
        i = self.kernels.advance_segment(self.grid.psi, j, i_start, i_stop)
        if i >= 0:
            raise FloatingPointError(f"recurrence: non-finite value is produced (at j={j} and i={i}). Abort!")
