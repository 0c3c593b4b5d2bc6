# delay_fdtd/core/numba_backend.py

import numpy as np
import numba

from .base import Backend

class NumbaBackend(Backend):
    """Compiles the recurrence kernels with numba; nogil lets scheduler threads run in parallel."""
    def _setup_backend_specifics(self):
        self.jit = numba.njit(nogil=True)

    def setup_computation(self):
        if not self.is_quiet: print("  [Backend Setup] Compiling numba recurrence kernels...")
        self._build_kernels()
        self._compile_kernels()

    def _compile_kernels(self):
        """Trigger compilation on a scratch array so worker threads never compile concurrently."""
        scratch = np.zeros((2, self.context.Ntotal), dtype=np.complex128)
        self.kernels.advance_rows(scratch, 1, 2)
        self.kernels.advance_segment(scratch, 1, self.context.first_column, self.context.first_column + 1)
