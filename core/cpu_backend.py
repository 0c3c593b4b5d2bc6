# delay_fdtd/core/cpu_backend.py

from .base import Backend

class PythonBackend(Backend):
    """Runs the recurrence kernels as plain Python functions."""
    def _setup_backend_specifics(self):
        self.jit = None

    def setup_computation(self):
        if not self.is_quiet: print("  [Backend Setup] Building plain Python recurrence kernels...")
        self._build_kernels()
