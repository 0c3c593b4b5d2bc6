# delay_fdtd/simulation.py

from typing import Dict, Any

from core.backends import get_backend
from core.grid import Grid
from core.scheduler import WavefrontScheduler
from analysis.io import ExportManager
from analysis.visualization import VisualizationManager
from timer import SimpleTimer

class Simulation:
    def __init__(self, params: Dict[str, Any], grid: Grid, timer: SimpleTimer = None):
        self.params = params
        self.grid = grid
        self.is_quiet = self.params.get('quiet_mode', False)
        self.timer = timer or SimpleTimer()

        if not self.is_quiet: print("\n--- Initializing the solver ---")
        with self.timer.record("kernel setup"):
            self.backend = get_backend(self.params, self.grid)

        context = self.backend.context
        self.scheduler = WavefrontScheduler(
            num_workers=self.params.get('num_workers', 1),
            nx=context.nx,
            first_column=context.first_column,
            ntotal=context.Ntotal,
            segment=self.params.get('segment_length', 1),
            quiet=self.is_quiet,
        )

        self.export_manager = ExportManager(self.params, self.grid)
        self.viz_manager = VisualizationManager(self.params, self.grid)

    def run(self) -> Grid:
        """Fill every row t>=1 of the grid."""
        if not self.is_quiet:
            workers = self.scheduler.num_workers
            mode = "sequential" if workers <= 1 else f"{workers} staggered workers"
            print(f"--- Simulation starts ({self.params.get('backend', 'numba')} backend, {mode}) ---")
        with self.timer.record("recursion"):
            self.scheduler.run(self.backend, self.grid.Ny)
        return self.grid

    def export(self, filename: str) -> list:
        """Write the results enabled in params next to filename."""
        if not self.is_quiet: print("--- Writing results to files ---")
        with self.timer.record("export"):
            written = self.export_manager.export_all(filename)
            if self.params.get('plot_psi'):
                written.append(self.viz_manager.plot_psi(filename))
        return written
