# delay_fdtd/analysis/visualization.py

import os
import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from typing import Dict, Any

class VisualizationManager:
    """Heat maps of the solved wavefunction."""
    def __init__(self, params: Dict[str, Any], grid):
        self.params = params
        self.grid = grid
        self.is_quiet = params.get('quiet_mode', False)

    def plot_psi(self, filename: str, cmap: str = 'inferno') -> str:
        """Save |psi(x,t)| with the emitter, its mirror image and the light cones marked."""
        g = self.grid
        x = g.x_coords()
        extent = [x[0] - 0.5 * g.Delta, x[-1] + 0.5 * g.Delta, -0.5 * g.Delta, g.Ly + 0.5 * g.Delta]

        fig, ax = plt.subplots(figsize=(10, 8))
        im = ax.imshow(np.abs(g.psi), cmap=cmap, origin='lower', aspect='auto', extent=extent)
        fig.colorbar(im, ax=ax, label=r'$|\psi(x,t)|$')

        a = 0.5 * g.nx * g.Delta
        for x_mirror, label in ((-a, r'$x=-a$'), (a, r'$x=+a$')):
            ax.axvline(x_mirror, color='white', lw=0.8, ls='--')
            ax.plot([x_mirror, x[-1]], [0.0, x[-1] - x_mirror], color='cyan', lw=0.6)
            ax.text(x_mirror, g.Ly, label, color='white', ha='center', va='bottom')
        ax.axvline(x[g.nx] + 0.5 * g.Delta, color='gray', lw=0.8)

        ax.set_xlim(extent[0], extent[1])
        ax.set_ylim(extent[2], extent[3])
        ax.set_xlabel('x')
        ax.set_ylabel('t')
        ax.set_title(f"|psi|: k={g.k:.3f}, w0={g.w0:.3f}, Gamma={g.Gamma:.3f}, 2a={g.nx * g.Delta:.3f}")
        fig.tight_layout()

        path = filename + '.abs.png'
        output_dir = os.path.dirname(path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        fig.savefig(path, dpi=150)
        plt.close(fig)
        if not self.is_quiet: print(f"  [Plot] {os.path.basename(path)}")
        return path
