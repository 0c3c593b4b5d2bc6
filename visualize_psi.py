# delay_fdtd/visualize_psi.py

import argparse
import os
import sys
import numpy as np
import matplotlib.pyplot as plt

_current_file_dir = os.path.dirname(os.path.abspath(__file__))
if _current_file_dir not in sys.path:
    sys.path.insert(0, _current_file_dir)

from analysis.io import load_psi_binary

PARTS = {
    're': (np.real, 'Re psi'),
    'im': (np.imag, 'Im psi'),
    'abs': (np.abs, '|psi|'),
    'abs2': (lambda z: np.abs(z) ** 2, '|psi|^2'),
}

def visualize_psi_file(filepath: str, part: str = 'abs', cmap: str = 'inferno', use_log_scale: bool = False, save_path: str = None):
    """
    Load a .psi.npz written by the solver and draw one component of psi(x,t)
    as a heat map in physical coordinates.
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"file '{filepath}' does not exist")

    data = load_psi_binary(filepath)
    psi = data['psi']
    nx, Nx, Delta = int(data['nx']), int(data['Nx']), float(data['Delta'])
    extract, label = PARTS[part]
    values = extract(psi)

    print(f"\n--- File info: {os.path.basename(filepath)} ---")
    print(f"  - shape (Ny, Ntotal): {psi.shape}")
    print(f"  - nx = {nx}, Nx = {Nx}, Delta = {Delta}")
    print(f"  - max {label}: {np.max(values):.6f}")
    print(f"  - min {label}: {np.min(values):.6f}")

    log_info = ""
    if use_log_scale:
        values = np.log1p(np.abs(values))
        log_info = " (log scale)"

    origin_index = Nx + nx + 1
    ny, ntotal = psi.shape
    extent = [(-origin_index - 0.5) * Delta, (ntotal - 1 - origin_index + 0.5) * Delta,
              -0.5 * Delta, (ny - 0.5) * Delta]

    fig, ax = plt.subplots(figsize=(10, 8))
    im = ax.imshow(values, cmap=cmap, origin='lower', aspect='auto', extent=extent)
    fig.colorbar(im, ax=ax)
    ax.set_title(f"{label}{log_info} - {os.path.basename(filepath)}", fontsize=14)
    ax.set_xlabel("x")
    ax.set_ylabel("t")
    fig.tight_layout()

    if save_path:
        output_dir = os.path.dirname(save_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        fig.savefig(save_path, dpi=150)
        print(f"Figure saved to: {save_path}")
    else:
        plt.show()
    plt.close(fig)

if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Heat map of a wavefunction saved with save_psi_binary.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument("filepath", type=str, help="path of the .psi.npz file")
    parser.add_argument("--part", type=str, default="abs", choices=list(PARTS), help="component to draw")
    parser.add_argument("--cmap", type=str, default="inferno", help="matplotlib colormap")
    parser.add_argument("--log", action="store_true", help="draw log(1+|value|)")
    parser.add_argument("--save", type=str, default=None, help="save the figure instead of showing it")

    args = parser.parse_args()
    visualize_psi_file(args.filepath, args.part, args.cmap, args.log, args.save)
