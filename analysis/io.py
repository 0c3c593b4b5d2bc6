# delay_fdtd/analysis/io.py

import os
import numpy as np
from enum import Enum
from typing import Dict, Any

from .correlation import iter_chi_rows, psi_square_integral

class PsiComponent(Enum):
    REAL = 're'
    IMAG = 'im'
    ABS = 'abs'

# variant -> (extraction function, filename suffix)
PSI_EXPORTS = {
    PsiComponent.REAL: (np.real, '.re.out'),
    PsiComponent.IMAG: (np.imag, '.im.out'),
    PsiComponent.ABS: (np.abs, '.abs.out'),
}

CHI_EXPORTS = {
    PsiComponent.REAL: (np.real, '.re_chi.out'),
    PsiComponent.IMAG: (np.imag, '.im_chi.out'),
    PsiComponent.ABS: (np.abs, '.abs_chi.out'),
}

PSI_PRECISION = '%.5f'
CHI_PRECISION = '%.4f'

class ExportManager:
    """Writes the solved grid and its derived quantities next to the parameter file."""
    def __init__(self, params: Dict[str, Any], grid):
        self.params = params
        self.grid = grid
        self.is_quiet = params.get('quiet_mode', False)

    def save_psi(self, filename: str, component: PsiComponent) -> str:
        """Ny rows of Ntotal values, one row per time step."""
        part, suffix = PSI_EXPORTS[component]
        path = filename + suffix
        np.savetxt(path, part(self.grid.psi), fmt=PSI_PRECISION, delimiter=' ')
        return path

    def save_chi(self, filename: str, component: PsiComponent) -> str:
        """Two-photon wavefunction, computed on the fly row by row."""
        part, suffix = CHI_EXPORTS[component]
        path = filename + suffix
        with open(path, 'w') as f:
            for row in iter_chi_rows(self.grid):
                f.write(' '.join(CHI_PRECISION % value for value in part(row)) + '\n')
        return path

    def save_psi_binary(self, filename: str) -> str:
        path = filename + '.psi.npz'
        g = self.grid
        np.savez_compressed(path, psi=g.psi, nx=g.nx, Nx=g.Nx, Ny=g.Ny, Delta=g.Delta,
                            k=g.k, w0=g.w0, Gamma=g.Gamma)
        return path

    def save_psi_square_integral(self, filename: str) -> str:
        path = filename + '.psi_square_integral.out'
        t, integral = psi_square_integral(self.grid)
        np.savetxt(path, np.column_stack((t, integral)), fmt='%.10f', delimiter=' ')
        return path

    def export_all(self, filename: str) -> list:
        """Write every export enabled in params; returns the written paths."""
        p = self.params
        written = []
        if p.get('save_psi'):
            written.append(self.save_psi(filename, PsiComponent.REAL))
            written.append(self.save_psi(filename, PsiComponent.IMAG))
            if p.get('save_psi_abs'):
                written.append(self.save_psi(filename, PsiComponent.ABS))
        if p.get('save_psi_square_integral'):
            written.append(self.save_psi_square_integral(filename))
        if p.get('save_psi_binary'):
            written.append(self.save_psi_binary(filename))
        if p.get('save_chi'):
            written.append(self.save_chi(filename, PsiComponent.ABS))

        if not self.is_quiet:
            for path in written:
                print(f"  [Export] {os.path.basename(path)}")
        return written

def load_psi(filename: str) -> np.ndarray:
    """Rebuild the complex grid from the .re.out / .im.out pair written by save_psi."""
    real = np.loadtxt(filename + PSI_EXPORTS[PsiComponent.REAL][1], ndmin=2)
    imag = np.loadtxt(filename + PSI_EXPORTS[PsiComponent.IMAG][1], ndmin=2)
    if real.shape != imag.shape:
        raise ValueError(f"shape mismatch: {real.shape} != {imag.shape}")
    return real + 1j * imag

def load_psi_binary(path: str) -> Dict[str, Any]:
    with np.load(path) as data:
        return {key: data[key] for key in data.files}
