# delay_fdtd/config.py

import math
import os
from typing import Dict, Any

import user_config
from physics.boundaries import boundary_condition_registry
from physics.wavepackets import input_condition_configs

# ==============================================================================
# 1. Parameter schema
# ==============================================================================

def to_bool(text) -> bool:
    if isinstance(text, bool):
        return text
    value = str(text).strip().lower()
    if value in ('1', 'true', 'yes', 'on'):
        return True
    if value in ('0', 'false', 'no', 'off'):
        return False
    raise ValueError(f"cannot interpret '{text}' as a boolean")

# key -> converter; keys without a default must come from the parameter file
PARAMETER_TYPES = {
    # --- grid ---
    'nx': int,
    'Nx': int,
    'Ny': int,
    'Delta': float,
    # --- physics ---
    'k': float,
    'w0': float,
    'Gamma': float,
    'init_cond': int,
    'alpha': float,
    'identical_photons': to_bool,
    'A': float,
    'k1': float,
    'k2': float,
    'alpha1': float,
    'alpha2': float,
    # --- exports ---
    'save_psi': to_bool,
    'save_chi': to_bool,
    'save_psi_abs': to_bool,
    'save_psi_binary': to_bool,
    'save_psi_square_integral': to_bool,
    'plot_psi': to_bool,
    # --- execution ---
    'backend': str,
    'num_workers': int,
    'segment_length': int,
    'quiet_mode': to_bool,
}

REQUIRED_KEYS = ('nx', 'Nx', 'Ny', 'Delta', 'k', 'w0', 'Gamma')

# ==============================================================================
# 2. Defaults
# ==============================================================================

def get_config() -> dict:
    """Return the default settings; the grid and physics keys are left to the parameter file."""
    return {
        # --- execution ---
        'backend': user_config.backend,
        'num_workers': user_config.num_workers,
        'segment_length': user_config.segment_length,
        'quiet_mode': user_config.quiet_mode,

        # --- physics ---
        'init_cond': user_config.init_cond,
        'identical_photons': user_config.identical_photons,
        'A': user_config.A,

        # --- exports ---
        'save_psi': user_config.save_psi,
        'save_chi': user_config.save_chi,
        'save_psi_abs': user_config.save_psi_abs,
        'save_psi_binary': user_config.save_psi_binary,
        'save_psi_square_integral': user_config.save_psi_square_integral,
        'plot_psi': user_config.plot_psi,
    }

# ==============================================================================
# 3. Parameter file
# ==============================================================================

def read_parameter_file(path: str) -> Dict[str, str]:
    """
    Read 'key value' or 'key = value' lines into a dict of raw strings.
    Blank lines and anything after '#' are ignored.
    """
    if not os.path.exists(path):
        raise ValueError(f"read_parameter_file: parameter file '{path}' does not exist")

    raw = {}
    with open(path, 'r') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.split('#', 1)[0].strip()
            if not line:
                continue
            if '=' in line:
                key, value = line.split('=', 1)
            else:
                parts = line.split(None, 1)
                if len(parts) != 2:
                    raise ValueError(f"read_parameter_file: cannot parse line {line_no} of '{path}': '{line}'")
                key, value = parts
            raw[key.strip()] = value.strip()
    return raw

def convert_parameters(raw: Dict[str, Any], quiet: bool = False) -> Dict[str, Any]:
    """Convert raw values with PARAMETER_TYPES; unknown keys are kept as they are."""
    params = {}
    for key, value in raw.items():
        converter = PARAMETER_TYPES.get(key)
        if converter is None:
            if not quiet: print(f"Warning: unknown parameter '{key}' is ignored by the solver.")
            params[key] = value
            continue
        try:
            params[key] = converter(value)
        except ValueError as e:
            raise ValueError(f"convert_parameters: bad value for '{key}': {e}") from e
    return params

def load_parameters(path: str, base: Dict[str, Any] = None) -> Dict[str, Any]:
    """Defaults overlaid with the parameter file."""
    params = (base or get_config()).copy()
    quiet = params.get('quiet_mode', False)
    params.update(convert_parameters(read_parameter_file(path), quiet))
    return params

# ==============================================================================
# 4. Sanity check (runs before any array is allocated)
# ==============================================================================

def sanity_check(params: Dict[str, Any]):
    """Raise ValueError on the first invalid parameter."""
    missing = [key for key in REQUIRED_KEYS if params.get(key) is None]
    if missing:
        raise ValueError(f"sanity_check: required parameter(s) {missing} are not given. Abort!")

    nx, Nx, Ny, Delta = params['nx'], params['Nx'], params['Ny'], params['Delta']

    # nx must be a multiple of 2 so that x=-a and x=+a fall on grid points
    if nx % 2:
        raise ValueError("sanity_check: nx must be an integer multiple of 2. Abort!")
    if nx < 2:
        raise ValueError("sanity_check: nx must be at least 2. Abort!")

    # nx <= 2Nx to reach x>=a
    if nx > 2 * Nx:
        raise ValueError("sanity_check: nx must be smaller than, or at most equal to, twice of Nx (nx<=2Nx). Abort!")

    if Nx < 1:
        raise ValueError("sanity_check: Nx must be at least 1. Abort!")
    if Ny < 2:
        raise ValueError("sanity_check: Ny must be at least 2. Abort!")
    if not Delta > 0:
        raise ValueError("sanity_check: Delta must be positive. Abort!")
    if params['Gamma'] < 0:
        raise ValueError("sanity_check: Gamma must be non-negative. Abort!")

    # Nyquist limit
    if params['k'] >= math.pi / Delta or params['w0'] >= math.pi / Delta:
        raise ValueError("sanity_check: k or w0 must be smaller than pi/Delta in order not to reach the Nyquist limit. Abort!")

    # meaningless to compute without saving any result
    if not params.get('save_chi') and not params.get('save_psi'):
        raise ValueError("sanity_check: either save_chi or save_psi has to be enabled. Abort!")

    init_cond = params.get('init_cond')
    if init_cond not in boundary_condition_registry:
        raise ValueError(f"sanity_check: init_cond has to be one of {sorted(boundary_condition_registry)}. Abort!")
    for key in input_condition_configs[init_cond]['required']:
        if params.get(key) is None:
            raise ValueError(f"sanity_check: {key} is not given. Abort!")
