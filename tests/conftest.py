# delay_fdtd/tests/conftest.py

import pytest

from config import get_config

def make_params(**overrides) -> dict:
    """Small plane-wave run with plain Python kernels and no console output."""
    params = get_config()
    params.update({
        'nx': 2, 'Nx': 5, 'Ny': 5, 'Delta': 0.1,
        'k': 0.0, 'w0': 0.0, 'Gamma': 1.0,
        'init_cond': 1,
        'backend': 'python',
        'num_workers': 1,
        'quiet_mode': True,
    })
    params.update(overrides)
    return params

@pytest.fixture
def params():
    return make_params()
