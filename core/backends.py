# delay_fdtd/core/backends.py

from typing import Dict, Any

from .base import Backend
from .cpu_backend import PythonBackend
from .numba_backend import NumbaBackend

backend_registry = {
    'python': PythonBackend,
    'numba': NumbaBackend,
}

def get_backend(params: Dict[str, Any], grid) -> Backend:
    """
    Backend factory.
    Creates the backend named by params['backend'] and builds its kernels.
    """
    name = params.get('backend', 'numba')
    if name not in backend_registry:
        raise ValueError(f"get_backend: backend '{name}' does not exist. Available: {list(backend_registry)}")
    backend = backend_registry[name](params, grid)
    backend.setup_computation()
    return backend
