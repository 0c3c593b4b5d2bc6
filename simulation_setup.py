# delay_fdtd/simulation_setup.py

from typing import Dict, Any

from core.grid import Grid
from physics.boundaries import initial_condition, boundary_condition
from physics.wavepackets import input_condition_configs

def _report_configs(grid: Grid, is_quiet: bool):
    if is_quiet: return
    config = input_condition_configs[grid.init_cond]
    print("--- Configuration validated ---")
    print(f"  {grid.summary()}")
    print(f"  init_cond = {grid.init_cond} ({config['name']}): {config['description']}")

def _setup_initial_condition(grid: Grid, is_quiet: bool):
    if not is_quiet: print("--- Preparing the initial condition psi(x, 0) ---")
    return initial_condition(grid.make_context())

def _setup_boundary_condition(grid: Grid, is_quiet: bool):
    if not is_quiet: print("--- Preparing the boundary condition in x<=-(Nx+1)*Delta ---")
    return boundary_condition(grid.make_context(), quiet=is_quiet)

def setup_simulation_environment(params: Dict[str, Any]) -> Grid:
    """
    Validate params, build the grid and fill its initial and boundary strips.
    Nothing is allocated before the sanity check passes.
    """
    is_quiet = params.get('quiet_mode', False)
    grid = Grid(params)
    _report_configs(grid, is_quiet)

    psit0 = _setup_initial_condition(grid, is_quiet)
    psix0 = _setup_boundary_condition(grid, is_quiet)

    grid.initialize_psi()
    grid.load_conditions(psit0, psix0)
    grid.free_initial_boundary_conditions()
    return grid
