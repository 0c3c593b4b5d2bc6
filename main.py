# delay_fdtd/main.py

import sys
import os
import argparse

# --- project path ---
_current_file_dir = os.path.dirname(os.path.abspath(__file__))
if _current_file_dir not in sys.path:
    sys.path.insert(0, _current_file_dir)

# --- modules ---
from config import PARAMETER_TYPES, get_config, load_parameters, to_bool
from simulation import Simulation
from simulation_setup import setup_simulation_environment
from timer import SimpleTimer

def solve(filename: str, params: dict) -> list:
    """Prepare the grid, run the recursion and write the enabled exports."""
    is_quiet = params.get('quiet_mode', False)
    timer = SimpleTimer()

    if not is_quiet: print("FDTD: preparing the grid...")
    with timer.record("grid preparation"):
        grid = setup_simulation_environment(params)

    sim = Simulation(params, grid, timer)
    sim.run()
    written = sim.export(filename)

    if not is_quiet: timer.report()
    return written

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="FDTD: solving the 1+1D delay PDE of a photon scattering off an emitter in front of a mirror.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument('input_parameters', type=str, help='parameter file ("key value" per line); outputs are named after it')

    # every parameter can also be given on the command line
    for key, converter in PARAMETER_TYPES.items():
        arg_name = f'--{key.replace("_", "-")}'
        if converter is to_bool:
            parser.add_argument(arg_name, dest=key, action=argparse.BooleanOptionalAction, default=None)
        else:
            parser.add_argument(arg_name, dest=key, type=converter, default=None, help=f'override {key}')
    return parser

def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        params = load_parameters(args.input_parameters, get_config())
        for key, value in vars(args).items():
            if value is not None and key != 'input_parameters':
                params[key] = value
        is_quiet = params.get('quiet_mode', False)

        if not is_quiet:
            print("FDTD: solving 1+1D delay PDE")
            print("\n" + "=" * 60)
            print("[Runtime Configuration Report]")
            print("-" * 60)
            for key in sorted(params.keys()):
                print(f"{key:<35}: {params[key]}")
            print("=" * 60 + "\n")

        solve(args.input_parameters, params)
    except (ValueError, IndexError, FloatingPointError, MemoryError) as e:
        print(f"FDTD: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    if not is_quiet: print("FDTD: done.")
    return 0

if __name__ == "__main__":
    sys.exit(main())
