# delay_fdtd/user_config.py

# ==============================================================================
# User configuration
# Quick knobs for the run; anything here can be overridden by the parameter
# file or on the command line.
# ==============================================================================

# --- Execution ---
# 'numba': compiled kernels (releases the GIL, required for real speed-up with workers)
# 'python': plain Python kernels, handy for debugging
backend = 'numba'

# Worker threads of the wavefront scheduler; 1 runs the rows sequentially.
num_workers = 1

# Columns a worker solves between two barrier waits. Longer segments mean
# fewer synchronizations; the stagger between workers grows to segment+nx-1.
segment_length = 64

# Suppress progress bars and stage reports.
quiet_mode = False

# --- Default physics (used when the parameter file leaves them out) ---
init_cond = 1
identical_photons = True
A = 1.0

# --- Exports ---
save_psi = True
save_chi = False
save_psi_abs = False
save_psi_binary = False
save_psi_square_integral = False
plot_psi = False
