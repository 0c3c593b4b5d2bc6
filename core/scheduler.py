# delay_fdtd/core/scheduler.py

import math
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, List, Tuple
from tqdm import tqdm

# ==============================================================================
# Staggered wavefront scheduling
# ==============================================================================
#
# Worker n of a block owns row base+n. In sweep s it solves the segment of
# `segment` columns starting at
#
#     first_column + s * segment - n * stagger
#
# and all workers meet at a barrier before sweep s+1. Row t reads row t-1 up to
# nx-1 columns ahead of the cell being solved (left light cone next to the
# emitter), so the last column of a segment needs row t-1 finished up to
# segment+nx-2 columns past the segment start. Row t-1 is stagger columns ahead
# at the end of the previous sweep, hence stagger >= segment + nx - 1.

def check_stagger(stagger: int, nx: int, segment: int = 1):
    """Precondition of the wavefront scheme: every worker trails the previous one far enough."""
    if segment < 1:
        raise ValueError(f"check_stagger: segment={segment} must be at least 1")
    if stagger < segment + nx - 1:
        raise ValueError(f"check_stagger: stagger={stagger} is smaller than segment+nx-1={segment + nx - 1}; "
                         "workers would read cells before they are written")

class WavefrontScheduler:
    """Drives a backend over rows 1..Ny-1, sequentially or with staggered worker threads."""
    def __init__(self, num_workers: int, nx: int, first_column: int, ntotal: int,
                 stagger: int = None, segment: int = 1, quiet: bool = False):
        self.num_workers = max(1, int(num_workers))
        self.nx = nx
        self.first_column = first_column
        self.ntotal = ntotal
        self.segment = int(segment)
        self.stagger = self.segment + nx - 1 if stagger is None else stagger
        self.is_quiet = quiet
        check_stagger(self.stagger, nx, self.segment)

    # --------------------------------------------------------------------------
    # pure schedule
    # --------------------------------------------------------------------------

    def blocks(self, ny: int) -> Iterator[Tuple[int, int]]:
        """(base_row, rows) for consecutive blocks of at most num_workers rows, starting at t=1."""
        for base in range(1, ny, self.num_workers):
            yield base, min(self.num_workers, ny - base)

    def num_sweeps(self, rows: int) -> int:
        return math.ceil(((self.ntotal - self.first_column) + (rows - 1) * self.stagger) / self.segment)

    def columns(self, rank: int, sweep: int) -> Tuple[int, int]:
        """[start, stop) solved by worker rank in this sweep, clipped to the grid; empty if start >= stop."""
        start = self.first_column + sweep * self.segment - rank * self.stagger
        return max(start, self.first_column), min(start + self.segment, self.ntotal)

    def sweeps(self, base_row: int, rows: int) -> Iterator[List[Tuple[int, int, int, int]]]:
        """For every sweep, the (rank, row, start, stop) assignments of the active workers."""
        for s in range(self.num_sweeps(rows)):
            active = []
            for rank in range(rows):
                start, stop = self.columns(rank, s)
                if start < stop:
                    active.append((rank, base_row + rank, start, stop))
            yield active

    # --------------------------------------------------------------------------
    # execution
    # --------------------------------------------------------------------------

    def run(self, backend, ny: int):
        if self.num_workers <= 1:
            self._run_sequential(backend, ny)
        else:
            self._run_parallel(backend, ny)

    def _run_sequential(self, backend, ny: int):
        for j in tqdm(range(1, ny), desc="  [FDTD] rows", leave=False, disable=self.is_quiet):
            backend.advance_rows(j, j + 1)

    def _worker(self, backend, rank: int, base_row: int, rows: int, barrier: threading.Barrier):
        row = base_row + rank
        try:
            for s in range(self.num_sweeps(rows)):
                start, stop = self.columns(rank, s)
                if start < stop:
                    backend.advance_segment(row, start, stop)
                barrier.wait()
        except threading.BrokenBarrierError:
            raise
        except Exception:
            # release everybody waiting on the barrier so the block stops
            barrier.abort()
            raise

    def _run_parallel(self, backend, ny: int):
        progress_bar = tqdm(total=ny - 1, desc="  [FDTD] rows", leave=False, disable=self.is_quiet)
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            for base_row, rows in self.blocks(ny):
                barrier = threading.Barrier(rows)
                futures = [executor.submit(self._worker, backend, rank, base_row, rows, barrier)
                           for rank in range(rows)]
                errors = [f.exception() for f in futures]
                failures = [e for e in errors if e is not None]
                if failures:
                    progress_bar.close()
                    root_causes = [e for e in failures if not isinstance(e, threading.BrokenBarrierError)]
                    raise (root_causes or failures)[0]
                progress_bar.update(rows)
        progress_bar.close()
