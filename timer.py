# delay_fdtd/timer.py

import time
from contextlib import contextmanager

class SimpleTimer:
    """Named wall-clock accumulators for the stages of a run."""
    def __init__(self):
        self.totals = {}
        self.counts = {}
        self.start_times = {}

    def start(self, name: str):
        self.start_times[name] = time.perf_counter()

    def stop(self, name: str) -> float:
        """Stop a running timer and return the elapsed seconds (0 if it was never started)."""
        if name not in self.start_times:
            return 0.0
        elapsed = time.perf_counter() - self.start_times.pop(name)
        self.totals[name] = self.totals.get(name, 0.0) + elapsed
        self.counts[name] = self.counts.get(name, 0) + 1
        return elapsed

    @contextmanager
    def record(self, name: str):
        self.start(name)
        try:
            yield
        finally:
            self.stop(name)

    def report(self):
        print("\n--- Timing report ---")
        if not self.totals:
            print("Nothing was timed.")
            return

        for name, total_time in sorted(self.totals.items(), key=lambda item: item[1], reverse=True):
            count = self.counts[name]
            print(f"[{name}]: {total_time:.4f} s in {count} call(s), {total_time / count:.4f} s/call")
        print("---------------------\n")
