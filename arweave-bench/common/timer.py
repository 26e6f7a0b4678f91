"""
Monotonic timing helpers.

Instants come from time.perf_counter_ns(), which is unaffected by wall-clock
adjustments. Elapsed times are whole milliseconds; the sub-millisecond
remainder is truncated, never rounded.
"""

import time

from configuration import NANOSECONDS_PER_MILLISECOND
from persistence.record import Measurement


def now() -> int:
    """Return an opaque monotonic instant in nanoseconds."""
    return time.perf_counter_ns()


def elapsed_ms(start: int) -> int:
    """Return whole milliseconds elapsed since start (truncated)."""
    return (now() - start) // NANOSECONDS_PER_MILLISECOND


class Timer:
    """Context manager that times one benchmark phase.

    Example:
        with Timer("upload") as timer:
            await upload()
        record = timer.measurement
    """

    def __init__(self, phase: str):
        self.phase = phase
        self.start = None
        self.measurement = None

    def __enter__(self):
        self.start = now()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.measurement = Measurement(self.phase, self.start, elapsed_ms(self.start))
        return False

    @property
    def elapsed_ms(self) -> int:
        """Elapsed ms so far, or the frozen value once the block has exited."""
        if self.measurement is not None:
            return self.measurement.elapsed_ms
        return elapsed_ms(self.start)
