# src/gaussshape/core/utils/benchmarking.py

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from statistics import median
from typing import Iterator, List


@dataclass
class Timer:
    """Context manager measuring wall-clock time of a block."""

    name: str
    start_time: float = field(default=0.0)
    end_time: float = field(default=0.0)

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        self.end_time = 0.0
        return self

    def __exit__(self, *args) -> None:
        self.end_time = time.perf_counter()

    def elapsed(self) -> float:
        """Seconds since entering, or between entering and leaving the block."""
        end = self.end_time or time.perf_counter()
        return end - self.start_time


@dataclass
class TimingStats:
    """Timings of a repeated operation, e.g. one alignment per database molecule."""

    name: str
    times: List[float] = field(default_factory=list)

    def add_timing(self, elapsed: float) -> None:
        self.times.append(elapsed)

    @contextmanager
    def measure(self, label: str = "") -> Iterator[Timer]:
        """Time a block and record it.

        Args:
            label: Name given to the block's Timer

        Yields:
            The running Timer
        """
        with Timer(label or self.name) as timer:
            yield timer
        self.add_timing(timer.elapsed())

    @property
    def count(self) -> int:
        return len(self.times)

    @property
    def total_time(self) -> float:
        return sum(self.times)

    @property
    def avg_time(self) -> float:
        return self.total_time / self.count if self.times else 0.0

    @property
    def median_time(self) -> float:
        return median(self.times) if self.times else 0.0

    @property
    def min_time(self) -> float:
        return min(self.times, default=0.0)

    @property
    def max_time(self) -> float:
        return max(self.times, default=0.0)

    def __str__(self) -> str:
        if not self.times:
            return f"{self.name}: No timing data"
        return (
            f"{self.name}: Total: {self.total_time:.2f}s, Count: {self.count}, "
            f"Avg: {self.avg_time:.3f}s, Median: {self.median_time:.3f}s, "
            f"Min: {self.min_time:.3f}s, Max: {self.max_time:.3f}s"
        )
