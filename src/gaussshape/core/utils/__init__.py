from .benchmarking import Timer, TimingStats

__all__ = ["Timer", "TimingStats"]
