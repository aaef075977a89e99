"""Adapter turning a plain callable into an ObjectiveFunction."""

from typing import Callable, Sequence
import numpy as np

from ..interfaces.objective_function import ObjectiveFunction
from ...exceptions import InvalidArgumentError


class FunctionObjective(ObjectiveFunction):
    """Wraps ``func(np.ndarray) -> float`` and counts evaluations."""

    def __init__(self, func: Callable[[np.ndarray], float]):
        if not callable(func):
            raise InvalidArgumentError(f"Objective must be callable, got {type(func).__name__}")
        self._func = func
        self.evaluation_count = 0

    def evaluate(self, params: Sequence[float]) -> float:
        self.evaluation_count += 1
        return float(self._func(np.asarray(params, dtype=float)))
