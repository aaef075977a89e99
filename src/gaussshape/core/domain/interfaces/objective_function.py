"""Interface for scalar objective functions searched by optimizers."""

from abc import ABC, abstractmethod
from typing import Sequence


class ObjectiveFunction(ABC):
    """Abstract base class for functions of a real parameter vector."""

    @abstractmethod
    def evaluate(self, params: Sequence[float]) -> float:
        """
        Evaluate the function.

        Args:
            params: Parameter vector

        Returns:
            Scalar function value
        """
        pass

    def __call__(self, params: Sequence[float]) -> float:
        return self.evaluate(params)
