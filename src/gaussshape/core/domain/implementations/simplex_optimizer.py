"""Multi-start Nelder-Mead simplex minimization."""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import numpy as np

from ..interfaces.objective_function import ObjectiveFunction
from ..models.course_node import CourseNode, OperationType
from ...exceptions import InvalidArgumentError


class SimplexStep(Enum):
    """States of one simplex iteration."""

    REFLECT = auto()
    EXTEND = auto()
    REPLACE = auto()
    CONTRACT = auto()
    REDUCE = auto()


def reflect_point(centroid: np.ndarray, highest: np.ndarray, factor: float) -> np.ndarray:
    return centroid + factor * (centroid - highest)


def extend_point(centroid: np.ndarray, reflected: np.ndarray, factor: float) -> np.ndarray:
    return centroid + factor * (reflected - centroid)


def contract_point(centroid: np.ndarray, baseline: np.ndarray, factor: float) -> np.ndarray:
    return centroid + factor * (baseline - centroid)


def reduce_points(points: np.ndarray, lowest: np.ndarray, factor: float) -> np.ndarray:
    """Shrink every vertex toward the lowest one."""
    return lowest + factor * (points - lowest)


def _is_sequence(value) -> bool:
    if isinstance(value, np.ndarray):
        return value.ndim > 0
    return isinstance(value, (list, tuple))


def classify_reflection(
    reflected_value: float, lowest_value: float, second_highest_value: float
) -> SimplexStep:
    """Choose the step that follows a reflection."""
    if reflected_value < lowest_value:
        return SimplexStep.EXTEND
    if reflected_value <= second_highest_value:
        return SimplexStep.REPLACE
    return SimplexStep.CONTRACT


@dataclass
class Simplex:
    """Vertices of a simplex with their cached function values."""

    points: np.ndarray
    values: np.ndarray

    @property
    def dimension(self) -> int:
        return self.points.shape[1]

    def rank(self) -> Tuple[int, int, int]:
        """Indices of the highest, second highest and lowest vertices."""
        order = np.argsort(self.values, kind="stable")
        return int(order[-1]), int(order[-2]), int(order[0])

    def lowest(self) -> Tuple[np.ndarray, float]:
        index = int(np.argmin(self.values))
        return self.points[index].copy(), float(self.values[index])

    def centroid_without(self, index: int) -> np.ndarray:
        """Mean of all vertices except one."""
        return (self.points.sum(axis=0) - self.points[index]) / self.dimension

    def replace(self, index: int, point: np.ndarray, value: float) -> None:
        self.points[index] = point
        self.values[index] = value


@dataclass
class IterationState:
    simplex: Simplex
    highest: int = -1
    second_highest: int = -1
    lowest: int = -1
    centroid: Optional[np.ndarray] = None
    reflected: Optional[np.ndarray] = None
    reflected_value: float = math.inf
    operation: Optional[OperationType] = None
    reduced: bool = False


@dataclass(frozen=True)
class OptimizationResult:
    """Best vertex found over all initial simplices."""

    point: np.ndarray
    value: float
    group_values: List[float] = field(default_factory=list)


class SimplexOptimizer:
    """Nelder-Mead minimizer run independently from several initial simplices.

    Each group runs a fixed number of iterations; the lowest vertex over
    all groups is the result.
    """

    DEFAULT_REFLECTION_FACTOR = 1.0
    DEFAULT_EXTENSION_FACTOR = 2.0
    DEFAULT_CONTRACTION_FACTOR = 0.5
    DEFAULT_REDUCTION_FACTOR = 0.5

    def __init__(
        self,
        objective: ObjectiveFunction,
        initial_groups: Sequence[Sequence[Sequence[float]]],
    ):
        """
        Initialize the optimizer.

        Args:
            objective: Function to minimize
            initial_groups: Initial simplices, each with dimension + 1 points

        Raises:
            InvalidArgumentError: If the simplices are empty or inconsistent in dimension
        """
        if objective is None:
            raise InvalidArgumentError("Objective function must not be None")
        self._objective = objective
        self._groups = self._validate_groups(initial_groups)
        self._dimension = self._groups[0].shape[1]
        self._reflection_factor = self.DEFAULT_REFLECTION_FACTOR
        self._extension_factor = self.DEFAULT_EXTENSION_FACTOR
        self._contraction_factor = self.DEFAULT_CONTRACTION_FACTOR
        self._reduction_factor = self.DEFAULT_REDUCTION_FACTOR
        self._handlers: Dict[SimplexStep, Callable[[IterationState], Optional[SimplexStep]]] = {
            SimplexStep.REFLECT: self._do_reflection,
            SimplexStep.EXTEND: self._do_extension,
            SimplexStep.REPLACE: self._do_replacement,
            SimplexStep.CONTRACT: self._do_contraction,
            SimplexStep.REDUCE: self._do_reduction,
        }
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _validate_groups(initial_groups) -> List[np.ndarray]:
        if initial_groups is None or len(initial_groups) == 0:
            raise InvalidArgumentError("At least one initial simplex is required")
        if not _is_sequence(initial_groups[0]):
            raise InvalidArgumentError("Dimension not match: group 0 is not a list of points")
        dimension = len(initial_groups[0]) - 1
        if dimension < 1:
            raise InvalidArgumentError("Initial simplex needs at least 2 points")

        groups = []
        for group_index, group in enumerate(initial_groups):
            if not _is_sequence(group) or len(group) != dimension + 1:
                raise InvalidArgumentError(
                    f"Dimension not match: group {group_index} is not a list of "
                    f"{dimension + 1} points"
                )
            for point in group:
                if not _is_sequence(point) or len(point) != dimension:
                    raise InvalidArgumentError(
                        f"Dimension not match: group {group_index} has point {point!r}, "
                        f"expected {dimension} coordinates"
                    )
            try:
                groups.append(np.array(group, dtype=float))
            except (TypeError, ValueError) as e:
                raise InvalidArgumentError(
                    f"Dimension not match: group {group_index} has non-numeric coordinates"
                ) from e
        return groups

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def reflection_factor(self) -> float:
        return self._reflection_factor

    @reflection_factor.setter
    def reflection_factor(self, factor: float) -> None:
        if not (math.isfinite(factor) and factor > 0):
            raise InvalidArgumentError(f"Reflection factor must be positive, got {factor}")
        self._reflection_factor = float(factor)

    @property
    def extension_factor(self) -> float:
        return self._extension_factor

    @extension_factor.setter
    def extension_factor(self, factor: float) -> None:
        if not (math.isfinite(factor) and factor > 1.0):
            raise InvalidArgumentError(f"Extension factor must be > 1, got {factor}")
        self._extension_factor = float(factor)

    @property
    def contraction_factor(self) -> float:
        return self._contraction_factor

    @contraction_factor.setter
    def contraction_factor(self, factor: float) -> None:
        if not 0 < factor < 1:
            raise InvalidArgumentError(f"Contraction factor must be in (0, 1), got {factor}")
        self._contraction_factor = float(factor)

    @property
    def reduction_factor(self) -> float:
        return self._reduction_factor

    @reduction_factor.setter
    def reduction_factor(self, factor: float) -> None:
        if not 0 < factor < 1:
            raise InvalidArgumentError(f"Reduction factor must be in (0, 1), got {factor}")
        self._reduction_factor = float(factor)

    def run_optimization(self, max_iterations: int) -> OptimizationResult:
        """
        Minimize from every initial simplex.

        Args:
            max_iterations: Iterations per initial simplex

        Returns:
            OptimizationResult with the lowest point and value over all groups
        """
        self._check_iterations(max_iterations)
        best_point: Optional[np.ndarray] = None
        best_value = math.inf
        group_values = []

        for group_index, group in enumerate(self._groups):
            simplex = self.initial_simplex(group)
            for _ in range(max_iterations):
                self.iterate(simplex)
            point, value = simplex.lowest()
            group_values.append(value)
            self.logger.debug(f"Simplex group {group_index} finished at {value:.6g}")
            if best_point is None or value < best_value:
                best_point, best_value = point, value

        return OptimizationResult(point=best_point, value=best_value, group_values=group_values)

    def trace_optimization(self, max_iterations: int) -> List[List[CourseNode]]:
        """Run every group and record the lowest vertex and branch of each iteration."""
        self._check_iterations(max_iterations)
        trajectories = []
        for group in self._groups:
            simplex = self.initial_simplex(group)
            trajectory = []
            for _ in range(max_iterations):
                state = self.iterate(simplex)
                point, value = simplex.lowest()
                trajectory.append(
                    CourseNode(
                        lowest_point=tuple(point.tolist()),
                        lowest_value=value,
                        operation_type=state.operation,
                        reduced=state.reduced,
                    )
                )
            trajectories.append(trajectory)
        return trajectories

    def initial_simplex(self, group: np.ndarray) -> Simplex:
        points = np.array(group, dtype=float)
        return Simplex(points=points, values=self._evaluate_all(points))

    def iterate(self, simplex: Simplex) -> IterationState:
        """Apply one reflect / extend / replace / contract / reduce cycle in place."""
        state = IterationState(simplex=simplex)
        state.highest, state.second_highest, state.lowest = simplex.rank()
        state.centroid = simplex.centroid_without(state.highest)

        step: Optional[SimplexStep] = SimplexStep.REFLECT
        while step is not None:
            step = self._handlers[step](state)
        return state

    def _do_reflection(self, state: IterationState) -> SimplexStep:
        simplex = state.simplex
        state.reflected = reflect_point(
            state.centroid, simplex.points[state.highest], self._reflection_factor
        )
        state.reflected_value = self._evaluate(state.reflected)
        return classify_reflection(
            state.reflected_value,
            simplex.values[state.lowest],
            simplex.values[state.second_highest],
        )

    def _do_extension(self, state: IterationState) -> None:
        state.operation = OperationType.EXTENSION
        extended = extend_point(state.centroid, state.reflected, self._extension_factor)
        extended_value = self._evaluate(extended)
        if extended_value < state.reflected_value:
            state.simplex.replace(state.highest, extended, extended_value)
        else:
            state.simplex.replace(state.highest, state.reflected, state.reflected_value)
        return None

    def _do_replacement(self, state: IterationState) -> None:
        state.operation = OperationType.REPLACEMENT
        state.simplex.replace(state.highest, state.reflected, state.reflected_value)
        return None

    def _do_contraction(self, state: IterationState) -> Optional[SimplexStep]:
        state.operation = OperationType.CONTRACTION
        simplex = state.simplex
        if simplex.values[state.highest] < state.reflected_value:
            baseline = simplex.points[state.highest].copy()
            baseline_value = simplex.values[state.highest]
        else:
            baseline = state.reflected
            baseline_value = state.reflected_value

        contracted = contract_point(state.centroid, baseline, self._contraction_factor)
        contracted_value = self._evaluate(contracted)
        if contracted_value <= baseline_value:
            simplex.replace(state.highest, contracted, contracted_value)
            return None
        return SimplexStep.REDUCE

    def _do_reduction(self, state: IterationState) -> None:
        state.reduced = True
        simplex = state.simplex
        lowest = simplex.points[state.lowest].copy()
        simplex.points = reduce_points(simplex.points, lowest, self._reduction_factor)
        simplex.values = self._evaluate_all(simplex.points)
        return None

    def _evaluate(self, point: np.ndarray) -> float:
        return float(self._objective.evaluate(point))

    def _evaluate_all(self, points: np.ndarray) -> np.ndarray:
        return np.array([self._evaluate(point) for point in points], dtype=float)

    @staticmethod
    def _check_iterations(max_iterations: int) -> None:
        if max_iterations is None or max_iterations <= 0:
            raise InvalidArgumentError(f"Max iterations must be positive, got {max_iterations}")
