"""Diagnostic record of one simplex iteration."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Tuple


class OperationType(Enum):
    """Branch taken by a simplex iteration."""

    EXTENSION = auto()
    REPLACEMENT = auto()
    CONTRACTION = auto()


@dataclass(frozen=True)
class CourseNode:
    """Lowest vertex after an iteration and the branch that produced it."""

    lowest_point: Tuple[float, ...]
    lowest_value: float
    operation_type: OperationType
    reduced: bool = False
