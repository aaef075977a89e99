"""Domain model classes."""

from .atom import Atom
from .molecule import Molecule
from .radius_table import AtomRadiusTable
from .transformation import Transformation, FitTransformation
from .course_node import CourseNode, OperationType
from .alignment_result import AlignmentResult, ScreeningRecord

__all__ = [
    "Atom",
    "Molecule",
    "AtomRadiusTable",
    "Transformation",
    "FitTransformation",
    "CourseNode",
    "OperationType",
    "AlignmentResult",
    "ScreeningRecord",
]
