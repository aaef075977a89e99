"""Core domain models, engine and services for Gaussian shape comparison."""

from .domain.models.molecule import Molecule
from .domain.models.alignment_result import AlignmentResult
from .domain.interfaces.objective_function import ObjectiveFunction
from .services.alignment_service import AlignmentService
from .services.screening_service import ScreeningService

__all__ = [
    "Molecule",
    "AlignmentResult",
    "ObjectiveFunction",
    "AlignmentService",
    "ScreeningService",
]
