"""Gaussian shape overlap, alignment and screening of molecules."""

from .core.domain.models.atom import Atom
from .core.domain.models.molecule import Molecule
from .core.domain.models.transformation import Transformation, FitTransformation
from .core.domain.models.alignment_result import AlignmentResult, ScreeningRecord
from .core.domain.implementations.gaussian_volume import GaussianVolume, GaussianVolumeBuilder
from .core.domain.implementations.simplex_optimizer import SimplexOptimizer
from .core.config import AlignmentConfig
from .core.services.alignment_service import AlignmentService
from .core.services.screening_service import ScreeningService

__version__ = "0.1.0"

__all__ = [
    "Atom",
    "Molecule",
    "Transformation",
    "FitTransformation",
    "AlignmentResult",
    "ScreeningRecord",
    "GaussianVolume",
    "GaussianVolumeBuilder",
    "SimplexOptimizer",
    "AlignmentConfig",
    "AlignmentService",
    "ScreeningService",
]
