"""Gaussian volume engine, objectives and the simplex optimizer."""

from .precalculation import MoleculePrecalculation, Precalculation
from .gaussian_volume import GaussianVolume, GaussianVolumeBuilder
from .function_objective import FunctionObjective
from .overlap_objective import GaussianOverlapObjective
from .simplex_optimizer import OptimizationResult, SimplexOptimizer

__all__ = [
    "MoleculePrecalculation",
    "Precalculation",
    "GaussianVolume",
    "GaussianVolumeBuilder",
    "FunctionObjective",
    "GaussianOverlapObjective",
    "OptimizationResult",
    "SimplexOptimizer",
]
