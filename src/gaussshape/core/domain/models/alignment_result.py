"""Domain models for shape alignment and screening results."""

from dataclasses import dataclass
from typing import Optional
import numpy as np

from .transformation import FitTransformation, Transformation


def shape_tanimoto(overlap: float, reference_volume: float, fit_volume: float) -> float:
    """Shape Tanimoto: overlap / (ref + fit - overlap), 0 for a non-positive denominator."""
    denominator = reference_volume + fit_volume - overlap
    if denominator <= 0:
        return 0.0
    return overlap / denominator


@dataclass
class AlignmentResult:
    """Contains results from a Gaussian shape alignment."""

    overlap_volume: float
    transformation: Transformation
    fit_transformation: Optional[FitTransformation] = None
    reference_volume: float = 0.0
    fit_volume: float = 0.0

    @property
    def similarity(self) -> float:
        return shape_tanimoto(self.overlap_volume, self.reference_volume, self.fit_volume)

    @property
    def parameters(self) -> np.ndarray:
        return self.transformation.as_vector()


@dataclass
class ScreeningRecord:
    """One database molecule scored against a query."""

    query_name: str
    molecule_name: str
    query_volume: float
    molecule_volume: float
    overlap_volume: float
    elapsed: float = 0.0

    @property
    def similarity(self) -> float:
        return shape_tanimoto(self.overlap_volume, self.query_volume, self.molecule_volume)
