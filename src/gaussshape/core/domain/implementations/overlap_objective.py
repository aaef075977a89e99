"""Objective function scoring a rigid transformation by Gaussian overlap."""

from typing import Optional, Sequence

from .gaussian_volume import GaussianVolume
from .precalculation import validate_parameters
from ..interfaces.objective_function import ObjectiveFunction
from ..models.molecule import Molecule
from ..models.transformation import Transformation
from ...exceptions import InvalidArgumentError


class GaussianOverlapObjective(ObjectiveFunction):
    """Overlap volume of a transformed fit molecule against a fixed reference.

    Parameters are ``[tx, ty, tz, rx, ry, rz]``. Each evaluation rotates and
    then translates a fresh copy of the fit molecule, so the wrapped
    molecules are never modified.
    """

    def __init__(
        self,
        reference: Molecule,
        fit: Molecule,
        cutoff: float = 0.0,
        negative: bool = False,
    ):
        """
        Initialize the objective.

        Args:
            reference: Fixed reference molecule
            fit: Molecule moved by the parameters
            cutoff: Gaussian cutoff for the pairwise overlap
            negative: Return the negated overlap so minimizers maximize overlap
        """
        if reference is None or fit is None:
            raise InvalidArgumentError("Reference and fit molecules must not be None")
        self._reference = reference.clone()
        self._fit = fit.clone()
        self._gaussian_cutoff = 0.0
        self._volume: Optional[GaussianVolume] = None
        self.negative = negative
        self.evaluation_count = 0
        self.set_gaussian_cutoff(cutoff)

    @property
    def gaussian_cutoff(self) -> float:
        return self._gaussian_cutoff

    def set_gaussian_cutoff(self, cutoff: float) -> None:
        """Set the cutoff; it is fixed once the first evaluation has run."""
        validate_parameters(cutoff, 1)
        if self._volume is not None:
            raise InvalidArgumentError("Gaussian cutoff cannot change after evaluation started")
        self._gaussian_cutoff = float(cutoff)

    def transformed_fit(self, params: Sequence[float]) -> Molecule:
        """Copy of the fit molecule moved by the parameters."""
        molecule = self._fit.clone()
        Transformation.from_vector(params).apply(molecule)
        return molecule

    def evaluate(self, params: Sequence[float]) -> float:
        if self._volume is None:
            self._volume = GaussianVolume(self._gaussian_cutoff)
        self.evaluation_count += 1
        overlap = self._volume.overlap_volume(self._reference, self.transformed_fit(params))
        return -overlap if self.negative else overlap
