"""Service for Gaussian shape alignment of molecules."""

from typing import List, Optional
import logging
import numpy as np

from ..config import AlignmentConfig
from ..domain.implementations.gaussian_volume import GaussianVolume, GaussianVolumeBuilder
from ..domain.implementations.overlap_objective import GaussianOverlapObjective
from ..domain.implementations.simplex_optimizer import SimplexOptimizer
from ..domain.models.alignment_result import AlignmentResult
from ..domain.models.molecule import Molecule
from ..domain.models.transformation import FitTransformation, Transformation
from ..exceptions import EmptyMoleculeError, InvalidArgumentError


class AlignmentService:
    """Service maximizing the Gaussian overlap of a fit molecule onto a reference."""

    DIMENSIONS = Transformation.DIMENSIONS

    def __init__(
        self,
        config: Optional[AlignmentConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize service with search parameters.

        Args:
            config: Alignment parameters, defaults when omitted
            rng: Random generator for initial simplices, seeded from config.seed when omitted
        """
        self._config = config or AlignmentConfig()
        self._rng = rng if rng is not None else np.random.default_rng(self._config.seed)
        self.logger = logging.getLogger(__name__)

    @property
    def config(self) -> AlignmentConfig:
        return self._config

    def configure(self, config: AlignmentConfig) -> None:
        self._config = config

    def parameters(self):
        """Current configuration as parameter-file names and values."""
        return self._config.to_parameters()

    def generate_initial_groups(
        self, n_groups: int, n_points: Optional[int] = None
    ) -> List[np.ndarray]:
        """
        Random initial simplices in transformation space.

        Args:
            n_groups: Number of simplices
            n_points: Points per simplex, dimension + 1 by default

        Raises:
            InvalidArgumentError: If n_groups is not positive or n_points is below dimension + 1

        Returns:
            List of arrays of shape (n_points, 6): translations uniform in
            [-translation_range, translation_range], rotations uniform in [-pi, pi]
        """
        if n_groups <= 0:
            raise InvalidArgumentError(f"Number of groups must be positive, got {n_groups}")
        if n_points is None:
            n_points = self.DIMENSIONS + 1
        elif n_points < self.DIMENSIONS + 1:
            raise InvalidArgumentError(
                f"A simplex needs at least {self.DIMENSIONS + 1} points, got {n_points}"
            )
        scale = np.array([self._config.translation_range] * 3 + [np.pi] * 3)
        return [
            self._rng.uniform(-1.0, 1.0, size=(n_points, self.DIMENSIONS)) * scale
            for _ in range(n_groups)
        ]

    def evaluate_volume(self, molecule: Molecule) -> float:
        """Pairwise Gaussian self-overlap volume of a molecule."""
        self._require_atoms(molecule, "molecule")
        return GaussianVolume(self._config.gaussian_cutoff).self_volume(molecule)

    def evaluate_max_overlap(
        self,
        reference: Molecule,
        fit: Molecule,
        reference_volume: Optional[float] = None,
    ) -> AlignmentResult:
        """
        Search rigid transformations of the fit molecule for maximum overlap.

        Both molecules are centred before the search, so the optimal
        transformation is relative to the centroids; the returned
        FitTransformation maps the original fit coordinates.

        Args:
            reference: Reference (query) molecule
            fit: Fit (database) molecule
            reference_volume: Self-overlap of the reference when already known,
                e.g. a query screened against a whole database

        Returns:
            AlignmentResult with the overlap, transformation and volumes
        """
        self._require_atoms(reference, "reference")
        self._require_atoms(fit, "fit")

        centred_reference = reference.clone()
        centred_reference.move_to_centroid()
        centred_fit = fit.clone()
        centred_fit.move_to_centroid()

        objective = GaussianOverlapObjective(
            centred_reference,
            centred_fit,
            cutoff=self._config.gaussian_cutoff,
            negative=True,
        )
        optimizer = SimplexOptimizer(
            objective, self.generate_initial_groups(self._config.initial_groups)
        )
        optimizer.reflection_factor = self._config.reflection_factor
        optimizer.extension_factor = self._config.extension_factor
        optimizer.contraction_factor = self._config.contraction_factor
        optimizer.reduction_factor = self._config.reduction_factor

        result = optimizer.run_optimization(self._config.max_iterations)
        transformation = Transformation.from_vector(result.point)
        overlap = abs(result.value)
        self.logger.info(
            f"Aligned {fit.name or 'fit'} onto {reference.name or 'reference'}: "
            f"overlap {overlap:.3f} after {objective.evaluation_count} evaluations"
        )

        return AlignmentResult(
            overlap_volume=overlap,
            transformation=transformation,
            fit_transformation=FitTransformation(
                fit_centroid=tuple(fit.centroid()),
                transformation=transformation,
                reference_centroid=tuple(reference.centroid()),
            ),
            reference_volume=(
                self.evaluate_volume(reference) if reference_volume is None else reference_volume
            ),
            fit_volume=self.evaluate_volume(fit),
        )

    def evaluate_refined_overlap(
        self,
        reference: Molecule,
        fit: Molecule,
        transformation: Optional[FitTransformation] = None,
    ) -> float:
        """
        Inclusion-exclusion overlap of two molecules.

        Args:
            reference: Reference molecule
            fit: Fit molecule
            transformation: Applied to a copy of the fit molecule first, if given

        Returns:
            Overlap volume truncated at the configured max intersection order
        """
        self._require_atoms(reference, "reference")
        self._require_atoms(fit, "fit")
        builder = GaussianVolumeBuilder(reference, fit)
        builder.set_gaussian_cutoff(self._config.gaussian_cutoff)
        builder.set_max_intersection_order(self._config.max_intersection_order)

        moved_fit = None
        if transformation is not None:
            moved_fit = fit.clone()
            transformation.apply(moved_fit)
        return builder.build(moved_fit).refined_overlap_volume()

    @staticmethod
    def _require_atoms(molecule: Molecule, label: str) -> None:
        if molecule is None:
            raise InvalidArgumentError(f"{label} must not be None")
        if molecule.atom_count == 0:
            raise EmptyMoleculeError(f"Empty molecule: {label}")
