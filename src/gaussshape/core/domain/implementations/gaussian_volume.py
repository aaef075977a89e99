"""Analytic Gaussian overlap volumes between atom sets."""

import logging
from typing import Optional, Sequence, Tuple
import numpy as np

from .precalculation import (
    GAUSSIAN_P,
    AtomIds,
    AtomSource,
    Precalculation,
    atom_arrays,
    gaussian_alpha,
    is_intersected_by_cross_neighbors,
    is_intersected_by_monotone_neighbors,
    neighbor_mask,
    square_distances,
    validate_parameters,
)
from ..models.molecule import Molecule
from ...exceptions import InternalInvariantError, InvalidArgumentError

logger = logging.getLogger(__name__)


def pair_overlap_volume(alpha_i, alpha_j, square_distance):
    """Overlap volume of two atom Gaussians.

    Args:
        alpha_i: Width of the first Gaussian
        alpha_j: Width of the second Gaussian
        square_distance: Squared distance between the centres

    Returns:
        8 * exp(-a_i a_j d^2 / (a_i + a_j)) * (pi / (a_i + a_j)) ** 1.5
    """
    alpha_sum = alpha_i + alpha_j
    k = np.exp(-(alpha_i * alpha_j * square_distance) / alpha_sum)
    return 8.0 * k * (np.pi / alpha_sum) ** 1.5


def intersection_volume(
    ids_a: AtomIds,
    ids_b: AtomIds,
    alphas_a: np.ndarray,
    alphas_b: np.ndarray,
    sq_dist_aa: np.ndarray,
    sq_dist_bb: np.ndarray,
    sq_dist_ab: np.ndarray,
) -> float:
    """Volume of the product of Gaussians for atoms ``ids_a`` of set A and ``ids_b`` of set B."""
    a = np.asarray(ids_a, dtype=int)
    b = np.asarray(ids_b, dtype=int)
    weights_a = alphas_a[a]
    weights_b = alphas_b[b]
    delta = weights_a.sum() + weights_b.sum()

    # Diagonals are zero, so halving the full sum leaves the i < i' pairs.
    k = 0.5 * (np.outer(weights_a, weights_a) * sq_dist_aa[np.ix_(a, a)]).sum()
    k += 0.5 * (np.outer(weights_b, weights_b) * sq_dist_bb[np.ix_(b, b)]).sum()
    k += (np.outer(weights_a, weights_b) * sq_dist_ab[np.ix_(a, b)]).sum()

    return float(
        GAUSSIAN_P ** (len(a) + len(b)) * np.exp(-k / delta) * (np.pi / delta) ** 1.5
    )


def term_sign(order_a: int, order_b: int) -> int:
    """Inclusion-exclusion sign: positive when the total number of atoms is even."""
    return 1 if (order_a + order_b) % 2 == 0 else -1


class GaussianVolume:
    """Gaussian overlap volume engine.

    Used directly, :meth:`overlap_volume` sums pairwise atom overlaps within
    the cutoff. Built with :meth:`from_precalculation`, the engine also
    evaluates truncated inclusion-exclusion over intersecting atom subsets.
    """

    def __init__(self, cutoff: float = 0.0):
        """
        Initialize the engine.

        Args:
            cutoff: Extra distance beyond the radii sum within which atoms overlap
        """
        self._cutoff = 0.0
        self.cutoff = cutoff
        self._precalculation: Optional[Precalculation] = None
        self._cross_square_distances: Optional[np.ndarray] = None
        self._cross_neighbors: Tuple[frozenset, ...] = ()

    @property
    def cutoff(self) -> float:
        return self._cutoff

    @cutoff.setter
    def cutoff(self, value: float) -> None:
        if value is None or not value >= 0:
            raise InvalidArgumentError(f"Gaussian cutoff must be non-negative, got {value}")
        self._cutoff = float(value)

    @classmethod
    def from_precalculation(
        cls,
        reference_atoms: Optional[AtomSource],
        fit_atoms: AtomSource,
        precalculation: Precalculation,
    ) -> "GaussianVolume":
        """Build an engine for refined overlap evaluation.

        Args:
            reference_atoms: Reference atoms; None uses the precalculated snapshot
            fit_atoms: Fit atoms in their current pose, same count as precalculated
            precalculation: Precalculated data for the molecule pair

        Raises:
            InvalidArgumentError: If an argument is None
            InternalInvariantError: If the precalculation does not describe the atoms
        """
        if precalculation is None or fit_atoms is None:
            raise InvalidArgumentError("Fit atoms and precalculation must not be None")
        if reference_atoms is None:
            reference_atoms = precalculation.reference.atoms

        engine = cls(precalculation.cutoff)
        engine._precalculation = precalculation
        reference = tuple(_atom_list(reference_atoms))
        fit = tuple(_atom_list(fit_atoms))
        cls._check_consistency(reference, fit, precalculation)
        engine._initialize_intermolecular_information(reference, fit)
        return engine

    @staticmethod
    def _check_consistency(
        reference: Sequence, fit: Sequence, precalculation: Precalculation
    ) -> None:
        ref_pre = precalculation.reference
        fit_pre = precalculation.fit
        sizes_ok = (
            len(reference) == len(ref_pre.alphas)
            and len(reference) == len(ref_pre.neighbors)
            and len(reference) == len(ref_pre.square_distances)
            and len(fit) == len(fit_pre.alphas)
            and len(fit) == len(fit_pre.neighbors)
            and len(fit) == len(fit_pre.square_distances)
            and ref_pre.max_order == fit_pre.max_order == precalculation.max_order
        )
        if not sizes_ok:
            raise InternalInvariantError(
                "Precalculation does not match the atom sets: "
                f"reference {len(reference)} atoms vs {len(ref_pre.alphas)} precalculated, "
                f"fit {len(fit)} atoms vs {len(fit_pre.alphas)} precalculated"
            )

    def _initialize_intermolecular_information(self, reference, fit) -> None:
        ref_coords, ref_radii = atom_arrays(reference)
        fit_coords, fit_radii = atom_arrays(fit)
        self._cross_square_distances = square_distances(ref_coords, fit_coords)
        mask = neighbor_mask(self._cross_square_distances, ref_radii, fit_radii, self._cutoff)
        self._cross_neighbors = tuple(frozenset(np.flatnonzero(row).tolist()) for row in mask)
        logger.debug(
            f"Refined engine for {len(reference)} x {len(fit)} atoms, "
            f"{int(mask.sum())} intersecting atom pairs"
        )

    def overlap_volume(self, reference: AtomSource, fit: AtomSource) -> float:
        """Pairwise (first order) overlap volume of two atom sets.

        Args:
            reference: Reference molecule or atoms
            fit: Fit molecule or atoms

        Returns:
            Sum of atom pair overlaps for pairs within the cutoff
        """
        if reference is None or fit is None:
            raise InvalidArgumentError("Reference and fit must not be None")
        ref_coords, ref_radii = atom_arrays(reference)
        fit_coords, fit_radii = atom_arrays(fit)
        if not len(ref_radii) or not len(fit_radii):
            return 0.0

        sq_dist = square_distances(ref_coords, fit_coords)
        mask = neighbor_mask(sq_dist, ref_radii, fit_radii, self._cutoff)
        alpha_ref = gaussian_alpha(ref_radii)[:, None]
        alpha_fit = gaussian_alpha(fit_radii)[None, :]
        volumes = pair_overlap_volume(alpha_ref, alpha_fit, sq_dist)
        return float(volumes[mask].sum())

    def self_volume(self, molecule: AtomSource) -> float:
        """Pairwise overlap volume of a molecule with itself."""
        return self.overlap_volume(molecule, molecule)

    def refined_overlap_volume(self) -> float:
        """Inclusion-exclusion overlap volume of the reference and fit atom sets."""
        precalculation = self._require_precalculation()
        ref_pre = precalculation.reference
        fit_pre = precalculation.fit

        volume = 0.0
        for order_ref, ref_terms in enumerate(ref_pre.intersected_atom_ids, start=1):
            for order_fit, fit_terms in enumerate(fit_pre.intersected_atom_ids, start=1):
                sign = term_sign(order_ref, order_fit)
                for ref_ids in ref_terms:
                    for fit_ids in fit_terms:
                        if not is_intersected_by_cross_neighbors(
                            ref_ids, fit_ids, self._cross_neighbors
                        ):
                            continue
                        volume += sign * intersection_volume(
                            ref_ids,
                            fit_ids,
                            ref_pre.alphas,
                            fit_pre.alphas,
                            ref_pre.square_distances,
                            fit_pre.square_distances,
                            self._cross_square_distances,
                        )
        return volume

    def reference_volume(self) -> float:
        """Inclusion-exclusion self-overlap of the reference atom set."""
        ref_pre = self._require_precalculation().reference

        volume = 0.0
        for order_outer, outer_terms in enumerate(ref_pre.intersected_atom_ids, start=1):
            for order_inner, inner_terms in enumerate(ref_pre.intersected_atom_ids, start=1):
                sign = term_sign(order_outer, order_inner)
                for outer_ids in outer_terms:
                    for inner_ids in inner_terms:
                        if not is_intersected_by_monotone_neighbors(
                            outer_ids, inner_ids, ref_pre.neighbors
                        ):
                            continue
                        volume += sign * intersection_volume(
                            outer_ids,
                            inner_ids,
                            ref_pre.alphas,
                            ref_pre.alphas,
                            ref_pre.square_distances,
                            ref_pre.square_distances,
                            ref_pre.square_distances,
                        )
        return volume

    def _require_precalculation(self) -> Precalculation:
        if self._precalculation is None:
            raise InvalidArgumentError(
                "Refined volumes need an engine built with GaussianVolume.from_precalculation"
            )
        return self._precalculation


class GaussianVolumeBuilder:
    """Builds refined engines for a reference molecule, precalculating once."""

    DEFAULT_CUTOFF = 0.0
    DEFAULT_MAX_INTERSECTION_ORDER = 1

    def __init__(self, reference: Molecule, fit: Molecule):
        """
        Initialize the builder.

        Args:
            reference: Reference molecule
            fit: Fit molecule whose internal geometry is precalculated
        """
        if reference is None or fit is None:
            raise InvalidArgumentError("Reference and fit molecules must not be None")
        self._reference_atoms = tuple(reference.atoms)
        self._fit_atoms = tuple(fit.atoms)
        self._gaussian_cutoff = self.DEFAULT_CUTOFF
        self._max_intersection_order = self.DEFAULT_MAX_INTERSECTION_ORDER
        self._precalculation: Optional[Precalculation] = None

    @property
    def gaussian_cutoff(self) -> float:
        return self._gaussian_cutoff

    @property
    def max_intersection_order(self) -> int:
        return self._max_intersection_order

    def set_gaussian_cutoff(self, cutoff: float) -> None:
        validate_parameters(cutoff, self._max_intersection_order)
        if cutoff != self._gaussian_cutoff:
            self._gaussian_cutoff = float(cutoff)
            self._precalculation = None

    def set_max_intersection_order(self, order: int) -> None:
        validate_parameters(self._gaussian_cutoff, order)
        if order != self._max_intersection_order:
            self._max_intersection_order = int(order)
            self._precalculation = None

    @property
    def precalculation(self) -> Precalculation:
        """The pair precalculation, computed on first access."""
        if self._precalculation is None:
            self._precalculation = Precalculation.build(
                self._reference_atoms,
                self._fit_atoms,
                cutoff=self._gaussian_cutoff,
                max_order=self._max_intersection_order,
            )
        return self._precalculation

    def build(self, fit: Optional[Molecule] = None) -> GaussianVolume:
        """Engine for the stored fit molecule, or for a moved copy of it."""
        fit_atoms = self._fit_atoms if fit is None else fit.atoms
        return GaussianVolume.from_precalculation(
            self._reference_atoms, fit_atoms, self.precalculation
        )


def _atom_list(atoms: AtomSource):
    return atoms.atoms if isinstance(atoms, Molecule) else list(atoms)
