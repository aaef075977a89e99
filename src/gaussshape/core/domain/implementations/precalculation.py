"""Neighbor graphs and intersection-term enumeration for Gaussian volumes."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple, Union
import networkx as nx
import numpy as np

from ..models.atom import Atom
from ..models.molecule import Molecule
from ...exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

# Gaussian width numerator: alpha = PARTIAL_ALPHA / r**2
PARTIAL_ALPHA = 2.41798793102
# Gaussian height, p ** 2 == 8
GAUSSIAN_P = 2.8284271247

AtomIds = Tuple[int, ...]
AtomSource = Union[Molecule, Sequence[Atom]]


def gaussian_alpha(radius):
    """Gaussian width for a radius (scalar or numpy array)."""
    return PARTIAL_ALPHA / np.square(radius)


def atom_arrays(atoms: AtomSource) -> Tuple[np.ndarray, np.ndarray]:
    """Coordinates (n, 3) and radii (n,) of a molecule or atom sequence."""
    if atoms is None:
        raise InvalidArgumentError("Atom set must not be None")
    if isinstance(atoms, Molecule):
        return atoms.coordinates(), atoms.radii()
    atom_list = list(atoms)
    if not atom_list:
        return np.zeros((0, 3)), np.zeros(0)
    coords = np.array([atom.position for atom in atom_list], dtype=float)
    radii = np.array([atom.radius for atom in atom_list], dtype=float)
    return coords, radii


def square_distances(coords_a: np.ndarray, coords_b: np.ndarray) -> np.ndarray:
    """Matrix of squared distances between two coordinate sets."""
    diff = coords_a[:, None, :] - coords_b[None, :, :]
    return np.einsum("ijk,ijk->ij", diff, diff)


def neighbor_mask(
    sq_dist: np.ndarray, radii_a: np.ndarray, radii_b: np.ndarray, cutoff: float
) -> np.ndarray:
    """True where d**2 < (r_a + r_b + cutoff)**2."""
    limit = radii_a[:, None] + radii_b[None, :] + cutoff
    return sq_dist < limit * limit


def validate_parameters(cutoff: float, max_order: int) -> None:
    if cutoff is None or not cutoff >= 0:
        raise InvalidArgumentError(f"Gaussian cutoff must be non-negative, got {cutoff}")
    if max_order is None or int(max_order) != max_order or max_order <= 0:
        raise InvalidArgumentError(
            f"Max intersection order must be a positive integer, got {max_order}"
        )


def is_clique_by_neighbors(atom_ids: AtomIds, neighbors: Sequence[frozenset]) -> bool:
    """Check that ascending atom IDs are pairwise neighbors under a monotone relation."""
    for position, atom_id in enumerate(atom_ids):
        neighbor_ids = neighbors[atom_id]
        for later_id in atom_ids[position + 1 :]:
            if later_id not in neighbor_ids:
                return False
    return True


def is_intersected_by_cross_neighbors(
    key_ids: AtomIds, value_ids: AtomIds, neighbors: Sequence[frozenset]
) -> bool:
    """Every value atom must be a neighbor of every key atom."""
    for key_id in key_ids:
        neighbor_ids = neighbors[key_id]
        for value_id in value_ids:
            if value_id not in neighbor_ids:
                return False
    return True


def is_intersected_by_monotone_neighbors(
    key_ids: AtomIds, value_ids: AtomIds, neighbors: Sequence[frozenset]
) -> bool:
    """Pairwise neighbor test within one atom set whose relation only stores higher IDs."""
    for key_id in key_ids:
        for value_id in value_ids:
            if key_id < value_id:
                if value_id not in neighbors[key_id]:
                    return False
            elif key_id > value_id:
                if key_id not in neighbors[value_id]:
                    return False
    return True


def combine_elements(
    candidates: Sequence[int],
    count: int,
    accept: Callable[[AtomIds], bool],
) -> List[AtomIds]:
    """Pick ``count`` candidates in order, keeping combinations accepted by ``accept``.

    Branches that can no longer collect enough candidates are abandoned.
    """
    results: List[AtomIds] = []
    total = len(candidates)

    def extend(start: int, chosen: AtomIds) -> None:
        needed = count - len(chosen)
        if total - start < needed:
            return
        if needed == 0:
            if accept(chosen):
                results.append(chosen)
            return
        for index in range(start, total):
            extend(index + 1, chosen + (candidates[index],))

    extend(0, ())
    return results


def enumerate_intersected_atom_ids(
    neighbors: Sequence[frozenset], order: int
) -> List[AtomIds]:
    """Enumerate atom subsets of a given size whose members all intersect.

    Args:
        neighbors: Monotone neighbor sets, ``neighbors[i]`` only holds IDs > i
        order: Number of atoms per subset

    Returns:
        List of ascending atom ID tuples
    """
    if order < 0:
        raise InvalidArgumentError(f"Intersection order must be non-negative, got {order}")
    if order == 0:
        return []
    if order == 1:
        return [(atom_id,) for atom_id in range(len(neighbors))]
    if order == 2:
        return [
            (atom_id, neighbor_id)
            for atom_id, neighbor_ids in enumerate(neighbors)
            for neighbor_id in sorted(neighbor_ids)
        ]

    def accept(atom_ids: AtomIds) -> bool:
        return is_clique_by_neighbors(atom_ids, neighbors)

    subsets: List[AtomIds] = []
    for atom_id, neighbor_ids in enumerate(neighbors):
        for picked in combine_elements(sorted(neighbor_ids), order - 1, accept):
            subsets.append((atom_id,) + picked)
    return subsets


@dataclass(frozen=True)
class MoleculePrecalculation:
    """Per-molecule data reused across Gaussian volume evaluations."""

    atoms: Tuple[Atom, ...]
    alphas: np.ndarray
    square_distances: np.ndarray
    neighbors: Tuple[frozenset, ...]
    intersected_atom_ids: Tuple[Tuple[AtomIds, ...], ...]

    @classmethod
    def build(
        cls, atoms: AtomSource, cutoff: float, max_order: int
    ) -> "MoleculePrecalculation":
        """Compute alphas, distances, monotone neighbors and intersection terms."""
        validate_parameters(cutoff, max_order)
        if atoms is None:
            raise InvalidArgumentError("Atom set must not be None")
        snapshot = tuple(atoms.atoms if isinstance(atoms, Molecule) else atoms)
        coords, radii = atom_arrays(snapshot)

        sq_dist = square_distances(coords, coords)
        mask = np.triu(neighbor_mask(sq_dist, radii, radii, cutoff), k=1)
        neighbors = tuple(frozenset(np.flatnonzero(row).tolist()) for row in mask)

        intersected = tuple(
            tuple(enumerate_intersected_atom_ids(neighbors, order))
            for order in range(1, int(max_order) + 1)
        )
        logger.debug(
            f"Precalculated {len(snapshot)} atoms: terms per order "
            f"{[len(terms) for terms in intersected]}"
        )
        return cls(
            atoms=snapshot,
            alphas=gaussian_alpha(radii),
            square_distances=sq_dist,
            neighbors=neighbors,
            intersected_atom_ids=intersected,
        )

    @property
    def atom_count(self) -> int:
        return len(self.atoms)

    @property
    def max_order(self) -> int:
        return len(self.intersected_atom_ids)

    def as_graph(self) -> nx.Graph:
        """Neighbor relation as an undirected graph over atom indices."""
        graph = nx.Graph()
        graph.add_nodes_from(range(len(self.atoms)))
        for atom_id, neighbor_ids in enumerate(self.neighbors):
            graph.add_edges_from((atom_id, other) for other in neighbor_ids)
        return graph


@dataclass(frozen=True)
class Precalculation:
    """Precalculated data for a reference/fit molecule pair.

    Holds its own snapshot of both atom sets, so engines built from it never
    refer to data owned elsewhere.
    """

    cutoff: float
    max_order: int
    reference: MoleculePrecalculation
    fit: MoleculePrecalculation

    @classmethod
    def build(
        cls,
        reference: AtomSource,
        fit: AtomSource,
        cutoff: float = 0.0,
        max_order: int = 1,
    ) -> "Precalculation":
        validate_parameters(cutoff, max_order)
        if reference is None or fit is None:
            raise InvalidArgumentError("Reference and fit atom sets must not be None")
        return cls(
            cutoff=float(cutoff),
            max_order=int(max_order),
            reference=MoleculePrecalculation.build(reference, cutoff, max_order),
            fit=MoleculePrecalculation.build(fit, cutoff, max_order),
        )
