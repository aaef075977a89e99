#!/usr/bin/env python3
# src/gaussshape/core/domain/models/molecule.py

"""
Domain model representing a rigid molecule as an ordered set of atoms.
"""

from typing import Iterable, List, Optional
import numpy as np

from .atom import Atom


def rotation_matrix_xyz(rx: float, ry: float, rz: float) -> np.ndarray:
    """Build the rotation matrix Rz @ Ry @ Rx for angles in radians.

    Args:
        rx: Rotation about the x axis
        ry: Rotation about the y axis
        rz: Rotation about the z axis

    Returns:
        numpy array of shape (3, 3)
    """
    sx, cx = np.sin(rx), np.cos(rx)
    sy, cy = np.sin(ry), np.cos(ry)
    sz, cz = np.sin(rz), np.cos(rz)

    return np.array(
        [
            [cy * cz, sx * sy * cz - cx * sz, cx * sy * cz + sx * sz],
            [cy * sz, sx * sy * sz + cx * cz, cx * sy * sz - sx * cz],
            [-sy, sx * cy, cx * cy],
        ]
    )


class Molecule:
    """Rigid molecule made of immutable atom snapshots.

    Moving or rotating a molecule replaces its atoms with new snapshots, so
    atoms handed out earlier are never modified.
    """

    def __init__(self, atoms: Optional[Iterable[Atom]] = None, name: str = ""):
        """
        Initialize a Molecule.

        Args:
            atoms: Atoms in index order
            name: Molecule name, e.g. the title line of the source file
        """
        self._atoms: List[Atom] = list(atoms) if atoms is not None else []
        self.name = name

    def __len__(self) -> int:
        return len(self._atoms)

    def __iter__(self):
        return iter(self._atoms)

    def __repr__(self) -> str:
        return f"Molecule(name={self.name!r}, atoms={len(self._atoms)})"

    @property
    def atoms(self) -> List[Atom]:
        """Atoms in index order (a copy of the internal list)."""
        return list(self._atoms)

    @property
    def atom_count(self) -> int:
        return len(self._atoms)

    def add_atom(self, atom: Atom) -> None:
        """Append an atom."""
        self._atoms.append(atom)

    def coordinates(self) -> np.ndarray:
        """Get coordinates of all atoms.

        Returns:
            numpy array of shape (n_atoms, 3) containing xyz coordinates
        """
        if not self._atoms:
            return np.zeros((0, 3))
        return np.array([atom.position for atom in self._atoms], dtype=float)

    def radii(self) -> np.ndarray:
        """Get radii of all atoms as a numpy array of shape (n_atoms,)."""
        return np.array([atom.radius for atom in self._atoms], dtype=float)

    def centroid(self) -> np.ndarray:
        """Geometric centroid (mean atom position); the origin for an empty molecule."""
        if not self._atoms:
            return np.zeros(3)
        return self.coordinates().mean(axis=0)

    def move(self, dx: float, dy: float, dz: float) -> None:
        """Translate all atoms."""
        self._set_coordinates(self.coordinates() + np.array([dx, dy, dz], dtype=float))

    def move_to_centroid(self) -> None:
        """Translate the molecule so that its centroid is the origin."""
        self._set_coordinates(self.coordinates() - self.centroid())

    def rotate_xyz(self, rx: float, ry: float, rz: float) -> None:
        """Rotate all atoms about the coordinate origin."""
        rotation = rotation_matrix_xyz(rx, ry, rz)
        self._set_coordinates(self.coordinates() @ rotation.T)

    def clone(self) -> "Molecule":
        """Return an independent copy."""
        return Molecule(self._atoms, name=self.name)

    def _set_coordinates(self, coords: np.ndarray) -> None:
        self._atoms = [
            atom.moved_to(position) for atom, position in zip(self._atoms, coords)
        ]
