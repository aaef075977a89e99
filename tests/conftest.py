import numpy as np
import pytest

from gaussshape.core.domain.models.atom import Atom
from gaussshape.core.domain.models.molecule import Molecule


def make_molecule(positions, radius=1.5, name=""):
    """Molecule with one carbon-like atom per position."""
    return Molecule(
        [
            Atom(atom_id=i, position=tuple(position), radius=radius)
            for i, position in enumerate(positions)
        ],
        name=name,
    )


@pytest.fixture
def single_atom():
    return make_molecule([(0.0, 0.0, 0.0)], name="single")


@pytest.fixture
def line_molecule():
    """Three atoms of radius 1.0 spaced 1.0 apart on the x axis."""
    return make_molecule([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0)], radius=1.0)


@pytest.fixture
def cluster_molecule():
    """Eight atoms in a compact random cluster."""
    rng = np.random.default_rng(7)
    return make_molecule(rng.uniform(-2.0, 2.0, size=(8, 3)), radius=1.6, name="cluster")


@pytest.fixture
def small_ligand():
    """Rigid L-shaped toy ligand."""
    return make_molecule(
        [
            (0.0, 0.0, 0.0),
            (1.5, 0.0, 0.0),
            (3.0, 0.0, 0.0),
            (3.0, 1.5, 0.0),
            (3.0, 3.0, 0.0),
        ],
        radius=1.7,
        name="ligand",
    )
