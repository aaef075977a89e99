#!/usr/bin/env python3
# src/gaussshape/core/domain/models/atom.py

"""
Domain model representing an atom as a hard sphere with a Gaussian density.
"""

import math
from dataclasses import dataclass, replace
from typing import Tuple

from ...exceptions import InvalidArgumentError


@dataclass(frozen=True)
class Atom:
    """Immutable snapshot of an atom position and van der Waals radius."""

    atom_id: int
    position: Tuple[float, float, float]
    radius: float
    element: str = "C"
    name: str = ""

    def __post_init__(self):
        """Normalise the position and validate the radius."""
        if len(self.position) != 3:
            raise InvalidArgumentError(
                f"Atom {self.atom_id} position must have 3 components, got {len(self.position)}"
            )
        object.__setattr__(self, "position", tuple(float(v) for v in self.position))
        if not self.radius > 0 or not math.isfinite(self.radius):
            raise InvalidArgumentError(
                f"Atom {self.atom_id} radius must be positive, got {self.radius}"
            )

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    @property
    def z(self) -> float:
        return self.position[2]

    def moved_to(self, position) -> "Atom":
        """Return a copy of this atom at a new position."""
        return replace(self, position=tuple(position))
