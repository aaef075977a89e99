"""Domain models for rigid-body transformations of a fit molecule."""

from dataclasses import dataclass
from typing import Sequence, Tuple
import numpy as np

from .molecule import Molecule
from ...exceptions import InvalidArgumentError


@dataclass(frozen=True)
class Transformation:
    """Six alignment parameters [tx, ty, tz, rx, ry, rz], rotations in radians.

    The rotation is always applied before the translation.
    """

    translation: Tuple[float, float, float]
    rotation: Tuple[float, float, float]

    DIMENSIONS = 6

    @classmethod
    def from_vector(cls, params: Sequence[float]) -> "Transformation":
        if len(params) != cls.DIMENSIONS:
            raise InvalidArgumentError(
                f"Transformation needs {cls.DIMENSIONS} parameters, got {len(params)}"
            )
        values = [float(v) for v in params]
        return cls(translation=tuple(values[:3]), rotation=tuple(values[3:]))

    @classmethod
    def identity(cls) -> "Transformation":
        return cls(translation=(0.0, 0.0, 0.0), rotation=(0.0, 0.0, 0.0))

    def as_vector(self) -> np.ndarray:
        return np.array(self.translation + self.rotation, dtype=float)

    def apply(self, molecule: Molecule) -> None:
        """Rotate then translate the molecule in place."""
        molecule.rotate_xyz(*self.rotation)
        molecule.move(*self.translation)


@dataclass(frozen=True)
class FitTransformation:
    """Maps the original fit coordinates onto the original reference frame.

    Alignment runs on centred copies, so the result is the sequence:
    translate by ``-fit_centroid``, apply ``transformation``, translate by
    ``reference_centroid``.
    """

    fit_centroid: Tuple[float, float, float]
    transformation: Transformation
    reference_centroid: Tuple[float, float, float]

    @property
    def steps(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """The three steps as (pre-translation, rotation angles, post-translation)."""
        pre = -np.asarray(self.fit_centroid, dtype=float)
        post = np.asarray(self.transformation.translation, dtype=float) + np.asarray(
            self.reference_centroid, dtype=float
        )
        return pre, np.asarray(self.transformation.rotation, dtype=float), post

    def apply(self, molecule: Molecule) -> None:
        """Transform a copy-owned molecule in place."""
        pre, rotation, post = self.steps
        molecule.move(*pre)
        molecule.rotate_xyz(*rotation)
        molecule.move(*post)
