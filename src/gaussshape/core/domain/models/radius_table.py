"""Van der Waals radii used when building molecules from external formats."""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from ...exceptions import InvalidArgumentError

DEFAULT_RADIUS = 1.70

DEFAULT_RADII: Dict[str, float] = {
    "C": 1.70,
    "O": 1.52,
    "N": 1.55,
    "P": 1.80,
    "S": 1.80,
    "CL": 1.75,
    "BR": 1.85,
    "I": 1.98,
    "F": 1.47,
    "H": 1.20,
}


@dataclass
class AtomRadiusTable:
    """Element to radius lookup with a fallback radius for unknown elements."""

    radii: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_RADII))
    default_radius: float = DEFAULT_RADIUS

    def __post_init__(self):
        """Normalise element keys and validate radii."""
        self.radii = {self._key(k): float(v) for k, v in self.radii.items()}
        for element, radius in self.radii.items():
            if radius <= 0:
                raise InvalidArgumentError(f"Radius for {element} must be positive, got {radius}")
        if self.default_radius <= 0:
            raise InvalidArgumentError(
                f"Default radius must be positive, got {self.default_radius}"
            )

    @classmethod
    def with_overrides(cls, overrides: Optional[Mapping[str, float]] = None) -> "AtomRadiusTable":
        """Default table updated with the given element radii."""
        radii = dict(DEFAULT_RADII)
        radii.update(overrides or {})
        return cls(radii=radii)

    def radius(self, element: str) -> float:
        """Radius for an element symbol, case insensitive."""
        return self.radii.get(self._key(element), self.default_radius)

    @staticmethod
    def _key(element: str) -> str:
        return str(element).strip().upper()
