"""Configuration for Gaussian shape alignment."""

import logging
import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

from .exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

# Parameter-file key -> (AlignmentConfig field, converter)
PARAMETER_NAMES = {
    "SIMPLEX_REFLECTION_FACTOR": ("reflection_factor", float),
    "SIMPLEX_EXTENSION_FACTOR": ("extension_factor", float),
    "SIMPLEX_CONTRACTION_FACTOR": ("contraction_factor", float),
    "SIMPLEX_REDUCTION_FACTOR": ("reduction_factor", float),
    "SIMPLEX_GAUSSIAN_INITIAL_SOLUTION_GROUP_NUM": ("initial_groups", int),
    "SIMPLEX_MAX_ITERATION": ("max_iterations", int),
    "GAUSSIAN_CUTOFF": ("gaussian_cutoff", float),
    "MAX_INTERSECTION_ORDER": ("max_intersection_order", int),
    "TRANSLATION_RANGE": ("translation_range", float),
    "RANDOM_SEED": ("seed", int),
}


@dataclass(frozen=True)
class AlignmentConfig:
    """Tunable parameters of the alignment search."""

    reflection_factor: float = 1.0
    extension_factor: float = 3.5
    contraction_factor: float = 0.5
    reduction_factor: float = 0.5
    initial_groups: int = 16
    max_iterations: int = 60
    gaussian_cutoff: float = 0.0
    max_intersection_order: int = 1
    translation_range: float = 4.0
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate parameter ranges."""
        if not (math.isfinite(self.reflection_factor) and self.reflection_factor > 0):
            self._invalid("reflection_factor", "must be positive")
        if not (math.isfinite(self.extension_factor) and self.extension_factor > 1):
            self._invalid("extension_factor", "must be greater than 1")
        if not 0 < self.contraction_factor < 1:
            self._invalid("contraction_factor", "must be in (0, 1)")
        if not 0 < self.reduction_factor < 1:
            self._invalid("reduction_factor", "must be in (0, 1)")
        if self.initial_groups <= 0:
            self._invalid("initial_groups", "must be positive")
        if self.max_iterations <= 0:
            self._invalid("max_iterations", "must be positive")
        if not self.gaussian_cutoff >= 0:
            self._invalid("gaussian_cutoff", "must be non-negative")
        if self.max_intersection_order <= 0:
            self._invalid("max_intersection_order", "must be positive")
        if not (math.isfinite(self.translation_range) and self.translation_range >= 0):
            self._invalid("translation_range", "must be non-negative")

    def _invalid(self, name: str, reason: str) -> None:
        raise InvalidArgumentError(f"{name} {reason}, got {getattr(self, name)}")

    @classmethod
    def from_parameters(
        cls, parameters: Mapping[str, str], base: Optional["AlignmentConfig"] = None
    ) -> "AlignmentConfig":
        """
        Build a configuration from named parameters.

        Args:
            parameters: Mapping of parameter-file keys to raw values
            base: Configuration providing values for keys that are absent

        Returns:
            AlignmentConfig with the recognised parameters applied
        """
        updates = {}
        for key, raw_value in parameters.items():
            name = key.strip().upper()
            if name not in PARAMETER_NAMES:
                logger.debug(f"Ignoring unknown parameter {name}")
                continue
            field_name, converter = PARAMETER_NAMES[name]
            try:
                updates[field_name] = converter(str(raw_value).strip())
            except ValueError as exc:
                raise InvalidArgumentError(
                    f"Invalid value for {name}: {raw_value!r}"
                ) from exc
        return replace(base or cls(), **updates)

    def to_parameters(self) -> Dict[str, str]:
        """Configuration as a parameter-file key to string mapping."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        return {
            key: str(values[field_name])
            for key, (field_name, _) in PARAMETER_NAMES.items()
            if values[field_name] is not None
        }


def parse_parameter_lines(lines: Iterable[str]) -> Dict[str, str]:
    """Parse ``KEY = VALUE`` or ``KEY VALUE`` lines, skipping blanks and # comments."""
    parameters: Dict[str, str] = {}
    for line in lines:
        line = line.split("#", 1)[0].strip()
        if not line:
            continue
        if "=" in line:
            key, value = line.split("=", 1)
        else:
            parts = line.split(None, 1)
            if len(parts) != 2:
                raise InvalidArgumentError(f"Malformed parameter line: {line!r}")
            key, value = parts
        parameters[key.strip().upper()] = value.strip()
    return parameters


def load_parameter_files(
    paths: Iterable[Union[str, Path]], base: Optional[AlignmentConfig] = None
) -> AlignmentConfig:
    """
    Load configuration from parameter files; later files override earlier ones.

    Raises:
        FileNotFoundError: If a file does not exist
        InvalidArgumentError: If a value cannot be converted or is out of range
    """
    parameters: Dict[str, str] = {}
    for path in paths:
        with open(path, "r") as f:
            parameters.update(parse_parameter_lines(f))
        logger.info(f"Loaded parameters from {path}")
    return AlignmentConfig.from_parameters(parameters, base=base)
