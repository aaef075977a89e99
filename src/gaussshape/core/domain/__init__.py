"""Core domain models and interfaces."""

from .models.atom import Atom
from .models.molecule import Molecule
from .models.alignment_result import AlignmentResult
from .interfaces.objective_function import ObjectiveFunction

__all__ = [
    "Atom",
    "Molecule",
    "AlignmentResult",
    "ObjectiveFunction",
]
