"""Core business logic services."""

from .alignment_service import AlignmentService
from .screening_service import ScreeningService

__all__ = [
    "AlignmentService",
    "ScreeningService",
]
