"""Abstract base class for read-only repositories following the Repository Pattern."""

from abc import ABC, abstractmethod
from typing import Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """
    Generic repository interface for loading stored entities.

    Each identifier may map to several entities, e.g. the molecules of a
    multi-record structure file.
    """

    @abstractmethod
    def get(self, id: str) -> Optional[List[T]]:
        """Retrieve the entities stored under an ID."""
        pass

    @abstractmethod
    def list(self) -> Dict[str, List[T]]:
        """List all entities by ID."""
        pass
