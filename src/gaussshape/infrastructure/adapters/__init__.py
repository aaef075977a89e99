from .molecule_factory import MoleculeFactory

__all__ = ["MoleculeFactory"]
