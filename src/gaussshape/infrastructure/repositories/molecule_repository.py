# src/gaussshape/infrastructure/repositories/molecule_repository.py
"""Repository implementation for molecules stored in structure files."""

from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union
import logging
import os
from rdkit import Chem
from Bio.PDB.PDBParser import PDBParser

from ..adapters.molecule_factory import MoleculeFactory
from ...core.domain.models.molecule import Molecule
from ...core.exceptions import InvalidArgumentError
from ...core.interfaces.repository import Repository

SUPPORTED_EXTENSIONS = (".sdf", ".mol", ".mol2", ".pdb")
MOL2_RECORD = "@<TRIPOS>MOLECULE"


class MoleculeRepository(Repository[Molecule]):
    """Repository reading molecules from SDF, MOL, MOL2 and PDB files."""

    def __init__(self, data_dir: Union[str, Path] = ".", factory: Optional[MoleculeFactory] = None):
        """
        Initialize repository with data directory.

        Args:
            data_dir: Directory containing structure files
            factory: Converts parsed structures into molecules
        """
        self._data_dir = Path(data_dir)
        self._factory = factory or MoleculeFactory()
        self._parser = PDBParser(QUIET=True)
        self._cache: Dict[str, List[Molecule]] = {}
        self.logger = logging.getLogger(__name__)

    def get(self, id: str) -> Optional[List[Molecule]]:
        """
        Retrieve all molecules of a structure file by ID.

        Args:
            id: File name without extension

        Returns:
            List of molecules, or None if no supported file exists
        """
        if id in self._cache:
            return self._cache[id]

        for extension in SUPPORTED_EXTENSIONS:
            file_path = self._data_dir / f"{id}{extension}"
            if file_path.exists():
                molecules = self.load(file_path)
                self._cache[id] = molecules
                return molecules
        return None

    def list(self) -> Dict[str, List[Molecule]]:
        """
        List all molecules in the data directory.

        Returns:
            Dictionary mapping file IDs to their molecules
        """
        structures = {}
        for file_name in sorted(os.listdir(self._data_dir)):
            id, extension = os.path.splitext(file_name)
            if extension.lower() in SUPPORTED_EXTENSIONS:
                if molecules := self.get(id):
                    structures[id] = molecules
        return structures

    def load(self, path: Union[str, Path]) -> List[Molecule]:
        """Load every molecule of one file."""
        return list(self.iter_molecules(path))

    def iter_molecules(self, path: Union[str, Path]) -> Iterator[Molecule]:
        """
        Stream molecules from a structure file.

        Raises:
            FileNotFoundError: If the file does not exist
            InvalidArgumentError: If the extension is not supported
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Structure file not found: {path}")
        extension = path.suffix.lower()

        if extension == ".sdf":
            supplier = Chem.SDMolSupplier(str(path), removeHs=False)
            yield from self._from_rdkit_records(supplier, path)
        elif extension == ".mol":
            yield from self._from_rdkit_records(
                [Chem.MolFromMolFile(str(path), removeHs=False)], path
            )
        elif extension == ".mol2":
            yield from self._from_rdkit_records(self._read_mol2_blocks(path), path)
        elif extension == ".pdb":
            structure = self._parser.get_structure(path.stem, str(path))
            for model in structure:
                name = path.stem if len(structure) == 1 else f"{path.stem}_{model.get_id()}"
                yield self._factory.from_biopython(model, name=name)
        else:
            raise InvalidArgumentError(
                f"Unsupported structure format {extension!r}, expected one of {SUPPORTED_EXTENSIONS}"
            )

    def _read_mol2_blocks(self, path: Path) -> Iterator[Chem.Mol]:
        text = path.read_text()
        for block in text.split(MOL2_RECORD)[1:]:
            yield Chem.MolFromMol2Block(MOL2_RECORD + block, removeHs=False)

    def _from_rdkit_records(self, mols, path: Path) -> Iterator[Molecule]:
        for index, mol in enumerate(mols):
            if mol is None:
                self.logger.warning(f"Skipping unreadable record {index} in {path}")
                continue
            molecule = self._factory.from_rdkit(mol)
            if not molecule.name:
                molecule.name = f"{path.stem}_{index}"
            yield molecule
