"""Adapter building Molecule objects from RDKit and Biopython structures."""

from typing import Any, Iterable, Mapping, Optional
import logging
from rdkit import Chem
from Bio.PDB.Entity import Entity

from ...core.domain.models.atom import Atom
from ...core.domain.models.molecule import Molecule
from ...core.domain.models.radius_table import AtomRadiusTable
from ...core.exceptions import InvalidArgumentError


class MoleculeFactory:
    """Creates molecules with radii resolved from an explicit radius table."""

    def __init__(
        self,
        radius_table: Optional[AtomRadiusTable] = None,
        include_hydrogens: bool = True,
    ):
        """
        Initialize the factory.

        Args:
            radius_table: Element radii, the default table when omitted
            include_hydrogens: Keep hydrogen atoms
        """
        self.radius_table = radius_table or AtomRadiusTable()
        self.include_hydrogens = include_hydrogens
        self.logger = logging.getLogger(__name__)

    def _keep(self, element: str) -> bool:
        return self.include_hydrogens or element.strip().upper() != "H"

    def from_rdkit(self, mol: Chem.Mol, conf_id: int = -1, name: Optional[str] = None) -> Molecule:
        """
        Convert an RDKit molecule with 3D coordinates.

        Args:
            mol: RDKit molecule with at least one conformer
            conf_id: Conformer to read, the default conformer when -1
            name: Molecule name, the _Name property when omitted

        Returns:
            Molecule with one atom per kept RDKit atom
        """
        if mol is None:
            raise InvalidArgumentError("RDKit molecule must not be None")
        if mol.GetNumConformers() == 0:
            raise InvalidArgumentError("RDKit molecule has no conformer")
        if name is None:
            name = mol.GetProp("_Name") if mol.HasProp("_Name") else ""

        conformer = mol.GetConformer(conf_id)
        molecule = Molecule(name=name)
        for rd_atom in mol.GetAtoms():
            element = rd_atom.GetSymbol()
            if not self._keep(element):
                continue
            position = conformer.GetAtomPosition(rd_atom.GetIdx())
            molecule.add_atom(
                Atom(
                    atom_id=molecule.atom_count,
                    position=(position.x, position.y, position.z),
                    radius=self.radius_table.radius(element),
                    element=element,
                    name=f"{element}{rd_atom.GetIdx() + 1}",
                )
            )
        return molecule

    def from_biopython(self, entity: Entity, name: Optional[str] = None) -> Molecule:
        """Convert a Biopython structure, model, chain or residue."""
        if entity is None:
            raise InvalidArgumentError("Biopython entity must not be None")
        molecule = Molecule(name=name if name is not None else str(entity.get_id()))
        for bio_atom in entity.get_atoms():
            element = (bio_atom.element or bio_atom.get_id()[:1]).capitalize()
            if not self._keep(element):
                continue
            x, y, z = (float(v) for v in bio_atom.get_coord())
            molecule.add_atom(
                Atom(
                    atom_id=molecule.atom_count,
                    position=(x, y, z),
                    radius=self.radius_table.radius(element),
                    element=element,
                    name=bio_atom.get_id(),
                )
            )
        return molecule

    def from_records(
        self, records: Iterable[Mapping[str, Any]], name: str = ""
    ) -> Molecule:
        """
        Build a molecule from dictionaries with element, x, y, z and optional radius.

        Args:
            records: Atom dictionaries
            name: Molecule name

        Returns:
            Molecule in record order
        """
        molecule = Molecule(name=name)
        for record in records:
            try:
                element = str(record.get("element", "C"))
                position = (float(record["x"]), float(record["y"]), float(record["z"]))
            except (KeyError, TypeError, ValueError) as exc:
                raise InvalidArgumentError(f"Invalid atom record: {record!r}") from exc
            if not self._keep(element):
                continue
            radius = record.get("radius")
            molecule.add_atom(
                Atom(
                    atom_id=molecule.atom_count,
                    position=position,
                    radius=float(radius) if radius is not None else self.radius_table.radius(element),
                    element=element,
                    name=str(record.get("name", "")),
                )
            )
        return molecule
