import numpy as np
import pytest

from gaussshape.core.domain.implementations.gaussian_volume import (
    GaussianVolume,
    GaussianVolumeBuilder,
    intersection_volume,
    pair_overlap_volume,
    term_sign,
)
from gaussshape.core.domain.implementations.precalculation import (
    GAUSSIAN_P,
    PARTIAL_ALPHA,
    Precalculation,
    gaussian_alpha,
)
from gaussshape.core.exceptions import InternalInvariantError, InvalidArgumentError

from conftest import make_molecule


class TestDirectOverlap:
    """Tests for the pairwise overlap volume."""

    def test_closed_form_self_pair(self, single_atom):
        alpha = PARTIAL_ALPHA / 1.5 ** 2
        expected = 8.0 * (np.pi / (2.0 * alpha)) ** 1.5
        volume = GaussianVolume(0.0).overlap_volume(single_atom, single_atom.clone())
        assert volume == pytest.approx(expected, rel=1e-12)

    def test_symmetry(self, cluster_molecule, small_ligand):
        engine = GaussianVolume(0.5)
        forward = engine.overlap_volume(cluster_molecule, small_ligand)
        backward = engine.overlap_volume(small_ligand, cluster_molecule)
        assert forward > 0
        assert forward == pytest.approx(backward, rel=1e-12)

    def test_cutoff_monotonicity(self, cluster_molecule, small_ligand):
        volumes = [
            GaussianVolume(cutoff).overlap_volume(cluster_molecule, small_ligand)
            for cutoff in (0.0, 0.25, 0.5, 1.0, 2.0, 5.0)
        ]
        assert all(a <= b for a, b in zip(volumes, volumes[1:]))

    def test_cutoff_boundary(self):
        first = make_molecule([(0.0, 0.0, 0.0)], radius=1.0)
        touching = make_molecule([(2.0, 0.0, 0.0)], radius=1.0)
        inside = make_molecule([(1.999, 0.0, 0.0)], radius=1.0)
        engine = GaussianVolume(0.0)
        assert engine.overlap_volume(first, touching) == 0.0
        assert engine.overlap_volume(first, inside) > 0.0
        assert GaussianVolume(0.1).overlap_volume(first, touching) > 0.0

    def test_matches_pair_formula(self):
        first = make_molecule([(0.0, 0.0, 0.0)], radius=1.5)
        second = make_molecule([(1.2, 0.5, 0.0)], radius=1.2)
        expected = pair_overlap_volume(gaussian_alpha(1.5), gaussian_alpha(1.2), 1.2 ** 2 + 0.5 ** 2)
        assert GaussianVolume().overlap_volume(first, second) == pytest.approx(expected)

    def test_accepts_atom_sequences(self, small_ligand):
        engine = GaussianVolume()
        assert engine.overlap_volume(small_ligand.atoms, small_ligand.atoms) == pytest.approx(
            engine.self_volume(small_ligand)
        )

    def test_empty_molecule_has_no_overlap(self, small_ligand):
        assert GaussianVolume().overlap_volume(make_molecule([]), small_ligand) == 0.0

    def test_none_rejected(self, small_ligand):
        with pytest.raises(InvalidArgumentError):
            GaussianVolume().overlap_volume(None, small_ligand)

    def test_negative_cutoff_rejected(self):
        with pytest.raises(InvalidArgumentError):
            GaussianVolume(-1.0)
        engine = GaussianVolume()
        with pytest.raises(InvalidArgumentError):
            engine.cutoff = -0.1


class TestRefinedOverlap:
    """Tests for the inclusion-exclusion overlap built from a precalculation."""

    def test_term_sign(self):
        assert term_sign(1, 1) == 1
        assert term_sign(1, 2) == -1
        assert term_sign(2, 1) == -1
        assert term_sign(2, 2) == 1
        assert term_sign(3, 2) == -1

    def test_single_atom_term_is_pair_volume(self):
        alphas = np.array([gaussian_alpha(1.5)])
        other = np.array([gaussian_alpha(1.2)])
        zero = np.zeros((1, 1))
        cross = np.array([[2.0]])
        term = intersection_volume((0,), (0,), alphas, other, zero, zero, cross)
        expected = pair_overlap_volume(alphas[0], other[0], 2.0)
        assert term == pytest.approx(expected, rel=1e-9)

    @pytest.mark.parametrize("cutoff", [0.0, 0.5])
    def test_first_order_matches_direct(self, cluster_molecule, small_ligand, cutoff):
        pre = Precalculation.build(cluster_molecule, small_ligand, cutoff=cutoff, max_order=1)
        engine = GaussianVolume.from_precalculation(cluster_molecule, small_ligand, pre)
        direct = GaussianVolume(cutoff).overlap_volume(cluster_molecule, small_ligand)
        assert engine.refined_overlap_volume() == pytest.approx(direct, rel=1e-8)

    def test_first_order_reference_volume_matches_self_volume(self, cluster_molecule, small_ligand):
        pre = Precalculation.build(cluster_molecule, small_ligand, cutoff=0.0, max_order=1)
        engine = GaussianVolume.from_precalculation(None, small_ligand, pre)
        expected = GaussianVolume(0.0).self_volume(cluster_molecule)
        assert engine.reference_volume() == pytest.approx(expected, rel=1e-8)

    def test_higher_order_terms_change_the_estimate(self, cluster_molecule):
        fit = cluster_molecule.clone()
        first = GaussianVolume.from_precalculation(
            cluster_molecule, fit, Precalculation.build(cluster_molecule, fit, max_order=1)
        ).refined_overlap_volume()
        second = GaussianVolume.from_precalculation(
            cluster_molecule, fit, Precalculation.build(cluster_molecule, fit, max_order=2)
        ).refined_overlap_volume()
        assert np.isfinite(second)
        assert second != pytest.approx(first)

    def test_distant_molecules_do_not_overlap(self, cluster_molecule, small_ligand):
        far = small_ligand.clone()
        far.move(100.0, 0.0, 0.0)
        pre = Precalculation.build(cluster_molecule, far, max_order=3)
        engine = GaussianVolume.from_precalculation(cluster_molecule, far, pre)
        assert engine.refined_overlap_volume() == 0.0

    def test_size_mismatch_is_an_invariant_error(self, cluster_molecule, small_ligand):
        pre = Precalculation.build(cluster_molecule, small_ligand)
        with pytest.raises(InternalInvariantError):
            GaussianVolume.from_precalculation(cluster_molecule, cluster_molecule, pre)

    def test_none_arguments_rejected(self, small_ligand):
        pre = Precalculation.build(small_ligand, small_ligand)
        with pytest.raises(InvalidArgumentError):
            GaussianVolume.from_precalculation(small_ligand, None, pre)
        with pytest.raises(InvalidArgumentError):
            GaussianVolume.from_precalculation(small_ligand, small_ligand, None)

    def test_direct_engine_has_no_refined_volume(self):
        with pytest.raises(InvalidArgumentError):
            GaussianVolume().refined_overlap_volume()
        with pytest.raises(InvalidArgumentError):
            GaussianVolume().reference_volume()


class TestGaussianVolumeBuilder:
    """Tests for the lazily precalculating engine builder."""

    def test_precalculation_is_cached(self, cluster_molecule, small_ligand):
        builder = GaussianVolumeBuilder(cluster_molecule, small_ligand)
        assert builder.precalculation is builder.precalculation

    def test_changing_parameters_resets_cache(self, cluster_molecule, small_ligand):
        builder = GaussianVolumeBuilder(cluster_molecule, small_ligand)
        first = builder.precalculation
        builder.set_gaussian_cutoff(0.0)
        assert builder.precalculation is first
        builder.set_max_intersection_order(2)
        second = builder.precalculation
        assert second is not first
        assert second.max_order == 2
        builder.set_gaussian_cutoff(0.5)
        assert builder.precalculation.cutoff == 0.5

    def test_invalid_parameters(self, cluster_molecule, small_ligand):
        builder = GaussianVolumeBuilder(cluster_molecule, small_ligand)
        with pytest.raises(InvalidArgumentError):
            builder.set_gaussian_cutoff(-1.0)
        with pytest.raises(InvalidArgumentError):
            builder.set_max_intersection_order(0)
        assert builder.gaussian_cutoff == GaussianVolumeBuilder.DEFAULT_CUTOFF
        assert builder.max_intersection_order == GaussianVolumeBuilder.DEFAULT_MAX_INTERSECTION_ORDER

    def test_build_for_moved_fit(self, cluster_molecule, small_ligand):
        builder = GaussianVolumeBuilder(cluster_molecule, small_ligand)
        moved = small_ligand.clone()
        moved.move(1.0, 0.5, 0.0)
        engine = builder.build(moved)
        assert engine.refined_overlap_volume() == pytest.approx(
            GaussianVolume().overlap_volume(cluster_molecule, moved), rel=1e-8
        )
        assert builder.build().refined_overlap_volume() == pytest.approx(
            GaussianVolume().overlap_volume(cluster_molecule, small_ligand), rel=1e-8
        )

    def test_none_molecule_rejected(self, small_ligand):
        with pytest.raises(InvalidArgumentError):
            GaussianVolumeBuilder(None, small_ligand)


def product_volume(*atoms):
    """Volume of the product of atom Gaussians, each atom given as (position, radius)."""
    positions = np.array([position for position, _ in atoms], dtype=float)
    alphas = np.array([gaussian_alpha(radius) for _, radius in atoms])
    delta = alphas.sum()
    k = 0.0
    for i in range(len(atoms)):
        for j in range(i + 1, len(atoms)):
            k += alphas[i] * alphas[j] * np.sum((positions[i] - positions[j]) ** 2)
    return GAUSSIAN_P ** len(atoms) * np.exp(-k / delta) * (np.pi / delta) ** 1.5


class TestSecondOrderTerms:
    """Second order inclusion-exclusion checked against hand expansions."""

    A = ((0.0, 0.0, 0.0), 1.5)
    B = ((1.0, 0.0, 0.0), 1.5)
    F = ((0.5, 0.8, 0.0), 1.5)
    G = ((0.5, -0.7, 0.3), 1.5)

    @staticmethod
    def molecule(*atoms):
        return make_molecule([position for position, _ in atoms], radius=1.5)

    def test_pair_against_single_atom(self):
        reference = self.molecule(self.A, self.B)
        fit = self.molecule(self.F)
        pre = Precalculation.build(reference, fit, cutoff=0.0, max_order=2)
        engine = GaussianVolume.from_precalculation(reference, fit, pre)

        expected = (
            product_volume(self.A, self.F)
            + product_volume(self.B, self.F)
            - product_volume(self.A, self.B, self.F)
        )
        assert engine.refined_overlap_volume() == pytest.approx(expected, rel=1e-9)

    def test_pair_against_pair(self):
        reference = self.molecule(self.A, self.B)
        fit = self.molecule(self.F, self.G)
        pre = Precalculation.build(reference, fit, cutoff=0.0, max_order=2)
        engine = GaussianVolume.from_precalculation(reference, fit, pre)

        singles = sum(
            product_volume(ref, other) for ref in (self.A, self.B) for other in (self.F, self.G)
        )
        reference_pair = sum(product_volume(self.A, self.B, other) for other in (self.F, self.G))
        fit_pair = sum(product_volume(ref, self.F, self.G) for ref in (self.A, self.B))
        both_pairs = product_volume(self.A, self.B, self.F, self.G)

        expected = singles - reference_pair - fit_pair + both_pairs
        assert engine.refined_overlap_volume() == pytest.approx(expected, rel=1e-9)

    def test_reference_volume(self):
        reference = self.molecule(self.A, self.B)
        fit = self.molecule(self.F)
        pre = Precalculation.build(reference, fit, cutoff=0.0, max_order=2)
        engine = GaussianVolume.from_precalculation(None, fit, pre)

        singles = sum(product_volume(a, b) for a in (self.A, self.B) for b in (self.A, self.B))
        mixed = 2 * sum(product_volume(atom, self.A, self.B) for atom in (self.A, self.B))
        pairs = product_volume(self.A, self.B, self.A, self.B)

        expected = singles - mixed + pairs
        assert engine.reference_volume() == pytest.approx(expected, rel=1e-9)

    def test_distant_atoms_have_no_pair_term(self):
        """Reference atoms out of reach of each other contribute only pair overlaps."""
        far = ((3.5, 0.0, 0.0), 1.5)
        between = ((1.75, 0.5, 0.0), 1.5)
        reference = self.molecule(self.A, far)
        fit = self.molecule(between)
        pre = Precalculation.build(reference, fit, cutoff=0.0, max_order=2)
        engine = GaussianVolume.from_precalculation(reference, fit, pre)

        assert pre.reference.intersected_atom_ids[1] == ()
        expected = product_volume(self.A, between) + product_volume(far, between)
        assert engine.refined_overlap_volume() == pytest.approx(expected, rel=1e-9)
