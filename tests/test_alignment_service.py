import numpy as np
import pytest

from gaussshape.core.config import AlignmentConfig
from gaussshape.core.domain.implementations.gaussian_volume import GaussianVolume
from gaussshape.core.domain.models.molecule import Molecule
from gaussshape.core.exceptions import EmptyMoleculeError, InvalidArgumentError
from gaussshape.core.services.alignment_service import AlignmentService


@pytest.fixture
def config():
    return AlignmentConfig(initial_groups=8, max_iterations=80, seed=1)


@pytest.fixture
def service(config):
    return AlignmentService(config)


class TestInitialGroups:
    """Tests for random initial simplices."""

    def test_shape_and_ranges(self, service):
        groups = service.generate_initial_groups(5)
        assert len(groups) == 5
        for group in groups:
            assert group.shape == (7, 6)
            assert np.all(np.abs(group[:, :3]) <= 4.0)
            assert np.all(np.abs(group[:, 3:]) <= np.pi)

    def test_custom_point_count(self, service):
        assert service.generate_initial_groups(1, n_points=9)[0].shape == (9, 6)

    def test_seeded_generation_is_reproducible(self, config):
        first = AlignmentService(config).generate_initial_groups(3)
        second = AlignmentService(config).generate_initial_groups(3)
        assert all(np.array_equal(a, b) for a, b in zip(first, second))

    def test_rejects_non_positive_count(self, service):
        with pytest.raises(InvalidArgumentError):
            service.generate_initial_groups(0)

    @pytest.mark.parametrize("n_points", [0, 1, 6])
    def test_rejects_too_few_points(self, service, n_points):
        """An explicit point count below dimension + 1 is an error, not the default."""
        with pytest.raises(InvalidArgumentError, match="at least 7 points"):
            service.generate_initial_groups(2, n_points=n_points)


class TestAlignmentService:
    """Tests for overlap maximization and volume evaluation."""

    def test_evaluate_volume(self, service, small_ligand):
        assert service.evaluate_volume(small_ligand) == pytest.approx(
            GaussianVolume().self_volume(small_ligand)
        )

    def test_empty_molecule_rejected(self, service, small_ligand):
        with pytest.raises(EmptyMoleculeError):
            service.evaluate_volume(Molecule())
        with pytest.raises(EmptyMoleculeError):
            service.evaluate_max_overlap(small_ligand, Molecule())
        with pytest.raises(InvalidArgumentError):
            service.evaluate_max_overlap(None, small_ligand)

    def test_max_overlap_of_shifted_copy(self, service, small_ligand):
        fit = small_ligand.clone()
        fit.move(5.0, -3.0, 2.0)
        result = service.evaluate_max_overlap(small_ligand, fit)

        self_volume = service.evaluate_volume(small_ligand)
        assert result.overlap_volume > 0.4 * self_volume
        assert result.reference_volume == pytest.approx(self_volume)
        assert result.fit_volume == pytest.approx(self_volume)
        assert 0.0 < result.similarity
        assert result.parameters.shape == (6,)

    def test_fit_transformation_reproduces_overlap(self, service, small_ligand, cluster_molecule):
        result = service.evaluate_max_overlap(cluster_molecule, small_ligand)
        moved = small_ligand.clone()
        result.fit_transformation.apply(moved)
        overlap = GaussianVolume().overlap_volume(cluster_molecule, moved)
        assert overlap == pytest.approx(result.overlap_volume, rel=1e-9)

    def test_known_reference_volume_is_reused(self, service, small_ligand, cluster_molecule):
        result = service.evaluate_max_overlap(cluster_molecule, small_ligand, reference_volume=42.0)
        assert result.reference_volume == 42.0
        assert result.fit_volume == pytest.approx(service.evaluate_volume(small_ligand))

    def test_inputs_are_not_modified(self, service, small_ligand, cluster_molecule):
        before = small_ligand.coordinates()
        service.evaluate_max_overlap(cluster_molecule, small_ligand)
        assert np.allclose(small_ligand.coordinates(), before)

    def test_same_seed_same_result(self, config, small_ligand, cluster_molecule):
        first = AlignmentService(config).evaluate_max_overlap(cluster_molecule, small_ligand)
        second = AlignmentService(config).evaluate_max_overlap(cluster_molecule, small_ligand)
        assert first.overlap_volume == second.overlap_volume
        assert np.array_equal(first.parameters, second.parameters)

    def test_refined_overlap_first_order(self, service, small_ligand, cluster_molecule):
        refined = service.evaluate_refined_overlap(cluster_molecule, small_ligand)
        direct = GaussianVolume().overlap_volume(cluster_molecule, small_ligand)
        assert refined == pytest.approx(direct, rel=1e-8)

    def test_refined_overlap_after_alignment(self, service, small_ligand, cluster_molecule):
        result = service.evaluate_max_overlap(cluster_molecule, small_ligand)
        refined = service.evaluate_refined_overlap(
            cluster_molecule, small_ligand, result.fit_transformation
        )
        assert refined == pytest.approx(result.overlap_volume, rel=1e-8)

    def test_parameters_use_file_names(self, service):
        parameters = service.parameters()
        assert parameters["SIMPLEX_MAX_ITERATION"] == "80"
        assert parameters["SIMPLEX_GAUSSIAN_INITIAL_SOLUTION_GROUP_NUM"] == "8"
        assert parameters["SIMPLEX_EXTENSION_FACTOR"] == "3.5"

    def test_configure(self, service):
        service.configure(AlignmentConfig(max_iterations=3))
        assert service.config.max_iterations == 3
