"""Tests pour la géométrie de l'avion et le tirage des cibles."""

import random
from collections import Counter

import pytest

from planestrike.engine.board import (
    CoreBounds,
    Orientation,
    OwnerCell,
    PlanePlacement,
    TargetGenerator,
    cell_to_index,
    core_bounds,
    index_to_cell,
)
from planestrike.engine.rules import PLANE_SIZE


EXPECTED_BOUNDS_6X6 = {
    Orientation.RIGHT: CoreBounds(1, 4, 2, 4),
    Orientation.UP: CoreBounds(1, 3, 1, 4),
    Orientation.LEFT: CoreBounds(1, 4, 1, 3),
    Orientation.DOWN: CoreBounds(2, 4, 1, 4),
}


class TestPlanePlacement:
    """Tests pour la forme et les bornes de l'avion."""

    @pytest.mark.parametrize("orientation", list(Orientation))
    def test_core_bounds_match_table(self, orientation):
        """Les bornes du coeur suivent la table par orientation."""
        assert core_bounds(orientation, height=6, width=6) == EXPECTED_BOUNDS_6X6[orientation]

    def test_core_bounds_scale_with_board(self):
        """Bornes exprimées relativement à H et W."""
        bounds = core_bounds(Orientation.UP, height=8, width=10)
        assert bounds == CoreBounds(1, 8 - 3, 1, 10 - 2)

    def test_right_orientation_cells(self):
        """Coeur en (2, 3) vers la droite: croix + queue en colonne 1."""
        placement = PlanePlacement.at(Orientation.RIGHT, (2, 3), height=6, width=6)
        assert set(placement.cells) == {
            (2, 3), (1, 3), (3, 3), (2, 4), (2, 2),
            (2, 1), (1, 1), (3, 1),
        }

    def test_down_orientation_cells(self):
        """Vers le bas, la queue est deux lignes au-dessus du coeur."""
        placement = PlanePlacement.at(Orientation.DOWN, (2, 1), height=6, width=6)
        assert {(0, 0), (0, 1), (0, 2)} <= set(placement.cells)

    @pytest.mark.parametrize("orientation", list(Orientation))
    def test_core_outside_bounds_rejected(self, orientation):
        """Un coeur hors bornes lève ValueError."""
        with pytest.raises(ValueError):
            PlanePlacement.at(orientation, (0, 0), height=6, width=6)

    def test_owner_grid_marks_covered_cells(self):
        """La grille propriétaire contient exactement 8 cases couvertes."""
        placement = PlanePlacement.at(Orientation.LEFT, (3, 2), height=6, width=6)
        grid = placement.to_owner_grid()
        assert (grid == OwnerCell.COVERED).sum() == PLANE_SIZE
        assert (grid == OwnerCell.UNSTRUCK).sum() == 36 - PLANE_SIZE

    def test_duplicate_cells_rejected(self):
        """Un placement doit couvrir 8 cases distinctes."""
        with pytest.raises(ValueError):
            PlanePlacement(orientation=Orientation.UP, core=(2, 2), cells=((2, 2),) * 8)

    def test_index_conversion(self):
        """Index plat = row * W + column, et inversement."""
        assert cell_to_index(2, 3, 6) == 15
        assert index_to_cell(15, 6) == (2, 3)
        assert all(index_to_cell(cell_to_index(r, c)) == (r, c) for r in range(6) for c in range(6))


class TestTargetGenerator:
    """Tests pour le tirage des avions cachés."""

    def test_many_targets_are_valid(self):
        """10 000 tirages: 8 cases distinctes, dans le plateau, coeur dans les bornes."""
        generator = TargetGenerator(seed=123)
        orientations = Counter()
        for _ in range(10_000):
            placement = generator.generate()
            orientations[placement.orientation] += 1
            assert len(set(placement.cells)) == PLANE_SIZE
            assert all(0 <= r < 6 and 0 <= c < 6 for r, c in placement.cells)
            assert EXPECTED_BOUNDS_6X6[placement.orientation].contains(*placement.core)
        assert set(orientations) == set(Orientation)

    def test_same_seed_same_targets(self):
        """Même seed → même séquence de cibles."""
        gen_a = TargetGenerator(seed=5)
        gen_b = TargetGenerator(seed=5)
        assert [gen_a.generate() for _ in range(20)] == [gen_b.generate() for _ in range(20)]

    def test_injected_rng_is_used(self):
        """Le générateur consomme la source aléatoire fournie."""
        rng = random.Random(9)
        generator = TargetGenerator(rng=rng)
        expected = TargetGenerator(rng=random.Random(9)).generate()
        assert generator.generate() == expected

    def test_board_too_small_rejected(self):
        """Un plateau plus petit que 4x4 ne peut pas contenir l'avion."""
        with pytest.raises(ValueError):
            TargetGenerator(height=3, width=6)
