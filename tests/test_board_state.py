"""Tests pour les plateaux observé et propriétaire."""

import numpy as np
import pytest

from planestrike.engine.board import ObserverCell, Orientation, OwnerCell, PlanePlacement
from planestrike.engine.state import BoardState, StrikeResult, TargetBoard

from .sim_test_utils import grid_with


def _placement() -> PlanePlacement:
    return PlanePlacement.at(Orientation.RIGHT, (2, 3), height=6, width=6)


class TestBoardState:
    """Tests pour le plateau observé."""

    def test_empty_board_is_unknown(self):
        board = BoardState.empty(6, 6)
        assert board.grid.shape == (6, 6)
        assert board.strikes == 0
        assert board.hits == 0
        assert len(board.unexplored_cells()) == 36

    def test_from_grid_counts_hits(self):
        """Le compteur est recalculé depuis la grille."""
        board = BoardState.from_grid(grid_with(hits=[(1, 1), (4, 2)], misses=[(0, 0)]))
        assert board.hits == 2
        assert board.strikes == 3
        assert board.known_hit_cells() == [(1, 1), (4, 2)]

    def test_from_grid_rejects_unknown_values(self):
        grid = grid_with()
        grid[0][0] = 2
        with pytest.raises(ValueError):
            BoardState.from_grid(grid)

    def test_from_grid_rejects_ragged_rows(self):
        with pytest.raises(ValueError):
            BoardState.from_grid([[0, 0], [0]])

    @pytest.mark.parametrize("value", [None, 0.7, 1.9, True, "1"])
    def test_from_grid_rejects_non_integer_cells(self, value):
        """Aucune conversion implicite: None, flottants, booléens et chaînes sont refusés."""
        grid = grid_with()
        grid[2][3] = value
        with pytest.raises(ValueError):
            BoardState.from_grid(grid)

    @pytest.mark.parametrize("rows", [[], [[]], "000", [None], [[0, 0], "00"]])
    def test_from_grid_rejects_bad_rows(self, rows):
        with pytest.raises(ValueError):
            BoardState.from_grid(rows)

    def test_known_hits_in_row_major_order(self):
        board = BoardState.from_grid(grid_with(hits=[(3, 0), (0, 5), (0, 1)]))
        assert board.known_hit_cells() == [(0, 1), (0, 5), (3, 0)]

    def test_record_outcome_new_hit(self):
        board = BoardState.empty()
        assert board.record_outcome(2, 2, True) is True
        assert board.cell_state(2, 2) == ObserverCell.HIT
        assert board.hits == 1

    def test_record_outcome_repeat_not_double_counted(self):
        """Une frappe répétée ne recompte pas le touché."""
        board = BoardState.empty()
        board.record_outcome(2, 2, True)
        assert board.record_outcome(2, 2, True) is False
        assert board.hits == 1

    def test_record_outcome_out_of_bounds(self):
        with pytest.raises(ValueError):
            BoardState.empty().record_outcome(6, 0, False)

    def test_struck_mask_matches_grid(self):
        board = BoardState.from_grid(grid_with(hits=[(0, 1)], misses=[(5, 5)]))
        mask = board.struck_mask()
        assert mask.dtype == np.bool_
        assert mask[1] and mask[35]
        assert mask.sum() == 2

    def test_is_eligible(self):
        board = BoardState.from_grid(grid_with(misses=[(0, 0)]))
        assert not board.is_eligible(0, 0)
        assert not board.is_eligible(-1, 0)
        assert not board.is_eligible(0, 6)
        assert board.is_eligible(0, 1)

    def test_copy_is_independent(self):
        board = BoardState.empty()
        clone = board.copy()
        clone.record_outcome(0, 0, True)
        assert board.strikes == 0
        assert board.hits == 0


class TestTargetBoard:
    """Tests pour le plateau du propriétaire."""

    def test_strike_hit_then_repeat(self):
        target = TargetBoard(_placement())
        assert target.strike(2, 3) is StrikeResult.HIT
        assert target.cell_state(2, 3) == OwnerCell.COVERED_HIT
        assert target.strike(2, 3) is StrikeResult.REPEAT_HIT
        assert target.hits_taken == 1

    def test_strike_miss_then_repeat(self):
        target = TargetBoard(_placement())
        assert target.strike(0, 0) is StrikeResult.MISS
        assert target.strike(0, 0) is StrikeResult.REPEAT_MISS
        assert target.cell_state(0, 0) == OwnerCell.STRUCK_MISS
        assert target.hits_taken == 0

    def test_destroyed_after_all_cells_hit(self):
        placement = _placement()
        target = TargetBoard(placement)
        for row, column in placement.cells:
            assert not target.destroyed
            target.strike(row, column)
        assert target.destroyed

    def test_strike_out_of_bounds(self):
        with pytest.raises(ValueError):
            TargetBoard(_placement()).strike(0, 6)

    def test_result_flags(self):
        assert StrikeResult.REPEAT_HIT.is_hit and StrikeResult.REPEAT_HIT.is_repeat
        assert not StrikeResult.MISS.is_hit and not StrikeResult.MISS.is_repeat
