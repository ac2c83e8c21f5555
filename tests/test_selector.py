"""Tests pour la chaîne de sélection de frappe."""

from __future__ import annotations

import pytest

from planestrike.app.errors import NoEligibleCell, StateInconsistency, StrategyUnavailable
from planestrike.app.events import StrikeSelectedEvent
from planestrike.app.model_store import ModelStore
from planestrike.app.selector import InferenceSelector, StrikeDecision
from planestrike.app.strategies import NeighborhoodSearch, StrikeStrategy
from planestrike.engine.event_bus import EventBus
from planestrike.engine.state import BoardState

from .sim_test_utils import grid_with, peaked_network


class _FixedStrategy(StrikeStrategy):
    name = "fixed"

    def __init__(self, cell):
        self._cell = cell

    def select(self, board, total_hits):
        return self._cell


class _UnavailableStrategy(StrikeStrategy):
    name = "unavailable"

    def __init__(self):
        self.calls = 0

    def select(self, board, total_hits):
        self.calls += 1
        raise StrategyUnavailable("indisponible")


def _board(**cells) -> BoardState:
    return BoardState.from_grid(grid_with(**cells))


def test_fresh_board_without_model_uses_neighbourhood(tmp_path):
    """Plateau vierge, aucun modèle: une case inexplorée est renvoyée."""
    selector = InferenceSelector.default(ModelStore(tmp_path / "absent.pt"), seed=1)
    decision = selector.select(BoardState.empty(), 0)

    assert decision.strategy == NeighborhoodSearch.name
    assert 0 <= decision.row < 6 and 0 <= decision.column < 6


def test_model_answer_preferred(tmp_path):
    store = ModelStore(tmp_path / "m.pt", network=peaked_network(14))
    decision = InferenceSelector.default(store, seed=0).select(BoardState.empty(), 0)
    assert decision == StrikeDecision(row=2, column=2, strategy="policy")


def test_inconsistent_count_rejected_before_strategies():
    """3 touchés sur le plateau pour 2 annoncés: aucune stratégie n'est appelée."""
    strategy = _UnavailableStrategy()
    selector = InferenceSelector([strategy])
    with pytest.raises(StateInconsistency):
        selector.select(_board(hits=[(0, 0), (2, 2), (4, 4)]), 2)
    assert strategy.calls == 0


def test_falls_back_in_order():
    selector = InferenceSelector([_UnavailableStrategy(), _FixedStrategy((4, 4))])
    assert selector.select(BoardState.empty(), 0).cell == (4, 4)


def test_struck_cell_from_strategy_is_ignored():
    selector = InferenceSelector([_FixedStrategy((0, 0)), _FixedStrategy((0, 1))])
    decision = selector.select(_board(misses=[(0, 0)]), 0)
    assert decision.cell == (0, 1)


def test_all_strategies_exhausted():
    selector = InferenceSelector([_UnavailableStrategy(), NeighborhoodSearch(seed=0)])
    board = _board(hits=[(2, 2)], misses=[(2, 3), (3, 2), (2, 1), (1, 2)])
    with pytest.raises(NoEligibleCell):
        selector.select(board, 1)


def test_publishes_selected_event():
    bus = EventBus()
    events = []
    bus.subscribe(events.append, StrikeSelectedEvent)
    InferenceSelector([_FixedStrategy((1, 2))], event_bus=bus).select(BoardState.empty(), 0)
    assert events == [StrikeSelectedEvent(row=1, column=2, strategy="fixed")]


def test_requires_a_strategy():
    with pytest.raises(ValueError):
        InferenceSelector([])


def test_never_returns_struck_cell(tmp_path):
    """Partie entière de ratés: chaque case est proposée une seule fois."""
    store = ModelStore(tmp_path / "m.pt", network=peaked_network(0, 1, 2))
    selector = InferenceSelector.default(store, seed=3)
    board = BoardState.empty()
    seen = set()
    for _ in range(36):
        decision = selector.select(board, 0)
        assert board.is_eligible(decision.row, decision.column)
        seen.add(decision.cell)
        board.record_outcome(decision.row, decision.column, False)
    assert len(seen) == 36
    with pytest.raises(NoEligibleCell):
        selector.select(board, 0)
