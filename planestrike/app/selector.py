"""Sélection de la prochaine frappe par une chaîne ordonnée de stratégies."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Sequence, Tuple

from planestrike.app.errors import NoEligibleCell, StrategyUnavailable
from planestrike.app.events import StrikeSelectedEvent
from planestrike.app.strategies import (
    ModelSource,
    NeighborhoodSearch,
    PolicyArgmaxStrategy,
    StrikeStrategy,
    check_consistency,
)
from planestrike.engine.event_bus import EventBus
from planestrike.engine.state import BoardState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrikeDecision:
    """Case retenue et nom de la stratégie qui l'a proposée."""

    row: int
    column: int
    strategy: str

    @property
    def cell(self) -> Tuple[int, int]:
        return (self.row, self.column)


class InferenceSelector:
    """Essaie les stratégies dans l'ordre jusqu'à obtenir une case valide.

    Le plateau et le compteur de touchés sont vérifiés avant toute stratégie:
    une incohérence lève `StateInconsistency` sans repli. Quand toutes les
    stratégies sont indisponibles, `NoEligibleCell` est levée.
    """

    def __init__(
        self,
        strategies: Sequence[StrikeStrategy],
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        if not strategies:
            raise ValueError("Au moins une stratégie est requise")
        self._strategies = tuple(strategies)
        self._event_bus = event_bus or EventBus()

    @classmethod
    def default(
        cls,
        source: ModelSource,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
        event_bus: EventBus | None = None,
    ) -> "InferenceSelector":
        """Chaîne standard: argmax du modèle puis recherche de voisinage."""

        return cls(
            [PolicyArgmaxStrategy(source), NeighborhoodSearch(seed=seed, rng=rng)],
            event_bus=event_bus,
        )

    @property
    def strategies(self) -> Tuple[StrikeStrategy, ...]:
        return self._strategies

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    def select(self, board: BoardState, total_hits: int) -> StrikeDecision:
        if total_hits < 0:
            raise ValueError(f"total_hits doit être positif (reçu: {total_hits})")
        check_consistency(board, total_hits)

        for strategy in self._strategies:
            try:
                row, column = strategy.select(board, total_hits)
            except NoEligibleCell:
                logger.warning("Stratégie %s: aucune case éligible", strategy.name)
                continue
            except StrategyUnavailable as exc:
                logger.warning("Stratégie %s indisponible (%s), repli", strategy.name, exc)
                continue

            if not board.is_eligible(row, column):
                # Une stratégie ne doit jamais renvoyer une case déjà frappée.
                logger.warning(
                    "Stratégie %s: case %s non éligible ignorée", strategy.name, (row, column)
                )
                continue

            decision = StrikeDecision(row=row, column=column, strategy=strategy.name)
            self._event_bus.publish(
                StrikeSelectedEvent(row=row, column=column, strategy=strategy.name)
            )
            return decision

        raise NoEligibleCell("Aucune stratégie n'a proposé de case éligible")


__all__ = ["InferenceSelector", "StrikeDecision"]
