"""Boucle headless pour le moteur Plane Strike.

Ce module expose un environnement minimaliste piloté via `reset()` / `step()`.
Il contrôle à la fois le plateau du propriétaire (vérité terrain) et le
plateau observé, qui ne peuvent donc jamais diverger.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

import numpy as np

from planestrike.engine.board import PlanePlacement, TargetGenerator
from planestrike.engine.rules import BOARD_HEIGHT, BOARD_WIDTH
from planestrike.engine.state import BoardState, TargetBoard


@dataclass(frozen=True)
class StepResult:
    """Résultat d'un appel à HeadlessEnv.step()."""

    index: int
    row: int
    column: int
    hit: bool
    hits: int
    done: bool


class HeadlessEnv:
    """Environnement headless: un avion caché, un plateau observé."""

    def __init__(
        self,
        *,
        height: int = BOARD_HEIGHT,
        width: int = BOARD_WIDTH,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._random = rng or random.Random(seed)
        self._generator = TargetGenerator(height=height, width=width, rng=self._random)
        self._target: TargetBoard | None = None
        self._observation: BoardState | None = None

    @property
    def height(self) -> int:
        return self._generator.height

    @property
    def width(self) -> int:
        return self._generator.width

    @property
    def board_size(self) -> int:
        return self.height * self.width

    @property
    def target(self) -> TargetBoard:
        if self._target is None:
            raise RuntimeError("reset() doit être appelé avant d'accéder à la cible")
        return self._target

    @property
    def observation(self) -> BoardState:
        """Retourne le plateau observé courant (reset doit avoir été appelé)."""

        if self._observation is None:
            raise RuntimeError("reset() doit être appelé avant d'accéder à l'observation")
        return self._observation

    @property
    def done(self) -> bool:
        return self.target.destroyed or self.observation.strikes >= self.board_size

    def reset(self, *, placement: PlanePlacement | None = None) -> BoardState:
        """Réinitialise l'environnement et renvoie le plateau observé vide."""

        resolved = placement or self._generator.generate()
        if (resolved.height, resolved.width) != (self.height, self.width):
            raise ValueError("Le placement ne correspond pas aux dimensions du plateau")
        self._target = TargetBoard(resolved)
        self._observation = BoardState.empty(self.height, self.width)
        return self._observation

    def legal_actions_mask(self) -> np.ndarray:
        """Masque booléen aplati des cases encore frappables."""

        return ~self.observation.struck_mask()

    def step(self, index: int) -> StepResult:
        """Frappe la case d'index aplati `index` et renvoie le résultat."""

        if self.done:
            raise RuntimeError("La partie est terminée, appeler reset()")
        if not 0 <= index < self.board_size:
            raise ValueError(f"Index de case invalide: {index}")

        observation = self.observation
        row, column = observation.cell_at(index)
        if observation.is_struck(row, column):
            raise ValueError(f"Case déjà frappée: {(row, column)}")

        result = self.target.strike(row, column)
        observation.record_outcome(row, column, result.is_hit)
        return StepResult(
            index=index,
            row=row,
            column=column,
            hit=result.is_hit,
            hits=observation.hits,
            done=self.done,
        )


__all__ = ["HeadlessEnv", "StepResult"]
