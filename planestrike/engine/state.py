"""États de plateau d'une partie de Plane Strike.

Deux points de vue coexistent:
- `BoardState`: le plateau observé par celui qui frappe (inconnu/touché/raté)
- `TargetBoard`: le plateau du propriétaire de l'avion, qui connaît la vérité
  terrain et l'historique des frappes reçues
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

import numpy as np

from planestrike.engine.board import (
    Cell,
    ObserverCell,
    OwnerCell,
    PlanePlacement,
    index_to_cell,
)
from planestrike.engine.rules import BOARD_HEIGHT, BOARD_WIDTH, PLANE_SIZE

logger = logging.getLogger(__name__)

_OBSERVER_VALUES = frozenset(int(value) for value in ObserverCell)


class StrikeResult(Enum):
    """Résultat d'une frappe sur le plateau du propriétaire."""

    HIT = "HIT"
    MISS = "MISS"
    REPEAT_HIT = "REPEAT_HIT"
    REPEAT_MISS = "REPEAT_MISS"

    @property
    def is_hit(self) -> bool:
        return self in (StrikeResult.HIT, StrikeResult.REPEAT_HIT)

    @property
    def is_repeat(self) -> bool:
        return self in (StrikeResult.REPEAT_HIT, StrikeResult.REPEAT_MISS)


@dataclass(eq=False)
class BoardState:
    """Plateau observé par le joueur qui frappe.

    `grid` contient des valeurs `ObserverCell`; `hits` compte les cases
    touchées enregistrées via `record_outcome`.
    """

    grid: np.ndarray
    hits: int = 0

    def __post_init__(self) -> None:
        if self.grid.ndim != 2:
            raise ValueError("La grille d'observation doit être en 2 dimensions")

    @classmethod
    def empty(cls, height: int = BOARD_HEIGHT, width: int = BOARD_WIDTH) -> "BoardState":
        return cls(grid=np.zeros((height, width), dtype=np.int8))

    @classmethod
    def from_grid(cls, rows: Sequence[Sequence[int]]) -> "BoardState":
        """Construit un plateau depuis une grille de valeurs {-1, 0, 1}.

        Le compteur `hits` est recalculé depuis la grille; la cohérence avec un
        compteur externe est vérifiée par le sélecteur de frappe.
        """

        if not isinstance(rows, (list, tuple)) or not rows:
            raise ValueError("La grille d'observation doit être une liste de lignes non vide")
        width = None
        for row in rows:
            if not isinstance(row, (list, tuple)) or not row:
                raise ValueError(f"Ligne d'observation invalide: {row!r}")
            if width is not None and len(row) != width:
                raise ValueError("La grille d'observation doit être rectangulaire")
            width = len(row)
            for value in row:
                # bool est une sous-classe d'int; les flottants seraient tronqués
                if isinstance(value, bool) or not isinstance(value, int) or value not in _OBSERVER_VALUES:
                    raise ValueError(f"Valeur de case invalide: {value!r}")

        grid = np.array(rows, dtype=np.int8)
        return cls(grid=grid, hits=int(np.count_nonzero(grid == ObserverCell.HIT)))

    @property
    def height(self) -> int:
        return int(self.grid.shape[0])

    @property
    def width(self) -> int:
        return int(self.grid.shape[1])

    @property
    def size(self) -> int:
        return int(self.grid.size)

    @property
    def strikes(self) -> int:
        return int(np.count_nonzero(self.grid != ObserverCell.UNKNOWN))

    def in_bounds(self, row: int, column: int) -> bool:
        return 0 <= row < self.height and 0 <= column < self.width

    def cell_state(self, row: int, column: int) -> ObserverCell:
        return ObserverCell(int(self.grid[row, column]))

    def is_struck(self, row: int, column: int) -> bool:
        return self.cell_state(row, column) != ObserverCell.UNKNOWN

    def is_eligible(self, row: int, column: int) -> bool:
        """Vrai si la case est sur le plateau et n'a jamais été frappée."""

        return self.in_bounds(row, column) and not self.is_struck(row, column)

    def known_hit_cells(self) -> List[Cell]:
        """Cases touchées, dans l'ordre de lecture (ligne puis colonne)."""

        rows, columns = np.nonzero(self.grid == ObserverCell.HIT)
        return [(int(r), int(c)) for r, c in zip(rows, columns)]

    def unexplored_cells(self) -> List[Cell]:
        rows, columns = np.nonzero(self.grid == ObserverCell.UNKNOWN)
        return [(int(r), int(c)) for r, c in zip(rows, columns)]

    def flatten(self) -> np.ndarray:
        return self.grid.reshape(-1).copy()

    def struck_mask(self) -> np.ndarray:
        """Masque booléen aplati: True pour les cases déjà frappées."""

        return self.grid.reshape(-1) != ObserverCell.UNKNOWN

    def cell_at(self, index: int) -> Cell:
        return index_to_cell(index, self.width)

    def record_outcome(self, row: int, column: int, hit: bool) -> bool:
        """Enregistre le résultat confirmé d'une frappe.

        Retourne True si la frappe est nouvelle. Une frappe répétée sur une
        case déjà renseignée écrase son état mais ne recompte pas le touché.
        """

        if not self.in_bounds(row, column):
            raise ValueError(f"Case hors plateau: {(row, column)}")

        previous = self.cell_state(row, column)
        if previous != ObserverCell.UNKNOWN:
            logger.info("Frappe répétée en %s (état précédent: %s)", (row, column), previous.name)
        if previous == ObserverCell.HIT and not hit:
            self.hits -= 1
        elif previous != ObserverCell.HIT and hit:
            self.hits += 1
        self.grid[row, column] = ObserverCell.HIT if hit else ObserverCell.MISS
        return previous == ObserverCell.UNKNOWN

    def copy(self) -> "BoardState":
        return BoardState(grid=self.grid.copy(), hits=self.hits)


@dataclass(eq=False)
class TargetBoard:
    """Plateau du propriétaire: vérité terrain + historique des frappes."""

    placement: PlanePlacement
    grid: np.ndarray = field(init=False)
    hits_taken: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.grid = self.placement.to_owner_grid()

    @property
    def height(self) -> int:
        return self.placement.height

    @property
    def width(self) -> int:
        return self.placement.width

    @property
    def destroyed(self) -> bool:
        return self.hits_taken >= PLANE_SIZE

    def cell_state(self, row: int, column: int) -> OwnerCell:
        return OwnerCell(int(self.grid[row, column]))

    def strike(self, row: int, column: int) -> StrikeResult:
        """Applique une frappe et renvoie son résultat.

        Une case déjà frappée renvoie le résultat précédent sans rien recompter.
        """

        if not (0 <= row < self.height and 0 <= column < self.width):
            raise ValueError(f"Case hors plateau: {(row, column)}")

        state = self.cell_state(row, column)
        if state == OwnerCell.COVERED:
            self.grid[row, column] = OwnerCell.COVERED_HIT
            self.hits_taken += 1
            return StrikeResult.HIT
        if state == OwnerCell.UNSTRUCK:
            self.grid[row, column] = OwnerCell.STRUCK_MISS
            return StrikeResult.MISS
        if state == OwnerCell.COVERED_HIT:
            return StrikeResult.REPEAT_HIT
        return StrikeResult.REPEAT_MISS


__all__ = ["BoardState", "StrikeResult", "TargetBoard"]
