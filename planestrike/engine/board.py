"""Géométrie du plateau et placement de l'avion caché.

L'avion occupe toujours 8 cases:
- une croix (le coeur `*` et ses 4 voisins orthogonaux)
- une queue de 3 cases, 2 cases derrière le coeur selon l'orientation

          |          | |
         -*-         |-*-
          |          | |
         ---

Le placement est piloté par une table: chaque orientation fournit ses 3
décalages de queue, et les bornes du coeur se déduisent des décalages de la
forme complète. Le placement est donc toujours valide, sans tirage à rejet.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Tuple

import numpy as np

from planestrike.engine.rules import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    MIN_BOARD_DIMENSION,
    PLANE_SIZE,
)

Cell = Tuple[int, int]
Offset = Tuple[int, int]


class Orientation(Enum):
    """Direction vers laquelle pointe l'avion (la queue est à l'opposé)."""

    RIGHT = 0
    UP = 1
    LEFT = 2
    DOWN = 3


class ObserverCell(IntEnum):
    """État d'une case vue par le joueur qui frappe."""

    MISS = -1
    UNKNOWN = 0
    HIT = 1


class OwnerCell(IntEnum):
    """État d'une case vue par le propriétaire de l'avion."""

    STRUCK_MISS = -1
    UNSTRUCK = 0
    COVERED = 1
    COVERED_HIT = 2


CROSS_OFFSETS: Tuple[Offset, ...] = ((0, 0), (1, 0), (-1, 0), (0, 1), (0, -1))

TAIL_OFFSETS: Dict[Orientation, Tuple[Offset, ...]] = {
    Orientation.RIGHT: ((0, -2), (-1, -2), (1, -2)),
    Orientation.UP: ((2, 0), (2, 1), (2, -1)),
    Orientation.LEFT: ((0, 2), (-1, 2), (1, 2)),
    Orientation.DOWN: ((-2, 0), (-2, 1), (-2, -1)),
}


@dataclass(frozen=True)
class CoreBounds:
    """Intervalle inclusif des positions possibles du coeur."""

    min_row: int
    max_row: int
    min_column: int
    max_column: int

    def contains(self, row: int, column: int) -> bool:
        return (
            self.min_row <= row <= self.max_row
            and self.min_column <= column <= self.max_column
        )


def shape_offsets(orientation: Orientation) -> Tuple[Offset, ...]:
    """Décalages (relatifs au coeur) des 8 cases de l'avion."""

    return CROSS_OFFSETS + TAIL_OFFSETS[orientation]


def core_bounds(
    orientation: Orientation,
    *,
    height: int = BOARD_HEIGHT,
    width: int = BOARD_WIDTH,
) -> CoreBounds:
    """Calcule les bornes du coeur pour que la forme tienne dans la grille."""

    _validate_dimensions(height, width)
    offsets = shape_offsets(orientation)
    row_offsets = [dr for dr, _ in offsets]
    column_offsets = [dc for _, dc in offsets]
    return CoreBounds(
        min_row=-min(row_offsets),
        max_row=height - 1 - max(row_offsets),
        min_column=-min(column_offsets),
        max_column=width - 1 - max(column_offsets),
    )


def cell_to_index(row: int, column: int, width: int = BOARD_WIDTH) -> int:
    return row * width + column


def index_to_cell(index: int, width: int = BOARD_WIDTH) -> Cell:
    return divmod(index, width)


@dataclass(frozen=True)
class PlanePlacement:
    """Position concrète d'un avion sur une grille donnée."""

    orientation: Orientation
    core: Cell
    cells: Tuple[Cell, ...]
    height: int = BOARD_HEIGHT
    width: int = BOARD_WIDTH

    def __post_init__(self) -> None:
        if len(set(self.cells)) != PLANE_SIZE:
            raise ValueError(
                f"Un avion doit couvrir exactement {PLANE_SIZE} cases distinctes"
            )
        for row, column in self.cells:
            if not (0 <= row < self.height and 0 <= column < self.width):
                raise ValueError(f"Case hors plateau: {(row, column)}")

    @classmethod
    def at(
        cls,
        orientation: Orientation,
        core: Cell,
        *,
        height: int = BOARD_HEIGHT,
        width: int = BOARD_WIDTH,
    ) -> "PlanePlacement":
        """Construit le placement dont le coeur est en `core`."""

        bounds = core_bounds(orientation, height=height, width=width)
        core_row, core_column = core
        if not bounds.contains(core_row, core_column):
            raise ValueError(
                f"Coeur {core} hors des bornes {bounds} pour {orientation.name}"
            )
        cells = tuple(
            (core_row + dr, core_column + dc) for dr, dc in shape_offsets(orientation)
        )
        return cls(
            orientation=orientation,
            core=core,
            cells=cells,
            height=height,
            width=width,
        )

    def to_owner_grid(self) -> np.ndarray:
        """Grille vérité terrain: COVERED sur l'avion, UNSTRUCK ailleurs."""

        grid = np.full((self.height, self.width), OwnerCell.UNSTRUCK, dtype=np.int8)
        for row, column in self.cells:
            grid[row, column] = OwnerCell.COVERED
        return grid


class TargetGenerator:
    """Tire des avions cachés uniformément (orientation puis coeur)."""

    def __init__(
        self,
        *,
        height: int = BOARD_HEIGHT,
        width: int = BOARD_WIDTH,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        _validate_dimensions(height, width)
        self._height = height
        self._width = width
        self._random = rng or random.Random(seed)
        self._bounds = {
            orientation: core_bounds(orientation, height=height, width=width)
            for orientation in Orientation
        }

    @property
    def height(self) -> int:
        return self._height

    @property
    def width(self) -> int:
        return self._width

    def generate(self) -> PlanePlacement:
        orientation = self._random.choice(tuple(Orientation))
        bounds = self._bounds[orientation]
        core = (
            self._random.randint(bounds.min_row, bounds.max_row),
            self._random.randint(bounds.min_column, bounds.max_column),
        )
        return PlanePlacement.at(
            orientation, core, height=self._height, width=self._width
        )


def _validate_dimensions(height: int, width: int) -> None:
    if height < MIN_BOARD_DIMENSION or width < MIN_BOARD_DIMENSION:
        raise ValueError(
            f"Le plateau doit mesurer au moins {MIN_BOARD_DIMENSION}x{MIN_BOARD_DIMENSION}"
            f" (reçu: {height}x{width})"
        )


__all__ = [
    "Cell",
    "CoreBounds",
    "CROSS_OFFSETS",
    "ObserverCell",
    "Orientation",
    "OwnerCell",
    "PlanePlacement",
    "TAIL_OFFSETS",
    "TargetGenerator",
    "cell_to_index",
    "core_bounds",
    "index_to_cell",
    "shape_offsets",
]
