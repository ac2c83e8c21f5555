"""Stratégies de choix de la prochaine frappe.

Chaque stratégie renvoie une case `(row, column)` inexplorée ou lève
`StrategyUnavailable` pour laisser la main à la suivante dans la chaîne du
sélecteur.
"""

from __future__ import annotations

import random
from typing import Protocol, Tuple

import numpy as np
import torch

from planestrike.app.errors import NoEligibleCell, StateInconsistency, StrategyUnavailable
from planestrike.engine.board import Cell
from planestrike.engine.state import BoardState
from planestrike.rl.features import encode_observation, legal_actions_mask, observations_to_tensor
from planestrike.rl.network import PlaneStrikePolicyNetwork

# Ordre de sondage autour d'une case touchée: droite, bas, gauche, haut.
PROBE_OFFSETS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))


class ModelSource(Protocol):
    @property
    def network(self) -> PlaneStrikePolicyNetwork | None: ...


class StrikeStrategy:
    """Interface commune des stratégies de frappe."""

    name: str = "strategy"

    def select(self, board: BoardState, total_hits: int) -> Cell:
        raise NotImplementedError


def check_consistency(board: BoardState, total_hits: int) -> None:
    """Lève StateInconsistency si le compteur ne correspond pas au plateau."""

    board_hits = len(board.known_hit_cells())
    if board_hits != total_hits:
        raise StateInconsistency(recorded_hits=total_hits, board_hits=board_hits)


class PolicyArgmaxStrategy(StrikeStrategy):
    """Case inexplorée de plus forte probabilité selon le réseau servi."""

    name = "policy"

    def __init__(self, source: ModelSource) -> None:
        self._source = source

    def select(self, board: BoardState, total_hits: int) -> Cell:
        # Instantané lu une seule fois: un rechargement concurrent n'a pas d'effet ici.
        network = self._source.network
        if network is None:
            raise StrategyUnavailable("Aucun modèle chargé")

        if network.action_size != board.size or network.input_size != board.size:
            raise StrategyUnavailable(
                f"Le modèle attend {network.action_size} cases, le plateau en a {board.size}"
            )

        legal = torch.from_numpy(legal_actions_mask(board))[None, :]
        with torch.no_grad():
            logits = network(observations_to_tensor(encode_observation(board)))
            probs = network.masked_softmax(logits, legal)[0].numpy().astype(np.float64)

        # Plateau plein: softmax entièrement masqué, que des NaN.
        candidates = np.where(np.isfinite(probs) & (probs > 0.0), probs, -np.inf)
        if not np.isfinite(candidates).any():
            raise StrategyUnavailable("Aucune case inexplorée de probabilité positive")
        return board.cell_at(int(np.argmax(candidates)))


class NeighborhoodSearch(StrikeStrategy):
    """Recherche heuristique autour des touchés connus.

    Sans touché: une case inexplorée au hasard. Sinon les touchés connus sont
    parcourus à partir d'un pivot aléatoire et le premier voisin orthogonal
    inexploré (droite, bas, gauche, haut) est retenu.
    """

    name = "neighborhood"

    def __init__(self, *, seed: int | None = None, rng: random.Random | None = None) -> None:
        self._random = rng or random.Random(seed)

    def select(self, board: BoardState, total_hits: int) -> Cell:
        if total_hits == 0:
            unexplored = board.unexplored_cells()
            if not unexplored:
                raise NoEligibleCell("Aucune case inexplorée")
            return self._random.choice(unexplored)

        check_consistency(board, total_hits)
        hits = board.known_hit_cells()
        pivot = self._random.randrange(len(hits))
        for row, column in hits[pivot:] + hits[:pivot]:
            for d_row, d_column in PROBE_OFFSETS:
                candidate = (row + d_row, column + d_column)
                if board.is_eligible(*candidate):
                    return candidate

        raise NoEligibleCell("Aucun voisin inexploré autour des touchés connus")


__all__ = [
    "PROBE_OFFSETS",
    "ModelSource",
    "NeighborhoodSearch",
    "PolicyArgmaxStrategy",
    "StrikeStrategy",
    "check_consistency",
]
