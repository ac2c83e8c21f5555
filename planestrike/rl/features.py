"""Encodage des observations pour le réseau de politique.

Le plateau observé est aplati ligne par ligne en un vecteur de longueur H*W
avec les valeurs brutes des cases: -1.0 (raté), 0.0 (inconnu), 1.0 (touché).
"""

from __future__ import annotations

import numpy as np
import torch

from planestrike.engine.state import BoardState


def encode_observation(board: BoardState) -> np.ndarray:
    """Vecteur float32 de longueur H*W, aligné sur les index de case."""

    return board.flatten().astype(np.float32)


def legal_actions_mask(board: BoardState) -> np.ndarray:
    """Masque booléen: True pour les cases encore inexplorées."""

    return ~board.struck_mask()


def observations_to_tensor(observations: np.ndarray) -> torch.Tensor:
    """Convertit une observation (ou un lot) en tenseur batché (B, H*W)."""

    array = np.asarray(observations, dtype=np.float32)
    if array.ndim == 1:
        array = array[np.newaxis, :]
    return torch.from_numpy(np.ascontiguousarray(array))


__all__ = ["encode_observation", "legal_actions_mask", "observations_to_tensor"]
