"""Mise en forme des récompenses à partir du journal de touchés.

Le signal brut (touché/raté) est trop creux: la plupart des frappes ratent.
Pour l'étape i, avec s_i touchés déjà obtenus avant i:

    delta_i  = (hit_i - (PLANE_SIZE - s_i) / (BOARD_SIZE - i)) * gamma**i
    reward_i = gamma**(-i) * sum_{j >= i} delta_j

Le terme soustrait est le taux de touché attendu d'une frappe uniforme parmi
les cases restantes. reward_i est calculé par la récurrence équivalente
g_i = d_i + gamma * g_{i+1} (d_i non actualisé), numériquement plus stable
que le produit gamma**(-i) * (somme de termes minuscules).
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from planestrike.engine.rules import BOARD_SIZE, PLANE_SIZE


def hit_baseline(
    hit_log: Sequence[int],
    *,
    board_size: int = BOARD_SIZE,
    plane_size: int = PLANE_SIZE,
) -> np.ndarray:
    """Taux de touché attendu d'une frappe uniforme à chaque étape."""

    hits = np.asarray(hit_log, dtype=np.float64)
    hits_before = np.concatenate(([0.0], np.cumsum(hits)[:-1])) if len(hits) else hits
    remaining_cells = board_size - np.arange(len(hits), dtype=np.float64)
    return (plane_size - hits_before) / remaining_cells


def calculate_rewards(
    hit_log: Sequence[int],
    gamma: float,
    *,
    board_size: int = BOARD_SIZE,
    plane_size: int = PLANE_SIZE,
) -> np.ndarray:
    """Calcule une récompense par étape d'une trajectoire.

    Args:
        hit_log: 1 (touché) ou 0 (raté) pour chaque frappe, dans l'ordre
        gamma: facteur d'actualisation, dans ]0, 1[
        board_size: nombre total de cases
        plane_size: nombre de cases de l'avion

    Returns:
        Tableau float64 de même longueur que `hit_log`.
    """

    if not 0.0 < gamma < 1.0:
        raise ValueError(f"gamma doit être dans ]0, 1[ (reçu: {gamma})")
    if len(hit_log) > board_size:
        raise ValueError(
            f"Trajectoire plus longue que le plateau ({len(hit_log)} > {board_size})"
        )
    if any(hit not in (0, 1) for hit in hit_log):
        raise ValueError("hit_log ne doit contenir que des 0 et des 1")

    signal = np.asarray(hit_log, dtype=np.float64) - hit_baseline(
        hit_log, board_size=board_size, plane_size=plane_size
    )
    rewards = np.zeros_like(signal)
    running = 0.0
    for index in range(len(signal) - 1, -1, -1):
        running = signal[index] + gamma * running
        rewards[index] = running
    return rewards


def running_average(values: Sequence[float], window: int) -> List[float]:
    """Moyenne glissante utilisée pour suivre la longueur des parties.

    Les `window` premières valeurs sont reprises telles quelles, ensuite
    chaque point est la moyenne des `window` dernières valeurs.
    """

    if window <= 0:
        raise ValueError(f"window doit être strictement positif (reçu: {window})")
    averages: List[float] = []
    for index, value in enumerate(values):
        if index < window:
            averages.append(float(value))
            continue
        averages.append(float(np.mean(values[index - window + 1 : index + 1])))
    return averages


__all__ = ["calculate_rewards", "hit_baseline", "running_average"]
