"""Politiques de frappe pour la simulation et l'évaluation."""

from __future__ import annotations

import numpy as np
import torch

from planestrike.rl.features import observations_to_tensor
from planestrike.rl.network import PlaneStrikePolicyNetwork


class StrikePolicy:
    """Interface minimale utilisée par le simulateur.

    Une politique renvoie une distribution (non masquée) sur toutes les cases
    du plateau; le masquage des cases déjà frappées revient au simulateur.
    """

    def __init__(self, *, name: str | None = None) -> None:
        self._name = name or self.__class__.__name__

    @property
    def name(self) -> str:
        return self._name

    def distribution(self, observation: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class UniformPolicy(StrikePolicy):
    """Politique uniforme sur toutes les cases."""

    def __init__(self) -> None:
        super().__init__(name="Uniform")

    def distribution(self, observation: np.ndarray) -> np.ndarray:
        size = len(observation)
        return np.full(size, 1.0 / size, dtype=np.float64)


class NetworkPolicy(StrikePolicy):
    """Politique apprise: softmax du réseau, sans calcul de gradient."""

    def __init__(self, network: PlaneStrikePolicyNetwork, *, name: str | None = None) -> None:
        super().__init__(name=name or "Network")
        self._network = network

    @property
    def network(self) -> PlaneStrikePolicyNetwork:
        return self._network

    def distribution(self, observation: np.ndarray) -> np.ndarray:
        with torch.no_grad():
            probs = self._network.probabilities(observations_to_tensor(observation))
        return probs[0].numpy().astype(np.float64)


__all__ = ["NetworkPolicy", "StrikePolicy", "UniformPolicy"]
