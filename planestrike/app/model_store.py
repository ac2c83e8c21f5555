"""Modèle servi: chargé une fois, rechargé explicitement.

Le réseau servi est un instantané immuable (mode eval, sans gradient). Un
rechargement construit un nouvel instantané puis remplace la référence sous
verrou: une inférence en cours garde l'ancien réseau jusqu'à sa fin. Aucune
lecture disque n'a lieu dans le chemin d'inférence.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from planestrike.engine.rules import CHECKPOINT_FILE
from planestrike.rl.checkpoint import load_checkpoint
from planestrike.rl.network import PlaneStrikePolicyNetwork

logger = logging.getLogger(__name__)


def freeze(network: PlaneStrikePolicyNetwork) -> PlaneStrikePolicyNetwork:
    """Passe le réseau en mode eval et coupe le calcul de gradient."""

    network.eval()
    for parameter in network.parameters():
        parameter.requires_grad_(False)
    return network


class ModelStore:
    """Porte l'instantané courant du réseau de politique servi."""

    def __init__(
        self,
        path: str | os.PathLike = CHECKPOINT_FILE,
        *,
        network: PlaneStrikePolicyNetwork | None = None,
    ) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._network = freeze(network) if network is not None else None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def network(self) -> PlaneStrikePolicyNetwork | None:
        """Instantané courant (None si aucun modèle n'est disponible)."""

        return self._network

    @property
    def available(self) -> bool:
        return self._network is not None

    def load(self) -> bool:
        """Chargement initial; en cas d'échec le service tourne sans modèle.

        Retourne True si un modèle est disponible après l'appel.
        """

        try:
            self.reload()
        except (FileNotFoundError, ValueError) as exc:
            logger.warning("Modèle indisponible (%s), repli sur la recherche de voisinage", exc)
        return self.available

    def reload(self) -> PlaneStrikePolicyNetwork:
        """Charge le checkpoint et remplace l'instantané de façon atomique.

        En cas d'échec, l'instantané précédent est conservé et l'erreur remonte.
        """

        network = freeze(load_checkpoint(self._path))
        with self._lock:
            self._network = network
        logger.info("Modèle chargé depuis %s", self._path)
        return network


__all__ = ["ModelStore", "freeze"]
