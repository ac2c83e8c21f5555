"""Sauvegarde et chargement du réseau de politique.

Le checkpoint est un unique blob `torch.save` contenant:
- `schema_version`: version du format
- `architecture`: de quoi reconstruire `PlaneStrikePolicyNetwork`
- `state_dict`: les poids

L'écriture passe par un fichier temporaire du même répertoire puis
`os.replace`: le fichier cible est toujours soit l'ancien, soit le nouveau
checkpoint complet.
"""

from __future__ import annotations

import logging
import os
import pickle
import tempfile
from pathlib import Path
from typing import Any, Mapping

import torch

from planestrike.rl.network import PlaneStrikePolicyNetwork

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"
_ARCHITECTURE_KEYS = ("input_size", "action_size", "hidden_sizes")

PathLike = str | os.PathLike


def network_to_blob(network: PlaneStrikePolicyNetwork) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "architecture": network.architecture(),
        "state_dict": {name: tensor.detach().cpu().clone() for name, tensor in network.state_dict().items()},
    }


def blob_to_network(blob: Mapping[str, Any]) -> PlaneStrikePolicyNetwork:
    """Reconstruit un réseau (en mode eval) à partir d'un blob validé."""

    if not isinstance(blob, Mapping):
        raise ValueError("Checkpoint invalide: un dictionnaire est attendu")
    version = blob.get("schema_version")
    if version != SCHEMA_VERSION:
        raise ValueError(f"Unsupported schema_version: {version!r}")

    architecture = blob.get("architecture")
    if not isinstance(architecture, Mapping) or any(
        key not in architecture for key in _ARCHITECTURE_KEYS
    ):
        raise ValueError("Checkpoint invalide: architecture incomplète")
    state_dict = blob.get("state_dict")
    if not isinstance(state_dict, Mapping):
        raise ValueError("Checkpoint invalide: state_dict manquant")

    network = PlaneStrikePolicyNetwork(
        input_size=int(architecture["input_size"]),
        action_size=int(architecture["action_size"]),
        hidden_sizes=[int(size) for size in architecture["hidden_sizes"]],
    )
    try:
        network.load_state_dict(dict(state_dict))
    except RuntimeError as exc:
        raise ValueError(f"Checkpoint invalide: poids incompatibles ({exc})") from exc
    network.eval()
    return network


def save_checkpoint(network: PlaneStrikePolicyNetwork, path: PathLike) -> Path:
    """Écrit le checkpoint de façon atomique et renvoie son chemin."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            torch.save(network_to_blob(network), handle)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Checkpoint écrit: %s", target)
    return target


def load_checkpoint(path: PathLike) -> PlaneStrikePolicyNetwork:
    """Charge un checkpoint; FileNotFoundError s'il n'existe pas."""

    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(f"Checkpoint introuvable: {target}")
    try:
        blob = torch.load(target, map_location="cpu", weights_only=True)
    except (EOFError, OSError, RuntimeError, pickle.UnpicklingError) as exc:
        raise ValueError(f"Checkpoint illisible: {target} ({exc})") from exc
    return blob_to_network(blob)


__all__ = [
    "SCHEMA_VERSION",
    "blob_to_network",
    "load_checkpoint",
    "network_to_blob",
    "save_checkpoint",
]
