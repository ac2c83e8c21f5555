"""Évènements publiés par la boucle d'entraînement."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TrainingStartedEvent:
    """Émis avant la première itération d'entraînement."""

    iterations: int
    checkpoint_path: Path


@dataclass(frozen=True)
class EpisodeCompletedEvent:
    """Émis après la mise à jour des poids pour un épisode."""

    iteration: int
    length: int
    running_average: float


@dataclass(frozen=True)
class CheckpointSavedEvent:
    """Émis après chaque écriture complète du checkpoint."""

    iteration: int
    path: Path


@dataclass(frozen=True)
class TrainingFinishedEvent:
    """Émis en fin de boucle (budget d'itérations ou de temps atteint)."""

    iterations_completed: int
    checkpoints_written: int


__all__ = [
    "CheckpointSavedEvent",
    "EpisodeCompletedEvent",
    "TrainingFinishedEvent",
    "TrainingStartedEvent",
]
