"""Simulation d'épisodes complets et collecte des trajectoires."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, List, Tuple

import numpy as np

from planestrike.engine.board import PlanePlacement
from planestrike.rl.features import encode_observation
from planestrike.rl.policies import StrikePolicy
from planestrike.sim.runner import HeadlessEnv


@dataclass(frozen=True)
class EpisodeStep:
    """Étape élémentaire: observation avant la frappe, case choisie, résultat."""

    observation: np.ndarray
    action_index: int
    hit: bool


@dataclass(frozen=True)
class Trajectory:
    """Résumé d'un épisode et de ses étapes."""

    placement: PlanePlacement
    steps: Tuple[EpisodeStep, ...]
    policy_name: str

    @property
    def length(self) -> int:
        return len(self.steps)

    @property
    def hit_log(self) -> Tuple[int, ...]:
        return tuple(int(step.hit) for step in self.steps)

    @property
    def action_log(self) -> Tuple[int, ...]:
        return tuple(step.action_index for step in self.steps)

    @property
    def hits(self) -> int:
        return sum(self.hit_log)


def renormalize(probs: np.ndarray, struck_mask: np.ndarray) -> np.ndarray:
    """Annule la masse des cases frappées et renormalise le reste.

    Si la masse restante est nulle (ou non finie), la distribution devient
    uniforme sur les cases non frappées.
    """

    masked = np.where(struck_mask, 0.0, np.asarray(probs, dtype=np.float64))
    masked = np.where(np.isfinite(masked) & (masked > 0.0), masked, 0.0)
    total = masked.sum()
    if total > 0.0 and np.isfinite(total):
        return masked / total

    available = ~struck_mask
    count = int(available.sum())
    if count == 0:
        raise ValueError("Aucune case disponible pour la renormalisation")
    return available.astype(np.float64) / count


def sample_index(probs: np.ndarray, rng: random.Random) -> int:
    """Tirage pondéré d'un index selon `probs`."""

    return rng.choices(range(len(probs)), weights=probs.tolist(), k=1)[0]


def argmax_index(probs: np.ndarray) -> int:
    return int(np.argmax(probs))


class GameSimulator:
    """Joue des épisodes complets avec une politique donnée."""

    def __init__(
        self,
        *,
        policy: StrikePolicy,
        env_factory: Callable[[], HeadlessEnv] | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._policy = policy
        self._random = rng or random.Random(seed)
        self._env_factory = env_factory or (lambda: HeadlessEnv(rng=self._random))

    @property
    def policy(self) -> StrikePolicy:
        return self._policy

    def play_episode(
        self,
        *,
        stochastic: bool = True,
        placement: PlanePlacement | None = None,
    ) -> Trajectory:
        """Joue un épisode jusqu'à destruction de l'avion (ou plateau épuisé).

        Args:
            stochastic: tirage pondéré (entraînement) sinon argmax (évaluation)
            placement: avion imposé, sinon tiré par l'environnement
        """

        env = self._env_factory()
        board = env.reset(placement=placement)
        steps: List[EpisodeStep] = []

        while not env.done:
            observation = encode_observation(board)
            probs = renormalize(self._policy.distribution(observation), board.struck_mask())
            if stochastic:
                index = sample_index(probs, self._random)
            else:
                index = argmax_index(probs)

            result = env.step(index)
            steps.append(EpisodeStep(observation=observation, action_index=index, hit=result.hit))

        return Trajectory(
            placement=env.target.placement,
            steps=tuple(steps),
            policy_name=self._policy.name,
        )


__all__ = [
    "EpisodeStep",
    "GameSimulator",
    "Trajectory",
    "argmax_index",
    "renormalize",
    "sample_index",
]
