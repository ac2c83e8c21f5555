"""Parties d'évaluation parallèles.

Mesure une politique (longueur moyenne de partie en mode argmax ou tirage)
sur un lot de parties indépendantes réparties entre plusieurs workers,
threads ou processus. Chaque partie a sa propre seed: le résultat d'une seed
ne dépend pas du worker qui l'a jouée.
"""

from __future__ import annotations

import pickle
import random
import time
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Callable, Literal, Sequence, Tuple

import numpy as np

from planestrike.engine.rules import BOARD_HEIGHT, BOARD_WIDTH, PLANE_SIZE
from planestrike.rl.checkpoint import load_checkpoint
from planestrike.rl.policies import NetworkPolicy, StrikePolicy
from planestrike.rl.self_play import GameSimulator
from planestrike.sim.runner import HeadlessEnv

ExecutorKind = Literal["thread", "process"]
PolicyFactory = Callable[[int], StrikePolicy]


@dataclass(frozen=True)
class EpisodeSummary:
    """Une partie d'évaluation: seed, nombre de frappes, touchés."""

    seed: int
    steps: int
    hits: int

    @property
    def destroyed(self) -> bool:
        return self.hits >= PLANE_SIZE


@dataclass(frozen=True)
class WorkerSummary:
    worker_id: int
    episode_summaries: Tuple[EpisodeSummary, ...]
    duration_seconds: float = field(default=0.0, compare=False)

    @property
    def episodes(self) -> int:
        return len(self.episode_summaries)

    @property
    def episode_seeds(self) -> Tuple[int, ...]:
        return tuple(episode.seed for episode in self.episode_summaries)

    @property
    def lengths(self) -> Tuple[int, ...]:
        return tuple(episode.steps for episode in self.episode_summaries)

    @property
    def steps(self) -> int:
        return sum(self.lengths)


@dataclass(frozen=True)
class RolloutSummary:
    """Agrégat de toutes les parties, dans l'ordre des workers."""

    worker_summaries: Tuple[WorkerSummary, ...]
    duration_seconds: float = field(default=0.0, compare=False)

    @property
    def lengths(self) -> Tuple[int, ...]:
        return tuple(length for worker in self.worker_summaries for length in worker.lengths)

    @property
    def total_episodes(self) -> int:
        return len(self.lengths)

    @property
    def total_steps(self) -> int:
        return sum(self.lengths)

    @property
    def mean_length(self) -> float:
        lengths = self.lengths
        return float(np.mean(lengths)) if lengths else 0.0


@dataclass(frozen=True)
class CheckpointPolicyFactory:
    """Fabrique picklable: chaque worker charge sa copie du checkpoint."""

    path: Path

    def __call__(self, worker_id: int) -> StrikePolicy:
        return NetworkPolicy(load_checkpoint(self.path), name=f"Checkpoint-{worker_id}")


def split_seeds(total_episodes: int, num_workers: int, base_seed: int = 0) -> Tuple[Tuple[int, ...], ...]:
    """Seeds consécutives découpées en blocs contigus, les premiers plus longs."""

    seeds = np.arange(base_seed, base_seed + total_episodes)
    return tuple(tuple(int(seed) for seed in chunk) for chunk in np.array_split(seeds, num_workers))


def play_seeds(
    worker_id: int,
    seeds: Sequence[int],
    policy_factory: PolicyFactory,
    stochastic: bool = False,
    height: int = BOARD_HEIGHT,
    width: int = BOARD_WIDTH,
) -> WorkerSummary:
    """Joue une partie par seed avec une politique propre au worker."""

    start = time.perf_counter()
    policy = policy_factory(worker_id) if seeds else None
    episodes = []
    for seed in seeds:
        # Cible et tirages de la partie ne dépendent que de sa seed.
        rng = random.Random(seed)
        simulator = GameSimulator(
            policy=policy,
            env_factory=partial(HeadlessEnv, height=height, width=width, rng=rng),
            rng=rng,
        )
        trajectory = simulator.play_episode(stochastic=stochastic)
        episodes.append(EpisodeSummary(seed=seed, steps=trajectory.length, hits=trajectory.hits))

    return WorkerSummary(
        worker_id=worker_id,
        episode_summaries=tuple(episodes),
        duration_seconds=time.perf_counter() - start,
    )


class ParallelRolloutRunner:
    """Répartit les parties d'évaluation entre `num_workers` workers."""

    def __init__(
        self,
        *,
        policy_factory: PolicyFactory,
        total_episodes: int,
        num_workers: int,
        base_seed: int = 0,
        executor_kind: ExecutorKind = "process",
        stochastic: bool = False,
        height: int = BOARD_HEIGHT,
        width: int = BOARD_WIDTH,
    ) -> None:
        for name, value in (("num_workers", num_workers), ("total_episodes", total_episodes)):
            if value <= 0:
                raise ValueError(f"{name} doit être strictement positif (reçu: {value})")
        if executor_kind not in ("thread", "process"):
            raise ValueError(f"executor_kind doit valoir 'thread' ou 'process' (reçu: {executor_kind!r})")
        if executor_kind == "process":
            _ensure_picklable(policy_factory)

        self._executor_kind = executor_kind
        self._seed_blocks = split_seeds(total_episodes, num_workers, base_seed)
        self._play = partial(
            play_seeds,
            policy_factory=policy_factory,
            stochastic=stochastic,
            height=height,
            width=width,
        )

    def _executor(self) -> Executor:
        workers = len(self._seed_blocks)
        if self._executor_kind == "thread":
            return ThreadPoolExecutor(max_workers=workers)
        return ProcessPoolExecutor(max_workers=workers)

    def run(self) -> RolloutSummary:
        start = time.perf_counter()
        worker_ids = range(len(self._seed_blocks))
        if len(self._seed_blocks) == 1:
            summaries = [self._play(0, self._seed_blocks[0])]
        else:
            with self._executor() as executor:
                summaries = list(executor.map(self._play, worker_ids, self._seed_blocks))
        return RolloutSummary(
            worker_summaries=tuple(summaries),
            duration_seconds=time.perf_counter() - start,
        )


def _ensure_picklable(policy_factory: PolicyFactory) -> None:
    try:
        pickle.dumps(policy_factory)
    except (pickle.PicklingError, AttributeError, TypeError) as exc:
        raise TypeError("policy_factory doit être picklable pour executor_kind='process'") from exc


__all__ = [
    "CheckpointPolicyFactory",
    "EpisodeSummary",
    "ParallelRolloutRunner",
    "RolloutSummary",
    "WorkerSummary",
    "play_seeds",
    "split_seeds",
]
