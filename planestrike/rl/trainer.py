"""Boucle d'entraînement par gradient de politique.

Chaque itération:
1. simule un épisode complet avec la politique courante (tirage pondéré)
2. calcule les récompenses de l'épisode (`calculate_rewards`)
3. applique une mise à jour SGD par étape, dans l'ordre de la trajectoire,
   avec un taux d'apprentissage effectif `learning_rate * reward_i` vers
   l'action effectivement jouée
4. toutes les `checkpoint_interval` itérations terminées, écrit les poids

L'état d'entraînement (réseau, optimiseur, source aléatoire) appartient à un
`TrainingSession` explicite, passé au `Trainer`.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

import torch
import torch.nn.functional as F

from planestrike.engine.event_bus import EventBus
from planestrike.engine.rules import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    CHECKPOINT_FILE,
    CHECKPOINT_INTERVAL,
    DISCOUNT_FACTOR,
    HIDDEN_SIZES,
    ITERATIONS,
    LEARNING_RATE,
    MIN_BOARD_DIMENSION,
    PLANE_SIZE,
    WINDOW_SIZE,
)
from planestrike.rl.checkpoint import save_checkpoint
from planestrike.rl.events import (
    CheckpointSavedEvent,
    EpisodeCompletedEvent,
    TrainingFinishedEvent,
    TrainingStartedEvent,
)
from planestrike.rl.features import observations_to_tensor
from planestrike.rl.network import PlaneStrikePolicyNetwork
from planestrike.rl.policies import NetworkPolicy
from planestrike.rl.rewards import calculate_rewards, running_average
from planestrike.rl.self_play import GameSimulator, Trajectory
from planestrike.sim.runner import HeadlessEnv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingConfig:
    """Paramètres d'une session d'entraînement."""

    iterations: int = ITERATIONS
    checkpoint_interval: int = CHECKPOINT_INTERVAL
    board_height: int = BOARD_HEIGHT
    board_width: int = BOARD_WIDTH
    plane_size: int = PLANE_SIZE
    learning_rate: float = LEARNING_RATE
    discount_factor: float = DISCOUNT_FACTOR
    hidden_sizes: Tuple[int, ...] = HIDDEN_SIZES
    window_size: int = WINDOW_SIZE
    checkpoint_path: str = CHECKPOINT_FILE
    seed: Optional[int] = None
    # Budget de temps optionnel (secondes), vérifié avant chaque itération
    max_seconds: Optional[float] = None
    checkpoint_on_finish: bool = False

    @property
    def board_size(self) -> int:
        return self.board_height * self.board_width

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "TrainingConfig":
        """Construit une config depuis un mapping (les valeurs None sont ignorées)."""

        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Paramètres inconnus: {sorted(unknown)}")
        overrides = {key: value for key, value in values.items() if value is not None}
        if "hidden_sizes" in overrides:
            overrides["hidden_sizes"] = tuple(overrides["hidden_sizes"])
        config = cls(**overrides)
        config.validate()
        return config

    def validate(self) -> None:
        if self.iterations < 0:
            raise ValueError(f"iterations doit être positif (reçu: {self.iterations})")
        if self.checkpoint_interval <= 0:
            raise ValueError(
                f"checkpoint_interval doit être strictement positif (reçu: {self.checkpoint_interval})"
            )
        if self.board_height < MIN_BOARD_DIMENSION or self.board_width < MIN_BOARD_DIMENSION:
            raise ValueError(
                f"Le plateau doit mesurer au moins {MIN_BOARD_DIMENSION}x{MIN_BOARD_DIMENSION}"
            )
        if self.plane_size != PLANE_SIZE:
            raise ValueError(f"plane_size est fixé par la forme de l'avion ({PLANE_SIZE})")
        if not (self.learning_rate > 0.0 and math.isfinite(self.learning_rate)):
            raise ValueError(f"learning_rate doit être strictement positif (reçu: {self.learning_rate})")
        if not 0.0 < self.discount_factor < 1.0:
            raise ValueError(f"discount_factor doit être dans ]0, 1[ (reçu: {self.discount_factor})")
        if not self.hidden_sizes or any(size <= 0 for size in self.hidden_sizes):
            raise ValueError("hidden_sizes doit contenir des tailles strictement positives")
        if self.window_size <= 0:
            raise ValueError(f"window_size doit être strictement positif (reçu: {self.window_size})")
        if self.max_seconds is not None and self.max_seconds <= 0:
            raise ValueError(f"max_seconds doit être strictement positif (reçu: {self.max_seconds})")


@dataclass
class TrainingSession:
    """Réseau, optimiseur et source aléatoire d'un entraînement."""

    config: TrainingConfig
    network: PlaneStrikePolicyNetwork
    optimizer: torch.optim.Optimizer
    rng: random.Random
    iteration: int = 0
    simulator: GameSimulator = field(init=False)

    def __post_init__(self) -> None:
        config = self.config
        self.simulator = GameSimulator(
            policy=NetworkPolicy(self.network, name="Training"),
            env_factory=lambda: HeadlessEnv(
                height=config.board_height, width=config.board_width, rng=self.rng
            ),
            rng=self.rng,
        )

    @classmethod
    def create(
        cls,
        config: TrainingConfig,
        *,
        network: PlaneStrikePolicyNetwork | None = None,
        rng: random.Random | None = None,
    ) -> "TrainingSession":
        """Initialise une session (poids aléatoires sauf réseau fourni)."""

        config.validate()
        resolved_rng = rng or random.Random(config.seed)
        if network is None:
            network = _build_network(config)
        elif network.input_size != config.board_size or network.action_size != config.board_size:
            raise ValueError("Le réseau fourni ne correspond pas aux dimensions du plateau")

        network.train()
        # SGD sans momentum ni décroissance: un pas = lr * reward * gradient
        optimizer = torch.optim.SGD(network.parameters(), lr=config.learning_rate, momentum=0.0)
        return cls(config=config, network=network, optimizer=optimizer, rng=resolved_rng)


@dataclass(frozen=True)
class TrainingReport:
    """Résumé renvoyé par `Trainer.run()`."""

    game_lengths: Tuple[int, ...]
    running_average: Tuple[float, ...]
    iterations_completed: int
    checkpoints_written: int
    checkpoint_path: Path
    elapsed_seconds: float = field(default=0.0, compare=False)


def apply_policy_gradient(
    session: TrainingSession,
    trajectory: Trajectory,
    rewards: Sequence[float],
) -> None:
    """Une mise à jour SGD par étape, dans l'ordre de la trajectoire.

    La perte d'une étape est `-reward * log p(action)`: avec un SGD simple,
    c'est exactement un pas de taux `learning_rate * reward` sur la
    log-vraisemblance de l'action. Une récompense négative diminue donc la
    probabilité de l'action jouée.
    """

    if len(rewards) != trajectory.length:
        raise ValueError("Une récompense par étape est attendue")

    network = session.network
    optimizer = session.optimizer
    for step, reward in zip(trajectory.steps, rewards):
        if not math.isfinite(reward):
            raise ValueError(f"Récompense non finie à l'étape {step.action_index}: {reward}")
        if reward == 0.0:
            continue
        logits = network(observations_to_tensor(step.observation))
        log_probs = F.log_softmax(logits, dim=-1)
        loss = -float(reward) * log_probs[0, step.action_index]

        optimizer.zero_grad()
        loss.backward()
        optimizer.step()


class Trainer:
    """Orchestre simulation, récompenses, mises à jour et checkpoints."""

    def __init__(
        self,
        session: TrainingSession,
        *,
        event_bus: EventBus | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._session = session
        self._event_bus = event_bus or EventBus()
        self._clock = clock

    @property
    def session(self) -> TrainingSession:
        return self._session

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    def train_iteration(self) -> Trajectory:
        """Joue un épisode et applique les mises à jour correspondantes."""

        session = self._session
        config = session.config
        trajectory = session.simulator.play_episode(stochastic=True)
        rewards = calculate_rewards(
            trajectory.hit_log,
            config.discount_factor,
            board_size=config.board_size,
            plane_size=config.plane_size,
        )
        apply_policy_gradient(session, trajectory, rewards.tolist())
        session.iteration += 1
        return trajectory

    def save(self) -> Path:
        session = self._session
        path = save_checkpoint(session.network, session.config.checkpoint_path)
        self._event_bus.publish(CheckpointSavedEvent(iteration=session.iteration, path=path))
        return path

    def run(self) -> TrainingReport:
        session = self._session
        config = session.config
        checkpoint_path = Path(config.checkpoint_path)
        start = self._clock()
        lengths: List[int] = []
        checkpoints = 0

        logger.info(
            "Entraînement: %d itérations, checkpoint toutes les %d vers %s",
            config.iterations,
            config.checkpoint_interval,
            checkpoint_path,
        )
        self._event_bus.publish(
            TrainingStartedEvent(iterations=config.iterations, checkpoint_path=checkpoint_path)
        )

        for _ in range(config.iterations):
            if config.max_seconds is not None and self._clock() - start >= config.max_seconds:
                logger.warning(
                    "Budget de %.1fs atteint après %d itérations", config.max_seconds, len(lengths)
                )
                break

            trajectory = self.train_iteration()
            lengths.append(trajectory.length)
            average = running_average(lengths[-(config.window_size + 1):], config.window_size)[-1]
            self._event_bus.publish(
                EpisodeCompletedEvent(
                    iteration=session.iteration,
                    length=trajectory.length,
                    running_average=average,
                )
            )

            if session.iteration % config.checkpoint_interval == 0:
                self.save()
                checkpoints += 1
                logger.info(
                    "Itération %d: longueur %d, moyenne glissante %.2f",
                    session.iteration,
                    trajectory.length,
                    average,
                )

        if config.checkpoint_on_finish and session.iteration % config.checkpoint_interval != 0:
            self.save()
            checkpoints += 1

        elapsed = self._clock() - start
        self._event_bus.publish(
            TrainingFinishedEvent(iterations_completed=len(lengths), checkpoints_written=checkpoints)
        )
        logger.info("Entraînement terminé: %d parties en %.1fs", len(lengths), elapsed)

        return TrainingReport(
            game_lengths=tuple(lengths),
            running_average=tuple(running_average(lengths, config.window_size)),
            iterations_completed=len(lengths),
            checkpoints_written=checkpoints,
            checkpoint_path=checkpoint_path,
            elapsed_seconds=elapsed,
        )


def _build_network(config: TrainingConfig) -> PlaneStrikePolicyNetwork:
    def build() -> PlaneStrikePolicyNetwork:
        return PlaneStrikePolicyNetwork(
            input_size=config.board_size,
            action_size=config.board_size,
            hidden_sizes=config.hidden_sizes,
        )

    if config.seed is None:
        return build()
    # Initialisation reproductible sans toucher au RNG global de torch
    with torch.random.fork_rng(devices=[]):
        torch.manual_seed(config.seed)
        return build()


__all__ = [
    "Trainer",
    "TrainingConfig",
    "TrainingReport",
    "TrainingSession",
    "apply_policy_gradient",
]
