#!/usr/bin/env python3
"""Entraîne le réseau de politique Plane Strike puis mesure le modèle obtenu.

Usage:
    python train.py                               # 20000 parties, checkpoint toutes les 100
    python train.py --iterations 2000 --seed 7    # entraînement court reproductible
    python train.py --iterations 0 --eval-episodes 500 --workers 4
                                                  # évaluation seule du checkpoint existant

Les journaux sont écrits sur la console et dans `training.log` à côté du
checkpoint.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from planestrike.engine import rules
from planestrike.engine.event_bus import EventBus
from planestrike.rl.events import CheckpointSavedEvent
from planestrike.rl.trainer import Trainer, TrainingConfig, TrainingSession
from planestrike.sim.parallel import CheckpointPolicyFactory, ParallelRolloutRunner

logger = logging.getLogger("planestrike.train")


def setup_logging(log_dir: Path, verbose: bool = False) -> None:
    """Configure les journaux console + fichier."""

    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_dir / "training.log", mode="a"),
        ],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Entraînement Plane Strike (gradient de politique)")
    parser.add_argument("--iterations", type=int, default=None,
                        help=f"Nombre de parties d'entraînement (défaut: {rules.ITERATIONS})")
    parser.add_argument("--checkpoint-interval", type=int, default=None,
                        help=f"Parties entre deux checkpoints (défaut: {rules.CHECKPOINT_INTERVAL})")
    parser.add_argument("--checkpoint", dest="checkpoint_path", default=None,
                        help=f"Fichier de checkpoint (défaut: {rules.CHECKPOINT_FILE})")
    parser.add_argument("--learning-rate", type=float, default=None)
    parser.add_argument("--discount", dest="discount_factor", type=float, default=None)
    parser.add_argument("--hidden", dest="hidden_sizes", type=int, nargs="+", default=None,
                        help="Tailles des couches cachées (ex: --hidden 50 100)")
    parser.add_argument("--window", dest="window_size", type=int, default=None,
                        help="Fenêtre de la moyenne glissante")
    parser.add_argument("--board-height", type=int, default=None)
    parser.add_argument("--board-width", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-seconds", type=float, default=None,
                        help="Budget de temps de l'entraînement")
    parser.add_argument("--checkpoint-on-finish", action="store_true", default=None,
                        help="Écrit aussi les poids en fin d'entraînement")
    parser.add_argument("--eval-episodes", type=int, default=0,
                        help="Parties d'évaluation (argmax) après l'entraînement")
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument("--executor", choices=("thread", "process"), default="process")
    parser.add_argument("--verbose", action="store_true")
    return parser


def config_from_args(args: argparse.Namespace) -> TrainingConfig:
    fields = (
        "iterations",
        "checkpoint_interval",
        "checkpoint_path",
        "learning_rate",
        "discount_factor",
        "hidden_sizes",
        "window_size",
        "board_height",
        "board_width",
        "seed",
        "max_seconds",
        "checkpoint_on_finish",
    )
    return TrainingConfig.from_mapping({name: getattr(args, name) for name in fields})


def evaluate(config: TrainingConfig, episodes: int, workers: int, executor: str) -> float:
    runner = ParallelRolloutRunner(
        policy_factory=CheckpointPolicyFactory(Path(config.checkpoint_path)),
        total_episodes=episodes,
        num_workers=workers,
        base_seed=config.seed or 0,
        executor_kind=executor,
        height=config.board_height,
        width=config.board_width,
    )
    summary = runner.run()
    logger.info(
        "Évaluation: %d parties, longueur moyenne %.2f (%.1fs)",
        summary.total_episodes,
        summary.mean_length,
        summary.duration_seconds,
    )
    return summary.mean_length


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as exc:
        print(f"Configuration invalide: {exc}", file=sys.stderr)
        return 2

    setup_logging(Path(config.checkpoint_path).resolve().parent, verbose=args.verbose)

    bus = EventBus()
    bus.subscribe(
        lambda event: logger.debug("Checkpoint %s (itération %d)", event.path, event.iteration),
        CheckpointSavedEvent,
    )

    if config.iterations > 0:
        report = Trainer(TrainingSession.create(config), event_bus=bus).run()
        if report.running_average:
            logger.info("Moyenne glissante finale: %.2f", report.running_average[-1])
        logger.info("%d checkpoints écrits dans %s", report.checkpoints_written, report.checkpoint_path)

    if args.eval_episodes > 0:
        try:
            evaluate(config, args.eval_episodes, args.workers, args.executor)
        except (FileNotFoundError, ValueError) as exc:
            logger.error("Évaluation impossible: %s", exc)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
