"""Tests pour les parties d'évaluation parallèles.

Les métriques doivent rester déterministes quelle que soit la répartition
des épisodes entre workers.
"""

from __future__ import annotations

import dataclasses

import pytest
import torch

from planestrike.rl.checkpoint import save_checkpoint
from planestrike.rl.network import PlaneStrikePolicyNetwork
from planestrike.sim.parallel import (
    CheckpointPolicyFactory,
    EpisodeSummary,
    ParallelRolloutRunner,
    RolloutSummary,
    WorkerSummary,
)
from .sim_test_utils import FirstCellPolicy, first_cell_factory


def _make_runner(*, num_workers: int, total_episodes: int, base_seed: int) -> ParallelRolloutRunner:
    return ParallelRolloutRunner(
        policy_factory=lambda worker_id: FirstCellPolicy(),
        total_episodes=total_episodes,
        num_workers=num_workers,
        base_seed=base_seed,
        executor_kind="thread",
    )


def test_parallel_runner_distributes_episodes_evenly():
    """Les épisodes doivent être répartis équitablement entre les workers."""

    summary = _make_runner(num_workers=3, total_episodes=10, base_seed=120).run()

    assert isinstance(summary, RolloutSummary)
    assert [worker.episodes for worker in summary.worker_summaries] == [4, 3, 3]
    assert summary.worker_summaries[0].episode_seeds == (120, 121, 122, 123)
    assert summary.total_episodes == 10


def test_results_do_not_depend_on_worker_count():
    """Une seed par épisode: mêmes parties avec 1 ou 4 workers."""

    single = _make_runner(num_workers=1, total_episodes=8, base_seed=5).run()
    multi = _make_runner(num_workers=4, total_episodes=8, base_seed=5).run()

    def by_seed(summary):
        return sorted(
            (episode for worker in summary.worker_summaries for episode in worker.episode_summaries),
            key=lambda episode: episode.seed,
        )

    assert by_seed(single) == by_seed(multi)
    assert single.mean_length == pytest.approx(multi.mean_length)


def test_episodes_destroy_the_plane():
    summary = _make_runner(num_workers=2, total_episodes=6, base_seed=0).run()
    for worker in summary.worker_summaries:
        for episode in worker.episode_summaries:
            assert episode.destroyed
            assert episode.hits == 8
            assert 8 <= episode.steps <= 36
    assert summary.total_steps == sum(w.steps for w in summary.worker_summaries)


def test_summaries_are_immutable():
    summary = _make_runner(num_workers=1, total_episodes=1, base_seed=0).run()
    with pytest.raises(dataclasses.FrozenInstanceError):
        summary.worker_summaries[0].episode_summaries[0].steps = 0  # type: ignore[misc]
    assert isinstance(summary.worker_summaries[0], WorkerSummary)
    assert isinstance(summary.worker_summaries[0].episode_summaries[0], EpisodeSummary)


def test_checkpoint_policy_factory(tmp_path):
    torch.manual_seed(0)
    path = save_checkpoint(PlaneStrikePolicyNetwork(hidden_sizes=[8]), tmp_path / "model.pt")
    runner = ParallelRolloutRunner(
        policy_factory=CheckpointPolicyFactory(path),
        total_episodes=4,
        num_workers=2,
        executor_kind="thread",
    )
    summary = runner.run()
    assert summary.total_episodes == 4
    assert summary.mean_length >= 8


def test_process_executor_requires_picklable_factory():
    with pytest.raises(TypeError):
        ParallelRolloutRunner(
            policy_factory=lambda worker_id: FirstCellPolicy(),
            total_episodes=2,
            num_workers=2,
            executor_kind="process",
        )
    ParallelRolloutRunner(
        policy_factory=first_cell_factory, total_episodes=2, num_workers=2, executor_kind="process"
    )


@pytest.mark.parametrize(
    "kwargs",
    [
        {"num_workers": 0, "total_episodes": 1},
        {"num_workers": 1, "total_episodes": 0},
        {"num_workers": 1, "total_episodes": 1, "executor_kind": "gpu"},
    ],
)
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        ParallelRolloutRunner(policy_factory=first_cell_factory, **kwargs)
