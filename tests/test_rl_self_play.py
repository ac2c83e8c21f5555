"""Tests pour la simulation d'épisodes complets."""

from __future__ import annotations

import random

import numpy as np
import pytest

from planestrike.engine.board import Orientation, PlanePlacement
from planestrike.engine.rules import PLANE_SIZE
from planestrike.rl.policies import UniformPolicy
from planestrike.rl.self_play import GameSimulator, argmax_index, renormalize, sample_index

from .sim_test_utils import FirstCellPolicy, OraclePolicy, ZeroPolicy


def _placement() -> PlanePlacement:
    return PlanePlacement.at(Orientation.LEFT, (3, 2), height=6, width=6)


def test_episode_invariants_uniform_policy():
    """Aucune case frappée deux fois, fin à 8 touchés, au plus 36 frappes."""
    simulator = GameSimulator(policy=UniformPolicy(), seed=11)
    for _ in range(50):
        trajectory = simulator.play_episode()
        actions = trajectory.action_log
        assert len(set(actions)) == len(actions)
        assert PLANE_SIZE <= trajectory.length <= 36
        assert trajectory.hits == PLANE_SIZE
        assert trajectory.hit_log[-1] == 1


def test_observations_precede_strikes():
    """Chaque observation est le plateau avant la frappe correspondante."""
    trajectory = GameSimulator(policy=UniformPolicy(), seed=2).play_episode()
    for step_number, step in enumerate(trajectory.steps):
        assert np.count_nonzero(step.observation) == step_number
        assert step.observation[step.action_index] == 0.0


def test_oracle_finishes_in_eight_strikes():
    placement = _placement()
    trajectory = GameSimulator(policy=OraclePolicy(placement), seed=0).play_episode(
        placement=placement
    )
    assert trajectory.length == PLANE_SIZE
    assert all(trajectory.hit_log)


def test_argmax_mode_is_deterministic():
    """En mode argmax, la politique ordonnée balaye les cases dans l'ordre."""
    placement = _placement()
    trajectory = GameSimulator(policy=FirstCellPolicy(), seed=0).play_episode(
        stochastic=False, placement=placement
    )
    assert trajectory.action_log == tuple(range(trajectory.length))
    last_cell = max(row * 6 + column for row, column in placement.cells)
    assert trajectory.length == last_cell + 1


def test_zero_mass_policy_falls_back_to_uniform():
    trajectory = GameSimulator(policy=ZeroPolicy(), seed=4).play_episode()
    assert trajectory.hits == PLANE_SIZE


def test_same_seed_same_trajectory():
    first = GameSimulator(policy=UniformPolicy(), seed=21).play_episode()
    second = GameSimulator(policy=UniformPolicy(), seed=21).play_episode()
    assert first.action_log == second.action_log
    assert first.placement == second.placement


def test_renormalize_masks_struck_cells():
    probs = np.array([0.5, 0.25, 0.25])
    result = renormalize(probs, np.array([True, False, False]))
    np.testing.assert_allclose(result, [0.0, 0.5, 0.5])


def test_renormalize_uniform_fallback():
    result = renormalize(np.array([1.0, 0.0, 0.0]), np.array([True, False, False]))
    np.testing.assert_allclose(result, [0.0, 0.5, 0.5])


def test_renormalize_nothing_left():
    with pytest.raises(ValueError):
        renormalize(np.array([1.0, 0.0]), np.array([True, True]))


def test_sample_and_argmax():
    probs = np.array([0.0, 0.0, 1.0])
    assert sample_index(probs, random.Random(0)) == 2
    assert argmax_index(np.array([0.1, 0.7, 0.2])) == 1
