"""Tests pour l'encodage des observations."""

from __future__ import annotations

import numpy as np
import torch

from planestrike.engine.state import BoardState
from planestrike.rl.features import encode_observation, legal_actions_mask, observations_to_tensor

from .sim_test_utils import grid_with


def test_encode_observation_flattens_row_major():
    board = BoardState.from_grid(grid_with(hits=[(0, 2)], misses=[(1, 0)]))
    vector = encode_observation(board)

    assert vector.dtype == np.float32
    assert vector.shape == (36,)
    assert vector[2] == 1.0
    assert vector[6] == -1.0
    assert np.count_nonzero(vector) == 2


def test_encoding_is_a_copy():
    board = BoardState.empty()
    vector = encode_observation(board)
    board.record_outcome(0, 0, True)
    assert vector[0] == 0.0


def test_legal_actions_mask_excludes_struck_cells():
    board = BoardState.from_grid(grid_with(hits=[(0, 0)], misses=[(5, 5)]))
    mask = legal_actions_mask(board)
    assert mask.sum() == 34
    assert not mask[0] and not mask[35]


def test_observations_to_tensor_adds_batch_dimension():
    single = observations_to_tensor(np.zeros(36, dtype=np.float32))
    batch = observations_to_tensor(np.zeros((4, 36), dtype=np.float32))
    assert single.shape == (1, 36)
    assert batch.shape == (4, 36)
    assert single.dtype == torch.float32
