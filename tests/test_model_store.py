"""Tests pour le modèle servi (chargement unique, rechargement atomique)."""

import logging

import pytest
import torch

from planestrike.app.model_store import ModelStore
from planestrike.rl.checkpoint import save_checkpoint
from planestrike.rl.network import PlaneStrikePolicyNetwork


def _save(path, seed):
    torch.manual_seed(seed)
    return save_checkpoint(PlaneStrikePolicyNetwork(hidden_sizes=[8]), path)


def test_missing_checkpoint_leaves_store_unavailable(tmp_path, caplog):
    store = ModelStore(tmp_path / "absent.pt")
    with caplog.at_level(logging.WARNING):
        assert store.load() is False
    assert store.network is None
    assert not store.available
    assert "indisponible" in caplog.text


def test_corrupt_checkpoint_leaves_store_unavailable(tmp_path):
    path = tmp_path / "broken.pt"
    path.write_bytes(b"corrompu")
    store = ModelStore(path)
    assert store.load() is False
    assert store.network is None


def test_loaded_network_is_frozen(tmp_path):
    store = ModelStore(_save(tmp_path / "m.pt", 0))
    assert store.load() is True
    network = store.network
    assert not network.training
    assert all(not parameter.requires_grad for parameter in network.parameters())


def test_reload_swaps_snapshot(tmp_path):
    path = _save(tmp_path / "m.pt", 0)
    store = ModelStore(path)
    store.load()
    previous = store.network

    _save(path, 1)
    current = store.reload()

    assert current is store.network
    assert current is not previous
    observations = torch.zeros(1, 36)
    assert not torch.equal(previous(observations), current(observations))


def test_failed_reload_keeps_previous_snapshot(tmp_path):
    path = _save(tmp_path / "m.pt", 0)
    store = ModelStore(path)
    store.load()
    previous = store.network

    path.write_bytes(b"corrompu")
    with pytest.raises(ValueError):
        store.reload()
    assert store.network is previous


def test_network_is_not_reloaded_on_access(tmp_path):
    path = _save(tmp_path / "m.pt", 0)
    store = ModelStore(path)
    store.load()
    first = store.network
    path.unlink()
    assert store.network is first
