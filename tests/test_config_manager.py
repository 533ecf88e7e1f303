# tests/test_config_manager.py
import json
import logging

import pytest

from embedvault.similarity_engine.kernel_dispatch import KernelConfig
from embedvault.utilities.config_manager import ConfigManager


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "settings" / "embedvault.json"


def test_defaults_without_file(config_path):
    manager = ConfigManager(config_path)
    assert manager.get_top_k() == 5
    assert manager.get_dimension() == 0
    assert manager.get_auto_tune() is True
    assert manager.get_block_size() == 64
    assert not config_path.exists()


def test_set_persists(config_path):
    manager = ConfigManager(config_path)
    manager.set_top_k(12)
    manager.set_dimension(384)

    reloaded = ConfigManager(config_path)
    assert reloaded.get_top_k() == 12
    assert reloaded.get_dimension() == 384


def test_top_k_is_clamped(config_path):
    manager = ConfigManager(config_path)
    manager.set_top_k(0)
    assert manager.get_top_k() == 1
    manager.set_top_k(5_000_000)
    assert manager.get_top_k() == 1_000_000


def test_invalid_values_rejected(config_path):
    manager = ConfigManager(config_path)
    with pytest.raises(ValueError):
        manager.set_dimension(-1)
    with pytest.raises(ValueError):
        manager.set_block_size(0)
    with pytest.raises(ValueError):
        manager.set_worker_count(-2)


def test_set_block_size_disables_auto_tune(config_path):
    manager = ConfigManager(config_path)
    manager.set_block_size(128)
    assert manager.get_block_size() == 128
    assert manager.get_auto_tune() is False
    assert 'block_size_last_updated' in manager.settings


def test_partial_file_keeps_defaults(config_path):
    config_path.parent.mkdir(parents=True)
    config_path.write_text(json.dumps({"top_k": 9}))
    manager = ConfigManager(config_path)
    assert manager.get_top_k() == 9
    assert manager.get_block_size() == 64


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_corrupt_file_falls_back_to_defaults(config_path, content, caplog):
    config_path.parent.mkdir(parents=True)
    config_path.write_text(content)
    with caplog.at_level(logging.WARNING):
        manager = ConfigManager(config_path)
    assert manager.get_top_k() == 5
    assert "using defaults" in caplog.text


def test_kernel_config(config_path):
    manager = ConfigManager(config_path)
    manager.set_worker_count(2)
    manager.set_block_size(32)

    config = manager.kernel_config()
    assert isinstance(config, KernelConfig)
    assert config.worker_count == 2
    assert config.block_size == 32
    assert config.auto_tune is False
    assert config.min_dim_for_parallel == 128
    assert config.min_batch_factor == 4
