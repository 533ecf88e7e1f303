# embedvault/utilities/config_manager.py
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from config import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_TOP_K,
    MIN_BATCH_FACTOR,
    MIN_DIM_FOR_PARALLEL,
    WORKER_COUNT,
    PathConfig,
)
from embedvault.similarity_engine.kernel_dispatch import KernelConfig

logger = logging.getLogger(__name__)

class ConfigManager:
    DEFAULT_SETTINGS = {
        'top_k': DEFAULT_TOP_K,         # How many results a search returns
        'dimension': 0,                 # Fixed dimension for the in-memory store; 0 = any
        'auto_tune': True,              # Benchmark the block size on first kernel use
        'block_size': DEFAULT_BLOCK_SIZE,  # Used when auto_tune is off
        'worker_count': WORKER_COUNT,
        'min_dim_for_parallel': MIN_DIM_FOR_PARALLEL,
        'min_batch_factor': MIN_BATCH_FACTOR,
    }

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else PathConfig.get_config_path()
        self.load()

    def load(self):
        self.settings = self.DEFAULT_SETTINGS.copy()
        if not self.config_path.exists():
            return
        try:
            with open(self.config_path, 'r') as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read settings from %s (%s); using defaults", self.config_path, e)
            return
        if not isinstance(loaded, dict):
            logger.warning("Settings file %s is not a JSON object; using defaults", self.config_path)
            return

        # Missing keys keep their defaults
        self.settings.update(loaded)

    def save(self):
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(self.settings, f, indent=2)

    def get(self, key, default=None):
        return self.settings.get(key, default)

    def set(self, key, value):
        self.settings[key] = value
        self.save()

    def get_top_k(self) -> int:
        """Get number of results to return per search."""
        return self.get('top_k', DEFAULT_TOP_K)

    def set_top_k(self, value: int):
        """Set number of results (1-1M)."""
        value = max(1, min(1_000_000, int(value)))
        self.set('top_k', value)

    def get_dimension(self) -> int:
        return self.get('dimension', 0)

    def set_dimension(self, value: int):
        value = int(value)
        if value < 0:
            raise ValueError("Dimension must be 0 (unrestricted) or positive")
        self.set('dimension', value)

    def get_auto_tune(self) -> bool:
        return self.get('auto_tune', True)

    def set_auto_tune(self, value):
        self.set('auto_tune', bool(value))

    def get_block_size(self) -> int:
        return self.get('block_size', DEFAULT_BLOCK_SIZE)

    def set_block_size(self, value: int):
        """Pin the block size and turn auto-tuning off."""
        value = int(value)
        if value <= 0:
            raise ValueError("Block size must be positive")
        self.settings['block_size'] = value
        self.settings['auto_tune'] = False
        self.settings['block_size_last_updated'] = datetime.now().isoformat()
        self.save()

    def get_worker_count(self) -> int:
        return self.get('worker_count', WORKER_COUNT)

    def set_worker_count(self, value: int):
        value = int(value)
        if value < 0:
            raise ValueError("Worker count must be 0 (all cores) or positive")
        self.set('worker_count', value)

    def kernel_config(self):
        """Build a KernelConfig from the stored settings."""
        return KernelConfig(
            block_size=self.get_block_size(),
            worker_count=self.get_worker_count(),
            min_dim_for_parallel=self.get('min_dim_for_parallel', MIN_DIM_FOR_PARALLEL),
            min_batch_factor=self.get('min_batch_factor', MIN_BATCH_FACTOR),
            auto_tune=self.get_auto_tune(),
        )

_config_manager: Optional[ConfigManager] = None

def get_config_manager() -> ConfigManager:
    """Shared settings instance, loaded on first access."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
