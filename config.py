# config.py
import os
import tomllib
from pathlib import Path

def _get_version():
    """Read embedvault's version from pyproject.toml"""
    try:
        pyproject_path = Path(__file__).parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return data["project"]["version"]
    except (OSError, KeyError, tomllib.TOMLDecodeError):
        return "unknown"  # Fallback if pyproject.toml is missing

VERSION = _get_version()
FRAME_WIDTH = 70 # For CLI UI headings

# Kernel tuning
DEFAULT_BLOCK_SIZE = 64             # Used whenever a block size is missing or non-positive
BLOCK_SIZE_CANDIDATES = (16, 32, 64, 128, 256)
TUNE_SAMPLE_DIM = 256               # Length of the benchmark vectors
TUNE_ITERATIONS = 2000              # Kernel calls per candidate
BLOCK_SIZE_ENV_VAR = "EMBEDVAULT_BLOCK"
GENERIC_KERNEL_MAX_DIM = 512        # Adaptive path uses the scalar loop up to this length

# Batch routing heuristics
WORKER_COUNT = 0                    # 0 = every available execution unit
MIN_DIM_FOR_PARALLEL = 128
MIN_BATCH_FACTOR = 4

DEFAULT_TOP_K = 5

class PathConfig:
    BASE_DIR = Path(os.environ.get("EMBEDVAULT_HOME", Path.cwd()))
    DATA = BASE_DIR / "data"

    @classmethod
    def get_database_file(cls):
        return cls.DATA / "vectors.sqlite3"

    @classmethod
    def get_config_path(cls):
        return cls.BASE_DIR / "embedvault.json"
