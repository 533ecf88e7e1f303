# tests/conftest.py
import pytest

from config import BLOCK_SIZE_ENV_VAR
from embedvault.similarity_engine.block_size_optimizer import get_shared_optimizer
from embedvault.similarity_engine.kernel_dispatch import KernelConfig, KernelDispatcher
from embedvault.storage.memory_store import MemoryStore
from embedvault.storage.sqlite_store import SQLiteVectorStore


@pytest.fixture(autouse=True)
def clean_tuning_state(monkeypatch):
    """Pin the block size override and reset the shared optimizer around each test."""
    monkeypatch.setenv(BLOCK_SIZE_ENV_VAR, "64")
    get_shared_optimizer().reset()
    yield
    get_shared_optimizer().reset()


@pytest.fixture
def dispatcher():
    """Dispatcher with a fixed block size and the adaptive kernel path."""
    return KernelDispatcher(
        config=KernelConfig(block_size=16, auto_tune=False),
        capability_probe=lambda: None,
    )


@pytest.fixture
def memory_store():
    with MemoryStore() as store:
        yield store


@pytest.fixture
def sqlite_store(tmp_path, dispatcher):
    """File-backed store in a temporary directory."""
    store = SQLiteVectorStore(tmp_path / "vectors.sqlite3", dispatcher=dispatcher)
    yield store
    store.close()
