from pathlib import Path

import pytest

from emochild.engine import StateEngine
from emochild.storage import Storage
from emochild.store import FileStore, MemoryStore


class StepClock:
    """Deterministic millisecond clock: each call advances by `step`."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def file_store(data_dir: Path) -> FileStore:
    return FileStore(data_dir)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def storage(file_store: FileStore) -> Storage:
    return Storage(file_store)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def engine(storage: Storage, clock: StepClock) -> StateEngine:
    """A fresh, initialized engine over an empty file store."""
    eng = StateEngine(storage, clock=clock)
    eng.initialize()
    return eng
