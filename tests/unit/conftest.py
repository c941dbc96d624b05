from datetime import UTC, datetime, timedelta

import pytest

from appforge.config import get_settings
from appforge.contracts.project import Project, ProjectStatus, TechStack
from appforge.storage import MemoryStorage
from appforge.store import ProjectStore


class FakeClock:
    """Deterministic clock; every reading advances one second."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def storage():
    storage = MemoryStorage()
    storage.open()
    return storage


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(storage, clock):
    return ProjectStore(storage, clock=clock)


@pytest.fixture
def make_project():
    def _make(**overrides) -> Project:
        values = {
            "name": "Todo App",
            "description": "A simple todo list with due dates",
            "tech_stack": TechStack.REACT_TYPESCRIPT,
            "user_id": "user-1",
            "status": ProjectStatus.GENERATING,
        }
        values.update(overrides)
        return Project(**values)

    return _make
