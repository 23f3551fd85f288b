import pytest

from produtivo.models import Task
from storage.preferences_store import PreferencesStore
from storage.task_repository import InMemoryTaskRepository


@pytest.fixture
def task_factory():
    counter = {"n": 0}

    def _make(title: str = None, **fields) -> Task:
        counter["n"] += 1
        fields.setdefault("id", f"t{counter['n']}")
        return Task(title=title or f"Task {counter['n']}", **fields)

    return _make


@pytest.fixture
def repository():
    return InMemoryTaskRepository()


@pytest.fixture
def prefs_store(tmp_path):
    return PreferencesStore(path=str(tmp_path / "prefs.json"))


@pytest.fixture
def client(repository, prefs_store):
    from fastapi.testclient import TestClient

    from api.dependencies import get_preferences_store, get_task_repository
    from api.main import app

    app.dependency_overrides[get_task_repository] = lambda: repository
    app.dependency_overrides[get_preferences_store] = lambda: prefs_store
    yield TestClient(app)
    app.dependency_overrides.clear()
