import os

from storage.postgres_repository import PostgresTaskRepository
from storage.preferences_store import PreferencesStore
from storage.task_repository import InMemoryTaskRepository, TaskRepository

TASK_REPOSITORY = os.getenv("TASK_REPOSITORY", "memory").strip().lower()
PREFERENCES_PATH = os.getenv("PREFERENCES_PATH", "data/preferences.json")


def build_task_repository(kind: str = TASK_REPOSITORY) -> TaskRepository:
    if kind == "postgres":
        # the pool itself is opened at startup
        return PostgresTaskRepository()
    if kind == "memory":
        return InMemoryTaskRepository()
    raise ValueError(f"Unknown TASK_REPOSITORY: {kind!r} (expected 'memory' or 'postgres')")


# Global instances shared by the routers
task_repository: TaskRepository = build_task_repository()
preferences_store = PreferencesStore(path=PREFERENCES_PATH)
