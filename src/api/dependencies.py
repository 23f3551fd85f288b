from fastapi import Depends

from api import state
from api.backend import BackendAPI
from storage.preferences_store import PreferencesStore
from storage.task_repository import TaskRepository


def get_task_repository() -> TaskRepository:
    return state.task_repository


def get_preferences_store() -> PreferencesStore:
    return state.preferences_store


def get_backend(repository: TaskRepository = Depends(get_task_repository)) -> BackendAPI:
    return BackendAPI(repository)
