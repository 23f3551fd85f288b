"""
Task repository interface used by the planner.

The planner only needs two read shapes (tasks by id list, and tasks holding a
slot inside a date range); the remaining CRUD methods back the task endpoints.
Backends raise RepositoryError when the store itself is unavailable so the API
can fail the whole call instead of returning partial results.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional

from produtivo.models import Task, TaskCreate

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50

PATCHABLE_FIELDS = {
    "title",
    "description",
    "priority",
    "estimated_minutes",
    "due_date",
    "start_time",
    "end_time",
    "completed",
}


class RepositoryError(RuntimeError):
    """The task store could not be reached or answered with an error."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def unique_ids(ids: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for task_id in ids:
        if task_id in seen:
            continue
        seen.add(task_id)
        out.append(task_id)
    return out


def clean_patch(patch: dict) -> dict:
    clean = {k: v for k, v in (patch or {}).items() if k in PATCHABLE_FIELDS}
    dropped = set(patch or {}) - set(clean)
    if dropped:
        logger.debug("Ignoring non-patchable fields: %s", ", ".join(sorted(dropped)))
    return clean


def due_sort_key(task: Task):
    # undated tasks and untimed tasks go last, as with NULLS LAST
    return (
        task.due_date is None,
        task.due_date or date.min,
        task.start_time is None,
        task.start_time or "",
    )


class TaskRepository(ABC):

    @abstractmethod
    async def get_tasks(self, task_ids: Iterable[str]) -> List[Task]:
        """Tasks in requested order; unknown ids dropped, duplicates collapsed."""
        raise NotImplementedError

    @abstractmethod
    async def get_task(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    async def list_scheduled_between(self, start: date, end: date) -> List[Task]:
        """Every task with due_date in [start, end] and a start_time, completed or not."""
        raise NotImplementedError

    @abstractmethod
    async def list_tasks(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        completed: Optional[bool] = None,
        priority: Optional[str] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> List[Task]:
        raise NotImplementedError

    @abstractmethod
    async def list_inbox(self) -> List[Task]:
        raise NotImplementedError

    @abstractmethod
    async def create_task(self, payload: TaskCreate) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def update_task(self, task_id: str, patch: dict) -> Optional[Task]:
        """Apply a field patch; returns None if the task does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def delete_task(self, task_id: str) -> bool:
        raise NotImplementedError

    async def complete_task(self, task_id: str) -> Optional[Task]:
        return await self.update_task(task_id, {"completed": True})


class InMemoryTaskRepository(TaskRepository):
    """Dict-backed store. Default backend for local runs and tests."""

    def __init__(self, tasks: Iterable[Task] = ()):
        self._tasks: Dict[str, Task] = {}
        for task in tasks:
            self._tasks[task.id] = task

    async def get_tasks(self, task_ids: Iterable[str]) -> List[Task]:
        return [self._tasks[i] for i in unique_ids(task_ids) if i in self._tasks]

    async def get_task(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    async def list_scheduled_between(self, start: date, end: date) -> List[Task]:
        return [
            t
            for t in self._tasks.values()
            if t.due_date is not None and start <= t.due_date <= end and t.start_time
        ]

    async def list_tasks(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        completed: Optional[bool] = None,
        priority: Optional[str] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> List[Task]:
        items = list(self._tasks.values())
        if start is not None or end is not None:
            items = [
                t
                for t in items
                if t.due_date is not None
                and (start is None or t.due_date >= start)
                and (end is None or t.due_date <= end)
            ]
        if completed is not None:
            items = [t for t in items if t.completed == completed]
        if priority is not None:
            items = [t for t in items if t.priority == priority]
        items.sort(key=due_sort_key)
        return items[:limit]

    async def list_inbox(self) -> List[Task]:
        return [t for t in self._tasks.values() if t.is_inbox]

    async def create_task(self, payload: TaskCreate) -> Task:
        now = _now()
        task = Task(**payload.model_dump(), created_at=now, updated_at=now)
        self._tasks[task.id] = task
        return task

    async def update_task(self, task_id: str, patch: dict) -> Optional[Task]:
        current = self._tasks.get(task_id)
        if current is None:
            return None

        changes = clean_patch(patch)
        if "completed" in changes:
            changes["completed_at"] = _now() if changes["completed"] else None
        changes["updated_at"] = _now()

        # re-validated; raises on a bad patch
        updated = Task(**{**current.model_dump(), **changes})
        self._tasks[task_id] = updated
        return updated

    async def delete_task(self, task_id: str) -> bool:
        return self._tasks.pop(task_id, None) is not None
