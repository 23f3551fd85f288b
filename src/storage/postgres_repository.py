"""
PostgreSQL-backed task repository.

Uses the shared asyncpg pool from storage.db. Every driver-level failure is
re-raised as RepositoryError so callers see one call-level error.
"""

import logging
from datetime import date
from functools import wraps
from typing import Iterable, List, Optional
from uuid import uuid4

import asyncpg

from produtivo.models import Task, TaskCreate
from storage import db
from storage.task_repository import (
    DEFAULT_LIST_LIMIT,
    RepositoryError,
    TaskRepository,
    clean_patch,
    unique_ids,
)

logger = logging.getLogger(__name__)

COLUMNS = (
    "id, title, description, priority, estimated_minutes, due_date, "
    "start_time, end_time, completed, completed_at, created_at, updated_at"
)


def task_from_record(record) -> Task:
    """Map a row to a Task, tolerating legacy values the API would reject."""
    minutes = record["estimated_minutes"]
    priority = record["priority"]
    return Task(
        id=str(record["id"]),
        title=record["title"],
        description=record["description"],
        priority=priority if priority in {"low", "medium", "high"} else "medium",
        estimated_minutes=minutes if minutes and minutes > 0 else None,
        due_date=record["due_date"],
        start_time=record["start_time"],
        end_time=record["end_time"],
        completed=bool(record["completed"]),
        completed_at=record["completed_at"],
        created_at=record["created_at"],
        updated_at=record["updated_at"],
    )


def _wrap_errors(func):
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except RepositoryError:
            raise
        except (asyncpg.PostgresError, OSError, RuntimeError) as e:
            # RuntimeError covers an uninitialized pool
            logger.error(f"Task repository call {func.__name__} failed: {e}")
            raise RepositoryError(str(e)) from e

    return wrapper


class PostgresTaskRepository(TaskRepository):

    @_wrap_errors
    async def get_tasks(self, task_ids: Iterable[str]) -> List[Task]:
        ids = unique_ids(task_ids)
        if not ids:
            return []
        async with db.get_connection() as conn:
            rows = await conn.fetch(
                f"SELECT {COLUMNS} FROM tasks WHERE id = ANY($1::text[])", ids
            )
        by_id = {str(r["id"]): task_from_record(r) for r in rows}
        return [by_id[i] for i in ids if i in by_id]

    @_wrap_errors
    async def get_task(self, task_id: str) -> Optional[Task]:
        async with db.get_connection() as conn:
            row = await conn.fetchrow(f"SELECT {COLUMNS} FROM tasks WHERE id = $1", task_id)
        return task_from_record(row) if row else None

    @_wrap_errors
    async def list_scheduled_between(self, start: date, end: date) -> List[Task]:
        async with db.get_connection() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {COLUMNS} FROM tasks
                WHERE due_date BETWEEN $1 AND $2
                  AND start_time IS NOT NULL
                ORDER BY due_date, start_time
                """,
                start,
                end,
            )
        return [task_from_record(r) for r in rows]

    @_wrap_errors
    async def list_tasks(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        completed: Optional[bool] = None,
        priority: Optional[str] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> List[Task]:
        clauses = []
        args = []
        if start is not None:
            args.append(start)
            clauses.append(f"due_date >= ${len(args)}")
        if end is not None:
            args.append(end)
            clauses.append(f"due_date <= ${len(args)}")
        if completed is not None:
            args.append(completed)
            clauses.append(f"completed = ${len(args)}")
        if priority is not None:
            args.append(priority)
            clauses.append(f"priority = ${len(args)}")
        args.append(limit)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        query = (
            f"SELECT {COLUMNS} FROM tasks {where} "
            f"ORDER BY due_date ASC NULLS LAST, start_time ASC NULLS LAST "
            f"LIMIT ${len(args)}"
        )
        async with db.get_connection() as conn:
            rows = await conn.fetch(query, *args)
        return [task_from_record(r) for r in rows]

    @_wrap_errors
    async def list_inbox(self) -> List[Task]:
        async with db.get_connection() as conn:
            rows = await conn.fetch(
                f"SELECT {COLUMNS} FROM tasks "
                "WHERE due_date IS NULL AND completed = FALSE ORDER BY created_at"
            )
        return [task_from_record(r) for r in rows]

    @_wrap_errors
    async def create_task(self, payload: TaskCreate) -> Task:
        async with db.get_connection() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO tasks (
                    id, title, description, priority, estimated_minutes,
                    due_date, start_time, end_time
                ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                RETURNING {COLUMNS}
                """,
                uuid4().hex,
                payload.title,
                payload.description,
                payload.priority,
                payload.estimated_minutes,
                payload.due_date,
                payload.start_time,
                payload.end_time,
            )
        task = task_from_record(row)
        logger.info(f"Created task {task.id}")
        return task

    @_wrap_errors
    async def update_task(self, task_id: str, patch: dict) -> Optional[Task]:
        changes = clean_patch(patch)
        assignments = []
        args = [task_id]
        for column, value in changes.items():
            args.append(value)
            assignments.append(f"{column} = ${len(args)}")
        if "completed" in changes:
            assignments.append("completed_at = NOW()" if changes["completed"] else "completed_at = NULL")
        assignments.append("updated_at = NOW()")

        async with db.get_connection() as conn:
            row = await conn.fetchrow(
                f"UPDATE tasks SET {', '.join(assignments)} WHERE id = $1 RETURNING {COLUMNS}",
                *args,
            )
        return task_from_record(row) if row else None

    @_wrap_errors
    async def delete_task(self, task_id: str) -> bool:
        async with db.get_connection() as conn:
            status = await conn.execute("DELETE FROM tasks WHERE id = $1", task_id)
        return status.endswith(" 1")
