import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from api.dependencies import get_preferences_store, get_task_repository
from produtivo.models import Priority, TaskCreate, TaskPatch
from scheduling.dates import resolve_date, resolve_range, today_in
from storage.preferences_store import PreferencesStore
from storage.task_repository import DEFAULT_LIST_LIMIT, TaskRepository

router = APIRouter()
logger = logging.getLogger(__name__)


def _not_found(task_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Task {task_id} not found")


@router.get("/tasks")
async def list_tasks(
    date: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    completed: Optional[bool] = None,
    priority: Optional[Priority] = None,
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=500),
    repository: TaskRepository = Depends(get_task_repository),
    prefs_store: PreferencesStore = Depends(get_preferences_store),
) -> dict:
    """
    List tasks. `date` takes a single day or a named range
    (today, tomorrow, this_week, next_week, this_month, next_7_days);
    start_date/end_date give an explicit range and win over `date`.
    """
    today = today_in(prefs_store.load().timezone)
    start = end = None
    try:
        if date:
            named = resolve_range(date, today)
            if named is None:
                day = resolve_date(date, today)
                named = (day, day)
            start, end = named
        if start_date and end_date:
            start, end = resolve_date(start_date, today), resolve_date(end_date, today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    tasks = await repository.list_tasks(
        start=start, end=end, completed=completed, priority=priority, limit=limit
    )
    return {"tasks": jsonable_encoder(tasks), "count": len(tasks)}


@router.get("/tasks/inbox")
async def list_inbox(repository: TaskRepository = Depends(get_task_repository)) -> dict:
    """Open tasks without a date: the planner's input list."""
    tasks = await repository.list_inbox()
    return {"tasks": jsonable_encoder(tasks), "count": len(tasks)}


@router.get("/tasks/{task_id}")
async def get_task(task_id: str, repository: TaskRepository = Depends(get_task_repository)):
    task = await repository.get_task(task_id)
    if task is None:
        raise _not_found(task_id)
    return jsonable_encoder(task)


@router.post("/tasks", status_code=201)
async def create_task(payload: TaskCreate, repository: TaskRepository = Depends(get_task_repository)):
    task = await repository.create_task(payload)
    logger.info(f"Created task {task.id}: {task.title[:50]}")
    return jsonable_encoder(task)


@router.patch("/tasks/{task_id}")
async def patch_task(
    task_id: str,
    payload: TaskPatch,
    repository: TaskRepository = Depends(get_task_repository),
):
    try:
        task = await repository.update_task(task_id, payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if task is None:
        raise _not_found(task_id)
    return jsonable_encoder(task)


@router.post("/tasks/{task_id}/complete")
async def complete_task(task_id: str, repository: TaskRepository = Depends(get_task_repository)):
    task = await repository.complete_task(task_id)
    if task is None:
        raise _not_found(task_id)
    return jsonable_encoder(task)


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, repository: TaskRepository = Depends(get_task_repository)) -> dict:
    if not await repository.delete_task(task_id):
        raise _not_found(task_id)
    return {"status": "deleted", "task_id": task_id}
