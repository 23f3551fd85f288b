import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, Field

from api.backend import BackendAPI
from api.dependencies import get_backend, get_preferences_store
from api.metrics import (
    SUGGESTIONS_TOTAL,
    TASKS_SCHEDULED_TOTAL,
    TASKS_UNPLACED_TOTAL,
    observe_request,
)
from produtivo.models import PlannerPreferences, ScheduleWindow, TaskUpdate
from scheduling.dates import resolve_date, resolve_range, today_in
from scheduling.scheduler import make_window
from storage.preferences_store import PreferencesStore
from storage.task_repository import unique_ids

router = APIRouter(prefix="/planner")
logger = logging.getLogger(__name__)


class TaskIdsIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    task_ids: List[str] = Field(default_factory=list, alias="taskIds")


class ScheduleIn(TaskIdsIn):
    # dates accept YYYY-MM-DD or a shortcut ("today", "tomorrow", "next_week", ...)
    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")
    work_start_hour: Optional[int] = Field(None, alias="workStartHour")
    work_end_hour: Optional[int] = Field(None, alias="workEndHour")


class ApplyIn(BaseModel):
    updates: List[TaskUpdate] = Field(default_factory=list)


def resolve_window(payload: ScheduleIn, prefs: PlannerPreferences) -> ScheduleWindow:
    """Fill request gaps from preferences; raises ValueError on a bad window."""
    today = today_in(prefs.timezone)
    start, end = today, None

    if payload.start_date:
        named = resolve_range(payload.start_date, today)
        if named is not None:
            start, end = named
        else:
            start = resolve_date(payload.start_date, today)
    if payload.end_date:
        end = resolve_date(payload.end_date, today)

    work_start = payload.work_start_hour
    work_end = payload.work_end_hour
    return make_window(
        start,
        end,
        work_start_hour=prefs.work_start_hour if work_start is None else work_start,
        work_end_hour=prefs.work_end_hour if work_end is None else work_end,
        horizon_days=prefs.horizon_days,
    )


@router.post("/priorities")
async def analyze_priorities(
    payload: TaskIdsIn,
    backend: BackendAPI = Depends(get_backend),
) -> dict:
    with observe_request("/planner/priorities"):
        suggestions = await backend.analyze_priorities(payload.task_ids)
    SUGGESTIONS_TOTAL.labels(kind="priority").inc(len(suggestions))
    return {"suggestions": jsonable_encoder(suggestions)}


@router.post("/durations")
async def estimate_durations(
    payload: TaskIdsIn,
    backend: BackendAPI = Depends(get_backend),
) -> dict:
    with observe_request("/planner/durations"):
        estimates = await backend.estimate_durations(payload.task_ids)
    SUGGESTIONS_TOTAL.labels(kind="duration").inc(len(estimates))
    return {"estimates": jsonable_encoder(estimates)}


@router.post("/schedule")
async def schedule_tasks(
    payload: ScheduleIn,
    backend: BackendAPI = Depends(get_backend),
    prefs_store: PreferencesStore = Depends(get_preferences_store),
) -> dict:
    """
    Propose a slot for each requested task. Nothing is persisted; send the
    accepted rows to /planner/apply.
    """
    with observe_request("/planner/schedule"):
        try:
            window = resolve_window(payload, prefs_store.load())
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        placements = await backend.schedule_tasks(payload.task_ids, window)

    placed = {p.task_id for p in placements}
    unplaced = [i for i in unique_ids(payload.task_ids) if i not in placed]
    TASKS_SCHEDULED_TOTAL.inc(len(placements))
    TASKS_UNPLACED_TOTAL.inc(len(unplaced))

    return {
        "schedule": jsonable_encoder(placements),
        "unplaced": unplaced,
        "window": jsonable_encoder(window),
    }


@router.post("/apply")
async def apply_plan(
    payload: ApplyIn,
    backend: BackendAPI = Depends(get_backend),
) -> dict:
    with observe_request("/planner/apply"):
        tasks = await backend.apply_plan(payload.updates)
    logger.info(f"Applied plan: {len(tasks)} of {len(payload.updates)} updates")
    return {"tasks": jsonable_encoder(tasks), "applied": len(tasks)}


@router.get("/preferences")
async def get_preferences(
    prefs_store: PreferencesStore = Depends(get_preferences_store),
) -> dict:
    return prefs_store.load().model_dump()


@router.put("/preferences")
async def put_preferences(
    payload: PlannerPreferences,
    prefs_store: PreferencesStore = Depends(get_preferences_store),
) -> dict:
    prefs_store.save(payload)
    return payload.model_dump()
