import asyncio
from datetime import date

import pytest

from api.backend import BackendAPI
from produtivo.models import ScheduleWindow, TaskUpdate
from storage.task_repository import InMemoryTaskRepository, RepositoryError

DAY = date(2024, 5, 15)


class UnavailableRepository(InMemoryTaskRepository):
    async def list_scheduled_between(self, start, end):
        raise RepositoryError("connection refused")


def run(coro):
    return asyncio.run(coro)


def test_schedule_uses_stored_slots_as_occupancy(task_factory):
    busy = task_factory("Standup", due_date=DAY, start_time="09:00", end_time="10:00")
    new = task_factory("Prepare slides", estimated_minutes=90)
    backend = BackendAPI(InMemoryTaskRepository([busy, new]))
    window = ScheduleWindow(start_date=DAY, end_date=DAY)

    out = run(backend.schedule_tasks([new.id, "unknown"], window))

    assert [(p.task_id, p.start_time, p.end_time) for p in out] == [(new.id, "10:00", "12:00")]


def test_schedule_does_not_write(task_factory):
    new = task_factory("Prepare slides")
    repo = InMemoryTaskRepository([new])
    window = ScheduleWindow(start_date=DAY, end_date=DAY)

    run(BackendAPI(repo).schedule_tasks([new.id], window))

    assert run(repo.get_task(new.id)).due_date is None


def test_classifier_passes_through_unknown_ids(task_factory):
    task = task_factory("Urgent client call")
    backend = BackendAPI(InMemoryTaskRepository([task]))

    priorities = run(backend.analyze_priorities(["ghost", task.id]))
    durations = run(backend.estimate_durations([task.id, task.id]))

    assert [s.suggested_priority for s in priorities] == ["high"]
    assert [e.estimated_minutes for e in durations] == [15]


def test_apply_plan_skips_unknown_ids(task_factory):
    task = task_factory("Prepare slides")
    repo = InMemoryTaskRepository([task])
    updates = [
        TaskUpdate(taskId=task.id, dueDate="2024-05-15", startTime="10:00", endTime="12:00"),
        TaskUpdate(taskId="ghost", priority="high"),
    ]

    applied = run(BackendAPI(repo).apply_plan(updates))

    assert [t.id for t in applied] == [task.id]
    stored = run(repo.get_task(task.id))
    assert (stored.due_date, stored.start_time, stored.end_time) == (DAY, "10:00", "12:00")


def test_repository_failure_fails_the_whole_call(task_factory):
    task = task_factory("Prepare slides")
    backend = BackendAPI(UnavailableRepository([task]))
    window = ScheduleWindow(start_date=DAY, end_date=DAY)

    with pytest.raises(RepositoryError):
        run(backend.schedule_tasks([task.id], window))
