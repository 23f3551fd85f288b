import logging
from typing import Iterable, List, Optional

from classification.task_classifier import TaskClassifier
from produtivo.models import (
    DurationEstimate,
    Placement,
    PrioritySuggestion,
    ScheduleWindow,
    Task,
    TaskUpdate,
)
from scheduling.scheduler import Scheduler
from storage.task_repository import TaskRepository, unique_ids

logger = logging.getLogger(__name__)


class BackendAPI:
    """Central orchestration component of the planner.

    Reads a snapshot from the repository, runs the pure classifier/scheduler
    over it and hands the result back. Only apply_plan() writes.
    """

    def __init__(
        self,
        repository: TaskRepository,
        classifier: Optional[TaskClassifier] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.repository = repository
        self.classifier = classifier or TaskClassifier()
        self.scheduler = scheduler or Scheduler()

    async def _fetch(self, task_ids: Iterable[str]) -> List[Task]:
        requested = unique_ids(task_ids)
        tasks = await self.repository.get_tasks(requested)
        missing = len(requested) - len(tasks)
        if missing:
            logger.warning(f"{missing} of {len(requested)} requested task ids did not resolve")
        return tasks

    async def analyze_priorities(self, task_ids: Iterable[str]) -> List[PrioritySuggestion]:
        tasks = await self._fetch(task_ids)
        return self.classifier.classify(tasks)

    async def estimate_durations(self, task_ids: Iterable[str]) -> List[DurationEstimate]:
        tasks = await self._fetch(task_ids)
        return self.classifier.estimate(tasks)

    async def schedule_tasks(self, task_ids: Iterable[str], window: ScheduleWindow) -> List[Placement]:
        """Propose placements; nothing is written back."""
        tasks = await self._fetch(task_ids)
        existing = await self.repository.list_scheduled_between(window.start_date, window.end_date)

        placements = self.scheduler.schedule(tasks, window, existing=existing)
        logger.info(
            f"Scheduled {len(placements)} of {len(tasks)} tasks "
            f"({window.start_date}..{window.end_date}, "
            f"{window.work_start_hour}h-{window.work_end_hour}h, "
            f"{len(existing)} occupied)"
        )
        return placements

    async def apply_plan(self, updates: Iterable[TaskUpdate]) -> List[Task]:
        applied = []
        for update in updates:
            task = await self.repository.update_task(update.task_id, update.as_patch())
            if task is None:
                logger.warning(f"Skipping plan update for unknown task {update.task_id}")
                continue
            applied.append(task)
        return applied
