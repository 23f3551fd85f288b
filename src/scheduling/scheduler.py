"""
Greedy, priority-first placement of tasks into whole-hour blocks.

Tasks are ordered high -> medium -> low (ties keep their input order) and each
one takes the earliest free block in the window: days ascending, then hours
ascending from the start of the working day. Every placement is added to the
day's occupancy right away, so later tasks in the same run see it as taken.
A task that fits nowhere is left out of the result.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from produtivo.models import Placement, ScheduleWindow, Task

logger = logging.getLogger(__name__)

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}
DEFAULT_TASK_MINUTES = 60
DEFAULT_HORIZON_DAYS = 7


@dataclass(frozen=True)
class OccupiedInterval:
    """Half-open [start_hour, end_hour) block on one day."""

    start_hour: int
    end_hour: int

    def overlaps(self, start_hour: int, duration_hours: int) -> bool:
        return start_hour < self.end_hour and start_hour + duration_hours > self.start_hour


Occupancy = Dict[date, List[OccupiedInterval]]


def clock_hour(value: str) -> int:
    return int(value.split(":")[0])


def format_hour(hour: int) -> str:
    return f"{hour:02d}:00"


def make_window(
    start_date: date,
    end_date: Optional[date] = None,
    work_start_hour: int = 9,
    work_end_hour: int = 18,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> ScheduleWindow:
    """Resolve an open-ended request into a concrete window (end = start + horizon)."""
    if end_date is None:
        try:
            end_date = start_date + timedelta(days=horizon_days)
        except OverflowError:
            raise ValueError("window end is out of range") from None
    return ScheduleWindow(
        start_date=start_date,
        end_date=end_date,
        work_start_hour=work_start_hour,
        work_end_hour=work_end_hour,
    )


def build_occupancy(existing: Iterable[Task], window: Optional[ScheduleWindow] = None) -> Occupancy:
    """Per-day occupied intervals derived from tasks that already hold a slot.

    Completion is ignored: a finished task keeps its slot as long
    as its start_time is set.
    """
    occupancy: Occupancy = {}
    for task in existing:
        if task.due_date is None or not task.start_time:
            continue
        if window is not None and not (window.start_date <= task.due_date <= window.end_date):
            continue
        start_hour = clock_hour(task.start_time)
        end_hour = clock_hour(task.end_time) if task.end_time else start_hour + 1
        occupancy.setdefault(task.due_date, []).append(OccupiedInterval(start_hour, end_hour))
    return occupancy


def duration_hours(task: Task) -> int:
    minutes = task.estimated_minutes
    if not minutes or minutes <= 0:
        minutes = DEFAULT_TASK_MINUTES
    return math.ceil(minutes / 60)


def priority_order(tasks: Iterable[Task]) -> List[Task]:
    """Stable high -> medium -> low ordering; unknown priorities rank as medium."""
    decorated: List[Tuple[int, int, Task]] = [
        (PRIORITY_RANK.get(task.priority, PRIORITY_RANK["medium"]), index, task)
        for index, task in enumerate(tasks)
    ]
    decorated.sort(key=lambda item: (item[0], item[1]))
    return [task for _, _, task in decorated]


def find_slot(
    hours: int, window: ScheduleWindow, occupancy: Occupancy
) -> Optional[Tuple[date, int]]:
    if hours > window.work_end_hour - window.work_start_hour:
        return None
    for day in window.days():
        day_slots = occupancy.get(day, [])
        for hour in range(window.work_start_hour, window.work_end_hour - hours + 1):
            if not any(slot.overlaps(hour, hours) for slot in day_slots):
                return day, hour
    return None


class Scheduler:

    def schedule(
        self,
        tasks: Iterable[Task],
        window: ScheduleWindow,
        existing: Iterable[Task] = (),
    ) -> List[Placement]:
        occupancy = build_occupancy(existing, window)
        candidates = [t for t in tasks if not t.completed]

        placements: List[Placement] = []
        for task in priority_order(candidates):
            hours = duration_hours(task)
            slot = find_slot(hours, window, occupancy)
            if slot is None:
                logger.info(f"No free {hours}h block for task {task.id} in window")
                continue

            day, hour = slot
            occupancy.setdefault(day, []).append(OccupiedInterval(hour, hour + hours))
            placements.append(
                Placement(
                    task_id=task.id,
                    due_date=day,
                    start_time=format_hour(hour),
                    end_time=format_hour(hour + hours),
                )
            )

        return placements
