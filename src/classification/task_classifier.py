import math
from typing import Iterable, List

from classification.rules import (
    DEFAULT_DURATION_REASON,
    DEFAULT_MINUTES,
    DEFAULT_PRIORITY,
    DEFAULT_PRIORITY_REASON,
    DURATION_RULES,
    LONG_DESCRIPTION_CHARS,
    LONG_DESCRIPTION_FACTOR,
    LONG_DESCRIPTION_NOTE,
    PRIORITY_RULES,
    first_match,
)
from produtivo.models import DurationEstimate, PrioritySuggestion, Task


def _task_text(task: Task) -> str:
    return f"{task.title} {task.description or ''}".lower()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TaskClassifier:
    """Keyword heuristics that suggest a priority and a duration for a task."""

    def __init__(self, priority_rules=None, duration_rules=None):
        self.priority_rules = PRIORITY_RULES if priority_rules is None else priority_rules
        self.duration_rules = DURATION_RULES if duration_rules is None else duration_rules

    def suggest_priority(self, task: Task) -> PrioritySuggestion:
        hit = first_match(self.priority_rules, _task_text(task))
        if hit is None:
            suggested, reason = DEFAULT_PRIORITY, DEFAULT_PRIORITY_REASON
        else:
            rule, keyword = hit
            suggested, reason = rule.value, rule.explain(keyword)

        return PrioritySuggestion(
            task_id=task.id,
            title=task.title,
            current_priority=task.priority,
            suggested_priority=suggested,
            reason=reason,
        )

    def estimate_duration(self, task: Task) -> DurationEstimate:
        hit = first_match(self.duration_rules, _task_text(task))
        if hit is None:
            minutes, reason = DEFAULT_MINUTES, DEFAULT_DURATION_REASON
        else:
            rule, keyword = hit
            minutes, reason = rule.value, rule.explain(keyword)

        if len(task.description or "") > LONG_DESCRIPTION_CHARS:
            minutes = _round_half_up(minutes * LONG_DESCRIPTION_FACTOR)
            reason += LONG_DESCRIPTION_NOTE

        return DurationEstimate(
            task_id=task.id,
            title=task.title,
            current_minutes=task.estimated_minutes,
            estimated_minutes=minutes,
            reason=reason,
        )

    def classify(self, tasks: Iterable[Task]) -> List[PrioritySuggestion]:
        return [self.suggest_priority(t) for t in tasks]

    def estimate(self, tasks: Iterable[Task]) -> List[DurationEstimate]:
        return [self.estimate_duration(t) for t in tasks]
