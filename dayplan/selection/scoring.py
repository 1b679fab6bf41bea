"""
Tool: Priority Scoring
Purpose: Score candidate tasks for today's selection

Each task gets five sub-scores in [0, 1], combined with PriorityWeights:

    due_date_urgency  - overdue and near deadlines first
    importance        - high > medium > low
    effort            - medium effort preferred, heavy tasks discouraged
    context_balance   - nudge toward a mix of @deep and @shallow work
    dependencies      - prefer tasks whose prerequisites are already picked

The balance factor depends on what is already selected, so scores change as
the user picks tasks. Nothing is cached; every call recomputes.

Usage:
    from dayplan.selection.scoring import score_tasks
    scores = score_tasks(tasks, selected_ids, weights, constraints, now=now)
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import datetime

from dayplan.logging_config import get_logger

from . import DEEP, SHALLOW
from .config import Constraints, PriorityWeights
from .models import PriorityScore, Task

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

IMPORTANCE_SCORES = {"high": 1.0, "medium": 0.6, "low": 0.3}
EFFORT_SCORES = {"medium": 1.0, "low": 0.6, "high": 0.4}
UNKNOWN_LEVEL_SCORE = 0.5

NO_DUE_DATE_SCORE = 0.3

# (max days until due, score), checked in order
URGENCY_BUCKETS = (
    (0, 1.0),  # overdue or due right now
    (1, 0.9),
    (3, 0.7),
    (7, 0.5),
)
DISTANT_DUE_DATE_SCORE = 0.3


def _align_now(due: datetime, now: datetime | None) -> datetime:
    """Return `now` with the same tz-awareness as `due`."""
    if now is None:
        return datetime.now(due.tzinfo) if due.tzinfo else datetime.now()
    if due.tzinfo is not None and now.tzinfo is None:
        return now.replace(tzinfo=due.tzinfo)
    if due.tzinfo is None and now.tzinfo is not None:
        return now.replace(tzinfo=None)
    return now


def days_until_due(due: datetime, now: datetime | None = None) -> int:
    """Whole days until `due`, rounded up. Zero or negative means overdue."""
    delta = due - _align_now(due, now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def due_date_urgency(task: Task, now: datetime | None = None) -> float:
    if task.due_date is None:
        return NO_DUE_DATE_SCORE

    days = days_until_due(task.due_date, now)
    for max_days, score in URGENCY_BUCKETS:
        if days <= max_days:
            return score
    return DISTANT_DUE_DATE_SCORE


def importance_score(task: Task) -> float:
    return IMPORTANCE_SCORES.get(task.importance, UNKNOWN_LEVEL_SCORE)


def effort_score(task: Task) -> float:
    # Quick wins are fine, but a day of heavy tasks never gets finished
    return EFFORT_SCORES.get(task.effort, UNKNOWN_LEVEL_SCORE)


def context_counts(selected: Iterable[Task]) -> tuple[int, int]:
    """Return (deep, shallow) counts for a selection."""
    deep = shallow = 0
    for task in selected:
        if task.context == DEEP:
            deep += 1
        elif task.context == SHALLOW:
            shallow += 1
    return deep, shallow


def context_balance(task: Task, selected: Sequence[Task], constraints: Constraints) -> float:
    """
    Favour the under-represented work type.

    1.0 when the other type is more than one task ahead, 0.0 once this type
    has hit its ceiling, 0.7 otherwise. Anything not @deep counts as shallow.
    """
    deep_count, shallow_count = context_counts(selected)

    if task.context == DEEP:
        if shallow_count > deep_count + 1:
            return 1.0
        if deep_count >= constraints.max_deep_work_tasks:
            return 0.0
        return 0.7

    if deep_count > shallow_count + 1:
        return 1.0
    if shallow_count >= constraints.max_shallow_tasks:
        return 0.0
    return 0.7


def dependency_readiness(task: Task, pool_ids: set[str], selected_ids: set[str]) -> float:
    """
    How ready a task is given the current selection.

    A dependency missing from the pool altogether scores 0.0, since it may
    simply not have been captured yet.
    """
    unmet = [dep for dep in task.dependencies if dep not in selected_ids]
    if not unmet:
        return 1.0

    if any(dep not in pool_ids for dep in unmet):
        return 0.0

    return max(0.2, 1.0 - 0.3 * len(unmet))


def score_task(
    task: Task,
    all_tasks: Sequence[Task],
    selected_ids: Iterable[str],
    weights: PriorityWeights,
    constraints: Constraints,
    now: datetime | None = None,
) -> PriorityScore:
    """
    Compute the weighted priority score for one task.

    Args:
        task: Task to score
        all_tasks: Full candidate pool
        selected_ids: Ids currently selected
        weights: Factor weights
        constraints: Used for the deep/shallow ceilings
        now: Reference time for due dates (current time if omitted)

    Returns:
        PriorityScore with the composite and each factor
    """
    selected_set = set(selected_ids)
    selected = [t for t in all_tasks if t.id in selected_set]
    pool_ids = {t.id for t in all_tasks}
    return _score(task, selected, pool_ids, selected_set, weights, constraints, now)


def score_tasks(
    all_tasks: Sequence[Task],
    selected_ids: Iterable[str],
    weights: PriorityWeights,
    constraints: Constraints,
    now: datetime | None = None,
) -> list[PriorityScore]:
    """Score every task in the pool, in pool order."""
    selected_set = set(selected_ids)
    selected = [t for t in all_tasks if t.id in selected_set]
    pool_ids = {t.id for t in all_tasks}

    scores = [
        _score(task, selected, pool_ids, selected_set, weights, constraints, now)
        for task in all_tasks
    ]
    logger.debug("tasks_scored", count=len(scores), selected=len(selected_set))
    return scores


def _score(
    task: Task,
    selected: Sequence[Task],
    pool_ids: set[str],
    selected_ids: set[str],
    weights: PriorityWeights,
    constraints: Constraints,
    now: datetime | None,
) -> PriorityScore:
    factors = {
        "due_date_urgency": due_date_urgency(task, now),
        "importance": importance_score(task),
        "effort": effort_score(task),
        "context_balance": context_balance(task, selected, constraints),
        "dependencies": dependency_readiness(task, pool_ids, selected_ids),
    }
    weight_map = weights.as_dict()
    score = sum(value * weight_map[name] for name, value in factors.items())
    return PriorityScore(task_id=task.id, score=score, factors=factors)
