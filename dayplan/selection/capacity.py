"""
Tool: Capacity Estimator
Purpose: Estimate how much of the day a selection really takes

Core Principle:
    Six two-hour deep-work tasks is not a plan, it's a guilt generator.
    Flag overcommitment up front and suggest a realistic task count instead.

Usage:
    from dayplan.selection.capacity import estimate_capacity
    estimate = estimate_capacity(selected_tasks, Constraints())
    for warning in estimate.warnings:
        print(warning)
"""

from __future__ import annotations

from collections.abc import Sequence

from dayplan.logging_config import get_logger

from . import DEEP, DEEP_WORK_CEILING, DEFAULT_RECOMMENDED_TASKS, SHALLOW
from .config import Constraints
from .models import CapacityEstimate, Task

logger = get_logger(__name__)

# Recommendation adjustments
LONG_TASK_MINUTES = 60
SHORT_TASK_MINUTES = 30
HEAVY_DEEP_SHARE = 0.5
LIGHT_DEEP_SHARE = 0.3
HEAVY_DAY_TASKS = 4
LIGHT_DAY_TASKS = 8


def total_workload(tasks: Sequence[Task]) -> int:
    """Sum of estimated minutes."""
    return sum(task.estimated_duration for task in tasks)


def estimate_capacity(
    selected_tasks: Sequence[Task],
    constraints: Constraints,
    deep_work_ceiling: int = DEEP_WORK_CEILING,
    default_recommendation: int = DEFAULT_RECOMMENDED_TASKS,
) -> CapacityEstimate:
    """
    Summarise a selection's workload and warn about overcommitment.

    Args:
        selected_tasks: The selected Task objects
        constraints: Supplies max_daily_effort and max_tasks
        deep_work_ceiling: Minutes of deep work per day before warning
        default_recommendation: Starting recommended task count

    Returns:
        CapacityEstimate with totals, recommended count and warnings
    """
    deep_tasks = [t for t in selected_tasks if t.context == DEEP]
    shallow_tasks = [t for t in selected_tasks if t.context == SHALLOW]

    deep_minutes = total_workload(deep_tasks)
    shallow_minutes = total_workload(shallow_tasks)
    total_minutes = deep_minutes + shallow_minutes

    warnings: list[str] = []

    if deep_minutes > deep_work_ceiling:
        warnings.append(
            f"Deep work time ({deep_minutes}min) exceeds recommended daily limit "
            f"({deep_work_ceiling}min)"
        )

    if total_minutes > constraints.max_daily_effort:
        warnings.append(
            f"Total workload ({total_minutes}min) exceeds daily capacity "
            f"({constraints.max_daily_effort}min)"
        )

    recommended = default_recommendation
    count = len(selected_tasks)
    if count:
        average = total_minutes / count
        deep_share = len(deep_tasks) / count

        if average > LONG_TASK_MINUTES and deep_share > HEAVY_DEEP_SHARE:
            recommended = HEAVY_DAY_TASKS
            warnings.append("Consider selecting fewer tasks due to high complexity and duration")
        elif average < SHORT_TASK_MINUTES and deep_share < LIGHT_DEEP_SHARE:
            recommended = LIGHT_DAY_TASKS

    recommended = min(recommended, constraints.max_tasks)

    if warnings:
        logger.info(
            "capacity_warnings",
            total_minutes=total_minutes,
            deep_minutes=deep_minutes,
            warnings=len(warnings),
        )

    return CapacityEstimate(
        total_minutes=total_minutes,
        deep_work_minutes=deep_minutes,
        shallow_work_minutes=shallow_minutes,
        recommended_task_count=recommended,
        warnings=warnings,
    )
