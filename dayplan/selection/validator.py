"""
Tool: Selection Validator
Purpose: Check a selection against capacity and dependency rules

Returns human-readable violation messages instead of raising, so a UI can show
them inline. An empty list means the selection is valid. Every check runs even
when an earlier one fails.

Usage:
    from dayplan.selection.validator import validate_selection
    errors = validate_selection(tasks, ["t1", "t2"], Constraints())
"""

from __future__ import annotations

from collections.abc import Sequence

from dayplan.logging_config import get_logger

from .config import Constraints
from .models import Task
from .scoring import context_counts

logger = get_logger(__name__)


def _selected_tasks(all_tasks: Sequence[Task], selected_ids: Sequence[str]) -> list[Task]:
    selected = set(selected_ids)
    return [task for task in all_tasks if task.id in selected]


def check_task_count(selected_ids: Sequence[str], constraints: Constraints) -> list[str]:
    errors = []
    count = len(selected_ids)

    if count > constraints.max_tasks:
        errors.append(
            f"Cannot select more than {constraints.max_tasks} tasks. "
            f"Currently selected: {count}"
        )

    # An empty selection is the starting state, not a violation
    if 0 < count < constraints.min_tasks:
        noun = "task" if constraints.min_tasks == 1 else "tasks"
        errors.append(f"Must select at least {constraints.min_tasks} {noun}")

    return errors


def check_context_balance(selected: Sequence[Task], constraints: Constraints) -> list[str]:
    errors = []
    deep_count, shallow_count = context_counts(selected)

    if deep_count > constraints.max_deep_work_tasks:
        errors.append(
            f"Too many deep work tasks. Maximum: {constraints.max_deep_work_tasks}, "
            f"selected: {deep_count}"
        )
    if shallow_count > constraints.max_shallow_tasks:
        errors.append(
            f"Too many shallow tasks. Maximum: {constraints.max_shallow_tasks}, "
            f"selected: {shallow_count}"
        )

    return errors


def check_total_effort(selected: Sequence[Task], constraints: Constraints) -> list[str]:
    total = sum(task.estimated_duration for task in selected)
    if total > constraints.max_daily_effort:
        return [
            "Total estimated effort exceeds daily capacity. "
            f"Maximum: {constraints.max_daily_effort} minutes, selected: {total} minutes"
        ]
    return []


def check_dependencies(all_tasks: Sequence[Task], selected_ids: Sequence[str]) -> list[str]:
    """One message per selected task whose prerequisites aren't selected too."""
    errors = []
    selected = set(selected_ids)
    titles = {}
    for task in all_tasks:
        titles.setdefault(task.id, task.title)

    for task in _selected_tasks(all_tasks, selected_ids):
        unmet = [dep for dep in task.dependencies if dep not in selected]
        if unmet:
            names = ", ".join(titles.get(dep) or dep for dep in unmet)
            errors.append(f'Task "{task.title}" requires these tasks to be selected first: {names}')

    return errors


def validate_selection(
    all_tasks: Sequence[Task],
    selected_ids: Sequence[str],
    constraints: Constraints,
) -> list[str]:
    """
    Validate a selection.

    Args:
        all_tasks: Full candidate pool
        selected_ids: Selected ids, in the user's order
        constraints: Capacity rules

    Returns:
        Violation messages, empty when valid
    """
    selected = _selected_tasks(all_tasks, selected_ids)

    errors: list[str] = []
    errors.extend(check_task_count(selected_ids, constraints))
    errors.extend(check_context_balance(selected, constraints))
    errors.extend(check_total_effort(selected, constraints))
    errors.extend(check_dependencies(all_tasks, selected_ids))

    if errors:
        logger.debug("selection_invalid", selected=len(selected_ids), violations=len(errors))
    return errors
