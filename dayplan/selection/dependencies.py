"""
Tool: Dependency Resolver
Purpose: Order tasks so prerequisites come first, then by energy within each level

Two passes:
1. Topological order - depth-first walk with three-colour marking. Cycles are
   a data-quality problem, not a crash: the chain that runs into a cycle is
   dropped from the output and logged.
2. Energy levels - group the ordered tasks into batches whose dependencies are
   all in earlier batches, and put demanding @deep work first in each batch
   while energy is still high.

Dependency ids that are not in the pool are ignored while ordering. A
dependency on a task that hasn't been captured yet shouldn't hide the task.

Usage:
    from dayplan.selection.dependencies import optimal_order, detect_dependencies
    ordered = optimal_order(tasks)
    info = detect_dependencies(tasks, "t3")
"""

from __future__ import annotations

from collections.abc import Sequence

from dayplan.logging_config import get_logger

from . import DEEP
from .models import DependencyInfo, Task
from .scoring import importance_score

logger = get_logger(__name__)

# Visit states
UNVISITED = 0
IN_PROGRESS = 1
DONE = 2
FAILED = 3


def _index_pool(tasks: Sequence[Task]) -> dict[str, Task]:
    by_id: dict[str, Task] = {}
    for task in tasks:
        # First occurrence wins if the caller passed duplicate ids
        by_id.setdefault(task.id, task)
    return by_id


def resolve_order(tasks: Sequence[Task]) -> tuple[list[Task], list[str]]:
    """
    Depth-first topological sort using an explicit stack.

    Each stack frame is (task_id, index of the next dependency to visit).
    Reaching a task that is still in progress means a cycle; every task on the
    current stack is then marked failed and left out. Reaching a failed task
    fails the current chain the same way, so anything that depends on a cycle
    is left out too.

    Returns:
        (ordered tasks, ids excluded because of cycles)
    """
    by_id = _index_pool(tasks)
    edges = {
        task_id: [dep for dep in task.dependencies if dep in by_id]
        for task_id, task in by_id.items()
    }
    state: dict[str, int] = {}
    ordered: list[Task] = []
    excluded: list[str] = []

    for root in by_id:
        if state.get(root, UNVISITED) != UNVISITED:
            continue

        state[root] = IN_PROGRESS
        stack: list[tuple[str, int]] = [(root, 0)]

        while stack:
            node, index = stack[-1]
            deps = edges[node]

            if index >= len(deps):
                stack.pop()
                state[node] = DONE
                ordered.append(by_id[node])
                continue

            stack[-1] = (node, index + 1)
            dep = deps[index]
            dep_state = state.get(dep, UNVISITED)

            if dep_state == UNVISITED:
                state[dep] = IN_PROGRESS
                stack.append((dep, 0))
            elif dep_state in (IN_PROGRESS, FAILED):
                chain = [frame_id for frame_id, _ in stack]
                if dep_state == IN_PROGRESS:
                    logger.warning("dependency_cycle", task_id=dep, chain=chain)
                for frame_id in chain:
                    state[frame_id] = FAILED
                excluded.extend(chain)
                stack.clear()

    return ordered, excluded


def topological_order(tasks: Sequence[Task]) -> list[Task]:
    """Tasks ordered so that every task comes after the tasks it depends on."""
    ordered, _ = resolve_order(tasks)
    return ordered


def _energy_key(task: Task) -> tuple[int, float]:
    return (0 if task.context == DEEP else 1, -importance_score(task))


def energy_levels(ordered: Sequence[Task]) -> list[list[Task]]:
    """
    Group tasks into dependency levels, deep work first within each level.

    A task joins the current level when every dependency is in an earlier level
    or is not in the pool at all. The second half of that rule is
    permissive and matches how unresolved dependencies are treated elsewhere.
    """
    pool_ids = {task.id for task in ordered}
    placed: set[str] = set()
    remaining = list(ordered)
    levels: list[list[Task]] = []

    while remaining:
        level = [
            task
            for task in remaining
            if all(dep in placed or dep not in pool_ids for dep in task.dependencies)
        ]
        if not level:
            # Only reachable with unpruned cycles; keep the tasks rather than lose them
            level = remaining

        level_ids = {task.id for task in level}
        remaining = [task for task in remaining if task.id not in level_ids]
        placed |= level_ids
        levels.append(sorted(level, key=_energy_key))

    return levels


def optimal_order(tasks: Sequence[Task]) -> list[Task]:
    """Topological order, then energy-based ordering within each level."""
    ordered = topological_order(tasks)
    levels = energy_levels(ordered)
    logger.debug("optimal_order", tasks=len(tasks), ordered=len(ordered), levels=len(levels))
    return [task for level in levels for task in level]


def detect_dependencies(tasks: Sequence[Task], target_id: str) -> DependencyInfo:
    """
    Describe one task's place in the dependency graph.

    `can_be_completed` only asks whether every prerequisite exists in the pool,
    not whether it is selected yet.
    """
    by_id = _index_pool(tasks)
    target = by_id.get(target_id)
    if target is None:
        return DependencyInfo(prerequisites=[], dependents=[], can_be_completed=False)

    prerequisites = [by_id[dep] for dep in target.dependencies if dep in by_id]
    dependents = [
        task for task in tasks if task.id != target_id and target_id in task.dependencies
    ]
    can_be_completed = all(dep in by_id for dep in target.dependencies)

    return DependencyInfo(
        prerequisites=prerequisites,
        dependents=dependents,
        can_be_completed=can_be_completed,
    )
