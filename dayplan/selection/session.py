"""
Tool: Selection Session
Purpose: Versioned selection snapshots for a selection UI controller

The engine is stateless, so something has to own "what is selected right now".
SelectionSnapshot is that owner: an immutable value holding the task pool, the
ordered selection and a version number. Every change returns a new snapshot
with the version bumped, so a UI can drop stale results by comparing versions.

SelectionSession pairs snapshots with an engine for the questions a UI asks:
current state, what to display, workload, dependency problems, whether a task
can be added, the suggested order, and whether the day can be locked in.

Usage:
    from dayplan.selection.session import SelectionSession, SelectionSnapshot

    session = SelectionSession(engine)
    snap = SelectionSnapshot.create(tasks)
    snap = session.select(snap, "t1")
    snap = snap.move_up("t1")
    result = session.complete(snap)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Any

from dayplan.logging_config import get_logger

from .engine import TaskSelectionEngine
from .models import CapacityEstimate, DependencyInfo, SelectionState, Task

logger = get_logger(__name__)

SORT_FIELDS = ("priority", "due_date", "title", "effort")
EFFORT_ORDER = {"low": 1, "medium": 2, "high": 3}


class SelectionError(ValueError):
    """Raised for selection changes that break the caller's contract."""


@dataclass(frozen=True)
class SelectionSnapshot:
    """Task pool plus ordered selection at one point in time."""

    tasks: tuple[Task, ...] = ()
    selected_ids: tuple[str, ...] = ()
    version: int = 0

    @classmethod
    def create(cls, tasks: Sequence[Task], selected_ids: Sequence[str] = ()) -> SelectionSnapshot:
        snapshot = cls(tasks=tuple(tasks))
        for task_id in selected_ids:
            snapshot = snapshot.select(task_id)
        return replace(snapshot, version=0)

    def _next(self, selected_ids: Sequence[str]) -> SelectionSnapshot:
        return replace(self, selected_ids=tuple(selected_ids), version=self.version + 1)

    def task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def is_selected(self, task_id: str) -> bool:
        return task_id in self.selected_ids

    @property
    def selected_tasks(self) -> list[Task]:
        """Selected tasks in selection order."""
        by_id = {task.id: task for task in reversed(self.tasks)}
        return [by_id[task_id] for task_id in self.selected_ids if task_id in by_id]

    def frog(self) -> Task | None:
        """The first selected task, the one to do first."""
        return self.task(self.selected_ids[0]) if self.selected_ids else None

    # Mutations (each returns a new snapshot)

    def select(self, task_id: str, limit: int | None = None) -> SelectionSnapshot:
        if task_id in self.selected_ids:
            return self
        if self.task(task_id) is None:
            raise SelectionError(f"Task not found: {task_id}")
        if limit is not None and len(self.selected_ids) >= limit:
            raise SelectionError(f"Cannot select more than {limit} tasks")
        return self._next([*self.selected_ids, task_id])

    def deselect(self, task_id: str) -> SelectionSnapshot:
        if task_id not in self.selected_ids:
            return self
        return self._next([i for i in self.selected_ids if i != task_id])

    def toggle(self, task_id: str, limit: int | None = None) -> SelectionSnapshot:
        if task_id in self.selected_ids:
            return self.deselect(task_id)
        return self.select(task_id, limit=limit)

    def clear(self) -> SelectionSnapshot:
        return self._next([]) if self.selected_ids else self

    def reorder(self, task_id: str, new_index: int) -> SelectionSnapshot:
        """Move a selected task to a new position. Out-of-range moves do nothing."""
        if task_id not in self.selected_ids:
            return self
        if new_index < 0 or new_index >= len(self.selected_ids):
            return self
        ids = list(self.selected_ids)
        current = ids.index(task_id)
        if current == new_index:
            return self
        ids.pop(current)
        ids.insert(new_index, task_id)
        return self._next(ids)

    def move_up(self, task_id: str) -> SelectionSnapshot:
        if task_id not in self.selected_ids:
            return self
        return self.reorder(task_id, self.selected_ids.index(task_id) - 1)

    def move_down(self, task_id: str) -> SelectionSnapshot:
        if task_id not in self.selected_ids:
            return self
        return self.reorder(task_id, self.selected_ids.index(task_id) + 1)

    def set_order(self, ordered_ids: Sequence[str]) -> SelectionSnapshot:
        """Replace the selection order. Must be a permutation of the selection."""
        if sorted(ordered_ids) != sorted(self.selected_ids):
            raise SelectionError("New order must contain exactly the selected tasks")
        if tuple(ordered_ids) == self.selected_ids:
            return self
        return self._next(ordered_ids)

    def task_order(self) -> list[dict[str, Any]]:
        """Selection with 1-based positions and titles for display."""
        order = []
        for position, task_id in enumerate(self.selected_ids, start=1):
            task = self.task(task_id)
            order.append(
                {
                    "task_id": task_id,
                    "position": position,
                    "title": task.title if task else "Unknown Task",
                }
            )
        return order

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "tasks": [task.to_dict() for task in self.tasks],
            "selected_ids": list(self.selected_ids),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SelectionSnapshot:
        return cls(
            tasks=tuple(Task.from_dict(t) for t in data.get("tasks", [])),
            selected_ids=tuple(data.get("selected_ids", [])),
            version=int(data.get("version", 0)),
        )


class SelectionSession:
    """Answers UI questions about a snapshot using a TaskSelectionEngine."""

    def __init__(self, engine: TaskSelectionEngine | None = None):
        self.engine = engine or TaskSelectionEngine()

    @property
    def max_tasks(self) -> int:
        return self.engine.constraints.max_tasks

    def select(self, snapshot: SelectionSnapshot, task_id: str) -> SelectionSnapshot:
        return snapshot.select(task_id, limit=self.max_tasks)

    def toggle(self, snapshot: SelectionSnapshot, task_id: str) -> SelectionSnapshot:
        return snapshot.toggle(task_id, limit=self.max_tasks)

    def accept_suggestion(self, snapshot: SelectionSnapshot, task_id: str) -> SelectionSnapshot:
        suggested = {t.id for t in self.engine.get_suggestions(snapshot.tasks, snapshot.selected_ids)}
        if task_id not in suggested:
            raise SelectionError(f"Task is not currently suggested: {task_id}")
        return self.select(snapshot, task_id)

    def state(self, snapshot: SelectionSnapshot) -> SelectionState:
        return self.engine.get_selection_state(snapshot.tasks, snapshot.selected_ids)

    def workload(self, snapshot: SelectionSnapshot) -> CapacityEstimate:
        return self.engine.estimate_capacity(snapshot.selected_tasks)

    # Dependencies and ordering

    def task_dependencies(self, snapshot: SelectionSnapshot, task_id: str) -> DependencyInfo:
        return self.engine.detect_dependencies(snapshot.tasks, task_id)

    def optimal_ordering(self, snapshot: SelectionSnapshot) -> list[str]:
        """
        Suggested order for the selected tasks: prerequisites first, deep work
        early within each dependency level.

        Tasks the resolver drops because of a cycle keep their current relative
        order at the end, so the result is always a permutation of the selection.
        """
        ordered = [t.id for t in self.engine.get_optimal_task_order(snapshot.selected_tasks)]
        placed = set(ordered)
        return ordered + [task_id for task_id in snapshot.selected_ids if task_id not in placed]

    def apply_optimal_ordering(self, snapshot: SelectionSnapshot) -> SelectionSnapshot:
        return snapshot.set_order(self.optimal_ordering(snapshot))

    def missing_dependencies(self, snapshot: SelectionSnapshot) -> list[Task]:
        """Unselected prerequisites of the selection that exist in the pool."""
        missing: list[Task] = []
        seen: set[str] = set()
        for task in snapshot.selected_tasks:
            for dep in task.dependencies:
                if dep in seen or snapshot.is_selected(dep):
                    continue
                seen.add(dep)
                prerequisite = snapshot.task(dep)
                if prerequisite is not None:
                    missing.append(prerequisite)
        return missing

    def has_dependency_issues(self, snapshot: SelectionSnapshot) -> bool:
        """True when any selected task depends on something not selected."""
        return any(
            not snapshot.is_selected(dep)
            for task in snapshot.selected_tasks
            for dep in task.dependencies
        )

    def can_select(self, snapshot: SelectionSnapshot, task_id: str) -> bool:
        """
        Whether adding a task keeps the selection clean.

        False for unknown or already selected tasks, when the selection is full,
        or when the trial selection would fail validation.
        """
        if snapshot.task(task_id) is None or snapshot.is_selected(task_id):
            return False
        if len(snapshot.selected_ids) >= self.max_tasks:
            return False
        trial = [*snapshot.selected_ids, task_id]
        return not self.engine.validate_selection(snapshot.tasks, trial)

    def display_tasks(
        self,
        snapshot: SelectionSnapshot,
        filter_text: str = "",
        sort_by: str = "priority",
        direction: str = "desc",
    ) -> list[Task]:
        """
        Filter and sort the pool for display.

        Filtering matches title, description or any tag, case-insensitively.
        Tasks without a due date always sort last when sorting by due date.
        """
        if sort_by not in SORT_FIELDS:
            raise SelectionError(f"Invalid sort field. Must be one of: {SORT_FIELDS}")
        if direction not in ("asc", "desc"):
            raise SelectionError("Invalid sort direction. Must be 'asc' or 'desc'")

        tasks = list(snapshot.tasks)
        if filter_text:
            needle = filter_text.lower()
            tasks = [
                t
                for t in tasks
                if needle in t.title.lower()
                or (t.description and needle in t.description.lower())
                or any(needle in tag.lower() for tag in t.tags)
            ]

        reverse = direction == "desc"

        if sort_by == "priority":
            scores = {
                p.task_id: p.score
                for p in self.engine.calculate_priority_scores(snapshot.tasks, snapshot.selected_ids)
            }
            return sorted(tasks, key=lambda t: scores.get(t.id, 0.0), reverse=reverse)

        if sort_by == "due_date":
            dated = [t for t in tasks if t.due_date is not None]
            undated = [t for t in tasks if t.due_date is None]
            dated.sort(key=lambda t: t.due_date.timestamp(), reverse=reverse)
            return dated + undated

        if sort_by == "title":
            return sorted(tasks, key=lambda t: t.title.lower(), reverse=reverse)

        return sorted(tasks, key=lambda t: EFFORT_ORDER.get(t.effort, 2), reverse=reverse)

    def complete(self, snapshot: SelectionSnapshot) -> dict[str, Any]:
        """
        Lock in the day's selection if it is valid.

        Returns:
            dict with success status and either the ordered selection or errors
        """
        state = self.state(snapshot)

        if not snapshot.selected_ids:
            return {"success": False, "error": "No tasks selected", "errors": []}

        if not state.is_valid:
            logger.info("selection_incomplete", version=snapshot.version, violations=len(state.validation_errors))
            return {
                "success": False,
                "error": "Selection does not meet the daily constraints",
                "errors": state.validation_errors,
            }

        capacity = self.engine.estimate_capacity(snapshot.selected_tasks)
        frog = snapshot.frog()
        logger.info("selection_complete", version=snapshot.version, selected=len(snapshot.selected_ids))
        return {
            "success": True,
            "data": {
                "version": snapshot.version,
                "selected_task_ids": list(snapshot.selected_ids),
                "order": snapshot.task_order(),
                "frog": frog.to_dict() if frog else None,
                "capacity": capacity.to_dict(),
            },
        }

