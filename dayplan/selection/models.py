"""
Tool: Selection Models
Purpose: Data structures shared by the selection engine and its callers

Usage:
    from dayplan.selection.models import Task, PriorityScore, CapacityEstimate

Every result the engine returns is a plain value with a to_dict() method, so a
caller can hand it straight to a view layer or a persisted snapshot.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from . import DEEP, SHALLOW


def _unique(values: Any) -> tuple[str, ...]:
    """Deduplicate while keeping first-seen order."""
    if not values:
        return ()
    if isinstance(values, str):
        values = [values]
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(str(value), None)
    return tuple(seen)


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class Task:
    """
    A candidate task for today's selection.

    Immutable by convention: the engine never mutates a Task, and callers are
    expected to build new ones rather than edit them in place. `dependencies`
    lists ids of tasks that have to be selected before this one counts as
    complete.
    """

    id: str
    title: str
    description: str | None = None
    due_date: datetime | None = None
    importance: str = "medium"  # high, medium, low
    effort: str = "medium"  # high, medium, low
    context: str = SHALLOW  # @deep, @shallow
    dependencies: tuple[str, ...] = ()
    estimated_duration: int = 0  # minutes
    tags: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        # Accept lists and sets from callers but store ordered tuples
        object.__setattr__(self, "dependencies", _unique(self.dependencies))
        object.__setattr__(self, "tags", _unique(self.tags))

    @property
    def is_deep(self) -> bool:
        return self.context == DEEP

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "importance": self.importance,
            "effort": self.effort,
            "context": self.context,
            "dependencies": list(self.dependencies),
            "estimated_duration": self.estimated_duration,
            "tags": list(self.tags),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Create from dict."""
        data = data.copy()
        for key in ("due_date", "created_at", "updated_at"):
            data[key] = _parse_datetime(data.get(key))
        data["estimated_duration"] = int(data.get("estimated_duration") or 0)
        return cls(**data)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict())

    @staticmethod
    def generate_id() -> str:
        """Generate a short unique ID."""
        return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class PriorityScore:
    """Composite score for one task plus the sub-factors that produced it."""

    task_id: str
    score: float
    factors: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"task_id": self.task_id, "score": self.score, "factors": dict(self.factors)}


@dataclass(frozen=True)
class DependencyInfo:
    """Direct prerequisites and dependents of a single task."""

    prerequisites: list[Task] = field(default_factory=list)
    dependents: list[Task] = field(default_factory=list)
    can_be_completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "prerequisites": [t.to_dict() for t in self.prerequisites],
            "dependents": [t.to_dict() for t in self.dependents],
            "can_be_completed": self.can_be_completed,
        }


@dataclass(frozen=True)
class CapacityEstimate:
    """Workload summary for a selection."""

    total_minutes: int
    deep_work_minutes: int
    shallow_work_minutes: int
    recommended_task_count: int
    warnings: list[str] = field(default_factory=list)

    @property
    def is_overcommitted(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_minutes": self.total_minutes,
            "deep_work_minutes": self.deep_work_minutes,
            "shallow_work_minutes": self.shallow_work_minutes,
            "recommended_task_count": self.recommended_task_count,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class SelectionState:
    """
    One snapshot of everything a selection UI needs to render.

    Built fresh by TaskSelectionEngine.get_selection_state() on every call.
    """

    available_tasks: list[Task]
    selected_task_ids: list[str]
    priority_scores: list[PriorityScore]
    remaining_slots: int
    validation_errors: list[str]
    suggestions: list[Task]

    @property
    def is_valid(self) -> bool:
        return bool(self.selected_task_ids) and not self.validation_errors

    def score_for(self, task_id: str) -> float:
        for priority in self.priority_scores:
            if priority.task_id == task_id:
                return priority.score
        return 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "available_tasks": [t.to_dict() for t in self.available_tasks],
            "selected_task_ids": list(self.selected_task_ids),
            "priority_scores": [p.to_dict() for p in self.priority_scores],
            "remaining_slots": self.remaining_slots,
            "validation_errors": list(self.validation_errors),
            "suggestions": [t.to_dict() for t in self.suggestions],
            "is_valid": self.is_valid,
        }
