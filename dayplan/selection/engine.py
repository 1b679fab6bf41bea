"""
Tool: Task Selection Engine
Purpose: One entry point for scoring, suggesting, ordering and validating a day's tasks

The engine only holds immutable configuration (Constraints, PriorityWeights,
capacity settings). Every operation takes the full task pool and the current
selection, recomputes from scratch and never mutates its inputs.

Usage:
    from dayplan.selection.engine import TaskSelectionEngine

    engine = TaskSelectionEngine(constraints={"max_daily_effort": 420})
    state = engine.get_selection_state(tasks, selected_ids)
    if state.validation_errors:
        show(state.validation_errors)
    order = engine.get_optimal_task_order([t for t in tasks if t.id in selected_ids])

Dependencies:
    - pydantic (config validation)
    - structlog (logging)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from dayplan.logging_config import get_logger

from . import MAX_SUGGESTIONS
from .capacity import estimate_capacity, total_workload
from .config import Constraints, PriorityWeights, SelectionConfig, load_selection_config
from .dependencies import detect_dependencies, optimal_order
from .models import CapacityEstimate, DependencyInfo, PriorityScore, SelectionState, Task
from .scoring import score_tasks
from .validator import validate_selection

logger = get_logger(__name__)


def _coerce(value: Any, model: type) -> Any:
    if value is None:
        return model()
    if isinstance(value, model):
        return value
    if isinstance(value, Mapping):
        return model(**value)
    raise TypeError(f"Expected {model.__name__} or mapping, got {type(value).__name__}")


class TaskSelectionEngine:
    """
    Ivy-6 task selection facade.

    Args:
        constraints: Constraints or a mapping of overrides
        weights: PriorityWeights or a mapping of overrides
        config: Full SelectionConfig; explicit constraints/weights win over it
        clock: Returns "now" for due-date urgency (datetime.now by default)
    """

    def __init__(
        self,
        constraints: Constraints | Mapping[str, Any] | None = None,
        weights: PriorityWeights | Mapping[str, Any] | None = None,
        config: SelectionConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        base = config or SelectionConfig()
        self._constraints = (
            _coerce(constraints, Constraints) if constraints is not None else base.constraints
        )
        self._weights = _coerce(weights, PriorityWeights) if weights is not None else base.weights
        self._capacity = base.capacity
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        path: Path | str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> TaskSelectionEngine:
        """Build an engine from args/selection.yaml (or another YAML file)."""
        return cls(config=load_selection_config(path), clock=clock)

    @property
    def constraints(self) -> Constraints:
        return self._constraints

    @property
    def weights(self) -> PriorityWeights:
        return self._weights

    def _now(self) -> datetime | None:
        return self._clock() if self._clock else None

    # ─────────────────────────────────────────────────────────────────────
    # Scoring and suggestions
    # ─────────────────────────────────────────────────────────────────────

    def calculate_priority_scores(
        self, tasks: Sequence[Task], selected_ids: Sequence[str] = ()
    ) -> list[PriorityScore]:
        """Priority score for every task in the pool, in pool order."""
        return score_tasks(tasks, selected_ids, self._weights, self._constraints, now=self._now())

    def get_suggestions(self, tasks: Sequence[Task], selected_ids: Sequence[str]) -> list[Task]:
        """
        Best next additions to the selection.

        Only unselected tasks that fit in the remaining effort budget and whose
        unselected dependencies all exist in the pool. At most
        min(5, remaining slots) tasks, highest score first.
        """
        return self._suggest(tasks, selected_ids, self.calculate_priority_scores(tasks, selected_ids))

    def _suggest(
        self,
        tasks: Sequence[Task],
        selected_ids: Sequence[str],
        scores: Sequence[PriorityScore],
    ) -> list[Task]:
        selected = set(selected_ids)
        pool_ids = {task.id for task in tasks}
        workload = total_workload([task for task in tasks if task.id in selected])
        score_by_id = {priority.task_id: priority.score for priority in scores}

        candidates = []
        for task in tasks:
            if task.id in selected:
                continue
            if workload + task.estimated_duration > self._constraints.max_daily_effort:
                continue
            if any(dep not in selected and dep not in pool_ids for dep in task.dependencies):
                continue
            candidates.append(task)

        # sorted() is stable, so equal scores keep pool order
        ranked = sorted(candidates, key=lambda t: score_by_id.get(t.id, 0.0), reverse=True)
        limit = max(0, min(MAX_SUGGESTIONS, self._constraints.max_tasks - len(selected_ids)))
        return ranked[:limit]

    # ─────────────────────────────────────────────────────────────────────
    # Dependencies and ordering
    # ─────────────────────────────────────────────────────────────────────

    def detect_dependencies(self, tasks: Sequence[Task], target_id: str) -> DependencyInfo:
        return detect_dependencies(tasks, target_id)

    def get_optimal_task_order(self, tasks: Sequence[Task]) -> list[Task]:
        """Prerequisites first, deep work early within each dependency level."""
        return optimal_order(tasks)

    # ─────────────────────────────────────────────────────────────────────
    # Capacity and validation
    # ─────────────────────────────────────────────────────────────────────

    def calculate_total_workload(self, tasks: Sequence[Task]) -> int:
        return total_workload(tasks)

    def estimate_capacity(self, selected_tasks: Sequence[Task]) -> CapacityEstimate:
        return estimate_capacity(
            selected_tasks,
            self._constraints,
            deep_work_ceiling=self._capacity.deep_work_ceiling,
            default_recommendation=self._capacity.default_recommendation,
        )

    def validate_selection(self, tasks: Sequence[Task], selected_ids: Sequence[str]) -> list[str]:
        return validate_selection(tasks, selected_ids, self._constraints)

    def get_selection_state(
        self, tasks: Sequence[Task], selected_ids: Sequence[str]
    ) -> SelectionState:
        """Scores, violations, suggestions and remaining slots in one snapshot."""
        scores = self.calculate_priority_scores(tasks, selected_ids)
        errors = self.validate_selection(tasks, selected_ids)
        suggestions = self._suggest(tasks, selected_ids, scores)

        state = SelectionState(
            available_tasks=list(tasks),
            selected_task_ids=list(selected_ids),
            priority_scores=scores,
            remaining_slots=max(0, self._constraints.max_tasks - len(selected_ids)),
            validation_errors=errors,
            suggestions=suggestions,
        )
        logger.debug(
            "selection_state",
            tasks=len(tasks),
            selected=len(selected_ids),
            violations=len(errors),
            suggestions=len(suggestions),
        )
        return state
