"""Shared test fixtures for dayplan tests.

This module provides common fixtures used across all test modules:
- A pinned "now" so due-date urgency is deterministic
- A task factory with sensible defaults
- A small realistic task pool with one dependency chain
- Engines with default and custom configuration

Usage:
    def test_something(make_task, engine):
        task = make_task("t1", context="@deep")
        ...
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from dayplan.selection.engine import TaskSelectionEngine
from dayplan.selection.models import Task


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"


# ─────────────────────────────────────────────────────────────────────────────
# Clock Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def fixed_now() -> datetime:
    """Monday morning, 09:00."""
    return datetime(2025, 3, 3, 9, 0, 0)


# ─────────────────────────────────────────────────────────────────────────────
# Task Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Factory for tasks with neutral defaults.

    Returns:
        callable(task_id, **overrides) -> Task
    """

    def _make(task_id: str, **overrides) -> Task:
        fields = {
            "id": task_id,
            "title": f"Task {task_id}",
            "importance": "medium",
            "effort": "medium",
            "context": "@shallow",
            "estimated_duration": 30,
        }
        fields.update(overrides)
        return Task(**fields)

    return _make


@pytest.fixture
def sample_tasks(make_task, fixed_now) -> list[Task]:
    """A morning's worth of captured tasks.

    "report" depends on "data", which depends on "access".
    """
    return [
        make_task(
            "report",
            title="Write quarterly report",
            importance="high",
            effort="high",
            context="@deep",
            estimated_duration=120,
            due_date=fixed_now + timedelta(days=2),
            dependencies=["data"],
        ),
        make_task(
            "data",
            title="Pull sales data",
            context="@deep",
            estimated_duration=60,
            dependencies=["access"],
        ),
        make_task(
            "access",
            title="Request warehouse access",
            importance="high",
            effort="low",
            estimated_duration=10,
        ),
        make_task(
            "inbox",
            title="Clear inbox",
            importance="low",
            effort="low",
            estimated_duration=20,
            tags=["email"],
        ),
        make_task(
            "dentist",
            title="Book dentist",
            description="Call the clinic before noon",
            importance="medium",
            effort="low",
            estimated_duration=5,
            due_date=fixed_now - timedelta(days=1),
        ),
        make_task(
            "refactor",
            title="Refactor billing module",
            importance="medium",
            effort="medium",
            context="@deep",
            estimated_duration=90,
            due_date=fixed_now + timedelta(days=30),
        ),
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Engine Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def engine(fixed_now) -> TaskSelectionEngine:
    """Engine with default constraints and a pinned clock."""
    return TaskSelectionEngine(clock=lambda: fixed_now)
