"""Task Selection Engine - pick at most six tasks for today, in order

Philosophy:
    A long list of "things to do today" is a wish list, not a plan.
    The Ivy-6 method caps the day at six tasks, ordered so the hardest
    one (the frog) comes first.

Components:
    models.py: Task and the plain-data results the engine returns
    config.py: Constraints and PriorityWeights, loaded from args/selection.yaml
    scoring.py: Multi-factor priority score per task
    dependencies.py: Dependency graph ordering, cycle pruning, energy levels
    validator.py: Check a selection against capacity and dependency rules
    capacity.py: Estimate the day's workload and flag overcommitment
    engine.py: TaskSelectionEngine facade composing all of the above
    session.py: Versioned selection snapshots for a UI controller
    context_rules.py: Data-driven @deep/@shallow suggestions

Key Insight:
    The engine holds no state between calls. The caller passes the full task
    pool and the current selection every time, and gets fresh results back.

Usage:
    from dayplan.selection.engine import TaskSelectionEngine

    engine = TaskSelectionEngine()
    state = engine.get_selection_state(tasks, ["t1", "t4"])
    print(state.remaining_slots, state.validation_errors)
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_PATH = ARGS_DIR / "selection.yaml"

# Work contexts
DEEP = "@deep"
SHALLOW = "@shallow"
CONTEXTS = (DEEP, SHALLOW)

# Importance and effort share the same scale
LEVELS = ("high", "medium", "low")

# Ivy-6 defaults
DEFAULT_MAX_TASKS = 6
DEFAULT_RECOMMENDED_TASKS = 6
MAX_SUGGESTIONS = 5

# Capacity thresholds (minutes)
DEEP_WORK_CEILING = 240
DEFAULT_DAILY_EFFORT = 480

__all__ = [
    "PROJECT_ROOT",
    "ARGS_DIR",
    "CONFIG_PATH",
    "DEEP",
    "SHALLOW",
    "CONTEXTS",
    "LEVELS",
    "DEFAULT_MAX_TASKS",
    "DEFAULT_RECOMMENDED_TASKS",
    "MAX_SUGGESTIONS",
    "DEEP_WORK_CEILING",
    "DEFAULT_DAILY_EFFORT",
]
