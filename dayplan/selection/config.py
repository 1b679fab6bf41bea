from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from dayplan.logging_config import get_logger
from dayplan.selection import (
    CONFIG_PATH,
    DEEP_WORK_CEILING,
    DEFAULT_DAILY_EFFORT,
    DEFAULT_MAX_TASKS,
    DEFAULT_RECOMMENDED_TASKS,
)

logger = get_logger(__name__)


# =============================================================================
# Constraints / PriorityWeights (engine value objects)
# =============================================================================

class Constraints(BaseModel):
    """Capacity rules for one engine instance. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")
    max_tasks: int = Field(default=DEFAULT_MAX_TASKS, ge=0)
    min_tasks: int = Field(default=1, ge=0)
    max_deep_work_tasks: int = Field(default=4, ge=0)
    max_shallow_tasks: int = Field(default=4, ge=0)
    max_daily_effort: int = Field(default=DEFAULT_DAILY_EFFORT, ge=0)


class PriorityWeights(BaseModel):
    """
    Weight per scoring factor.

    Not renormalised: callers supplying their own weights are expected to make
    them sum to roughly 1.0.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
    due_date_urgency: float = Field(default=0.30, ge=0.0)
    importance: float = Field(default=0.25, ge=0.0)
    effort: float = Field(default=0.20, ge=0.0)
    context_balance: float = Field(default=0.15, ge=0.0)
    dependencies: float = Field(default=0.10, ge=0.0)

    def as_dict(self) -> dict[str, float]:
        return self.model_dump()


class CapacitySettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")
    deep_work_ceiling: int = Field(default=DEEP_WORK_CEILING, ge=0)
    default_recommendation: int = Field(default=DEFAULT_RECOMMENDED_TASKS, ge=0)


# =============================================================================
# SelectionConfig (args/selection.yaml)
# =============================================================================

class SelectionConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")
    constraints: Constraints = Field(default_factory=Constraints)
    weights: PriorityWeights = Field(default_factory=PriorityWeights)
    capacity: CapacitySettings = Field(default_factory=CapacitySettings)


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    # Allow the file to nest everything under a top-level "selection" key
    return raw.get("selection", raw)


def load_selection_config(path: Path | str | None = None) -> SelectionConfig:
    """
    Load and validate selection settings.

    A missing file yields defaults. An unreadable or invalid file is logged and
    also yields defaults, so a typo in YAML never takes the planner down.
    """
    yaml_path = Path(path) if path is not None else CONFIG_PATH

    try:
        raw = _read_yaml(yaml_path)
        return SelectionConfig.model_validate(raw)
    except Exception as e:
        logger.warning("selection_config_invalid", path=str(yaml_path), error=str(e))
        return SelectionConfig()


__all__ = [
    "Constraints",
    "PriorityWeights",
    "CapacitySettings",
    "SelectionConfig",
    "load_selection_config",
]
