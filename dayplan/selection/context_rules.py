"""
Tool: Context Rules
Purpose: Suggest @deep or @shallow for a task from serializable rules

Rules are plain data, not code. A condition is either a single
(field, op, value) test or an any/all group of conditions, and one
interpreter (evaluate) runs them. That keeps rules loadable from YAML,
storable, and testable without executing anything.

Fields:
    text                - title and description together
    estimated_duration  - minutes (missing counts as 0)
    tags                - the task's tags

Ops:
    matches   - any of the listed words appears as a whole word (text, tags)
    contains  - tags include the value, or text contains it (case-insensitive)
    lte, gte  - numeric comparison (estimated_duration only)
    eq        - equality on any field

A condition whose op does not apply to its field raises ValueError when built.

Usage:
    from dayplan.selection.context_rules import suggest_context
    context, reason = suggest_context(task)
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

from . import CONTEXTS, DEEP, SHALLOW
from .models import Task

FIELDS = ("text", "estimated_duration", "tags")
OPS = ("matches", "contains", "lte", "gte", "eq")
GROUPS = ("any", "all")

# Fields each op can be applied to
OP_FIELDS = {
    "matches": ("text", "tags"),
    "contains": ("text", "tags"),
    "lte": ("estimated_duration",),
    "gte": ("estimated_duration",),
    "eq": FIELDS,
}


@dataclass(frozen=True)
class RuleCondition:
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.field not in FIELDS:
            raise ValueError(f"Invalid rule field '{self.field}'. Must be one of: {FIELDS}")
        if self.op not in OPS:
            raise ValueError(f"Invalid rule op '{self.op}'. Must be one of: {OPS}")
        if self.field not in OP_FIELDS[self.op]:
            raise ValueError(
                f"Rule op '{self.op}' cannot be used on '{self.field}'. "
                f"Allowed fields: {OP_FIELDS[self.op]}"
            )
        if self.op in ("lte", "gte") and (
            isinstance(self.value, bool) or not isinstance(self.value, (int, float))
        ):
            raise ValueError(f"Rule op '{self.op}' needs a number, got {self.value!r}")


@dataclass(frozen=True)
class RuleGroup:
    mode: str  # any, all
    conditions: tuple[Condition, ...]

    def __post_init__(self) -> None:
        if self.mode not in GROUPS:
            raise ValueError(f"Invalid rule group '{self.mode}'. Must be one of: {GROUPS}")


Condition = Union[RuleCondition, RuleGroup]


@dataclass(frozen=True)
class ContextRule:
    id: str
    name: str
    condition: Condition
    suggested_context: str
    reason: str
    priority: int = 0

    def __post_init__(self) -> None:
        if self.suggested_context not in CONTEXTS:
            raise ValueError(f"Invalid context. Must be one of: {CONTEXTS}")


def _field_value(task: Task, field: str) -> Any:
    if field == "text":
        return f"{task.title} {task.description or ''}"
    if field == "estimated_duration":
        return task.estimated_duration or 0
    return task.tags


def _words_pattern(value: Any) -> re.Pattern[str]:
    words = [value] if isinstance(value, str) else list(value)
    return re.compile(r"\b(" + "|".join(re.escape(w) for w in words) + r")\b", re.IGNORECASE)


def evaluate(condition: Condition, task: Task) -> bool:
    """Run one condition (or group) against a task."""
    if isinstance(condition, RuleGroup):
        results = (evaluate(c, task) for c in condition.conditions)
        return any(results) if condition.mode == "any" else all(results)

    actual = _field_value(task, condition.field)
    op = condition.op

    if op == "matches":
        if condition.field == "tags":
            pattern = _words_pattern(condition.value)
            return any(pattern.search(tag) for tag in actual)
        return bool(_words_pattern(condition.value).search(str(actual)))
    if op == "contains":
        if isinstance(actual, tuple):
            return str(condition.value).lower() in (str(a).lower() for a in actual)
        return str(condition.value).lower() in str(actual).lower()
    if op == "lte":
        return actual <= condition.value
    if op == "gte":
        return actual >= condition.value
    return actual == condition.value


# =============================================================================
# Serialization
# =============================================================================

def condition_from_dict(data: dict[str, Any]) -> Condition:
    for mode in GROUPS:
        if mode in data:
            return RuleGroup(mode=mode, conditions=tuple(condition_from_dict(c) for c in data[mode]))
    try:
        value = data["value"]
        if isinstance(value, list):
            value = tuple(value)
        return RuleCondition(field=data["field"], op=data["op"], value=value)
    except KeyError as e:
        raise ValueError(f"Rule condition missing key: {e.args[0]}") from e


def condition_to_dict(condition: Condition) -> dict[str, Any]:
    if isinstance(condition, RuleGroup):
        return {condition.mode: [condition_to_dict(c) for c in condition.conditions]}
    value = condition.value
    if isinstance(value, tuple):
        value = list(value)
    return {"field": condition.field, "op": condition.op, "value": value}


def rule_from_dict(data: dict[str, Any]) -> ContextRule:
    try:
        return ContextRule(
            id=data["id"],
            name=data.get("name", data["id"]),
            condition=condition_from_dict(data["condition"]),
            suggested_context=data["suggested_context"],
            reason=data.get("reason", ""),
            priority=int(data.get("priority", 0)),
        )
    except KeyError as e:
        raise ValueError(f"Rule missing key: {e.args[0]}") from e


def rule_to_dict(rule: ContextRule) -> dict[str, Any]:
    return {
        "id": rule.id,
        "name": rule.name,
        "condition": condition_to_dict(rule.condition),
        "suggested_context": rule.suggested_context,
        "reason": rule.reason,
        "priority": rule.priority,
    }


def _rule(
    rule_id: str, name: str, condition: Condition, context: str, reason: str, priority: int
) -> ContextRule:
    return ContextRule(rule_id, name, condition, context, reason, priority)


def _words(*words: str) -> RuleCondition:
    return RuleCondition("text", "matches", tuple(words))


DEFAULT_RULES: tuple[ContextRule, ...] = (
    _rule("development", "Development Tasks",
          _words("code", "develop", "implement", "debug", "refactor", "architect"),
          DEEP, "Development tasks typically require focused attention", 8),
    _rule("writing", "Writing Tasks",
          _words("write", "document", "draft", "compose", "article", "blog"),
          DEEP, "Writing tasks benefit from uninterrupted focus", 7),
    _rule("research", "Research Tasks",
          _words("research", "analyze", "investigate", "study", "explore"),
          DEEP, "Research requires sustained concentration", 7),
    _rule("communication", "Communication Tasks",
          _words("email", "reply", "respond", "message", "call", "contact"),
          SHALLOW, "Communication tasks can be handled with partial attention", 6),
    _rule("meeting-prep", "Meeting Preparation",
          _words("prepare", "prep", "meeting", "presentation", "agenda"),
          DEEP, "Meeting preparation benefits from focused planning", 6),
    _rule("administrative", "Administrative Tasks",
          _words("admin", "paperwork", "form", "update", "schedule", "organize"),
          SHALLOW, "Administrative tasks are typically routine", 5),
    _rule("quick-tasks", "Quick Tasks",
          RuleCondition("estimated_duration", "lte", 15),
          SHALLOW, "Short tasks can often be handled as shallow work", 4),
    _rule("long-tasks", "Long Tasks",
          RuleCondition("estimated_duration", "gte", 60),
          DEEP, "Longer tasks typically require sustained focus", 4),
    _rule("urgent-tasks", "Urgent Tasks",
          RuleGroup("any", (
              RuleCondition("tags", "contains", "urgent"),
              _words("urgent", "asap", "emergency"),
          )),
          SHALLOW, "Urgent tasks often need quick handling", 3),
)


def matching_rules(task: Task, rules: Sequence[ContextRule] | None = None) -> list[ContextRule]:
    """Rules that match, highest priority first (ties keep rule order)."""
    rules = DEFAULT_RULES if rules is None else rules
    matched = [rule for rule in rules if evaluate(rule.condition, task)]
    return sorted(matched, key=lambda r: r.priority, reverse=True)


def suggest_context(
    task: Task,
    rules: Sequence[ContextRule] | None = None,
    default: str = SHALLOW,
) -> tuple[str, str]:
    """
    Suggest a work context for a task.

    Returns:
        (context, reason) from the highest-priority matching rule, or the
        default context when nothing matches
    """
    matched = matching_rules(task, rules)
    if not matched:
        return default, "No specific patterns detected, using default context"
    top = matched[0]
    return top.suggested_context, top.reason
