"""Tests for dayplan/selection/context_rules.py

Context suggestions come from data rules run by a single evaluator, so they
can be loaded from config and tested without executing arbitrary code.
"""

import pytest

from dayplan.selection.context_rules import (
    DEFAULT_RULES,
    RuleCondition,
    RuleGroup,
    condition_from_dict,
    evaluate,
    matching_rules,
    rule_from_dict,
    rule_to_dict,
    suggest_context,
)


class TestDefaultRules:
    """Tests for the built-in suggestion rules."""

    def test_development_is_deep(self, make_task):
        context, reason = suggest_context(make_task("t", title="Debug login flow"))

        assert context == "@deep"
        assert reason == "Development tasks typically require focused attention"

    def test_communication_is_shallow(self, make_task):
        context, _ = suggest_context(make_task("t", title="Reply to Sam"))
        assert context == "@shallow"

    def test_highest_priority_wins(self, make_task):
        """Writing (7) outranks communication (6)."""
        task = make_task("t", title="Email draft of the article")
        ids = [r.id for r in matching_rules(task)]

        assert ids[:2] == ["writing", "communication"]
        assert suggest_context(task)[0] == "@deep"

    def test_quick_task_by_duration(self, make_task):
        task = make_task("t", title="Water plants", estimated_duration=5)
        assert suggest_context(task) == ("@shallow", "Short tasks can often be handled as shallow work")

    def test_long_task_by_duration(self, make_task):
        task = make_task("t", title="Quarterly planning", estimated_duration=90)
        assert suggest_context(task)[0] == "@deep"

    def test_urgent_tag(self, make_task):
        task = make_task("t", title="Pay invoice", tags=["URGENT"])
        assert suggest_context(task) == ("@shallow", "Urgent tasks often need quick handling")

    def test_whole_words_only(self, make_task):
        """'Codec' does not match the 'code' keyword."""
        context, reason = suggest_context(make_task("t", title="Codec licensing"))

        assert context == "@shallow"
        assert reason == "No specific patterns detected, using default context"

    def test_custom_default(self, make_task):
        assert suggest_context(make_task("t", title="Plan garden"), default="@deep")[0] == "@deep"

    def test_description_is_searched(self, make_task):
        task = make_task("t", title="Billing", description="investigate failed payments")
        assert matching_rules(task)[0].id == "research"


class TestEvaluator:
    """Tests for the condition interpreter."""

    def test_all_group(self, make_task):
        condition = RuleGroup(
            "all",
            (
                RuleCondition("tags", "contains", "home"),
                RuleCondition("estimated_duration", "lte", 30),
            ),
        )

        assert evaluate(condition, make_task("t", tags=["home"], estimated_duration=20))
        assert not evaluate(condition, make_task("t", tags=["home"], estimated_duration=45))

    def test_eq(self, make_task):
        assert evaluate(RuleCondition("estimated_duration", "eq", 30), make_task("t"))

    def test_invalid_field_rejected(self):
        with pytest.raises(ValueError, match="Invalid rule field"):
            RuleCondition("colour", "eq", "red")

    def test_invalid_op_rejected(self):
        with pytest.raises(ValueError, match="Invalid rule op"):
            RuleCondition("text", "like", "x")

    @pytest.mark.parametrize(
        "field, op",
        [("text", "lte"), ("text", "gte"), ("tags", "gte"), ("estimated_duration", "matches")],
    )
    def test_op_must_suit_field(self, field, op):
        """Comparisons only apply to durations; word matching only to text and tags."""
        with pytest.raises(ValueError, match="cannot be used on"):
            RuleCondition(field, op, 5)

    def test_comparison_needs_number(self):
        with pytest.raises(ValueError, match="needs a number"):
            RuleCondition("estimated_duration", "lte", "15")

    def test_bad_pairing_from_dict_is_value_error(self):
        with pytest.raises(ValueError):
            condition_from_dict({"field": "tags", "op": "lte", "value": 1})


class TestRuleSerialization:
    """Tests for loading rules from plain data."""

    def test_load_custom_rule(self, make_task):
        rule = rule_from_dict(
            {
                "id": "garden",
                "condition": {"any": [{"field": "text", "op": "matches", "value": ["garden", "plants"]}]},
                "suggested_context": "@shallow",
                "reason": "Garden chores",
                "priority": 9,
            }
        )

        assert rule.name == "garden"
        assert suggest_context(make_task("t", title="Prune plants", estimated_duration=60), [rule]) == (
            "@shallow",
            "Garden chores",
        )

    def test_default_rules_survive_dict_form(self):
        """Loading a dumped rule gives back an equal, hashable rule."""
        for rule in DEFAULT_RULES:
            restored = rule_from_dict(rule_to_dict(rule))

            assert restored == rule
            assert hash(restored) == hash(rule)

    def test_list_values_load_as_tuples(self):
        condition = condition_from_dict({"field": "text", "op": "matches", "value": ["a", "b"]})
        assert condition == RuleCondition("text", "matches", ("a", "b"))

    def test_missing_key(self):
        with pytest.raises(ValueError, match="missing key"):
            rule_from_dict({"id": "x", "suggested_context": "@deep", "condition": {"field": "text"}})

    def test_invalid_context(self):
        with pytest.raises(ValueError, match="Invalid context"):
            rule_from_dict(
                {
                    "id": "x",
                    "suggested_context": "@medium",
                    "condition": {"field": "text", "op": "matches", "value": "x"},
                }
            )
