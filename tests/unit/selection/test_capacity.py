"""Tests for dayplan/selection/capacity.py"""

from dayplan.selection.capacity import estimate_capacity, total_workload
from dayplan.selection.config import Constraints


class TestEstimateCapacity:
    """Tests for workload totals and warnings."""

    def test_totals_by_context(self, make_task):
        tasks = [
            make_task("d", context="@deep", estimated_duration=90),
            make_task("s1", estimated_duration=20),
            make_task("s2", estimated_duration=25),
        ]
        estimate = estimate_capacity(tasks, Constraints())

        assert estimate.deep_work_minutes == 90
        assert estimate.shallow_work_minutes == 45
        assert estimate.total_minutes == 135

    def test_over_daily_capacity_warning(self, make_task):
        """500 minutes against a 480 budget names both numbers."""
        tasks = [make_task("a", estimated_duration=250), make_task("b", estimated_duration=250)]
        estimate = estimate_capacity(tasks, Constraints(max_daily_effort=480))

        assert any("480" in w and "500" in w for w in estimate.warnings)
        assert estimate.is_overcommitted

    def test_deep_work_ceiling(self, make_task):
        """More than four hours of deep work warns and lowers the recommendation."""
        tasks = [
            make_task("a", context="@deep", estimated_duration=150),
            make_task("b", context="@deep", estimated_duration=150),
        ]
        estimate = estimate_capacity(tasks, Constraints())

        assert estimate.warnings == [
            "Deep work time (300min) exceeds recommended daily limit (240min)",
            "Consider selecting fewer tasks due to high complexity and duration",
        ]
        assert estimate.recommended_task_count == 4

    def test_light_day_recommends_more_but_clamped(self, make_task):
        """Short shallow tasks suggest 8, clamped to max_tasks."""
        tasks = [make_task(f"s{i}", estimated_duration=10) for i in range(6)]

        assert estimate_capacity(tasks, Constraints()).recommended_task_count == 6
        assert estimate_capacity(tasks, Constraints(max_tasks=10)).recommended_task_count == 8

    def test_default_recommendation(self, make_task):
        tasks = [make_task("d", context="@deep", estimated_duration=45), make_task("s", estimated_duration=45)]
        estimate = estimate_capacity(tasks, Constraints())

        assert estimate.recommended_task_count == 6
        assert estimate.warnings == []

    def test_empty_selection(self):
        estimate = estimate_capacity([], Constraints())

        assert estimate.total_minutes == 0
        assert estimate.recommended_task_count == 6
        assert estimate.warnings == []

    def test_custom_ceiling(self, make_task):
        tasks = [make_task("a", context="@deep", estimated_duration=45)]
        estimate = estimate_capacity(tasks, Constraints(), deep_work_ceiling=30)

        assert estimate.warnings[0] == "Deep work time (45min) exceeds recommended daily limit (30min)"

    def test_to_dict(self, make_task):
        data = estimate_capacity([make_task("a")], Constraints()).to_dict()
        assert data["total_minutes"] == 30
        assert data["warnings"] == []


def test_total_workload(make_task):
    tasks = [make_task("a", estimated_duration=15), make_task("b", estimated_duration=40)]
    assert total_workload(tasks) == 55
