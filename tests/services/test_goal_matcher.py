"""Tests for matching new PRs against active goals."""

import pytest

from fakes import MEMBER
from repcir_badges.models.activity import Goal
from repcir_badges.models.badges import GoalMatchStatus
from repcir_badges.services.goal_matcher import match_goals, units_compatible


def goal(goal_id, title, target_value=None, target_unit="lbs", category="strength"):
    return Goal(
        id=goal_id,
        member_id=MEMBER,
        title=title,
        category=category,
        target_value=target_value,
        target_unit=target_unit,
    )


class TestMatchGoals:
    """Tests for match_goals."""

    def test_exceeded_goal(self):
        matches = match_goals("Bench Press", 230, "lbs", [goal("g1", "Bench 225", 225)])

        assert len(matches) == 1
        match = matches[0]
        assert match.goal_id == "g1"
        assert match.status == GoalMatchStatus.EXCEEDED
        assert match.exceeded_by == 5
        assert match.current_pr_value == 230

    def test_met_goal(self):
        matches = match_goals("Back Squat", 315, "lbs", [goal("g1", "Squat 315", 315)])

        assert matches[0].status == GoalMatchStatus.MET
        assert matches[0].exceeded_by == 0

    def test_below_target_no_match(self):
        assert match_goals("Bench Press", 220, "lbs", [goal("g1", "Bench 225", 225)]) == []

    def test_exercise_name_in_title(self):
        matches = match_goals("Pull Up", 20, "reps", [goal("g1", "20 pull up reps", 20, "reps")])
        assert len(matches) == 1

    def test_unrelated_goal_ignored(self):
        assert match_goals("Bench Press", 300, "lbs", [goal("g1", "Deadlift 405", 225)]) == []

    @pytest.mark.parametrize("pr_unit,goal_unit", [("lbs", "lb"), ("LBS", "lbs"), ("kg", "kgs")])
    def test_compatible_units(self, pr_unit, goal_unit):
        matches = match_goals("Bench Press", 100, pr_unit, [goal("g1", "Bench 100", 100, goal_unit)])
        assert len(matches) == 1

    def test_incompatible_units(self):
        assert match_goals("Bench Press", 120, "kg", [goal("g1", "Bench 100", 100, "lbs")]) == []

    def test_missing_unit_defaults_to_lbs(self):
        matches = match_goals("Bench Press", 230, None, [goal("g1", "Bench 225", 225, "lbs")])
        assert len(matches) == 1

    def test_goal_without_numeric_target_skipped(self):
        goals = [goal("g1", "Bench more", None), goal("g2", "Bench 225", 225, None)]
        assert match_goals("Bench Press", 300, "lbs", goals) == []


class TestUnitsCompatible:
    def test_same_unit(self):
        assert units_compatible("reps", "REPS")

    def test_pounds_and_kilos_differ(self):
        assert not units_compatible("lbs", "kg")
