"""
Goal matching for new personal records.

This is a best-effort heuristic. A goal is considered relevant to a PR when
the exercise name appears in the goal title, or when both mention the same
canonical lift. Titles that name a lift differently ("Bench" vs "chest
press") are missed, and a title mentioning two lifts can match either one.
Matches are informational only; nothing is written.
"""

import logging
from typing import Iterable, List, Optional

from ..models.activity import Goal
from ..models.badges import GoalMatch, GoalMatchStatus


logger = logging.getLogger(__name__)

GOAL_KEYWORDS = ("bench", "squat", "deadlift")
DEFAULT_UNIT = "lbs"


def _is_relevant(exercise_name: str, title: str) -> bool:
    exercise = exercise_name.lower()
    title = title.lower()
    if exercise and exercise in title:
        return True
    return any(keyword in exercise and keyword in title for keyword in GOAL_KEYWORDS)


def units_compatible(a: str, b: str) -> bool:
    """Same unit, or both pounds, or both kilograms."""
    a = a.lower()
    b = b.lower()
    if a == b:
        return True
    if "lb" in a and "lb" in b:
        return True
    return "kg" in a and "kg" in b


def match_goals(
    exercise_name: str,
    value: float,
    unit: Optional[str],
    goals: Iterable[Goal],
) -> List[GoalMatch]:
    """
    Find active goals that a new PR meets or exceeds.

    Args:
        exercise_name: Name of the exercise the PR was set on
        value: PR value
        unit: PR unit (defaults to lbs)
        goals: The member's active goals

    Returns:
        One GoalMatch per goal whose numeric target is reached
    """
    unit = unit or DEFAULT_UNIT
    matches: List[GoalMatch] = []

    for goal in goals:
        if goal.target_value is None or not goal.target_unit:
            continue
        if not _is_relevant(exercise_name, goal.title):
            continue
        if not units_compatible(unit, goal.target_unit):
            continue
        if value < goal.target_value:
            continue

        status = GoalMatchStatus.MET if value == goal.target_value else GoalMatchStatus.EXCEEDED
        matches.append(GoalMatch(
            goal_id=goal.id,
            goal_title=goal.title,
            goal_category=goal.category,
            target_value=goal.target_value,
            target_unit=goal.target_unit,
            current_pr_value=value,
            exceeded_by=value - goal.target_value,
            status=status,
        ))

    if matches:
        logger.debug(f"PR {exercise_name} {value}{unit} matched {len(matches)} goal(s)")
    return matches
