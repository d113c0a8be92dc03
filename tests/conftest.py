"""Shared fixtures for badge engine tests."""

import pytest

from fakes import (
    InMemoryBadgeDefinitions,
    InMemoryUserBadges,
    badge_row,
    make_activity_repositories,
)
from repcir_badges.catalog import BadgeCatalog
from repcir_badges.config import Settings
from repcir_badges.services.award_service import AwardService
from repcir_badges.services.criteria_evaluator import CriteriaEvaluator
from repcir_badges.services.progress import ProgressCalculator


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway database."""
    return Settings(badges_db_path=tmp_path / "badges.db", default_timezone="UTC")


@pytest.fixture
def repos():
    return make_activity_repositories()


@pytest.fixture
def catalog_rows():
    """A small catalog covering the main criteria families."""
    return [
        badge_row("bench_180", {"type": "pr_single", "exercises": ["bench"], "singleValue": 180}, display_order=1),
        badge_row(
            "club_400",
            {"type": "pr_total", "exercises": ["squat", "bench", "deadlift"], "totalValue": 400},
            display_order=2,
        ),
        badge_row("workouts_3", {"type": "workout_count", "workoutCount": 3}, category="consistency", display_order=3),
        badge_row("streak_3", {"type": "streak", "streakDays": 3}, category="consistency", display_order=4),
        badge_row("followers_2", {"type": "followers", "followerCount": 2}, category="social", display_order=5),
        badge_row(
            "back_tuck",
            {"type": "skill_achieved", "skillName": "back_tuck"},
            category="skill",
            display_order=6,
        ),
        badge_row("welcome", {"type": "onboarding_complete"}, category="milestone", display_order=7),
    ]


@pytest.fixture
def definitions(catalog_rows):
    return InMemoryBadgeDefinitions(catalog_rows)


@pytest.fixture
def catalog(definitions):
    return BadgeCatalog(definitions)


@pytest.fixture
def user_badges():
    return InMemoryUserBadges()


@pytest.fixture
def evaluator(repos):
    return CriteriaEvaluator(repos, timezone="UTC")


@pytest.fixture
def award_service(catalog, user_badges, evaluator, repos, settings):
    return AwardService(catalog, user_badges, evaluator, repos.goals, settings)


@pytest.fixture
def progress_calculator(catalog, user_badges, evaluator):
    return ProgressCalculator(catalog, user_badges, evaluator)
