"""Tests for badge progress calculation."""

from datetime import date, datetime, timedelta
from unittest.mock import patch

import pytest

from fakes import MEMBER, USER
from repcir_badges.services.criteria_evaluator import Measurement
from repcir_badges.services.progress import progress_percent


class TestProgressPercent:
    """Tests for progress_percent."""

    @pytest.mark.parametrize("current,target,expected", [
        (0, 10, 0.0),
        (5, 10, 50.0),
        (10, 10, 100.0),
        (25, 10, 100.0),
        (1, 3, 33.3),
        (None, 10, 0.0),
        (5, 0, 0.0),
    ])
    def test_higher_is_better(self, current, target, expected):
        assert progress_percent(Measurement(current, target)) == expected

    @pytest.mark.parametrize("current,target,expected", [
        (720, 360, 50.0),
        (360, 360, 100.0),
        (300, 360, 100.0),
        (None, 360, 0.0),
    ])
    def test_lower_is_better(self, current, target, expected):
        assert progress_percent(Measurement(current, target, lower_is_better=True)) == expected


class TestProgressCalculator:
    """Tests for ProgressCalculator."""

    def test_one_entry_per_active_badge_in_display_order(self, progress_calculator, catalog):
        progress = progress_calculator.get_user_badge_progress(USER, MEMBER)
        assert [p.badge_id for p in progress] == [b.id for b in catalog.active()]

    def test_numeric_progress(self, progress_calculator, repos):
        repos.personal_records.add(MEMBER, "Bench Press", 90)
        repos.follows.follow("a", USER)

        progress = {p.badge_id: p for p in progress_calculator.get_user_badge_progress(USER, MEMBER)}

        assert progress["bench_180"].progress_percent == 50.0
        assert progress["bench_180"].current_value == 90
        assert progress["bench_180"].target_value == 180
        assert progress["followers_2"].progress_percent == 50.0
        assert progress["club_400"].progress_percent == 22.5

    def test_binary_criteria(self, progress_calculator, repos):
        repos.skills.add(USER, "back_tuck", "learning")

        progress = {p.badge_id: p for p in progress_calculator.get_user_badge_progress(USER, MEMBER)}

        assert progress["back_tuck"].progress_percent == 0.0
        assert progress["welcome"].progress_percent == 0.0

    def test_earned_badges_report_complete(self, progress_calculator, award_service):
        award_service.award(USER, "streak_3")

        progress = progress_calculator.get_badge_progress(USER, MEMBER, "streak_3")

        assert progress.is_earned
        assert progress.progress_percent == 100.0
        assert progress.earned_at is not None

    def test_streak_progress_uses_longest(self, progress_calculator, repos):
        start = datetime(2023, 5, 1, 7, 0)
        for n in range(2):
            repos.workouts.add(MEMBER, start + timedelta(days=n))

        progress = progress_calculator.get_badge_progress(USER, MEMBER, "streak_3")

        assert progress.current_value == 2
        assert progress.progress_percent == 66.7

    def test_unknown_badge(self, progress_calculator):
        assert progress_calculator.get_badge_progress(USER, MEMBER, "nope") is None

    def test_deterministic_and_bounded(self, progress_calculator, repos):
        repos.personal_records.add(MEMBER, "Bench Press", 500)
        repos.bodyweight.add(USER, date(2024, 1, 1), 180)

        first = progress_calculator.get_user_badge_progress(USER, MEMBER)
        second = progress_calculator.get_user_badge_progress(USER, MEMBER)

        assert first == second
        assert all(0 <= p.progress_percent <= 100 for p in first)

    def test_failing_badge_reports_zero(self, progress_calculator, repos):
        repos.follows.follow("a", USER)
        with patch.object(repos.follows, "count_followers", side_effect=RuntimeError("boom")):
            progress = progress_calculator.get_badge_progress(USER, MEMBER, "followers_2")

        assert progress.progress_percent == 0.0
        assert not progress.is_earned


class TestInProgressBadges:
    def test_partial_badges_closest_first(self, progress_calculator, repos):
        repos.personal_records.add(MEMBER, "Bench Press", 90)   # bench_180: 50%, club_400: 22.5%
        repos.follows.follow("a", USER)                          # followers_2: 50%
        for n in range(2):
            repos.workouts.add(MEMBER, datetime(2024, 1, 1) + timedelta(days=n))  # 66.7%

        nudges = progress_calculator.get_in_progress_badges(USER, MEMBER, max_items=2)

        assert [n.badge_id for n in nudges][0] in {"workouts_3", "streak_3"}
        assert len(nudges) == 2
        assert all(0 < n.progress_percent < 100 for n in nudges)
        assert nudges[0].progress_percent >= nudges[1].progress_percent

    def test_earned_and_untouched_excluded(self, progress_calculator, award_service, repos):
        repos.personal_records.add(MEMBER, "Bench Press", 90)
        award_service.award(USER, "bench_180")

        nudges = progress_calculator.get_in_progress_badges(USER, MEMBER, max_items=5)

        assert [n.badge_id for n in nudges] == ["club_400"]
