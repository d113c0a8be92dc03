"""
Tests for the AwardService.

Tests cover:
- Idempotent awarding and auto-featuring
- Uniqueness under concurrent awards
- Featured limit and display ordering
- evaluate_and_award end to end, including goal matches and fault isolation
"""

import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from fakes import MEMBER, USER
from repcir_badges.exceptions import (
    BadgeNotFoundError,
    FeaturedBadgeLimitError,
    UserBadgeNotFoundError,
    ValidationError,
)
from repcir_badges.models.activity import Goal
from repcir_badges.models.badges import (
    EvaluationContext,
    EvaluationTrigger,
    GoalMatchStatus,
    UserBadge,
)
from repcir_badges.services.award_service import AwardService


class TestAward:
    """Tests for award."""

    def test_first_award_succeeds(self, award_service, user_badges):
        result = award_service.award(USER, "bench_180", {"prValue": 185})

        assert result.success
        assert result.already_earned is None
        stored = user_badges.get(USER, "bench_180")
        assert stored.metadata == {"prValue": 185}
        assert stored.is_featured
        assert stored.display_order == 0

    def test_award_is_idempotent(self, award_service, user_badges):
        award_service.award(USER, "bench_180", {"prValue": 185})
        earned_at = user_badges.get(USER, "bench_180").earned_at

        second = award_service.award(USER, "bench_180", {"prValue": 999})

        assert not second.success
        assert second.already_earned
        stored = user_badges.get(USER, "bench_180")
        assert stored.earned_at == earned_at
        assert stored.metadata == {"prValue": 185}

    def test_unknown_badge_raises(self, award_service):
        with pytest.raises(BadgeNotFoundError):
            award_service.award(USER, "does_not_exist")

    def test_first_three_badges_auto_featured(self, award_service, user_badges):
        for badge_id in ["bench_180", "club_400", "workouts_3", "streak_3"]:
            award_service.award(USER, badge_id)

        featured = [b.badge_id for b in user_badges.list_for_user(USER) if b.is_featured]
        assert featured == ["bench_180", "club_400", "workouts_3"]
        assert user_badges.get(USER, "streak_3").display_order == 3

    def test_auto_feature_never_exceeds_featured_limit(
        self, catalog, user_badges, evaluator, repos, settings
    ):
        generous = settings.model_copy(update={"auto_feature_limit": 10, "featured_badge_limit": 2})
        service = AwardService(catalog, user_badges, evaluator, repos.goals, generous)

        for badge_id in ["bench_180", "club_400", "workouts_3", "streak_3"]:
            service.award(USER, badge_id)

        assert user_badges.count_featured(USER) == 2
        assert not user_badges.get(USER, "workouts_3").is_featured

    def test_concurrent_awards_create_one_row(self, award_service, user_badges):
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(award_service.award(USER, "bench_180"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(1 for r in results if r.success) == 1
        assert all(r.already_earned for r in results if not r.success)
        assert len(user_badges.list_for_user(USER)) == 1


class TestFeatured:
    """Tests for toggle_featured and the featured limit."""

    @pytest.fixture
    def seven_badges(self, award_service, definitions):
        for n in range(7):
            definitions.add({
                "id": f"extra_{n}",
                "name": f"Extra {n}",
                "category": "milestone",
                "criteria": {"type": "first_login"},
                "display_order": 100 + n,
            })
            award_service.award(USER, f"extra_{n}")
        return [f"extra_{n}" for n in range(7)]

    def test_seventh_feature_rejected(self, award_service, user_badges, seven_badges):
        for badge_id in seven_badges[3:6]:
            award_service.toggle_featured(USER, badge_id, True)
        assert user_badges.count_featured(USER) == 6

        with pytest.raises(FeaturedBadgeLimitError) as exc_info:
            award_service.toggle_featured(USER, seven_badges[6], True)

        assert exc_info.value.status_code == 409
        assert "Maximum of 6 featured badges allowed" in exc_info.value.message
        assert not user_badges.get(USER, seven_badges[6]).is_featured
        assert user_badges.count_featured(USER) == 6

    def test_unfeature_then_feature(self, award_service, user_badges, seven_badges):
        earned = award_service.toggle_featured(USER, seven_badges[0], False)

        assert not earned.is_featured
        assert earned.badge.id == seven_badges[0]
        assert user_badges.count_featured(USER) == 2

    def test_featuring_featured_badge_is_noop(self, award_service, user_badges, seven_badges):
        earned = award_service.toggle_featured(USER, seven_badges[0], True)

        assert earned.is_featured
        assert user_badges.count_featured(USER) == 3

    def test_unearned_badge_raises(self, award_service):
        with pytest.raises(UserBadgeNotFoundError):
            award_service.toggle_featured(USER, "bench_180", True)

    def test_retired_badge_toggle_leaves_row_untouched(self, award_service, user_badges):
        user_badges.insert(UserBadge(
            user_id=USER,
            badge_id="retired",
            earned_at=datetime.now(timezone.utc),
            is_featured=False,
            display_order=0,
        ))

        with pytest.raises(BadgeNotFoundError):
            award_service.toggle_featured(USER, "retired", True)

        assert not user_badges.get(USER, "retired").is_featured
        assert user_badges.count_featured(USER) == 0

    def test_featured_list_capped(self, award_service, seven_badges):
        featured = award_service.get_featured_badges(USER)
        assert [b.badge.id for b in featured] == seven_badges[:3]


class TestOrdering:
    def test_reorder(self, award_service):
        for badge_id in ["bench_180", "club_400", "workouts_3"]:
            award_service.award(USER, badge_id)

        reordered = award_service.reorder_badges(USER, ["workouts_3", "bench_180", "club_400"])

        assert [b.badge.id for b in reordered] == ["workouts_3", "bench_180", "club_400"]
        assert [b.display_order for b in reordered] == [0, 1, 2]

    def test_duplicate_ids_rejected(self, award_service):
        with pytest.raises(ValidationError):
            award_service.reorder_badges(USER, ["bench_180", "bench_180"])

    def test_badges_with_status(self, award_service):
        award_service.award(USER, "club_400")

        status = {s.badge.id: s for s in award_service.get_badges_with_status(USER)}

        assert status["club_400"].earned
        assert status["club_400"].earned_at is not None
        assert not status["bench_180"].earned
        assert status["bench_180"].earned_at is None


class TestEvaluateAndAward:
    """Tests for evaluate_and_award."""

    def test_awards_eligible_badges(self, award_service, repos):
        repos.personal_records.add(MEMBER, "Bench Press", 200)
        repos.personal_records.add(MEMBER, "Back Squat", 300)

        result = award_service.evaluate_and_award(
            EvaluationContext(user_id=USER, member_id=MEMBER, trigger=EvaluationTrigger.PR)
        )

        awarded = {a.badge_id: a for a in result.awarded}
        assert set(awarded) == {"bench_180", "club_400"}
        assert awarded["club_400"].metadata["total"] == 500
        assert result.goal_matches == []

    def test_second_evaluation_awards_nothing(self, award_service, repos):
        repos.follows.follow("a", USER)
        repos.follows.follow("b", USER)
        context = EvaluationContext(user_id=USER, trigger=EvaluationTrigger.SOCIAL)

        first = award_service.evaluate_and_award(context)
        second = award_service.evaluate_and_award(context)

        assert [a.badge_id for a in first.awarded] == ["followers_2"]
        assert second.awarded == []

    def test_workout_trigger(self, award_service, repos):
        start = datetime(2024, 3, 1, 18, 0)
        for n in range(3):
            repos.workouts.add(MEMBER, start + timedelta(days=n))

        result = award_service.evaluate_and_award(
            EvaluationContext(user_id=USER, member_id=MEMBER, trigger="workout")
        )

        assert {a.badge_id for a in result.awarded} == {"workouts_3", "streak_3"}

    def test_inactive_and_manual_badges_skipped(self, award_service, definitions, repos):
        definitions.add({
            "id": "manual_sport",
            "name": "Manual",
            "category": "sport",
            "criteria": {"type": "sport", "sport": "hockey"},
            "is_automatic": False,
        })
        definitions.add({
            "id": "retired_sport",
            "name": "Retired",
            "category": "sport",
            "criteria": {"type": "sport", "sport": "hockey"},
            "is_active": False,
        })
        repos.sports.add(USER, "hockey")

        result = award_service.evaluate_and_award(EvaluationContext(user_id=USER, trigger="sport"))

        assert result.awarded == []

    def test_pr_trigger_matches_goals(self, award_service, repos):
        repos.personal_records.add(MEMBER, "Bench Press", 230)
        repos.goals.add(Goal(id="g1", member_id=MEMBER, title="Bench 225", target_value=225, target_unit="lbs"))

        result = award_service.evaluate_and_award(EvaluationContext(
            user_id=USER,
            member_id=MEMBER,
            trigger=EvaluationTrigger.PR,
            exercise_name="Bench Press",
            exercise_value=230,
        ))

        assert len(result.goal_matches) == 1
        assert result.goal_matches[0].status == GoalMatchStatus.EXCEEDED
        assert result.goal_matches[0].exceeded_by == 5

    def test_failing_criterion_skips_only_that_badge(self, award_service, repos):
        repos.follows.follow("a", USER)
        repos.follows.follow("b", USER)

        with patch.object(repos.skills, "get_by_name", side_effect=RuntimeError("db down")):
            result = award_service.evaluate_and_award(EvaluationContext(user_id=USER, trigger="social"))

        assert [a.badge_id for a in result.awarded] == ["followers_2"]

    def test_never_raises(self, award_service, user_badges):
        with patch.object(user_badges, "earned_badge_ids", side_effect=RuntimeError("db down")):
            result = award_service.evaluate_and_award(EvaluationContext(user_id=USER, trigger="social"))

        assert result.awarded == []
        assert result.goal_matches == []
