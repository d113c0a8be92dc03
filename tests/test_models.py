"""Tests for badge models and the built-in catalog."""

import pytest
from pydantic import ValidationError

from repcir_badges.catalog import DEFAULT_BADGES, BadgeCatalog, build_definitions
from repcir_badges.models.badges import (
    CRITERIA_TYPES,
    BadgeTier,
    EvaluationContext,
    PRTotalCriteria,
    SkillAchievedCriteria,
    SkillStatus,
    TrackTimeCriteria,
    criteria_to_dict,
    parse_criteria,
)

from fakes import InMemoryBadgeDefinitions, badge_row


class TestCriteria:
    """Tests for criteria parsing and serialization."""

    def test_all_variants_registered(self):
        assert len(CRITERIA_TYPES) == 15

    def test_parse_camel_case(self):
        criteria = parse_criteria({"type": "pr_total", "exercises": ["squat"], "totalValue": 500})

        assert isinstance(criteria, PRTotalCriteria)
        assert criteria.total_value == 500

    def test_parse_snake_case(self):
        criteria = parse_criteria({"type": "skill_achieved", "skill_name": "muscle_up"})

        assert isinstance(criteria, SkillAchievedCriteria)
        assert criteria.skill_status == SkillStatus.ACHIEVED

    @pytest.mark.parametrize("data", [
        {"type": "telepathy"},
        {"type": "pr_single", "exercises": ["bench"]},
        {"type": "streak", "streakDays": 0},
        {"type": "pr_total", "exercises": [], "totalValue": 100},
        {},
    ])
    def test_invalid_criteria_rejected(self, data):
        with pytest.raises(ValidationError):
            parse_criteria(data)

    def test_serialize_drops_unset_optionals(self):
        criteria = TrackTimeCriteria(track_time=420)

        assert criteria_to_dict(criteria) == {"type": "track_time", "trackTime": 420.0}

    def test_criteria_are_immutable(self):
        criteria = parse_criteria({"type": "followers", "followerCount": 10})
        with pytest.raises(ValidationError):
            criteria.follower_count = 1

    def test_context_requires_user(self):
        with pytest.raises(ValidationError):
            EvaluationContext(user_id="", trigger="workout")


class TestCatalog:
    """Tests for the built-in catalog and catalog loading."""

    def test_default_badges_valid(self):
        definitions = build_definitions(DEFAULT_BADGES)

        assert len(definitions) == len(DEFAULT_BADGES)
        assert len({d.id for d in definitions}) == len(DEFAULT_BADGES)

    def test_default_catalog_spans_tiers(self):
        tiers = {d.tier for d in build_definitions(DEFAULT_BADGES)}
        assert {BadgeTier.BRONZE, BadgeTier.GOLD, BadgeTier.PLATINUM} <= tiers

    def test_invalid_rows_skipped(self, caplog):
        rows = [
            badge_row("good", {"type": "first_login"}),
            badge_row("bad", {"type": "pr_single", "exercises": ["bench"]}),
        ]

        definitions = build_definitions(rows)

        assert [d.id for d in definitions] == ["good"]
        assert "bad" in caplog.text

    def test_ordered_by_display_order_then_id(self):
        rows = [
            badge_row("b", {"type": "first_login"}, display_order=2),
            badge_row("c", {"type": "first_login"}, display_order=1),
            badge_row("a", {"type": "first_login"}, display_order=2),
        ]

        assert [d.id for d in build_definitions(rows)] == ["c", "a", "b"]

    def test_catalog_views(self):
        catalog = BadgeCatalog(InMemoryBadgeDefinitions([
            badge_row("auto", {"type": "first_login"}, display_order=1),
            badge_row("manual", {"type": "first_login"}, display_order=2, is_automatic=False),
            badge_row("retired", {"type": "first_login"}, display_order=3, is_active=False),
        ]))

        assert [d.id for d in catalog.all()] == ["auto", "manual", "retired"]
        assert [d.id for d in catalog.active()] == ["auto", "manual"]
        assert [d.id for d in catalog.evaluable()] == ["auto"]
        assert catalog.get("manual").is_automatic is False
        assert catalog.get("missing") is None
