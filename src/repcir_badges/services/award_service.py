"""
Badge awarding.

Handles:
- The idempotent earn transition (one row per user and badge)
- Featured-slot management and display ordering
- Evaluating the catalog for a user after an activity event
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..catalog import BadgeCatalog
from ..config import Settings, get_settings
from ..db.repositories.base import GoalRepository, UserBadgeRepository
from ..exceptions import BadgeAlreadyEarnedError, BadgeNotFoundError, ValidationError
from ..models.badges import (
    AwardedBadge,
    AwardResult,
    BadgeDefinition,
    BadgeWithStatus,
    EarnedBadge,
    EvaluationContext,
    EvaluationResult,
    EvaluationTrigger,
    UserBadge,
)
from .criteria_evaluator import CriteriaEvaluator
from .goal_matcher import match_goals


logger = logging.getLogger(__name__)


class AwardService:
    """
    Service for awarding badges and managing how earned badges are shown.

    The engine keeps no state between calls; every evaluation rescans the
    user's history through the injected repositories.
    """

    def __init__(
        self,
        catalog: BadgeCatalog,
        user_badges: UserBadgeRepository,
        evaluator: CriteriaEvaluator,
        goals: GoalRepository,
        settings: Optional[Settings] = None,
    ):
        self.catalog = catalog
        self.user_badges = user_badges
        self.evaluator = evaluator
        self.goals = goals
        self.settings = settings or get_settings()

    # =========================================================================
    # Earn transition
    # =========================================================================

    def award(
        self,
        user_id: str,
        badge_id: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AwardResult:
        """
        Award a badge to a user.

        The first few badges a user earns are featured automatically. A
        concurrent award of the same badge loses to the unique constraint
        and reports ``already_earned``.

        Args:
            user_id: User identifier
            badge_id: Badge to award
            metadata: Evaluation details stored with the badge

        Returns:
            AwardResult with success or already_earned set

        Raises:
            BadgeNotFoundError: If the badge is not in the catalog
        """
        if self.catalog.get(badge_id) is None:
            raise BadgeNotFoundError(badge_id)

        if self.user_badges.get(user_id, badge_id) is not None:
            return AwardResult(success=False, already_earned=True)

        # Auto-featuring never exceeds the featured cap. The count and the
        # insert are not atomic, so concurrent awards may each see a free slot
        auto_feature_limit = min(self.settings.auto_feature_limit, self.settings.featured_badge_limit)
        featured_count = self.user_badges.count_featured(user_id)
        earned_count = len(self.user_badges.list_for_user(user_id))

        user_badge = UserBadge(
            user_id=user_id,
            badge_id=badge_id,
            earned_at=datetime.now(timezone.utc),
            metadata=metadata or {},
            is_featured=featured_count < auto_feature_limit,
            display_order=earned_count,
        )

        try:
            self.user_badges.insert(user_badge)
        except BadgeAlreadyEarnedError:
            return AwardResult(success=False, already_earned=True)

        logger.info(f"Badge awarded: {badge_id} to user {user_id}")
        return AwardResult(success=True)

    # =========================================================================
    # Display management
    # =========================================================================

    def toggle_featured(self, user_id: str, badge_id: str, is_featured: bool) -> EarnedBadge:
        """
        Feature or unfeature an earned badge.

        Raises:
            BadgeNotFoundError: If the badge is no longer in the catalog
            UserBadgeNotFoundError: If the user has not earned the badge
            FeaturedBadgeLimitError: If the featured limit is already reached
        """
        definition = self.catalog.get(badge_id)
        if definition is None:
            raise BadgeNotFoundError(badge_id)

        user_badge = self.user_badges.set_featured(
            user_id,
            badge_id,
            is_featured,
            limit=self.settings.featured_badge_limit,
        )
        return self._to_earned(user_badge, definition)

    def reorder_badges(self, user_id: str, badge_ids: Sequence[str]) -> List[EarnedBadge]:
        """Set each listed badge's display order to its position in the list."""
        if len(set(badge_ids)) != len(badge_ids):
            raise ValidationError("Badge ids must not repeat", field="badgeIds")

        updated = self.user_badges.set_display_order(user_id, badge_ids)
        logger.debug(f"Reordered {updated} badges for user {user_id}")
        return self.get_user_badges(user_id)

    def get_user_badges(self, user_id: str) -> List[EarnedBadge]:
        """Earned badges ordered by display order, then earned time."""
        definitions = {d.id: d for d in self.catalog.all()}
        earned: List[EarnedBadge] = []
        for user_badge in self.user_badges.list_for_user(user_id):
            definition = definitions.get(user_badge.badge_id)
            if definition is None:
                logger.warning(f"Earned badge {user_badge.badge_id} has no definition")
                continue
            earned.append(self._to_earned(user_badge, definition))
        return earned

    def get_featured_badges(self, user_id: str) -> List[EarnedBadge]:
        featured = [b for b in self.get_user_badges(user_id) if b.is_featured]
        return featured[: self.settings.featured_badge_limit]

    def get_badges_with_status(self, user_id: str) -> List[BadgeWithStatus]:
        """Active catalog with the user's earned status."""
        earned = {b.badge_id: b for b in self.user_badges.list_for_user(user_id)}
        return [
            BadgeWithStatus(
                badge=definition,
                earned=definition.id in earned,
                earned_at=earned[definition.id].earned_at if definition.id in earned else None,
            )
            for definition in self.catalog.active()
        ]

    @staticmethod
    def _to_earned(user_badge: UserBadge, definition: BadgeDefinition) -> EarnedBadge:
        return EarnedBadge(
            badge=definition,
            earned_at=user_badge.earned_at,
            metadata=user_badge.metadata,
            is_featured=user_badge.is_featured,
            display_order=user_badge.display_order,
        )

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate_and_award(self, context: EvaluationContext) -> EvaluationResult:
        """
        Evaluate every unearned automatic badge and award the eligible ones.

        A failing criterion skips only its badge. Any other failure is logged
        and yields an empty result; this method never raises.

        Args:
            context: Who to evaluate and what triggered it

        Returns:
            Newly awarded badges and, for PR triggers, matched goals
        """
        try:
            return self._evaluate(context)
        except Exception as e:
            logger.error(f"Badge evaluation failed for user {context.user_id}: {e}", exc_info=True)
            return EvaluationResult()

    def _evaluate(self, context: EvaluationContext) -> EvaluationResult:
        result = EvaluationResult()
        earned_ids = self.user_badges.earned_badge_ids(context.user_id)
        candidates = [b for b in self.catalog.evaluable() if b.id not in earned_ids]

        for badge in candidates:
            try:
                check = self.evaluator.check(context.user_id, context.member_id, badge)
            except Exception as e:
                logger.warning(f"Criteria check failed for badge {badge.id}: {e}")
                continue
            if not check.eligible:
                continue

            outcome = self.award(context.user_id, badge.id, check.metadata)
            if outcome.success:
                result.awarded.append(AwardedBadge(
                    badge_id=badge.id,
                    badge_name=badge.name,
                    badge_icon=badge.icon,
                    badge_tier=badge.tier,
                    metadata=check.metadata,
                ))

        if (
            context.trigger == EvaluationTrigger.PR
            and context.member_id
            and context.exercise_name
        ):
            result.goal_matches = match_goals(
                context.exercise_name,
                context.exercise_value or 0,
                context.exercise_unit,
                self.goals.list_active(context.member_id),
            )

        if result.awarded:
            logger.info(
                f"Awarded {len(result.awarded)} badge(s) to user {context.user_id} "
                f"on {context.trigger.value} trigger"
            )
        return result
