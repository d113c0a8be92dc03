"""Progress toward unearned badges."""

import logging
from datetime import datetime
from typing import List, Optional

from ..catalog import BadgeCatalog
from ..db.repositories.base import UserBadgeRepository
from ..models.badges import BadgeDefinition, BadgeProgress, UserBadge
from .criteria_evaluator import CriteriaEvaluator, Measurement


logger = logging.getLogger(__name__)


def progress_percent(measurement: Measurement) -> float:
    """
    Completion percentage for a measurement, clamped to [0, 100].

    Lower-is-better criteria report target/current, so a time twice the
    threshold shows 50%.
    """
    current = measurement.current
    target = measurement.target
    if current is None or target <= 0:
        return 0.0

    if measurement.lower_is_better:
        if current <= 0:
            return 0.0
        percent = target / current * 100
    else:
        percent = current / target * 100

    return round(min(100.0, max(0.0, percent)), 1)


class ProgressCalculator:
    """Computes per-badge progress using the evaluator's aggregation."""

    def __init__(
        self,
        catalog: BadgeCatalog,
        user_badges: UserBadgeRepository,
        evaluator: CriteriaEvaluator,
    ):
        self.catalog = catalog
        self.user_badges = user_badges
        self.evaluator = evaluator

    def get_user_badge_progress(self, user_id: str, member_id: Optional[str] = None) -> List[BadgeProgress]:
        """
        Progress for every active badge, ordered by display order.

        Args:
            user_id: User identifier
            member_id: Circle member identifier for PR and workout criteria

        Returns:
            One BadgeProgress per active badge
        """
        earned = {b.badge_id: b for b in self.user_badges.list_for_user(user_id)}
        return [
            self._progress_for(user_id, member_id, badge, earned.get(badge.id))
            for badge in self.catalog.active()
        ]

    def get_badge_progress(
        self,
        user_id: str,
        member_id: Optional[str],
        badge_id: str,
    ) -> Optional[BadgeProgress]:
        badge = self.catalog.get(badge_id)
        if badge is None:
            return None
        return self._progress_for(user_id, member_id, badge, self.user_badges.get(user_id, badge_id))

    def get_in_progress_badges(
        self,
        user_id: str,
        member_id: Optional[str] = None,
        max_items: int = 2,
    ) -> List[BadgeProgress]:
        """Unearned badges that are partly done, closest to completion first."""
        in_progress = [
            p for p in self.get_user_badge_progress(user_id, member_id)
            if not p.is_earned and 0 < p.progress_percent < 100
        ]
        in_progress.sort(key=lambda p: p.progress_percent, reverse=True)
        return in_progress[:max_items]

    def _progress_for(
        self,
        user_id: str,
        member_id: Optional[str],
        badge: BadgeDefinition,
        earned: Optional[UserBadge],
    ) -> BadgeProgress:
        current = 0.0
        target = 0.0
        percent = 0.0
        earned_at: Optional[datetime] = earned.earned_at if earned else None

        try:
            measurement = self.evaluator.measure(user_id, member_id, badge)
            current = measurement.current or 0.0
            target = measurement.target
            percent = progress_percent(measurement)
        except Exception as e:
            logger.warning(f"Progress calculation failed for badge {badge.id}: {e}")

        if earned:
            percent = 100.0

        return BadgeProgress(
            badge_id=badge.id,
            badge_name=badge.name,
            category=badge.category,
            tier=badge.tier,
            icon=badge.icon,
            description=badge.description,
            current_value=current,
            target_value=target,
            progress_percent=percent,
            is_earned=earned is not None,
            earned_at=earned_at,
        )
