"""Dependency injection for API routes."""

from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException

from ..catalog import BadgeCatalog
from ..config import get_settings
from ..db.repositories import (
    ActivityRepositories,
    SQLiteBadgeDefinitionRepository,
    SQLiteUserBadgeRepository,
    create_sqlite_repositories,
)
from ..services.award_service import AwardService
from ..services.criteria_evaluator import CriteriaEvaluator
from ..services.evaluation_worker import BadgeEvaluationWorker
from ..services.progress import ProgressCalculator
from ..services.streaks import WorkoutStreakService


@lru_cache
def get_badge_definition_repository() -> SQLiteBadgeDefinitionRepository:
    """Get the badge catalog repository."""
    return SQLiteBadgeDefinitionRepository(get_settings().badges_db_path)


@lru_cache
def get_user_badge_repository() -> SQLiteUserBadgeRepository:
    """Get the earned badges repository."""
    return SQLiteUserBadgeRepository(get_settings().badges_db_path)


@lru_cache
def get_activity_repositories() -> ActivityRepositories:
    """Get the read repositories for activity data."""
    return create_sqlite_repositories(get_settings().badges_db_path)


@lru_cache
def get_badge_catalog() -> BadgeCatalog:
    return BadgeCatalog(get_badge_definition_repository())


@lru_cache
def get_criteria_evaluator() -> CriteriaEvaluator:
    return CriteriaEvaluator(
        get_activity_repositories(),
        timezone=get_settings().default_timezone,
    )


@lru_cache
def get_award_service() -> AwardService:
    """Get the award service instance."""
    return AwardService(
        catalog=get_badge_catalog(),
        user_badges=get_user_badge_repository(),
        evaluator=get_criteria_evaluator(),
        goals=get_activity_repositories().goals,
        settings=get_settings(),
    )


@lru_cache
def get_progress_calculator() -> ProgressCalculator:
    return ProgressCalculator(
        catalog=get_badge_catalog(),
        user_badges=get_user_badge_repository(),
        evaluator=get_criteria_evaluator(),
    )


@lru_cache
def get_streak_service() -> WorkoutStreakService:
    return WorkoutStreakService(
        get_activity_repositories().workouts,
        timezone=get_settings().default_timezone,
    )


@lru_cache
def get_evaluation_worker() -> BadgeEvaluationWorker:
    """Get the background evaluation worker (started by the app lifespan)."""
    return BadgeEvaluationWorker(
        get_award_service(),
        max_queue_size=get_settings().evaluation_queue_size,
    )


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Caller identity. Authentication happens upstream of this service."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


def get_current_member_id(x_member_id: Optional[str] = Header(None)) -> Optional[str]:
    """Circle member identity, needed for PR and workout based badges."""
    return x_member_id or None
