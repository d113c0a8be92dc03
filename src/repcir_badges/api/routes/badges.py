"""
Badge API routes.

Provides endpoints for:
- The badge catalog with the caller's earned status
- Earned and featured badges, featuring and ordering
- Progress toward unearned badges and workout streaks
- Evaluating badges now, or queueing an evaluation event
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ..deps import (
    get_award_service,
    get_current_member_id,
    get_current_user_id,
    get_evaluation_worker,
    get_progress_calculator,
    get_streak_service,
)
from ...exceptions import BadgeNotFoundError, ValidationError
from ...models.badges import (
    BadgeProgress,
    BadgeWithStatus,
    EarnedBadge,
    EvaluationContext,
    EvaluationResult,
    EvaluationTrigger,
    StreakInfo,
    to_camel,
)
from ...services.award_service import AwardService
from ...services.evaluation_worker import BadgeEvaluationWorker
from ...services.progress import ProgressCalculator
from ...services.streaks import WorkoutStreakService


router = APIRouter()


# ============================================================================
# Request models
# ============================================================================

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ToggleFeaturedRequest(_CamelModel):
    """Feature or unfeature an earned badge."""
    is_featured: bool


class ReorderRequest(_CamelModel):
    """Earned badge ids in their new display order."""
    badge_ids: List[str] = Field(..., description="Badge ids, first shown first")


class EvaluateRequest(_CamelModel):
    """Activity event that should trigger a badge evaluation."""
    trigger: EvaluationTrigger = EvaluationTrigger.WORKOUT
    member_id: Optional[str] = None
    exercise_name: Optional[str] = None
    exercise_value: Optional[float] = None
    exercise_unit: Optional[str] = None
    skill_name: Optional[str] = None
    sport: Optional[str] = None

    def to_context(self, user_id: str, member_id: Optional[str]) -> EvaluationContext:
        return EvaluationContext(
            user_id=user_id,
            member_id=self.member_id or member_id,
            trigger=self.trigger,
            exercise_name=self.exercise_name,
            exercise_value=self.exercise_value,
            exercise_unit=self.exercise_unit,
            skill_name=self.skill_name,
            sport=self.sport,
        )


class QueuedResponse(BaseModel):
    queued: bool


# ============================================================================
# Catalog and earned badges
# ============================================================================

@router.get("/", response_model=List[BadgeWithStatus])
async def list_badges(
    user_id: str = Depends(get_current_user_id),
    service: AwardService = Depends(get_award_service),
):
    """List active badges with the caller's earned status."""
    return service.get_badges_with_status(user_id)


@router.get("/me", response_model=List[EarnedBadge])
async def list_my_badges(
    user_id: str = Depends(get_current_user_id),
    service: AwardService = Depends(get_award_service),
):
    """List the caller's earned badges in display order."""
    return service.get_user_badges(user_id)


@router.get("/featured", response_model=List[EarnedBadge])
async def list_featured_badges(
    user_id: str = Depends(get_current_user_id),
    service: AwardService = Depends(get_award_service),
):
    return service.get_featured_badges(user_id)


@router.patch("/{badge_id}/featured", response_model=EarnedBadge)
async def toggle_featured(
    badge_id: str,
    request: ToggleFeaturedRequest,
    user_id: str = Depends(get_current_user_id),
    service: AwardService = Depends(get_award_service),
):
    """
    Feature or unfeature an earned badge.

    Returns 409 when the featured limit is already reached and 404 when the
    caller has not earned the badge.
    """
    return service.toggle_featured(user_id, badge_id, request.is_featured)


@router.put("/order", response_model=List[EarnedBadge])
async def reorder_badges(
    request: ReorderRequest,
    user_id: str = Depends(get_current_user_id),
    service: AwardService = Depends(get_award_service),
):
    return service.reorder_badges(user_id, request.badge_ids)


# ============================================================================
# Progress and streaks
# ============================================================================

@router.get("/progress", response_model=List[BadgeProgress])
async def get_progress(
    in_progress_only: bool = False,
    limit: int = 2,
    user_id: str = Depends(get_current_user_id),
    member_id: Optional[str] = Depends(get_current_member_id),
    calculator: ProgressCalculator = Depends(get_progress_calculator),
):
    """
    Progress toward every active badge.

    With ``in_progress_only`` only partly completed badges are returned,
    closest first, at most ``limit`` of them.
    """
    if in_progress_only:
        return calculator.get_in_progress_badges(user_id, member_id, max_items=limit)
    return calculator.get_user_badge_progress(user_id, member_id)


@router.get("/progress/{badge_id}", response_model=BadgeProgress)
async def get_badge_progress(
    badge_id: str,
    user_id: str = Depends(get_current_user_id),
    member_id: Optional[str] = Depends(get_current_member_id),
    calculator: ProgressCalculator = Depends(get_progress_calculator),
):
    progress = calculator.get_badge_progress(user_id, member_id, badge_id)
    if progress is None:
        raise BadgeNotFoundError(badge_id)
    return progress


@router.get("/streak", response_model=StreakInfo)
async def get_streak(
    timezone: Optional[str] = None,
    member_id: Optional[str] = Depends(get_current_member_id),
    service: WorkoutStreakService = Depends(get_streak_service),
):
    """Current and longest workout streak for the caller's membership."""
    if not member_id:
        raise ValidationError("X-Member-Id header is required", field="memberId")
    return service.get_streak_info(member_id, timezone=timezone)


# ============================================================================
# Evaluation
# ============================================================================

@router.post("/check", response_model=EvaluationResult)
async def check_badges(
    request: EvaluateRequest,
    user_id: str = Depends(get_current_user_id),
    member_id: Optional[str] = Depends(get_current_member_id),
    service: AwardService = Depends(get_award_service),
):
    """Evaluate and award badges now, returning what was newly earned."""
    return service.evaluate_and_award(request.to_context(user_id, member_id))


@router.post("/events", response_model=QueuedResponse, status_code=202)
async def publish_evaluation_event(
    request: EvaluateRequest,
    user_id: str = Depends(get_current_user_id),
    member_id: Optional[str] = Depends(get_current_member_id),
    worker: BadgeEvaluationWorker = Depends(get_evaluation_worker),
):
    """Queue a badge evaluation to run in the background."""
    return QueuedResponse(queued=worker.publish(request.to_context(user_id, member_id)))
