"""Services for badge evaluation, awarding and progress."""

from .award_service import AwardService
from .criteria_evaluator import CriteriaEvaluator, Measurement
from .evaluation_worker import BadgeEvaluationWorker
from .goal_matcher import match_goals
from .progress import ProgressCalculator, progress_percent
from .streaks import WorkoutStreakService, current_streak, longest_streak

__all__ = [
    # Evaluation
    "CriteriaEvaluator",
    "Measurement",
    "match_goals",
    # Awarding
    "AwardService",
    "BadgeEvaluationWorker",
    # Display
    "ProgressCalculator",
    "progress_percent",
    "WorkoutStreakService",
    "current_streak",
    "longest_streak",
]
