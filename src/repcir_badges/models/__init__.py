"""Data models for the badge engine."""

from .activity import (
    BodyweightMetric,
    Enrollment,
    Goal,
    PersonalRecord,
    Skill,
    UserSport,
    WorkoutSession,
)
from .badges import (
    CRITERIA_TYPES,
    AwardedBadge,
    AwardResult,
    BadgeCategory,
    BadgeDefinition,
    BadgeProgress,
    BadgeTier,
    BadgeWithStatus,
    ChallengeCompleteCriteria,
    CirclesCreatedCriteria,
    Criteria,
    CriteriaCheckResult,
    EarnedBadge,
    EvaluationContext,
    EvaluationResult,
    EvaluationTrigger,
    FirstLoginCriteria,
    FollowersCriteria,
    GoalMatch,
    GoalMatchStatus,
    OnboardingCompleteCriteria,
    PRBodyweightRatioCriteria,
    PRSingleCriteria,
    PRTotalCriteria,
    ProfileCompleteCriteria,
    ProgramCompleteCriteria,
    SkillAchievedCriteria,
    SkillStatus,
    SportCriteria,
    StreakCriteria,
    StreakInfo,
    TrackTimeCriteria,
    UserBadge,
    WorkoutCountCriteria,
    criteria_to_dict,
    parse_criteria,
    to_camel,
)

__all__ = [
    # Activity
    "BodyweightMetric",
    "Enrollment",
    "Goal",
    "PersonalRecord",
    "Skill",
    "UserSport",
    "WorkoutSession",
    # Badges
    "CRITERIA_TYPES",
    "AwardedBadge",
    "AwardResult",
    "BadgeCategory",
    "BadgeDefinition",
    "BadgeProgress",
    "BadgeTier",
    "BadgeWithStatus",
    "ChallengeCompleteCriteria",
    "CirclesCreatedCriteria",
    "Criteria",
    "CriteriaCheckResult",
    "EarnedBadge",
    "EvaluationContext",
    "EvaluationResult",
    "EvaluationTrigger",
    "FirstLoginCriteria",
    "FollowersCriteria",
    "GoalMatch",
    "GoalMatchStatus",
    "OnboardingCompleteCriteria",
    "PRBodyweightRatioCriteria",
    "PRSingleCriteria",
    "PRTotalCriteria",
    "ProfileCompleteCriteria",
    "ProgramCompleteCriteria",
    "SkillAchievedCriteria",
    "SkillStatus",
    "SportCriteria",
    "StreakCriteria",
    "StreakInfo",
    "TrackTimeCriteria",
    "UserBadge",
    "WorkoutCountCriteria",
    "criteria_to_dict",
    "parse_criteria",
    "to_camel",
]
