"""Badge data models: definitions, criteria, earned badges and engine results."""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


class BadgeCategory(str, Enum):
    """Categories for badges."""
    STRENGTH = "strength"
    SKILL = "skill"
    SPORT = "sport"
    CONSISTENCY = "consistency"
    CHALLENGE = "challenge"
    PROGRAM = "program"
    SOCIAL = "social"
    TRACK = "track"
    MILESTONE = "milestone"


class BadgeTier(str, Enum):
    """Tier levels for badges."""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class SkillStatus(str, Enum):
    """Skill statuses that can satisfy a skill badge."""
    ACHIEVED = "achieved"
    MASTERED = "mastered"


class EvaluationTrigger(str, Enum):
    """Events that cause a badge evaluation."""
    PR = "pr"
    SKILL = "skill"
    SPORT = "sport"
    WORKOUT = "workout"
    SOCIAL = "social"


class GoalMatchStatus(str, Enum):
    """How a personal record relates to a goal target."""
    MET = "met"
    EXCEEDED = "exceeded"


# =============================================================================
# Criteria (closed tagged union keyed by ``type``)
# =============================================================================


class _CriteriaModel(BaseModel):
    """Shared config for all criteria variants."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class PRTotalCriteria(_CriteriaModel):
    """Combined PR total across canonical lifts (e.g. 1000lb club)."""

    type: Literal["pr_total"] = "pr_total"
    exercises: List[str] = Field(..., min_length=1, description="Exercise names to group")
    total_value: float = Field(..., gt=0, description="Required combined total")


class PRSingleCriteria(_CriteriaModel):
    """Best single-exercise PR (e.g. 225 bench)."""

    type: Literal["pr_single"] = "pr_single"
    exercises: List[str] = Field(..., min_length=1, description="Exercise name substrings")
    single_value: float = Field(..., gt=0, description="Required PR value")


class PRBodyweightRatioCriteria(_CriteriaModel):
    """PR as a multiple of the user's latest bodyweight."""

    type: Literal["pr_bodyweight_ratio"] = "pr_bodyweight_ratio"
    exercises: List[str] = Field(..., min_length=1, description="Exercise name substrings")
    bodyweight_ratio: float = Field(..., gt=0, description="e.g. 2.0 for 2x bodyweight")


class SkillAchievedCriteria(_CriteriaModel):
    type: Literal["skill_achieved"] = "skill_achieved"
    skill_name: str = Field(..., min_length=1)
    skill_status: SkillStatus = Field(default=SkillStatus.ACHIEVED)


class SportCriteria(_CriteriaModel):
    type: Literal["sport"] = "sport"
    sport: str = Field(..., min_length=1)


class StreakCriteria(_CriteriaModel):
    type: Literal["streak"] = "streak"
    streak_days: int = Field(..., gt=0)


class WorkoutCountCriteria(_CriteriaModel):
    type: Literal["workout_count"] = "workout_count"
    workout_count: int = Field(..., gt=0)


class ChallengeCompleteCriteria(_CriteriaModel):
    type: Literal["challenge_complete"] = "challenge_complete"
    challenge_id: Optional[str] = Field(None, description="Restrict to one challenge")


class ProgramCompleteCriteria(_CriteriaModel):
    type: Literal["program_complete"] = "program_complete"
    program_id: Optional[str] = Field(None, description="Restrict to one program")


class FollowersCriteria(_CriteriaModel):
    type: Literal["followers"] = "followers"
    follower_count: int = Field(..., gt=0)


class CirclesCreatedCriteria(_CriteriaModel):
    type: Literal["circles_created"] = "circles_created"
    circle_count: int = Field(..., gt=0)


class TrackTimeCriteria(_CriteriaModel):
    """Best running time at or under a threshold (lower is better)."""

    type: Literal["track_time"] = "track_time"
    track_time: float = Field(..., gt=0, description="Threshold in seconds")
    track_distance: Optional[float] = Field(None, description="Distance in meters, display only")


class FirstLoginCriteria(_CriteriaModel):
    type: Literal["first_login"] = "first_login"


class ProfileCompleteCriteria(_CriteriaModel):
    type: Literal["profile_complete"] = "profile_complete"
    profile_percent: Optional[int] = Field(None, ge=0, le=100)


class OnboardingCompleteCriteria(_CriteriaModel):
    type: Literal["onboarding_complete"] = "onboarding_complete"


Criteria = Annotated[
    Union[
        PRTotalCriteria,
        PRSingleCriteria,
        PRBodyweightRatioCriteria,
        SkillAchievedCriteria,
        SportCriteria,
        StreakCriteria,
        WorkoutCountCriteria,
        ChallengeCompleteCriteria,
        ProgramCompleteCriteria,
        FollowersCriteria,
        CirclesCreatedCriteria,
        TrackTimeCriteria,
        FirstLoginCriteria,
        ProfileCompleteCriteria,
        OnboardingCompleteCriteria,
    ],
    Field(discriminator="type"),
]

CRITERIA_TYPES: Tuple[type, ...] = get_args(get_args(Criteria)[0])

_criteria_adapter: TypeAdapter = TypeAdapter(Criteria)


def parse_criteria(data: Dict[str, Any]) -> Criteria:
    """Validate a stored criteria document into its variant model.

    Raises:
        pydantic.ValidationError: If ``type`` is unknown or fields are invalid.
    """
    return _criteria_adapter.validate_python(data)


def criteria_to_dict(criteria: Criteria) -> Dict[str, Any]:
    """Serialize criteria to the stored camelCase JSON shape."""
    return criteria.model_dump(by_alias=True, exclude_none=True, mode="json")


# =============================================================================
# Definitions and earned badges
# =============================================================================


class BadgeDefinition(BaseModel):
    """Badge catalog entry. Immutable once loaded."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(..., description="Unique badge identifier")
    name: str = Field(..., description="Display name")
    description: Optional[str] = Field(None, description="How to earn the badge")
    icon: Optional[str] = Field(None, description="Icon name or emoji")
    image_url: Optional[str] = Field(None, description="Optional badge image")
    category: BadgeCategory = Field(..., description="Badge category")
    tier: BadgeTier = Field(default=BadgeTier.BRONZE, description="Badge tier")
    criteria: Criteria = Field(..., description="Machine-checkable earning rule")
    criteria_description: Optional[str] = Field(None, description="Human-readable rule")
    is_active: bool = Field(default=True)
    is_automatic: bool = Field(default=True, description="Evaluated by the engine")
    display_order: int = Field(default=0)


class UserBadge(BaseModel):
    """A badge earned by a user. Identity is (user_id, badge_id)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    user_id: str
    badge_id: str
    earned_at: datetime
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_featured: bool = False
    display_order: int = 0


class EarnedBadge(BaseModel):
    """An earned badge joined with its definition, for display."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    badge: BadgeDefinition
    earned_at: datetime
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_featured: bool = False
    display_order: int = 0


class BadgeWithStatus(BaseModel):
    """Catalog entry with the caller's earned status."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    badge: BadgeDefinition
    earned: bool = False
    earned_at: Optional[datetime] = None


# =============================================================================
# Engine inputs and outputs
# =============================================================================


class EvaluationContext(BaseModel):
    """What happened, and for whom, when an evaluation is triggered."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    user_id: str = Field(..., min_length=1)
    member_id: Optional[str] = Field(None, description="Required for per-member criteria")
    trigger: EvaluationTrigger
    exercise_name: Optional[str] = None
    exercise_value: Optional[float] = None
    exercise_unit: Optional[str] = None
    skill_name: Optional[str] = None
    sport: Optional[str] = None


class CriteriaCheckResult(BaseModel):
    """Eligibility of one badge for one user."""

    eligible: bool = False
    metadata: Optional[Dict[str, Any]] = None


class AwardResult(BaseModel):
    """Outcome of an award attempt."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    success: bool
    already_earned: Optional[bool] = None


class AwardedBadge(BaseModel):
    """A badge newly awarded during an evaluation."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    badge_id: str
    badge_name: str
    badge_icon: Optional[str] = None
    badge_tier: BadgeTier
    metadata: Optional[Dict[str, Any]] = None


class GoalMatch(BaseModel):
    """A new PR that meets or exceeds an active goal."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    goal_id: str
    goal_title: str
    goal_category: Optional[str] = None
    target_value: float
    target_unit: str
    current_pr_value: float
    exceeded_by: float
    status: GoalMatchStatus


class EvaluationResult(BaseModel):
    """Everything an evaluation produced."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    awarded: List[AwardedBadge] = Field(default_factory=list)
    goal_matches: List[GoalMatch] = Field(default_factory=list)


class BadgeProgress(BaseModel):
    """Progress toward a single badge."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    badge_id: str
    badge_name: str
    category: BadgeCategory
    tier: BadgeTier
    icon: Optional[str] = None
    description: Optional[str] = None
    current_value: float = 0
    target_value: float = 0
    progress_percent: float = Field(default=0, ge=0, le=100)
    is_earned: bool = False
    earned_at: Optional[datetime] = None


class StreakInfo(BaseModel):
    """Workout streak summary for display."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    current: int = Field(default=0, description="Current streak in days")
    longest: int = Field(default=0, description="Longest streak achieved")
    last_activity_date: Optional[date] = Field(None, description="Most recent workout day")
