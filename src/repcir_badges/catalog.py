"""
Badge catalog.

Holds the default badge definitions seeded into a fresh database and the
read-only catalog view the engine evaluates against.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from .models.badges import BadgeDefinition

if TYPE_CHECKING:
    from .db.repositories.base import BadgeDefinitionRepository


logger = logging.getLogger(__name__)


# =============================================================================
# Default Badge Definitions
# =============================================================================

DEFAULT_BADGES: List[Dict[str, Any]] = [
    # Strength
    {
        "id": "bench_135",
        "name": "Plate Pusher",
        "description": "Bench press 135 lbs",
        "category": "strength",
        "tier": "bronze",
        "icon": "🏋️",
        "criteria": {"type": "pr_single", "exercises": ["bench"], "singleValue": 135},
        "display_order": 1,
    },
    {
        "id": "bench_225",
        "name": "Two Plate Bench",
        "description": "Bench press 225 lbs",
        "category": "strength",
        "tier": "silver",
        "icon": "💪",
        "criteria": {"type": "pr_single", "exercises": ["bench"], "singleValue": 225},
        "display_order": 2,
    },
    {
        "id": "squat_315",
        "name": "Three Plate Squat",
        "description": "Squat 315 lbs",
        "category": "strength",
        "tier": "gold",
        "icon": "🦵",
        "criteria": {"type": "pr_single", "exercises": ["squat"], "singleValue": 315},
        "display_order": 3,
    },
    {
        "id": "deadlift_405",
        "name": "Four Plate Pull",
        "description": "Deadlift 405 lbs",
        "category": "strength",
        "tier": "gold",
        "icon": "🏗️",
        "criteria": {"type": "pr_single", "exercises": ["deadlift"], "singleValue": 405},
        "display_order": 4,
    },
    {
        "id": "club_1000",
        "name": "1000lb Club",
        "description": "Squat, bench and deadlift a combined 1000 lbs",
        "category": "strength",
        "tier": "gold",
        "icon": "🏆",
        "criteria": {
            "type": "pr_total",
            "exercises": ["squat", "bench", "deadlift"],
            "totalValue": 1000,
        },
        "display_order": 5,
    },
    {
        "id": "club_1200",
        "name": "1200lb Club",
        "description": "Squat, bench and deadlift a combined 1200 lbs",
        "category": "strength",
        "tier": "platinum",
        "icon": "👑",
        "criteria": {
            "type": "pr_total",
            "exercises": ["squat", "bench", "deadlift"],
            "totalValue": 1200,
        },
        "display_order": 6,
    },
    {
        "id": "squat_2x_bw",
        "name": "Double Bodyweight Squat",
        "description": "Squat twice your bodyweight",
        "category": "strength",
        "tier": "platinum",
        "icon": "⚖️",
        "criteria": {"type": "pr_bodyweight_ratio", "exercises": ["squat"], "bodyweightRatio": 2.0},
        "display_order": 7,
    },
    # Skills
    {
        "id": "skill_muscle_up",
        "name": "Muscle Up",
        "description": "Achieve a muscle up",
        "category": "skill",
        "tier": "silver",
        "icon": "🤸",
        "criteria": {"type": "skill_achieved", "skillName": "muscle_up", "skillStatus": "achieved"},
        "display_order": 10,
    },
    {
        "id": "skill_back_tuck",
        "name": "Back Tuck",
        "description": "Land a back tuck",
        "category": "skill",
        "tier": "silver",
        "icon": "🔄",
        "criteria": {"type": "skill_achieved", "skillName": "back_tuck"},
        "display_order": 11,
    },
    {
        "id": "skill_handstand_master",
        "name": "Handstand Master",
        "description": "Master the freestanding handstand",
        "category": "skill",
        "tier": "gold",
        "icon": "🙃",
        "criteria": {"type": "skill_achieved", "skillName": "handstand", "skillStatus": "mastered"},
        "display_order": 12,
    },
    # Sports
    {
        "id": "sport_hockey",
        "name": "Hockey Player",
        "description": "Add hockey to your sports",
        "category": "sport",
        "tier": "bronze",
        "icon": "🏒",
        "criteria": {"type": "sport", "sport": "hockey"},
        "display_order": 20,
    },
    {
        "id": "sport_running",
        "name": "Runner",
        "description": "Add running to your sports",
        "category": "sport",
        "tier": "bronze",
        "icon": "🏃",
        "criteria": {"type": "sport", "sport": "running"},
        "display_order": 21,
    },
    # Consistency
    {
        "id": "first_workout",
        "name": "First Rep",
        "description": "Complete your first workout",
        "category": "consistency",
        "tier": "bronze",
        "icon": "🎯",
        "criteria": {"type": "workout_count", "workoutCount": 1},
        "display_order": 30,
    },
    {
        "id": "workouts_50",
        "name": "Half Century",
        "description": "Complete 50 workouts",
        "category": "consistency",
        "tier": "silver",
        "icon": "5️⃣",
        "criteria": {"type": "workout_count", "workoutCount": 50},
        "display_order": 31,
    },
    {
        "id": "workouts_100",
        "name": "Centurion",
        "description": "Complete 100 workouts",
        "category": "consistency",
        "tier": "gold",
        "icon": "💯",
        "criteria": {"type": "workout_count", "workoutCount": 100},
        "display_order": 32,
    },
    {
        "id": "streak_7",
        "name": "Week Warrior",
        "description": "Work out 7 days in a row",
        "category": "consistency",
        "tier": "bronze",
        "icon": "🔥",
        "criteria": {"type": "streak", "streakDays": 7},
        "display_order": 33,
    },
    {
        "id": "streak_30",
        "name": "Monthly Machine",
        "description": "Work out 30 days in a row",
        "category": "consistency",
        "tier": "gold",
        "icon": "⚡",
        "criteria": {"type": "streak", "streakDays": 30},
        "display_order": 34,
    },
    # Challenges and programs
    {
        "id": "challenge_finisher",
        "name": "Challenge Finisher",
        "description": "Complete any challenge",
        "category": "challenge",
        "tier": "silver",
        "icon": "🏁",
        "criteria": {"type": "challenge_complete"},
        "display_order": 40,
    },
    {
        "id": "program_graduate",
        "name": "Program Graduate",
        "description": "Complete any training program",
        "category": "program",
        "tier": "silver",
        "icon": "🎓",
        "criteria": {"type": "program_complete"},
        "display_order": 41,
    },
    # Social
    {
        "id": "followers_10",
        "name": "Crew Leader",
        "description": "Gain 10 followers",
        "category": "social",
        "tier": "bronze",
        "icon": "👥",
        "criteria": {"type": "followers", "followerCount": 10},
        "display_order": 50,
    },
    {
        "id": "followers_100",
        "name": "Influencer",
        "description": "Gain 100 followers",
        "category": "social",
        "tier": "gold",
        "icon": "📣",
        "criteria": {"type": "followers", "followerCount": 100},
        "display_order": 51,
    },
    {
        "id": "circle_founder",
        "name": "Circle Founder",
        "description": "Create a circle",
        "category": "social",
        "tier": "bronze",
        "icon": "⭕",
        "criteria": {"type": "circles_created", "circleCount": 1},
        "display_order": 52,
    },
    # Track
    {
        "id": "mile_sub_7",
        "name": "Sub-7 Mile",
        "description": "Run a mile in under 7 minutes",
        "category": "track",
        "tier": "silver",
        "icon": "⏱️",
        "criteria": {"type": "track_time", "trackDistance": 1609.34, "trackTime": 420},
        "display_order": 60,
    },
    {
        "id": "mile_sub_5",
        "name": "Sub-5 Mile",
        "description": "Run a mile in under 5 minutes",
        "category": "track",
        "tier": "platinum",
        "icon": "🚀",
        "criteria": {"type": "track_time", "trackDistance": 1609.34, "trackTime": 300},
        "display_order": 61,
    },
    # Milestones (not evaluated yet)
    {
        "id": "onboarding_done",
        "name": "Welcome Aboard",
        "description": "Finish onboarding",
        "category": "milestone",
        "tier": "bronze",
        "icon": "👋",
        "criteria": {"type": "onboarding_complete"},
        "display_order": 70,
    },
]


def build_definitions(rows: Iterable[Dict[str, Any]]) -> List[BadgeDefinition]:
    """
    Validate raw catalog rows into badge definitions.

    Rows that fail validation (unknown criteria type, missing thresholds)
    are logged and skipped so one bad row never hides the rest of the
    catalog.

    Args:
        rows: Dicts in BadgeDefinition shape (snake_case or camelCase keys)

    Returns:
        Valid definitions ordered by display order, then id
    """
    definitions: List[BadgeDefinition] = []
    for row in rows:
        try:
            definitions.append(BadgeDefinition.model_validate(row))
        except PydanticValidationError as e:
            logger.warning(f"Skipping invalid badge definition {row.get('id')!r}: {e}")
    definitions.sort(key=lambda d: (d.display_order, d.id))
    return definitions


class BadgeCatalog:
    """Read-only view over the badge definitions repository."""

    def __init__(self, repository: "BadgeDefinitionRepository"):
        self._repository = repository

    def all(self) -> List[BadgeDefinition]:
        return self._repository.list_definitions()

    def active(self) -> List[BadgeDefinition]:
        """Active badges, including manual ones."""
        return [d for d in self.all() if d.is_active]

    def evaluable(self) -> List[BadgeDefinition]:
        """Badges the engine awards on its own (active and automatic)."""
        return [d for d in self.all() if d.is_active and d.is_automatic]

    def get(self, badge_id: str) -> Optional[BadgeDefinition]:
        return self._repository.get(badge_id)
