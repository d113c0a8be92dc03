"""Read-only activity entities owned by other parts of the application.

The badge engine consumes these through repository interfaces and never
writes them.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


COMPLETED = "completed"
ACTIVE = "active"
ALL_TIME = "all_time"
OWNER = "owner"


@dataclass(frozen=True)
class PersonalRecord:
    """Best recorded value for one exercise."""

    member_id: str
    exercise_id: str
    exercise_name: str
    value: float
    unit: str = "lbs"
    record_type: str = ALL_TIME


@dataclass(frozen=True)
class Skill:
    """A skill on a user's profile (e.g. back_tuck, muscle_up)."""

    user_id: str
    name: str
    current_status: str


@dataclass(frozen=True)
class UserSport:
    """A sport the user plays."""

    user_id: str
    sport: str
    level: Optional[str] = None


@dataclass(frozen=True)
class WorkoutSession:
    """A logged workout session."""

    id: str
    member_id: str
    status: str
    date: datetime
    end_time: Optional[datetime] = None

    @property
    def completed_at(self) -> datetime:
        """When the session finished, falling back to its scheduled date."""
        return self.end_time or self.date


@dataclass(frozen=True)
class Goal:
    """A member goal, optionally with a numeric target."""

    id: str
    member_id: str
    title: str
    category: Optional[str] = None
    target_value: Optional[float] = None
    target_unit: Optional[str] = None
    status: str = ACTIVE


@dataclass(frozen=True)
class BodyweightMetric:
    """A dated bodyweight measurement."""

    user_id: str
    date: date
    weight: Optional[float]


@dataclass(frozen=True)
class Enrollment:
    """A user's participation in a challenge or program."""

    id: str
    user_id: str
    target_id: str  # challenge_id or program_id
    status: str
