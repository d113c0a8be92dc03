"""Repository interfaces consumed by the badge engine.

Every external data source is injected through one of these abstract base
classes so the evaluator, streak and goal logic run unchanged against SQLite
or in-memory fakes. Only ``UserBadgeRepository`` is written by the engine;
the others are read-only from its point of view.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set

from ...models.activity import (
    ALL_TIME,
    BodyweightMetric,
    Goal,
    PersonalRecord,
    Skill,
    UserSport,
)
from ...models.badges import BadgeDefinition, UserBadge


# =============================================================================
# Read collaborators
# =============================================================================


class PersonalRecordRepository(ABC):
    """Personal records queryable by member and exercise name."""

    @abstractmethod
    def list_records(
        self,
        member_id: str,
        record_type: str = ALL_TIME,
    ) -> List[PersonalRecord]:
        """
        List a member's personal records of one record type.

        Args:
            member_id: Circle member identifier
            record_type: Record type to include (default "all_time")

        Returns:
            Records with their exercise names resolved
        """
        pass

    def find_by_exercise_substrings(
        self,
        member_id: str,
        substrings: Iterable[str],
        record_type: str = ALL_TIME,
    ) -> List[PersonalRecord]:
        """
        List records whose exercise name contains any of the substrings.

        Matching is case-insensitive.
        """
        needles = [s.lower() for s in substrings if s]
        if not needles:
            return []
        return [
            record
            for record in self.list_records(member_id, record_type)
            if any(needle in record.exercise_name.lower() for needle in needles)
        ]


class SkillRepository(ABC):
    @abstractmethod
    def get_by_name(self, user_id: str, name: str) -> Optional[Skill]:
        """Get a user's skill by case-insensitive exact name."""
        pass


class SportRepository(ABC):
    @abstractmethod
    def get_by_name(self, user_id: str, sport: str) -> Optional[UserSport]:
        """Get a user's sport by case-insensitive exact name."""
        pass


class WorkoutSessionRepository(ABC):
    @abstractmethod
    def count_completed(self, member_id: str) -> int:
        """Count a member's completed workout sessions."""
        pass

    @abstractmethod
    def list_completion_times(self, member_id: str) -> List[datetime]:
        """Completion timestamps of a member's completed sessions, newest first."""
        pass


class BodyweightRepository(ABC):
    @abstractmethod
    def get_latest(self, user_id: str) -> Optional[BodyweightMetric]:
        """Most recent bodyweight metric by date, or None."""
        pass


class FollowRepository(ABC):
    @abstractmethod
    def count_followers(self, user_id: str) -> int:
        """Count edges where ``user_id`` is the one being followed."""
        pass


class CircleMembershipRepository(ABC):
    @abstractmethod
    def count_by_role(self, user_id: str, role: str) -> int:
        """Count circle memberships of a user holding a role."""
        pass


class GoalRepository(ABC):
    @abstractmethod
    def list_active(self, member_id: str) -> List[Goal]:
        """List a member's goals with status "active"."""
        pass


class EnrollmentRepository(ABC):
    """Challenge or program enrollments."""

    @abstractmethod
    def has_completed(self, user_id: str, target_id: Optional[str] = None) -> bool:
        """
        Check for a completed enrollment.

        Args:
            user_id: User identifier
            target_id: Restrict to one challenge/program; any when None

        Returns:
            True if at least one matching enrollment is completed
        """
        pass


class ChallengeEnrollmentRepository(EnrollmentRepository):
    pass


class ProgramEnrollmentRepository(EnrollmentRepository):
    pass


class BadgeDefinitionRepository(ABC):
    """Read access to the badge catalog."""

    @abstractmethod
    def list_definitions(self) -> List[BadgeDefinition]:
        """All valid badge definitions ordered by display order."""
        pass

    def get(self, badge_id: str) -> Optional[BadgeDefinition]:
        for definition in self.list_definitions():
            if definition.id == badge_id:
                return definition
        return None


# =============================================================================
# Write collaborator
# =============================================================================


class UserBadgeRepository(ABC):
    """Earned badges. (user_id, badge_id) is unique."""

    @abstractmethod
    def get(self, user_id: str, badge_id: str) -> Optional[UserBadge]:
        pass

    @abstractmethod
    def list_for_user(self, user_id: str) -> List[UserBadge]:
        """A user's earned badges ordered by display order, then earned time."""
        pass

    def earned_badge_ids(self, user_id: str) -> Set[str]:
        return {badge.badge_id for badge in self.list_for_user(user_id)}

    @abstractmethod
    def count_featured(self, user_id: str) -> int:
        pass

    @abstractmethod
    def insert(self, user_badge: UserBadge) -> UserBadge:
        """
        Insert a newly earned badge.

        Raises:
            BadgeAlreadyEarnedError: If (user_id, badge_id) already exists
        """
        pass

    @abstractmethod
    def set_featured(
        self,
        user_id: str,
        badge_id: str,
        is_featured: bool,
        limit: int,
    ) -> UserBadge:
        """
        Feature or unfeature an earned badge atomically.

        The featured count check and the update happen in one transaction.

        Raises:
            UserBadgeNotFoundError: If the user has not earned the badge
            FeaturedBadgeLimitError: If featuring would exceed ``limit``
        """
        pass

    @abstractmethod
    def set_display_order(self, user_id: str, badge_ids: Sequence[str]) -> int:
        """
        Set display_order to each badge's position in ``badge_ids``.

        Returns:
            Number of earned badges updated
        """
        pass


@dataclass
class ActivityRepositories:
    """Bundle of the read repositories the criteria evaluator needs."""

    personal_records: PersonalRecordRepository
    skills: SkillRepository
    sports: SportRepository
    workouts: WorkoutSessionRepository
    bodyweight: BodyweightRepository
    follows: FollowRepository
    circles: CircleMembershipRepository
    goals: GoalRepository
    challenges: ChallengeEnrollmentRepository
    programs: ProgramEnrollmentRepository
