"""Repository interfaces and SQLite implementations for the badge engine.

The engine depends only on the abstract interfaces in ``base``; the SQLite
classes back the API and CLI, and tests substitute in-memory fakes.
"""

from .base import (
    ActivityRepositories,
    BadgeDefinitionRepository,
    BodyweightRepository,
    ChallengeEnrollmentRepository,
    CircleMembershipRepository,
    FollowRepository,
    GoalRepository,
    PersonalRecordRepository,
    ProgramEnrollmentRepository,
    SkillRepository,
    SportRepository,
    UserBadgeRepository,
    WorkoutSessionRepository,
)
from .activity_repository import create_sqlite_repositories
from .badge_repository import SQLiteBadgeDefinitionRepository, SQLiteUserBadgeRepository

__all__ = [
    "ActivityRepositories",
    "BadgeDefinitionRepository",
    "BodyweightRepository",
    "ChallengeEnrollmentRepository",
    "CircleMembershipRepository",
    "FollowRepository",
    "GoalRepository",
    "PersonalRecordRepository",
    "ProgramEnrollmentRepository",
    "SkillRepository",
    "SportRepository",
    "UserBadgeRepository",
    "WorkoutSessionRepository",
    "create_sqlite_repositories",
    "SQLiteBadgeDefinitionRepository",
    "SQLiteUserBadgeRepository",
]
