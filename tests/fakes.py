"""In-memory repository implementations for tests."""

import threading
from datetime import datetime
from typing import Dict, List, Sequence, Tuple

from repcir_badges.catalog import build_definitions
from repcir_badges.db.repositories.base import (
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
from repcir_badges.exceptions import (
    BadgeAlreadyEarnedError,
    FeaturedBadgeLimitError,
    UserBadgeNotFoundError,
)
from repcir_badges.models.activity import (
    ACTIVE,
    ALL_TIME,
    COMPLETED,
    BodyweightMetric,
    Enrollment,
    Goal,
    PersonalRecord,
    Skill,
    UserSport,
    WorkoutSession,
)
from repcir_badges.models.badges import BadgeDefinition, UserBadge


USER = "user-1"
MEMBER = "member-1"


class InMemoryPersonalRecords(PersonalRecordRepository):
    def __init__(self):
        self.records: List[PersonalRecord] = []

    def add(self, member_id, exercise_name, value, unit="lbs", record_type=ALL_TIME):
        self.records.append(PersonalRecord(
            member_id=member_id,
            exercise_id=f"ex-{len(self.records)}",
            exercise_name=exercise_name,
            value=value,
            unit=unit,
            record_type=record_type,
        ))

    def list_records(self, member_id, record_type=ALL_TIME):
        return [r for r in self.records if r.member_id == member_id and r.record_type == record_type]


class InMemorySkills(SkillRepository):
    def __init__(self):
        self.skills: List[Skill] = []

    def add(self, user_id, name, status):
        self.skills.append(Skill(user_id=user_id, name=name, current_status=status))

    def get_by_name(self, user_id, name):
        for skill in self.skills:
            if skill.user_id == user_id and skill.name.lower() == name.lower():
                return skill
        return None


class InMemorySports(SportRepository):
    def __init__(self):
        self.sports: List[UserSport] = []

    def add(self, user_id, sport, level=None):
        self.sports.append(UserSport(user_id=user_id, sport=sport, level=level))

    def get_by_name(self, user_id, sport):
        for item in self.sports:
            if item.user_id == user_id and item.sport.lower() == sport.lower():
                return item
        return None


class InMemoryWorkouts(WorkoutSessionRepository):
    def __init__(self):
        self.sessions: List[WorkoutSession] = []

    def add(self, member_id, when: datetime, status=COMPLETED, end_time=None):
        self.sessions.append(WorkoutSession(
            id=f"w-{len(self.sessions)}",
            member_id=member_id,
            status=status,
            date=when,
            end_time=end_time,
        ))

    def _completed(self, member_id):
        return [s for s in self.sessions if s.member_id == member_id and s.status == COMPLETED]

    def count_completed(self, member_id):
        return len(self._completed(member_id))

    def list_completion_times(self, member_id):
        return sorted((s.completed_at for s in self._completed(member_id)), reverse=True)


class InMemoryBodyweight(BodyweightRepository):
    def __init__(self):
        self.metrics: List[BodyweightMetric] = []

    def add(self, user_id, on, weight):
        self.metrics.append(BodyweightMetric(user_id=user_id, date=on, weight=weight))

    def get_latest(self, user_id):
        mine = [m for m in self.metrics if m.user_id == user_id]
        return max(mine, key=lambda m: m.date, default=None)


class InMemoryFollows(FollowRepository):
    def __init__(self):
        self.edges: List[Tuple[str, str]] = []

    def follow(self, follower_id, following_id):
        self.edges.append((follower_id, following_id))

    def count_followers(self, user_id):
        return sum(1 for _, following in self.edges if following == user_id)


class InMemoryCircles(CircleMembershipRepository):
    def __init__(self):
        self.memberships: List[Tuple[str, str]] = []

    def join(self, user_id, role="member"):
        self.memberships.append((user_id, role))

    def count_by_role(self, user_id, role):
        return sum(1 for uid, r in self.memberships if uid == user_id and r == role)


class InMemoryGoals(GoalRepository):
    def __init__(self):
        self.goals: List[Goal] = []

    def add(self, goal: Goal):
        self.goals.append(goal)

    def list_active(self, member_id):
        return [g for g in self.goals if g.member_id == member_id and g.status == ACTIVE]


class _InMemoryEnrollments:
    def __init__(self):
        self.enrollments: List[Enrollment] = []

    def add(self, user_id, target_id, status=COMPLETED):
        self.enrollments.append(Enrollment(
            id=f"e-{len(self.enrollments)}",
            user_id=user_id,
            target_id=target_id,
            status=status,
        ))

    def has_completed(self, user_id, target_id=None):
        return any(
            e.user_id == user_id
            and e.status == COMPLETED
            and (target_id is None or e.target_id == target_id)
            for e in self.enrollments
        )


class InMemoryChallenges(_InMemoryEnrollments, ChallengeEnrollmentRepository):
    pass


class InMemoryPrograms(_InMemoryEnrollments, ProgramEnrollmentRepository):
    pass


class InMemoryBadgeDefinitions(BadgeDefinitionRepository):
    def __init__(self, rows=None):
        self.definitions: List[BadgeDefinition] = build_definitions(rows or [])

    def add(self, row):
        self.definitions.extend(build_definitions([row]))
        self.definitions.sort(key=lambda d: (d.display_order, d.id))

    def list_definitions(self):
        return list(self.definitions)


class InMemoryUserBadges(UserBadgeRepository):
    """Mirrors the unique index and the atomic featured toggle with a lock."""

    def __init__(self):
        self.rows: Dict[Tuple[str, str], UserBadge] = {}
        self._lock = threading.RLock()

    def get(self, user_id, badge_id):
        return self.rows.get((user_id, badge_id))

    def list_for_user(self, user_id):
        with self._lock:
            mine = [b for (uid, _), b in self.rows.items() if uid == user_id]
        return sorted(mine, key=lambda b: (b.display_order, b.earned_at))

    def count_featured(self, user_id):
        return sum(1 for b in self.list_for_user(user_id) if b.is_featured)

    def insert(self, user_badge):
        with self._lock:
            key = (user_badge.user_id, user_badge.badge_id)
            if key in self.rows:
                raise BadgeAlreadyEarnedError(*key)
            self.rows[key] = user_badge
        return user_badge

    def set_featured(self, user_id, badge_id, is_featured, limit):
        with self._lock:
            current = self.rows.get((user_id, badge_id))
            if current is None:
                raise UserBadgeNotFoundError(user_id, badge_id)
            if current.is_featured == is_featured:
                return current
            if is_featured and self.count_featured(user_id) >= limit:
                raise FeaturedBadgeLimitError(limit)
            updated = current.model_copy(update={"is_featured": is_featured})
            self.rows[(user_id, badge_id)] = updated
            return updated

    def set_display_order(self, user_id, badge_ids: Sequence[str]):
        updated = 0
        for position, badge_id in enumerate(badge_ids):
            current = self.rows.get((user_id, badge_id))
            if current is None:
                continue
            self.rows[(user_id, badge_id)] = current.model_copy(update={"display_order": position})
            updated += 1
        return updated


def make_activity_repositories() -> ActivityRepositories:
    return ActivityRepositories(
        personal_records=InMemoryPersonalRecords(),
        skills=InMemorySkills(),
        sports=InMemorySports(),
        workouts=InMemoryWorkouts(),
        bodyweight=InMemoryBodyweight(),
        follows=InMemoryFollows(),
        circles=InMemoryCircles(),
        goals=InMemoryGoals(),
        challenges=InMemoryChallenges(),
        programs=InMemoryPrograms(),
    )


def badge_row(badge_id: str, criteria: dict, **overrides) -> dict:
    """Catalog row with sensible defaults for tests."""
    row = {
        "id": badge_id,
        "name": badge_id.replace("_", " ").title(),
        "description": f"Earn {badge_id}",
        "icon": "🏅",
        "category": "strength",
        "tier": "bronze",
        "criteria": criteria,
    }
    row.update(overrides)
    return row
