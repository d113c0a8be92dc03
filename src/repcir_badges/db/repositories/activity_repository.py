"""SQLite read repositories for the activity data the badge engine inspects.

These tables belong to other parts of the application (workout logging,
profiles, circles, challenges). The engine only reads them.
"""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from .base import (
    ActivityRepositories,
    BodyweightRepository,
    ChallengeEnrollmentRepository,
    CircleMembershipRepository,
    FollowRepository,
    GoalRepository,
    PersonalRecordRepository,
    ProgramEnrollmentRepository,
    SkillRepository,
    SportRepository,
    WorkoutSessionRepository,
)
from .sqlite_base import SQLiteRepository, parse_datetime
from ...models.activity import (
    ACTIVE,
    ALL_TIME,
    COMPLETED,
    BodyweightMetric,
    Goal,
    PersonalRecord,
    Skill,
    UserSport,
)


class SQLitePersonalRecordRepository(SQLiteRepository, PersonalRecordRepository):
    """Personal records joined with the exercise library for names."""

    def _row_to_record(self, row: sqlite3.Row) -> PersonalRecord:
        return PersonalRecord(
            member_id=row["member_id"],
            exercise_id=row["exercise_id"],
            exercise_name=row["exercise_name"] or "",
            value=float(row["value"]),
            unit=row["unit"] or "lbs",
            record_type=row["record_type"],
        )

    def list_records(self, member_id: str, record_type: str = ALL_TIME) -> List[PersonalRecord]:
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT pr.member_id, pr.exercise_id, e.name AS exercise_name,
                       pr.value, pr.unit, pr.record_type
                FROM personal_records pr
                LEFT JOIN exercises e ON e.id = pr.exercise_id
                WHERE pr.member_id = ? AND pr.record_type = ?
            """, (member_id, record_type)).fetchall()
        return [self._row_to_record(row) for row in rows]


class SQLiteSkillRepository(SQLiteRepository, SkillRepository):
    def get_by_name(self, user_id: str, name: str) -> Optional[Skill]:
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT user_id, name, current_status FROM user_skills
                WHERE user_id = ? AND LOWER(name) = LOWER(?)
                LIMIT 1
            """, (user_id, name)).fetchone()
        if not row:
            return None
        return Skill(user_id=row["user_id"], name=row["name"], current_status=row["current_status"])


class SQLiteSportRepository(SQLiteRepository, SportRepository):
    def get_by_name(self, user_id: str, sport: str) -> Optional[UserSport]:
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT user_id, sport, level FROM user_sports
                WHERE user_id = ? AND LOWER(sport) = LOWER(?)
                LIMIT 1
            """, (user_id, sport)).fetchone()
        if not row:
            return None
        return UserSport(user_id=row["user_id"], sport=row["sport"], level=row["level"])


class SQLiteWorkoutSessionRepository(SQLiteRepository, WorkoutSessionRepository):
    def count_completed(self, member_id: str) -> int:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM workout_sessions WHERE member_id = ? AND status = ?",
                (member_id, COMPLETED)
            ).fetchone()
        return row[0]

    def list_completion_times(self, member_id: str) -> List[datetime]:
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT COALESCE(end_time, date) AS completed_at
                FROM workout_sessions
                WHERE member_id = ? AND status = ?
                ORDER BY completed_at DESC
            """, (member_id, COMPLETED)).fetchall()
        return [parse_datetime(row["completed_at"]) for row in rows]


class SQLiteBodyweightRepository(SQLiteRepository, BodyweightRepository):
    def get_latest(self, user_id: str) -> Optional[BodyweightMetric]:
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT user_id, date, weight FROM user_metrics
                WHERE user_id = ?
                ORDER BY date DESC
                LIMIT 1
            """, (user_id,)).fetchone()
        if not row:
            return None
        return BodyweightMetric(
            user_id=row["user_id"],
            date=parse_datetime(row["date"]).date(),
            weight=row["weight"],
        )


class SQLiteFollowRepository(SQLiteRepository, FollowRepository):
    def count_followers(self, user_id: str) -> int:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM user_follows WHERE following_id = ?",
                (user_id,)
            ).fetchone()
        return row[0]


class SQLiteCircleMembershipRepository(SQLiteRepository, CircleMembershipRepository):
    def count_by_role(self, user_id: str, role: str) -> int:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM circle_members WHERE user_id = ? AND role = ?",
                (user_id, role)
            ).fetchone()
        return row[0]


class SQLiteGoalRepository(SQLiteRepository, GoalRepository):
    def list_active(self, member_id: str) -> List[Goal]:
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM goals WHERE member_id = ? AND status = ?
            """, (member_id, ACTIVE)).fetchall()
        return [
            Goal(
                id=row["id"],
                member_id=row["member_id"],
                title=row["title"],
                category=row["category"],
                target_value=row["target_value"],
                target_unit=row["target_unit"],
                status=row["status"],
            )
            for row in rows
        ]


class _SQLiteEnrollmentRepository(SQLiteRepository):
    """Completed-enrollment lookup over one participation table."""

    table: str = ""
    target_column: str = ""

    def has_completed(self, user_id: str, target_id: Optional[str] = None) -> bool:
        query = f"SELECT 1 FROM {self.table} WHERE user_id = ? AND status = ?"
        params: list = [user_id, COMPLETED]
        if target_id:
            query += f" AND {self.target_column} = ?"
            params.append(target_id)
        with self._get_connection() as conn:
            row = conn.execute(query + " LIMIT 1", params).fetchone()
        return row is not None


class SQLiteChallengeEnrollmentRepository(_SQLiteEnrollmentRepository, ChallengeEnrollmentRepository):
    table = "challenge_participants"
    target_column = "challenge_id"


class SQLiteProgramEnrollmentRepository(_SQLiteEnrollmentRepository, ProgramEnrollmentRepository):
    table = "program_enrollments"
    target_column = "program_id"


def create_sqlite_repositories(db_path: Optional[Union[str, Path]] = None) -> ActivityRepositories:
    """Build the read repository bundle over one SQLite database."""
    return ActivityRepositories(
        personal_records=SQLitePersonalRecordRepository(db_path),
        skills=SQLiteSkillRepository(db_path),
        sports=SQLiteSportRepository(db_path),
        workouts=SQLiteWorkoutSessionRepository(db_path),
        bodyweight=SQLiteBodyweightRepository(db_path),
        follows=SQLiteFollowRepository(db_path),
        circles=SQLiteCircleMembershipRepository(db_path),
        goals=SQLiteGoalRepository(db_path),
        challenges=SQLiteChallengeEnrollmentRepository(db_path),
        programs=SQLiteProgramEnrollmentRepository(db_path),
    )
