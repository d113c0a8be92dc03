"""
Criteria evaluation for badge definitions.

Each criteria variant has one measuring routine that aggregates the user's
activity into a current value and compares it against the variant's target.
``check`` answers "is the badge earned?"; ``measure`` exposes the same
aggregation so progress bars never disagree with awards.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from ..db.repositories.base import ActivityRepositories
from ..models.activity import OWNER, PersonalRecord
from ..models.badges import (
    CRITERIA_TYPES,
    BadgeDefinition,
    ChallengeCompleteCriteria,
    CirclesCreatedCriteria,
    CriteriaCheckResult,
    FirstLoginCriteria,
    FollowersCriteria,
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
    TrackTimeCriteria,
    WorkoutCountCriteria,
)
from .streaks import longest_streak, resolve_timezone


logger = logging.getLogger(__name__)

# Lift groups summed by pr_total; the first matching keyword wins
CANONICAL_LIFTS = ("squat", "bench", "deadlift")

TRACK_KEYWORDS = ("mile", "run")
SECOND_UNITS = {"seconds", "second", "sec", "s", "time"}
MINUTE_UNITS = {"minutes", "minute", "min"}


@dataclass(frozen=True)
class Measurement:
    """
    Aggregated value of one criterion for one user.

    ``current`` is None when the data needed to measure is missing (no
    member, no bodyweight, no recorded time). Such a measurement is never
    satisfied.
    """

    current: Optional[float]
    target: float
    lower_is_better: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def satisfied(self) -> bool:
        if self.current is None or self.target <= 0:
            return False
        if self.lower_is_better:
            return self.current <= self.target
        return self.current >= self.target


def time_in_seconds(value: float, unit: Optional[str]) -> Optional[float]:
    """Convert a time-denominated PR to seconds; None for other units."""
    unit = (unit or "").strip().lower()
    if unit in SECOND_UNITS:
        return float(value)
    if unit in MINUTE_UNITS:
        return float(value) * 60
    return None


def lift_groups(exercises: List[str]) -> Dict[str, Set[str]]:
    """
    Map each lift group to the configured exercise names that belong to it.

    A configured name joins the first canonical lift it mentions; a name
    mentioning none is a group of its own. Only records matching one of a
    group's configured names count toward that group.
    """
    groups: Dict[str, Set[str]] = {}
    for exercise in exercises:
        name = exercise.strip().lower()
        if not name:
            continue
        group = next((lift for lift in CANONICAL_LIFTS if lift in name), name)
        groups.setdefault(group, set()).add(name)
    return groups


def _flag(value: bool) -> float:
    return 1.0 if value else 0.0


class CriteriaEvaluator:
    """
    Decides whether a user satisfies a badge's criteria.

    Dispatch is a table keyed by criteria model class. The table must cover
    every criteria variant; a missing handler fails construction.
    """

    def __init__(self, repos: ActivityRepositories, timezone: str = "UTC"):
        self.repos = repos
        self._tz = resolve_timezone(timezone)
        self._handlers: Dict[type, Callable[[str, Optional[str], Any], Measurement]] = {
            PRTotalCriteria: self._measure_pr_total,
            PRSingleCriteria: self._measure_pr_single,
            PRBodyweightRatioCriteria: self._measure_pr_bodyweight_ratio,
            SkillAchievedCriteria: self._measure_skill,
            SportCriteria: self._measure_sport,
            StreakCriteria: self._measure_streak,
            WorkoutCountCriteria: self._measure_workout_count,
            ChallengeCompleteCriteria: self._measure_challenge,
            ProgramCompleteCriteria: self._measure_program,
            FollowersCriteria: self._measure_followers,
            CirclesCreatedCriteria: self._measure_circles,
            TrackTimeCriteria: self._measure_track_time,
            FirstLoginCriteria: self._measure_unimplemented,
            ProfileCompleteCriteria: self._measure_unimplemented,
            OnboardingCompleteCriteria: self._measure_unimplemented,
        }
        missing = [t.__name__ for t in CRITERIA_TYPES if t not in self._handlers]
        if missing:
            raise TypeError(f"No criteria handler for: {', '.join(missing)}")

    def measure(
        self,
        user_id: str,
        member_id: Optional[str],
        badge: BadgeDefinition,
    ) -> Measurement:
        """
        Aggregate the user's activity for a badge's criteria.

        Args:
            user_id: User identifier (social, skill, sport, enrollment data)
            member_id: Circle member identifier (PR and workout data)
            badge: Badge definition to measure

        Returns:
            Measurement with current value, target and metadata
        """
        handler = self._handlers[type(badge.criteria)]
        return handler(user_id, member_id, badge.criteria)

    def check(
        self,
        user_id: str,
        member_id: Optional[str],
        badge: BadgeDefinition,
    ) -> CriteriaCheckResult:
        measurement = self.measure(user_id, member_id, badge)
        return CriteriaCheckResult(
            eligible=measurement.satisfied,
            metadata=measurement.metadata or None,
        )

    # =========================================================================
    # Personal records
    # =========================================================================

    def _measure_pr_total(
        self, user_id: str, member_id: Optional[str], criteria: PRTotalCriteria
    ) -> Measurement:
        if not member_id:
            return Measurement(None, criteria.total_value)

        groups = lift_groups(criteria.exercises)

        breakdown: Dict[str, float] = {}
        records = self.repos.personal_records.find_by_exercise_substrings(member_id, criteria.exercises)
        for record in records:
            name = record.exercise_name.lower()
            group = next(
                (g for g, names in groups.items() if any(n in name for n in names)),
                None,
            )
            if group is None:
                continue
            breakdown[group] = max(breakdown.get(group, 0.0), record.value)

        total = sum(breakdown.values())
        return Measurement(
            total,
            criteria.total_value,
            metadata={"total": total, "breakdown": breakdown},
        )

    def _best_record(self, member_id: str, exercises: List[str]) -> Optional[PersonalRecord]:
        records = self.repos.personal_records.find_by_exercise_substrings(member_id, exercises)
        return max(records, key=lambda r: r.value, default=None)

    def _measure_pr_single(
        self, user_id: str, member_id: Optional[str], criteria: PRSingleCriteria
    ) -> Measurement:
        if not member_id:
            return Measurement(None, criteria.single_value)

        best = self._best_record(member_id, criteria.exercises)
        if best is None:
            return Measurement(0.0, criteria.single_value)
        return Measurement(
            best.value,
            criteria.single_value,
            metadata={"prValue": best.value, "exercise": best.exercise_name, "prUnit": best.unit},
        )

    def _measure_pr_bodyweight_ratio(
        self, user_id: str, member_id: Optional[str], criteria: PRBodyweightRatioCriteria
    ) -> Measurement:
        if not member_id:
            return Measurement(None, 0.0)

        latest = self.repos.bodyweight.get_latest(user_id)
        if latest is None or not latest.weight or latest.weight <= 0:
            return Measurement(None, 0.0)

        target = latest.weight * criteria.bodyweight_ratio
        best = self._best_record(member_id, criteria.exercises)
        if best is None:
            return Measurement(0.0, target, metadata={"bodyweight": latest.weight, "targetValue": target})
        return Measurement(
            best.value,
            target,
            metadata={
                "prValue": best.value,
                "exercise": best.exercise_name,
                "prUnit": best.unit,
                "bodyweight": latest.weight,
                "targetValue": target,
            },
        )

    def _measure_track_time(
        self, user_id: str, member_id: Optional[str], criteria: TrackTimeCriteria
    ) -> Measurement:
        if not member_id:
            return Measurement(None, criteria.track_time, lower_is_better=True)

        best: Optional[float] = None
        for record in self.repos.personal_records.find_by_exercise_substrings(member_id, TRACK_KEYWORDS):
            seconds = time_in_seconds(record.value, record.unit)
            if seconds is None or seconds <= 0:
                continue
            best = seconds if best is None else min(best, seconds)

        metadata = {"timeSeconds": best} if best is not None else {}
        return Measurement(best, criteria.track_time, lower_is_better=True, metadata=metadata)

    # =========================================================================
    # Profile
    # =========================================================================

    def _measure_skill(
        self, user_id: str, member_id: Optional[str], criteria: SkillAchievedCriteria
    ) -> Measurement:
        skill = self.repos.skills.get_by_name(user_id, criteria.skill_name)
        if skill is None:
            return Measurement(0.0, 1.0)

        status = (skill.current_status or "").lower()
        required = criteria.skill_status.value
        # Mastered also counts for an "achieved" requirement
        satisfied = status == required or (
            criteria.skill_status == SkillStatus.ACHIEVED and status == SkillStatus.MASTERED.value
        )
        return Measurement(
            _flag(satisfied),
            1.0,
            metadata={"skillName": skill.name, "status": skill.current_status},
        )

    def _measure_sport(
        self, user_id: str, member_id: Optional[str], criteria: SportCriteria
    ) -> Measurement:
        sport = self.repos.sports.get_by_name(user_id, criteria.sport)
        if sport is None:
            return Measurement(0.0, 1.0)
        return Measurement(1.0, 1.0, metadata={"sport": sport.sport, "level": sport.level})

    # =========================================================================
    # Consistency
    # =========================================================================

    def _measure_streak(
        self, user_id: str, member_id: Optional[str], criteria: StreakCriteria
    ) -> Measurement:
        if not member_id:
            return Measurement(None, criteria.streak_days)

        days = longest_streak(self.repos.workouts.list_completion_times(member_id), self._tz)
        return Measurement(days, criteria.streak_days, metadata={"streakDays": days})

    def _measure_workout_count(
        self, user_id: str, member_id: Optional[str], criteria: WorkoutCountCriteria
    ) -> Measurement:
        if not member_id:
            return Measurement(None, criteria.workout_count)

        count = self.repos.workouts.count_completed(member_id)
        return Measurement(count, criteria.workout_count, metadata={"workoutCount": count})

    def _measure_challenge(
        self, user_id: str, member_id: Optional[str], criteria: ChallengeCompleteCriteria
    ) -> Measurement:
        done = self.repos.challenges.has_completed(user_id, criteria.challenge_id)
        metadata = {"challengeId": criteria.challenge_id} if criteria.challenge_id else {}
        return Measurement(_flag(done), 1.0, metadata=metadata)

    def _measure_program(
        self, user_id: str, member_id: Optional[str], criteria: ProgramCompleteCriteria
    ) -> Measurement:
        done = self.repos.programs.has_completed(user_id, criteria.program_id)
        metadata = {"programId": criteria.program_id} if criteria.program_id else {}
        return Measurement(_flag(done), 1.0, metadata=metadata)

    # =========================================================================
    # Social
    # =========================================================================

    def _measure_followers(
        self, user_id: str, member_id: Optional[str], criteria: FollowersCriteria
    ) -> Measurement:
        count = self.repos.follows.count_followers(user_id)
        return Measurement(count, criteria.follower_count, metadata={"followerCount": count})

    def _measure_circles(
        self, user_id: str, member_id: Optional[str], criteria: CirclesCreatedCriteria
    ) -> Measurement:
        count = self.repos.circles.count_by_role(user_id, OWNER)
        return Measurement(count, criteria.circle_count, metadata={"circleCount": count})

    def _measure_unimplemented(self, user_id: str, member_id: Optional[str], criteria) -> Measurement:
        # first_login, profile_complete, onboarding_complete have no data source yet
        return Measurement(0.0, 1.0)
