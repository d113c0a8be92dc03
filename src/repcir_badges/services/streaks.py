"""
Workout streak calculation.

Streaks are counted over calendar days in the member's timezone. A day
counts once no matter how many workouts were completed on it.
"""

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..db.repositories.base import WorkoutSessionRepository
from ..models.badges import StreakInfo


logger = logging.getLogger(__name__)

Timestamp = Union[datetime, date, str]


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Look up an IANA timezone, falling back to UTC for unknown names."""
    if not name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, using UTC")
        return ZoneInfo("UTC")


def to_local_day(value: Timestamp, tz: Optional[tzinfo] = None) -> date:
    """
    Normalize a timestamp to a calendar day.

    Aware datetimes are converted to ``tz`` first. Naive datetimes are
    taken as already local. Strings are parsed as ISO 8601.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def _distinct_days_desc(days: Iterable[Timestamp], tz: Optional[tzinfo]) -> List[date]:
    return sorted({to_local_day(d, tz) for d in days}, reverse=True)


def longest_streak(days: Iterable[Timestamp], tz: Optional[tzinfo] = None) -> int:
    """
    Longest run of consecutive calendar days.

    Args:
        days: Activity timestamps in any order, duplicates allowed
        tz: Timezone used to bucket aware timestamps into days

    Returns:
        Length of the longest run, 0 when there are no days
    """
    ordered = _distinct_days_desc(days, tz)
    if not ordered:
        return 0

    longest = 1
    run = 1
    for previous, current in zip(ordered, ordered[1:]):
        if previous - current == timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
    return longest


def current_streak(
    days: Iterable[Timestamp],
    today: date,
    tz: Optional[tzinfo] = None,
) -> int:
    """
    Run of consecutive days ending today or yesterday.

    Days after ``today`` are ignored. Returns 0 when the most recent
    activity is older than yesterday.
    """
    ordered = [d for d in _distinct_days_desc(days, tz) if d <= today]
    if not ordered or (today - ordered[0]).days > 1:
        return 0

    run = 1
    for previous, current in zip(ordered, ordered[1:]):
        if previous - current != timedelta(days=1):
            break
        run += 1
    return run


class WorkoutStreakService:
    """Streak summary for "N days in a row" displays."""

    def __init__(self, workouts: WorkoutSessionRepository, timezone: str = "UTC"):
        self._workouts = workouts
        self._tz = resolve_timezone(timezone)

    def get_streak_info(
        self,
        member_id: str,
        now: Optional[datetime] = None,
        timezone: Optional[str] = None,
    ) -> StreakInfo:
        """
        Get current and longest workout streaks for a member.

        Args:
            member_id: Circle member identifier
            now: Reference time (defaults to the current time)
            timezone: Override for the configured timezone

        Returns:
            StreakInfo with current, longest and last activity day
        """
        tz = resolve_timezone(timezone) if timezone else self._tz
        now = now or datetime.now(tz)
        today = to_local_day(now, tz)

        completions = self._workouts.list_completion_times(member_id)
        days = _distinct_days_desc(completions, tz)

        return StreakInfo(
            current=current_streak(days, today, tz),
            longest=longest_streak(days, tz),
            last_activity_date=days[0] if days else None,
        )
