"""Goal date calculations.

Goals carry date-only target dates. Gaps are measured between UTC-midnight
anchors so daylight-saving transitions never skew a whole-day count.
"""

from collections.abc import Iterable
from datetime import date

from plan_creation.creation.parsers import parse_date_only, to_utc_midnight
from plan_creation.creation.types import Goal

SECONDS_PER_DAY = 24 * 60 * 60


def valid_goal_dates(goals: Iterable[Goal]) -> list[date]:
    """Return the strictly valid goal dates, sorted ascending."""
    parsed = (parse_date_only(goal.target_date) for goal in goals)
    return sorted(value for value in parsed if value is not None)


def minimum_gap_days(goals: Iterable[Goal]) -> int | None:
    """Compute the minimum whole-day gap between consecutive goal dates.

    Args:
        goals: Goals in any order; invalid or blank dates are ignored

    Returns:
        Smallest gap in days, or None when fewer than two valid dates exist
    """
    dates = valid_goal_dates(goals)
    if len(dates) < 2:
        return None

    gaps = []
    for current, following in zip(dates, dates[1:]):
        delta = to_utc_midnight(following) - to_utc_midnight(current)
        gaps.append(int(delta.total_seconds() // SECONDS_PER_DAY))
    return min(gaps)


def latest_goal_date(goals: Iterable[Goal]) -> date | None:
    dates = valid_goal_dates(goals)
    return dates[-1] if dates else None
