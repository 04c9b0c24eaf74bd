"""Year selection helpers for activity collections."""

from datetime import date
from typing import Iterable, Optional

from wrapped.config import MIN_VALID_YEAR
from wrapped.models.activity import Activity


def filter_activities_by_year(activities: Iterable[Activity], year: int) -> list[Activity]:
    """Keep activities whose local start date falls in ``year``, preserving order."""
    return [activity for activity in activities if activity.local_start.year == year]


def get_available_years(
    activities: Iterable[Activity],
    current_year: Optional[int] = None,
) -> list[int]:
    """Distinct years present in a collection, newest first.

    Years up to MIN_VALID_YEAR or more than one year past the current year
    come from corrupt timestamps and are dropped.

    Args:
        activities: Activity collection
        current_year: Reference year, defaults to today's year

    Returns:
        Sorted (descending) list of years
    """
    if current_year is None:
        current_year = date.today().year

    years = {activity.local_start.year for activity in activities}
    return sorted(
        (year for year in years if MIN_VALID_YEAR < year <= current_year + 1),
        reverse=True,
    )
