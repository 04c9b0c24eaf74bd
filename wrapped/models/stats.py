"""Aggregate statistics models."""

from typing import Optional

from pydantic import BaseModel, Field

from wrapped.config import MONTH_LABELS
from wrapped.models.activity import Activity


def empty_monthly_distribution() -> dict[str, int]:
    """Return the twelve calendar-month buckets seeded to zero."""
    return {label: 0 for label in MONTH_LABELS}


class AveragePerActivity(BaseModel):
    distance: float = 0.0  # km
    time: float = 0.0  # hours
    elevation: float = 0.0  # meters


class Streaks(BaseModel):
    longest_streak: int = 0
    current_streak: int = 0


class PersonalBests(BaseModel):
    longest_distance: float = 0.0  # km
    longest_time: float = 0.0  # hours
    highest_elevation: float = 0.0  # meters
    most_kudos: int = 0


class LocationStats(BaseModel):
    """Activity count and distance grouped by place."""

    city: str
    country: str = ""
    count: int = 0
    total_distance: float = 0.0  # km
    lat: float = 0.0
    lng: float = 0.0


class RouteData(BaseModel):
    """Route summary for map rendering."""

    polyline: str
    name: str
    distance: float  # km
    type: str


class WrappedStats(BaseModel):
    """Year-in-review summary of an activity collection.

    Derived data only: it is recomputed from the activity collection
    whenever the collection or the selected year changes.
    """

    total_distance: float = 0.0  # km
    total_time: float = 0.0  # hours
    total_elevation: float = 0.0  # meters
    total_activities: int = 0
    total_kudos: int = 0
    longest_activity: Optional[Activity] = None
    fastest_activity: Optional[Activity] = None
    activity_types: dict[str, int] = Field(default_factory=dict)
    monthly_distribution: dict[str, int] = Field(default_factory=empty_monthly_distribution)
    average_per_activity: AveragePerActivity = Field(default_factory=AveragePerActivity)
    streaks: Streaks = Field(default_factory=Streaks)
    personal_bests: PersonalBests = Field(default_factory=PersonalBests)
    top_locations: list[LocationStats] = Field(default_factory=list)
    top_routes: list[RouteData] = Field(default_factory=list)
    all_polylines: list[str] = Field(default_factory=list)

    def summary(self) -> dict:
        """Reduced view without streaks, personal bests or locations."""
        return self.model_dump(
            include={
                "total_distance",
                "total_time",
                "total_elevation",
                "total_activities",
                "total_kudos",
                "longest_activity",
                "activity_types",
                "monthly_distribution",
                "top_routes",
            }
        )
