"""Year-in-review aggregation over an activity collection."""

import logging
import math
from datetime import date, timedelta
from typing import Iterable, Optional

import polars as pl

from wrapped.config import (
    MONTH_LABELS,
    SPEED_ACTIVITY_TYPES,
    TOP_LOCATIONS_LIMIT,
    TOP_ROUTES_LIMIT,
)
from wrapped.models.activity import Activity
from wrapped.models.stats import (
    AveragePerActivity,
    LocationStats,
    PersonalBests,
    RouteData,
    Streaks,
    WrappedStats,
    empty_monthly_distribution,
)

logger = logging.getLogger(__name__)

ACTIVITY_SCHEMA = {
    "distance": pl.Float64,
    "moving_time": pl.Float64,
    "total_elevation_gain": pl.Float64,
    "kudos_count": pl.Int64,
    "activity_type": pl.Utf8,
    "month": pl.Int64,
}


def activities_to_frame(activities: list[Activity]) -> pl.DataFrame:
    """Build the numeric table used for totals and breakdowns."""
    return pl.DataFrame(
        {
            "distance": [a.distance for a in activities],
            "moving_time": [a.moving_time for a in activities],
            "total_elevation_gain": [a.total_elevation_gain for a in activities],
            "kudos_count": [a.kudos_count for a in activities],
            "activity_type": [a.activity_type for a in activities],
            "month": [a.local_start.month for a in activities],
        },
        schema=ACTIVITY_SCHEMA,
    )


class WrappedAnalyzer:
    """Compute year-in-review statistics for a collection of activities."""

    def __init__(self, activities: Iterable[Activity], today: Optional[date] = None):
        """Initialize analyzer.

        Args:
            activities: Activities to summarize (usually one year's worth)
            today: Reference date for the current streak, defaults to today
        """
        self.activities = list(activities)
        self.today = today or date.today()
        self.df = activities_to_frame(self.activities)

    def compute(self) -> WrappedStats:
        """Compute the full statistics set.

        Returns:
            WrappedStats; all zeros and empty collections for no activities
        """
        if not self.activities:
            return WrappedStats()

        totals = self.calculate_totals()
        count = len(self.activities)
        routes = self.calculate_top_routes()

        stats = WrappedStats(
            total_distance=totals["distance_km"],
            total_time=totals["time_hours"],
            total_elevation=totals["elevation_m"],
            total_activities=count,
            total_kudos=totals["kudos"],
            longest_activity=self.find_longest_activity(),
            fastest_activity=self.find_fastest_activity(),
            activity_types=self.calculate_activity_types(),
            monthly_distribution=self.calculate_monthly_distribution(),
            average_per_activity=AveragePerActivity(
                distance=totals["distance_km"] / count,
                time=totals["time_hours"] / count,
                elevation=totals["elevation_m"] / count,
            ),
            streaks=self.calculate_streaks(),
            personal_bests=totals["personal_bests"],
            top_locations=self.calculate_top_locations(),
            top_routes=routes,
            all_polylines=[a.map.summary_polyline for a in self.activities if a.has_route],
        )
        logger.info(
            f"Summarized {count} activities: {stats.total_distance:.1f} km, "
            f"{stats.total_time:.1f} h, {len(routes)} top routes"
        )
        return stats

    def calculate_totals(self) -> dict:
        """Sum and max of distance, time, elevation and kudos in one aggregation.

        Sums are converted to km and hours; the maxima form the personal bests.
        """
        metrics = ["distance", "moving_time", "total_elevation_gain", "kudos_count"]
        row = self.df.select(
            [pl.col(name).sum().alias(f"{name}_sum") for name in metrics]
            + [pl.col(name).max().alias(f"{name}_max") for name in metrics]
        ).row(0, named=True)
        best = {name: row[f"{name}_max"] or 0 for name in metrics}

        return {
            "distance_km": float(row["distance_sum"] or 0) / 1000,
            "time_hours": float(row["moving_time_sum"] or 0) / 3600,
            "elevation_m": float(row["total_elevation_gain_sum"] or 0),
            "kudos": int(row["kudos_count_sum"] or 0),
            "personal_bests": PersonalBests(
                longest_distance=float(best["distance"]) / 1000,
                longest_time=float(best["moving_time"]) / 3600,
                highest_elevation=float(best["total_elevation_gain"]),
                most_kudos=int(best["kudos_count"]),
            ),
        }

    def calculate_activity_types(self) -> dict[str, int]:
        if self.df.is_empty():
            return {}
        counts = self.df.group_by("activity_type").agg(pl.len().alias("count"))
        return dict(zip(counts["activity_type"].to_list(), counts["count"].to_list()))

    def calculate_monthly_distribution(self) -> dict[str, int]:
        """Count activities per local calendar month; all twelve months are present."""
        distribution = empty_monthly_distribution()
        if self.df.is_empty():
            return distribution
        counts = self.df.group_by("month").agg(pl.len().alias("count"))
        for month, count in zip(counts["month"].to_list(), counts["count"].to_list()):
            distribution[MONTH_LABELS[month - 1]] += count
        return distribution

    def find_longest_activity(self) -> Optional[Activity]:
        """Longest activity by distance; the first one wins a tie."""
        longest = None
        for activity in self.activities:
            if longest is None or activity.distance > longest.distance:
                longest = activity
        return longest

    def find_fastest_activity(self) -> Optional[Activity]:
        """Fastest run or ride by average speed; the first one wins a tie."""
        fastest = None
        for activity in self.activities:
            if activity.activity_type not in SPEED_ACTIVITY_TYPES:
                continue
            if fastest is None or activity.average_speed > fastest.average_speed:
                fastest = activity
        return fastest

    def calculate_personal_bests(self) -> PersonalBests:
        return self.calculate_totals()["personal_bests"]

    def calculate_streaks(self) -> Streaks:
        """Longest run of consecutive active days and the run ending today.

        Days are local calendar dates. The current streak counts the run
        ending on the latest active day up to ``today``, and is 0 when that
        day is more than one day before ``today``.
        """
        days = sorted({activity.local_start.date() for activity in self.activities})
        if not days:
            return Streaks()

        longest = 1
        run = 1
        for previous, current in zip(days, days[1:]):
            if current - previous == timedelta(days=1):
                run += 1
            else:
                run = 1
            longest = max(longest, run)

        past_days = [day for day in days if day <= self.today]
        current_streak = 0
        if past_days and (self.today - past_days[-1]).days <= 1:
            current_streak = 1
            for previous, current in zip(reversed(past_days[:-1]), reversed(past_days)):
                if current - previous != timedelta(days=1):
                    break
                current_streak += 1

        return Streaks(longest_streak=longest, current_streak=current_streak)

    def calculate_top_locations(self, limit: int = TOP_LOCATIONS_LIMIT) -> list[LocationStats]:
        """Group activities by place name, or by rounded start coordinates.

        Activities without a place and without usable start coordinates are
        skipped.
        """
        locations: dict[str, LocationStats] = {}

        for activity in self.activities:
            coords = activity.start_latlng if _has_valid_coords(activity) else None

            if activity.location_city or activity.location_country:
                city = activity.location_city or "Unknown"
                country = activity.location_country or ""
                key = f"city-{city}-{country}"
                if key not in locations:
                    locations[key] = LocationStats(
                        city=city,
                        country=country,
                        lat=coords[0] if coords else 0.0,
                        lng=coords[1] if coords else 0.0,
                    )
            elif coords:
                lat = round(coords[0], 2)
                lng = round(coords[1], 2)
                key = f"coords-{lat}-{lng}"
                if key not in locations:
                    locations[key] = LocationStats(
                        city=f"{lat:.2f}°, {lng:.2f}°",
                        lat=coords[0],
                        lng=coords[1],
                    )
            else:
                continue

            location = locations[key]
            location.count += 1
            location.total_distance += activity.distance / 1000

        ranked = sorted(locations.values(), key=lambda loc: loc.count, reverse=True)
        return ranked[:limit]

    def calculate_top_routes(self, limit: int = TOP_ROUTES_LIMIT) -> list[RouteData]:
        """Longest activities that carry an encoded route."""
        with_routes = [a for a in self.activities if a.has_route]
        with_routes.sort(key=lambda a: a.distance, reverse=True)
        return [
            RouteData(
                polyline=a.map.summary_polyline,
                name=a.name,
                distance=a.distance / 1000,
                type=a.activity_type,
            )
            for a in with_routes[:limit]
        ]


def _has_valid_coords(activity: Activity) -> bool:
    if not activity.start_latlng or len(activity.start_latlng) != 2:
        return False
    lat, lng = activity.start_latlng
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return lat != 0 and lng != 0


def process_activities(activities: Iterable[Activity], today: Optional[date] = None) -> WrappedStats:
    """Compute WrappedStats for an activity collection."""
    return WrappedAnalyzer(activities, today=today).compute()
