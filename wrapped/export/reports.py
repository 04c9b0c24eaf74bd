"""Export and display formatting for year-in-review statistics."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import polars as pl

from wrapped.config import EXPORTS_DIR
from wrapped.models.activity import Activity
from wrapped.models.stats import WrappedStats

logger = logging.getLogger(__name__)

ACTIVITY_EMOJIS = {
    "Run": "🏃",
    "Ride": "🚴",
    "Swim": "🏊",
    "Walk": "🚶",
    "Hike": "🥾",
    "VirtualRide": "🚴‍♂️",
    "VirtualRun": "🏃‍♂️",
    "WeightTraining": "🏋️",
    "Yoga": "🧘",
    "Workout": "💪",
    "Soccer": "⚽",
    "Tennis": "🎾",
    "Rowing": "🚣",
    "Kayaking": "🛶",
    "Skiing": "⛷️",
    "Snowboard": "🏂",
    "Golf": "🏌️",
    "Surfing": "🏄",
    "Skateboard": "🛹",
    "RockClimbing": "🧗",
}
DEFAULT_EMOJI = "🏅"


def format_distance(km: float) -> str:
    if km >= 1000:
        return f"{km / 1000:.1f}k"
    return f"{km:.1f}"


def format_time(hours: float) -> str:
    """Format hours as ``"2d 3h"`` from a day up, otherwise ``"5h 30m"``."""
    if hours >= 24:
        days = int(hours // 24)
        remaining_hours = round(hours % 24)
        return f"{days}d {remaining_hours}h"
    h = int(hours)
    m = round((hours - h) * 60)
    return f"{h}h {m}m"


def format_elevation(meters: float) -> str:
    if meters >= 1000:
        return f"{meters / 1000:.1f}k"
    return str(round(meters))


def activity_emoji(activity_type: str) -> str:
    return ACTIVITY_EMOJIS.get(activity_type, DEFAULT_EMOJI)


class ReportExporter:
    """Export wrapped statistics and the activities behind them."""

    def __init__(self, stats: WrappedStats, activities: Optional[list[Activity]] = None, year: Optional[int] = None):
        """Initialize report exporter.

        Args:
            stats: Computed statistics
            activities: Activities the statistics were computed from
            year: Year the statistics cover, used in titles and file names
        """
        self.stats = stats
        self.activities = activities or []
        self.year = year

    def export_to_json(self, output_path: Optional[str] = None) -> str:
        """Write the statistics as JSON.

        Args:
            output_path: Output file path (generated if not provided)

        Returns:
            Path to exported file
        """
        if output_path is None:
            output_path = str(EXPORTS_DIR / f"wrapped_{self._file_tag()}.json")

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_text(self.stats.model_dump_json(indent=2), encoding="utf-8")

        logger.info(f"Statistics exported to {output_path}")
        return output_path

    def export_to_csv(self, output_path: Optional[str] = None) -> str:
        """Write one row per activity (without route geometry) as CSV.

        Args:
            output_path: Output file path (generated if not provided)

        Returns:
            Path to exported file
        """
        if output_path is None:
            output_path = str(EXPORTS_DIR / f"activities_{self._file_tag()}.csv")

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        self.activities_frame().write_csv(output_path)

        logger.info(f"{len(self.activities)} activities exported to {output_path}")
        return output_path

    def activities_frame(self) -> pl.DataFrame:
        """Flat activity table for tabular export."""
        return pl.DataFrame(
            {
                "id": [a.id for a in self.activities],
                "name": [a.name for a in self.activities],
                "type": [a.activity_type for a in self.activities],
                "start_date_local": [a.start_date_local for a in self.activities],
                "distance_km": [a.distance / 1000 for a in self.activities],
                "moving_time_h": [a.moving_time / 3600 for a in self.activities],
                "elevation_m": [a.total_elevation_gain for a in self.activities],
                "average_heartrate": [a.average_heartrate for a in self.activities],
                "kudos": [a.kudos_count for a in self.activities],
                "has_route": [a.has_route for a in self.activities],
            },
            schema={
                "id": pl.Int64,
                "name": pl.Utf8,
                "type": pl.Utf8,
                "start_date_local": pl.Utf8,
                "distance_km": pl.Float64,
                "moving_time_h": pl.Float64,
                "elevation_m": pl.Float64,
                "average_heartrate": pl.Float64,
                "kudos": pl.Int64,
                "has_route": pl.Boolean,
            },
        )

    def generate_summary_report(self) -> str:
        """Generate a text summary report.

        Returns:
            Summary report as string
        """
        stats = self.stats
        title = f"YEAR IN REVIEW {self.year}" if self.year else "YEAR IN REVIEW"

        report = []
        report.append("=" * 60)
        report.append(title)
        report.append("=" * 60)
        report.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        report.append("")

        report.append("OVERVIEW")
        report.append("-" * 40)
        report.append(f"Total Activities: {stats.total_activities}")
        report.append(f"Total Distance: {format_distance(stats.total_distance)} km")
        report.append(f"Total Time: {format_time(stats.total_time)}")
        report.append(f"Total Elevation: {format_elevation(stats.total_elevation)} m")
        report.append(f"Total Kudos: {stats.total_kudos}")
        report.append("")

        if stats.activity_types:
            report.append("ACTIVITY TYPES")
            report.append("-" * 40)
            for activity_type, count in sorted(stats.activity_types.items(), key=lambda item: -item[1]):
                report.append(f"{activity_emoji(activity_type)} {activity_type}: {count}")
            report.append("")

        report.append("MONTHLY DISTRIBUTION")
        report.append("-" * 40)
        busiest = max(stats.monthly_distribution.values(), default=0)
        for month, count in stats.monthly_distribution.items():
            bar = "#" * round(20 * count / busiest) if busiest else ""
            report.append(f"{month} {count:>4} {bar}")
        report.append("")

        report.append("HIGHLIGHTS")
        report.append("-" * 40)
        if stats.longest_activity:
            longest = stats.longest_activity
            report.append(f"Longest: {longest.name} ({format_distance(longest.distance / 1000)} km)")
        if stats.fastest_activity:
            fastest = stats.fastest_activity
            report.append(f"Fastest: {fastest.name} ({fastest.average_speed * 3.6:.1f} km/h)")
        report.append(f"Longest Streak: {stats.streaks.longest_streak} days")
        report.append(f"Current Streak: {stats.streaks.current_streak} days")
        report.append("")

        if stats.top_locations:
            report.append("TOP LOCATIONS")
            report.append("-" * 40)
            for location in stats.top_locations:
                place = f"{location.city}, {location.country}" if location.country else location.city
                report.append(f"{place}: {location.count} activities")
            report.append("")

        report.append("=" * 60)
        return "\n".join(report)

    def _file_tag(self) -> str:
        if self.year:
            return str(self.year)
        return datetime.now().strftime("%Y%m%d_%H%M%S")
