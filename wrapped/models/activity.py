"""Activity and athlete data models."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from wrapped.config import DEFAULT_ACTIVITY_TYPE, DEFAULT_USERNAME

LatLng = tuple[float, float]


def parse_local_timestamp(value: str) -> Optional[datetime]:
    """Parse a local timestamp string into a naive wall-clock datetime.

    The local variant carries the athlete's wall-clock time. A trailing
    ``Z`` or offset is ignored because only the calendar fields matter for
    bucketing.

    Args:
        value: ISO-8601 style timestamp string

    Returns:
        Naive datetime, or None if the string cannot be parsed
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


class ActivityMap(BaseModel):
    """Encoded route attached to an activity."""

    id: str
    summary_polyline: str
    polyline: Optional[str] = None


class Activity(BaseModel):
    """Model for one recorded exercise session.

    Numeric facts are always stored in base units: meters, seconds and
    meters per second.
    """

    # Core identifiers
    id: int
    name: str
    type: str = DEFAULT_ACTIVITY_TYPE
    sport_type: str = DEFAULT_ACTIVITY_TYPE

    # Duration and distance
    distance: float = 0.0
    moving_time: float = 0.0
    elapsed_time: float = 0.0
    total_elevation_gain: float = 0.0

    # Speed metrics
    average_speed: float = 0.0
    max_speed: float = 0.0

    # Heart rate data (absent rather than zero when not recorded)
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None

    # Time
    start_date: datetime
    start_date_local: str
    timezone: Optional[str] = None

    # Social
    kudos_count: int = 0
    achievement_count: int = 0

    # Other metrics
    calories: Optional[float] = None
    description: Optional[str] = None

    # Location
    start_latlng: Optional[LatLng] = None
    end_latlng: Optional[LatLng] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None

    # Route
    map: Optional[ActivityMap] = None
    route: Optional[list[LatLng]] = None

    class Config:
        """Pydantic config."""
        str_strip_whitespace = True
        frozen = True

    @model_validator(mode="after")
    def _check_route_pairing(self) -> "Activity":
        has_points = bool(self.route)
        has_encoded = bool(self.map and self.map.summary_polyline)
        if has_points != has_encoded:
            raise ValueError("route points and encoded polyline must be set together")
        if has_points and len(self.route) < 2:
            raise ValueError("a route needs at least two points")
        return self

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Activity":
        """Build an activity from a Strava API activity payload.

        The API only ships the encoded summary polyline, so the point list is
        decoded from it to keep the route pair consistent.
        """
        from wrapped.integrations.polyline import decode_polyline

        data = {key: value for key, value in payload.items() if key in cls.model_fields}
        data["type"] = data.get("type") or DEFAULT_ACTIVITY_TYPE
        data["sport_type"] = data.get("sport_type") or data["type"]
        for key in ("start_latlng", "end_latlng"):
            if not data.get(key):
                data[key] = None

        route_map = payload.get("map") or {}
        summary = route_map.get("summary_polyline") or ""
        points = decode_polyline(summary) if summary else []
        if len(points) >= 2:
            data["map"] = {
                "id": route_map.get("id") or f"map_{payload.get('id')}",
                "summary_polyline": summary,
                "polyline": route_map.get("polyline") or summary,
            }
            data["route"] = points
        else:
            data["map"] = None
            data["route"] = None
        return cls.model_validate(data)

    @property
    def activity_type(self) -> str:
        """Sport-specific label, falling back to the generic type."""
        return self.sport_type or self.type

    @property
    def local_start(self) -> datetime:
        """Start time on the athlete's wall clock, used for all calendar grouping.

        Falls back to the absolute start instant only when the local string
        is unparseable.
        """
        parsed = parse_local_timestamp(self.start_date_local)
        if parsed is None:
            return self.start_date.replace(tzinfo=None)
        return parsed

    @property
    def has_route(self) -> bool:
        return bool(self.map and self.map.summary_polyline)


class Athlete(BaseModel):
    """Identity owning an imported activity collection."""

    id: int
    username: str = DEFAULT_USERNAME
    firstname: str
    lastname: str
    profile: str = ""
    profile_medium: str = ""


class ImportReport(BaseModel):
    """Diagnostics collected while importing an export archive."""

    archive_entries: int = 0
    total_rows: int = 0
    imported_activities: int = 0
    rejected_rows: int = 0
    side_files_found: int = 0
    side_files_failed: int = 0
    routes_attached: int = 0
    warnings: list[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)


class ImportResult(BaseModel):
    """Activities and athlete recovered from an export archive."""

    activities: list[Activity]
    athlete: Athlete
    profile_picture: Optional[str] = None
    report: ImportReport = Field(default_factory=ImportReport)
