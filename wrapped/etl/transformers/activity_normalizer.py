"""Map rows of the export index table onto Activity records.

The Strava bulk export ``activities.csv`` has a fixed column layout that is
only known by position (header names are localized). All positional
knowledge lives in ``COLUMNS``; everything else reads named fields.
"""

import logging
import re
import time
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from pydantic import BaseModel

from wrapped.config import DEFAULT_ACTIVITY_TYPE
from wrapped.models.activity import Activity

logger = logging.getLogger(__name__)

COLUMNS = {
    "activity_id": 0,
    "activity_date": 1,
    "activity_name": 2,
    "activity_type": 3,
    "activity_description": 4,
    "elapsed_time_display": 5,
    "distance_km": 6,
    "max_heart_rate_display": 7,
    "filename": 12,
    "elapsed_time": 15,
    "moving_time": 16,
    "distance_m": 17,
    "max_speed": 18,
    "average_speed": 19,
    "elevation_gain": 20,
    "elevation_loss": 21,
    "max_heart_rate": 30,
    "average_heart_rate": 31,
    "calories": 34,
    "total_steps": 85,
}

# Date formats seen in exports across account locales
DATE_FORMATS = (
    "%b %d, %Y, %I:%M:%S %p",
    "%b %d, %Y %I:%M:%S %p",
    "%d %b %Y, %H:%M:%S",
    "%d %b %Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%d.%m.%Y, %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%Y-%m-%d",
)

NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
INTEGER_PREFIX = re.compile(r"^[+-]?\d+")


def parse_number(value: Optional[str]) -> float:
    """Parse a localized number, returning 0 when nothing numeric is found.

    Whichever of ``.`` or ``,`` occurs last is the decimal point; the other
    is a thousands separator and is dropped. A leading numeric prefix is
    accepted, so ``"12.5 km"`` parses as 12.5.
    """
    if not value:
        return 0.0
    text = value.strip().replace(" ", "").replace("\u00a0", "")

    if text.rfind(",") > text.rfind("."):
        text = text.replace(".", "").replace(",", ".")
    else:
        text = text.replace(",", "")

    match = NUMBER_PREFIX.match(text)
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def parse_distance_km_to_meters(value: Optional[str]) -> float:
    return parse_number(value) * 1000


def parse_optional(value: Optional[str]) -> Optional[float]:
    """Parse a number that is absent rather than zero when missing."""
    number = parse_number(value)
    return number or None


def parse_integer(value: Optional[str]) -> Optional[int]:
    """Parse the leading integer of a string, or None if there is none."""
    if not value:
        return None
    match = INTEGER_PREFIX.match(value.strip())
    if not match:
        return None
    return int(match.group(0))


def parse_activity_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an export timestamp; export timestamps are UTC."""
    if not value:
        return None
    text = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class ActivityRow(BaseModel):
    """Named view of one index table row."""

    activity_id: str = ""
    activity_date: str = ""
    activity_name: str = ""
    activity_type: str = ""
    activity_description: str = ""
    elapsed_time_display: str = ""
    distance_km: str = ""
    max_heart_rate_display: str = ""
    filename: str = ""
    elapsed_time: str = ""
    moving_time: str = ""
    distance_m: str = ""
    max_speed: str = ""
    average_speed: str = ""
    elevation_gain: str = ""
    elevation_loss: str = ""
    max_heart_rate: str = ""
    average_heart_rate: str = ""
    calories: str = ""
    total_steps: str = ""

    @classmethod
    def from_values(cls, values: list[str]) -> "ActivityRow":
        fields = {
            name: values[index]
            for name, index in COLUMNS.items()
            if index < len(values) and values[index]
        }
        return cls(**fields)


class NormalizedRow(NamedTuple):
    activity: Activity
    filename: Optional[str]


class ActivityNormalizer:
    """Turn index table rows into Activity records with base units."""

    def __init__(self, id_base: Optional[int] = None):
        """Initialize normalizer.

        Args:
            id_base: Base for synthesized ids of rows whose id parses to 0;
                defaults to the current time in milliseconds
        """
        self.id_base = id_base if id_base is not None else int(time.time() * 1000)

    def normalize(self, values: list[str], index: int) -> Optional[NormalizedRow]:
        """Normalize one data row.

        Args:
            values: Row fields in column order
            index: Zero-based data row position, used for fallback id and name

        Returns:
            The activity and the side-file name it references, or None when
            the row has no numeric activity id
        """
        row = ActivityRow.from_values(values)

        activity_id = parse_integer(row.activity_id)
        if activity_id is None:
            logger.debug(f"Skipping row {index}: no numeric activity id ({row.activity_id!r})")
            return None

        start_date = parse_activity_date(row.activity_date)
        if start_date is None:
            logger.debug(f"Row {index} has unparseable date {row.activity_date!r}, using now")
            start_date = datetime.now(timezone.utc).replace(microsecond=0)

        distance = parse_distance_km_to_meters(row.distance_km)
        if distance == 0:
            distance = parse_number(row.distance_m)

        moving_time = parse_number(row.moving_time) or parse_number(row.elapsed_time_display)
        elapsed_time = parse_number(row.elapsed_time) or parse_number(row.elapsed_time_display)

        activity_type = row.activity_type or DEFAULT_ACTIVITY_TYPE

        activity = Activity(
            id=activity_id or self.id_base + index,
            name=row.activity_name or f"Activity {index + 1}",
            type=activity_type,
            sport_type=activity_type,
            distance=distance,
            moving_time=moving_time,
            elapsed_time=elapsed_time or moving_time,
            total_elevation_gain=parse_number(row.elevation_gain),
            average_speed=parse_number(row.average_speed),
            max_speed=parse_number(row.max_speed),
            average_heartrate=parse_optional(row.average_heart_rate),
            max_heartrate=parse_optional(row.max_heart_rate) or parse_optional(row.max_heart_rate_display),
            start_date=start_date,
            start_date_local=start_date.strftime("%Y-%m-%dT%H:%M:%SZ"),
            timezone="UTC",
            calories=parse_optional(row.calories),
            description=row.activity_description or None,
        )

        return NormalizedRow(activity, row.filename or None)
