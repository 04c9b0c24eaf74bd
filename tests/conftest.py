"""Pytest configuration and fixtures."""

import io
import zipfile
from datetime import datetime, timezone

import pytest

from wrapped.etl.transformers.activity_normalizer import COLUMNS
from wrapped.integrations.polyline import encode_polyline
from wrapped.models.activity import Activity

ROW_WIDTH = max(COLUMNS.values()) + 1


def make_row(**fields):
    """Build an index table row with named fields at their column positions."""
    values = [""] * ROW_WIDTH
    for name, value in fields.items():
        values[COLUMNS[name]] = value
    return values


def make_csv(rows, header=None):
    """Render rows as quoted CSV text with a header row."""
    header = header or [f"Column {i}" for i in range(ROW_WIDTH)]
    lines = []
    for row in [header] + rows:
        lines.append(",".join('"' + value.replace('"', '""') + '"' for value in row))
    return "\n".join(lines) + "\n"


def make_gpx(points):
    trkpts = "\n".join(
        f'      <trkpt lat="{lat}" lon="{lon}"><ele>10.0</ele></trkpt>' for lat, lon in points
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<gpx creator="StravaGPX" version="1.1" xmlns="http://www.topografix.com/GPX/1/1">\n'
        "  <trk>\n    <name>Morning Ride</name>\n    <trkseg>\n"
        f"{trkpts}\n"
        "    </trkseg>\n  </trk>\n</gpx>\n"
    )


def make_zip(entries):
    """Build an in-memory ZIP from a {name: str | bytes} mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, content in entries.items():
            if isinstance(content, str):
                content = content.encode("utf-8")
            archive.writestr(name, content)
    return buffer.getvalue()


def make_activity(activity_id=1, local="2023-06-01T08:00:00Z", route=None, **fields):
    """Build an Activity with sensible defaults for aggregation tests."""
    data = {
        "id": activity_id,
        "name": f"Activity {activity_id}",
        "type": "Run",
        "sport_type": "Run",
        "distance": 5000.0,
        "moving_time": 1800.0,
        "elapsed_time": 1900.0,
        "start_date": datetime.fromisoformat(local.rstrip("Z")).replace(tzinfo=timezone.utc),
        "start_date_local": local,
    }
    if route:
        encoded = encode_polyline(route)
        data["route"] = route
        data["map"] = {"id": f"map_{activity_id}", "summary_polyline": encoded, "polyline": encoded}
        data.setdefault("start_latlng", route[0])
        data.setdefault("end_latlng", route[-1])
    data.update(fields)
    return Activity(**data)


@pytest.fixture
def sample_route():
    return [(52.52 + i * 0.001, 13.405 + i * 0.001) for i in range(10)]


@pytest.fixture
def sample_rows():
    """Three well-formed rows as they appear in an English export."""
    return [
        make_row(
            activity_id="1001",
            activity_date="Jan 5, 2023, 7:30:00 AM",
            activity_name="Morning Run",
            activity_type="Run",
            elapsed_time_display="1900",
            distance_km="5.2",
            filename="activities/1001.gpx",
            elapsed_time="1900.0",
            moving_time="1800.0",
            distance_m="5200.0",
            max_speed="4.1",
            average_speed="2.9",
            elevation_gain="35.0",
            max_heart_rate="172.0",
            average_heart_rate="148.0",
        ),
        make_row(
            activity_id="1002",
            activity_date="Feb 12, 2023, 9:00:00 AM",
            activity_name="Long Ride",
            activity_type="Ride",
            elapsed_time_display="7800",
            distance_km="62.4",
            filename="activities/1002.fit.gz",
            elapsed_time="7800.0",
            moving_time="7200.0",
            elevation_gain="540.0",
        ),
        make_row(
            activity_id="1003",
            activity_date="Mar 3, 2024, 6:15:00 PM",
            activity_name="Evening Swim",
            activity_type="Swim",
            elapsed_time_display="2400",
            distance_km="1.5",
        ),
    ]
