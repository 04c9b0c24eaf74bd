"""Tests for the activity models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from conftest import make_activity
from wrapped.integrations.polyline import encode_polyline
from wrapped.models.activity import Activity, parse_local_timestamp
from wrapped.models.stats import WrappedStats


def test_route_and_polyline_set_together(sample_route):
    activity = make_activity(route=sample_route)

    assert activity.has_route
    assert len(activity.route) == len(sample_route)
    assert activity.start_latlng == sample_route[0]


def test_route_without_polyline_rejected(sample_route):
    data = make_activity().model_dump()
    data["route"] = sample_route

    with pytest.raises(ValidationError):
        Activity(**data)


def test_polyline_without_route_rejected(sample_route):
    encoded = encode_polyline(sample_route)
    with pytest.raises(ValidationError):
        make_activity(map={"id": "map_1", "summary_polyline": encoded})


def test_single_point_route_rejected():
    point = [(52.5, 13.4)]
    with pytest.raises(ValidationError):
        make_activity(route=point, map={"id": "map_1", "summary_polyline": encode_polyline(point)})


def test_activities_are_immutable():
    activity = make_activity()

    with pytest.raises(ValidationError):
        activity.distance = 1.0


def test_activity_type_prefers_sport_type():
    assert make_activity(type="Ride", sport_type="GravelRide").activity_type == "GravelRide"
    assert make_activity(type="Ride", sport_type="").activity_type == "Ride"


def test_local_start_uses_wall_clock():
    activity = make_activity(
        local="2023-12-31T23:30:00Z",
        start_date=datetime(2024, 1, 1, 7, 30, tzinfo=timezone.utc),
    )

    assert activity.local_start == datetime(2023, 12, 31, 23, 30)


def test_local_start_falls_back_to_start_date():
    activity = make_activity(start_date_local="garbage")

    assert activity.local_start == datetime(2023, 6, 1, 8, 0)


def test_parse_local_timestamp():
    assert parse_local_timestamp("2023-05-01T10:00:00Z") == datetime(2023, 5, 1, 10)
    assert parse_local_timestamp("2023-05-01T10:00:00+02:00") == datetime(2023, 5, 1, 10)
    assert parse_local_timestamp("") is None
    assert parse_local_timestamp("May 1st") is None


def test_from_api_payload(sample_route):
    encoded = encode_polyline(sample_route)
    payload = {
        "id": 987654321,
        "name": "Lunch Run",
        "distance": 10012.3,
        "moving_time": 3011,
        "elapsed_time": 3100,
        "total_elevation_gain": 44.0,
        "type": "Run",
        "sport_type": "TrailRun",
        "start_date": "2023-04-02T10:15:00Z",
        "start_date_local": "2023-04-02T12:15:00Z",
        "timezone": "(GMT+01:00) Europe/Berlin",
        "kudos_count": 7,
        "achievement_count": 2,
        "average_speed": 3.3,
        "max_speed": 5.1,
        "start_latlng": [52.52, 13.405],
        "end_latlng": [],
        "athlete": {"id": 1},
        "map": {"id": "a987654321", "summary_polyline": encoded, "resource_state": 2},
    }

    activity = Activity.from_api(payload)

    assert activity.id == 987654321
    assert activity.activity_type == "TrailRun"
    assert activity.kudos_count == 7
    assert activity.end_latlng is None
    assert activity.map.id == "a987654321"
    assert activity.map.polyline == encoded
    assert len(activity.route) == len(sample_route)
    assert activity.local_start.hour == 12
    assert activity.average_heartrate is None


def test_from_api_without_map():
    payload = {
        "id": 5,
        "name": "Yoga",
        "type": "Yoga",
        "start_date": "2023-04-02T10:15:00Z",
        "start_date_local": "2023-04-02T12:15:00Z",
        "map": {"id": "a5", "summary_polyline": ""},
    }

    activity = Activity.from_api(payload)

    assert activity.sport_type == "Yoga"
    assert activity.map is None
    assert activity.route is None


def test_empty_stats_have_all_months():
    stats = WrappedStats()

    assert len(stats.monthly_distribution) == 12
    assert sum(stats.monthly_distribution.values()) == 0
    assert stats.longest_activity is None


def test_from_api_without_id_rejected(sample_route):
    payload = {
        "name": "Mystery",
        "start_date": "2023-04-02T10:15:00Z",
        "start_date_local": "2023-04-02T12:15:00Z",
        "map": {"summary_polyline": encode_polyline(sample_route)},
    }

    with pytest.raises(ValidationError):
        Activity.from_api(payload)
