"""Tests for GPX/FIT track decoding and point reduction."""

import gzip
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from conftest import make_gpx
from wrapped.integrations.fit_parser import SEMICIRCLES_TO_DEGREES, FITParser
from wrapped.integrations.gpx_parser import GPXParser
from wrapped.integrations.track_utils import (
    is_valid_coordinate,
    maybe_decompress,
    reduce_points,
)


class TestReducePoints:
    """Tests for fixed-stride point reduction."""

    def test_short_track_unchanged(self):
        coords = [(float(i), float(i)) for i in range(200)]

        assert reduce_points(coords) == coords

    @pytest.mark.parametrize("length", [201, 399, 400, 401, 1000, 12345])
    def test_long_track_capped_and_keeps_last_point(self, length):
        coords = [(float(i), -float(i)) for i in range(length)]

        reduced = reduce_points(coords)

        assert len(reduced) <= 200
        assert reduced[0] == coords[0]
        assert reduced[-1] == coords[-1]

    def test_stride_selection(self):
        coords = [(float(i), 0.0) for i in range(450)]

        reduced = reduce_points(coords)

        # ceil(450 / 200) = 3
        assert reduced[:4] == [(0.0, 0.0), (3.0, 0.0), (6.0, 0.0), (9.0, 0.0)]
        assert reduced[-1] == (449.0, 0.0)

    def test_custom_cap(self):
        coords = [(float(i), 0.0) for i in range(10)]

        reduced = reduce_points(coords, max_points=4)

        assert reduced == [(0.0, 0.0), (3.0, 0.0), (6.0, 0.0), (9.0, 0.0)]


class TestTrackHelpers:

    def test_valid_coordinate(self):
        assert is_valid_coordinate("52.5", "13.4")
        assert is_valid_coordinate(0, 0)

    @pytest.mark.parametrize("lat,lng", [
        (None, 1.0), (1.0, None), ("abc", 1.0), ("nan", 1.0), (float("inf"), 1.0),
    ])
    def test_invalid_coordinate(self, lat, lng):
        assert not is_valid_coordinate(lat, lng)

    def test_decompress_gzip(self):
        assert maybe_decompress(gzip.compress(b"payload"), "a.gpx.gz") == b"payload"

    def test_plain_data_passes_through(self):
        assert maybe_decompress(b"payload", "a.gpx") == b"payload"

    def test_corrupt_gzip_returns_none(self):
        assert maybe_decompress(b"\x1f\x8bnot really gzip", "a.fit.gz") is None


class TestGPXParser:
    """Tests for GPXParser."""

    @pytest.fixture
    def parser(self):
        return GPXParser()

    def test_parse_text(self, parser, sample_route):
        coords = parser.parse_coordinates(make_gpx(sample_route))

        assert coords == sample_route

    def test_parse_gzip_bytes(self, parser, sample_route):
        data = gzip.compress(make_gpx(sample_route).encode("utf-8"))

        assert parser.parse_coordinates(data, "activities/1.gpx.gz") == sample_route

    def test_attribute_order_does_not_matter(self, parser):
        content = '<trkpt lon="13.4" lat="52.5"/><trkpt lat="52.6" lon="13.5"></trkpt>'

        assert parser.parse_coordinates(content) == [(52.5, 13.4), (52.6, 13.5)]

    def test_invalid_points_skipped(self, parser):
        content = (
            '<trkpt lat="52.5" lon="13.4"/>'
            '<trkpt lat="abc" lon="13.4"/>'
            '<trkpt lat="NaN" lon="13.4"/>'
            '<trkpt lon="13.4"/>'
            '<trkpt lat="52.6" lon="13.5"/>'
        )

        assert parser.parse_coordinates(content) == [(52.5, 13.4), (52.6, 13.5)]

    def test_long_track_reduced(self, parser):
        points = [(45.0 + i * 1e-4, 7.0 + i * 1e-4) for i in range(1000)]

        coords = parser.parse_coordinates(make_gpx(points))

        assert len(coords) <= 200
        assert coords[-1] == points[-1]

    def test_garbage_yields_empty(self, parser):
        assert parser.parse_coordinates(b"\x00\x01\x02 not xml") == []
        assert parser.parse_coordinates(b"\x1f\x8b broken", "x.gpx.gz") == []


def _field(name, value, units=None):
    return SimpleNamespace(name=name, value=value, units=units)


def _fit_file(messages):
    fitfile = SimpleNamespace()
    fitfile.get_messages = lambda name=None: iter(messages)
    return fitfile


class TestFITParser:
    """Tests for FITParser with the FIT decoding library mocked."""

    @pytest.fixture
    def parser(self):
        return FITParser()

    def test_positions_converted_from_semicircles(self, parser):
        lat_semi = int(52.52 / SEMICIRCLES_TO_DEGREES)
        lng_semi = int(13.405 / SEMICIRCLES_TO_DEGREES)
        messages = [
            [_field("timestamp", 1), _field("position_lat", lat_semi, "semicircles"),
             _field("position_long", lng_semi, "semicircles")],
            [_field("timestamp", 2), _field("heart_rate", 120)],
            [_field("position_lat", lat_semi + 1000, "semicircles"),
             _field("position_long", lng_semi + 1000, "semicircles")],
        ]

        with patch("wrapped.integrations.fit_parser.fitparse.FitFile", return_value=_fit_file(messages)):
            coords = parser.parse_coordinates(b"fit-bytes", "activities/1.fit")

        assert len(coords) == 2
        assert coords[0][0] == pytest.approx(52.52, abs=1e-6)
        assert coords[0][1] == pytest.approx(13.405, abs=1e-6)

    def test_gzip_payload_decompressed_first(self, parser):
        messages = [[_field("position_lat", 10.0, "deg"), _field("position_long", 20.0, "deg")]]

        with patch("wrapped.integrations.fit_parser.fitparse.FitFile", return_value=_fit_file(messages)) as fit_file:
            coords = parser.parse_coordinates(gzip.compress(b"fit-bytes"), "activities/1.fit.gz")

        assert coords == [(10.0, 20.0)]
        assert fit_file.call_args[0][0].read() == b"fit-bytes"

    def test_parse_error_yields_empty(self, parser):
        with patch("wrapped.integrations.fit_parser.fitparse.FitFile", side_effect=Exception("bad header")):
            assert parser.parse_coordinates(b"junk", "activities/1.fit") == []

    def test_corrupt_gzip_yields_empty(self, parser):
        with patch("wrapped.integrations.fit_parser.fitparse.FitFile") as fit_file:
            assert parser.parse_coordinates(b"\x1f\x8bjunk", "activities/1.fit.gz") == []
            fit_file.assert_not_called()

    def test_real_decoder_rejects_garbage(self, parser):
        assert parser.parse_coordinates(b"definitely not a FIT file", "activities/1.fit") == []
