"""FIT file parser for extracting route coordinates from activity recordings."""

import io
import logging
from typing import Any, Dict, List

import fitparse

from wrapped.integrations.track_utils import (
    Coordinate,
    is_valid_coordinate,
    maybe_decompress,
    reduce_points,
)

logger = logging.getLogger(__name__)

# FIT positions are stored as 32-bit semicircles
SEMICIRCLES_TO_DEGREES = 180.0 / 2 ** 31


class FITParser:
    """Parser for Garmin FIT files (plain or gzip compressed)."""

    def __init__(self, check_crc: bool = False):
        """Initialize FIT parser.

        Args:
            check_crc: Reject files whose CRC does not match. Exports often
                carry truncated recordings, so this is off by default.
        """
        self.check_crc = check_crc

    def parse_coordinates(self, data: bytes, filename: str = "") -> List[Coordinate]:
        """Extract the ordered (lat, lng) track of a FIT recording.

        Never raises: corrupt, truncated or undecodable data yields an empty
        list.

        Args:
            data: Raw FIT bytes (optionally gzip compressed)
            filename: Archive entry name, used in log messages

        Returns:
            List of (latitude, longitude) tuples, reduced to the point cap
        """
        raw = maybe_decompress(data, filename)
        if raw is None:
            return []

        try:
            records = self.read_records(raw)
        except Exception as e:
            logger.warning(f"Error parsing FIT file {filename or '<memory>'}: {e}")
            return []

        coords = []
        for record in records:
            lat = record.get("position_lat")
            lng = record.get("position_long")
            if not is_valid_coordinate(lat, lng):
                continue
            coords.append((float(lat), float(lng)))

        logger.debug(f"Parsed FIT file {filename} with {len(coords)} positions")
        return reduce_points(coords)

    def read_records(self, raw: bytes) -> List[Dict[str, Any]]:
        """Decode every ``record`` message into a dict of field values.

        Position fields are converted from semicircles to degrees.
        """
        fitfile = fitparse.FitFile(io.BytesIO(raw), check_crc=self.check_crc)

        records = []
        for message in fitfile.get_messages("record"):
            record = {}
            for field in message:
                if not field.name or field.value is None:
                    continue
                if field.name in ("position_lat", "position_long"):
                    record[field.name] = self._to_degrees(field.value, field.units)
                else:
                    record[field.name] = field.value
            records.append(record)
        return records

    def _to_degrees(self, value, units):
        """Convert a FIT position to degrees.

        Args:
            value: Position value from fitparse
            units: Units reported for the field

        Returns:
            Degrees as float, or None if the value is not numeric
        """
        if not isinstance(value, (int, float)):
            return None
        if units == "semicircles":
            return value * SEMICIRCLES_TO_DEGREES
        return float(value)
