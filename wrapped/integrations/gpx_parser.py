"""GPX track parser for extracting route coordinates."""

import logging
import re
from typing import Union

from wrapped.integrations.track_utils import (
    Coordinate,
    is_valid_coordinate,
    maybe_decompress,
    reduce_points,
)

logger = logging.getLogger(__name__)

# One opening track point tag; attributes may appear in any order
TRKPT_PATTERN = re.compile(r"<trkpt\b([^>]*)>", re.IGNORECASE)
LAT_PATTERN = re.compile(r"\blat\s*=\s*[\"']([^\"']*)[\"']")
LON_PATTERN = re.compile(r"\blon\s*=\s*[\"']([^\"']*)[\"']")


class GPXParser:
    """Parser for GPX tracks (plain or gzip compressed)."""

    def parse_coordinates(self, content: Union[str, bytes], filename: str = "") -> list[Coordinate]:
        """Extract the ordered (lat, lng) track of a GPX document.

        Never raises: malformed or undecodable input yields an empty list.

        Args:
            content: GPX text or raw bytes (optionally gzip compressed)
            filename: Archive entry name, used in log messages

        Returns:
            List of (latitude, longitude) tuples, reduced to the point cap
        """
        try:
            text = self._to_text(content, filename)
            if text is None:
                return []
            return reduce_points(self.scan_track_points(text))
        except Exception as e:
            logger.warning(f"Error parsing GPX file {filename or '<memory>'}: {e}")
            return []

    def scan_track_points(self, text: str) -> list[Coordinate]:
        """Scan every ``trkpt`` tag, skipping points without finite lat/lon."""
        coords = []
        for match in TRKPT_PATTERN.finditer(text):
            attributes = match.group(1)
            lat_match = LAT_PATTERN.search(attributes)
            lon_match = LON_PATTERN.search(attributes)
            if not lat_match or not lon_match:
                continue
            if not is_valid_coordinate(lat_match.group(1), lon_match.group(1)):
                continue
            coords.append((float(lat_match.group(1)), float(lon_match.group(1))))
        return coords

    def _to_text(self, content: Union[str, bytes], filename: str):
        if isinstance(content, str):
            return content
        data = maybe_decompress(content, filename)
        if data is None:
            return None
        return data.decode("utf-8", errors="replace")
