"""
Encoded polyline utilities.

Routes are stored in the Google encoded polyline format, the same compact
text encoding Strava uses for ``map.summary_polyline``. Coordinates are
(latitude, longitude) pairs in that order.
"""

import math
from typing import List, Sequence, Tuple

from wrapped.config import POLYLINE_PRECISION


def _round_half_away(value: float) -> int:
    # Matches the rounding used by JavaScript encoders so routes encode identically
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def encode_polyline(
    coordinates: Sequence[Tuple[float, float]],
    precision: int = POLYLINE_PRECISION,
) -> str:
    """
    Encode a sequence of (lat, lng) coordinates into a polyline string.

    Args:
        coordinates: Sequence of (latitude, longitude) tuples
        precision: Number of decimal places kept per coordinate

    Returns:
        Polyline encoded string
    """
    factor = 10 ** precision
    encoded = []
    prev_lat = 0
    prev_lng = 0

    for lat, lng in coordinates:
        lat_int = _round_half_away(lat * factor)
        lng_int = _round_half_away(lng * factor)

        encoded.extend(_encode_value(lat_int - prev_lat))
        encoded.extend(_encode_value(lng_int - prev_lng))

        prev_lat = lat_int
        prev_lng = lng_int

    return ''.join(encoded)


def decode_polyline(encoded: str, precision: int = POLYLINE_PRECISION) -> List[Tuple[float, float]]:
    """
    Decode a polyline string into a list of (lat, lng) coordinates.

    Args:
        encoded: Polyline encoded string
        precision: Number of decimal places the string was encoded with

    Returns:
        List of (latitude, longitude) tuples
    """
    factor = 10 ** precision
    coordinates = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        dlat, index = _decode_value(encoded, index)
        dlng, index = _decode_value(encoded, index)
        lat += dlat
        lng += dlng
        coordinates.append((lat / factor, lng / factor))

    return coordinates


def _decode_value(encoded: str, index: int) -> Tuple[int, int]:
    """Decode one delta starting at ``index``; return it with the next index."""
    result = 0
    shift = 0
    while index < len(encoded):
        b = ord(encoded[index]) - 63
        index += 1
        result |= (b & 0x1f) << shift
        shift += 5
        if b < 0x20:
            break

    value = ~(result >> 1) if (result & 1) else (result >> 1)
    return value, index


def _encode_value(value: int) -> List[str]:
    """Encode a single coordinate delta value."""
    value = ~(value << 1) if value < 0 else (value << 1)

    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1f)) + 63))
        value >>= 5

    chunks.append(chr(value + 63))
    return chunks
