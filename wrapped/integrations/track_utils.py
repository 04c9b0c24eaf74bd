"""Helpers shared by the GPX and FIT track decoders."""

import gzip
import logging
import math
import zlib
from typing import Optional, Sequence

import numpy as np

from wrapped.config import MAX_ROUTE_POINTS

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"

Coordinate = tuple[float, float]


def is_gzip_name(filename: str) -> bool:
    return filename.lower().endswith(".gz")


def maybe_decompress(data: bytes, filename: str = "") -> Optional[bytes]:
    """Inflate gzip data when the payload or its name says it is compressed.

    Args:
        data: Raw side-file bytes
        filename: Archive entry name, used as a hint

    Returns:
        Decompressed bytes, the input unchanged when it is not compressed,
        or None if decompression failed
    """
    if not (data.startswith(GZIP_MAGIC) or is_gzip_name(filename)):
        return data
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        logger.warning(f"Could not decompress {filename or 'track data'}: {e}")
        return None


def is_valid_coordinate(lat, lng) -> bool:
    """Check that both components are present, numeric and finite."""
    if lat is None or lng is None:
        return False
    try:
        return bool(np.isfinite(float(lat)) and np.isfinite(float(lng)))
    except (TypeError, ValueError):
        return False


def reduce_points(coords: Sequence[Coordinate], max_points: int = MAX_ROUTE_POINTS) -> list[Coordinate]:
    """Downsample a track by fixed-stride selection.

    Keeps every Nth point, N = ceil(len / max_points), and always keeps the
    final point of the original track.

    Args:
        coords: Ordered (lat, lng) pairs
        max_points: Point cap

    Returns:
        Reduced list of coordinates
    """
    coords = list(coords)
    if len(coords) <= max_points:
        return coords

    step = math.ceil(len(coords) / max_points)
    indices = np.arange(0, len(coords), step)
    reduced = [coords[i] for i in indices]

    if indices[-1] != len(coords) - 1:
        if len(reduced) >= max_points:
            reduced[-1] = coords[-1]
        else:
            reduced.append(coords[-1])

    return reduced
