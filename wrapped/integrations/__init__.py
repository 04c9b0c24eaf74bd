"""Track decoders and external activity sources."""

from .polyline import decode_polyline, encode_polyline
from .strava_api import StravaAPIError, StravaClient, UnauthorizedError

__all__ = [
    "decode_polyline",
    "encode_polyline",
    "StravaAPIError",
    "StravaClient",
    "UnauthorizedError",
]
