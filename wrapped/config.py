"""Centralized configuration for the wrapped pipeline."""

import os
from pathlib import Path

# Base paths
PROJECT_ROOT = Path(__file__).parent.parent
EXPORTS_DIR = Path(os.environ.get("WRAPPED_EXPORTS_DIR", str(PROJECT_ROOT / "exports")))

# Logging
LOG_LEVEL = os.environ.get("WRAPPED_LOG_LEVEL", "INFO")

# Route handling
MAX_ROUTE_POINTS = 200
POLYLINE_PRECISION = 5

# Aggregation
TOP_ROUTES_LIMIT = 10
TOP_LOCATIONS_LIMIT = 5
SPEED_ACTIVITY_TYPES = ("Run", "Ride", "VirtualRide", "VirtualRun")
MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# Years outside (MIN_VALID_YEAR, current year + 1] are treated as corrupt
MIN_VALID_YEAR = 2000

# Import defaults
DEFAULT_ACTIVITY_TYPE = "Workout"
DEFAULT_FIRST_NAME = "Strava"
DEFAULT_LAST_NAME = "Athlete"
DEFAULT_USERNAME = "athlete"

# Strava API settings
STRAVA_API_BASE_URL = "https://www.strava.com/api/v3"
STRAVA_ACCESS_TOKEN = os.environ.get("STRAVA_ACCESS_TOKEN")
STRAVA_PAGE_SIZE = 200
REQUEST_TIMEOUT_SECONDS = 30
