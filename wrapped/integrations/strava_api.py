"""Strava API activity source.

Fetches one year of activities for the authenticated athlete. OAuth token
exchange happens elsewhere; this client only needs a bearer token.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import requests

from wrapped.config import REQUEST_TIMEOUT_SECONDS, STRAVA_API_BASE_URL, STRAVA_PAGE_SIZE
from wrapped.models.activity import Activity

logger = logging.getLogger(__name__)


class StravaAPIError(Exception):
    """Raised when the Strava API returns an unexpected response."""


class UnauthorizedError(StravaAPIError):
    """Raised on HTTP 401, so callers can refresh the token and retry."""


class StravaClient:
    """Client for the Strava athlete activities endpoint."""

    def __init__(self, access_token: str, base_url: str = STRAVA_API_BASE_URL):
        """Initialize Strava client.

        Args:
            access_token: OAuth bearer token
            base_url: API root
        """
        self.base_url = base_url
        self.session = requests.Session()
        self.set_access_token(access_token)

    def set_access_token(self, access_token: str) -> None:
        self.access_token = access_token
        self.session.headers.update({"Authorization": f"Bearer {access_token}"})

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a GET request.

        Raises:
            UnauthorizedError: On HTTP 401
            StravaAPIError: On any other failure
        """
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
        except requests.RequestException as e:
            logger.error(f"Request error: {e}")
            raise StravaAPIError(f"Failed to fetch activities: {e}") from e

        if response.status_code == 401:
            logger.warning("Strava rejected the access token")
            raise UnauthorizedError("UNAUTHORIZED")
        if response.status_code != 200:
            logger.warning(f"Request failed with status {response.status_code}")
            raise StravaAPIError(f"Failed to fetch activities (HTTP {response.status_code})")

        return response.json()

    def get_activity_payloads(self, year: int, per_page: int = STRAVA_PAGE_SIZE) -> List[Dict[str, Any]]:
        """Fetch raw activity payloads started within ``year``.

        Pages are requested until an empty or short page is returned.
        """
        after = int(datetime(year, 1, 1).timestamp())
        before = int(datetime(year, 12, 31, 23, 59, 59).timestamp())

        payloads: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch = self._get(
                "/athlete/activities",
                params={"after": after, "before": before, "page": page, "per_page": per_page},
            )
            if not batch:
                break
            payloads.extend(batch)
            if len(batch) < per_page:
                break
            page += 1

        logger.info(f"Fetched {len(payloads)} activities for {year} in {page} page(s)")
        return payloads

    def get_activities(self, year: int) -> List[Activity]:
        """Fetch the athlete's activities for ``year`` as Activity records."""
        activities = []
        for payload in self.get_activity_payloads(year):
            try:
                activities.append(Activity.from_api(payload))
            except ValueError as e:
                logger.warning(f"Skipping malformed activity {payload.get('id')}: {e}")
        return activities


def fetch_year_with_refresh(
    client: StravaClient,
    year: int,
    refresh: Callable[[], str],
) -> List[Activity]:
    """Fetch a year of activities, refreshing the token at most once.

    Args:
        client: Strava client holding the current token
        year: Year to fetch
        refresh: Callback returning a new access token

    Raises:
        UnauthorizedError: If the refreshed token is rejected too
        StravaAPIError: On any other failure
    """
    try:
        return client.get_activities(year)
    except UnauthorizedError:
        logger.info("Access token expired, refreshing")
        client.set_access_token(refresh())
        return client.get_activities(year)
