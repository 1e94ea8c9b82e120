"""
Strava integration for weekly activity retrieval.

Implements:
- Activity listing over a date range (paginated)
- An activity feed usable by the compliance analyzer

Failures are raised as-is; no retry or backoff happens here.
"""

import logging
from datetime import datetime, time, timedelta
from typing import Any, Callable, Dict, List, Optional

import httpx

from ..config import get_settings
from ..models.activity import ActivityRecord
from ..models.plans import WeekRange
from .base import (
    AuthenticationError,
    IntegrationError,
    OAuthCredentials,
    RateLimitError,
)


logger = logging.getLogger(__name__)

# Strava caps per_page at 200
MAX_PER_PAGE = 200


class StravaClient:
    """
    Client for the Strava API v3 activity endpoints.

    Usage:
        async with StravaClient(credentials) as client:
            activities = await client.get_activities(start, end)
    """

    provider = "strava"

    def __init__(
        self,
        credentials: OAuthCredentials,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if credentials.provider != "strava":
            raise ValueError("Credentials must be for Strava")
        settings = get_settings()
        self.credentials = credentials
        self.base_url = base_url or settings.strava_base_url
        self._timeout = timeout if timeout is not None else settings.strava_timeout_seconds
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None and not self._http_client.is_closed:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "StravaClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make a single API request.

        Raises:
            AuthenticationError: If the token is expired or rejected
            RateLimitError: If Strava answers 429
            IntegrationError: For other API errors
        """
        if self.credentials.is_expired:
            raise AuthenticationError("Strava token expired. Please reconnect Strava.", "strava")

        client = await self._get_client()
        response = await client.request(
            method,
            f"{self.base_url}{endpoint}",
            headers=self.credentials.auth_headers(),
            params=params,
        )

        if response.status_code == 200:
            return response.json()

        if response.status_code == 401:
            raise AuthenticationError(
                "Token expired or invalid. Please re-authenticate.",
                "strava",
            )

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                "Strava rate limit exceeded. Please wait before retrying.",
                "strava",
                int(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        try:
            error_data = response.json()
            error_msg = error_data.get("message", str(error_data))
        except ValueError:
            error_msg = response.text or f"HTTP {response.status_code}"

        raise IntegrationError(
            f"Strava API error: {error_msg}",
            "strava",
            str(response.status_code),
        )

    async def get_activities(
        self,
        start_date: datetime,
        end_date: datetime,
        per_page: int = MAX_PER_PAGE,
    ) -> List[ActivityRecord]:
        """
        Get every activity started between two instants.

        Args:
            start_date: Start of range (exclusive "after" bound)
            end_date: End of range (exclusive "before" bound)
            per_page: Page size (max 200)

        Returns:
            Activities in the order Strava returns them
        """
        per_page = min(per_page, MAX_PER_PAGE)
        records: List[ActivityRecord] = []
        page = 1

        while True:
            params = {
                "after": int(start_date.timestamp()),
                "before": int(end_date.timestamp()),
                "per_page": per_page,
                "page": page,
            }
            response = await self._request("GET", "/athlete/activities", params)
            if not isinstance(response, list):
                raise IntegrationError("Unexpected activity list payload", "strava")

            for data in response:
                try:
                    records.append(ActivityRecord.from_strava(data))
                except (KeyError, ValueError, TypeError) as e:
                    logger.warning(f"Skipping malformed Strava activity {data.get('id')}: {e}")

            if len(response) < per_page:
                break
            page += 1

        return records


class StravaActivityFeed:
    """
    Activity fetcher backed by Strava.

    Args:
        credentials_for: Returns the Strava credentials of an athlete
        transport: Optional httpx transport (tests)
    """

    def __init__(
        self,
        credentials_for: Callable[[str], OAuthCredentials],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._credentials_for = credentials_for
        self._transport = transport

    async def __call__(self, athlete_id: str, week_range: WeekRange) -> List[ActivityRecord]:
        credentials = self._credentials_for(athlete_id)
        # Pad one day on each side; the analyzer filters on local dates
        start = datetime.combine(week_range.start - timedelta(days=1), time.min)
        end = datetime.combine(week_range.end + timedelta(days=2), time.min)

        async with StravaClient(credentials, transport=self._transport) as client:
            records = await client.get_activities(start, end)

        logger.debug(f"Fetched {len(records)} Strava activities for athlete {athlete_id}")
        return records
