"""External activity providers."""

from .base import (
    ActivityFetcher,
    AuthenticationError,
    IntegrationError,
    OAuthCredentials,
    RateLimitError,
)
from .strava import StravaActivityFeed, StravaClient

__all__ = [
    "ActivityFetcher",
    "AuthenticationError",
    "IntegrationError",
    "OAuthCredentials",
    "RateLimitError",
    "StravaActivityFeed",
    "StravaClient",
]
