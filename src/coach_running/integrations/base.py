"""
Base classes for external activity providers.

Token refresh is handled by the account layer; clients here only
check whether the credentials they were handed are still valid.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, List, Optional

from ..models.activity import ActivityRecord
from ..models.plans import WeekRange


class IntegrationError(Exception):
    """Base exception for integration errors."""

    def __init__(self, message: str, provider: str = "", code: Optional[str] = None):
        self.provider = provider
        self.code = code
        super().__init__(message)


class RateLimitError(IntegrationError):
    """Rate limit exceeded."""

    def __init__(
        self,
        message: str,
        provider: str,
        retry_after: Optional[int] = None,
    ):
        self.retry_after = retry_after
        super().__init__(message, provider, "rate_limit")


class AuthenticationError(IntegrationError):
    """Authentication failed or expired."""
    pass


@dataclass
class OAuthCredentials:
    """
    Access token handed to a provider client.

    Only what a read-only client sends is kept; refreshing and storing
    tokens belongs to the account layer.
    """
    provider: str
    access_token: str
    expires_at: Optional[datetime] = None
    token_type: str = "Bearer"

    @property
    def is_expired(self) -> bool:
        """Check if token is expired."""
        if self.expires_at is None:
            return False
        # Add 5 minute buffer
        return datetime.now() >= (self.expires_at - timedelta(minutes=5))

    @classmethod
    def from_dict(cls, data: dict) -> "OAuthCredentials":
        """Deserialize from a stored token payload (expires_at as epoch or ISO)."""
        expires_at = data.get("expires_at")
        if isinstance(expires_at, (int, float)):
            expires_at = datetime.fromtimestamp(expires_at)
        elif isinstance(expires_at, str):
            expires_at = datetime.fromisoformat(expires_at)
        return cls(
            provider=data.get("provider", "strava"),
            access_token=data["access_token"],
            expires_at=expires_at,
            token_type=data.get("token_type", "Bearer"),
        )

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"{self.token_type} {self.access_token}"}


# (athlete_id, week_range) -> activities of that athlete in that week
ActivityFetcher = Callable[[str, WeekRange], Awaitable[List[ActivityRecord]]]
