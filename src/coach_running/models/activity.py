"""Activity records reported by fitness-tracking providers."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class ActivityRecord:
    """
    A completed activity, read-only.

    Attributes:
        activity_type: Provider sport type, e.g. "Run", "Ride", "Swim"
        distance_km: Distance covered
        moving_time_minutes: Moving time
        start_date: Local start time of the activity
    """
    activity_type: str
    distance_km: float
    moving_time_minutes: float
    start_date: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activity_type": self.activity_type,
            "distance_km": self.distance_km,
            "moving_time_minutes": self.moving_time_minutes,
            "start_date": self.start_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityRecord":
        start_date = data["start_date"]
        if isinstance(start_date, str):
            start_date = datetime.fromisoformat(start_date.replace("Z", "+00:00"))
        return cls(
            activity_type=data["activity_type"],
            distance_km=float(data.get("distance_km", 0.0)),
            moving_time_minutes=float(data.get("moving_time_minutes", 0.0)),
            start_date=start_date,
        )

    @classmethod
    def from_strava(cls, data: Dict[str, Any]) -> "ActivityRecord":
        """
        Parse a Strava /athlete/activities item.

        The local start time is preferred so an early Monday run is not
        pushed into the previous week by the UTC offset.
        """
        start = data.get("start_date_local") or data["start_date"]
        return cls(
            activity_type=data.get("sport_type") or data.get("type") or "Workout",
            distance_km=(data.get("distance") or 0.0) / 1000,
            moving_time_minutes=(data.get("moving_time") or 0) / 60,
            start_date=datetime.fromisoformat(start.replace("Z", "+00:00")),
        )
