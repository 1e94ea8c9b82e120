"""
Race time prediction with Riegel's endurance model:

    T2 = T1 * (D2 / D1) ** 1.06

One reference performance gives an equivalent time at every standard
distance. Predictions far from the reference distance are the least
reliable, a marathon predicted from a 1500m especially.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from ..exceptions import InvalidInputError
from .pace_zones import format_pace
from .race_time import format_duration, parse_duration


RIEGEL_EXPONENT = 1.06

PREDICTION_DISTANCES_M: Dict[str, int] = {
    "1500m": 1500,
    "3000m": 3000,
    "5km": 5000,
    "10km": 10000,
    "half marathon": 21097,
    "marathon": 42195,
}


@dataclass(frozen=True)
class RacePrediction:
    """Predicted time at one distance."""
    label: str
    distance_m: int
    seconds: float

    @property
    def pace_seconds_per_km(self) -> float:
        return self.seconds / (self.distance_m / 1000)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "distance_m": self.distance_m,
            "seconds": round(self.seconds),
            "time_formatted": format_duration(round(self.seconds)),
            "pace_formatted": format_pace(self.pace_seconds_per_km),
        }


def predict_race_time(
    reference_distance_m: float,
    reference_seconds: float,
    target_distance_m: float,
) -> float:
    """
    Predict the time (seconds) at target_distance_m.

    Raises:
        InvalidInputError: If a distance or the reference time is not positive

    Example:
        >>> round(predict_race_time(5000, 1200, 10000))
        2502
    """
    if not reference_distance_m > 0:
        raise InvalidInputError("Reference distance must be positive", field="distance_m")
    if not reference_seconds > 0:
        raise InvalidInputError("Reference time must be positive", field="time")
    if not target_distance_m > 0:
        raise InvalidInputError("Target distance must be positive", field="target_distance_m")

    return reference_seconds * (target_distance_m / reference_distance_m) ** RIEGEL_EXPONENT


def predict_race_times(reference_distance_m: float, reference_time_text: str) -> List[RacePrediction]:
    """
    Predict every standard distance from one performance.

    Args:
        reference_distance_m: Distance of the known performance, in metres
        reference_time_text: Its time, in any form parse_duration accepts

    Returns:
        Predictions ordered from shortest to longest distance
    """
    reference_seconds = parse_duration(reference_time_text)
    return [
        RacePrediction(
            label=label,
            distance_m=distance_m,
            seconds=predict_race_time(reference_distance_m, reference_seconds, distance_m),
        )
        for label, distance_m in PREDICTION_DISTANCES_M.items()
    ]
