"""
VMA (maximal aerobic speed) estimation from race results.

A race run at distance D is held at a known fraction of VMA:
- 5 km        ~ 95% VMA
- 10 km       ~ 90% VMA
- Half        ~ 85% VMA
- Marathon    ~ 80% VMA

Shorter races are trusted more: pacing and fueling errors distort
longer efforts. When several results exist, the two most trusted are
blended 60/40 and the rest are ignored.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import InvalidFormatError, InvalidInputError
from .race_time import parse_duration


logger = logging.getLogger(__name__)


SUPPORTED_DISTANCES_KM = (5.0, 10.0, 21.1, 42.195)

DISTANCE_LABELS = {
    5.0: "5km",
    10.0: "10km",
    21.1: "half marathon",
    42.195: "marathon",
}

# Weights applied to the two most trusted estimates
PRIMARY_WEIGHT = 0.6
SECONDARY_WEIGHT = 0.4


def race_factor(distance_km: float) -> float:
    """Fraction of VMA sustainable over a race of the given distance."""
    if distance_km <= 5:
        return 0.95
    if distance_km <= 10:
        return 0.90
    if distance_km <= 21.1:
        return 0.85
    return 0.80


class RunningLevel(str, Enum):
    """Self-declared running level from the questionnaire."""
    BEGINNER = "Débutant (0-1 an)"
    INTERMEDIATE = "Intermédiaire (Régulier)"
    CONFIRMED = "Confirmé (Compétition)"
    EXPERT = "Expert (Performance)"


# Default VMA (km/h) when the athlete gave no usable race time
LEVEL_DEFAULT_VMA: Dict[RunningLevel, float] = {
    RunningLevel.BEGINNER: 11.0,
    RunningLevel.INTERMEDIATE: 13.5,
    RunningLevel.CONFIRMED: 15.5,
    RunningLevel.EXPERT: 17.5,
}
UNKNOWN_LEVEL_VMA = 12.5


@dataclass(frozen=True)
class RaceResult:
    """A self-reported race result."""
    distance_km: float
    duration_seconds: int
    raw_text: str

    def __post_init__(self) -> None:
        if self.distance_km not in SUPPORTED_DISTANCES_KM:
            raise InvalidInputError(
                f"Unsupported race distance: {self.distance_km} km",
                field="distance_km",
            )
        if self.duration_seconds <= 0:
            raise InvalidInputError(
                "Race duration must be positive",
                field="duration_seconds",
            )

    @classmethod
    def from_text(cls, distance_km: float, text: str) -> "RaceResult":
        """Build a result from questionnaire text such as "25:00" or "3h45"."""
        return cls(
            distance_km=distance_km,
            duration_seconds=parse_duration(text),
            raw_text=text.strip(),
        )

    @property
    def avg_speed_kmh(self) -> float:
        return self.distance_km / (self.duration_seconds / 3600)

    @property
    def vma_kmh(self) -> float:
        return self.avg_speed_kmh / race_factor(self.distance_km)

    @property
    def priority(self) -> int:
        """1 for 5km up to 4 for the marathon (lower is more trusted)."""
        return SUPPORTED_DISTANCES_KM.index(self.distance_km) + 1

    @property
    def label(self) -> str:
        return f"{DISTANCE_LABELS[self.distance_km]} in {self.raw_text}"


@dataclass(frozen=True)
class PerformanceEstimate:
    """
    Speed-capacity estimate anchoring every training pace of a plan.

    Never mutated: new race data means a new estimate and a new plan.
    """
    vma_kmh: float
    source_label: str

    def __post_init__(self) -> None:
        if not self.vma_kmh > 0:
            raise InvalidInputError("VMA must be positive", field="vma_kmh")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vma_kmh": round(self.vma_kmh, 2),
            "source_label": self.source_label,
        }


@dataclass(frozen=True)
class RecentRaceTimes:
    """
    Questionnaire race times, one optional text field per distance.

    Attributes:
        distance_5km: 5 km time text, e.g. "22:30"
        distance_10km: 10 km time text, e.g. "48:10"
        distance_half_marathon: Half marathon time text, e.g. "1:45:00"
        distance_marathon: Marathon time text, e.g. "3h45"
    """
    distance_5km: Optional[str] = None
    distance_10km: Optional[str] = None
    distance_half_marathon: Optional[str] = None
    distance_marathon: Optional[str] = None

    @property
    def has_5km(self) -> bool:
        return bool(self.distance_5km and self.distance_5km.strip())

    @property
    def has_10km(self) -> bool:
        return bool(self.distance_10km and self.distance_10km.strip())

    @property
    def has_half_marathon(self) -> bool:
        return bool(self.distance_half_marathon and self.distance_half_marathon.strip())

    @property
    def has_marathon(self) -> bool:
        return bool(self.distance_marathon and self.distance_marathon.strip())

    def results(self) -> List[RaceResult]:
        """
        Parse every present field into a RaceResult.

        Fields that fail to parse are logged and dropped; the others
        are still returned.
        """
        candidates = [
            (self.has_5km, 5.0, self.distance_5km),
            (self.has_10km, 10.0, self.distance_10km),
            (self.has_half_marathon, 21.1, self.distance_half_marathon),
            (self.has_marathon, 42.195, self.distance_marathon),
        ]

        results: List[RaceResult] = []
        for present, distance_km, text in candidates:
            if not present:
                continue
            try:
                results.append(RaceResult.from_text(distance_km, text))
            except (InvalidFormatError, InvalidInputError) as e:
                logger.warning(f"Ignoring {DISTANCE_LABELS[distance_km]} race time {text!r}: {e.message}")
        return results

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecentRaceTimes":
        """Parse the questionnaire shape (camelCase or snake_case keys)."""
        return cls(
            distance_5km=data.get("distance5km", data.get("distance_5km")),
            distance_10km=data.get("distance10km", data.get("distance_10km")),
            distance_half_marathon=data.get(
                "distanceHalfMarathon", data.get("distance_half_marathon")
            ),
            distance_marathon=data.get("distanceMarathon", data.get("distance_marathon")),
        )


def estimate_vma(results: Sequence[RaceResult]) -> Optional[PerformanceEstimate]:
    """
    Combine race results into a single VMA estimate.

    Args:
        results: Race results in any order

    Returns:
        PerformanceEstimate, or None when there is no result

    Example:
        >>> estimate_vma([RaceResult.from_text(5, "25:00")]).vma_kmh
        12.631578947368421
    """
    if not results:
        return None

    ranked = sorted(results, key=lambda r: r.priority)

    if len(ranked) == 1:
        only = ranked[0]
        return PerformanceEstimate(vma_kmh=only.vma_kmh, source_label=only.label)

    top1, top2 = ranked[0], ranked[1]
    return PerformanceEstimate(
        vma_kmh=top1.vma_kmh * PRIMARY_WEIGHT + top2.vma_kmh * SECONDARY_WEIGHT,
        source_label=f"average of {top1.label} and {top2.label}",
    )


def estimate_vma_from_race_times(race_times: Optional[RecentRaceTimes]) -> Optional[PerformanceEstimate]:
    """Estimate VMA from questionnaire race times, None if none is usable."""
    if race_times is None:
        return None
    return estimate_vma(race_times.results())


def estimate_vma_from_level(level: Optional[RunningLevel]) -> PerformanceEstimate:
    """Default VMA for athletes without usable race data."""
    vma = LEVEL_DEFAULT_VMA.get(level, UNKNOWN_LEVEL_VMA) if level else UNKNOWN_LEVEL_VMA
    level_name = level.value if level else "unknown"
    return PerformanceEstimate(vma_kmh=vma, source_label=f"estimate for level {level_name}")


# ============================================================================
# Field tests
# ============================================================================

class FieldTest(str, Enum):
    """
    Track tests measuring VMA directly.

    - COOPER: metres covered in 12 minutes
    - DEMI_COOPER: metres covered in 6 minutes
    - VAMEVAL: speed (km/h) of the last completed stage
    - TIMED_DISTANCE: time over a known distance (metres)
    """
    COOPER = "cooper"
    DEMI_COOPER = "demicooper"
    VAMEVAL = "vameval"
    TIMED_DISTANCE = "time"


COOPER_MINUTES = 12
DEMI_COOPER_MINUTES = 6

# (longest distance in metres, fraction of VMA held over it)
TIMED_DISTANCE_FACTORS = (
    (1500, 1.0),
    (3000, 0.95),
    (5000, 0.90),
    (10000, 0.85),
)


def timed_distance_factor(distance_m: float) -> float:
    """Fraction of VMA held over a timed test; race factors beyond 10 km."""
    for longest, factor in TIMED_DISTANCE_FACTORS:
        if distance_m <= longest:
            return factor
    return race_factor(distance_m / 1000)


def _speed_over(distance_m: float, minutes: float) -> float:
    return (distance_m / 1000) / (minutes / 60)


def estimate_vma_from_field_test(
    test: FieldTest,
    value: float,
    duration_text: Optional[str] = None,
) -> PerformanceEstimate:
    """
    Estimate VMA from a field test, rounded to 0.1 km/h.

    Cooper and demi-Cooper are run at VMA for their whole duration, so
    VMA is the average speed: distance / 200 and distance / 100.

    Args:
        test: Which protocol was run
        value: Metres for COOPER, DEMI_COOPER and TIMED_DISTANCE,
            km/h for VAMEVAL
        duration_text: Time over the distance, TIMED_DISTANCE only

    Raises:
        InvalidInputError: If value is not positive or the duration is missing
        InvalidFormatError: If duration_text cannot be parsed

    Example:
        >>> estimate_vma_from_field_test(FieldTest.COOPER, 3000).vma_kmh
        15.0
    """
    test = FieldTest(test)
    if not value > 0:
        raise InvalidInputError(f"{test.value} result must be positive", field="value")

    if test == FieldTest.COOPER:
        vma = _speed_over(value, COOPER_MINUTES)
        label = f"Cooper test: {value:.0f} m"
    elif test == FieldTest.DEMI_COOPER:
        vma = _speed_over(value, DEMI_COOPER_MINUTES)
        label = f"demi-Cooper test: {value:.0f} m"
    elif test == FieldTest.VAMEVAL:
        vma = value
        label = f"VAMEVAL: last stage {value:g} km/h"
    else:
        if not duration_text or not duration_text.strip():
            raise InvalidInputError("A timed test needs the time run", field="duration")
        seconds = parse_duration(duration_text)
        if seconds <= 0:
            raise InvalidInputError("Test duration must be positive", field="duration")
        vma = _speed_over(value, seconds / 60) / timed_distance_factor(value)
        label = f"{value:.0f} m in {duration_text.strip()}"

    logger.debug(f"Field test {test.value}: {label} -> {vma:.2f} km/h")
    return PerformanceEstimate(vma_kmh=round(vma, 1), source_label=label)
