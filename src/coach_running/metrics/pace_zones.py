"""
Pace zone calculations from VMA.

Each zone is a fixed fraction of VMA:
- Récupération:        60%
- EF (fondamentale):   67%
- EA (active):         77%
- Seuil:               87%
- VMA:                100%
- Race paces: 5k 95%, 10k 90%, semi 85%, marathon 80%

A ZoneSet is always produced whole from a single VMA value and is
frozen afterwards. Every week of a plan reads the same ZoneSet.
"""

import hashlib
import json
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Tuple

from ..exceptions import InvalidInputError, InvariantViolationError


ZONE_FACTORS: Dict[str, float] = {
    "recovery": 0.60,
    "ef": 0.67,
    "ea": 0.77,
    "seuil": 0.87,
    "vma": 1.00,
    "race5k": 0.95,
    "race10k": 0.90,
    "raceSemi": 0.85,
    "raceMarathon": 0.80,
}

# Slow to fast; paces must strictly decrease along this chain
ORDERED_TRAINING_ZONES: Tuple[str, ...] = ("recovery", "ef", "ea", "seuil", "vma")


def format_pace(seconds_per_km: float) -> str:
    """Format a pace as m:ss (per km)."""
    total = int(round(seconds_per_km))
    minutes, seconds = divmod(total, 60)
    return f"{minutes}:{seconds:02d}"


@dataclass(frozen=True)
class PaceZone:
    """A named training intensity with its speed and pace."""
    name: str
    speed_kmh: float
    pace_seconds_per_km: float

    def __post_init__(self) -> None:
        if not self.speed_kmh > 0:
            raise InvalidInputError(f"Zone '{self.name}' speed must be positive", field="speed_kmh")
        if not math.isclose(self.pace_seconds_per_km, 3600 / self.speed_kmh, rel_tol=1e-12):
            raise InvariantViolationError(
                f"Zone '{self.name}' pace does not match its speed",
                details={"speed_kmh": self.speed_kmh, "pace_seconds_per_km": self.pace_seconds_per_km},
            )

    @classmethod
    def from_speed(cls, name: str, speed_kmh: float) -> "PaceZone":
        return cls(name=name, speed_kmh=speed_kmh, pace_seconds_per_km=3600 / speed_kmh)

    @property
    def pace_formatted(self) -> str:
        return format_pace(self.pace_seconds_per_km)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "speed_kmh": self.speed_kmh,
            "pace_seconds_per_km": self.pace_seconds_per_km,
            "pace_formatted": self.pace_formatted,
        }


@dataclass(frozen=True, eq=False)
class ZoneSet:
    """
    Immutable set of every pace zone derived from one VMA value.

    Attributes:
        vma_kmh: The VMA the zones were derived from
        zones: Read-only mapping of zone name to PaceZone
    """
    vma_kmh: float
    zones: Mapping[str, PaceZone]

    def __post_init__(self) -> None:
        missing = [name for name in ZONE_FACTORS if name not in self.zones]
        if missing:
            raise InvariantViolationError(
                f"Zone set is missing zones: {', '.join(missing)}",
                details={"missing": missing},
            )
        paces = [self.zones[name].pace_seconds_per_km for name in ORDERED_TRAINING_ZONES]
        if any(slower <= faster for slower, faster in zip(paces, paces[1:])):
            raise InvariantViolationError(
                "Zone paces must strictly decrease from recovery to vma",
                details={name: pace for name, pace in zip(ORDERED_TRAINING_ZONES, paces)},
            )
        object.__setattr__(self, "zones", MappingProxyType(dict(self.zones)))

    def __getitem__(self, name: str) -> PaceZone:
        return self.zones[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.zones)

    def __len__(self) -> int:
        return len(self.zones)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZoneSet):
            return NotImplemented
        return self.fingerprint == other.fingerprint

    def __hash__(self) -> int:
        return hash(self.fingerprint)

    @property
    def recovery(self) -> PaceZone:
        return self.zones["recovery"]

    @property
    def ef(self) -> PaceZone:
        return self.zones["ef"]

    @property
    def ea(self) -> PaceZone:
        return self.zones["ea"]

    @property
    def seuil(self) -> PaceZone:
        return self.zones["seuil"]

    @property
    def vma(self) -> PaceZone:
        return self.zones["vma"]

    @property
    def fingerprint(self) -> str:
        """Stable digest of the serialized value."""
        canonical = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for embedding into a plan's generation context."""
        return {
            "vma_kmh": self.vma_kmh,
            "zones": {name: zone.to_dict() for name, zone in self.zones.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ZoneSet":
        """Restore a persisted zone set without recomputing it from VMA."""
        zones = {
            name: PaceZone.from_speed(name, float(zone["speed_kmh"]))
            for name, zone in data["zones"].items()
        }
        return cls(vma_kmh=float(data["vma_kmh"]), zones=zones)


def compute_zones(vma_kmh: float) -> ZoneSet:
    """
    Compute the complete zone set for a VMA.

    Args:
        vma_kmh: Maximal aerobic speed in km/h

    Returns:
        ZoneSet containing every zone of ZONE_FACTORS

    Raises:
        InvalidInputError: If vma_kmh is not a positive finite number

    Example:
        >>> compute_zones(15.0).seuil.pace_formatted
        '4:36'
    """
    if vma_kmh is None or not math.isfinite(vma_kmh) or vma_kmh <= 0:
        raise InvalidInputError(f"VMA must be a positive number, got {vma_kmh}", field="vma_kmh")

    zones = {
        name: PaceZone.from_speed(name, vma_kmh * factor)
        for name, factor in ZONE_FACTORS.items()
    }
    return ZoneSet(vma_kmh=vma_kmh, zones=zones)
