"""
Data models for weekly adherence and adaptation.

This module defines the structures for:
- Measuring how a completed week matched its prescription
- Suggesting a bounded correction for the following week
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# Bounds of any volume correction, in percent
MIN_VOLUME_CHANGE = -50
MAX_VOLUME_CHANGE = 10


class Verdict(str, Enum):
    """Judgment of a completed week, from mildest to most severe."""
    MAINTAIN = "MAINTAIN"
    ADJUST = "ADJUST"
    REDUCE = "REDUCE"
    RECOVERY = "RECOVERY"

    @property
    def severity(self) -> int:
        return list(Verdict).index(self)

    def less_severe(self) -> "Verdict":
        """The verdict one level milder (MAINTAIN stays MAINTAIN)."""
        levels = list(Verdict)
        return levels[max(0, self.severity - 1)]


class Priority(str, Enum):
    """Priority of a suggestion item."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return list(Priority).index(self)


@dataclass(frozen=True)
class ComplianceReport:
    """
    How well a completed week matched its prescription.

    Computed on demand; callers may cache it but it is never the
    system of record.
    """
    week_number: int
    sessions_planned: int
    sessions_done: int
    compliance_percent: int  # 0-100
    avg_rpe: Optional[float] = None  # 1-10, None if no feedback
    cross_training_equivalent_minutes: float = 0.0
    summary_text: str = ""

    def __post_init__(self) -> None:
        if not 0 <= self.compliance_percent <= 100:
            raise ValueError(f"compliance_percent out of range: {self.compliance_percent}")
        if self.avg_rpe is not None and not 1 <= self.avg_rpe <= 10:
            raise ValueError(f"avg_rpe out of range: {self.avg_rpe}")
        if self.cross_training_equivalent_minutes < 0:
            raise ValueError("cross_training_equivalent_minutes must not be negative")

    @property
    def sessions_missed(self) -> int:
        return max(0, self.sessions_planned - self.sessions_done)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "sessions_planned": self.sessions_planned,
            "sessions_done": self.sessions_done,
            "compliance_percent": self.compliance_percent,
            "avg_rpe": self.avg_rpe,
            "cross_training_equivalent_minutes": round(self.cross_training_equivalent_minutes, 1),
            "summary_text": self.summary_text,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComplianceReport":
        return cls(
            week_number=int(data["week_number"]),
            sessions_planned=int(data["sessions_planned"]),
            sessions_done=int(data["sessions_done"]),
            compliance_percent=int(data["compliance_percent"]),
            avg_rpe=data.get("avg_rpe"),
            cross_training_equivalent_minutes=float(data.get("cross_training_equivalent_minutes", 0.0)),
            summary_text=data.get("summary_text", ""),
        )


@dataclass(frozen=True)
class SuggestionItem:
    """One ranked recommendation."""
    category: str
    priority: Priority
    title: str
    detail: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "priority": self.priority.value,
            "title": self.title,
            "detail": self.detail,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SuggestionItem":
        return cls(
            category=data["category"],
            priority=Priority(data["priority"]),
            title=data["title"],
            detail=data.get("detail", ""),
        )


@dataclass(frozen=True)
class AdaptationSuggestion:
    """
    Verdict and bounded volume correction for the next week.

    Pure output of the advisor; the engine never persists it.
    """
    verdict: Verdict
    volume_change_percent: int
    items: Tuple[SuggestionItem, ...] = field(default_factory=tuple)
    overall_message: str = ""

    def __post_init__(self) -> None:
        if not MIN_VOLUME_CHANGE <= self.volume_change_percent <= MAX_VOLUME_CHANGE:
            raise ValueError(
                f"volume_change_percent must be within [{MIN_VOLUME_CHANGE}, {MAX_VOLUME_CHANGE}], "
                f"got {self.volume_change_percent}"
            )
        object.__setattr__(self, "items", tuple(self.items))

    @property
    def volume_multiplier(self) -> float:
        return 1 + self.volume_change_percent / 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "verdict": self.verdict.value,
            "volume_change_percent": self.volume_change_percent,
            "items": [item.to_dict() for item in self.items],
            "overall_message": self.overall_message,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdaptationSuggestion":
        items: List[SuggestionItem] = [SuggestionItem.from_dict(i) for i in data.get("items", [])]
        return cls(
            verdict=Verdict(data["verdict"]),
            volume_change_percent=int(data["volume_change_percent"]),
            items=tuple(items),
            overall_message=data.get("overall_message", ""),
        )
