"""
Data models for training plans.

This module defines:
- Planned sessions and weeks (the prescription)
- Monday-anchored week date ranges
- The plan aggregate, which owns the one ZoneSet shared by all its weeks
"""

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..exceptions import InvalidInputError, InvariantViolationError, ZoneSetMismatchError
from ..metrics.pace_zones import ZoneSet
from ..metrics.race_time import parse_duration
from ..metrics.vma import PerformanceEstimate


logger = logging.getLogger(__name__)


WEEK_DAYS = ["Lundi", "Mardi", "Mercredi", "Jeudi", "Vendredi", "Samedi", "Dimanche"]

_DAY_INDEX = {
    "lundi": 0, "mardi": 1, "mercredi": 2, "jeudi": 3,
    "vendredi": 4, "samedi": 5, "dimanche": 6,
    "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
    "friday": 4, "saturday": 5, "sunday": 6,
}


def day_index(day_name: str) -> int:
    """Convert a French or English day name to 0 (Monday) .. 6 (Sunday)."""
    try:
        return _DAY_INDEX[day_name.strip().lower()]
    except KeyError:
        raise InvalidInputError(f"Unknown day of week: {day_name!r}", field="day_of_week") from None


class SessionType(str, Enum):
    """Session categories used by generated plans."""
    JOGGING = "Jogging"
    INTERVALS = "Fractionné"
    LONG_RUN = "Sortie Longue"
    RECOVERY = "Récupération"
    STRENGTH = "Renforcement"
    WALK_RUN = "Marche/Course"


class Intensity(str, Enum):
    """Prescribed intensity label of a session."""
    EASY = "Facile"
    MODERATE = "Modéré"
    HARD = "Difficile"


@dataclass(frozen=True)
class SessionFeedback:
    """Athlete feedback on a session (RPE 1 very easy .. 10 maximal)."""
    completed: bool
    rpe: Optional[int] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if self.rpe is not None and not 1 <= self.rpe <= 10:
            raise InvalidInputError(f"RPE must be between 1 and 10, got {self.rpe}", field="rpe")

    def to_dict(self) -> Dict[str, Any]:
        return {"completed": self.completed, "rpe": self.rpe, "notes": self.notes}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionFeedback":
        return cls(
            completed=bool(data.get("completed", False)),
            rpe=data.get("rpe"),
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class PlannedSession:
    """A prescribed session on a given day of the week."""
    day_of_week: str
    type: str
    duration_minutes: int
    intensity_label: str
    title: str = ""
    feedback: Optional[SessionFeedback] = None

    @property
    def day_index(self) -> int:
        return day_index(self.day_of_week)

    @property
    def is_hard(self) -> bool:
        return self.intensity_label == Intensity.HARD.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day_of_week,
            "type": self.type,
            "duration_minutes": self.duration_minutes,
            "intensity": self.intensity_label,
            "title": self.title,
            "feedback": self.feedback.to_dict() if self.feedback else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannedSession":
        """
        Parse a session from the stored plan shape.

        Duration is read from "duration_minutes" or, failing that, from
        duration text such as "45 min" or "1h15".
        """
        if data.get("duration_minutes") is not None:
            duration_minutes = int(data["duration_minutes"])
        else:
            duration_minutes = parse_duration(str(data.get("duration", ""))) // 60

        feedback = data.get("feedback")
        return cls(
            day_of_week=data.get("day") or data["day_of_week"],
            type=data.get("type", SessionType.JOGGING.value),
            duration_minutes=duration_minutes,
            intensity_label=data.get("intensity") or data.get("intensity_label") or Intensity.EASY.value,
            title=data.get("title", ""),
            feedback=SessionFeedback.from_dict(feedback) if feedback else None,
        )


@dataclass(frozen=True)
class PlannedWeek:
    """A week of prescribed sessions. Each day holds at most one session."""
    week_number: int
    sessions: Tuple[PlannedSession, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "sessions", tuple(self.sessions))

    def duplicate_days(self) -> List[str]:
        """Day names used by more than one session."""
        counts = Counter(session.day_index for session in self.sessions)
        return [WEEK_DAYS[index] for index, count in sorted(counts.items()) if count > 1]

    def ensure_unique_days(self) -> None:
        """
        Raises:
            InvariantViolationError: If two sessions share a day
        """
        duplicates = self.duplicate_days()
        if duplicates:
            raise InvariantViolationError(
                f"Week {self.week_number} has several sessions on {', '.join(duplicates)}",
                details={"week_number": self.week_number, "duplicate_days": duplicates},
            )

    def with_sessions(self, sessions: List[PlannedSession]) -> "PlannedWeek":
        return replace(self, sessions=tuple(sessions))

    @property
    def total_minutes(self) -> int:
        return sum(session.duration_minutes for session in self.sessions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "sessions": [session.to_dict() for session in self.sessions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannedWeek":
        return cls(
            week_number=int(data.get("week_number", data.get("weekNumber", 0))),
            sessions=tuple(PlannedSession.from_dict(s) for s in data.get("sessions", [])),
        )


@dataclass(frozen=True)
class WeekRange:
    """Monday to Sunday date range, both ends inclusive."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start.weekday() != 0:
            raise InvalidInputError(f"Week must start on a Monday, got {self.start}", field="start")
        if self.end != self.start + timedelta(days=6):
            raise InvalidInputError("Week must span Monday to Sunday", field="end")

    @classmethod
    def containing(cls, day: Union[date, datetime]) -> "WeekRange":
        """The week holding the given day."""
        if isinstance(day, datetime):
            day = day.date()
        monday = day - timedelta(days=day.weekday())
        return cls(start=monday, end=monday + timedelta(days=6))

    @classmethod
    def for_plan_week(cls, plan_start: date, week_number: int) -> "WeekRange":
        """
        Date range of a plan week (1-based).

        The plan start is snapped back to its Monday so week 1 is the
        calendar week the plan starts in.
        """
        if week_number < 1:
            raise InvalidInputError("Week numbers start at 1", field="week_number")
        first = cls.containing(plan_start)
        monday = first.start + timedelta(weeks=week_number - 1)
        return cls(start=monday, end=monday + timedelta(days=6))

    def contains(self, moment: Union[date, datetime]) -> bool:
        if isinstance(moment, datetime):
            moment = moment.date()
        return self.start <= moment <= self.end

    def date_for_day(self, day_name: str) -> date:
        return self.start + timedelta(days=day_index(day_name))

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class GenerationContext:
    """
    Everything the session-text generator needs for one week.

    Carries the plan's own ZoneSet; a week generated from this context
    can be attached back to the plan.
    """
    plan_id: str
    week_number: int
    week_range: WeekRange
    zone_set: ZoneSet
    performance: PerformanceEstimate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan_id": self.plan_id,
            "week_number": self.week_number,
            "week_range": self.week_range.to_dict(),
            "zone_set": self.zone_set.to_dict(),
            "performance": self.performance.to_dict(),
        }


@dataclass
class TrainingPlan:
    """
    Plan aggregate.

    The zone set is fixed at creation. Weeks are only attached through a
    GenerationContext whose zone set matches the plan's.
    """
    plan_id: str
    start_date: date
    performance: PerformanceEstimate
    zone_set: ZoneSet
    weeks: Dict[int, PlannedWeek] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "zone_set" and "zone_set" in self.__dict__:
            raise InvariantViolationError(
                f"Zone set of plan '{self.plan_id}' cannot be replaced; create a new plan"
            )
        super().__setattr__(name, value)

    def week_range(self, week_number: int) -> WeekRange:
        return WeekRange.for_plan_week(self.start_date, week_number)

    def generation_context(self, week_number: int) -> GenerationContext:
        """Context for generating one week against this plan's zone set."""
        return GenerationContext(
            plan_id=self.plan_id,
            week_number=week_number,
            week_range=self.week_range(week_number),
            zone_set=self.zone_set,
            performance=self.performance,
        )

    def ensure_zone_set(self, zone_set: ZoneSet) -> None:
        """
        Raises:
            ZoneSetMismatchError: If zone_set is not the plan's zone set
        """
        if zone_set.fingerprint != self.zone_set.fingerprint:
            raise ZoneSetMismatchError(
                plan_id=self.plan_id,
                expected_fingerprint=self.zone_set.fingerprint,
                actual_fingerprint=zone_set.fingerprint,
            )

    def attach_week(self, week: PlannedWeek, context: GenerationContext) -> None:
        """
        Record a week generated from the given context.

        Raises:
            InvariantViolationError: If the context belongs to another plan or
                week, or the week has duplicate days
            ZoneSetMismatchError: If the context's zone set is not the plan's
        """
        if context.plan_id != self.plan_id:
            raise InvariantViolationError(
                f"Context for plan '{context.plan_id}' used on plan '{self.plan_id}'"
            )
        if context.week_number != week.week_number:
            raise InvariantViolationError(
                f"Context for week {context.week_number} used for week {week.week_number}"
            )
        self.ensure_zone_set(context.zone_set)
        week.ensure_unique_days()

        if week.week_number in self.weeks:
            logger.info(f"Replacing week {week.week_number} of plan {self.plan_id}")
        self.weeks[week.week_number] = week

    def get_week(self, week_number: int) -> Optional[PlannedWeek]:
        return self.weeks.get(week_number)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan_id": self.plan_id,
            "start_date": self.start_date.isoformat(),
            "performance": self.performance.to_dict(),
            "zone_set": self.zone_set.to_dict(),
            "weeks": [self.weeks[n].to_dict() for n in sorted(self.weeks)],
            "created_at": self.created_at.isoformat(),
        }
