"""Shared fixtures."""

from datetime import date, datetime

import pytest

from coach_running.config import Settings
from coach_running.models.activity import ActivityRecord
from coach_running.models.plans import PlannedSession, PlannedWeek, SessionFeedback, WeekRange


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def week_range() -> WeekRange:
    # Monday 2024-03-04 .. Sunday 2024-03-10
    return WeekRange(start=date(2024, 3, 4), end=date(2024, 3, 10))


@pytest.fixture
def three_run_week() -> PlannedWeek:
    return PlannedWeek(
        week_number=1,
        sessions=(
            PlannedSession("Mardi", "Jogging", 40, "Facile", title="Footing"),
            PlannedSession("Jeudi", "Fractionné", 50, "Difficile", title="8x400m"),
            PlannedSession("Dimanche", "Sortie Longue", 75, "Modéré", title="Sortie longue"),
        ),
    )


@pytest.fixture
def week_with_feedback() -> PlannedWeek:
    return PlannedWeek(
        week_number=2,
        sessions=(
            PlannedSession("Lundi", "Jogging", 30, "Facile", feedback=SessionFeedback(True, rpe=4)),
            PlannedSession("Mercredi", "Fractionné", 45, "Difficile", feedback=SessionFeedback(True, rpe=8)),
            PlannedSession("Samedi", "Sortie Longue", 60, "Modéré", feedback=SessionFeedback(False, rpe=9)),
            PlannedSession("Dimanche", "Renforcement", 20, "Facile"),
        ),
    )


def run(day: int, minutes: float = 40.0, activity_type: str = "Run") -> ActivityRecord:
    """Activity on March <day> 2024, 07:30."""
    return ActivityRecord(
        activity_type=activity_type,
        distance_km=minutes / 6,
        moving_time_minutes=minutes,
        start_date=datetime(2024, 3, day, 7, 30),
    )


@pytest.fixture
def make_activity():
    return run
