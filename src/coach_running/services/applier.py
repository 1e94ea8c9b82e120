"""
Apply an adaptation suggestion to a planned week.
"""

import logging
from dataclasses import replace
from typing import List

from ..models.adherence import AdaptationSuggestion, Verdict
from ..models.plans import Intensity, PlannedSession, PlannedWeek


logger = logging.getLogger(__name__)


ROUNDING_STEP_MINUTES = 5
MIN_SESSION_MINUTES = 15


def round_to_step(minutes: float, step: int = ROUNDING_STEP_MINUTES) -> int:
    """Round half-up to the nearest multiple of step."""
    return int(minutes / step + 0.5) * step


def scale_duration(duration_minutes: int, volume_change_percent: int) -> int:
    """
    Scale one session duration.

    The result is rounded to 5 minutes and never drops below 15, but a
    session already shorter than 15 minutes is not lengthened.
    """
    scaled = round_to_step(duration_minutes * (1 + volume_change_percent / 100))
    return max(scaled, min(MIN_SESSION_MINUTES, duration_minutes))


class AdaptationApplier:
    """Produces the revised version of a future week."""

    def apply(self, next_week: PlannedWeek, suggestion: AdaptationSuggestion) -> PlannedWeek:
        """
        Apply the suggestion to next_week.

        Args:
            next_week: Week to revise; left untouched
            suggestion: Output of the advisor

        Returns:
            A new PlannedWeek with scaled durations

        Raises:
            InvariantViolationError: If next_week has two sessions on one day
        """
        next_week.ensure_unique_days()

        sessions: List[PlannedSession] = [
            replace(s, duration_minutes=scale_duration(s.duration_minutes, suggestion.volume_change_percent))
            for s in next_week.sessions
        ]

        if suggestion.verdict == Verdict.RECOVERY:
            for index, session in enumerate(sessions):
                if session.is_hard:
                    sessions[index] = replace(session, intensity_label=Intensity.MODERATE.value)
                    logger.debug(
                        f"Week {next_week.week_number}: {session.day_of_week} downgraded to "
                        f"{Intensity.MODERATE.value}"
                    )
                    break

        logger.info(
            f"Week {next_week.week_number} revised: {suggestion.verdict.value} "
            f"{suggestion.volume_change_percent:+d}% "
            f"({next_week.total_minutes} -> {sum(s.duration_minutes for s in sessions)} min)"
        )
        return next_week.with_sessions(sessions)


def apply_adaptation(next_week: PlannedWeek, suggestion: AdaptationSuggestion) -> PlannedWeek:
    """Apply a suggestion to a week; see AdaptationApplier.apply."""
    return AdaptationApplier().apply(next_week, suggestion)
