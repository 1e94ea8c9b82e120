"""
Weekly compliance analysis: planned week vs. observed activity.

Counting is aggregate at week level. A planned day label and an
externally reported timestamp have no stable correlation key, so runs
are counted against planned running sessions without pairing them.

Cross-training credit toward missed runs:
    base    = min(done, planned)
    missed  = planned - base
    credit  = min(missed, xt_minutes / minutes_per_session) * credit_ratio
    percent = 100 * (base + credit) / planned, rounded half-up and
              clamped to [0, 100]

With credit_ratio < 1 cross-training alone never reaches 100%, and no
activity at all always yields 0%.
"""

import asyncio
import logging
import statistics
from typing import List, Optional, Sequence

import httpx

from ..config import Settings, get_settings
from ..exceptions import ExternalFetchError
from ..integrations.base import ActivityFetcher, AuthenticationError, IntegrationError
from ..models.activity import ActivityRecord
from ..models.adherence import ComplianceReport
from ..models.plans import PlannedWeek, WeekRange
from .applier import round_to_step


logger = logging.getLogger(__name__)


class WeekComplianceAnalyzer:
    """
    Compares a planned week with the activities of the same week.

    Coefficients, running types and credit parameters come from
    Settings so they can be tuned without code changes.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self._running_types = frozenset(self.settings.running_activity_types)
        self._non_running_sessions = frozenset(self.settings.non_running_session_types)

    def is_running(self, record: ActivityRecord) -> bool:
        return record.activity_type in self._running_types

    def cross_training_coefficient(self, activity_type: str) -> float:
        """Running-equivalent load per minute; 0 for non-endurance types."""
        return self.settings.cross_training_coefficients.get(activity_type, 0.0)

    def count_planned_runs(self, week: PlannedWeek) -> int:
        return sum(1 for s in week.sessions if s.type not in self._non_running_sessions)

    def compare(
        self,
        planned_week: PlannedWeek,
        activity_records: Sequence[ActivityRecord],
        week_range: WeekRange,
    ) -> ComplianceReport:
        """
        Build the compliance report of one week.

        Args:
            planned_week: The prescription (days must be unique)
            activity_records: Activities; anything outside week_range is ignored
            week_range: Monday-Sunday range of the planned week

        Returns:
            ComplianceReport

        Raises:
            InvariantViolationError: If the planned week has two sessions on one day
        """
        planned_week.ensure_unique_days()

        in_week = [r for r in activity_records if week_range.contains(r.start_date)]

        sessions_planned = self.count_planned_runs(planned_week)
        sessions_done = 0
        cross_training_minutes = 0.0

        for record in in_week:
            if self.is_running(record):
                sessions_done += 1
                continue
            coefficient = self.cross_training_coefficient(record.activity_type)
            if coefficient <= 0:
                logger.debug(f"Ignoring non-endurance activity type {record.activity_type!r}")
                continue
            cross_training_minutes += max(0.0, record.moving_time_minutes) * coefficient

        compliance_percent = self.compliance_percent(
            sessions_planned, sessions_done, cross_training_minutes
        )
        avg_rpe = self.average_rpe(planned_week)

        return ComplianceReport(
            week_number=planned_week.week_number,
            sessions_planned=sessions_planned,
            sessions_done=sessions_done,
            compliance_percent=compliance_percent,
            avg_rpe=avg_rpe,
            cross_training_equivalent_minutes=round(cross_training_minutes, 1),
            summary_text=self._summary(
                sessions_planned, sessions_done, compliance_percent, avg_rpe, cross_training_minutes
            ),
        )

    def compliance_percent(
        self,
        sessions_planned: int,
        sessions_done: int,
        cross_training_minutes: float,
    ) -> int:
        """Compliance in percent, including partial cross-training credit."""
        if sessions_planned <= 0:
            return 0

        base = min(sessions_done, sessions_planned)
        missed = sessions_planned - base
        credit = 0.0
        if missed and cross_training_minutes > 0:
            per_session = self.settings.cross_training_minutes_per_session
            credit = min(missed, cross_training_minutes / per_session) * self.settings.cross_training_credit_ratio

        percent = round_to_step(100 * (base + credit) / sessions_planned, step=1)
        return max(0, min(100, percent))

    @staticmethod
    def average_rpe(planned_week: PlannedWeek) -> Optional[float]:
        """Mean RPE of sessions marked completed with feedback."""
        rpes: List[int] = [
            s.feedback.rpe
            for s in planned_week.sessions
            if s.feedback is not None and s.feedback.completed and s.feedback.rpe is not None
        ]
        if not rpes:
            return None
        return round(statistics.mean(rpes), 1)

    @staticmethod
    def _summary(
        sessions_planned: int,
        sessions_done: int,
        compliance_percent: int,
        avg_rpe: Optional[float],
        cross_training_minutes: float,
    ) -> str:
        parts = [f"{sessions_done}/{sessions_planned} running sessions done ({compliance_percent}% compliance)"]
        if cross_training_minutes > 0:
            parts.append(f"{cross_training_minutes:.0f} min running-equivalent cross-training")
        if avg_rpe is not None:
            parts.append(f"average RPE {avg_rpe:.1f}/10")
        return ", ".join(parts) + "."

    async def compare_from_feed(
        self,
        athlete_id: str,
        planned_week: PlannedWeek,
        week_range: WeekRange,
        fetch: ActivityFetcher,
        timeout: Optional[float] = None,
    ) -> ComplianceReport:
        """
        Fetch the week's activities, then compare.

        Args:
            athlete_id: Athlete whose activities are fetched
            planned_week: The prescription
            week_range: Monday-Sunday range of the planned week
            fetch: Activity fetcher, e.g. a StravaActivityFeed
            timeout: Seconds before giving up (settings default if None)

        Raises:
            ExternalFetchError: If the feed fails or times out; no report is produced
        """
        planned_week.ensure_unique_days()
        timeout = self.settings.activity_fetch_timeout_seconds if timeout is None else timeout

        try:
            records = await asyncio.wait_for(fetch(athlete_id, week_range), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Activity fetch for athlete {athlete_id} timed out after {timeout}s")
            raise ExternalFetchError(
                f"Activity provider did not answer within {timeout}s",
                details={"athlete_id": athlete_id, "reason": "timeout"},
            ) from e
        except AuthenticationError as e:
            logger.error(f"Activity provider rejected credentials for athlete {athlete_id}: {e}")
            raise ExternalFetchError(
                f"Activity provider unauthorized: {e}",
                provider=e.provider,
                details={"athlete_id": athlete_id, "reason": "unauthorized"},
            ) from e
        except IntegrationError as e:
            logger.error(f"Activity provider error for athlete {athlete_id}: {e}")
            raise ExternalFetchError(
                f"Activity provider error: {e}",
                provider=e.provider,
                details={"athlete_id": athlete_id, "reason": e.code or "provider_error"},
            ) from e
        except (httpx.HTTPError, OSError) as e:
            logger.error(f"Activity provider unreachable for athlete {athlete_id}: {e}")
            raise ExternalFetchError(
                f"Activity provider unreachable: {e}",
                details={"athlete_id": athlete_id, "reason": "unreachable"},
            ) from e

        return self.compare(planned_week, records, week_range)


def compare(
    planned_week: PlannedWeek,
    activity_records: Sequence[ActivityRecord],
    week_range: WeekRange,
    settings: Optional[Settings] = None,
) -> ComplianceReport:
    """Compare a planned week with activities using default settings."""
    return WeekComplianceAnalyzer(settings).compare(planned_week, activity_records, week_range)
