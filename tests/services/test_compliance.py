"""Tests for weekly compliance analysis."""

import asyncio
from datetime import datetime

import httpx
import pytest

from coach_running.exceptions import ErrorCode, ExternalFetchError, InvariantViolationError
from coach_running.integrations.base import AuthenticationError, IntegrationError
from coach_running.models.activity import ActivityRecord
from coach_running.models.plans import PlannedSession, PlannedWeek
from coach_running.services.compliance import WeekComplianceAnalyzer, compare


@pytest.fixture
def analyzer(settings):
    return WeekComplianceAnalyzer(settings)


class TestCompare:
    """Tests for compare."""

    def test_no_activity(self, analyzer, three_run_week, week_range):
        """Test 3 planned and nothing done gives 0%."""
        report = analyzer.compare(three_run_week, [], week_range)

        assert report.sessions_planned == 3
        assert report.sessions_done == 0
        assert report.compliance_percent == 0
        assert report.cross_training_equivalent_minutes == 0
        assert report.avg_rpe is None

    def test_all_runs_done(self, analyzer, three_run_week, week_range, make_activity):
        records = [make_activity(5), make_activity(7), make_activity(10, 75)]

        report = analyzer.compare(three_run_week, records, week_range)

        assert report.sessions_done == 3
        assert report.compliance_percent == 100

    def test_run_and_cycling(self, analyzer, three_run_week, week_range, make_activity):
        """Test 1 run plus 2h of cycling credits part of the missed runs."""
        records = [make_activity(5), make_activity(7, 120, "Ride")]

        report = analyzer.compare(three_run_week, records, week_range)

        assert report.sessions_done == 1
        assert report.cross_training_equivalent_minutes == pytest.approx(60.0)
        assert 33 < report.compliance_percent < 100
        # (1 + min(2, 60/45) * 0.5) / 3
        assert report.compliance_percent == 56

    def test_cross_training_alone_never_full(self, analyzer, three_run_week, week_range, make_activity):
        records = [make_activity(day, 600, "Ride") for day in (4, 5, 6)]

        report = analyzer.compare(three_run_week, records, week_range)

        assert report.sessions_done == 0
        assert report.compliance_percent == 50

    def test_extra_runs_are_capped(self, analyzer, three_run_week, week_range, make_activity):
        records = [make_activity(day) for day in (4, 5, 6, 7, 8)]

        report = analyzer.compare(three_run_week, records, week_range)

        assert report.sessions_done == 5
        assert report.compliance_percent == 100

    def test_out_of_range_activities_ignored(self, analyzer, three_run_week, week_range, make_activity):
        records = [make_activity(3), make_activity(11), make_activity(6)]

        report = analyzer.compare(three_run_week, records, week_range)

        assert report.sessions_done == 1

    def test_non_endurance_type_ignored(self, analyzer, three_run_week, week_range, make_activity):
        records = [make_activity(5, 60, "WeightTraining"), make_activity(6, 60, "Yoga")]

        report = analyzer.compare(three_run_week, records, week_range)

        assert report.cross_training_equivalent_minutes == 0
        assert report.compliance_percent == 0

    def test_trail_and_virtual_runs_count(self, analyzer, three_run_week, week_range, make_activity):
        records = [make_activity(5, 50, "TrailRun"), make_activity(6, 30, "VirtualRun")]

        report = analyzer.compare(three_run_week, records, week_range)

        assert report.sessions_done == 2

    def test_strength_sessions_not_planned_runs(self, analyzer, week_with_feedback, week_range):
        report = analyzer.compare(week_with_feedback, [], week_range)
        assert report.sessions_planned == 3

    def test_average_rpe_of_completed_sessions(self, analyzer, week_with_feedback, week_range):
        """Test RPE of a session marked not completed is left out."""
        report = analyzer.compare(week_with_feedback, [], week_range)
        assert report.avg_rpe == 6.0

    def test_nothing_planned(self, analyzer, week_range, make_activity):
        week = PlannedWeek(week_number=5, sessions=(PlannedSession("Lundi", "Renforcement", 30, "Facile"),))

        report = analyzer.compare(week, [make_activity(5)], week_range)

        assert report.sessions_planned == 0
        assert report.compliance_percent == 0

    def test_duplicate_days_rejected(self, analyzer, week_range):
        week = PlannedWeek(
            week_number=1,
            sessions=(
                PlannedSession("Mardi", "Jogging", 30, "Facile"),
                PlannedSession("mardi", "Jogging", 30, "Facile"),
            ),
        )

        with pytest.raises(InvariantViolationError):
            analyzer.compare(week, [], week_range)

    def test_coefficients_come_from_settings(self, settings, three_run_week, week_range, make_activity):
        tuned = settings.model_copy(update={"cross_training_coefficients": {"Ride": 1.0}})

        report = WeekComplianceAnalyzer(tuned).compare(
            three_run_week, [make_activity(5, 90, "Ride")], week_range
        )

        assert report.cross_training_equivalent_minutes == pytest.approx(90.0)

    def test_summary_text(self, analyzer, three_run_week, week_range, make_activity):
        records = [make_activity(5), make_activity(7, 120, "Ride")]

        report = analyzer.compare(three_run_week, records, week_range)

        assert report.summary_text.startswith("1/3 running sessions done (56% compliance)")
        assert "60 min running-equivalent cross-training" in report.summary_text

    def test_module_function(self, settings, three_run_week, week_range, make_activity):
        report = compare(three_run_week, [make_activity(5)], week_range, settings)
        assert report.compliance_percent == 33


class TestCompliancePercent:
    """Tests for the compliance formula."""

    @pytest.mark.parametrize(
        "planned,done,xt,expected",
        [
            (0, 0, 0, 0),
            (0, 3, 200, 0),
            (4, 0, 0, 0),
            (4, 2, 0, 50),
            (4, 4, 500, 100),
            (4, 3, 45, 88),
            (2, 1, 1000, 75),
        ],
    )
    def test_values(self, analyzer, planned, done, xt, expected):
        assert analyzer.compliance_percent(planned, done, xt) == expected

    @pytest.mark.parametrize(
        "planned,done,expected",
        [(8, 5, 63), (8, 1, 13), (8, 3, 38), (8, 7, 88)],
    )
    def test_halves_round_up(self, analyzer, planned, done, expected):
        """Test 62.5 gives 63 and 12.5 gives 13, not the nearest even value."""
        assert analyzer.compliance_percent(planned, done, 0) == expected

    def test_always_in_range(self, analyzer):
        for planned in range(0, 6):
            for done in range(0, 8):
                for xt in (0, 30, 90, 400):
                    assert 0 <= analyzer.compliance_percent(planned, done, xt) <= 100


class TestCompareFromFeed:
    """Tests for compare_from_feed."""

    @pytest.mark.asyncio
    async def test_fetches_then_compares(self, analyzer, three_run_week, week_range, make_activity):
        calls = []

        async def fetch(athlete_id, week):
            calls.append((athlete_id, week))
            return [make_activity(5), make_activity(7)]

        report = await analyzer.compare_from_feed("athlete-1", three_run_week, week_range, fetch)

        assert calls == [("athlete-1", week_range)]
        assert report.sessions_done == 2

    @pytest.mark.asyncio
    async def test_timeout(self, analyzer, three_run_week, week_range):
        async def slow_fetch(athlete_id, week):
            await asyncio.sleep(5)
            return []

        with pytest.raises(ExternalFetchError) as exc_info:
            await analyzer.compare_from_feed(
                "athlete-1", three_run_week, week_range, slow_fetch, timeout=0.01
            )

        assert exc_info.value.details["reason"] == "timeout"
        assert exc_info.value.code == ErrorCode.EXTERNAL_FETCH_ERROR
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_unauthorized(self, analyzer, three_run_week, week_range):
        async def fetch(athlete_id, week):
            raise AuthenticationError("Token expired", "strava")

        with pytest.raises(ExternalFetchError) as exc_info:
            await analyzer.compare_from_feed("athlete-1", three_run_week, week_range, fetch)

        assert exc_info.value.provider == "strava"
        assert exc_info.value.details["reason"] == "unauthorized"
        assert isinstance(exc_info.value.__cause__, AuthenticationError)

    @pytest.mark.asyncio
    async def test_provider_error(self, analyzer, three_run_week, week_range):
        async def fetch(athlete_id, week):
            raise IntegrationError("Strava API error: boom", "strava", "500")

        with pytest.raises(ExternalFetchError) as exc_info:
            await analyzer.compare_from_feed("athlete-1", three_run_week, week_range, fetch)

        assert exc_info.value.details["reason"] == "500"

    @pytest.mark.asyncio
    async def test_unreachable(self, analyzer, three_run_week, week_range):
        async def fetch(athlete_id, week):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(ExternalFetchError) as exc_info:
            await analyzer.compare_from_feed("athlete-1", three_run_week, week_range, fetch)

        assert exc_info.value.details["reason"] == "unreachable"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, analyzer, three_run_week, week_range):
        started = asyncio.Event()

        async def fetch(athlete_id, week):
            started.set()
            await asyncio.sleep(5)
            return []

        task = asyncio.create_task(
            analyzer.compare_from_feed("athlete-1", three_run_week, week_range, fetch)
        )
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_records_outside_week_from_feed(self, analyzer, three_run_week, week_range):
        """Test padded feed results outside the week are ignored."""
        async def fetch(athlete_id, week):
            return [
                ActivityRecord("Run", 8.0, 45.0, datetime(2024, 3, 3, 22, 0)),
                ActivityRecord("Run", 8.0, 45.0, datetime(2024, 3, 4, 6, 0)),
            ]

        report = await analyzer.compare_from_feed("athlete-1", three_run_week, week_range, fetch)

        assert report.sessions_done == 1
