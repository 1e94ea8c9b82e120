"""Tests for plan creation and week review."""

import asyncio
from datetime import date, datetime

import pytest

from coach_running.exceptions import ExternalFetchError, InvalidInputError
from coach_running.metrics.pace_zones import compute_zones
from coach_running.metrics.vma import RecentRaceTimes, RunningLevel
from coach_running.models.activity import ActivityRecord
from coach_running.models.adherence import Verdict
from coach_running.models.plans import PlannedSession, PlannedWeek
from coach_running.services.plan_service import PlanService


@pytest.fixture
def service(settings):
    return PlanService(settings)


class TestCreatePlan:
    """Tests for create_plan."""

    def test_from_race_times(self, service):
        plan = service.create_plan(
            "plan-1", date(2024, 3, 4), race_times=RecentRaceTimes(distance_5km="25:00")
        )

        assert plan.performance.vma_kmh == pytest.approx(12.63, abs=0.01)
        assert plan.zone_set == compute_zones(plan.performance.vma_kmh)
        assert plan.weeks == {}

    def test_race_times_take_precedence_over_level(self, service):
        plan = service.create_plan(
            "plan-1",
            date(2024, 3, 4),
            race_times=RecentRaceTimes(distance_10km="45:00"),
            level=RunningLevel.BEGINNER,
        )
        assert plan.performance.source_label == "10km in 45:00"

    def test_level_fallback(self, service):
        plan = service.create_plan(
            "plan-1",
            date(2024, 3, 4),
            race_times=RecentRaceTimes(distance_5km="not a time"),
            level=RunningLevel.EXPERT,
        )

        assert plan.performance.vma_kmh == 17.5
        assert plan.zone_set.vma_kmh == 17.5

    def test_unusable_times_without_level(self, service):
        plan = service.create_plan("plan-1", date(2024, 3, 4), race_times=RecentRaceTimes())
        assert plan.performance.source_label == "estimate for level unknown"

    def test_nothing_given(self, service):
        with pytest.raises(InvalidInputError):
            service.create_plan("plan-1", date(2024, 3, 4))


class TestReviewWeek:
    """Tests for review_week."""

    @pytest.fixture
    def plan(self, service, three_run_week):
        plan = service.create_plan("plan-1", date(2024, 3, 4), level=RunningLevel.INTERMEDIATE)
        plan.attach_week(three_run_week, plan.generation_context(1))
        next_week = PlannedWeek(
            week_number=2,
            sessions=(
                PlannedSession("Mardi", "Jogging", 40, "Facile"),
                PlannedSession("Jeudi", "Fractionné", 50, "Difficile"),
                PlannedSession("Dimanche", "Sortie Longue", 80, "Modéré"),
            ),
        )
        plan.attach_week(next_week, plan.generation_context(2))
        return plan

    @pytest.mark.asyncio
    async def test_poor_week_revises_next(self, service, plan):
        async def fetch(athlete_id, week_range):
            assert week_range == plan.week_range(1)
            return []

        review = await service.review_week(plan, 1, "athlete-1", fetch)

        assert review.report.compliance_percent == 0
        assert review.suggestion.verdict == Verdict.RECOVERY
        assert [s.duration_minutes for s in review.revised_week.sessions] == [25, 35, 50]
        assert review.revised_week.sessions[1].intensity_label == "Modéré"
        # Not attached: the plan still holds the original week 2
        assert plan.get_week(2).sessions[1].intensity_label == "Difficile"

    @pytest.mark.asyncio
    async def test_good_week(self, service, plan):
        async def fetch(athlete_id, week_range):
            return [
                ActivityRecord("Run", 7.0, 40.0, datetime(2024, 3, 5, 7, 0)),
                ActivityRecord("Run", 9.0, 50.0, datetime(2024, 3, 7, 7, 0)),
                ActivityRecord("Run", 13.0, 75.0, datetime(2024, 3, 10, 9, 0)),
            ]

        review = await service.review_week(plan, 1, "athlete-1", fetch)

        assert review.report.compliance_percent == 100
        assert review.suggestion.verdict == Verdict.MAINTAIN
        assert review.revised_week == plan.get_week(2)

    @pytest.mark.asyncio
    async def test_rest_week_leaves_next_week_alone(self, service):
        plan = service.create_plan("plan-2", date(2024, 3, 4), level=RunningLevel.BEGINNER)
        rest = PlannedWeek(
            week_number=1,
            sessions=(PlannedSession("Mercredi", "Renforcement", 30, "Facile"),),
        )
        next_week = PlannedWeek(
            week_number=2,
            sessions=(
                PlannedSession("Mardi", "Jogging", 30, "Facile"),
                PlannedSession("Samedi", "Fractionné", 45, "Difficile"),
            ),
        )
        plan.attach_week(rest, plan.generation_context(1))
        plan.attach_week(next_week, plan.generation_context(2))

        async def fetch(athlete_id, week_range):
            return []

        review = await service.review_week(plan, 1, "athlete-1", fetch)

        assert review.report.sessions_planned == 0
        assert review.suggestion.verdict == Verdict.MAINTAIN
        assert review.suggestion.volume_change_percent == 0
        assert review.revised_week == next_week

    @pytest.mark.asyncio
    async def test_last_week_has_no_revision(self, service, plan):
        async def fetch(athlete_id, week_range):
            return []

        review = await service.review_week(plan, 2, "athlete-1", fetch)

        assert review.revised_week is None
        assert review.to_dict()["revised_week"] is None

    @pytest.mark.asyncio
    async def test_unknown_week(self, service, plan):
        async def fetch(athlete_id, week_range):
            return []

        with pytest.raises(InvalidInputError):
            await service.review_week(plan, 7, "athlete-1", fetch)

    @pytest.mark.asyncio
    async def test_feed_failure_produces_no_review(self, service, plan):
        async def fetch(athlete_id, week_range):
            raise ConnectionResetError("peer reset")

        with pytest.raises(ExternalFetchError) as exc_info:
            await service.review_week(plan, 1, "athlete-1", fetch)

        assert exc_info.value.details["reason"] == "unreachable"

    @pytest.mark.asyncio
    async def test_timeout(self, service, plan):
        async def fetch(athlete_id, week_range):
            await asyncio.sleep(5)
            return []

        with pytest.raises(ExternalFetchError):
            await service.review_week(plan, 1, "athlete-1", fetch, timeout=0.01)
