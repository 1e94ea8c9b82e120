"""
Plan orchestration.

Creates plans with their frozen zone set and runs the weekly review:
fetch activities, measure compliance, advise, revise the next week.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from ..config import Settings, get_settings
from ..exceptions import InvalidInputError
from ..integrations.base import ActivityFetcher
from ..metrics.pace_zones import compute_zones
from ..metrics.vma import (
    PerformanceEstimate,
    RecentRaceTimes,
    RunningLevel,
    estimate_vma_from_level,
    estimate_vma_from_race_times,
)
from ..models.adherence import AdaptationSuggestion, ComplianceReport
from ..models.plans import PlannedWeek, TrainingPlan
from .adaptation import AdaptationAdvisor
from .applier import AdaptationApplier
from .compliance import WeekComplianceAnalyzer


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeekReview:
    """Outcome of reviewing one completed week."""
    report: ComplianceReport
    suggestion: AdaptationSuggestion
    revised_week: Optional[PlannedWeek] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report": self.report.to_dict(),
            "suggestion": self.suggestion.to_dict(),
            "revised_week": self.revised_week.to_dict() if self.revised_week else None,
        }


class PlanService:
    """Service for creating plans and reviewing their weeks."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.analyzer = WeekComplianceAnalyzer(self.settings)
        self.advisor = AdaptationAdvisor(self.settings)
        self.applier = AdaptationApplier()

    def estimate_performance(
        self,
        race_times: Optional[RecentRaceTimes] = None,
        level: Optional[RunningLevel] = None,
    ) -> PerformanceEstimate:
        """
        Estimate VMA from race times, falling back to the level default.

        Raises:
            InvalidInputError: If neither race times nor a level is given
        """
        if race_times is None and level is None:
            raise InvalidInputError("Race times or a running level is required")

        estimate = estimate_vma_from_race_times(race_times)
        if estimate is not None:
            return estimate

        logger.info(f"No usable race time, using level default ({level.value if level else 'unknown'})")
        return estimate_vma_from_level(level)

    def create_plan(
        self,
        plan_id: str,
        start_date: date,
        race_times: Optional[RecentRaceTimes] = None,
        level: Optional[RunningLevel] = None,
    ) -> TrainingPlan:
        """
        Create a plan whose zone set is computed once, here.

        Args:
            plan_id: Identifier of the new plan
            start_date: Any day of the first plan week
            race_times: Questionnaire race times
            level: Self-declared level, used when no race time is usable

        Returns:
            TrainingPlan without weeks
        """
        performance = self.estimate_performance(race_times, level)
        zone_set = compute_zones(performance.vma_kmh)
        logger.info(
            f"Plan {plan_id} created: VMA {performance.vma_kmh:.2f} km/h "
            f"({performance.source_label}), zones {zone_set.fingerprint[:12]}"
        )
        return TrainingPlan(
            plan_id=plan_id,
            start_date=start_date,
            performance=performance,
            zone_set=zone_set,
        )

    async def review_week(
        self,
        plan: TrainingPlan,
        week_number: int,
        athlete_id: str,
        fetch: ActivityFetcher,
        timeout: Optional[float] = None,
    ) -> WeekReview:
        """
        Review a completed week and revise the following one.

        The revised week is returned, not attached; the caller decides
        whether to persist it.

        Raises:
            InvalidInputError: If the plan has no such week
            ExternalFetchError: If the activity feed fails or times out
        """
        week = plan.get_week(week_number)
        if week is None:
            raise InvalidInputError(
                f"Plan {plan.plan_id} has no week {week_number}", field="week_number"
            )

        report = await self.analyzer.compare_from_feed(
            athlete_id, week, plan.week_range(week_number), fetch, timeout=timeout
        )
        next_week = plan.get_week(week_number + 1)
        suggestion = self.advisor.advise(report, next_week)
        revised = self.applier.apply(next_week, suggestion) if next_week is not None else None

        logger.info(
            f"Plan {plan.plan_id} week {week_number}: {report.compliance_percent}% -> "
            f"{suggestion.verdict.value} {suggestion.volume_change_percent:+d}%"
        )
        return WeekReview(report=report, suggestion=suggestion, revised_week=revised)
