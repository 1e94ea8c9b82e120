"""
Adherence API routes.

Compare a completed week with its prescription, advise on the next
week and apply the advice.
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends

from ...config import Settings, get_settings
from ...models.plans import WeekRange
from ...services.adaptation import AdaptationAdvisor
from ...services.applier import apply_adaptation
from ...services.compliance import WeekComplianceAnalyzer
from ..schemas import (
    AdaptationSuggestionModel,
    AdviseRequest,
    ApplyRequest,
    CompareRequest,
    ComplianceReportModel,
    PlannedWeekResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/compare", response_model=ComplianceReportModel)
async def compare(
    request: CompareRequest,
    settings: Settings = Depends(get_settings),
) -> ComplianceReportModel:
    """Compliance report of a planned week against submitted activities."""
    week_range = WeekRange(start=request.week_start, end=request.week_start + timedelta(days=6))
    analyzer = WeekComplianceAnalyzer(settings)
    report = analyzer.compare(
        request.planned_week.to_domain(),
        [activity.to_domain() for activity in request.activities],
        week_range,
    )
    return ComplianceReportModel(**report.to_dict())


@router.post("/advise", response_model=AdaptationSuggestionModel)
async def advise(
    request: AdviseRequest,
    settings: Settings = Depends(get_settings),
) -> AdaptationSuggestionModel:
    """Verdict and volume change for the week after the reported one."""
    next_week = request.next_week.to_domain() if request.next_week else None
    suggestion = AdaptationAdvisor(settings).advise(request.report.to_domain(), next_week)
    return AdaptationSuggestionModel(**suggestion.to_dict())


@router.post("/apply", response_model=PlannedWeekResponse)
async def apply(request: ApplyRequest) -> PlannedWeekResponse:
    """Revised copy of next_week with the suggestion applied."""
    revised = apply_adaptation(request.next_week.to_domain(), request.suggestion.to_domain())
    return PlannedWeekResponse(**revised.to_dict())
