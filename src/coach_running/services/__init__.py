"""Services for compliance measurement, adaptation and plan review."""

from .adaptation import AdaptationAdvisor, advise
from .applier import AdaptationApplier, apply_adaptation
from .compliance import WeekComplianceAnalyzer, compare
from .plan_service import PlanService, WeekReview

__all__ = [
    "WeekComplianceAnalyzer",
    "compare",
    "AdaptationAdvisor",
    "advise",
    "AdaptationApplier",
    "apply_adaptation",
    "PlanService",
    "WeekReview",
]
