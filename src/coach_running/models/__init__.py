"""Domain models for plans, activities and adherence."""

from .activity import ActivityRecord
from .adherence import (
    AdaptationSuggestion,
    ComplianceReport,
    Priority,
    SuggestionItem,
    Verdict,
)
from .plans import (
    GenerationContext,
    Intensity,
    PlannedSession,
    PlannedWeek,
    SessionFeedback,
    SessionType,
    TrainingPlan,
    WeekRange,
)

__all__ = [
    "ActivityRecord",
    "AdaptationSuggestion",
    "ComplianceReport",
    "Priority",
    "SuggestionItem",
    "Verdict",
    "GenerationContext",
    "Intensity",
    "PlannedSession",
    "PlannedWeek",
    "SessionFeedback",
    "SessionType",
    "TrainingPlan",
    "WeekRange",
]
