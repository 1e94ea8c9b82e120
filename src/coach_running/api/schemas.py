"""
Request and response models for the HTTP API.

Request models convert to domain objects with to_domain(); responses
mirror the domain to_dict() shapes.
"""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..metrics.vma import FieldTest, RecentRaceTimes, RunningLevel
from ..models.activity import ActivityRecord
from ..models.adherence import (
    MAX_VOLUME_CHANGE,
    MIN_VOLUME_CHANGE,
    AdaptationSuggestion,
    ComplianceReport,
    Priority,
    Verdict,
)
from ..models.plans import PlannedWeek


# =============================================================================
# Calibration
# =============================================================================

class RaceTimesInput(BaseModel):
    """Questionnaire race times; camelCase keys are accepted."""
    model_config = ConfigDict(populate_by_name=True)

    distance_5km: Optional[str] = Field(None, alias="distance5km", examples=["22:30"])
    distance_10km: Optional[str] = Field(None, alias="distance10km", examples=["48:10"])
    distance_half_marathon: Optional[str] = Field(
        None, alias="distanceHalfMarathon", examples=["1:45:00"]
    )
    distance_marathon: Optional[str] = Field(None, alias="distanceMarathon", examples=["3h45"])

    def to_domain(self) -> RecentRaceTimes:
        return RecentRaceTimes(
            distance_5km=self.distance_5km,
            distance_10km=self.distance_10km,
            distance_half_marathon=self.distance_half_marathon,
            distance_marathon=self.distance_marathon,
        )


class EstimateRequest(BaseModel):
    """Estimate VMA from race times, or from a level when none is usable."""
    race_times: RaceTimesInput = Field(default_factory=RaceTimesInput)
    level: Optional[RunningLevel] = None


class PerformanceEstimateResponse(BaseModel):
    vma_kmh: float
    source_label: str


class EstimateResponse(BaseModel):
    """estimate is null when there is neither a usable race time nor a level."""
    estimate: Optional[PerformanceEstimateResponse] = None
    from_level: bool = False


class FieldTestRequest(BaseModel):
    """A field test result; duration is required for the timed test only."""
    test: FieldTest
    value: float = Field(..., description="Metres, or km/h for VAMEVAL", examples=[3000])
    duration: Optional[str] = Field(None, examples=["5:30"])


class PredictRequest(BaseModel):
    distance_m: float = Field(..., description="Distance of the known performance in metres", examples=[10000])
    time: str = Field(..., examples=["45:00"])


class RacePredictionResponse(BaseModel):
    label: str
    distance_m: int
    seconds: int
    time_formatted: str
    pace_formatted: str


class PredictResponse(BaseModel):
    predictions: List[RacePredictionResponse]


class ZonesRequest(BaseModel):
    vma_kmh: float = Field(..., description="Maximal aerobic speed in km/h", examples=[15.0])


class PaceZoneResponse(BaseModel):
    name: str
    speed_kmh: float
    pace_seconds_per_km: float
    pace_formatted: str


class ZoneSetResponse(BaseModel):
    vma_kmh: float
    fingerprint: str
    zones: Dict[str, PaceZoneResponse]


# =============================================================================
# Plans and activities
# =============================================================================

class SessionFeedbackInput(BaseModel):
    completed: bool = False
    rpe: Optional[int] = Field(None, ge=1, le=10)
    notes: Optional[str] = None


class PlannedSessionInput(BaseModel):
    """
    A planned session.

    Either duration_minutes or a duration text ("45 min", "1h15") is
    required.
    """
    day: str = Field(..., examples=["Mardi"])
    type: str = "Jogging"
    duration_minutes: Optional[int] = Field(None, ge=0)
    duration: Optional[str] = None
    intensity: str = "Facile"
    title: str = ""
    feedback: Optional[SessionFeedbackInput] = None


class PlannedWeekInput(BaseModel):
    week_number: int = Field(..., ge=1)
    sessions: List[PlannedSessionInput] = Field(default_factory=list)

    def to_domain(self) -> PlannedWeek:
        return PlannedWeek.from_dict(self.model_dump(exclude_none=True))


class PlannedSessionResponse(BaseModel):
    day: str
    type: str
    duration_minutes: int
    intensity: str
    title: str
    feedback: Optional[SessionFeedbackInput] = None


class PlannedWeekResponse(BaseModel):
    week_number: int
    sessions: List[PlannedSessionResponse]


class ActivityInput(BaseModel):
    activity_type: str = Field(..., examples=["Run", "Ride"])
    distance_km: float = Field(0.0, ge=0)
    moving_time_minutes: float = Field(..., ge=0)
    start_date: datetime

    def to_domain(self) -> ActivityRecord:
        return ActivityRecord(
            activity_type=self.activity_type,
            distance_km=self.distance_km,
            moving_time_minutes=self.moving_time_minutes,
            start_date=self.start_date,
        )


# =============================================================================
# Adherence
# =============================================================================

class CompareRequest(BaseModel):
    planned_week: PlannedWeekInput
    activities: List[ActivityInput] = Field(default_factory=list)
    week_start: date = Field(..., description="Monday of the planned week")


class ComplianceReportModel(BaseModel):
    week_number: int
    sessions_planned: int = Field(..., ge=0)
    sessions_done: int = Field(..., ge=0)
    compliance_percent: int = Field(..., ge=0, le=100)
    avg_rpe: Optional[float] = Field(None, ge=1, le=10)
    cross_training_equivalent_minutes: float = Field(0.0, ge=0)
    summary_text: str = ""

    def to_domain(self) -> ComplianceReport:
        return ComplianceReport(**self.model_dump())


class SuggestionItemModel(BaseModel):
    category: str
    priority: Priority
    title: str
    detail: str = ""


class AdaptationSuggestionModel(BaseModel):
    verdict: Verdict
    volume_change_percent: int = Field(..., ge=MIN_VOLUME_CHANGE, le=MAX_VOLUME_CHANGE)
    items: List[SuggestionItemModel] = Field(default_factory=list)
    overall_message: str = ""

    def to_domain(self) -> AdaptationSuggestion:
        return AdaptationSuggestion.from_dict(self.model_dump(mode="json"))


class AdviseRequest(BaseModel):
    report: ComplianceReportModel
    next_week: Optional[PlannedWeekInput] = None


class ApplyRequest(BaseModel):
    next_week: PlannedWeekInput
    suggestion: AdaptationSuggestionModel
