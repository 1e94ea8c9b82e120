"""Calibration metrics: durations, VMA, pace zones and race predictions."""

from .race_time import format_duration, parse_duration
from .vma import (
    FieldTest,
    PerformanceEstimate,
    RaceResult,
    RecentRaceTimes,
    RunningLevel,
    estimate_vma,
    estimate_vma_from_level,
    estimate_vma_from_race_times,
    estimate_vma_from_field_test,
)
from .pace_zones import PaceZone, ZoneSet, compute_zones, format_pace
from .race_prediction import RacePrediction, predict_race_time, predict_race_times

__all__ = [
    # race_time
    "parse_duration",
    "format_duration",
    # vma
    "RaceResult",
    "RecentRaceTimes",
    "RunningLevel",
    "PerformanceEstimate",
    "estimate_vma",
    "estimate_vma_from_race_times",
    "estimate_vma_from_level",
    "FieldTest",
    "estimate_vma_from_field_test",
    # pace_zones
    "PaceZone",
    "ZoneSet",
    "compute_zones",
    "format_pace",
    # race_prediction
    "RacePrediction",
    "predict_race_time",
    "predict_race_times",
]
