"""
Calibration API routes.

Estimate VMA from race results or field tests, predict race times and
derive the pace zone set.
"""

import logging

from fastapi import APIRouter

from ...metrics.pace_zones import compute_zones
from ...metrics.race_prediction import predict_race_times
from ...metrics.vma import (
    estimate_vma_from_field_test,
    estimate_vma_from_level,
    estimate_vma_from_race_times,
)
from ..schemas import (
    EstimateRequest,
    EstimateResponse,
    FieldTestRequest,
    PerformanceEstimateResponse,
    PredictRequest,
    PredictResponse,
    RacePredictionResponse,
    ZoneSetResponse,
    ZonesRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/estimate", response_model=EstimateResponse)
async def estimate(request: EstimateRequest) -> EstimateResponse:
    """
    Estimate VMA from questionnaire race times.

    Unparseable fields are ignored. Without any usable time the level
    default is used; without a level either, the estimate is null.
    """
    performance = estimate_vma_from_race_times(request.race_times.to_domain())
    from_level = False
    if performance is None and request.level is not None:
        performance = estimate_vma_from_level(request.level)
        from_level = True

    if performance is None:
        logger.info("No usable race time and no level; nothing to estimate")
        return EstimateResponse(estimate=None)

    return EstimateResponse(
        estimate=PerformanceEstimateResponse(**performance.to_dict()),
        from_level=from_level,
    )


@router.post("/field-test", response_model=PerformanceEstimateResponse)
async def field_test(request: FieldTestRequest) -> PerformanceEstimateResponse:
    """Estimate VMA from a Cooper, demi-Cooper, VAMEVAL or timed test."""
    performance = estimate_vma_from_field_test(request.test, request.value, request.duration)
    return PerformanceEstimateResponse(**performance.to_dict())


@router.post("/predict", response_model=PredictResponse)
async def predict(request: PredictRequest) -> PredictResponse:
    """Equivalent times at every standard distance from one performance."""
    predictions = predict_race_times(request.distance_m, request.time)
    return PredictResponse(
        predictions=[RacePredictionResponse(**p.to_dict()) for p in predictions]
    )


@router.post("/zones", response_model=ZoneSetResponse)
async def zones(request: ZonesRequest) -> ZoneSetResponse:
    """Compute every pace zone from one VMA value."""
    zone_set = compute_zones(request.vma_kmh)
    data = zone_set.to_dict()
    return ZoneSetResponse(
        vma_kmh=data["vma_kmh"],
        fingerprint=zone_set.fingerprint,
        zones=data["zones"],
    )
