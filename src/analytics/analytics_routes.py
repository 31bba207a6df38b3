"""Analytics API routes - nearby trials and cancer type statistics."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from src.analytics.analytics_logics import cancer_type_stats, group_by_distance, nearby_trials
from src.analytics.analytics_models import CancerTypeStatsResponse, NearbyTrialsResponse
from src.registry.registry_client import RegistryError, get_registry_client
from src.registry.registry_models import Coordinates, Trial
from src.search.search_models import SearchFilters

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analytics"])

ANALYTICS_TRIAL_WINDOW = 100


async def _trial_window(error: str) -> List[Trial]:
    try:
        return await get_registry_client().search_trials(
            SearchFilters(search_text="cancer", limit=ANALYTICS_TRIAL_WINDOW)
        )
    except RegistryError as e:
        logger.error(f"[ANALYTICS] {error}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": error, "details": str(e)},
        )


@router.get(
    "/geolocation/nearby-trials",
    response_model=NearbyTrialsResponse,
    summary="Trials within a radius of a point",
)
async def get_nearby_trials(
    lat: Optional[float] = Query(None),
    lng: Optional[float] = Query(None),
    radius: int = Query(100, ge=0),
    limit: int = Query(20, ge=1),
) -> NearbyTrialsResponse:
    if lat is None or lng is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Missing coordinates", "message": "Latitude and longitude are required"},
        )

    trials = await _trial_window("Internal server error while processing geolocation request")
    nearby = nearby_trials(trials, lat, lng, radius, limit)

    return NearbyTrialsResponse(
        user_location=Coordinates(lat=lat, lng=lng),
        radius=radius,
        total_nearby=len(nearby),
        trials=nearby,
        distance_groups=group_by_distance(nearby),
        last_updated=datetime.now(timezone.utc).isoformat(),
    )


@router.get(
    "/analytics/cancer-types",
    response_model=CancerTypeStatsResponse,
    summary="Per-condition trial statistics",
)
async def get_cancer_type_analytics() -> CancerTypeStatsResponse:
    trials = await _trial_window("Internal server error while processing cancer type analytics")
    stats = cancer_type_stats(trials)
    return CancerTypeStatsResponse(
        total_cancer_types=len(stats),
        cancer_type_stats=stats,
        last_updated=datetime.now(timezone.utc).isoformat(),
    )
