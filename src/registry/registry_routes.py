"""Registry API routes - trial listing, filter options, statistics and trial details."""

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from src.registry.registry_client import RegistryError, TrialNotFoundError, get_registry_client
from src.registry.registry_models import (
    FilterOptionsResponse,
    Trial,
    TrialDetail,
    TrialDetailResponse,
    TrialStatsResponse,
)
from src.search.search_logics import search_trials
from src.search.search_models import SearchFilters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trials", tags=["Trials"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def upstream_error(error: str, e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": error, "message": str(e)},
    )


@router.get("", response_model=List[Trial], summary="List trials without filters")
async def get_all_trials(
    page: int = Query(1, ge=1),
    limit: int = Query(1000, ge=1),
) -> List[Trial]:
    try:
        results = await search_trials(get_registry_client(), SearchFilters(page=page, limit=limit))
    except RegistryError as e:
        logger.error(f"[TRIALS] Error fetching all trials: {e}")
        raise upstream_error("Failed to fetch trials", e)
    return results.trials


@router.get("/filters", response_model=FilterOptionsResponse, summary="Available filter options")
async def get_filter_options() -> FilterOptionsResponse:
    try:
        filters = await get_registry_client().get_available_filters()
    except RegistryError as e:
        logger.error(f"[TRIALS] Filter options error: {e}")
        raise upstream_error("Internal server error while fetching filter options", e)
    return FilterOptionsResponse(filters=filters, last_updated=_now())


@router.get("/stats", response_model=TrialStatsResponse, summary="Registry statistics")
async def get_trial_stats() -> TrialStatsResponse:
    try:
        stats = await get_registry_client().get_trial_stats()
    except RegistryError as e:
        logger.error(f"[TRIALS] Trial statistics error: {e}")
        raise upstream_error("Internal server error while fetching trial statistics", e)
    return TrialStatsResponse(statistics=stats, last_updated=_now())


@router.get("/{trial_id}", response_model=TrialDetailResponse, summary="Trial details")
async def get_trial(trial_id: str) -> TrialDetailResponse:
    """Single trial with eligibility split into lines and contact info."""
    try:
        trial = await get_registry_client().get_trial_by_id(trial_id)
    except TrialNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Trial not found", "message": str(e)},
        )
    except RegistryError as e:
        logger.error(f"[TRIALS] Trial details error for {trial_id}: {e}")
        raise upstream_error("Internal server error while fetching trial details", e)

    criteria = trial.eligibility_criteria
    detail = TrialDetail(
        **trial.model_dump(exclude={"eligibility"}),
        eligibility=criteria,
        eligibility_count=len(criteria),
        last_updated=_now(),
    )
    return TrialDetailResponse(data=detail)
