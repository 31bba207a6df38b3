"""Search API routes - filtered trial search and autocomplete."""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from src.registry.registry_client import RegistryError, get_registry_client
from src.registry.registry_models import Trial
from src.search.search_logics import search_trials
from src.search.search_models import SearchFilters, SearchResponse, SuggestionsResponse
from src.search.suggestions import MIN_QUERY_LENGTH, build_suggestions

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Search"])

# window of live trials consulted for title/condition suggestions
SUGGESTION_TRIAL_WINDOW = 20


@router.get(
    "/trials/search",
    response_model=SearchResponse,
    summary="Search trials with filters, pagination and sorting",
)
async def search(
    cancer_type: str = Query("all", alias="cancerType"),
    location: str = Query(""),
    phase: str = Query("all"),
    age_range: str = Query("all", alias="ageRange"),
    search_text: str = Query("", alias="searchText"),
    trial_status: str = Query("all", alias="status"),
    sponsor: str = Query("all"),
    treatment_type: str = Query("all", alias="treatmentType"),
    trial_size: str = Query("all", alias="trialSize"),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1),
    sort_by: str = Query("relevance", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
) -> SearchResponse:
    filters = SearchFilters(
        cancer_type=cancer_type,
        location=location,
        phase=phase,
        age_range=age_range,
        search_text=search_text,
        status=trial_status,
        sponsor=sponsor,
        treatment_type=treatment_type,
        trial_size=trial_size,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    try:
        return await search_trials(get_registry_client(), filters)
    except RegistryError as e:
        logger.error(f"[SEARCH] Error in search endpoint: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to search trials", "message": str(e)},
        )


@router.get(
    "/search/suggestions",
    response_model=SuggestionsResponse,
    summary="Autocomplete suggestions for the search box",
)
async def get_suggestions(
    q: str = Query(""),
    suggestion_type: str = Query("all", alias="type"),
) -> SuggestionsResponse:
    trials: List[Trial] = []
    if suggestion_type == "all" and len(q) >= MIN_QUERY_LENGTH:
        try:
            trials = await get_registry_client().search_trials(
                SearchFilters(search_text=q, limit=SUGGESTION_TRIAL_WINDOW)
            )
        except RegistryError as e:
            # static vocabularies still answer
            logger.warning(f"[SEARCH] Live suggestions unavailable: {e}")

    return build_suggestions(q, suggestion_type, trials)
