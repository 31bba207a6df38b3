"""
ClinicalTrials.gov v2 adapter.

Fetches study records from the public registry and reshapes them into
flat Trial objects. The registry only supports a free-text query, so
searches prefetch a bounded window and leave the remaining filtering to
src.search.search_logics.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from src.config import settings
from src.registry.registry_models import FilterOptions, Trial, TrialStats
from src.registry.registry_transform import (
    extract_unique_values,
    transform_studies,
    transform_trial_data,
)
from src.search.search_models import SearchFilters

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TERM = "clinical trial"


class RegistryError(Exception):
    """Upstream registry call failed."""


class TrialNotFoundError(RegistryError):
    """Registry has no study with the requested NCT id."""


class ClinicalTrialsApi:
    """Thin async client for https://clinicaltrials.gov/api/v2/studies"""

    def __init__(
        self,
        base_url: str = settings.REGISTRY_BASE_URL,
        timeout: float = settings.REGISTRY_TIMEOUT,
        page_size: int = settings.REGISTRY_PAGE_SIZE,
        max_pages: int = settings.REGISTRY_MAX_PAGES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self.max_pages = max_pages
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    @staticmethod
    def build_query_term(filters: SearchFilters) -> str:
        """Pick the one text query the registry can express."""
        if filters.cancer_type and filters.cancer_type != "all":
            return filters.cancer_type
        if filters.search_text.strip():
            return filters.search_text
        if filters.location.strip():
            return filters.location
        return DEFAULT_QUERY_TERM

    async def search_trials(self, filters: SearchFilters) -> List[Trial]:
        """
        Fetch the prefetch window for a filter set.

        Args:
            filters: Search filters; only the text query is sent upstream

        Returns:
            Transformed trials, unfiltered and unpaginated

        Raises:
            RegistryError: If any upstream page request fails
        """
        fetch_size = max(100, filters.limit * 3)
        params: Dict[str, Any] = {
            "query.term": self.build_query_term(filters),
            "pageSize": min(fetch_size, self.page_size),
        }
        logger.info(f"[REGISTRY] Searching with params={params} fetch_size={fetch_size}")

        studies = await self._fetch_studies(params, fetch_size)
        logger.info(f"[REGISTRY] Total studies fetched: {len(studies)}")
        return transform_studies(studies)

    async def _fetch_studies(self, params: Dict[str, Any], fetch_size: int) -> List[Dict[str, Any]]:
        studies: List[Dict[str, Any]] = []
        page_token: Optional[str] = None

        try:
            async with self._client() as client:
                for attempt in range(self.max_pages):
                    page_params = dict(params)
                    if page_token:
                        page_params["pageToken"] = page_token

                    response = await client.get(self.base_url, params=page_params)
                    response.raise_for_status()
                    data = response.json()

                    batch = data.get("studies") if isinstance(data, dict) else None
                    if not batch:
                        break
                    studies.extend(batch)

                    page_token = data.get("nextPageToken")
                    if not page_token or len(studies) >= fetch_size:
                        break
                    logger.debug(f"[REGISTRY] Page {attempt + 1}: {len(studies)} studies so far")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[REGISTRY] ClinicalTrials.gov API error: {e}")
            raise RegistryError("Failed to fetch clinical trials data") from e

        return studies[:fetch_size]

    async def get_trial_by_id(self, nct_id: str) -> Trial:
        url = f"{self.base_url}/{nct_id}"
        try:
            async with self._client() as client:
                response = await client.get(url)
                if response.status_code == 404:
                    logger.warning(f"[REGISTRY] Trial not found: {nct_id}")
                    raise TrialNotFoundError(f"No clinical trial found with ID: {nct_id}")
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[REGISTRY] Error fetching trial {nct_id}: {e}")
            raise RegistryError("Failed to fetch trial data") from e

        if not data:
            raise TrialNotFoundError(f"No clinical trial found with ID: {nct_id}")
        return transform_trial_data(data)

    async def get_trial_stats(self) -> TrialStats:
        """Registry-wide totals; the API has no aggregates beyond a count."""
        params = {"query.term": "cancer", "pageSize": 1, "countTotal": "true"}
        try:
            async with self._client() as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                total = response.json().get("totalCount") or 0
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"[REGISTRY] Error fetching trial statistics: {e}")
            raise RegistryError("Failed to fetch trial statistics") from e

        return TrialStats(total_trials=total)

    async def get_available_filters(self) -> FilterOptions:
        params = {"query.term": "cancer", "pageSize": self.page_size}
        try:
            async with self._client() as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                studies = response.json().get("studies") or []
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"[REGISTRY] Error fetching available filters: {e}")
            raise RegistryError("Failed to fetch filter options") from e

        return FilterOptions(
            cancer_types=extract_unique_values(studies, "condition"),
            phases=extract_unique_values(studies, "phase"),
            locations=extract_unique_values(studies, "locationCity"),
            statuses=extract_unique_values(studies, "status"),
            treatment_types=extract_unique_values(studies, "interventionType"),
        )


_registry_client: Optional[ClinicalTrialsApi] = None


def get_registry_client() -> ClinicalTrialsApi:
    global _registry_client
    if _registry_client is None:
        _registry_client = ClinicalTrialsApi()
    return _registry_client
