"""
Synchronous client for the trial finder API, for frontends and scripts.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from src.config import settings

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """Request to the trial finder API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ApiClient:
    def __init__(
        self,
        base_url: str = settings.API_BASE_URL,
        timeout: float = settings.API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"[API CLIENT] {method} {url}")

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"[API CLIENT] Could not reach {url}: {e}")
            raise ApiClientError(f"API request failed: {e}") from e

        if not response.ok:
            raise ApiClientError(
                f"API request failed: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ApiClientError("API returned invalid JSON", status_code=response.status_code) from e

    def health_check(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def get_all_trials(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/trials")

    def search_trials(self, filters: Mapping[str, Any]) -> Dict[str, Any]:
        """Filters use the camelCase query names; None and '' are dropped."""
        params = {key: str(value) for key, value in filters.items() if value is not None and value != ""}
        return self._request("GET", "/trials/search", params=params)

    def get_trial_by_id(self, trial_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/trials/{trial_id}")

    def get_eligibility_questions(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/eligibility/questions")

    def submit_assessment(self, answers: Mapping[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/eligibility/assess", json=dict(answers))

    def get_assessment_result(self, assessment_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/eligibility/assessment/{assessment_id}")

    def get_assessment_insights(self, assessment_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/eligibility/insights/{assessment_id}")

    def get_search_suggestions(self, query: str, suggestion_type: str = "all") -> Dict[str, Any]:
        return self._request("GET", "/search/suggestions", params={"q": query, "type": suggestion_type})

    def get_available_filters(self) -> Dict[str, Any]:
        return self._request("GET", "/trials/filters")

    def get_trial_stats(self) -> Dict[str, Any]:
        return self._request("GET", "/trials/stats")

    def get_nearby_trials(self, lat: float, lng: float, radius: int = 100, limit: int = 20) -> Dict[str, Any]:
        return self._request(
            "GET",
            "/geolocation/nearby-trials",
            params={"lat": lat, "lng": lng, "radius": radius, "limit": limit},
        )

    def get_cancer_type_analytics(self) -> Dict[str, Any]:
        return self._request("GET", "/analytics/cancer-types")
