"""
Route tests for the trial and search endpoints
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src.main import app
from src.registry.registry_client import RegistryError, TrialNotFoundError
from src.registry.registry_models import FilterOptions, TrialStats

client = TestClient(app)


@pytest.fixture
def registry(make_trial):
    api = MagicMock()
    api.search_trials = AsyncMock(
        return_value=[
            make_trial(
                f"NCT{i:08d}",
                title=f"Lung Cancer Study {i}",
                condition="Non-Small Cell Lung Cancer",
                phase="PHASE2" if i % 2 else "PHASE3",
                status="RECRUITING",
            )
            for i in range(1, 26)
        ]
    )
    api.get_trial_by_id = AsyncMock(
        return_value=make_trial(
            "NCT05000001",
            eligibility="Inclusion:\nAge 18+\nECOG 0-1",
            eligibility_criteria=["Inclusion:", "Age 18+", "ECOG 0-1"],
        )
    )
    api.get_trial_stats = AsyncMock(return_value=TrialStats(total_trials=4321))
    api.get_available_filters = AsyncMock(return_value=FilterOptions(phases=["PHASE1", "PHASE2"]))

    with patch("src.registry.registry_routes.get_registry_client", return_value=api), patch(
        "src.search.search_routes.get_registry_client", return_value=api
    ):
        yield api


def test_health_check():
    """Test health check endpoint"""
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "OK", "message": "Backend is running"}


class TestTrialRoutes:
    def test_all_trials_is_a_plain_list(self, registry) -> None:
        response = client.get("/api/trials")
        assert response.status_code == 200
        trials = response.json()
        assert len(trials) == 25
        assert trials[0]["treatmentType"] == "Not specified"

    def test_search_pagination(self, registry) -> None:
        response = client.get("/api/trials/search", params={"page": 2, "limit": 10})
        assert response.status_code == 200

        body = response.json()
        assert [t["id"] for t in body["trials"]] == [f"NCT{i:08d}" for i in range(11, 21)]
        assert body["total"] == 25
        assert body["totalPages"] == 3
        assert body["hasNextPage"] is True
        assert body["hasPrevPage"] is True

    def test_search_filters_in_process(self, registry) -> None:
        response = client.get("/api/trials/search", params={"phase": "PHASE3", "cancerType": "lung"})
        body = response.json()

        assert body["total"] == 12
        assert body["filters"]["cancerType"] == "lung"
        sent = registry.search_trials.call_args.args[0]
        assert sent.cancer_type == "lung"

    def test_search_upstream_failure(self, registry) -> None:
        registry.search_trials.side_effect = RegistryError("Failed to fetch clinical trials data")
        response = client.get("/api/trials/search")
        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "Failed to search trials"

    def test_trial_detail(self, registry) -> None:
        response = client.get("/api/trials/NCT05000001")
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["id"] == "NCT05000001"
        assert data["eligibility"] == ["Inclusion:", "Age 18+", "ECOG 0-1"]
        assert data["eligibilityCount"] == 3
        assert data["contactInfo"]["phone"] == "1-800-CLINICAL"
        assert "lastUpdated" in data

    def test_unknown_trial(self, registry) -> None:
        registry.get_trial_by_id.side_effect = TrialNotFoundError("No clinical trial found with ID: NCT0")
        response = client.get("/api/trials/NCT0")
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "Trial not found"

    def test_fixed_paths_are_not_trial_ids(self, registry) -> None:
        stats = client.get("/api/trials/stats")
        filters = client.get("/api/trials/filters")

        assert stats.json()["statistics"]["totalTrials"] == 4321
        assert filters.json()["filters"]["phases"] == ["PHASE1", "PHASE2"]
        registry.get_trial_by_id.assert_not_called()


class TestSuggestionRoutes:
    def test_suggestions_include_live_titles(self, registry) -> None:
        response = client.get("/api/search/suggestions", params={"q": "lung"})
        body = response.json()

        assert body["query"] == "lung"
        assert body["suggestions"][0]["value"] == "Lung Cancer"
        assert any(s["type"] == "trial" and s["trialId"] for s in body["suggestions"])

    def test_suggestions_survive_registry_outage(self, registry) -> None:
        registry.search_trials.side_effect = RegistryError("down")
        response = client.get("/api/search/suggestions", params={"q": "lung"})

        assert response.status_code == 200
        assert [s["value"] for s in response.json()["suggestions"]] == ["Lung Cancer"]

    def test_short_query(self, registry) -> None:
        body = client.get("/api/search/suggestions", params={"q": "l"}).json()
        assert body["suggestions"] == []
        registry.search_trials.assert_not_called()
