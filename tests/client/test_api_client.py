from unittest.mock import MagicMock

import pytest
import requests

from src.client.api_client import ApiClient, ApiClientError


def make_response(status_code: int = 200, payload=None, reason: str = "OK") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    response.json.return_value = payload
    return response


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock()
    session.headers = {}
    return session


class TestApiClient:
    def test_health_check(self, session) -> None:
        session.request.return_value = make_response(payload={"status": "OK"})
        api = ApiClient(base_url="http://backend.test/api/", timeout=3.0, session=session)

        assert api.health_check() == {"status": "OK"}
        session.request.assert_called_once_with("GET", "http://backend.test/api/health", timeout=3.0)
        assert session.headers["Content-Type"] == "application/json"

    def test_search_drops_empty_filters(self, session) -> None:
        session.request.return_value = make_response(payload={"trials": []})
        api = ApiClient(base_url="http://backend.test/api", session=session)

        api.search_trials({"cancerType": "lung", "location": "", "phase": None, "page": 2})

        _, kwargs = session.request.call_args
        assert kwargs["params"] == {"cancerType": "lung", "page": "2"}

    def test_submit_assessment_posts_json(self, session) -> None:
        session.request.return_value = make_response(payload={"success": True})
        api = ApiClient(base_url="http://backend.test/api", session=session)

        api.submit_assessment({"age": "50"})

        args, kwargs = session.request.call_args
        assert args == ("POST", "http://backend.test/api/eligibility/assess")
        assert kwargs["json"] == {"age": "50"}

    def test_error_status_raises(self, session) -> None:
        session.request.return_value = make_response(404, reason="Not Found")
        api = ApiClient(base_url="http://backend.test/api", session=session)

        with pytest.raises(ApiClientError, match="API request failed: 404 Not Found") as exc:
            api.get_trial_by_id("NCT0")
        assert exc.value.status_code == 404

    def test_connection_error_raises(self, session) -> None:
        session.request.side_effect = requests.ConnectionError("refused")
        api = ApiClient(base_url="http://backend.test/api", session=session)

        with pytest.raises(ApiClientError):
            api.get_eligibility_questions()

    def test_suggestion_params(self, session) -> None:
        session.request.return_value = make_response(payload={"suggestions": []})
        api = ApiClient(base_url="http://backend.test/api", session=session)

        api.get_search_suggestions("lu", "cancer")

        args, kwargs = session.request.call_args
        assert args[1] == "http://backend.test/api/search/suggestions"
        assert kwargs["params"] == {"q": "lu", "type": "cancer"}
