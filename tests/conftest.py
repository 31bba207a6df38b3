"""Shared fixtures: raw registry study records and flattened trials."""

from typing import Any, Callable, Dict, Optional

import pytest

from src.registry.registry_models import Coordinates, Trial


def build_study(
    nct_id: str = "NCT05000001",
    title: str = "Pembrolizumab in Non-Small Cell Lung Cancer",
    conditions: Optional[list] = None,
    phases: Optional[list] = None,
    status: str = "RECRUITING",
    enrollment: Optional[int] = 120,
    city: str = "Boston",
    geo: Optional[Dict[str, float]] = None,
    eligibility: str = "Inclusion Criteria:\n* Age 18 to 75\n* ECOG 0-1",
) -> Dict[str, Any]:
    return {
        "protocolSection": {
            "identificationModule": {"nctId": nct_id, "briefTitle": title},
            "statusModule": {
                "overallStatus": status,
                "startDateStruct": {"date": "2024-01-15"},
                "completionDateStruct": {"date": "2027-06-30"},
            },
            "conditionsModule": {"conditions": conditions or ["Non-Small Cell Lung Cancer"]},
            "designModule": {
                "phases": phases or ["PHASE2"],
                "studyType": "INTERVENTIONAL",
                "enrollmentInfo": {"count": enrollment, "type": "ESTIMATED"} if enrollment else {},
            },
            "descriptionModule": {"briefSummary": "A study of immunotherapy for advanced disease."},
            "eligibilityModule": {"eligibilityCriteria": eligibility},
            "contactsLocationsModule": {
                "locations": [
                    {
                        "facility": "Dana-Farber Cancer Institute",
                        "city": city,
                        "state": "Massachusetts",
                        "zip": "02215",
                        "country": "United States",
                        "geoPoint": geo if geo is not None else {"lat": 42.3376, "lon": -71.1085},
                    }
                ]
            },
            "armsInterventionsModule": {
                "interventions": [{"type": "DRUG"}, {"type": "DRUG"}, {"type": "RADIATION"}]
            },
            "sponsorCollaboratorsModule": {"leadSponsor": {"name": "Dana-Farber Cancer Institute"}},
        }
    }


@pytest.fixture
def make_study() -> Callable[..., Dict[str, Any]]:
    return build_study


@pytest.fixture
def make_trial() -> Callable[..., Trial]:
    def _make(trial_id: str = "NCT05000001", **fields: Any) -> Trial:
        if "coordinates" in fields and isinstance(fields["coordinates"], tuple):
            lat, lng = fields["coordinates"]
            fields["coordinates"] = Coordinates(lat=lat, lng=lng)
        return Trial(id=trial_id, **fields)

    return _make
