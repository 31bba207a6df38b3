"""
Reshape ClinicalTrials.gov v2 study records into flat Trial objects.

Only the first listed site is modelled (location, zip, coordinates).
"""

import logging
import re
from typing import Any, Dict, List, Optional

from src.registry.registry_models import Coordinates, Trial

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "Not specified"


def transform_trial_data(study: Dict[str, Any]) -> Trial:
    """
    Flatten one study record from the registry API.

    Args:
        study: Raw study with a nested ``protocolSection``

    Returns:
        Trial with defaults substituted for every missing module
    """
    protocol = study.get("protocolSection") or {}
    identification = protocol.get("identificationModule") or {}
    status = protocol.get("statusModule") or {}
    conditions = protocol.get("conditionsModule") or {}
    design = protocol.get("designModule") or {}
    description = protocol.get("descriptionModule") or {}
    eligibility = protocol.get("eligibilityModule") or {}
    locations = (protocol.get("contactsLocationsModule") or {}).get("locations") or []
    interventions = (protocol.get("armsInterventionsModule") or {}).get("interventions") or []
    sponsor = protocol.get("sponsorCollaboratorsModule") or {}
    enrollment = design.get("enrollmentInfo") or {}
    eligibility_text = eligibility.get("eligibilityCriteria")

    return Trial(
        id=identification.get("nctId") or "Unknown",
        title=identification.get("briefTitle") or identification.get("officialTitle") or "No title available",
        phase=format_list(design.get("phases")),
        condition=format_list(conditions.get("conditions")),
        location=format_location(locations),
        status=status.get("overallStatus") or "Unknown",
        participants=format_participants(enrollment),
        description=description.get("briefSummary") or "No description available",
        eligibility=eligibility_text or "Eligibility criteria not specified",
        sponsor=(sponsor.get("leadSponsor") or {}).get("name") or NOT_SPECIFIED,
        treatment_type=format_interventions(interventions),
        trial_size=get_trial_size(enrollment),
        zip_code=locations[0].get("zip") if locations else None,
        coordinates=get_coordinates(locations),
        eligibility_criteria=parse_eligibility_criteria(eligibility_text),
        start_date=(status.get("startDateStruct") or {}).get("date") or NOT_SPECIFIED,
        completion_date=(status.get("completionDateStruct") or {}).get("date") or NOT_SPECIFIED,
        study_type=design.get("studyType") or NOT_SPECIFIED,
    )


def transform_studies(studies: List[Dict[str, Any]]) -> List[Trial]:
    trials: List[Trial] = []
    for study in studies:
        try:
            trials.append(transform_trial_data(study))
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"[REGISTRY] Skipping malformed study record: {e}")
    return trials


def format_list(values: Optional[List[str]]) -> str:
    if not values:
        return NOT_SPECIFIED
    return ", ".join(values)


def format_location(locations: List[Dict[str, Any]]) -> str:
    if not locations:
        return "Location not specified"

    first = locations[0]
    parts = [first.get(key) for key in ("facility", "city", "state", "country")]
    parts = [part for part in parts if part]
    return ", ".join(parts) if parts else "Location not specified"


def format_participants(enrollment: Dict[str, Any]) -> str:
    count = enrollment.get("count")
    kind = enrollment.get("type")
    if count and kind:
        return f"{count} ({kind.lower()})"
    if count:
        return str(count)
    return NOT_SPECIFIED


def format_interventions(interventions: List[Dict[str, Any]]) -> str:
    if not interventions:
        return NOT_SPECIFIED
    # dict keeps first-seen order
    types = dict.fromkeys(item.get("type") or "Unknown" for item in interventions)
    return ", ".join(types)


def get_trial_size(enrollment: Dict[str, Any]) -> str:
    count = enrollment.get("count")
    if not count:
        return "Unknown"
    if count <= 50:
        return "Small (≤50)"
    if count <= 200:
        return "Medium (51-200)"
    if count <= 1000:
        return "Large (201-1000)"
    return "Very Large (>1000)"


def get_coordinates(locations: List[Dict[str, Any]]) -> Optional[Coordinates]:
    if not locations:
        return None
    geo_point = locations[0].get("geoPoint") or {}
    lat, lon = geo_point.get("lat"), geo_point.get("lon")
    if lat is None or lon is None:
        return None
    return Coordinates(lat=lat, lng=lon)


def parse_eligibility_criteria(criteria: Optional[str]) -> List[str]:
    if not criteria:
        return []
    return [line.strip() for line in re.split(r"[\n\r]+", criteria) if line.strip()]


def extract_unique_values(studies: List[Dict[str, Any]], field_name: str) -> List[str]:
    """Sorted distinct first values of a filterable field across raw studies."""
    values = set()

    for study in studies:
        protocol = study.get("protocolSection") or {}
        value = None
        try:
            if field_name == "condition":
                value = protocol["conditionsModule"]["conditions"][0]
            elif field_name == "phase":
                value = protocol["designModule"]["phases"][0]
            elif field_name == "locationCity":
                value = protocol["contactsLocationsModule"]["locations"][0]["city"]
            elif field_name == "status":
                value = protocol["statusModule"]["overallStatus"]
            elif field_name == "interventionType":
                value = protocol["armsInterventionsModule"]["interventions"][0]["type"]
        except (KeyError, IndexError, TypeError):
            value = None

        if isinstance(value, str) and value.strip():
            values.add(value.strip())

    return sorted(values)


def phase_numbers(phase_text: Optional[str]) -> List[int]:
    """Phase numbers named in a phase string ("PHASE1, PHASE2", "Phase 3")."""
    if not phase_text:
        return []
    return sorted({int(n) for n in re.findall(r"phase\s*_?(\d)", phase_text.lower())})


def extract_participant_count(participants: Optional[str]) -> int:
    match = re.search(r"\d+", participants or "")
    return int(match.group(0)) if match else 0
