"""
Trial search pass-through.

The registry only receives the text query; phase, location, status,
treatment type, sponsor, size and age filters are applied here, and
pagination is computed on the filtered list. totals therefore describe
the prefetch window, not the whole registry.
"""

import logging
import math
from typing import Dict, List, Set

from src.registry.registry_client import ClinicalTrialsApi
from src.registry.registry_models import Trial
from src.registry.registry_transform import extract_participant_count, phase_numbers
from src.search.search_models import SearchFilters, SearchResponse

logger = logging.getLogger(__name__)

PRESTIGIOUS_INSTITUTIONS = ["university", "medical center", "cancer center", "institute", "clinic"]

PHASE_GROUPS: Dict[str, Set[int]] = {
    "phase1": {1},
    "phase2": {2},
    "phase3": {3},
    "phase4": {4},
    "early": {1, 2},
    "late": {3, 4},
}

TREATMENT_TYPE_TERMS: Dict[str, List[str]] = {
    "immunotherapy": ["immunotherapy", "immune therapy", "checkpoint inhibitor", "car-t", "t-cell"],
    "targeted": ["targeted therapy", "targeted", "precision medicine", "genetic", "molecular"],
    "chemotherapy": ["chemotherapy", "chemo", "cytotoxic"],
    "radiation": ["radiation", "radiotherapy", "radiation therapy"],
    "surgery": ["surgery", "surgical", "resection"],
    "hormone": ["hormone therapy", "hormonal", "endocrine"],
    "vaccine": ["vaccine", "vaccination", "preventive"],
    "stem_cell": ["stem cell", "bone marrow", "transplant"],
}


def _is_set(value: str) -> bool:
    return bool(value) and value.strip() != "" and value != "all"


def _squash(text: str) -> str:
    return text.lower().replace(" ", "").replace("_", "")


def matches_location(trial: Trial, location: str) -> bool:
    wanted = location.lower().strip()
    trial_location = trial.location.lower()
    trial_zip = (trial.zip_code or "").lower()

    if wanted in trial_location or wanted in trial_zip:
        return True
    # "new york" matches "New York, NY" word by word
    return any(word in trial_location or word in trial_zip for word in wanted.split())


def matches_phase(trial: Trial, phase: str) -> bool:
    wanted = _squash(phase)
    trial_phase = _squash(trial.phase)
    return wanted in trial_phase or wanted.replace("phase", "") in trial_phase


def matches_age_range(trial: Trial, age_range: str) -> bool:
    eligibility = trial.eligibility.lower()

    if age_range == "18-30":
        return "18" in eligibility and "30" in eligibility
    if age_range == "31-50":
        return "31" in eligibility or "50" in eligibility or ("18" in eligibility and "75" in eligibility)
    if age_range == "51-70":
        return "51" in eligibility or "70" in eligibility or ("18" in eligibility and "75" in eligibility)
    if age_range == "70+":
        return "70" in eligibility or "elderly" in eligibility or "senior" in eligibility
    return True


def apply_filters(trials: List[Trial], filters: SearchFilters) -> List[Trial]:
    """Substring filters the registry query cannot express."""
    result = list(trials)

    if _is_set(filters.cancer_type):
        wanted = filters.cancer_type.lower()
        result = [
            t for t in result
            if wanted in t.condition.lower() or wanted in t.title.lower() or wanted in t.description.lower()
        ]

    if _is_set(filters.location):
        result = [t for t in result if matches_location(t, filters.location)]

    if _is_set(filters.phase):
        result = [t for t in result if matches_phase(t, filters.phase)]

    if _is_set(filters.status):
        wanted = filters.status.lower().replace("_", " ")
        result = [t for t in result if wanted in t.status.lower().replace("_", " ")]

    if _is_set(filters.treatment_type):
        wanted = filters.treatment_type.lower()
        result = [t for t in result if wanted in t.treatment_type.lower()]

    if _is_set(filters.sponsor):
        wanted = filters.sponsor.lower()
        result = [t for t in result if wanted in t.sponsor.lower()]

    if _is_set(filters.trial_size):
        wanted = filters.trial_size.lower()
        result = [t for t in result if t.trial_size.lower().startswith(wanted)]

    if _is_set(filters.age_range):
        result = [t for t in result if matches_age_range(t, filters.age_range)]

    return result


def calculate_relevance_score(trial: Trial, search_text: str, filters: SearchFilters) -> int:
    """Weighted text relevance of one trial for a free-text search."""
    query = search_text.lower()
    title = trial.title.lower()
    description = trial.description.lower()
    condition = trial.condition.lower()
    sponsor = trial.sponsor.lower()
    score = 0

    if query in title:
        score += 100
        if title == query:
            score += 50
        if title.startswith(query):
            score += 25

    if query in description:
        score += 50
        score += min(20, description.count(query) * 5)

    if query in condition:
        score += 50
        if condition == query:
            score += 25

    if query in sponsor:
        score += 25
        if any(inst in sponsor for inst in PRESTIGIOUS_INSTITUTIONS):
            score += 10

    if query in trial.eligibility.lower():
        score += 40

    if _is_set(filters.status) and trial.status.lower() == filters.status.lower():
        score += 15

    if _is_set(filters.location):
        location = filters.location.lower()
        if location in trial.location.lower():
            score += 10
            if len(location) > 3:
                score += 5

    if _is_set(filters.phase):
        wanted = PHASE_GROUPS.get(_squash(filters.phase), set())
        if wanted & set(phase_numbers(trial.phase)):
            score += 10

    if _is_set(filters.cancer_type):
        cancer_type = filters.cancer_type.lower()
        if cancer_type in condition or cancer_type in title:
            score += 15
            if condition == cancer_type or cancer_type in title:
                score += 10

    if _is_set(filters.treatment_type):
        terms = TREATMENT_TYPE_TERMS.get(filters.treatment_type.lower(), [])
        if any(term in title or term in description for term in terms):
            score += 20

    if trial.id.startswith(("NCT05", "NCT06")):
        score += 5

    count = extract_participant_count(trial.participants)
    if 0 < count <= 100:
        score += 5

    return score


def sort_trials(trials: List[Trial], filters: SearchFilters) -> List[Trial]:
    reverse = filters.sort_order.lower() != "asc"

    if filters.sort_by == "relevance":
        if not filters.search_text.strip():
            return list(trials)
        return sorted(
            trials,
            key=lambda t: calculate_relevance_score(t, filters.search_text, filters),
            reverse=True,
        )

    field = {
        "title": "title",
        "startDate": "start_date",
        "phase": "phase",
        "status": "status",
    }.get(filters.sort_by)
    if field is None:
        return list(trials)
    return sorted(trials, key=lambda t: str(getattr(t, field)).lower(), reverse=reverse)


def paginate(trials: List[Trial], page: int, limit: int, filters: SearchFilters) -> SearchResponse:
    """Slice the filtered list; totals reflect the filtered count."""
    total = len(trials)
    start = (page - 1) * limit
    end = start + limit

    return SearchResponse(
        trials=trials[start:end],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
        has_next_page=end < total,
        has_prev_page=page > 1,
        filters=filters.model_dump(by_alias=True),
        sort_by=filters.sort_by,
    )


async def search_trials(api: ClinicalTrialsApi, filters: SearchFilters) -> SearchResponse:
    trials = await api.search_trials(filters)
    filtered = apply_filters(trials, filters)
    logger.info(f"[SEARCH] {len(filtered)}/{len(trials)} trials left after filtering")
    ordered = sort_trials(filtered, filters)
    return paginate(ordered, filters.page, filters.limit, filters)
