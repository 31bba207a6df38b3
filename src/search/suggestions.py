from typing import Dict, List, Sequence, Tuple

from src.registry.registry_models import Trial
from src.search.search_models import Suggestion, SuggestionsResponse

MAX_SUGGESTIONS = 10
MIN_QUERY_LENGTH = 2

# type -> (category label, vocabulary)
STATIC_VOCABULARIES: Dict[str, Tuple[str, List[str]]] = {
    "cancer": (
        "Cancer Type",
        [
            "Breast Cancer", "Lung Cancer", "Colorectal Cancer", "Lymphoma", "Leukemia",
            "Prostate Cancer", "Pancreatic Cancer", "Ovarian Cancer", "Melanoma", "Brain Cancer",
        ],
    ),
    "location": (
        "Location",
        [
            "New York", "Houston", "Baltimore", "Rochester", "Los Angeles",
            "Boston", "Chicago", "Philadelphia", "Seattle", "Atlanta",
            "Miami", "Denver", "Cleveland", "Pittsburgh", "Nashville",
        ],
    ),
    "sponsor": (
        "Institution Type",
        [
            "University", "Medical Center", "Cancer Center", "Institute", "Clinic",
            "Pharmaceutical", "Government", "Nonprofit", "Foundation",
        ],
    ),
    "treatment": (
        "Treatment Type",
        [
            "Immunotherapy", "Targeted Therapy", "Chemotherapy", "Radiation Therapy",
            "Surgery", "Hormone Therapy", "Vaccine", "Stem Cell Therapy",
        ],
    ),
}


def _rank(suggestion: Suggestion, query: str) -> Tuple[int, int]:
    value = suggestion.value.lower()
    if value == query:
        return (0, 0)
    if value.startswith(query):
        return (1, 0)
    return (2, value.find(query))


def build_suggestions(query: str, suggestion_type: str, trials: Sequence[Trial] = ()) -> SuggestionsResponse:
    """
    Autocomplete for the search box.

    Static vocabularies are always consulted for the requested type;
    titles and conditions of live trials are added when type is "all".
    """
    if not query or len(query) < MIN_QUERY_LENGTH:
        return SuggestionsResponse(query=query, type=suggestion_type)

    query_lower = query.lower()
    suggestions: List[Suggestion] = []

    for kind, (category, vocabulary) in STATIC_VOCABULARIES.items():
        if suggestion_type not in ("all", kind):
            continue
        for term in vocabulary:
            if query_lower in term.lower():
                suggestions.append(Suggestion(type=kind, value=term, display=term, category=category))

    if suggestion_type == "all":
        seen = {s.value for s in suggestions}
        for trial in trials:
            if query_lower in trial.title.lower() and trial.title not in seen:
                seen.add(trial.title)
                suggestions.append(
                    Suggestion(
                        type="trial",
                        value=trial.title,
                        display=trial.title,
                        category="Trial Title",
                        trial_id=trial.id,
                    )
                )
            if query_lower in trial.condition.lower() and trial.condition not in seen:
                seen.add(trial.condition)
                suggestions.append(
                    Suggestion(
                        type="condition",
                        value=trial.condition,
                        display=trial.condition,
                        category="Medical Condition",
                    )
                )

    suggestions.sort(key=lambda s: _rank(s, query_lower))

    return SuggestionsResponse(
        query=query,
        type=suggestion_type,
        suggestions=suggestions[:MAX_SUGGESTIONS],
        total=len(suggestions),
    )
