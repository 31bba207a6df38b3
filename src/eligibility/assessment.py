"""
Eligibility assessment orchestration.

Validates the questionnaire, scores a window of live registry trials,
ranks them and stores the result for later retrieval.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from src.config import settings
from src.eligibility.assessment_store import AssessmentStore, generate_assessment_id
from src.eligibility.eligibility_models import (
    AssessmentResponse,
    AssessmentResult,
    AssessmentSummary,
    Recommendations,
    TrialScore,
)
from src.eligibility.insights import generate_assessment_insights, generate_next_steps
from src.eligibility.questions import REQUIRED_FIELDS
from src.eligibility.ranking import rank_trials
from src.registry.registry_client import ClinicalTrialsApi
from src.search.search_logics import search_trials
from src.search.search_models import SearchFilters

logger = logging.getLogger(__name__)

TOP_MATCH_THRESHOLD = 40
MAX_TOP_MATCHES = 5
MAX_OTHER_TRIALS = 3


class AssessmentValidationError(Exception):
    """Questionnaire answers are missing or incomplete."""

    def __init__(self, error: str, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.error = error
        self.message = message
        self.missing_fields = missing_fields or []

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"error": self.error, "message": self.message}
        if self.missing_fields:
            detail["missingFields"] = self.missing_fields
        return detail


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return not value
    return False


def validate_answers(answers: Optional[Mapping[str, Any]]) -> None:
    if not answers:
        raise AssessmentValidationError(
            "Assessment answers are required",
            "Please provide answers to the eligibility questions",
        )

    missing = [field for field in REQUIRED_FIELDS if _is_blank(answers.get(field))]
    if missing:
        raise AssessmentValidationError(
            "Missing required fields",
            f"Please answer all required questions: {', '.join(missing)}",
            missing,
        )


def summarize(trial_scores: List[TrialScore]) -> AssessmentSummary:
    if not trial_scores:
        return AssessmentSummary()

    levels: Dict[str, int] = {}
    for score in trial_scores:
        levels[score.match_level] = levels.get(score.match_level, 0) + 1

    values = [s.eligibility_score for s in trial_scores]
    return AssessmentSummary(
        total_trials=len(trial_scores),
        excellent_matches=levels.get("Excellent Match", 0),
        very_good_matches=levels.get("Very Good Match", 0),
        good_matches=levels.get("Good Match", 0),
        fair_matches=levels.get("Fair Match", 0),
        partial_matches=levels.get("Partial Match", 0),
        poor_matches=levels.get("Poor Match", 0),
        average_score=int(math.floor(sum(values) / len(values) + 0.5)),
        best_score=max(values),
        worst_score=min(values),
    )


def build_assessment(answers: Mapping[str, Any], trial_scores: List[TrialScore]) -> AssessmentResult:
    top_matches = [s for s in trial_scores if s.eligibility_score >= TOP_MATCH_THRESHOLD][:MAX_TOP_MATCHES]
    other_trials = [s for s in trial_scores if s.eligibility_score < TOP_MATCH_THRESHOLD][:MAX_OTHER_TRIALS]

    return AssessmentResult(
        id=generate_assessment_id(),
        timestamp=datetime.now(timezone.utc).isoformat(),
        answers=dict(answers),
        summary=summarize(trial_scores),
        recommendations=Recommendations(
            top_matches=top_matches,
            other_trials=other_trials,
            total_recommendations=len(top_matches) + len(other_trials),
        ),
        insights=generate_assessment_insights(answers, trial_scores),
        next_steps=generate_next_steps(top_matches, answers),
        trial_scores=trial_scores,
    )


async def run_assessment(
    api: ClinicalTrialsApi,
    answers: Mapping[str, Any],
    store: AssessmentStore,
    candidate_limit: int = settings.ASSESSMENT_CANDIDATE_LIMIT,
) -> AssessmentResponse:
    """
    Run a full eligibility assessment.

    Args:
        api: Registry adapter used to fetch candidate trials
        answers: Questionnaire answers keyed by question field
        store: Where the finished result is kept for retrieval

    Returns:
        AssessmentResponse with the stored id and the full result

    Raises:
        AssessmentValidationError: Required answers are missing
        RegistryError: Candidate trials could not be fetched
    """
    validate_answers(answers)
    logger.info("[ASSESS] Required fields validation passed")

    candidates = await search_trials(api, SearchFilters(page=1, limit=candidate_limit))
    trials = candidates.trials
    logger.info(f"[ASSESS] Scoring {len(trials)} candidate trials")

    trial_scores = rank_trials(trials, answers)
    result = build_assessment(answers, trial_scores)
    store.put(result)

    logger.info(
        f"[ASSESS] Assessment {result.id} stored: "
        f"{len(result.recommendations.top_matches)} top matches, best score {result.summary.best_score}"
    )
    return AssessmentResponse(assessment_id=result.id, result=result)
