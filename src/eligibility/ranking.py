import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from geopy.distance import geodesic

from src.eligibility.eligibility_models import TrialScore
from src.eligibility.scoring import calculate_eligibility_score
from src.registry.registry_models import Trial
from src.registry.registry_transform import phase_numbers

logger = logging.getLogger(__name__)

PHASE_PRIORITIES = {1: 100, 2: 80, 3: 60, 4: 40}


def get_phase_priority(phase: str) -> int:
    """Earliest phase named wins; unknown phases rank last."""
    numbers = phase_numbers(phase)
    if not numbers:
        return 0
    return PHASE_PRIORITIES.get(numbers[0], 0)


def get_status_priority(status: str) -> int:
    normalized = (status or "").lower().replace("_", " ").strip()

    if "not yet" in normalized:
        return 40
    if normalized == "recruiting":
        return 100
    if "active" in normalized:
        return 80
    if "enrolling" in normalized or "open" in normalized:
        return 60
    if "not recruiting" in normalized:
        return 40
    if "completed" in normalized:
        return 20
    return 0


def user_coordinates(answers: Mapping[str, Any]) -> Optional[Tuple[float, float]]:
    lat = answers.get("latitude", answers.get("lat"))
    lng = answers.get("longitude", answers.get("lng"))
    if lat is None or lng is None or lat == "" or lng == "":
        return None
    try:
        return float(lat), float(lng)
    except (TypeError, ValueError):
        logger.warning(f"[RANKING] Ignoring unparseable coordinates: {lat}, {lng}")
        return None


def distance_miles(origin: Tuple[float, float], trial: Trial) -> Optional[float]:
    if trial.coordinates is None:
        return None
    target = (trial.coordinates.lat, trial.coordinates.lng)
    return round(geodesic(origin, target).miles, 1)


def score_trial(trial: Trial, answers: Mapping[str, Any], origin: Optional[Tuple[float, float]] = None) -> TrialScore:
    result = calculate_eligibility_score(trial, answers)
    return TrialScore(
        trial=trial,
        eligibility_score=result.score,
        match_level=result.match_level,
        raw_score=result.raw_score,
        total_points=result.total_points,
        match_details=result.match_details,
        distance=distance_miles(origin, trial) if origin else None,
        phase_priority=get_phase_priority(trial.phase),
        status_priority=get_status_priority(trial.status),
    )


def _sort_key(score: TrialScore):
    # unknown distance sorts after every known one
    return (
        -score.eligibility_score,
        -score.phase_priority,
        -score.status_priority,
        score.distance is None,
        score.distance or 0.0,
    )


def rank_trials(trials: Sequence[Trial], answers: Mapping[str, Any]) -> List[TrialScore]:
    """Score every candidate and order best first."""
    origin = user_coordinates(answers)
    scores = [score_trial(trial, answers, origin) for trial in trials]
    scores.sort(key=_sort_key)
    logger.info(f"[RANKING] Ranked {len(scores)} trials")
    return scores
