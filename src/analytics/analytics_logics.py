"""
Aggregations over a window of live registry trials: per-condition
statistics and trials near a point.
"""

import logging
from typing import Dict, List, Sequence

from geopy.distance import geodesic

from src.analytics.analytics_models import CancerTypeStat, NearbyTrial
from src.registry.registry_models import Trial
from src.registry.registry_transform import extract_participant_count

logger = logging.getLogger(__name__)

DISTANCE_GROUPS = [
    ("0-25 miles", 0, 25),
    ("26-50 miles", 25, 50),
    ("51-100 miles", 50, 100),
]


def cancer_type_stats(trials: Sequence[Trial]) -> Dict[str, CancerTypeStat]:
    """Per-condition histograms, most trials first."""
    stats: Dict[str, CancerTypeStat] = {}

    for trial in trials:
        entry = stats.setdefault(trial.condition, CancerTypeStat())
        entry.count += 1
        entry.phases[trial.phase] = entry.phases.get(trial.phase, 0) + 1
        entry.statuses[trial.status] = entry.statuses.get(trial.status, 0) + 1

        if trial.treatment_type:
            entry.treatment_types[trial.treatment_type] = entry.treatment_types.get(trial.treatment_type, 0) + 1

        # location is "facility, city, ..."; the first part names the site
        city = trial.location.split(",")[0].strip()
        if city not in entry.locations:
            entry.locations.append(city)

        entry.total_participants += extract_participant_count(trial.participants)

    ordered = sorted(stats.items(), key=lambda item: item[1].count, reverse=True)
    return dict(ordered)


def nearby_trials(
    trials: Sequence[Trial],
    lat: float,
    lng: float,
    radius: int,
    limit: int,
) -> List[NearbyTrial]:
    """Trials whose first site lies within radius miles, nearest first."""
    origin = (lat, lng)
    nearby: List[NearbyTrial] = []

    for trial in trials:
        if trial.coordinates is None:
            continue
        miles = geodesic(origin, (trial.coordinates.lat, trial.coordinates.lng)).miles
        if miles <= radius:
            nearby.append(NearbyTrial(**trial.model_dump(), distance=round(miles, 1)))

    nearby.sort(key=lambda t: t.distance)
    logger.info(f"[ANALYTICS] {len(nearby)} trials within {radius} miles of ({lat}, {lng})")
    return nearby[:limit]


def group_by_distance(trials: Sequence[NearbyTrial]) -> Dict[str, List[NearbyTrial]]:
    groups: Dict[str, List[NearbyTrial]] = {label: [] for label, _, _ in DISTANCE_GROUPS}
    for trial in trials:
        for label, low, high in DISTANCE_GROUPS:
            if trial.distance <= high and (low == 0 or trial.distance > low):
                groups[label].append(trial)
                break
    return groups
