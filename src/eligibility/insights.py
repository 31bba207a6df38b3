"""
Narrative output of an assessment: insights, next steps and the
enhanced insights served for a stored assessment.
"""

import re
from typing import Any, Dict, List, Mapping, Optional

from src.eligibility.eligibility_models import (
    AssessmentResult,
    EnhancedInsights,
    Insight,
    NextStep,
    TrialRef,
    TrialScore,
)
from src.eligibility.scoring import FACTORS
from src.registry.registry_transform import phase_numbers


def _answer(factor_name: str, answers: Mapping[str, Any]) -> Any:
    for factor in FACTORS:
        if factor.name == factor_name:
            return factor.answer(answers)
    return None


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    return [str(value)]


def _refs(scores: List[TrialScore], limit: int, with_location: bool = False) -> List[TrialRef]:
    return [
        TrialRef(
            id=s.trial.id,
            title=s.trial.title,
            location=s.trial.location if with_location else None,
        )
        for s in scores[:limit]
    ]


def _parse_age(value: Any) -> Optional[int]:
    found = re.match(r"\s*(\d+)", str(value or ""))
    return int(found.group(1)) if found else None


def _dump(score: Optional[TrialScore]) -> Optional[Dict[str, Any]]:
    return score.model_dump(by_alias=True) if score is not None else None


def generate_assessment_insights(answers: Mapping[str, Any], trial_scores: List[TrialScore]) -> List[Insight]:
    insights: List[Insight] = []

    cancer_type = answers.get("cancerType")
    if cancer_type and cancer_type != "Other":
        cancer_trials = [
            s for s in trial_scores
            if any(d.factor == "Cancer Type" and d.match for d in s.match_details)
        ]
        if cancer_trials:
            insights.append(Insight(
                type="positive",
                category="Cancer Type",
                message=f"Found {len(cancer_trials)} trials specifically for {cancer_type}",
                trials=_refs(cancer_trials, 3),
            ))
        else:
            insights.append(Insight(
                type="warning",
                category="Cancer Type",
                message=f"Limited trials available for {cancer_type}. Consider expanding your search criteria.",
                suggestion="Look for trials with related cancer types or broader eligibility criteria",
            ))

    age = _parse_age(answers.get("age"))
    if age:
        if age < 18:
            pediatric = [s for s in trial_scores if "pediatric" in s.trial.eligibility.lower()]
            insights.append(Insight(
                type="info",
                category="Age",
                message="You qualify for pediatric trials. These often have specialized care and monitoring.",
                trials=_refs(pediatric, 2),
            ))
        elif age >= 65:
            elderly = [s for s in trial_scores if "elderly" in s.trial.eligibility.lower()]
            insights.append(Insight(
                type="info",
                category="Age",
                message="You qualify for elderly-specific trials. These consider age-related health factors.",
                trials=_refs(elderly, 2),
            ))

    treatment = str(answers.get("previousTreatment") or "").lower()
    if "no previous" in treatment or "no treatment" in treatment:
        naive = [s for s in trial_scores if "no previous" in s.trial.eligibility.lower()]
        insights.append(Insight(
            type="positive",
            category="Treatment History",
            message="Being treatment-naive gives you access to more trial options, including first-line treatments.",
            trials=_refs(naive, 2),
        ))
    else:
        for therapy in ("chemotherapy", "immunotherapy"):
            if therapy in treatment:
                experienced = [s for s in trial_scores if "previous" in s.trial.eligibility.lower()]
                insights.append(Insight(
                    type="info",
                    category="Treatment History",
                    message=(
                        f"Previous {therapy} experience may qualify you for trials testing "
                        "new combinations or second-line treatments."
                    ),
                    trials=_refs(experienced, 2),
                ))
                break

    travel = answers.get("travelWillingness")
    if isinstance(travel, str):
        travel = travel.lower()
        if any(t in travel for t in ("any", "100", "state", "country")):
            insights.append(Insight(
                type="positive",
                category="Location",
                message="Your willingness to travel widely significantly increases your trial options.",
                trials=_refs(trial_scores, 3, with_location=True),
            ))
        elif "25" in travel or "local" in travel:
            insights.append(Insight(
                type="warning",
                category="Location",
                message="Limited travel may restrict your trial options. Consider expanding your travel radius.",
                suggestion="Look for trials in nearby major cities or academic medical centers",
            ))

    excellent = sum(1 for s in trial_scores if s.match_level == "Excellent Match")
    if excellent >= 3:
        insights.append(Insight(
            type="positive",
            category="Overall Match",
            message=f"Excellent! You have {excellent} high-quality trial matches.",
            suggestion="Focus on trials with the highest scores and best phase/status combinations",
        ))
    elif excellent == 0:
        insights.append(Insight(
            type="warning",
            category="Overall Match",
            message="No excellent matches found. Consider adjusting your criteria or expanding your search.",
            suggestion='Look for trials with "Good Match" or "Fair Match" ratings that may still be suitable',
        ))

    return insights


def generate_next_steps(top_matches: List[TrialScore], answers: Mapping[str, Any]) -> List[NextStep]:
    steps: List[NextStep] = []

    if not top_matches:
        steps.append(NextStep(
            priority="high",
            action="Expand Search Criteria",
            description="Consider broadening your eligibility criteria or travel radius",
            details="Look for trials with different cancer types, phases, or locations",
        ))
    else:
        steps.append(NextStep(
            priority="high",
            action="Contact Top Trial Sites",
            description=f"Reach out to the top {min(3, len(top_matches))} trial sites",
            details="Call or email the trial coordinators to discuss your eligibility and next steps",
        ))

        if any(1 in phase_numbers(s.trial.phase) for s in top_matches):
            steps.append(NextStep(
                priority="medium",
                action="Research Phase 1 Trials",
                description="Learn about the risks and benefits of early-phase trials",
                details="Phase 1 trials test safety and dosage, not effectiveness",
            ))

        if any(s.trial.status.lower() == "recruiting" for s in top_matches):
            steps.append(NextStep(
                priority="medium",
                action="Prepare for Screening",
                description="Gather medical records and prepare for initial screening",
                details="Most trials require recent medical history, lab results, and imaging studies",
            ))

    steps.append(NextStep(
        priority="low",
        action="Consult Your Doctor",
        description="Discuss trial options with your oncologist",
        details="Your doctor can help evaluate trial suitability and coordinate with trial sites",
    ))
    return steps


# =========================================================
# Enhanced insights
# =========================================================

def cancer_type_insights(answers: Mapping[str, Any], scores: List[TrialScore]) -> Optional[Dict[str, Any]]:
    cancer_type = answers.get("cancerType")
    if not cancer_type or cancer_type == "Other":
        return None

    wanted = str(cancer_type).lower()
    exact = [s for s in scores if wanted in s.trial.condition.lower()]
    related = [s for s in scores if wanted not in s.trial.condition.lower() and s.eligibility_score >= 70]

    return {
        "exactMatches": len(exact),
        "relatedMatches": len(related),
        "topExactMatch": _dump(exact[0] if exact else None),
        "topRelatedMatch": _dump(related[0] if related else None),
        "message": f"Found {len(exact)} exact matches and {len(related)} related trials for {cancer_type}",
    }


def eligibility_insights(answers: Mapping[str, Any], scores: List[TrialScore]) -> List[Dict[str, Any]]:
    insights: List[Dict[str, Any]] = []

    age = _parse_age(answers.get("age"))
    if age:
        # trials without an age rule count as appropriate
        appropriate = [
            s for s in scores
            if all(d.match for d in s.match_details if d.factor == "Age")
        ]
        insights.append({
            "type": "age",
            "message": f"Your age ({age}) is appropriate for {len(appropriate)} trials",
            "trials": [s.model_dump(by_alias=True) for s in appropriate[:3]],
        })

    if answers.get("performanceStatus"):
        strong = [s for s in scores if s.eligibility_score >= 80]
        insights.append({
            "type": "performance",
            "message": f"Your performance status allows participation in {len(strong)} trials",
            "trials": [s.model_dump(by_alias=True) for s in strong[:3]],
        })

    return insights


def location_insights(answers: Mapping[str, Any], scores: List[TrialScore]) -> Optional[Dict[str, Any]]:
    location = str(answers.get("location") or "").strip().lower()
    if not location:
        return None

    local = [s for s in scores if location in s.trial.location.lower()]
    nearby = [
        s for s in scores
        if location not in s.trial.location.lower() and s.eligibility_score >= 75
    ]
    return {
        "localTrials": len(local),
        "nearbyTrials": len(nearby),
        "topLocalTrial": _dump(local[0] if local else None),
        "topNearbyTrial": _dump(nearby[0] if nearby else None),
        "message": f"Found {len(local)} local trials and {len(nearby)} nearby trials",
    }


def treatment_insights(answers: Mapping[str, Any], scores: List[TrialScore]) -> Optional[Dict[str, Any]]:
    preferences = [p.lower() for p in _as_list(_answer("Treatment Preferences", answers))]
    if not preferences:
        return None

    preferred = [
        s for s in scores
        if any(pref in s.trial.treatment_type.lower() for pref in preferences)
    ]
    return {
        "preferredTreatmentTrials": len(preferred),
        "topPreferredTrial": _dump(preferred[0] if preferred else None),
        "message": f"Found {len(preferred)} trials matching your treatment preference",
    }


def _preferred_phases(answers: Mapping[str, Any]) -> List[int]:
    phases = set()
    for pref in _as_list(_answer("Trial Phase Preferences", answers)):
        phases.update(phase_numbers(pref))
    return sorted(phases)


def phase_insights(answers: Mapping[str, Any], scores: List[TrialScore]) -> Optional[Dict[str, Any]]:
    wanted = _preferred_phases(answers)
    if not wanted:
        return None

    preferred = [s for s in scores if set(wanted) & set(phase_numbers(s.trial.phase))]
    label = ", ".join(f"Phase {n}" for n in wanted)
    return {
        "preferredPhaseTrials": len(preferred),
        "topPreferredPhaseTrial": _dump(preferred[0] if preferred else None),
        "message": f"Found {len(preferred)} trials in your preferred phase ({label})",
    }


def enhanced_recommendations(answers: Mapping[str, Any], scores: List[TrialScore]) -> List[Dict[str, Any]]:
    recommendations: List[Dict[str, Any]] = []

    if scores and scores[0].eligibility_score >= 90:
        top = scores[0]
        recommendations.append({
            "type": "top_match",
            "priority": "high",
            "message": f"Excellent match: {top.trial.title}",
            "trial": top.trial.model_dump(by_alias=True),
            "score": top.eligibility_score,
        })

    location = str(answers.get("location") or "").strip().lower()
    if location:
        local = [
            s for s in scores
            if location in s.trial.location.lower() and s.eligibility_score >= 80
        ]
        if local:
            recommendations.append({
                "type": "local_trial",
                "priority": "medium",
                "message": f"Local trial available: {local[0].trial.title}",
                "trial": local[0].trial.model_dump(by_alias=True),
                "score": local[0].eligibility_score,
            })

    wanted = _preferred_phases(answers)
    if wanted:
        phase_trials = [
            s for s in scores
            if set(wanted) & set(phase_numbers(s.trial.phase)) and s.eligibility_score >= 75
        ]
        if phase_trials:
            best = phase_trials[0]
            recommendations.append({
                "type": "phase_specific",
                "priority": "medium",
                "message": f"{best.trial.phase} trial: {best.trial.title}",
                "trial": best.trial.model_dump(by_alias=True),
                "score": best.eligibility_score,
            })

    return recommendations


def generate_enhanced_insights(assessment: AssessmentResult) -> EnhancedInsights:
    answers, scores = assessment.answers, assessment.trial_scores
    return EnhancedInsights(
        cancer_type_insights=cancer_type_insights(answers, scores),
        eligibility_insights=eligibility_insights(answers, scores),
        location_insights=location_insights(answers, scores),
        treatment_insights=treatment_insights(answers, scores),
        phase_insights=phase_insights(answers, scores),
        recommendations=enhanced_recommendations(answers, scores),
    )
