"""
Eligibility scoring engine.

Scores one trial against a questionnaire answer map. Each factor is a
rule with a fixed maximum; factors the user did not answer are skipped
and their maximum is left out of the denominator, so the percentage is
computed over the answered subset only.

Matching is case-insensitive substring search over the trial's free
text. The weights and synonym tables are demonstration heuristics, not
clinical rules.
"""

import logging
import math
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from src.eligibility.eligibility_models import EligibilityScore, FactorResult
from src.registry.registry_models import Trial
from src.registry.registry_transform import phase_numbers

logger = logging.getLogger(__name__)

Answers = Mapping[str, Any]
TrialLike = Union[Trial, Mapping[str, Any]]
# (points, matched, description)
RuleOutcome = Tuple[int, bool, str]

MATCH_LEVELS: List[Tuple[int, str]] = [
    (90, "Excellent Match"),
    (80, "Very Good Match"),
    (70, "Good Match"),
    (60, "Fair Match"),
    (40, "Partial Match"),
]
POOR_MATCH = "Poor Match"

CANCER_RELATIONS: Dict[str, List[str]] = {
    "lung": ["pulmonary", "respiratory", "bronchogenic", "non-small cell", "nsclc", "small cell", "sclc"],
    "breast": ["mammary", "ductal", "lobular", "triple negative", "her2+", "her2 positive"],
    "colorectal": ["colon", "rectal", "bowel", "intestinal", "adenocarcinoma"],
    "lymphoma": ["lymphatic", "lymph", "hodgkin", "non-hodgkin", "nhl", "hl"],
    "leukemia": ["leukemic", "blood cancer", "acute", "chronic", "myeloid", "lymphocytic"],
    "prostate": ["prostatic", "adenocarcinoma", "castration resistant"],
    "mesothelioma": ["pleural mesothelioma", "peritoneal mesothelioma", "asbestos-related"],
    "cholangiocarcinoma": ["bile duct cancer", "biliary cancer", "fgfr2 fusion", "idh1 mutation"],
    "endometrial": ["uterine cancer", "endometrium", "uterine adenocarcinoma"],
    "testicular": ["testis cancer", "germ cell tumor", "seminoma", "non-seminoma"],
    "esophageal": ["esophagus cancer", "esophageal adenocarcinoma", "squamous cell"],
    "bladder": ["urinary bladder", "transitional cell carcinoma", "urothelial"],
    "renal": ["kidney cancer", "renal cell carcinoma", "rcc", "clear cell"],
    "head and neck": ["oropharyngeal", "laryngeal", "nasopharyngeal", "oral cancer"],
    "osteosarcoma": ["bone cancer", "skeletal sarcoma", "high-risk bone"],
    "uveal": ["eye cancer", "ocular melanoma", "choroidal melanoma", "iris melanoma"],
    "pediatric": ["childhood cancer", "pediatric oncology", "rare pediatric"],
    "geriatric": ["elderly cancer", "senior oncology", "aging cancer"],
}

TREATMENT_PREFERENCE_TERMS: Dict[str, str] = {
    "surgery": "surgery",
    "immunotherapy": "immunotherapy",
    "targeted therapy": "targeted",
    "chemotherapy": "chemotherapy",
    "radiation therapy": "radiation",
    "hormone therapy": "hormone",
    "stem cell therapy": "stem cell",
    "vaccine therapy": "vaccine",
    "proton therapy": "proton",
    "precision medicine": "precision",
    "clinical trials": "trial",
}

SPECIAL_CONSIDERATION_TERMS: List[Tuple[str, str]] = [
    ("hiv", "hiv"),
    ("transplant", "transplant"),
    ("pregnant", "pregnancy"),
    ("pediatric", "pediatric"),
    ("geriatric", "geriatric"),
    ("rare cancer", "rare"),
    ("genetic mutations", "genetic"),
]


class TrialText:
    """Lower-cased searchable fields of one trial; missing fields read as ''."""

    def __init__(self, trial: TrialLike):
        self.id = _field(trial, "id")
        self.condition = _field(trial, "condition").lower()
        self.title = _field(trial, "title").lower()
        self.description = _field(trial, "description").lower()
        self.eligibility = _field(trial, "eligibility").lower()
        self.phase = _field(trial, "phase")
        self.combined = f"{self.title} {self.description} {self.eligibility}"


def _field(trial: TrialLike, name: str) -> str:
    value = trial.get(name) if isinstance(trial, Mapping) else getattr(trial, name, None)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def _as_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v not in (None, "")]
    return [str(value)]


def _normalize(text: str) -> str:
    return text.strip().lower().replace("’", "'")


# =========================================================
# Factor rules
# =========================================================

def score_cancer_type(text: TrialText, answer: Any) -> RuleOutcome:
    cancer_type = str(answer)
    wanted = _normalize(cancer_type)

    if wanted == "other":
        generic = f"{text.condition} {text.title} {text.description}"
        if any(word in generic for word in ("cancer", "tumor", "neoplasm")):
            return 25, True, "Your cancer type matches this general cancer trial"
        return 0, False, "This trial is not for your type of cancer"

    exact = f"Your cancer type ({cancer_type}) exactly matches this trial's condition"
    related_msg = f"Your cancer type ({cancer_type}) is related to this trial's condition"
    miss = f"Your cancer type ({cancer_type}) doesn't match this trial's condition"

    related = CANCER_RELATIONS.get(wanted, [])
    named = f"{text.condition} | {text.title}"

    if wanted in named:
        # "non-small cell lung" names a subtype of a bare "lung" answer
        if any(_qualifies(term, wanted, named) for term in related):
            return 30, True, related_msg
        return 40, True, exact

    if related and any(term in named or term in text.description for term in related):
        return 30, True, related_msg

    return 0, False, miss


def _qualifies(term: str, family: str, text: str) -> bool:
    pattern = rf"\b{re.escape(term)}\s+{re.escape(family)}\b"
    return re.search(pattern, text) is not None


def _stage_group(stage: str) -> Optional[str]:
    if stage in ("stage i", "stage ii") or "early" in stage or "stage i-ii" in stage:
        return "early"
    if stage in ("stage iii", "stage iv") or "advanced" in stage or "stage iii-iv" in stage:
        return "advanced"
    for group in ("metastatic", "remission", "intermediate"):
        if group in stage:
            return group
    if "relapsed" in stage or "refractory" in stage:
        return "relapsed"
    if "resectable" in stage:
        return "resectable"
    if "any stage" in stage:
        return "any"
    return None


def score_stage(text: TrialText, answer: Any) -> RuleOutcome:
    group = _stage_group(_normalize(str(answer)))
    elig, desc = text.eligibility, text.description

    if group == "early":
        matched = "early" in elig or any(t in desc for t in ("early stage", "stage i", "stage ii"))
    elif group == "advanced":
        matched = "advanced" in elig or any(t in desc for t in ("advanced", "stage iii", "stage iv"))
    elif group == "relapsed":
        matched = any(t in elig or t in desc for t in ("relapsed", "refractory"))
    elif group == "any":
        matched = True
    elif group is not None:
        matched = group in elig or group in desc
    else:
        matched = False

    if matched:
        return 25, True, f"Your cancer stage ({answer}) matches this trial's requirements"
    return 0, False, f"Your cancer stage ({answer}) may not meet this trial's requirements"


def score_age(text: TrialText, answer: Any) -> RuleOutcome:
    found = re.match(r"\s*(-?\d+)", str(answer))
    if not found:
        return 0, False, f"Your age ({answer}) may not meet this trial's age requirements"

    age = int(found.group(1))
    elig = text.eligibility
    points = 0

    if "18" in elig and "75" in elig:
        points = 20 if 18 <= age <= 75 else 0
    elif "18" in elig and "70" in elig:
        points = 20 if 18 <= age <= 70 else 0
    elif "pediatric" in elig or "child" in elig:
        points = 20 if age < 18 else 0
    elif "elderly" in elig or "senior" in elig:
        points = 20 if age >= 65 else 0
    elif "adult" in elig:
        points = 15 if age >= 18 else 0

    if points:
        return points, True, f"Your age ({age}) meets this trial's age requirements"
    return 0, False, f"Your age ({age}) may not meet this trial's age requirements"


def score_previous_treatment(text: TrialText, answer: Any) -> RuleOutcome:
    treatment = _normalize(str(answer))
    elig = text.eligibility
    compatible = f"Your treatment history ({answer}) is compatible with this trial"
    incompatible = f"Your treatment history ({answer}) may not be compatible"

    if "no previous" in treatment or "no treatment" in treatment or "naive" in treatment:
        if "no previous" in elig or "treatment naive" in elig:
            return 20, True, compatible
        return 0, False, incompatible

    for therapy, evidence in (
        ("chemotherapy", ("previous chemotherapy", "chemo")),
        ("immunotherapy", ("previous immunotherapy", "immune")),
    ):
        if therapy in treatment:
            if any(term in elig for term in evidence):
                return 20, True, compatible
            if "no previous" in elig and therapy not in elig:
                return 0, False, incompatible
            return 10, True, compatible

    return 10, True, compatible


def _performance_band(status: str) -> Optional[str]:
    ecog = re.search(r"ecog\s*(\d)", status)
    if ecog:
        grade = int(ecog.group(1))
        if grade <= 1:
            return "good"
        return "fair" if grade == 2 else "poor"
    if any(scale in status for scale in ("kps", "karnofsky", "lansky")):
        return "good"
    for band, words in (("good", ("excellent", "good")), ("fair", ("fair",)), ("poor", ("poor",))):
        if any(word in status for word in words):
            return band
    return None


def score_performance_status(text: TrialText, answer: Any) -> RuleOutcome:
    band = _performance_band(_normalize(str(answer)))
    elig = text.eligibility
    points, matched = 0, False

    if band == "good":
        strong = any(t in elig for t in ("good", "excellent", "performance status", "overall health"))
        points, matched = (15 if strong else 10), True
    elif band == "fair":
        points, matched = (15 if ("fair" in elig or "adequate" in elig) else 5), True
    elif band == "poor":
        if "poor" in elig or "limited" in elig:
            points, matched = 15, True

    if matched:
        return points, True, f"Your performance status ({answer}) meets this trial's requirements"
    return 0, False, f"Your performance status ({answer}) may not meet this trial's requirements"


def score_travel(text: TrialText, answer: Any) -> RuleOutcome:
    travel = _normalize(str(answer))

    if any(t in travel for t in ("any", "100", "state", "country")):
        points = 10
    elif "50" in travel:
        points = 8
    elif "25" in travel:
        points = 5
    else:
        return 0, False, f"Your travel preference ({answer}) may limit trial participation"
    return points, True, f"Your travel preference ({answer}) is compatible with trial participation"


def score_treatment_preferences(text: TrialText, answer: Any) -> RuleOutcome:
    preferences = [_normalize(p) for p in _as_list(answer)]
    matched = "any treatment type" in preferences or any(
        pref in TREATMENT_PREFERENCE_TERMS and TREATMENT_PREFERENCE_TERMS[pref] in text.combined
        for pref in preferences
    )
    if matched:
        return 15, True, "Your treatment preferences match this trial's approach"
    return 0, False, "Your treatment preferences may not align with this trial"


def score_phase_preferences(text: TrialText, answer: Any) -> RuleOutcome:
    preferences = [_normalize(p) for p in _as_list(answer)]
    trial_phases = set(phase_numbers(text.phase))
    matched = any("any phase" in pref for pref in preferences) or any(
        set(phase_numbers(pref)) & trial_phases for pref in preferences
    )
    if matched:
        return 12, True, f"Your preferred trial phases match this trial ({text.phase})"
    return 0, False, f"Your preferred trial phases don't match this trial ({text.phase})"


def score_special_considerations(text: TrialText, answer: Any) -> RuleOutcome:
    considerations = [_normalize(c) for c in _as_list(answer)]
    matched = "none" in considerations or any(
        marker in consideration and evidence in text.combined
        for consideration in considerations
        for marker, evidence in SPECIAL_CONSIDERATION_TERMS
    )
    if matched:
        return 10, True, "Your special considerations are addressed by this trial"
    return 0, False, "This trial may not address your special considerations"


def score_genetic_testing(text: TrialText, answer: Any) -> RuleOutcome:
    genetic = _normalize(str(answer))
    combined = text.combined
    points = 0

    if "brca" in genetic:
        points = 8 if "brca" in combined else 0
    elif "lynch" in genetic:
        points = 8 if "lynch" in combined else 0
    elif "flt3" in genetic:
        points = 8 if "flt3" in combined else 0
    elif "her2" in genetic:
        points = 8 if "her2" in combined else 0
    elif "other cancer genes" in genetic or "genetic" in genetic:
        points = 6 if "genetic" in combined else 0
    elif genetic in ("no", "none") or "don't know" in genetic:
        points = 5

    if points:
        return points, True, "Your genetic testing status is compatible with this trial"
    return 0, False, "Your genetic testing status may not be compatible"


def score_organ_function(text: TrialText, answer: Any) -> RuleOutcome:
    organ = _normalize(str(answer))
    combined = text.combined
    points, matched = 0, False

    if "not adequate" in organ or "poor" in organ:
        if "adequate" in combined or "limited" in combined:
            points, matched = 3, True
    elif any(word in organ for word in ("excellent", "good", "adequate")):
        strong = any(word in combined for word in ("adequate", "good", "excellent"))
        points, matched = (5 if strong else 3), True
    elif "fair" in organ:
        points, matched = (5 if ("adequate" in combined or "fair" in combined) else 2), True

    if matched:
        return points, True, "Your organ function status is compatible with this trial"
    return 0, False, "Your organ function status may limit trial participation"


# =========================================================
# Factor table
# =========================================================

class Factor:
    """One weighted rule, read from the first answered key."""

    def __init__(
        self,
        name: str,
        max_points: int,
        tier: str,
        answer_keys: Sequence[str],
        rule: Callable[[TrialText, Any], RuleOutcome],
    ) -> None:
        self.name = name
        self.max_points = max_points
        self.tier = tier
        self.answer_keys = tuple(answer_keys)
        self.rule = rule

    def answer(self, answers: Answers) -> Any:
        for key in self.answer_keys:
            value = answers.get(key)
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if isinstance(value, (list, tuple)) and not value:
                continue
            return value
        return None

    def evaluate(self, text: TrialText, answers: Answers) -> Optional[FactorResult]:
        value = self.answer(answers)
        if value is None:
            return None

        points, matched, description = self.rule(text, value)
        points = max(0, min(points, self.max_points))
        # the cancer type label reports the points actually awarded
        shown = points if self.name == "Cancer Type" else self.max_points
        return FactorResult(
            factor=self.name,
            match=matched,
            weight=f"{self.tier} ({shown} points)",
            description=description,
            points=points,
            max_points=self.max_points,
        )


FACTORS: List[Factor] = [
    Factor("Cancer Type", 40, "High", ["cancerType"], score_cancer_type),
    Factor("Cancer Stage", 25, "High", ["stage"], score_stage),
    Factor("Age", 20, "Medium", ["age"], score_age),
    Factor("Treatment History", 20, "Medium", ["previousTreatment"], score_previous_treatment),
    Factor("Health Status", 15, "Medium", ["performanceStatus"], score_performance_status),
    Factor("Travel Willingness", 10, "Low", ["travelWillingness"], score_travel),
    Factor(
        "Treatment Preferences", 15, "Medium",
        ["treatmentPreferences", "treatment-preferences"], score_treatment_preferences,
    ),
    Factor(
        "Trial Phase Preferences", 12, "Medium",
        ["trialPhasePreferences", "trial-phase-preferences"], score_phase_preferences,
    ),
    Factor(
        "Special Considerations", 10, "Medium",
        ["specialConsiderations", "special-considerations"], score_special_considerations,
    ),
    Factor(
        "Genetic Testing", 8, "Low",
        ["geneticTesting", "genetic-testing", "geneticMutations"], score_genetic_testing,
    ),
    Factor(
        "Overall Organ Function", 5, "Low",
        ["organFunctionOverall", "organ-function-overall", "organFunction"], score_organ_function,
    ),
]


def get_match_level(score: int) -> str:
    for threshold, label in MATCH_LEVELS:
        if score >= threshold:
            return label
    return POOR_MATCH


def get_match_details(trial: TrialLike, answers: Answers) -> List[FactorResult]:
    """Per-factor breakdown; unanswered factors are omitted."""
    text = TrialText(trial)
    details: List[FactorResult] = []
    for factor in FACTORS:
        result = factor.evaluate(text, answers)
        if result is not None:
            details.append(result)
    return details


def calculate_eligibility_score(trial: TrialLike, answers: Answers) -> EligibilityScore:
    """
    Score a trial against the user's answers.

    Args:
        trial: Trial model or plain mapping with the same field names
        answers: Question field -> answer (string or list of strings)

    Returns:
        EligibilityScore with the 0-100 percentage, raw points, the
        denominator over answered factors and the match level
    """
    details = get_match_details(trial, answers)
    raw_score = sum(d.points for d in details)
    total_points = sum(d.max_points for d in details)

    if total_points:
        score = int(math.floor(100 * raw_score / total_points + 0.5))
    else:
        score = 0
    score = max(0, min(100, score))

    logger.debug(
        f"[SCORING] {_field(trial, 'id') or 'unknown'}: score={score} raw={raw_score} total={total_points}"
    )

    return EligibilityScore(
        score=score,
        raw_score=raw_score,
        total_points=total_points,
        match_details=details,
        match_level=get_match_level(score),
    )
