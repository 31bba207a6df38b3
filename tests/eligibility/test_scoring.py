import pytest

from src.eligibility.scoring import (
    FACTORS,
    calculate_eligibility_score,
    get_match_details,
    get_match_level,
)

STRONG_TRIAL = {
    "id": "NCT05111111",
    "title": "Immunotherapy for Advanced Breast Cancer",
    "condition": "Breast Cancer",
    "phase": "PHASE2",
    "description": "Phase 2 immunotherapy study for advanced disease in BRCA carriers",
    "eligibility": (
        "Adults 18 to 75 years with advanced disease. Prior chemotherapy allowed. "
        "Good performance status. Adequate organ function."
    ),
}

FULL_ANSWERS = {
    "age": "50",
    "cancerType": "Breast Cancer",
    "stage": "Advanced",
    "performanceStatus": "ECOG 0 (Fully active, no restrictions)",
    "organFunction": "Adequate",
    "previousTreatment": "Previous chemotherapy",
    "travelWillingness": "Yes, any distance",
    "treatmentPreferences": ["Immunotherapy"],
    "trialPhasePreferences": ["Phase 2 (Effectiveness testing)"],
    "specialConsiderations": ["None"],
    "geneticTesting": "Yes, BRCA1/BRCA2",
}


def detail_for(details, factor):
    return next(d for d in details if d.factor == factor)


class TestMatchLevel:
    @pytest.mark.parametrize(
        "score, level",
        [
            (100, "Excellent Match"),
            (90, "Excellent Match"),
            (89, "Very Good Match"),
            (80, "Very Good Match"),
            (79, "Good Match"),
            (70, "Good Match"),
            (69, "Fair Match"),
            (60, "Fair Match"),
            (59, "Partial Match"),
            (40, "Partial Match"),
            (39, "Poor Match"),
            (0, "Poor Match"),
        ],
    )
    def test_thresholds(self, score: int, level: str) -> None:
        assert get_match_level(score) == level


class TestCancerType:
    def test_exact_match_scores_full_weight(self, make_trial) -> None:
        trial = make_trial(condition="Breast Cancer", title="A breast cancer study")
        details = get_match_details(trial, {"cancerType": "Breast Cancer"})

        cancer = detail_for(details, "Cancer Type")
        assert cancer.points == 40
        assert cancer.match is True
        assert cancer.weight == "High (40 points)"

    def test_bare_family_against_subtype_is_related(self, make_trial) -> None:
        trial = make_trial(condition="Non-Small Cell Lung Cancer")
        result = calculate_eligibility_score(trial, {"cancerType": "lung"})

        cancer = detail_for(result.match_details, "Cancer Type")
        assert cancer.points == 30
        assert cancer.weight == "High (30 points)"
        assert result.total_points == 40
        assert result.score == 75

    def test_bare_family_against_family_name_is_exact(self, make_trial) -> None:
        trial = make_trial(condition="Lung Cancer", title="Lung cancer screening")
        details = get_match_details(trial, {"cancerType": "lung"})
        assert detail_for(details, "Cancer Type").points == 40

    @pytest.mark.parametrize(
        "answer,condition,title",
        [
            ("lung", "Lung Cancer", "Pulmonary Rehabilitation in Lung Cancer"),
            ("lymphoma", "Lymphoma", "A Highly Selective Inhibitor in Lymphoma"),
            ("lymphoma", "Lymphoma", "Lymph Node Imaging in Lymphoma"),
            ("leukemia", "Leukemia", "Chronic Fatigue in Leukemia Survivors"),
        ],
    )
    def test_exact_match_survives_related_words_elsewhere(self, make_trial, answer, condition, title) -> None:
        trial = make_trial(condition=condition, title=title)
        details = get_match_details(trial, {"cancerType": answer})
        assert detail_for(details, "Cancer Type").points == 40

    def test_qualified_family_word_is_related(self, make_trial) -> None:
        trial = make_trial(condition="Chronic Lymphocytic Leukemia")
        details = get_match_details(trial, {"cancerType": "leukemia"})
        assert detail_for(details, "Cancer Type").points == 30

    def test_subtype_without_family_word_is_related(self, make_trial) -> None:
        trial = make_trial(condition="NSCLC", title="Targeted therapy in NSCLC")
        details = get_match_details(trial, {"cancerType": "lung"})
        assert detail_for(details, "Cancer Type").points == 30

    def test_related_term_in_description(self, make_trial) -> None:
        trial = make_trial(condition="Solid Tumors", description="Includes colon and rectal primaries")
        details = get_match_details(trial, {"cancerType": "colorectal"})
        assert detail_for(details, "Cancer Type").points == 30

    def test_other_scores_general_trials(self, make_trial) -> None:
        trial = make_trial(condition="Solid Tumor", description="Any advanced cancer")
        result = calculate_eligibility_score(trial, {"cancerType": "Other"})

        assert detail_for(result.match_details, "Cancer Type").points == 25
        assert result.total_points == 40
        # 62.5 rounds half up
        assert result.score == 63

    def test_other_without_cancer_words(self, make_trial) -> None:
        trial = make_trial(condition="Healthy Volunteers", title="Diet study", description="Nutrition")
        details = get_match_details(trial, {"cancerType": "Other"})
        assert detail_for(details, "Cancer Type").points == 0

    def test_no_match(self, make_trial) -> None:
        trial = make_trial(condition="Melanoma", title="Melanoma vaccine")
        details = get_match_details(trial, {"cancerType": "Prostate Cancer"})
        cancer = detail_for(details, "Cancer Type")
        assert cancer.points == 0
        assert cancer.match is False


class TestDenominator:
    def test_omitted_factor_is_excluded(self, make_trial) -> None:
        trial = make_trial(condition="Breast Cancer", eligibility="Ages 18 to 75")
        answers = {"cancerType": "Breast Cancer", "age": "45"}

        result = calculate_eligibility_score(trial, answers)
        assert result.total_points == 60
        assert result.raw_score == 60
        assert result.score == 100
        assert {d.factor for d in result.match_details} == {"Cancer Type", "Age"}

    @pytest.mark.parametrize("blank", [None, "", "   ", []])
    def test_blank_answers_count_as_omitted(self, make_trial, blank) -> None:
        trial = make_trial(condition="Breast Cancer")
        answers = {"cancerType": "Breast Cancer", "stage": blank, "treatmentPreferences": blank}

        result = calculate_eligibility_score(trial, answers)
        assert result.total_points == 40

    def test_no_answers_scores_zero(self, make_trial) -> None:
        result = calculate_eligibility_score(make_trial(), {})
        assert result.score == 0
        assert result.total_points == 0
        assert result.match_level == "Poor Match"
        assert result.match_details == []

    def test_full_match_scores_hundred(self) -> None:
        result = calculate_eligibility_score(STRONG_TRIAL, FULL_ANSWERS)
        assert result.total_points == sum(f.max_points for f in FACTORS)
        assert result.raw_score == result.total_points
        assert result.score == 100
        assert result.match_level == "Excellent Match"


class TestScoreBounds:
    @pytest.mark.parametrize(
        "answers",
        [
            FULL_ANSWERS,
            {"cancerType": "Other", "age": "-5", "stage": "Unknown stage"},
            {"cancerType": "lung", "age": "200", "performanceStatus": "ECOG 4"},
            {"age": "not a number", "travelWillingness": "No, local only"},
            {"specialConsiderations": ["HIV positive", "Rare cancer type"], "geneticTesting": "No"},
        ],
    )
    def test_score_within_bounds(self, make_trial, answers) -> None:
        for trial in (STRONG_TRIAL, make_trial(), {"id": "NCT0", "condition": None}):
            result = calculate_eligibility_score(trial, answers)
            assert 0 <= result.score <= 100
            assert 0 <= result.raw_score <= result.total_points
            for detail in result.match_details:
                assert 0 <= detail.points <= detail.max_points


class TestFactorRules:
    def test_stage_four_is_not_early(self, make_trial) -> None:
        trial = make_trial(description="For stage i and early disease", eligibility="")
        details = get_match_details(trial, {"stage": "Stage IV"})
        assert detail_for(details, "Cancer Stage").points == 0

    def test_stage_advanced(self, make_trial) -> None:
        trial = make_trial(description="Patients with stage iv disease")
        details = get_match_details(trial, {"stage": "Stage IV"})
        assert detail_for(details, "Cancer Stage").points == 25

    def test_stage_relapsed_and_any(self, make_trial) -> None:
        trial = make_trial(eligibility="Relapsed after two prior lines")
        assert detail_for(get_match_details(trial, {"stage": "Relapsed/Refractory"}), "Cancer Stage").points == 25
        assert detail_for(get_match_details(make_trial(), {"stage": "Any Stage"}), "Cancer Stage").points == 25

    @pytest.mark.parametrize(
        "eligibility, age, points",
        [
            ("Ages 18 to 75", "45", 20),
            ("Ages 18 to 75", "80", 0),
            ("Ages 18 to 70", "72", 0),
            ("Pediatric patients only", "12", 20),
            ("Elderly patients", "70", 20),
            ("Adult patients", "30", 15),
            ("Adult patients", "abc", 0),
        ],
    )
    def test_age(self, make_trial, eligibility: str, age: str, points: int) -> None:
        details = get_match_details(make_trial(eligibility=eligibility), {"age": age})
        assert detail_for(details, "Age").points == points

    def test_treatment_history(self, make_trial) -> None:
        naive_trial = make_trial(eligibility="No previous systemic therapy")
        chemo_trial = make_trial(eligibility="Prior chemo required")

        assert detail_for(
            get_match_details(naive_trial, {"previousTreatment": "No previous treatment"}), "Treatment History"
        ).points == 20
        assert detail_for(
            get_match_details(naive_trial, {"previousTreatment": "Previous chemotherapy"}), "Treatment History"
        ).points == 0
        assert detail_for(
            get_match_details(chemo_trial, {"previousTreatment": "Previous chemotherapy"}), "Treatment History"
        ).points == 20
        assert detail_for(
            get_match_details(chemo_trial, {"previousTreatment": "Previous hormone therapy"}), "Treatment History"
        ).points == 10

    def test_performance_status_scales(self, make_trial) -> None:
        trial = make_trial(eligibility="ECOG performance status 0-1")
        good = get_match_details(trial, {"performanceStatus": "ECOG 1 (Strenuous activity limited)"})
        poor = get_match_details(trial, {"performanceStatus": "ECOG 3 (Capable of limited self-care)"})
        kps = get_match_details(trial, {"performanceStatus": "KPS ≥70 (Karnofsky Performance Scale)"})

        assert detail_for(good, "Health Status").points == 15
        assert detail_for(poor, "Health Status").points == 0
        assert detail_for(kps, "Health Status").points == 15

    @pytest.mark.parametrize(
        "travel, points",
        [("Yes, any distance", 10), ("Yes, within 100 miles", 10), ("Yes, within 50 miles", 8), ("No, local only", 0)],
    )
    def test_travel(self, make_trial, travel: str, points: int) -> None:
        details = get_match_details(make_trial(), {"travelWillingness": travel})
        assert detail_for(details, "Travel Willingness").points == points

    def test_treatment_preferences_accept_kebab_key(self, make_trial) -> None:
        trial = make_trial(description="Radiation therapy plus surgery")
        details = get_match_details(trial, {"treatment-preferences": ["Immunotherapy", "Radiation Therapy"]})
        assert detail_for(details, "Treatment Preferences").points == 15

    def test_phase_preferences(self, make_trial) -> None:
        answers = {"trialPhasePreferences": ["Phase 2 (Effectiveness testing)"]}
        assert detail_for(get_match_details(make_trial(phase="PHASE2"), answers), "Trial Phase Preferences").points == 12
        assert detail_for(get_match_details(make_trial(phase="PHASE3"), answers), "Trial Phase Preferences").points == 0
        any_phase = {"trialPhasePreferences": ["Any phase"]}
        assert detail_for(get_match_details(make_trial(phase="PHASE3"), any_phase), "Trial Phase Preferences").points == 12

    def test_special_considerations(self, make_trial) -> None:
        trial = make_trial(eligibility="Patients with HIV are eligible")
        hit = get_match_details(trial, {"specialConsiderations": ["HIV positive"]})
        miss = get_match_details(trial, {"specialConsiderations": ["Organ transplant recipient"]})
        assert detail_for(hit, "Special Considerations").points == 10
        assert detail_for(miss, "Special Considerations").points == 0

    def test_genetic_testing_falls_back_to_mutations(self, make_trial) -> None:
        trial = make_trial(description="For FLT3-mutated AML")
        details = get_match_details(trial, {"geneticMutations": "FLT3 mutation"})
        assert detail_for(details, "Genetic Testing").points == 8

    def test_genetic_testing_unknown(self, make_trial) -> None:
        details = get_match_details(make_trial(), {"geneticTesting": "Don't know"})
        assert detail_for(details, "Genetic Testing").points == 5

    def test_organ_function(self, make_trial) -> None:
        trial = make_trial(eligibility="Adequate organ function")
        assert detail_for(get_match_details(trial, {"organFunction": "Adequate"}), "Overall Organ Function").points == 5
        assert detail_for(
            get_match_details(trial, {"organFunction": "Not Adequate"}), "Overall Organ Function"
        ).points == 3
        assert detail_for(
            get_match_details(make_trial(eligibility=""), {"organFunctionOverall": "Unknown"}),
            "Overall Organ Function",
        ).points == 0

    def test_overall_organ_function_preferred_over_required_answer(self, make_trial) -> None:
        trial = make_trial(eligibility="Nothing relevant")
        details = get_match_details(
            trial, {"organFunction": "Adequate", "organFunctionOverall": "Fair - some issues, mostly controlled"}
        )
        assert detail_for(details, "Overall Organ Function").points == 2
