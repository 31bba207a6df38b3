"""Patient questionnaire served by GET /api/eligibility/questions."""

from typing import List

from src.eligibility.eligibility_models import Question

REQUIRED_FIELDS = ["age", "cancerType", "stage", "performanceStatus", "organFunction"]

ELIGIBILITY_QUESTIONS: List[Question] = [
    Question(
        id=1,
        question="What is your age?",
        type="number",
        field="age",
        required=True,
        validation={"min": 0, "max": 120},
    ),
    Question(
        id=2,
        question="What type of cancer do you have?",
        type="select",
        field="cancerType",
        required=True,
        options=[
            "Non-Small Cell Lung Cancer",
            "HER2-Positive Breast Cancer",
            "Triple Negative Breast Cancer",
            "Relapsed/Refractory Lymphoma",
            "Advanced Colorectal Cancer",
            "Metastatic Castration-Resistant Prostate Cancer",
            "Small Cell Lung Cancer",
            "Early Stage Non-Small Cell Lung Cancer",
            "Acute Myeloid Leukemia",
            "Hodgkin Lymphoma",
            "Borderline Resectable Pancreatic Cancer",
            "Hepatocellular Carcinoma",
            "Glioblastoma Multiforme",
            "Pediatric Brain Tumors",
            "High-Grade Serous Ovarian Cancer",
            "Advanced Cervical Cancer",
            "Advanced Melanoma",
            "Merkel Cell Carcinoma",
            "Soft Tissue Sarcoma",
            "Advanced Thyroid Cancer",
            "Rare Pediatric Cancers",
            "Cancer Survivorship",
            "Various Cancers",
            "High-Risk Breast Cancer",
            "Prostate Cancer Screening",
            "Cancer During Pregnancy",
            "Cancer in HIV+ Patients",
            "Cancer in Transplant Recipients",
            "Malignant Mesothelioma",
            "Cholangiocarcinoma",
            "Endometrial Cancer",
            "Testicular Cancer",
            "Esophageal Cancer",
            "Bladder Cancer",
            "Renal Cell Carcinoma",
            "Head and Neck Cancer",
            "Osteosarcoma",
            "Uveal Melanoma",
            "Geriatric Cancer Assessment",
            "Other",
        ],
    ),
    Question(
        id=3,
        question="What is your cancer stage?",
        type="select",
        field="stage",
        required=True,
        options=[
            "Stage I",
            "Stage II",
            "Stage III",
            "Stage IV",
            "Advanced",
            "Metastatic",
            "Early Stage",
            "Intermediate",
            "Any Stage",
            "Borderline Resectable",
            "Relapsed/Refractory",
        ],
    ),
    Question(
        id=4,
        question="What is your performance status?",
        type="select",
        field="performanceStatus",
        required=True,
        options=[
            "ECOG 0 (Fully active, no restrictions)",
            "ECOG 1 (Strenuous activity limited, but able to carry out light work)",
            "ECOG 2 (Ambulatory, capable of self-care, unable to work)",
            "ECOG 3 (Capable of limited self-care, confined to bed/chair >50% of time)",
            "ECOG 4 (Completely disabled, no self-care, totally confined to bed/chair)",
            "Lansky ≥50 (Pediatric performance scale)",
            "KPS ≥70 (Karnofsky Performance Scale)",
        ],
    ),
    Question(
        id=5,
        question="Do you have adequate organ function?",
        type="select",
        field="organFunction",
        required=True,
        options=["Adequate", "Not Adequate"],
    ),
    Question(
        id=6,
        question="Have you received previous treatment?",
        type="select",
        field="previousTreatment",
        options=[
            "No previous treatment",
            "Previous chemotherapy",
            "Previous immunotherapy",
            "Previous targeted therapy",
            "Previous hormone therapy",
            "Previous HER2 therapy",
            "Any previous treatment",
            "Complete response to chemotherapy",
        ],
    ),
    Question(
        id=7,
        question="Do you have any specific genetic mutations?",
        type="select",
        field="geneticMutations",
        options=[
            "None",
            "BRCA mutation",
            "FLT3 mutation",
            "HER2 positive",
            "Specific genetic alteration",
            "Genetic testing available",
        ],
    ),
    Question(
        id=8,
        question="What is your location/ZIP code?",
        type="text",
        field="location",
        placeholder="Enter ZIP code or city",
    ),
    Question(
        id=9,
        question="Do you have any specific health conditions?",
        type="multiselect",
        field="healthConditions",
        options=[
            "Brain metastases",
            "CNS disease",
            "Active infection",
            "Cardiac issues",
            "Liver problems",
            "Pulmonary issues",
            "Bone marrow issues",
            "None of the above",
        ],
    ),
    Question(
        id=10,
        question="Are you willing to travel for treatment?",
        type="select",
        field="travelWillingness",
        options=[
            "Yes, any distance",
            "Yes, within 100 miles",
            "Yes, within 50 miles",
            "No, local only",
        ],
    ),
    Question(
        id=11,
        question="What types of treatments are you interested in?",
        type="multiselect",
        field="treatmentPreferences",
        options=[
            "Surgery",
            "Chemotherapy",
            "Radiation Therapy",
            "Immunotherapy",
            "Targeted Therapy",
            "Hormone Therapy",
            "Stem Cell Therapy",
            "Vaccine Therapy",
            "Proton Therapy",
            "Precision Medicine",
            "Clinical Trials",
            "Any treatment type",
        ],
    ),
    Question(
        id=12,
        question="What clinical trial phases are you interested in?",
        type="multiselect",
        field="trialPhasePreferences",
        options=[
            "Phase 1 (Safety testing)",
            "Phase 2 (Effectiveness testing)",
            "Phase 3 (Comparison to standard treatment)",
            "Phase 4 (Post-approval studies)",
            "Any phase",
        ],
    ),
    Question(
        id=13,
        question="Do you have any special health considerations?",
        type="multiselect",
        field="specialConsiderations",
        options=[
            "HIV positive",
            "Organ transplant recipient",
            "Pregnant or planning pregnancy",
            "Pediatric patient (under 18)",
            "Geriatric patient (70+)",
            "Rare cancer type",
            "Genetic mutations",
            "None",
        ],
    ),
    Question(
        id=14,
        question="Have you had genetic testing for cancer mutations?",
        type="select",
        field="geneticTesting",
        options=[
            "Yes, BRCA1/BRCA2",
            "Yes, Lynch syndrome genes",
            "Yes, other cancer genes",
            "Yes, but don't know which genes",
            "No",
            "Don't know",
        ],
    ),
    Question(
        id=15,
        question="How would you describe your overall organ function?",
        type="select",
        field="organFunctionOverall",
        options=[
            "Excellent - no known issues",
            "Good - minor issues, well-controlled",
            "Fair - some issues, mostly controlled",
            "Poor - significant issues, may limit treatment options",
            "Unknown",
        ],
    ),
]


def get_questions() -> List[Question]:
    return list(ELIGIBILITY_QUESTIONS)
