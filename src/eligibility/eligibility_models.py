from typing import Any, Dict, List, Optional

from pydantic import Field

from src.registry.registry_models import CamelModel, Trial


class Question(CamelModel):
    id: int
    question: str
    type: str = Field(..., description="number, select, multiselect or text")
    field: str = Field(..., description="Answer key the scorer reads")
    required: bool = False
    options: Optional[List[str]] = None
    validation: Optional[Dict[str, Any]] = None
    placeholder: Optional[str] = None


class FactorResult(CamelModel):
    factor: str
    match: bool
    weight: str = Field(..., description='Label such as "High (40 points)"')
    description: str
    points: int = 0
    max_points: int = 0


class EligibilityScore(CamelModel):
    score: int = Field(..., ge=0, le=100)
    raw_score: int
    total_points: int
    match_details: List[FactorResult] = Field(default_factory=list)
    match_level: str


class TrialScore(CamelModel):
    """One ranked candidate of an assessment."""

    trial: Trial
    eligibility_score: int
    match_level: str
    raw_score: int
    total_points: int
    match_details: List[FactorResult] = Field(default_factory=list)
    distance: Optional[float] = Field(None, description="Miles from the user; None when unknown")
    phase_priority: int = 0
    status_priority: int = 0


class TrialRef(CamelModel):
    id: str
    title: str
    location: Optional[str] = None


class Insight(CamelModel):
    type: str = Field(..., description="positive, warning or info")
    category: str
    message: str
    trials: Optional[List[TrialRef]] = None
    suggestion: Optional[str] = None


class NextStep(CamelModel):
    priority: str
    action: str
    description: str
    details: str


class AssessmentSummary(CamelModel):
    total_trials: int = 0
    excellent_matches: int = 0
    very_good_matches: int = 0
    good_matches: int = 0
    fair_matches: int = 0
    partial_matches: int = 0
    poor_matches: int = 0
    average_score: int = 0
    best_score: int = 0
    worst_score: int = 0


class Recommendations(CamelModel):
    top_matches: List[TrialScore] = Field(default_factory=list)
    other_trials: List[TrialScore] = Field(default_factory=list)
    total_recommendations: int = 0


class AssessmentResult(CamelModel):
    id: str
    timestamp: str
    answers: Dict[str, Any]
    summary: AssessmentSummary
    recommendations: Recommendations
    insights: List[Insight] = Field(default_factory=list)
    next_steps: List[NextStep] = Field(default_factory=list)
    # full ranking, kept for the enhanced insights endpoint
    trial_scores: List[TrialScore] = Field(default_factory=list, exclude=True)


class AssessmentResponse(CamelModel):
    success: bool = True
    message: str = "Eligibility assessment completed successfully"
    assessment_id: str
    result: AssessmentResult


class EnhancedInsights(CamelModel):
    cancer_type_insights: Optional[Dict[str, Any]] = None
    eligibility_insights: List[Dict[str, Any]] = Field(default_factory=list)
    location_insights: Optional[Dict[str, Any]] = None
    treatment_insights: Optional[Dict[str, Any]] = None
    phase_insights: Optional[Dict[str, Any]] = None
    recommendations: List[Dict[str, Any]] = Field(default_factory=list)


class EnhancedInsightsResponse(CamelModel):
    success: bool = True
    assessment_id: str
    insights: EnhancedInsights
    last_updated: str
