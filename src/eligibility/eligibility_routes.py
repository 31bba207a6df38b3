"""Eligibility API routes - questionnaire, assessment and stored results."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, status

from src.eligibility.assessment import AssessmentValidationError, run_assessment
from src.eligibility.assessment_store import get_assessment_store
from src.eligibility.eligibility_models import (
    AssessmentResponse,
    AssessmentResult,
    EnhancedInsightsResponse,
    Question,
)
from src.eligibility.insights import generate_enhanced_insights
from src.eligibility.questions import get_questions
from src.registry.registry_client import RegistryError, get_registry_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/eligibility", tags=["Eligibility"])


def _assessment_or_404(assessment_id: str) -> AssessmentResult:
    assessment = get_assessment_store().get(assessment_id)
    if assessment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Assessment not found"},
        )
    return assessment


@router.get("/questions", response_model=List[Question], summary="Assessment questionnaire")
async def get_eligibility_questions() -> List[Question]:
    return get_questions()


@router.post("/assess", response_model=AssessmentResponse, summary="Score live trials against answers")
async def assess(answers: Optional[Dict[str, Any]] = Body(None)) -> AssessmentResponse:
    logger.info("[ASSESS] Eligibility assessment started")
    try:
        return await run_assessment(get_registry_client(), answers or {}, get_assessment_store())
    except AssessmentValidationError as e:
        logger.warning(f"[ASSESS] Rejected answers: {e.message}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.to_detail())
    except RegistryError as e:
        logger.error(f"[ASSESS] Error in eligibility assessment: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Internal server error",
                "message": "Failed to process eligibility assessment",
                "details": str(e),
            },
        )


@router.get("/assessment/{assessment_id}", response_model=AssessmentResult, summary="Stored assessment")
async def get_assessment(assessment_id: str) -> AssessmentResult:
    return _assessment_or_404(assessment_id)


@router.get(
    "/insights/{assessment_id}",
    response_model=EnhancedInsightsResponse,
    summary="Enhanced insights for a stored assessment",
)
async def get_enhanced_insights(assessment_id: str) -> EnhancedInsightsResponse:
    assessment = _assessment_or_404(assessment_id)
    return EnhancedInsightsResponse(
        assessment_id=assessment_id,
        insights=generate_enhanced_insights(assessment),
        last_updated=datetime.now(timezone.utc).isoformat(),
    )
