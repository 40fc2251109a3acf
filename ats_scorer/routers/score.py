# routers/score.py
import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Request

from ats_scorer.models.payloads import BulkScoreRequest, ScoreRequest, SuggestBulletsRequest
from ats_scorer.models.response import (
    BulkScoreResponse, BulletSuggestionResponse, ScoreResult, WeightsResponse
)
from ats_scorer.routers.dependencies import get_optional_user, get_run_store, get_scoring_service
from ats_scorer.services.run_store import ScoreRunStore, record_from_result
from ats_scorer.services.scoring import ScoringOutcome, ScoringService, utc_timestamp
from ats_scorer.services.suggestions import suggest_bullets
from ats_scorer.utils.exceptions import DatabaseError
from ats_scorer.utils.logging_config import PerformanceMonitor, get_logger

router = APIRouter()
logger = get_logger(__name__)


async def _persist(
    store: ScoreRunStore, user_id: str, payload: ScoreRequest, outcome: ScoringOutcome, model_version: str
) -> Optional[str]:
    """Store the documents and the run; a storage failure never costs the caller their score"""
    try:
        resume_id = await store.save_resume(
            user_id, outcome.resume, title=payload.resume.title, resume_id=payload.resume.id
        )
        jd_input = payload.job_description
        jd_id = await store.save_job_description(
            user_id, outcome.job_description, title=jd_input.title, job_desc_id=jd_input.id
        )
        record = record_from_result(user_id, resume_id, jd_id, outcome.result, model_version)
        return await store.create(record)
    except DatabaseError as e:
        logger.error(f"Score computed but could not be saved: {e.message}", extra={"user_id": user_id})
        return None


@router.post("", response_model=ScoreResult, response_model_exclude_none=True)
async def score_resume(
    payload: ScoreRequest,
    request: Request,
    service: ScoringService = Depends(get_scoring_service),
    store: ScoreRunStore = Depends(get_run_store),
    user_id: Optional[str] = Depends(get_optional_user),
):
    """Score a resume, optionally against a job description"""
    request_id = getattr(request.state, "request_id", "unknown")
    jd_text = payload.job_description.text if payload.job_description else None
    file_name = payload.resume.file_name or "resume.txt"
    logger.info(
        f"Scoring resume ({len(payload.resume.text)} chars, job description: {jd_text is not None})",
        extra={"request_id": request_id},
    )

    loop = asyncio.get_running_loop()
    with PerformanceMonitor("score_resume", logger, threshold_ms=5000):
        outcome = await loop.run_in_executor(
            None, lambda: service.evaluate(payload.resume.text, jd_text, payload.include_debug, file_name)
        )

    if user_id and outcome.job_description is not None:
        outcome.result.score_run_id = await _persist(
            store, user_id, payload, outcome, service.settings.model_version
        )
    return outcome.result


@router.post("/bulk", response_model=BulkScoreResponse, response_model_exclude_none=True)
async def score_bulk(payload: BulkScoreRequest, service: ScoringService = Depends(get_scoring_service)):
    """Score up to five resumes against one job description"""
    with PerformanceMonitor("score_bulk", logger, threshold_ms=15000):
        response = await service.score_bulk(payload.resumes, payload.job_description.text)
    logger.info(
        f"Bulk scoring finished: {response.summary.successful_scores}/{response.summary.total_resumes} succeeded"
    )
    return response


@router.post("/suggest-bullets", response_model=BulletSuggestionResponse)
async def suggest_resume_bullets(payload: SuggestBulletsRequest):
    bullets = suggest_bullets(payload.resume_section_text, payload.target_keywords, payload.experience_level)
    return BulletSuggestionResponse(
        bullets=bullets,
        target_keywords=payload.target_keywords,
        experience_level=payload.experience_level,
        timestamp=utc_timestamp(),
    )


@router.get("/weights", response_model=WeightsResponse)
async def get_weights(service: ScoringService = Depends(get_scoring_service)):
    return WeightsResponse(weights=service.weights.as_dict(), source=service.weights_source)
