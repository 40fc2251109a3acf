# routers/parse.py
import asyncio

from fastapi import APIRouter, Depends

from ats_scorer.models.models import NormalizationResult
from ats_scorer.models.payloads import ParseTextRequest
from ats_scorer.models.response import ExtractionStatus, ParseJobDescriptionResponse, ParseResumeResponse
from ats_scorer.routers.dependencies import get_scoring_service
from ats_scorer.services.scoring import ScoringService
from ats_scorer.utils.logging_config import get_logger, log_api_call

router = APIRouter()
logger = get_logger(__name__)


def _status(result: NormalizationResult) -> ExtractionStatus:
    return ExtractionStatus(status=result.status.value, reason=result.reason, rate_limited=result.rate_limited)


@router.post("/resume", response_model=ParseResumeResponse)
@log_api_call("parse_resume")
async def parse_resume(payload: ParseTextRequest, service: ScoringService = Depends(get_scoring_service)):
    """Run only the normalizer over a resume and report how the structure was obtained"""
    text = service.validate_text(payload.text, "resume")
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(
        None, service.normalizer.normalize_resume, text, payload.file_name or "resume.txt"
    )
    resume = service.unwrap(result, "resume")
    logger.info(f"Parsed resume with status {result.status.value}: {len(resume.sections.skills)} skills")
    return ParseResumeResponse(resume=resume, extraction=_status(result))


@router.post("/job-description", response_model=ParseJobDescriptionResponse)
@log_api_call("parse_job_description")
async def parse_job_description(payload: ParseTextRequest, service: ScoringService = Depends(get_scoring_service)):
    text = service.validate_text(payload.text, "jobDescription")
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, service.normalizer.normalize_job_description, text)
    jd = service.unwrap(result, "jobDescription")
    logger.info(f"Parsed job description with status {result.status.value}: {len(jd.requirements)} requirements")
    return ParseJobDescriptionResponse(job_description=jd, extraction=_status(result))
