"""
Scoring Service: normalizes both documents, runs gates, matcher, section scorer
and suggestion rules, then aggregates the weighted overall score.
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ats_scorer.models.models import NormalizationResult, ParsedJobDescription, ParsedResume
from ats_scorer.models.payloads import BulkResumeInput
from ats_scorer.models.response import (
    BulkScoreItem, BulkScoreResponse, BulkScoreSummary, ScoreResult, SectionScores
)
from ats_scorer.models.scoring_settings import ScoringSettings, ScoringWeights
from ats_scorer.services.gates import GateEvaluator, candidate_years
from ats_scorer.services.llm_client import OllamaClient
from ats_scorer.services.matching import KeywordMatcher
from ats_scorer.services.normalizer import DocumentNormalizer
from ats_scorer.services.section_scorer import SectionScorer
from ats_scorer.services.suggestions import SuggestionGenerator
from ats_scorer.utils.exceptions import (
    ExternalServiceError, RateLimitError, ScorerBaseException, ValidationError
)
from ats_scorer.utils.logging_config import PerformanceMonitor, get_logger
from ats_scorer.utils.utils import round_half_up

logger = get_logger(__name__)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ScoringOutcome(BaseModel):
    """A score together with the normalized documents it was computed from"""
    result: ScoreResult
    resume: ParsedResume
    job_description: Optional[ParsedJobDescription] = None


def _normalization_debug(result: Optional[NormalizationResult]) -> Optional[Dict[str, Any]]:
    if result is None:
        return None
    return {"status": result.status.value, "reason": result.reason, "rateLimited": result.rate_limited}


class ScoringService:
    def __init__(self, settings: ScoringSettings, llm_client: Optional[OllamaClient] = None):
        self.settings = settings
        self.normalizer = DocumentNormalizer(llm_client)
        self.gates = GateEvaluator()
        self.matcher = KeywordMatcher(settings.matching)
        self.section_scorer = SectionScorer()
        self.suggestions = SuggestionGenerator()

    @property
    def weights(self) -> ScoringWeights:
        return self.settings.weights

    @property
    def weights_source(self) -> str:
        return self.settings.weights_source

    def validate_text(self, text: Optional[str], field: str) -> str:
        text = text or ""
        length = len(text.strip())
        if length < self.settings.min_text_length:
            raise ValidationError(
                f"{field} text must be at least {self.settings.min_text_length} characters (got {length})",
                field=field,
                value=length,
            )
        return text

    def overall(self, sections: SectionScores) -> int:
        w = self.weights
        total = (
            w.skills * sections.skills
            + w.experience * sections.experience
            + w.education * sections.education
            + w.keywords * sections.keywords
        )
        return max(0, min(100, round_half_up(total)))

    @staticmethod
    def unwrap(result: NormalizationResult, label: str):
        if result.usable:
            return result.value
        logger.error(f"{label} normalization failed: {result.reason}")
        if result.rate_limited:
            raise RateLimitError(details={"document": label})
        raise ExternalServiceError(
            f"{label} could not be processed: {result.reason}",
            service_name="normalizer",
            details={"document": label},
        )

    def score_parsed(
        self, resume: ParsedResume, jd: Optional[ParsedJobDescription]
    ) -> ScoreResult:
        """Pure scoring over already-normalized documents"""
        years = candidate_years(resume)
        gates = self.gates.evaluate(resume, jd)
        report = self.matcher.match(resume, jd) if jd is not None else None
        sections = self.section_scorer.score(resume, jd, years, report)
        suggestions = self.suggestions.generate(resume, jd, gates, years, report)
        return ScoreResult(
            overall=self.overall(sections),
            sections=sections,
            gates=gates,
            matches=report.matches if report else [],
            missing_keywords=report.missing_keywords if report else [],
            suggestions=suggestions,
            timestamp=utc_timestamp(),
        )

    def evaluate(
        self,
        resume_text: str,
        jd_text: Optional[str] = None,
        include_debug: bool = False,
        file_name: str = "resume.txt",
        jd_parsed: Optional[ParsedJobDescription] = None,
    ) -> ScoringOutcome:
        resume_text = self.validate_text(resume_text, "resume")
        if jd_parsed is None and jd_text is not None:
            jd_text = self.validate_text(jd_text, "jobDescription")

        with PerformanceMonitor("normalize_documents", logger) as normalize_timer:
            resume_result = self.normalizer.normalize_resume(resume_text, file_name)
            jd_result = None
            if jd_parsed is None and jd_text is not None:
                jd_result = self.normalizer.normalize_job_description(jd_text)
        resume = self.unwrap(resume_result, "resume")
        jd = jd_parsed or (self.unwrap(jd_result, "jobDescription") if jd_result else None)

        with PerformanceMonitor("score_documents", logger) as score_timer:
            result = self.score_parsed(resume, jd)

        if include_debug:
            result.debug = {
                "weights": self.weights.as_dict(),
                "weightsSource": self.weights_source,
                "modelVersion": self.settings.model_version,
                "normalization": {
                    "resume": _normalization_debug(resume_result),
                    "jobDescription": _normalization_debug(jd_result),
                },
                "timingsMs": {
                    "normalize": round(normalize_timer.elapsed_ms, 2),
                    "score": round(score_timer.elapsed_ms, 2),
                },
                "counts": {
                    "resumeSkills": len(resume.sections.skills),
                    "resumeExperienceEntries": len(resume.sections.experience),
                    "jdSkills": len(jd.skills_required) if jd else 0,
                    "jdRequirements": len(jd.requirements) if jd else 0,
                    "matches": len(result.matches),
                    "missingKeywords": len(result.missing_keywords),
                    "gates": len(result.gates),
                },
                "candidateYears": candidate_years(resume),
            }

        logger.info(
            f"Scored resume: overall {result.overall}, {len(result.gates)} gates, "
            f"{len(result.missing_keywords)} missing keywords"
        )
        return ScoringOutcome(result=result, resume=resume, job_description=jd)

    def score(
        self, resume_text: str, jd_text: Optional[str] = None, include_debug: bool = False,
        file_name: str = "resume.txt"
    ) -> ScoreResult:
        return self.evaluate(resume_text, jd_text, include_debug, file_name).result

    def normalize_job_description(self, jd_text: str) -> ParsedJobDescription:
        jd_text = self.validate_text(jd_text, "jobDescription")
        return self.unwrap(self.normalizer.normalize_job_description(jd_text), "jobDescription")

    async def score_bulk(self, resumes: List[BulkResumeInput], jd_text: str) -> BulkScoreResponse:
        """Score several resumes against one job description; items fail independently"""
        if len(resumes) > self.settings.max_bulk_resumes:
            raise ValidationError(
                f"At most {self.settings.max_bulk_resumes} resumes can be scored at once",
                field="resumes",
                value=len(resumes),
            )
        loop = asyncio.get_running_loop()
        jd = await loop.run_in_executor(None, self.normalize_job_description, jd_text)

        async def score_one(index: int, item: BulkResumeInput) -> BulkScoreItem:
            title = item.title or f"Resume {index + 1}"
            try:
                outcome = await loop.run_in_executor(
                    None, lambda: self.evaluate(item.text, jd_parsed=jd)
                )
                return BulkScoreItem(resume_index=index, resume_title=title, success=True, score=outcome.result)
            except ScorerBaseException as e:
                logger.warning(f"Bulk item {index} failed: {e.message}")
                return BulkScoreItem(resume_index=index, resume_title=title, success=False, error=e.message)

        items = await asyncio.gather(*(score_one(i, r) for i, r in enumerate(resumes)))
        scores = [item.score.overall for item in items if item.success]
        summary = BulkScoreSummary(
            total_resumes=len(items),
            successful_scores=len(scores),
            average_score=round_half_up(sum(scores) / len(scores)) if scores else 0,
            highest_score=max(scores) if scores else 0,
            lowest_score=min(scores) if scores else 0,
        )
        return BulkScoreResponse(results=list(items), summary=summary, timestamp=utc_timestamp())
