# models/response.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from ats_scorer.models.models import CamelModel, ParsedJobDescription, ParsedResume


class Gate(CamelModel):
    rule: str
    passed: bool
    details: str
    impact: Optional[str] = None


class Match(CamelModel):
    jd_item: str
    matched_phrases: List[str] = Field(default_factory=list)
    similarity: float = Field(ge=0.0, le=1.0)
    source_section: str


class SectionScores(CamelModel):
    skills: int = Field(ge=0, le=100)
    experience: int = Field(ge=0, le=100)
    education: int = Field(ge=0, le=100)
    keywords: int = Field(ge=0, le=100)


class Suggestions(CamelModel):
    bullets: List[str] = Field(default_factory=list)
    top_actions: List[str] = Field(default_factory=list)


class ScoreResult(CamelModel):
    overall: int = Field(ge=0, le=100)
    sections: SectionScores
    gates: List[Gate] = Field(default_factory=list)
    matches: List[Match] = Field(default_factory=list)
    missing_keywords: List[str] = Field(default_factory=list)
    suggestions: Suggestions = Field(default_factory=Suggestions)
    score_run_id: Optional[str] = None
    timestamp: str
    debug: Optional[Dict[str, Any]] = None


# -------- Bulk scoring --------
class BulkScoreItem(CamelModel):
    resume_index: int
    resume_title: str
    success: bool
    score: Optional[ScoreResult] = None
    error: Optional[str] = None


class BulkScoreSummary(CamelModel):
    total_resumes: int
    successful_scores: int
    average_score: int
    highest_score: int
    lowest_score: int


class BulkScoreResponse(CamelModel):
    results: List[BulkScoreItem]
    summary: BulkScoreSummary
    timestamp: str


class BulletSuggestionResponse(CamelModel):
    bullets: List[str]
    target_keywords: List[str]
    experience_level: str
    timestamp: str


class WeightsResponse(CamelModel):
    weights: Dict[str, float]
    source: str


# -------- Score runs --------
class DocumentSummary(CamelModel):
    id: str
    title: str
    created_at: Optional[datetime] = None


class ScoreRunSummary(CamelModel):
    id: str
    overall: int
    sections: Dict[str, int]
    created_at: datetime
    model_version: str
    resume: Optional[DocumentSummary] = None
    job_description: Optional[DocumentSummary] = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class ScoreRunPage(CamelModel):
    runs: List[ScoreRunSummary]
    pagination: Pagination


class ScoreRunDetail(CamelModel):
    id: str
    user_id: str
    overall: int
    sections: Dict[str, int]
    gaps: Dict[str, Any]
    suggestions: Dict[str, Any]
    model_version: str
    created_at: datetime
    resume: Optional[DocumentSummary] = None
    job_description: Optional[DocumentSummary] = None


class StatsTotals(CamelModel):
    score_runs: int
    resumes: int
    job_descriptions: int


class StatsScores(CamelModel):
    average: int
    highest: int
    lowest: int


class StatsActivity(CamelModel):
    recent_runs: int
    period_days: int


class StatsDistribution(CamelModel):
    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0


class ScoreRunStats(CamelModel):
    totals: StatsTotals
    scores: StatsScores
    activity: StatsActivity
    distribution: StatsDistribution


class DeleteRunResponse(CamelModel):
    id: str
    deleted: bool
    message: str


# -------- Parsing --------
class ExtractionStatus(CamelModel):
    status: str
    reason: Optional[str] = None
    rate_limited: bool = False


class ParseResumeResponse(CamelModel):
    resume: ParsedResume
    extraction: ExtractionStatus


class ParseJobDescriptionResponse(CamelModel):
    job_description: ParsedJobDescription
    extraction: ExtractionStatus
