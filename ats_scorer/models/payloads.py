from typing import List, Literal, Optional

from pydantic import Field

from ats_scorer.models.models import CamelModel

# Input schemas for the scoring API. Text length is checked by the scoring
# service, not here, so that bulk items fail individually.


class DocumentInput(CamelModel):
    text: str
    id: Optional[str] = None
    title: Optional[str] = None
    file_name: Optional[str] = None


class ScoreRequest(CamelModel):
    resume: DocumentInput
    job_description: Optional[DocumentInput] = None
    include_debug: bool = False


class BulkResumeInput(CamelModel):
    text: str
    title: Optional[str] = None


class BulkScoreRequest(CamelModel):
    resumes: List[BulkResumeInput] = Field(min_length=1)
    job_description: DocumentInput


class SuggestBulletsRequest(CamelModel):
    resume_section_text: str = Field(min_length=10)
    target_keywords: List[str] = Field(min_length=1, max_length=10)
    experience_level: Literal["entry", "mid", "senior"] = "mid"


class ParseTextRequest(CamelModel):
    text: str = Field(max_length=50000)
    file_name: Optional[str] = None
