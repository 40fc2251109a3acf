from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------- Resumes --------
class FormattingFlags(CamelModel):
    is_well_formatted: bool
    is_ats_friendly: bool
    format_issues: List[str] = Field(default_factory=list)


class ResumeSections(CamelModel):
    summary: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: List[str] = Field(default_factory=list)
    education: List[str] = Field(default_factory=list)
    projects: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)

    @field_validator("skills", "experience", "education", "projects", "certifications", mode="before")
    @classmethod
    def never_null(cls, v):
        return [] if v is None else v

    @field_validator("summary", mode="before")
    @classmethod
    def summary_never_null(cls, v):
        return "" if v is None else v


class ResumeMetadata(CamelModel):
    word_count: int
    char_count: int
    file_type: str = "txt"
    file_name: str = "resume.txt"
    formatting_flags: Optional[FormattingFlags] = None


class ParsedResume(CamelModel):
    text: str
    sections: ResumeSections = Field(default_factory=ResumeSections)
    metadata: ResumeMetadata


# -------- Job descriptions --------
class JobDescriptionMetadata(CamelModel):
    word_count: int
    requirements_count: int
    skills_count: int


class ParsedJobDescription(CamelModel):
    text: str
    requirements: List[str] = Field(default_factory=list)
    skills_required: List[str] = Field(default_factory=list)
    nice_to_have: List[str] = Field(default_factory=list)
    experience_years: Optional[int] = None

    @computed_field
    @property
    def metadata(self) -> JobDescriptionMetadata:
        return JobDescriptionMetadata(
            word_count=len(self.text.split()),
            requirements_count=len(self.requirements),
            skills_count=len(self.skills_required),
        )


# -------- External extraction contract --------
class ExtractedResumeSections(BaseModel):
    """Shape the text-understanding service must return for a resume"""
    model_config = ConfigDict(extra="ignore")

    summary: str = ""
    skills: List[str]
    experience: List[str]
    education: List[str]
    projects: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def summary_as_text(cls, v):
        if v is None:
            return ""
        if isinstance(v, list):
            return " ".join(str(x).strip() for x in v if str(x).strip())
        return v

    @field_validator("skills", "experience", "education", "projects", "certifications")
    @classmethod
    def strip_items(cls, v: List[str]) -> List[str]:
        return [item.strip() for item in v if item and item.strip()]


class ExtractedResume(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sections: ExtractedResumeSections


class ExtractedJobDescription(BaseModel):
    """Shape the text-understanding service must return for a job description"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)

    requirements: List[str]
    skills_required: List[str]
    nice_to_have: List[str] = Field(default_factory=list)
    experience_years: Optional[int] = Field(default=None, ge=0, le=60)

    @field_validator("requirements", "skills_required", "nice_to_have")
    @classmethod
    def strip_items(cls, v: List[str]) -> List[str]:
        return [item.strip() for item in v if item and item.strip()]


# -------- Normalization outcome --------
class NormalizationStatus(str, Enum):
    OK = "ok"
    FALLBACK = "fallback"
    ERROR = "error"


DocT = TypeVar("DocT")


class NormalizationResult(BaseModel, Generic[DocT]):
    """Ok(value) | Fallback(value, reason) | Err(reason)"""
    status: NormalizationStatus
    value: Optional[DocT] = None
    reason: Optional[str] = None
    rate_limited: bool = False

    @classmethod
    def ok(cls, value: DocT) -> "NormalizationResult[DocT]":
        return cls(status=NormalizationStatus.OK, value=value)

    @classmethod
    def fallback(cls, value: DocT, reason: str, rate_limited: bool = False) -> "NormalizationResult[DocT]":
        return cls(status=NormalizationStatus.FALLBACK, value=value, reason=reason, rate_limited=rate_limited)

    @classmethod
    def error(cls, reason: str, rate_limited: bool = False) -> "NormalizationResult[DocT]":
        return cls(status=NormalizationStatus.ERROR, reason=reason, rate_limited=rate_limited)

    @property
    def usable(self) -> bool:
        return self.status != NormalizationStatus.ERROR and self.value is not None
