"""
Scoring configuration models
"""
from typing import Dict

from pydantic import BaseModel, Field, field_validator, model_validator


class ScoringWeights(BaseModel):
    """Section weights used by the aggregator; must sum to 1.0"""
    skills: float = Field(default=0.40, ge=0.0, le=1.0, description="Weight for the skills section")
    experience: float = Field(default=0.35, ge=0.0, le=1.0, description="Weight for the experience section")
    education: float = Field(default=0.10, ge=0.0, le=1.0, description="Weight for the education section")
    keywords: float = Field(default=0.15, ge=0.0, le=1.0, description="Weight for the keywords section")

    @model_validator(mode="after")
    def validate_total_weights(self):
        total = self.skills + self.experience + self.education + self.keywords
        if abs(total - 1.0) > 0.001:  # Allow small floating point errors
            raise ValueError(f"Scoring weights must sum to 1.0 (got {total:.3f})")
        return self

    def as_dict(self) -> Dict[str, float]:
        return self.model_dump()


class LLMSettings(BaseModel):
    """Text-understanding collaborator (Ollama) settings"""
    enabled: bool = Field(default=True, description="Try LLM extraction before the heuristic fallback")
    model_name: str = Field(default="llama3.1:8b", description="LLM model name")
    base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0, description="Generation temperature")
    timeout: int = Field(default=30, ge=1, le=300, description="Request timeout in seconds")
    retry_attempts: int = Field(default=1, ge=1, le=5, description="Attempts on connection failures")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class MatchingSettings(BaseModel):
    """Keyword matcher tuning"""
    threshold: float = Field(default=0.3, ge=0.0, le=1.0, description="Similarity under which an item is missing")
    partial_credit: float = Field(default=0.5, ge=0.0, le=1.0, description="Maximum similarity for partial token overlap")
    required_weight: float = Field(default=2.0, ge=0.0, description="Keyword-coverage weight of required terms")
    nice_to_have_weight: float = Field(default=1.0, ge=0.0, description="Keyword-coverage weight of nice-to-have terms")


class DatabaseSettings(BaseModel):
    """MongoDB connection settings"""
    mongo_details: str = Field(default="mongodb://localhost:27017", description="MongoDB connection string")
    db_name: str = Field(default="ats_scorer_db", description="Database name")


class ScoringSettings(BaseModel):
    """Complete service configuration"""
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    weights_source: str = Field(default="default", description="Where the weights came from")
    llm: LLMSettings = Field(default_factory=LLMSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    min_text_length: int = Field(default=50, ge=1, description="Minimum characters for resume/JD text")
    max_bulk_resumes: int = Field(default=5, ge=1, le=50, description="Maximum resumes per bulk request")
    model_version: str = Field(default="1.0", description="Scoring model version stamped on runs")
    stats_period_days: int = Field(default=30, ge=1, description="Window for recent-activity statistics")
