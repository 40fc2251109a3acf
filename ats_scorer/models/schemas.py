from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Persisted documents. Field names are the MongoDB field names.


# -------- Resumes --------
class ResumeRecord(BaseModel):
    id: str
    user_id: str
    title: str = "Uploaded Resume"
    original_name: str = "resume.txt"
    text: str
    parsed_json: str = "{}"
    created_at: datetime = Field(default_factory=datetime.utcnow)


# -------- Job Descriptions --------
class JobDescriptionRecord(BaseModel):
    id: str
    user_id: str
    title: str = "Job Description"
    source: Optional[str] = None
    text: str
    parsed_json: str = "{}"
    created_at: datetime = Field(default_factory=datetime.utcnow)


# -------- Score runs --------
class ScoreRunRecord(BaseModel):
    id: str
    user_id: str
    resume_id: str
    job_desc_id: str
    overall: int = Field(ge=0, le=100)
    section_json: str
    gaps_json: str
    suggestions_json: str
    model_version: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
