from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class MatchResult(BaseModel):
    candidate_id: UUID
    job_id: UUID
    score: int = Field(ge=0, le=100)
    matching_skills: list[str]


class JobRecommendation(BaseModel):
    id: UUID
    title: str
    company: str
    location: str | None
    salary: str | None
    match_score: int
    matching_skills: list[str]
    posted_at: datetime | None
