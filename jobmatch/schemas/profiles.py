from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

COMPANY_PLACEHOLDER = "Company"


class CandidateData(BaseModel):
    id: UUID
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    cv_url: str | None = None
    parsed_text: str = ""
    skills: frozenset[str] = frozenset()

    model_config = {"frozen": True}

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class JobData(BaseModel):
    id: UUID
    title: str
    description: str = ""
    requirements: str = ""
    location: str | None = None
    salary: str | None = None
    company_name: str | None = None
    tags: frozenset[str] = frozenset()
    created_at: datetime | None = None

    model_config = {"frozen": True}

    @property
    def company(self) -> str:
        return self.company_name or COMPANY_PLACEHOLDER


class ApplicationData(BaseModel):
    id: UUID
    candidate_id: UUID
    job_id: UUID
    cover_letter: str | None = None
    match_score: int | None = None

    model_config = {"frozen": True}
