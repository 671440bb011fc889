from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field, TypeAdapter, model_validator


class TaskType(str, Enum):
    CV_PARSE = "CV_PARSE"
    MATCH = "MATCH"
    COVER_LETTER = "COVER_LETTER"


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


TERMINAL_STATUSES = (TaskStatus.COMPLETED, TaskStatus.FAILED)

CV_PARSING_QUEUE = "cv-parsing"
JOB_MATCHING_QUEUE = "job-matching"
COVER_LETTER_QUEUE = "cover-letter-generation"

QUEUE_TASK_TYPES = {
    CV_PARSING_QUEUE: TaskType.CV_PARSE,
    JOB_MATCHING_QUEUE: TaskType.MATCH,
    COVER_LETTER_QUEUE: TaskType.COVER_LETTER,
}


class CvParsePayload(BaseModel):
    type: Literal["CV_PARSE"] = "CV_PARSE"
    candidate_id: UUID
    cv_url: str


class MatchPayload(BaseModel):
    """Score a candidate against one job, or every job when ``job_id`` is unset.

    Passing ``application_id`` asks for the score to be stored on that
    application once the task completes.
    """

    type: Literal["MATCH"] = "MATCH"
    candidate_id: UUID
    job_id: UUID | None = None
    application_id: UUID | None = None

    @model_validator(mode="after")
    def _application_needs_job(self):
        if self.application_id is not None and self.job_id is None:
            raise ValueError("application_id requires job_id")
        return self


class CoverLetterPayload(BaseModel):
    type: Literal["COVER_LETTER"] = "COVER_LETTER"
    application_id: UUID
    candidate_id: UUID
    job_id: UUID


TaskPayload = Annotated[
    Union[CvParsePayload, MatchPayload, CoverLetterPayload],
    Field(discriminator="type"),
]

payload_adapter = TypeAdapter(TaskPayload)


class TaskRecord(BaseModel):
    id: UUID
    queue_name: str
    type: TaskType
    status: TaskStatus
    payload: dict
    result: dict | None = None
    attempts: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskStatusResponse(BaseModel):
    status: TaskStatus
    result: dict | None = None
