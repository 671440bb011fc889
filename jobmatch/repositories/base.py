"""Repository capabilities consumed by the task queue and the worker pool.

Records cross this boundary as frozen snapshots, never as ORM instances.
"""

from datetime import datetime
from typing import Iterable, Protocol
from uuid import UUID

from jobmatch.schemas.profiles import ApplicationData, CandidateData, JobData
from jobmatch.schemas.tasks import TaskRecord, TaskStatus


class CandidateRepo(Protocol):
    def get(self, candidate_id: UUID) -> CandidateData | None: ...

    def set_parsed_text(self, candidate_id: UUID, parsed_text: str) -> None: ...

    def add_skills(self, candidate_id: UUID, skills: Iterable[str]) -> set[str]:
        """Union ``skills`` into the candidate's skill set, returning the new ones."""
        ...


class JobRepo(Protocol):
    def get(self, job_id: UUID) -> JobData | None: ...

    def list_all(self) -> list[JobData]:
        """Every job posting, oldest first, ties broken by id."""
        ...


class ApplicationRepo(Protocol):
    def get(self, application_id: UUID) -> ApplicationData | None: ...

    def set_cover_letter(self, application_id: UUID, cover_letter: str) -> None: ...

    def set_match_score(self, application_id: UUID, score: int) -> None: ...


class TaskRepo(Protocol):
    def add(self, queue_name: str, task_type: str, payload: dict) -> TaskRecord: ...

    def get(self, task_id: UUID) -> TaskRecord | None: ...

    def claim(self, task_id: UUID, lease_cutoff: datetime) -> TaskRecord | None:
        """Move a PENDING (or lease-expired RUNNING) task to RUNNING.

        Returns ``None`` when another worker owns the task or it is terminal.
        """
        ...

    def claimable_ids(self, queue_name: str, lease_cutoff: datetime, limit: int) -> list[UUID]: ...

    def finish(self, task_id: UUID, status: TaskStatus, result: dict) -> bool:
        """Record a terminal status. False if the task was no longer RUNNING."""
        ...

    def stalled(self, pending_before: datetime, lease_cutoff: datetime) -> list[TaskRecord]: ...
