from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Iterable
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.orm import Session, selectinload, sessionmaker

from jobmatch.core.exceptions import NotFoundError
from jobmatch.models.application import Application
from jobmatch.models.candidate import CandidateProfile, CandidateSkill
from jobmatch.models.job import JobPosting
from jobmatch.models.task import Task
from jobmatch.schemas.profiles import ApplicationData, CandidateData, JobData
from jobmatch.schemas.tasks import TaskRecord, TaskStatus
from jobmatch.services.text import normalize_terms


def _candidate_data(candidate: CandidateProfile) -> CandidateData:
    return CandidateData(
        id=candidate.id,
        first_name=candidate.first_name or "",
        last_name=candidate.last_name or "",
        email=candidate.email,
        cv_url=candidate.cv_url,
        parsed_text=candidate.parsed_text or "",
        skills=frozenset(s.name for s in candidate.skills),
    )


def _job_data(job: JobPosting) -> JobData:
    return JobData(
        id=job.id,
        title=job.title,
        description=job.description or "",
        requirements=job.requirements or "",
        location=job.location,
        salary=job.salary,
        company_name=job.company_name,
        tags=frozenset(t.name for t in job.tags),
        created_at=job.created_at,
    )


class SqlCandidateRepo:
    def __init__(self, session: Session):
        self.session = session

    def get(self, candidate_id: UUID) -> CandidateData | None:
        candidate = self.session.execute(
            select(CandidateProfile)
            .options(selectinload(CandidateProfile.skills))
            .where(CandidateProfile.id == candidate_id)
        ).scalar_one_or_none()
        return _candidate_data(candidate) if candidate else None

    def _lock(self, candidate_id: UUID) -> CandidateProfile:
        # Row lock serialises concurrent completions for the same candidate
        candidate = self.session.execute(
            select(CandidateProfile).where(CandidateProfile.id == candidate_id).with_for_update()
        ).scalar_one_or_none()
        if candidate is None:
            raise NotFoundError("candidate", candidate_id)
        return candidate

    def set_parsed_text(self, candidate_id: UUID, parsed_text: str) -> None:
        candidate = self._lock(candidate_id)
        candidate.parsed_text = parsed_text
        self.session.flush()

    def add_skills(self, candidate_id: UUID, skills: Iterable[str]) -> set[str]:
        self._lock(candidate_id)
        wanted = normalize_terms(skills)
        existing = set(
            self.session.execute(
                select(CandidateSkill.name).where(CandidateSkill.candidate_id == candidate_id)
            ).scalars()
        )
        added = wanted - {name.lower() for name in existing}
        for name in sorted(added):
            self.session.add(CandidateSkill(candidate_id=candidate_id, name=name))
        self.session.flush()
        return added


class SqlJobRepo:
    def __init__(self, session: Session):
        self.session = session

    def get(self, job_id: UUID) -> JobData | None:
        job = self.session.execute(
            select(JobPosting).options(selectinload(JobPosting.tags)).where(JobPosting.id == job_id)
        ).scalar_one_or_none()
        return _job_data(job) if job else None

    def list_all(self) -> list[JobData]:
        result = self.session.execute(
            select(JobPosting)
            .options(selectinload(JobPosting.tags))
            .order_by(JobPosting.created_at, JobPosting.id)
        )
        return [_job_data(job) for job in result.scalars().all()]


class SqlApplicationRepo:
    def __init__(self, session: Session):
        self.session = session

    def get(self, application_id: UUID) -> ApplicationData | None:
        application = self.session.get(Application, application_id)
        if application is None:
            return None
        return ApplicationData(
            id=application.id,
            candidate_id=application.candidate_id,
            job_id=application.job_id,
            cover_letter=application.cover_letter,
            match_score=application.match_score,
        )

    def _lock(self, application_id: UUID) -> Application:
        application = self.session.execute(
            select(Application).where(Application.id == application_id).with_for_update()
        ).scalar_one_or_none()
        if application is None:
            raise NotFoundError("application", application_id)
        return application

    def set_cover_letter(self, application_id: UUID, cover_letter: str) -> None:
        self._lock(application_id).cover_letter = cover_letter
        self.session.flush()

    def set_match_score(self, application_id: UUID, score: int) -> None:
        self._lock(application_id).match_score = score
        self.session.flush()


class SqlTaskRepo:
    def __init__(self, session: Session):
        self.session = session

    def add(self, queue_name: str, task_type: str, payload: dict) -> TaskRecord:
        now = datetime.now(timezone.utc)
        task = Task(
            queue_name=queue_name,
            type=task_type,
            payload=payload,
            status=TaskStatus.PENDING.value,
            attempts=0,
            created_at=now,
            updated_at=now,
        )
        self.session.add(task)
        self.session.flush()
        return TaskRecord.model_validate(task)

    def get(self, task_id: UUID) -> TaskRecord | None:
        task = self.session.get(Task, task_id, populate_existing=True)
        return TaskRecord.model_validate(task) if task else None

    def _claimable(self, lease_cutoff: datetime):
        return or_(
            Task.status == TaskStatus.PENDING.value,
            and_(Task.status == TaskStatus.RUNNING.value, Task.updated_at < lease_cutoff),
        )

    def claim(self, task_id: UUID, lease_cutoff: datetime) -> TaskRecord | None:
        # The conditional UPDATE is the only arbiter of ownership
        result = self.session.execute(
            update(Task)
            .where(Task.id == task_id, self._claimable(lease_cutoff))
            .values(
                status=TaskStatus.RUNNING.value,
                attempts=Task.attempts + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return self.get(task_id)

    def claimable_ids(self, queue_name: str, lease_cutoff: datetime, limit: int) -> list[UUID]:
        result = self.session.execute(
            select(Task.id)
            .where(Task.queue_name == queue_name, self._claimable(lease_cutoff))
            .order_by(Task.created_at)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        return list(result.scalars().all())

    def finish(self, task_id: UUID, status: TaskStatus, result: dict) -> bool:
        outcome = self.session.execute(
            update(Task)
            .where(Task.id == task_id, Task.status == TaskStatus.RUNNING.value)
            .values(status=status.value, result=result, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return outcome.rowcount == 1

    def stalled(self, pending_before: datetime, lease_cutoff: datetime) -> list[TaskRecord]:
        result = self.session.execute(
            select(Task)
            .where(
                or_(
                    and_(Task.status == TaskStatus.PENDING.value, Task.updated_at < pending_before),
                    and_(Task.status == TaskStatus.RUNNING.value, Task.updated_at < lease_cutoff),
                )
            )
            .order_by(Task.created_at)
        )
        return [TaskRecord.model_validate(task) for task in result.scalars().all()]


class UnitOfWork(ABC):
    """One transaction over the repository capability set.

    Commits on a clean exit and rolls back when the block raises.
    """

    candidates: SqlCandidateRepo
    jobs: SqlJobRepo
    applications: SqlApplicationRepo
    tasks: SqlTaskRepo

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self.close()
        return False

    @abstractmethod
    def commit(self): ...

    @abstractmethod
    def rollback(self): ...

    def close(self):
        pass


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self.session: Session | None = None

    def __enter__(self):
        self.session = self.session_factory()
        self.candidates = SqlCandidateRepo(self.session)
        self.jobs = SqlJobRepo(self.session)
        self.applications = SqlApplicationRepo(self.session)
        self.tasks = SqlTaskRepo(self.session)
        return self

    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()

    def close(self):
        self.session.close()


def sql_unit_of_work(session_factory: sessionmaker) -> Callable[[], UnitOfWork]:
    return lambda: SqlUnitOfWork(session_factory)
