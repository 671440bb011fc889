from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobmatch.core.config import Settings
from jobmatch.core.database import Base
from jobmatch.models import Application, CandidateProfile, CandidateSkill, JobPosting, JobTag
from jobmatch.repositories import sql_unit_of_work
from jobmatch.services.analysis_client import AnalysisClient
from jobmatch.services.documents import DocumentLoader
from jobmatch.services.queue import TaskQueue
from jobmatch.workers.handlers import default_handlers
from jobmatch.workers.pool import WorkerPool

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture()
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        ANALYSIS_SERVICE_URL="",
        ANALYSIS_SERVICE_API_KEY="",
        ANTHROPIC_API_KEY="",
        TASK_LEASE_SECONDS=300,
    )


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture()
def uow_factory(session_factory):
    return sql_unit_of_work(session_factory)


@pytest.fixture()
def queue(uow_factory, settings):
    return TaskQueue(uow_factory, settings=settings)


@pytest.fixture()
def make_pool(uow_factory, settings):
    def _make(analysis_client=None, document_loader=None, anthropic_client=None, pool_settings=None):
        pool_settings = pool_settings or settings
        handlers = default_handlers(
            pool_settings,
            analysis_client=analysis_client or AnalysisClient(pool_settings),
            document_loader=document_loader or DocumentLoader(pool_settings),
            anthropic_client=anthropic_client,
        )
        return WorkerPool(uow_factory, handlers, pool_settings)

    return _make


@pytest.fixture()
def pool(make_pool):
    return make_pool()


@pytest.fixture()
def make_candidate(session_factory):
    def _make(first_name="Ada", last_name="Lovelace", email="ada@example.com", skills=(), cv_url=None):
        with session_factory() as session:
            candidate = CandidateProfile(
                first_name=first_name,
                last_name=last_name,
                email=email,
                cv_url=cv_url,
            )
            candidate.skills = [CandidateSkill(name=s) for s in skills]
            session.add(candidate)
            session.commit()
            return candidate.id

    return _make


@pytest.fixture()
def make_job(session_factory):
    created = []

    def _make(
        title="Backend Engineer",
        description="",
        requirements="",
        tags=(),
        company_name="Initech",
        location="Remote",
    ):
        with session_factory() as session:
            job = JobPosting(
                title=title,
                description=description,
                requirements=requirements,
                company_name=company_name,
                location=location,
                created_at=BASE_TIME + timedelta(minutes=len(created)),
            )
            job.tags = [JobTag(name=t) for t in tags]
            session.add(job)
            session.commit()
            created.append(job.id)
            return job.id

    return _make


@pytest.fixture()
def make_application(session_factory):
    def _make(candidate_id, job_id):
        with session_factory() as session:
            application = Application(candidate_id=candidate_id, job_id=job_id)
            session.add(application)
            session.commit()
            return application.id

    return _make


@pytest.fixture()
def cv_file(tmp_path):
    def _write(text, name="cv.txt"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write
