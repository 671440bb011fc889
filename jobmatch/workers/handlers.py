"""Per-type task handlers.

Each handler has three steps, run by the worker pool:

* ``load`` reads and re-validates the records a payload points at,
* ``process`` runs the processor outside any transaction and returns a
  JSON-serializable result,
* ``complete`` writes that result onto the owning record, in the same
  transaction that marks the task COMPLETED.
"""

import structlog
from anthropic import Anthropic

from jobmatch.core.config import Settings, get_settings
from jobmatch.core.exceptions import NotFoundError, ProcessorError
from jobmatch.schemas.tasks import CoverLetterPayload, CvParsePayload, MatchPayload, TaskType
from jobmatch.services.analysis_client import AnalysisClient
from jobmatch.services.cover_letter import draft_cover_letter
from jobmatch.services.cv_parser import CvParser
from jobmatch.services.documents import DocumentLoader
from jobmatch.services.matching import match_candidate, rank_matches

logger = structlog.get_logger()


def _require(record, entity: str, entity_id):
    if record is None:
        raise NotFoundError(entity, entity_id)
    return record


def _check_application(application, candidate_id, job_id):
    if application.candidate_id != candidate_id or application.job_id != job_id:
        raise ProcessorError(
            f"application {application.id} does not belong to candidate {candidate_id} and job {job_id}"
        )


class CvParseHandler:
    def __init__(self, parser: CvParser):
        self.parser = parser

    def load(self, uow, payload: CvParsePayload):
        return _require(uow.candidates.get(payload.candidate_id), "candidate", payload.candidate_id)

    def process(self, payload: CvParsePayload, candidate) -> dict:
        return self.parser.parse(payload).model_dump()

    def complete(self, uow, payload: CvParsePayload, result: dict):
        uow.candidates.set_parsed_text(payload.candidate_id, result["parsed_text"])
        added = uow.candidates.add_skills(payload.candidate_id, result["extracted_skills"])
        logger.info(
            "candidate_skills_updated",
            candidate_id=str(payload.candidate_id),
            added=sorted(added),
        )


class MatchHandler:
    def load(self, uow, payload: MatchPayload):
        candidate = _require(uow.candidates.get(payload.candidate_id), "candidate", payload.candidate_id)
        if payload.job_id is None:
            return candidate, uow.jobs.list_all()

        job = _require(uow.jobs.get(payload.job_id), "job", payload.job_id)
        if payload.application_id is not None:
            application = _require(
                uow.applications.get(payload.application_id), "application", payload.application_id
            )
            _check_application(application, payload.candidate_id, payload.job_id)
        return candidate, [job]

    def process(self, payload: MatchPayload, inputs) -> dict:
        candidate, jobs = inputs
        if payload.job_id is not None:
            match = match_candidate(candidate, jobs[0])
            return {
                "job_id": str(match.job_id),
                "match_score": match.score,
                "matching_skills": match.matching_skills,
            }
        return {
            "matches": [
                {
                    "job_id": str(match.job_id),
                    "match_score": match.score,
                    "matching_skills": match.matching_skills,
                }
                for match in rank_matches(candidate, jobs)
            ]
        }

    def complete(self, uow, payload: MatchPayload, result: dict):
        # Match results are recomputed on demand unless an application asks to keep one
        if payload.application_id is not None:
            uow.applications.set_match_score(payload.application_id, result["match_score"])


class CoverLetterHandler:
    def __init__(self, settings: Settings | None = None, client: Anthropic | None = None):
        self.settings = settings or get_settings()
        self.client = client

    def load(self, uow, payload: CoverLetterPayload):
        application = _require(
            uow.applications.get(payload.application_id), "application", payload.application_id
        )
        _check_application(application, payload.candidate_id, payload.job_id)
        candidate = _require(uow.candidates.get(payload.candidate_id), "candidate", payload.candidate_id)
        job = _require(uow.jobs.get(payload.job_id), "job", payload.job_id)
        return candidate, job

    def process(self, payload: CoverLetterPayload, inputs) -> dict:
        candidate, job = inputs
        return {"cover_letter": draft_cover_letter(candidate, job, self.settings, self.client)}

    def complete(self, uow, payload: CoverLetterPayload, result: dict):
        uow.applications.set_cover_letter(payload.application_id, result["cover_letter"])


def default_handlers(
    settings: Settings | None = None,
    analysis_client: AnalysisClient | None = None,
    document_loader: DocumentLoader | None = None,
    anthropic_client: Anthropic | None = None,
) -> dict:
    settings = settings or get_settings()
    parser = CvParser(
        analysis_client or AnalysisClient(settings),
        document_loader or DocumentLoader(settings),
    )
    return {
        TaskType.CV_PARSE: CvParseHandler(parser),
        TaskType.MATCH: MatchHandler(),
        TaskType.COVER_LETTER: CoverLetterHandler(settings, anthropic_client),
    }
