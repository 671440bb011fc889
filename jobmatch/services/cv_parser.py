import structlog

from jobmatch.core.exceptions import ExternalServiceError
from jobmatch.schemas.cv import CvParseResult
from jobmatch.schemas.tasks import CvParsePayload
from jobmatch.services.analysis_client import AnalysisClient
from jobmatch.services.documents import DocumentLoader
from jobmatch.services.skills import extract_skills
from jobmatch.services.text import normalize_terms

logger = structlog.get_logger()


class CvParser:
    """Turn a CV reference into text and skills.

    The external analysis service is used when configured. Any failure there
    falls back to downloading the CV and scanning it against the skill
    vocabulary, so a broken service never fails the task.
    """

    def __init__(self, analysis_client: AnalysisClient, document_loader: DocumentLoader):
        self.analysis_client = analysis_client
        self.document_loader = document_loader

    def parse(self, payload: CvParsePayload) -> CvParseResult:
        if self.analysis_client.enabled:
            try:
                analysis = self.analysis_client.analyze_cv(payload.cv_url, payload.candidate_id)
                return CvParseResult(
                    parsed_text=analysis.parsed_text,
                    extracted_skills=sorted(normalize_terms(analysis.extracted_skills)),
                    source="analysis_service",
                )
            except ExternalServiceError as e:
                logger.warning(
                    "cv_parse_fallback",
                    candidate_id=str(payload.candidate_id),
                    error=str(e),
                )

        text = self.document_loader.load_text(payload.cv_url)
        return CvParseResult(
            parsed_text=text,
            extracted_skills=sorted(extract_skills(text)),
            source="heuristic",
        )
