"""Client for the optional external CV analysis service."""

from uuid import UUID

import httpx
import structlog
from pydantic import ValidationError

from jobmatch.core.config import Settings, get_settings
from jobmatch.core.exceptions import ExternalServiceError
from jobmatch.schemas.cv import AnalysisResponse

logger = structlog.get_logger()


class AnalysisClient:
    def __init__(self, settings: Settings | None = None, http_client: httpx.Client | None = None):
        self.settings = settings or get_settings()
        self.http_client = http_client

    @property
    def enabled(self) -> bool:
        return self.settings.analysis_service_enabled

    def analyze_cv(self, cv_url: str, candidate_id: UUID) -> AnalysisResponse:
        """POST the CV reference to ``<base>/analyze-cv``.

        Raises ``ExternalServiceError`` for any failure: a bad URL, a transport
        error, an error status, or a body with empty or missing ``parsedText``
        and ``extractedSkills``.
        """
        if not self.enabled:
            raise ExternalServiceError("analysis service is not configured")

        url = f"{self.settings.ANALYSIS_SERVICE_URL.rstrip('/')}/analyze-cv"
        client = self.http_client or httpx.Client(timeout=self.settings.ANALYSIS_SERVICE_TIMEOUT_SECONDS)
        try:
            response = client.post(
                url,
                headers={"Authorization": f"Bearer {self.settings.ANALYSIS_SERVICE_API_KEY}"},
                json={"cvUrl": cv_url, "candidateId": str(candidate_id)},
            )
            response.raise_for_status()
            return AnalysisResponse.model_validate(response.json())
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"analysis service request failed: {e}") from e
        except httpx.InvalidURL as e:
            raise ExternalServiceError(f"analysis service URL is invalid: {e}") from e
        except (ValueError, ValidationError) as e:
            raise ExternalServiceError(f"analysis service returned an unusable body: {e}") from e
        except Exception as e:
            raise ExternalServiceError(f"analysis service call failed: {e}") from e
        finally:
            if self.http_client is None:
                client.close()
