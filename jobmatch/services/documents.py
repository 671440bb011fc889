"""CV download and text extraction."""

from io import BytesIO
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
import structlog

from jobmatch.core.config import Settings, get_settings
from jobmatch.core.exceptions import ProcessorError

logger = structlog.get_logger()


class DocumentLoader:
    def __init__(self, settings: Settings | None = None, http_client: httpx.Client | None = None):
        self.settings = settings or get_settings()
        self.http_client = http_client

    @property
    def max_bytes(self) -> int:
        return self.settings.MAX_CV_SIZE_MB * 1024 * 1024

    def load_text(self, cv_url: str) -> str:
        content = self.fetch(cv_url)
        logger.info("cv_fetched", cv_url=cv_url, size=len(content))
        path = urlparse(cv_url).path or cv_url
        ext = path.rsplit(".", 1)[-1].lower() if "." in path else ""
        try:
            if ext == "pdf":
                return parse_pdf(content)
            elif ext in ("docx", "doc"):
                return parse_docx(content)
            return content.decode("utf-8", errors="ignore")
        except Exception as e:
            raise ProcessorError(f"could not read CV {cv_url}: {e}") from e

    def fetch(self, cv_url: str) -> bytes:
        parsed = urlparse(cv_url)
        if parsed.scheme in ("http", "https"):
            content = self._download(cv_url)
        else:
            path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(cv_url)
            try:
                content = path.read_bytes()
            except OSError as e:
                raise ProcessorError(f"could not open CV {cv_url}: {e}") from e

        if len(content) > self.max_bytes:
            raise ProcessorError(f"CV exceeds {self.settings.MAX_CV_SIZE_MB} MB")
        return content

    def _download(self, cv_url: str) -> bytes:
        client = self.http_client or httpx.Client(
            timeout=self.settings.CV_DOWNLOAD_TIMEOUT_SECONDS, follow_redirects=True
        )
        try:
            response = client.get(cv_url)
            response.raise_for_status()
            return response.content
        except httpx.HTTPError as e:
            raise ProcessorError(f"could not download CV {cv_url}: {e}") from e
        finally:
            if self.http_client is None:
                client.close()


def parse_pdf(content: bytes) -> str:
    import fitz

    doc = fitz.open(stream=content, filetype="pdf")
    text = ""
    for page in doc:
        text += page.get_text()
    doc.close()
    return text


def parse_docx(content: bytes) -> str:
    from docx import Document

    doc = Document(BytesIO(content))
    return "\n".join([para.text for para in doc.paragraphs])
