import httpx
import pytest

from jobmatch.core.config import Settings
from jobmatch.core.exceptions import ProcessorError
from jobmatch.services.documents import DocumentLoader


def test_load_local_text_file(settings, cv_file):
    path = cv_file("Python and SQL")
    assert DocumentLoader(settings).load_text(path) == "Python and SQL"


def test_load_file_url(settings, cv_file):
    path = cv_file("Docker")
    assert DocumentLoader(settings).load_text(f"file://{path}") == "Docker"


def test_missing_file(settings, tmp_path):
    with pytest.raises(ProcessorError):
        DocumentLoader(settings).load_text(str(tmp_path / "nope.txt"))


def test_download_over_http(settings):
    def handler(request):
        assert request.url.path == "/cvs/ada.txt"
        return httpx.Response(200, content=b"Kubernetes expert")

    loader = DocumentLoader(settings, http_client=httpx.Client(transport=httpx.MockTransport(handler)))
    assert loader.load_text("https://cdn.test/cvs/ada.txt") == "Kubernetes expert"


def test_download_error_status(settings):
    def handler(request):
        return httpx.Response(404)

    loader = DocumentLoader(settings, http_client=httpx.Client(transport=httpx.MockTransport(handler)))
    with pytest.raises(ProcessorError):
        loader.load_text("https://cdn.test/cvs/missing.txt")


def test_rejects_oversized_cv(cv_file):
    settings = Settings(_env_file=None, MAX_CV_SIZE_MB=0)
    with pytest.raises(ProcessorError):
        DocumentLoader(settings).load_text(cv_file("anything at all"))


def test_unreadable_pdf(settings, cv_file):
    with pytest.raises(ProcessorError):
        DocumentLoader(settings).load_text(cv_file("not really a pdf", name="cv.pdf"))
