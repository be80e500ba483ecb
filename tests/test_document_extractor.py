import fitz
import httpx
import pytest

from resume_analyzer.constants import EXTRACTION_ERROR_PREFIX
from resume_analyzer.exceptions import (
    DocumentProcessingError,
    ExtractionTimeout,
    InvalidInput,
    UnsupportedMediaType,
)
from resume_analyzer.services.document_extractor import (
    DocumentIntelligenceClient,
    DocumentTextExtractor,
    ExtractedDocument,
    extract_text_from_pdf_bytes,
    field_value,
    profile_from_analyze_result,
)

from conftest import SAMPLE_RESUME

RESUME_URL = "https://files.test/resumes/jane.pdf"
OPERATION_URL = "https://di.test/documentintelligence/analyzeResults/op-1"

ANALYZE_RESULT = {
    "content": SAMPLE_RESUME,
    "documents": [
        {
            "fields": {
                "Name": {"type": "string", "valueString": "Jane Doe"},
                "Email": {"type": "string", "valueString": "jane.doe@example.com"},
                "Experience": {
                    "type": "array",
                    "valueArray": [
                        {
                            "type": "object",
                            "valueObject": {
                                "Company": {"valueString": "Acme Corp"},
                                "JobTitle": {"valueString": "Software Engineer"},
                                "StartDate": {"valueDate": "2019-01-01"},
                            },
                        }
                    ],
                },
                "Skills": {
                    "type": "array",
                    "valueArray": [{"valueString": "Python"}, {"valueString": "Go"}],
                },
            }
        }
    ],
}


def make_pdf(text: str) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def pdf_response(body: bytes = b"%PDF-1.7 fake") -> httpx.Response:
    return httpx.Response(200, content=body, headers={"Content-Type": "application/pdf"})


class DocumentService:
    """Serves the resume download plus the submit and poll endpoints."""

    def __init__(self, download: httpx.Response, statuses):
        self.download = download
        self.statuses = list(statuses)
        self.submitted = []
        self.polls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url == RESUME_URL:
            return self.download
        if request.method == "POST":
            self.submitted.append(request)
            return httpx.Response(202, headers={"Operation-Location": OPERATION_URL})
        if url == OPERATION_URL:
            self.polls += 1
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            body = {"status": status}
            if status == "succeeded":
                body["analyzeResult"] = ANALYZE_RESULT
            if status == "failed":
                body["error"] = {"code": "InvalidContent"}
            return httpx.Response(200, json=body)
        return httpx.Response(404)


def make_extractor(handler, sleeps=None, with_intelligence=True):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    intelligence = None
    if with_intelligence:
        intelligence = DocumentIntelligenceClient(
            http_client, endpoint="https://di.test/", api_key="di-key", sleep=sleeps
        )
    return DocumentTextExtractor(http_client, intelligence)


async def test_requires_url_or_content():
    extractor = make_extractor(lambda request: httpx.Response(404), with_intelligence=False)
    with pytest.raises(InvalidInput):
        await extractor.extract(None, None)


async def test_inline_content_is_used_as_is():
    extractor = make_extractor(lambda request: httpx.Response(404), with_intelligence=False)
    document = await extractor.extract(None, "Inline resume")
    assert document.text == "Inline resume"
    assert document.source == "content"


async def test_url_wins_over_inline_content():
    def handler(request):
        return httpx.Response(200, text="Downloaded resume", headers={"Content-Type": "text/plain"})

    extractor = make_extractor(handler, with_intelligence=False)
    document = await extractor.extract(RESUME_URL, "Inline resume")

    assert document.text == "Downloaded resume"
    assert document.source == "text"


@pytest.mark.parametrize(
    "url", ["blob:https://app.test/1234", "ftp://files.test/resume.pdf"]
)
async def test_unfetchable_urls_return_error_sentinel(url):
    extractor = make_extractor(lambda request: httpx.Response(200), with_intelligence=False)

    document = await extractor.extract(url)

    assert document.error.startswith(EXTRACTION_ERROR_PREFIX)
    assert not document.is_usable(50)


async def test_download_failure_returns_error_sentinel():
    extractor = make_extractor(lambda request: httpx.Response(404), with_intelligence=False)

    document = await extractor.extract(RESUME_URL)

    assert document.error == f"{EXTRACTION_ERROR_PREFIX}: 404 Not Found"
    assert document.text == ""


async def test_unsupported_media_type():
    def handler(request):
        return httpx.Response(
            200, content=b"binary", headers={"Content-Type": "application/msword"}
        )

    extractor = make_extractor(handler, with_intelligence=False)
    with pytest.raises(UnsupportedMediaType) as excinfo:
        await extractor.extract(RESUME_URL)
    assert excinfo.value.content_type == "application/msword"


async def test_pdf_is_read_locally_without_document_service():
    extractor = make_extractor(
        lambda request: pdf_response(make_pdf("Hello resume")), with_intelligence=False
    )

    document = await extractor.extract(RESUME_URL)

    assert "Hello resume" in document.text
    assert document.source == "pdf-local"


def test_broken_pdf_raises_processing_error():
    with pytest.raises(DocumentProcessingError):
        extract_text_from_pdf_bytes(b"not a pdf")


async def test_document_service_polls_until_succeeded(sleeps):
    service = DocumentService(pdf_response(), ["running", "running", "succeeded"])
    extractor = make_extractor(service, sleeps)

    document = await extractor.extract(RESUME_URL)

    assert service.polls == 3
    assert sleeps.delays == [1.0, 1.0, 1.0]
    submitted = service.submitted[0]
    assert submitted.headers["Ocp-Apim-Subscription-Key"] == "di-key"
    assert submitted.url.params["api-version"] == "2024-11-30"
    assert submitted.url.path == "/documentintelligence/documentModels/prebuilt-layout:analyze"
    assert document.text == SAMPLE_RESUME
    assert document.source == "document-intelligence"
    assert document.profile.contact_info.name == "Jane Doe"
    assert document.profile.experience[0].title == "Software Engineer"
    assert document.profile.skills.technical == ["Python", "Go"]


async def test_document_service_times_out_after_ten_polls(sleeps):
    service = DocumentService(pdf_response(), ["running"])
    extractor = make_extractor(service, sleeps)

    with pytest.raises(ExtractionTimeout):
        await extractor.extract(RESUME_URL)
    assert service.polls == 10
    assert sleeps.delays == [1.0] * 10


async def test_document_service_failure(sleeps):
    service = DocumentService(pdf_response(), ["failed"])
    extractor = make_extractor(service, sleeps)

    with pytest.raises(DocumentProcessingError, match="InvalidContent"):
        await extractor.extract(RESUME_URL)


def test_field_value_unwraps_nested_fields():
    field = {
        "valueArray": [
            {"valueObject": {"School": {"valueString": "MIT"}, "Year": {"valueInteger": 2015}}}
        ]
    }
    assert field_value(field) == [{"School": "MIT", "Year": 2015}]
    assert field_value({"content": "raw text"}) == "raw text"


def test_empty_analyze_result_has_no_profile():
    assert profile_from_analyze_result({"content": "text only"}) is None
    assert profile_from_analyze_result({"documents": [{"fields": {}}]}) is None


def test_profile_makes_document_usable_without_text():
    document = ExtractedDocument(profile=profile_from_analyze_result(ANALYZE_RESULT))
    assert document.is_usable(50)
