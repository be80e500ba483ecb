# resume_analyzer/services/document_extractor.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

import fitz  # PyMuPDF
import httpx

from resume_analyzer.constants import EXTRACTION_ERROR_PREFIX
from resume_analyzer.exceptions import (
    DocumentProcessingError,
    ExtractionFailure,
    ExtractionTimeout,
    InvalidInput,
    UnsupportedMediaType,
)
from resume_analyzer.models.resume import ExtractedResumeData
from resume_analyzer.services.validation import clean_resume_data

logger = logging.getLogger(__name__)


@dataclass
class ExtractedDocument:
    text: str = ""
    profile: Optional[ExtractedResumeData] = None
    error: Optional[str] = None
    source: str = "unavailable"

    def is_usable(self, min_length: int) -> bool:
        if self.profile is not None:
            return True
        return not self.error and len(self.text.strip()) >= min_length


def extract_text_from_pdf_bytes(pdf_bytes: bytes) -> str:
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        try:
            return "\n".join(page.get_text("text") for page in doc)
        finally:
            doc.close()
    except Exception as e:
        raise DocumentProcessingError(
            f"Error processing PDF with PyMuPDF for plain text: {str(e)}"
        ) from e


# --- Provider field mapping ---
# Provider field name (lowercase) -> profile key, per level of the profile.
CONTACT_FIELDS = {
    "name": "name",
    "fullname": "name",
    "candidatename": "name",
    "email": "email",
    "emailaddress": "email",
    "phone": "phone",
    "phonenumber": "phone",
    "location": "location",
    "address": "location",
}
EDUCATION_FIELDS = {
    "institution": "institution",
    "school": "institution",
    "university": "institution",
    "degree": "degree",
    "field": "field",
    "fieldofstudy": "field",
    "major": "field",
    "year": "year",
    "graduationyear": "year",
    "enddate": "year",
    "gpa": "gpa",
}
EXPERIENCE_FIELDS = {
    "company": "company",
    "employer": "company",
    "organization": "company",
    "title": "title",
    "jobtitle": "title",
    "position": "title",
    "startdate": "startDate",
    "enddate": "endDate",
    "description": "description",
    "summary": "description",
}
SKILL_FIELDS = {
    "skills": "technical",
    "technicalskills": "technical",
    "softskills": "soft",
    "industryskills": "industry",
}


def field_value(field: Any) -> Any:
    """Unwraps one provider field object into plain Python values."""
    if not isinstance(field, dict):
        return field
    if "valueArray" in field:
        return [field_value(item) for item in field.get("valueArray") or []]
    if "valueObject" in field:
        return {
            name: field_value(value)
            for name, value in (field.get("valueObject") or {}).items()
        }
    for key in (
        "valueString",
        "valuePhoneNumber",
        "valueDate",
        "valueInteger",
        "valueNumber",
    ):
        if field.get(key) is not None:
            return field[key]
    return field.get("content")


def _rename(values: Dict[str, Any], mapping: Dict[str, str]) -> Dict[str, Any]:
    renamed: Dict[str, Any] = {}
    for name, value in values.items():
        target = mapping.get(name.lower().replace("_", "").replace(" ", ""))
        if target and target not in renamed:
            renamed[target] = value
    return renamed


def _entries(values: Any, mapping: Dict[str, str]) -> List[Dict[str, Any]]:
    if not isinstance(values, list):
        return []
    return [_rename(item, mapping) for item in values if isinstance(item, dict)]


def profile_from_analyze_result(result: Dict[str, Any]) -> Optional[ExtractedResumeData]:
    documents = result.get("documents") or []
    if not documents:
        return None
    fields = {
        name: field_value(value)
        for name, value in (documents[0].get("fields") or {}).items()
    }
    if not fields:
        return None

    normalized = {name.lower().replace("_", ""): value for name, value in fields.items()}
    skills: Dict[str, Any] = {}
    for name, bucket in SKILL_FIELDS.items():
        if name in normalized:
            skills[bucket] = normalized[name]

    raw = {
        "contactInfo": _rename(fields, CONTACT_FIELDS),
        "education": _entries(
            normalized.get("education") or normalized.get("educations"), EDUCATION_FIELDS
        ),
        "experience": _entries(
            normalized.get("experience")
            or normalized.get("workexperience")
            or normalized.get("employment"),
            EXPERIENCE_FIELDS,
        ),
        "skills": skills,
    }
    try:
        profile = clean_resume_data(raw)
    except ExtractionFailure as e:
        logger.warning("Ignoring provider fields that could not be mapped: %s", e)
        return None

    contact = profile.contact_info
    if not (
        contact.name
        or contact.email
        or profile.education
        or profile.experience
        or profile.skills.flattened()
    ):
        return None
    return profile


class DocumentIntelligenceClient:
    """Submit-then-poll client for an asynchronous document analysis service."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        endpoint: str,
        api_key: str,
        model_id: str = "prebuilt-layout",
        api_version: str = "2024-11-30",
        poll_attempts: int = 10,
        poll_interval: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.http_client = http_client
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.model_id = model_id
        self.api_version = api_version
        self.poll_attempts = poll_attempts
        self.poll_interval = poll_interval
        self.sleep = sleep

    async def analyze(
        self, document: bytes, content_type: str = "application/pdf"
    ) -> Dict[str, Any]:
        url = (
            f"{self.endpoint}/documentintelligence/documentModels/"
            f"{self.model_id}:analyze"
        )
        try:
            response = await self.http_client.post(
                url,
                params={"api-version": self.api_version},
                headers={
                    "Ocp-Apim-Subscription-Key": self.api_key,
                    "Content-Type": content_type,
                },
                content=document,
            )
        except httpx.HTTPError as e:
            raise DocumentProcessingError(f"Document analysis request failed: {e}") from e

        if not response.is_success:
            raise DocumentProcessingError(
                f"Document analysis error ({response.status_code}): {response.text}"
            )
        operation_url = response.headers.get("operation-location")
        if not operation_url:
            raise DocumentProcessingError(
                "Document analysis did not return an Operation-Location header"
            )

        for attempt in range(1, self.poll_attempts + 1):
            await self.sleep(self.poll_interval)
            try:
                poll = await self.http_client.get(
                    operation_url, headers={"Ocp-Apim-Subscription-Key": self.api_key}
                )
            except httpx.HTTPError as e:
                raise DocumentProcessingError(f"Document analysis poll failed: {e}") from e
            if not poll.is_success:
                raise DocumentProcessingError(
                    f"Document analysis poll error ({poll.status_code}): {poll.text}"
                )

            body = poll.json()
            status = str(body.get("status", "")).lower()
            logger.debug("Document analysis status after attempt %s: %s", attempt, status)
            if status == "succeeded":
                return body.get("analyzeResult") or {}
            if status == "failed":
                raise DocumentProcessingError(
                    f"Document analysis failed: {body.get('error')}"
                )

        raise ExtractionTimeout(
            f"Document analysis did not finish after {self.poll_attempts} attempts"
        )


class DocumentTextExtractor:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        intelligence: Optional[DocumentIntelligenceClient] = None,
        download_timeout: float = 30.0,
    ):
        self.http_client = http_client
        self.intelligence = intelligence
        self.download_timeout = download_timeout

    async def extract(
        self, resume_url: Optional[str] = None, resume_content: Optional[str] = None
    ) -> ExtractedDocument:
        if resume_url:
            return await self._from_url(resume_url)
        if resume_content:
            logger.info("Using provided resume content, length: %s", len(resume_content))
            return ExtractedDocument(text=resume_content, source="content")
        raise InvalidInput("Either resumeUrl or resumeContent must be provided")

    async def _from_url(self, resume_url: str) -> ExtractedDocument:
        if resume_url.startswith("blob:"):
            logger.info("Blob URL detected, cannot process directly: %s", resume_url)
            return ExtractedDocument(
                error=f"{EXTRACTION_ERROR_PREFIX}: temporary blob URLs cannot be fetched"
            )
        if not resume_url.startswith(("http://", "https://")):
            logger.info("Unknown URL format: %s", resume_url)
            return ExtractedDocument(
                error=f"{EXTRACTION_ERROR_PREFIX}: unrecognized URL format"
            )

        try:
            response = await self.http_client.get(
                resume_url, timeout=self.download_timeout, follow_redirects=True
            )
        except httpx.HTTPError as e:
            logger.error("Error fetching resume from %s: %s", resume_url, e)
            return ExtractedDocument(error=f"{EXTRACTION_ERROR_PREFIX}: {e}")
        if not response.is_success:
            logger.error(
                "Failed to fetch resume: %s %s", response.status_code, response.reason_phrase
            )
            return ExtractedDocument(
                error=f"{EXTRACTION_ERROR_PREFIX}: {response.status_code} {response.reason_phrase}"
            )

        content_type = response.headers.get("content-type", "")
        logger.info("File content type: %s", content_type)
        if "application/pdf" in content_type.lower():
            return await self._from_pdf(response.content)
        if "text" in content_type.lower():
            return ExtractedDocument(text=response.text, source="text")
        raise UnsupportedMediaType(content_type or None)

    async def _from_pdf(self, pdf_bytes: bytes) -> ExtractedDocument:
        if self.intelligence is None:
            text = await asyncio.to_thread(extract_text_from_pdf_bytes, pdf_bytes)
            logger.info("Extracted text from PDF locally, length: %s", len(text))
            return ExtractedDocument(text=text, source="pdf-local")

        result = await self.intelligence.analyze(pdf_bytes, "application/pdf")
        text = result.get("content") or ""
        logger.info("Document analysis succeeded, text length: %s", len(text))
        return ExtractedDocument(
            text=text,
            profile=profile_from_analyze_result(result),
            source="document-intelligence",
        )
