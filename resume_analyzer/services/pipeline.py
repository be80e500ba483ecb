import logging
from typing import Tuple

from resume_analyzer.exceptions import ExtractionFailure, LLMError, PersistenceError
from resume_analyzer.models.analysis import AnalyzeResumeRequest, ResumeAnalysis
from resume_analyzer.models.resume import ExtractedResumeData, ValidationResult
from resume_analyzer.parsers import parse_resume_text
from resume_analyzer.services.analysis_store import AnalysisStore
from resume_analyzer.services.document_extractor import DocumentTextExtractor, ExtractedDocument
from resume_analyzer.services.fallback_analyzer import (
    fallback_analysis,
    missing_parameters_analysis,
)
from resume_analyzer.services.llm_stages import ResumeExtractor, ResumeMatchAnalyzer
from resume_analyzer.services.validation import is_complete_profile, validate_resume_data

logger = logging.getLogger(__name__)


class ResumeAnalysisPipeline:
    """
    One request, one sequential run:
    cache -> text extraction -> profile extraction -> match analysis -> store.
    """

    def __init__(
        self,
        store: AnalysisStore,
        documents: DocumentTextExtractor,
        extractor: ResumeExtractor,
        analyzer: ResumeMatchAnalyzer,
        min_resume_length: int = 50,
        heuristic_extraction_fallback: bool = True,
        fallback_on_llm_failure: bool = False,
    ):
        self.store = store
        self.documents = documents
        self.extractor = extractor
        self.analyzer = analyzer
        self.min_resume_length = min_resume_length
        self.heuristic_extraction_fallback = heuristic_extraction_fallback
        self.fallback_on_llm_failure = fallback_on_llm_failure

    async def run(self, request: AnalyzeResumeRequest) -> ResumeAnalysis:
        logger.info("Processing request with forceUpdate: %s", request.force_update)

        if not request.job_description or not (
            request.resume_url or request.resume_content
        ):
            logger.info("Resume or job description missing, returning fallback analysis")
            return missing_parameters_analysis()

        if request.applicant_id is not None:
            cached = await self.store.get(
                request.applicant_id, force_update=request.force_update
            )
            if cached is not None and not cached.fallback:
                logger.info(
                    "Found existing analysis for application %s, returning it",
                    request.applicant_id,
                )
                return cached
            if cached is not None:
                logger.info(
                    "Stored analysis for application %s is a fallback, recomputing",
                    request.applicant_id,
                )

        document = await self.documents.extract(request.resume_url, request.resume_content)
        logger.info("Resume text (preview): %s...", document.text[:100])

        if not document.is_usable(self.min_resume_length):
            logger.info("Insufficient resume text, generating fallback analysis")
            return await self._fallback(request, document)

        heuristic = parse_resume_text(document.text)
        heuristic_check = validate_resume_data(heuristic)
        if not heuristic_check.is_valid:
            logger.debug("Heuristic profile failed validation: %s", heuristic_check.errors)

        try:
            profile, profile_source = await self._build_profile(
                document, heuristic, heuristic_check
            )
            analysis = await self.analyzer.analyze(profile, request.job_description)
        except LLMError as e:
            if not self.fallback_on_llm_failure:
                raise
            logger.warning("Language model stages failed (%s), using fallback analysis", e)
            return await self._fallback(request, document)

        analysis.extracted_data = profile
        analysis.debug_info = {
            "profileSource": profile_source,
            "textSource": document.source,
            "textLength": len(document.text),
            "heuristicValidationErrors": heuristic_check.errors,
        }

        # Store failures propagate on this path
        if self._should_persist(request):
            await self.store.put(
                request.applicant_id,
                request.job_id,
                analysis,
                force_update=request.force_update,
            )
        return analysis

    async def _build_profile(
        self,
        document: ExtractedDocument,
        heuristic: ExtractedResumeData,
        heuristic_check: ValidationResult,
    ) -> Tuple[ExtractedResumeData, str]:
        if document.profile is not None and is_complete_profile(document.profile):
            logger.info("Using the document service's structured profile")
            return document.profile, document.source

        try:
            return await self.extractor.extract(document.text), "llm"
        except ExtractionFailure as e:
            if self.heuristic_extraction_fallback and heuristic_check.is_valid:
                logger.warning("LLM extraction failed (%s), using heuristic profile", e)
                return heuristic, "heuristic"
            raise

    async def _fallback(
        self, request: AnalyzeResumeRequest, document: ExtractedDocument
    ) -> ResumeAnalysis:
        analysis = fallback_analysis(document.text)
        if document.error:
            analysis.debug_info = {"error": document.error}
        if not self._should_persist(request):
            return analysis
        try:
            await self.store.put(
                request.applicant_id,
                request.job_id,
                analysis,
                force_update=request.force_update,
            )
        except PersistenceError as e:
            logger.error("Error storing fallback analysis: %s", e)
        return analysis

    @staticmethod
    def _should_persist(request: AnalyzeResumeRequest) -> bool:
        return request.job_id is not None and request.applicant_id is not None
