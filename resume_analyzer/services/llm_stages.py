import logging

from pydantic import ValidationError

from resume_analyzer.exceptions import AnalysisFailure, ExtractionFailure, LLMError
from resume_analyzer.models.analysis import LLMAnalysisResult, ResumeAnalysis
from resume_analyzer.models.resume import ExtractedResumeData
from resume_analyzer.services.llm_service import LLMClient, parse_json_object
from resume_analyzer.services.prompts import build_analysis_prompt, build_extraction_prompt
from resume_analyzer.services.retry import RetryPolicy
from resume_analyzer.services.validation import clean_resume_data

logger = logging.getLogger(__name__)


class ResumeExtractor:
    """Raw resume text -> cleaned ExtractedResumeData."""

    def __init__(
        self,
        llm: LLMClient,
        retry_policy: RetryPolicy,
        temperature: float = 0.1,
        max_tokens: int = 4000,
    ):
        self.llm = llm
        self.retry_policy = retry_policy
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def extract(self, resume_text: str) -> ExtractedResumeData:
        try:
            return await self.retry_policy.run(self._extract_once, resume_text)
        except ExtractionFailure:
            raise
        except LLMError as e:
            raise ExtractionFailure(f"Resume extraction failed: {e}") from e

    async def _extract_once(self, resume_text: str) -> ExtractedResumeData:
        reply = await self.llm.complete(
            build_extraction_prompt(resume_text),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        try:
            payload = parse_json_object(reply)
        except ValueError as e:
            logger.warning("Extraction reply was not JSON: %s", reply[:200])
            raise ExtractionFailure(f"Extraction reply was not valid JSON: {e}") from e
        return clean_resume_data(payload)


class ResumeMatchAnalyzer:
    """Cleaned profile + job description -> scored ResumeAnalysis."""

    def __init__(
        self,
        llm: LLMClient,
        retry_policy: RetryPolicy,
        temperature: float = 0.2,
        max_tokens: int = 2000,
    ):
        self.llm = llm
        self.retry_policy = retry_policy
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def analyze(
        self, profile: ExtractedResumeData, job_description: str
    ) -> ResumeAnalysis:
        try:
            return await self.retry_policy.run(self._analyze_once, profile, job_description)
        except AnalysisFailure:
            raise
        except LLMError as e:
            raise AnalysisFailure(f"Resume analysis failed: {e}") from e

    async def _analyze_once(
        self, profile: ExtractedResumeData, job_description: str
    ) -> ResumeAnalysis:
        reply = await self.llm.complete(
            build_analysis_prompt(profile, job_description),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        try:
            result = LLMAnalysisResult.model_validate(parse_json_object(reply))
        except (ValueError, ValidationError) as e:
            logger.warning("Analysis reply was not usable: %s", reply[:200])
            raise AnalysisFailure(f"Analysis reply was not valid JSON: {e}") from e
        return result.to_analysis()
