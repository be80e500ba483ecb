from typing import Optional


class ResumeAnalysisError(Exception):
    """Base class for every failure raised by the analysis pipeline."""


class InvalidInput(ResumeAnalysisError):
    pass


class UnsupportedMediaType(ResumeAnalysisError):
    def __init__(self, content_type: Optional[str]):
        self.content_type = content_type
        super().__init__(
            f"Unsupported file type: {content_type}. Please upload a PDF or text file."
        )


class ExtractionTimeout(ResumeAnalysisError):
    pass


class DocumentProcessingError(ResumeAnalysisError):
    pass


class LLMError(ResumeAnalysisError):
    """Anything that went wrong talking to, or reading from, the language model."""


class LLMNotConfigured(LLMError):
    pass


class LLMRequestError(LLMError):
    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class RateLimitError(LLMRequestError):
    def __init__(self, message: str, retry_after: Optional[float] = None, body: str = ""):
        self.retry_after = retry_after
        super().__init__(message, status_code=429, body=body)


class ExtractionFailure(LLMError):
    pass


class AnalysisFailure(LLMError):
    pass


class PersistenceError(ResumeAnalysisError):
    pass
