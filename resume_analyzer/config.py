from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    supabase_url: str = ""
    supabase_key: str = ""
    analyses_table: str = "application_analyses"

    # Any OpenAI-compatible chat completions endpoint
    llm_api_key: Optional[str] = None
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"
    llm_timeout: float = 60.0
    extraction_temperature: float = 0.1
    extraction_max_tokens: int = 4000
    analysis_temperature: float = 0.2
    analysis_max_tokens: int = 2000

    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_multiplier: float = 2.0
    rate_limit_wait: float = 60.0

    # Leave the endpoint empty to read PDFs locally with PyMuPDF
    document_intelligence_endpoint: Optional[str] = None
    document_intelligence_key: Optional[str] = None
    document_intelligence_model: str = "prebuilt-layout"
    document_intelligence_api_version: str = "2024-11-30"
    poll_attempts: int = 10
    poll_interval: float = 1.0
    download_timeout: float = 30.0

    min_resume_length: int = 50
    heuristic_extraction_fallback: bool = True
    fallback_on_llm_failure: bool = False

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
