from typing import Optional

import httpx
from fastapi import HTTPException, Request
from supabase import Client, create_client

from resume_analyzer.config import Settings
from resume_analyzer.services.analysis_store import AnalysisStore
from resume_analyzer.services.document_extractor import (
    DocumentIntelligenceClient,
    DocumentTextExtractor,
)
from resume_analyzer.services.llm_service import LLMClient
from resume_analyzer.services.llm_stages import ResumeExtractor, ResumeMatchAnalyzer
from resume_analyzer.services.pipeline import ResumeAnalysisPipeline
from resume_analyzer.services.retry import RetryPolicy


def create_supabase_client(settings: Settings) -> Client:
    if not settings.supabase_url or not settings.supabase_key:
        raise RuntimeError(
            "Supabase URL or Key not configured. Please set SUPABASE_URL and SUPABASE_KEY."
        )
    return create_client(settings.supabase_url, settings.supabase_key)


def build_pipeline(
    settings: Settings,
    http_client: httpx.AsyncClient,
    store: AnalysisStore,
    retry_policy: Optional[RetryPolicy] = None,
) -> ResumeAnalysisPipeline:
    retry_policy = retry_policy or RetryPolicy.from_settings(settings)
    llm = LLMClient(
        http_client,
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        model=settings.llm_model,
        timeout=settings.llm_timeout,
    )

    intelligence = None
    if settings.document_intelligence_endpoint and settings.document_intelligence_key:
        intelligence = DocumentIntelligenceClient(
            http_client,
            endpoint=settings.document_intelligence_endpoint,
            api_key=settings.document_intelligence_key,
            model_id=settings.document_intelligence_model,
            api_version=settings.document_intelligence_api_version,
            poll_attempts=settings.poll_attempts,
            poll_interval=settings.poll_interval,
        )

    return ResumeAnalysisPipeline(
        store=store,
        documents=DocumentTextExtractor(
            http_client, intelligence, download_timeout=settings.download_timeout
        ),
        extractor=ResumeExtractor(
            llm,
            retry_policy,
            temperature=settings.extraction_temperature,
            max_tokens=settings.extraction_max_tokens,
        ),
        analyzer=ResumeMatchAnalyzer(
            llm,
            retry_policy,
            temperature=settings.analysis_temperature,
            max_tokens=settings.analysis_max_tokens,
        ),
        min_resume_length=settings.min_resume_length,
        heuristic_extraction_fallback=settings.heuristic_extraction_fallback,
        fallback_on_llm_failure=settings.fallback_on_llm_failure,
    )


def get_pipeline(request: Request) -> ResumeAnalysisPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=500, detail="Analysis pipeline is not initialised")
    return pipeline


def get_analysis_store(request: Request) -> AnalysisStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Analysis store is not initialised")
    return store
