import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from resume_analyzer.constants import CORS_HEADERS
from resume_analyzer.dependencies import get_analysis_store, get_pipeline
from resume_analyzer.models.analysis import AnalyzeResumeRequest
from resume_analyzer.services.analysis_store import AnalysisStore
from resume_analyzer.services.pipeline import ResumeAnalysisPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message}, headers=CORS_HEADERS
    )


# Preflights: empty body, fixed CORS header set.
@router.options("/analyze-resume")
@router.options("/applications/{application_id}/analysis")
@router.options("/jobs/{job_id}/analyses")
async def preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/analyze-resume")
async def analyze_resume_endpoint(
    request: Request, pipeline: ResumeAnalysisPipeline = Depends(get_pipeline)
):
    """
    Analyze a resume (URL or inline text) against a job description.
    Always answers with a flat ResumeAnalysis object, or {"error": ...} on failure.
    """
    try:
        body = await request.json()
        analyze_request = AnalyzeResumeRequest.model_validate(body)
        analysis = await pipeline.run(analyze_request)
        return JSONResponse(content=analysis.to_response(), headers=CORS_HEADERS)
    except Exception as e:
        logger.exception("Request processing error: %s", e)
        return error_response(500, f"Server error: {str(e)}")


@router.get("/applications/{application_id}/analysis")
async def get_application_analysis(
    application_id: int, store: AnalysisStore = Depends(get_analysis_store)
):
    analysis = await store.get(application_id)
    if analysis is None:
        return error_response(404, f"No analysis stored for application {application_id}")
    return JSONResponse(content=analysis.to_response(), headers=CORS_HEADERS)


@router.get("/jobs/{job_id}/analyses")
async def get_job_analyses(job_id: int, store: AnalysisStore = Depends(get_analysis_store)):
    try:
        analyses = await store.list_for_job(job_id)
    except Exception as e:
        logger.exception("Error fetching job application analyses: %s", e)
        return error_response(500, str(e))
    return JSONResponse(
        content={
            str(application_id): analysis.to_response()
            for application_id, analysis in analyses.items()
        },
        headers=CORS_HEADERS,
    )
