import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()

from resume_analyzer.config import get_settings
from resume_analyzer.dependencies import build_pipeline, create_supabase_client
from resume_analyzer.routers import analysis
from resume_analyzer.services.analysis_store import AnalysisStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    async with httpx.AsyncClient(timeout=settings.download_timeout) as http_client:
        app.state.store = AnalysisStore(
            create_supabase_client(settings), settings.analyses_table
        )
        app.state.pipeline = build_pipeline(settings, http_client, app.state.store)
        yield


app = FastAPI(
    title="Resume Analysis API",
    description="Scores uploaded resumes against job descriptions and memoizes the result per application.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(analysis.router, tags=["Resume Analysis"])


@app.get("/")
async def root():
    return {"message": "Resume Analysis API is running. POST to /analyze-resume"}


@app.get("/health")
async def health():
    return {"status": "ok"}


# Local development runner
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("resume_analyzer.main:app", host="127.0.0.1", port=8000, reload=True)
