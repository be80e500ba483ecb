import asyncio
import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from resume_analyzer.exceptions import PersistenceError
from resume_analyzer.models.analysis import AnalysisRecord, ResumeAnalysis

logger = logging.getLogger(__name__)


class AnalysisStore:
    """
    One analysis row per application in the application_analyses table.

    supabase-py is synchronous, so every query runs on a worker thread.
    No locking: two forced refreshes for the same application can race
    between the delete and the insert.
    """

    def __init__(self, client: Client, table: str = "application_analyses"):
        self.client = client
        self.table = table

    async def get(
        self, application_id: int, force_update: bool = False
    ) -> Optional[ResumeAnalysis]:
        if force_update:
            return None
        try:
            rows = await asyncio.to_thread(self._select_for_application, application_id)
        except Exception as e:
            logger.warning(
                "Could not read stored analysis for application %s: %s", application_id, e
            )
            return None
        if not rows:
            return None
        return AnalysisRecord.model_validate(rows[0]).to_analysis()

    async def put(
        self,
        application_id: int,
        job_id: Optional[int],
        analysis: ResumeAnalysis,
        force_update: bool = False,
    ) -> AnalysisRecord:
        record = AnalysisRecord.from_analysis(application_id, job_id, analysis)
        try:
            await asyncio.to_thread(self._write, record, force_update)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                f"Failed to store analysis for application {application_id}: {e}"
            ) from e
        logger.info("Stored analysis for application %s", application_id)
        return record

    async def list_for_job(self, job_id: int) -> Dict[int, ResumeAnalysis]:
        try:
            rows = await asyncio.to_thread(self._select_for_job, job_id)
        except Exception as e:
            raise PersistenceError(f"Failed to read analyses for job {job_id}: {e}") from e
        analyses = {}
        for row in rows:
            record = AnalysisRecord.model_validate(row)
            analyses[record.application_id] = record.to_analysis()
        return analyses

    # --- synchronous supabase calls ---
    def _select_for_application(self, application_id: int) -> List[Dict[str, Any]]:
        result = (
            self.client.table(self.table)
            .select("*")
            .eq("application_id", application_id)
            .limit(1)
            .execute()
        )
        return result.data or []

    def _select_for_job(self, job_id: int) -> List[Dict[str, Any]]:
        result = self.client.table(self.table).select("*").eq("job_id", job_id).execute()
        return result.data or []

    def _write(self, record: AnalysisRecord, force_update: bool) -> None:
        row = record.model_dump()
        if force_update:
            self.client.table(self.table).delete().eq(
                "application_id", record.application_id
            ).execute()
            logger.info(
                "Deleted existing analysis for application %s as forceUpdate was requested",
                record.application_id,
            )
            result = self.client.table(self.table).insert(row).execute()
        else:
            result = (
                self.client.table(self.table)
                .upsert(row, on_conflict="application_id")
                .execute()
            )
        if hasattr(result, "error") and result.error:
            raise PersistenceError(f"Supabase error: {result.error}")
