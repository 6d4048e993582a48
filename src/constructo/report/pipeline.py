"""ReportPipeline — aggregation → document → render → store → mark COMPLETED.

Runs outside the request that created the job. Every failure after job
creation ends up as status FAILED on the job row; nothing is re-raised
to a caller.
"""

import asyncio
import logging
import uuid
from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from constructo.common.time import utcnow
from constructo.config import Settings
from constructo.db.repos.domain_repo import DomainGateway
from constructo.db.repos.report_repo import ReportJobRepo
from constructo.domain.enums import ReportFormat, ReportStatus, ReportType
from constructo.domain.models.scope import ReportScope
from constructo.report.aggregation import ReportAggregator
from constructo.report.artifact_store import ArtifactStore
from constructo.report.document import DocumentModel, build_document
from constructo.report.rendering import FILE_EXTENSIONS, render

logger = logging.getLogger(__name__)


class ReportPipeline:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        artifact_store: ArtifactStore,
        settings: Settings,
    ) -> None:
        self._session_factory = session_factory
        self._artifact_store = artifact_store
        self._settings = settings

    async def run(self, job_id: uuid.UUID) -> Optional[ReportStatus]:
        """Generate one job. Returns the terminal status written, or None if skipped."""
        async with self._session_factory() as session:
            job = await ReportJobRepo(session).get_by_id(job_id)
            if job is None:
                logger.warning("Report job %s vanished before generation started", job_id)
                return None
            if job.status != ReportStatus.GENERATING.value:
                logger.warning("Report job %s is %s, not generating", job_id, job.status)
                return None
            report_type = ReportType(job.report_type)
            file_format = ReportFormat(job.file_format)
            scope = ReportScope.model_validate(job.scope)

        logger.info("Generating report %s (%s, %s)", job_id, report_type.value, file_format.value)
        timeout = self._settings.generation_timeout_seconds

        try:
            bundle = await asyncio.wait_for(self._aggregate(report_type, scope), timeout)
            generated_at = utcnow()
            document = build_document(bundle, generated_at, self._settings.currency_symbol)
            data = await asyncio.wait_for(asyncio.to_thread(render, document, file_format), timeout)
            artifact_ref = await asyncio.to_thread(
                self._artifact_store.write, job_id, data, FILE_EXTENSIONS[file_format]
            )
        except asyncio.TimeoutError:
            logger.error("Report %s timed out after %.0fs", job_id, timeout)
            return await self._fail(job_id, f"Generation timed out after {timeout:.0f}s")
        except Exception as e:
            logger.exception("Failed to generate report %s", job_id)
            return await self._fail(job_id, str(e) or e.__class__.__name__)

        return await self._complete(job_id, artifact_ref, document, generated_at)

    async def _aggregate(self, report_type: ReportType, scope: ReportScope):
        async with self._session_factory() as session:
            aggregator = ReportAggregator(DomainGateway(session), self._settings.labor_hourly_rate)
            return await aggregator.aggregate(report_type, scope)

    async def _complete(
        self, job_id: uuid.UUID, artifact_ref: str, document: DocumentModel, generated_at
    ) -> Optional[ReportStatus]:
        try:
            async with self._session_factory() as session:
                updated = await ReportJobRepo(session).mark_completed(
                    job_id, artifact_ref, document.to_dict(), generated_at
                )
                await session.commit()
        except Exception as e:
            logger.exception("Could not record completion of report %s", job_id)
            await asyncio.to_thread(self._artifact_store.delete, artifact_ref)
            return await self._fail(job_id, f"Could not record completion: {e}")

        if not updated:
            # Deleted (or reconciled) while generating: keep no orphan artifact
            logger.warning("Report %s is gone or no longer generating; discarding artifact", job_id)
            await asyncio.to_thread(self._artifact_store.delete, artifact_ref)
            return None

        logger.info("Report %s generated: %s", job_id, artifact_ref)
        return ReportStatus.COMPLETED

    async def _fail(self, job_id: uuid.UUID, message: str) -> Optional[ReportStatus]:
        async with self._session_factory() as session:
            updated = await ReportJobRepo(session).mark_failed(job_id, message)
            await session.commit()
        if not updated:
            logger.warning("Report %s is gone or no longer generating; failure not recorded", job_id)
            return None
        return ReportStatus.FAILED


async def reconcile_stuck_jobs(
    session_factory: async_sessionmaker[AsyncSession],
    threshold_minutes: int,
) -> int:
    """Mark jobs stuck in GENERATING longer than the threshold as FAILED."""
    cutoff = utcnow() - timedelta(minutes=threshold_minutes)
    async with session_factory() as session:
        count = await ReportJobRepo(session).fail_stuck_jobs(cutoff)
        await session.commit()
    if count:
        logger.warning("Reconciliation marked %d stuck report job(s) as FAILED", count)
    return count
