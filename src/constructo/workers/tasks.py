"""Celery tasks for background report processing."""

import asyncio
import logging
import uuid

from constructo.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="constructo.generate_report")
def generate_report_task(job_id: str) -> dict:
    """Run the report pipeline for one job.

    Bridges to async code via asyncio.run(); each task invocation
    creates its own engine + session (no shared state with FastAPI).
    """
    return asyncio.run(_generate_report_async(uuid.UUID(job_id)))


async def _generate_report_async(job_id: uuid.UUID) -> dict:
    from constructo.config import settings
    from constructo.db.session import build_engine, build_session_factory
    from constructo.report.artifact_store import LocalArtifactStore
    from constructo.report.pipeline import ReportPipeline

    engine = build_engine(settings.database_url, echo=False)
    try:
        pipeline = ReportPipeline(
            build_session_factory(engine),
            LocalArtifactStore(settings.artifact_dir),
            settings,
        )
        status = await pipeline.run(job_id)
    finally:
        await engine.dispose()
    return {"job_id": str(job_id), "status": status.value if status else "skipped"}


@celery_app.task(name="constructo.reconcile_stuck_reports")
def reconcile_stuck_reports_task() -> dict:
    return asyncio.run(_reconcile_async())


async def _reconcile_async() -> dict:
    from constructo.config import settings
    from constructo.db.session import build_engine, build_session_factory
    from constructo.report.pipeline import reconcile_stuck_jobs

    engine = build_engine(settings.database_url, echo=False)
    try:
        count = await reconcile_stuck_jobs(build_session_factory(engine), settings.stuck_job_threshold_minutes)
    finally:
        await engine.dispose()
    logger.info("Reconciled %d stuck report job(s)", count)
    return {"failed": count}
