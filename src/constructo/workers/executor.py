"""Executors hand GENERATING jobs to the pipeline off the request path."""

import abc
import asyncio
import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from constructo.report.pipeline import ReportPipeline, reconcile_stuck_jobs

logger = logging.getLogger(__name__)


class ReportExecutor(abc.ABC):
    @abc.abstractmethod
    def submit(self, job_id: uuid.UUID) -> None:
        """Queue a job for generation and return immediately."""

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass


class InProcessExecutor(ReportExecutor):
    """Runs each job as an asyncio task on the running event loop.

    Blocking rendering work is pushed to threads by the pipeline. Also owns
    the periodic stuck-job sweep.
    """

    def __init__(
        self,
        pipeline: ReportPipeline,
        session_factory: async_sessionmaker[AsyncSession],
        stuck_job_threshold_minutes: int = 30,
        sweep_interval_seconds: float = 600.0,
    ) -> None:
        self._pipeline = pipeline
        self._session_factory = session_factory
        self._threshold_minutes = stuck_job_threshold_minutes
        self._sweep_interval = sweep_interval_seconds
        self._tasks: set[asyncio.Task] = set()
        self._sweeper: Optional[asyncio.Task] = None

    def submit(self, job_id: uuid.UUID) -> None:
        task = asyncio.get_running_loop().create_task(self._run(job_id), name=f"report-{job_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, job_id: uuid.UUID) -> None:
        try:
            await self._pipeline.run(job_id)
        except Exception:
            # The pipeline records its own failures; this only catches DB outages
            logger.exception("Report executor crashed on job %s", job_id)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every submitted job has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def start(self) -> None:
        if self._sweeper is None:
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever(), name="report-sweeper")

    async def stop(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            await asyncio.gather(self._sweeper, return_exceptions=True)
            self._sweeper = None
        await self.drain()

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                await reconcile_stuck_jobs(self._session_factory, self._threshold_minutes)
            except Exception:
                logger.exception("Stuck report sweep failed")


class CeleryExecutor(ReportExecutor):
    """Enqueues jobs on Celery; the worker runs the same pipeline."""

    def submit(self, job_id: uuid.UUID) -> None:
        from constructo.workers.tasks import generate_report_task

        generate_report_task.delay(str(job_id))
        logger.info("Queued report %s on Celery", job_id)


def build_executor(
    backend: str,
    pipeline: ReportPipeline,
    session_factory: async_sessionmaker[AsyncSession],
    stuck_job_threshold_minutes: int,
    sweep_interval_seconds: float,
) -> ReportExecutor:
    if backend == "celery":
        return CeleryExecutor()
    if backend == "inline":
        return InProcessExecutor(
            pipeline,
            session_factory,
            stuck_job_threshold_minutes=stuck_job_threshold_minutes,
            sweep_interval_seconds=sweep_interval_seconds,
        )
    raise ValueError(f"Unknown executor backend: {backend}")
