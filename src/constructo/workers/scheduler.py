"""ReportScheduler — cron timers that spawn jobs from SCHEDULED templates.

Timers live in memory, so ``start()`` re-registers every SCHEDULED
template found in the job store. Call it on every process start, before
serving traffic.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from celery.schedules import ParseException, crontab
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from constructo.common.time import utcnow
from constructo.db.repos.report_repo import ReportJobRepo
from constructo.domain.enums import ReportStatus
from constructo.domain.models.scope import ReportScope
from constructo.exceptions import InvalidSchedule
from constructo.workers.executor import ReportExecutor

logger = logging.getLogger(__name__)

CRON_FIELDS = ("minute", "hour", "day_of_month", "month_of_year", "day_of_week")
SPAWN_NAME_FORMAT = "%d.%m.%Y %H:%M"


def _aware_utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_cron(expression: str) -> crontab:
    """Parse a five-field cron expression ("minute hour day month weekday").

    Raises InvalidSchedule for anything that is not a valid expression.
    """
    parts = (expression or "").split()
    if len(parts) != len(CRON_FIELDS):
        raise InvalidSchedule(f"Invalid cron expression: {expression!r}")
    try:
        schedule = crontab(**dict(zip(CRON_FIELDS, parts)), nowfun=_aware_utcnow)
    except (ValueError, ParseException) as e:
        raise InvalidSchedule(f"Invalid cron expression: {expression!r}") from e
    # Expressions such as "0 0 31 2 *" parse but never match a date
    try:
        schedule.remaining_estimate(_aware_utcnow())
    except (RuntimeError, ValueError) as e:
        raise InvalidSchedule(f"Cron expression never fires: {expression!r}") from e
    return schedule


def seconds_until_next(schedule: crontab, last_run_at: datetime) -> float:
    """Seconds from now until the first tick after ``last_run_at`` (aware UTC)."""
    return max(schedule.remaining_estimate(last_run_at).total_seconds(), 0.0)


class ReportScheduler:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        executor: ReportExecutor,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._executor = executor
        self._clock = clock
        self._timers: dict[uuid.UUID, asyncio.Task] = {}

    async def start(self) -> int:
        """Register a timer for every SCHEDULED template. Returns the count."""
        async with self._session_factory() as session:
            templates = await ReportJobRepo(session).list_templates()

        registered = 0
        for template in templates:
            try:
                self.register(template.id, template.schedule or "")
            except InvalidSchedule:
                logger.error("Template %s has an invalid schedule %r; not registered", template.id, template.schedule)
                continue
            registered += 1
        logger.info("Scheduler started with %d report template(s)", registered)
        return registered

    async def stop(self) -> None:
        timers = list(self._timers.values())
        self._timers.clear()
        for timer in timers:
            timer.cancel()
        await asyncio.gather(*timers, return_exceptions=True)

    def register(self, template_id: uuid.UUID, expression: str) -> None:
        schedule = parse_cron(expression)
        self.unregister(template_id)
        self._timers[template_id] = asyncio.get_running_loop().create_task(
            self._run_timer(template_id, schedule), name=f"report-template-{template_id}"
        )
        logger.info("Registered report template %s (%s)", template_id, expression)

    def unregister(self, template_id: uuid.UUID) -> bool:
        timer = self._timers.pop(template_id, None)
        if timer is None:
            return False
        timer.cancel()
        logger.info("Unregistered report template %s", template_id)
        return True

    def is_registered(self, template_id: uuid.UUID) -> bool:
        return template_id in self._timers

    @property
    def registered_ids(self) -> set[uuid.UUID]:
        return set(self._timers)

    async def _run_timer(self, template_id: uuid.UUID, schedule: crontab) -> None:
        last_run_at = _aware_utcnow()
        while True:
            try:
                delay = seconds_until_next(schedule, last_run_at)
            except (RuntimeError, ValueError):
                logger.exception("Cannot compute next run of template %s; dropping its timer", template_id)
                self._timers.pop(template_id, None)
                return
            # Anchor to the planned tick so an early wake-up cannot fire twice
            planned = _aware_utcnow() + timedelta(seconds=delay)
            await asyncio.sleep(delay)
            last_run_at = planned
            try:
                spawned = await self.fire(template_id)
            except Exception:
                logger.exception("Scheduled generation for template %s failed", template_id)
                continue
            if spawned is None:
                self._timers.pop(template_id, None)
                return

    async def fire(self, template_id: uuid.UUID) -> Optional[uuid.UUID]:
        """Spawn one concrete job from a template and hand it to the executor.

        Returns the new job id, or None when the template no longer exists.
        """
        now = self._clock()
        async with self._session_factory() as session:
            repo = ReportJobRepo(session)
            template = await repo.get_by_id(template_id)
            if template is None or template.status != ReportStatus.SCHEDULED.value:
                logger.warning("Report template %s no longer exists; dropping its timer", template_id)
                return None
            scope = ReportScope.model_validate(template.scope).resolve(now)
            job = await repo.create_job(
                name=f"{template.name} ({now.strftime(SPAWN_NAME_FORMAT)})",
                report_type=template.report_type,
                scope=scope.model_dump(mode="json"),
                file_format=template.file_format,
                owner_id=template.owner_id,
                company_id=template.company_id,
                template_id=template.id,
            )
            await session.commit()
            job_id = job.id

        logger.info("Template %s spawned report %s", template_id, job_id)
        self._executor.submit(job_id)
        return job_id
