"""ReportService — request-time validation and job lifecycle around the pipeline."""

import logging
import uuid
from datetime import datetime
from typing import Any, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from constructo.common.time import utcnow
from constructo.db.models.report import ReportJob
from constructo.db.repos.access_repo import AccessRepo
from constructo.db.repos.report_repo import ReportJobRepo
from constructo.domain.enums import PREMIUM_REPORT_TYPES, ReportFormat, ReportStatus, ReportType
from constructo.domain.models.scope import ReportScope
from constructo.exceptions import (
    AccessDenied,
    EntitlementRequired,
    ReportNotFound,
    ValidationError,
)
from constructo.report.artifact_store import ArtifactStore
from constructo.report.catalog import REPORT_CATALOG, ReportTemplateInfo
from constructo.report.rendering import FILE_EXTENSIONS
from constructo.workers.executor import ReportExecutor
from constructo.workers.scheduler import ReportScheduler, parse_cron

logger = logging.getLogger(__name__)

# Catalog field name -> scope attribute
SCOPE_FIELDS = {"companyId": "company_id", "projectId": "project_id", "period": "period"}


class AccessChecker(Protocol):
    async def has_active_membership(self, user_id: uuid.UUID, company_id: uuid.UUID) -> bool: ...

    async def has_advanced_reporting(self, user_id: uuid.UUID) -> bool: ...


class ReportService:
    """Creates, lists, downloads and deletes report jobs for one caller's request.

    Everything here runs synchronously within the request; generation
    itself is handed to the executor after the job row is committed.
    """

    def __init__(
        self,
        session: AsyncSession,
        executor: ReportExecutor,
        scheduler: ReportScheduler,
        artifact_store: ArtifactStore,
        access: Optional[AccessChecker] = None,
    ) -> None:
        self._session = session
        self._repo = ReportJobRepo(session)
        self._executor = executor
        self._scheduler = scheduler
        self._artifact_store = artifact_store
        self._access = access or AccessRepo(session)

    # ── Creation ────────────────────────────────────────────

    async def generate(
        self,
        owner_id: uuid.UUID,
        name: Optional[str],
        report_type: Optional[str],
        config: Optional[dict[str, Any]],
        file_format: Optional[str] = None,
    ) -> ReportJob:
        """Validate, create a GENERATING job and queue it."""
        rtype, fmt, scope = self._validate(name, report_type, config, file_format)
        await self._authorize(owner_id, rtype, scope)

        job = await self._repo.create_job(
            name=name.strip(),
            report_type=rtype.value,
            scope=scope.resolve(utcnow()).model_dump(mode="json"),
            file_format=fmt.value,
            owner_id=owner_id,
            company_id=scope.company_id,
        )
        await self._session.commit()
        logger.info("Report %s created (%s) for user %s", job.id, rtype.value, owner_id)

        self._executor.submit(job.id)
        return job

    async def schedule(
        self,
        owner_id: uuid.UUID,
        name: Optional[str],
        report_type: Optional[str],
        config: Optional[dict[str, Any]],
        file_format: Optional[str],
        schedule: Optional[str],
    ) -> ReportJob:
        """Create a SCHEDULED template and register its timer."""
        if not schedule:
            raise ValidationError("Missing required fields: schedule")
        rtype, fmt, scope = self._validate(name, report_type, config, file_format)
        parse_cron(schedule)

        if not await self._access.has_advanced_reporting(owner_id):
            raise EntitlementRequired("Scheduled reports require the advanced reporting plan")
        await self._authorize(owner_id, rtype, scope)

        template = await self._repo.create_template(
            name=name.strip(),
            report_type=rtype.value,
            scope=scope.model_dump(mode="json"),
            file_format=fmt.value,
            schedule=schedule.strip(),
            owner_id=owner_id,
            company_id=scope.company_id,
        )
        await self._session.commit()
        self._scheduler.register(template.id, template.schedule)
        logger.info("Report template %s scheduled (%s) for user %s", template.id, template.schedule, owner_id)
        return template

    def _validate(
        self,
        name: Optional[str],
        report_type: Optional[str],
        config: Optional[dict[str, Any]],
        file_format: Optional[str],
    ) -> tuple[ReportType, ReportFormat, ReportScope]:
        missing = [f for f, v in (("name", name and name.strip()), ("type", report_type), ("config", config)) if not v]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        try:
            rtype = ReportType(report_type)
        except ValueError:
            raise ValidationError(f"Unknown report type: {report_type}")
        try:
            fmt = ReportFormat(file_format or ReportFormat.PDF.value)
        except ValueError:
            raise ValidationError(f"Unsupported format: {file_format}")

        info = REPORT_CATALOG[rtype]
        if fmt not in info.formats:
            raise ValidationError(f"{rtype.value} cannot be rendered as {fmt.value}")
        missing = [f for f in info.required_fields if config.get(SCOPE_FIELDS[f]) in (None, "")]
        if missing:
            raise ValidationError(f"Missing config fields for {rtype.value}: {', '.join(missing)}")

        try:
            scope = ReportScope.model_validate(config)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid config: {e.errors()[0]['msg']}")
        if scope.start is not None and scope.end is not None and scope.start > scope.end:
            raise ValidationError("Invalid config: start is after end")
        return rtype, fmt, scope

    async def _authorize(self, owner_id: uuid.UUID, report_type: ReportType, scope: ReportScope) -> None:
        if report_type in PREMIUM_REPORT_TYPES and not await self._access.has_advanced_reporting(owner_id):
            raise EntitlementRequired(f"{report_type.value} requires the advanced reporting plan")
        if not await self._access.has_active_membership(owner_id, scope.company_id):
            raise AccessDenied("Access denied to this company")

    # ── Reads ───────────────────────────────────────────────

    async def list_templates(self, owner_id: uuid.UUID) -> list[tuple[ReportTemplateInfo, bool]]:
        """Catalog entries paired with whether the caller may generate them."""
        advanced = await self._access.has_advanced_reporting(owner_id)
        return [(info, advanced or not info.premium) for info in REPORT_CATALOG.values()]

    async def list_reports(
        self,
        owner_id: uuid.UUID,
        company_id: Optional[uuid.UUID] = None,
        report_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[ReportJob]:
        return await self._repo.list_for_owner(owner_id, company_id, report_type, status)

    async def get_report(self, owner_id: uuid.UUID, job_id: uuid.UUID) -> ReportJob:
        job = await self._repo.get_for_owner(job_id, owner_id)
        if job is None:
            raise ReportNotFound("Report not found")
        return job

    async def get_artifact(self, owner_id: uuid.UUID, job_id: uuid.UUID) -> tuple[ReportJob, bytes]:
        """Bytes of a COMPLETED job owned by the caller; ReportNotFound otherwise."""
        job = await self._repo.get_for_owner(job_id, owner_id)
        if job is None or job.status != ReportStatus.COMPLETED.value or not job.artifact_ref:
            raise ReportNotFound("Report not found or not ready")
        data = self._artifact_store.read(job.artifact_ref)
        if data is None:
            logger.error("Artifact %s of completed report %s is missing", job.artifact_ref, job.id)
            raise ReportNotFound("Report file not found")
        return job, data

    # ── Deletion ────────────────────────────────────────────

    async def delete_report(self, owner_id: uuid.UUID, job_id: uuid.UUID) -> None:
        """Delete the row together with its artifact, or unregister a template's timer.

        Deleting a GENERATING job does not stop generation; the pipeline finds
        the row gone and discards what it produced.
        """
        job = await self.get_report(owner_id, job_id)
        is_template = job.status == ReportStatus.SCHEDULED.value

        # The job may have completed since it was loaded; once the delete is
        # committed it can no longer, so the stored key is final
        refs = {self._artifact_store.ref_for(job.id, FILE_EXTENSIONS[ReportFormat(job.file_format)])}
        if job.artifact_ref:
            refs.add(job.artifact_ref)

        await self._repo.delete(job)
        await self._session.commit()

        if is_template:
            self._scheduler.unregister(job_id)
        for ref in refs:
            self._artifact_store.delete(ref)
        logger.info("Report %s deleted by user %s", job_id, owner_id)


def download_filename(job: ReportJob) -> str:
    created: datetime = job.created_at or utcnow()
    safe_name = "".join(c if (c.isascii() and c.isalnum()) or c in "-_ " else "_" for c in job.name).strip() or "report"
    extension = FILE_EXTENSIONS[ReportFormat(job.file_format)]
    return f"{safe_name}_{created.strftime('%Y-%m-%d')}.{extension}"
