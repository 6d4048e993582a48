import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from constructo.common.time import utcnow
from constructo.db.models.report import ReportJob
from constructo.domain.enums import ReportStatus


class ReportJobRepo:
    """Job store. Terminal writes only ever move a job out of GENERATING."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_job(
        self,
        *,
        name: str,
        report_type: str,
        scope: dict[str, Any],
        file_format: str,
        owner_id: uuid.UUID,
        company_id: uuid.UUID,
        template_id: Optional[uuid.UUID] = None,
    ) -> ReportJob:
        now = utcnow()
        job = ReportJob(
            name=name,
            report_type=report_type,
            scope=scope,
            file_format=file_format,
            status=ReportStatus.GENERATING.value,
            owner_id=owner_id,
            company_id=company_id,
            template_id=template_id,
            created_at=now,
            updated_at=now,
        )
        self._session.add(job)
        await self._session.flush()
        return job

    async def create_template(
        self,
        *,
        name: str,
        report_type: str,
        scope: dict[str, Any],
        file_format: str,
        schedule: str,
        owner_id: uuid.UUID,
        company_id: uuid.UUID,
    ) -> ReportJob:
        now = utcnow()
        template = ReportJob(
            name=name,
            report_type=report_type,
            scope=scope,
            file_format=file_format,
            status=ReportStatus.SCHEDULED.value,
            is_recurring=True,
            schedule=schedule,
            owner_id=owner_id,
            company_id=company_id,
            created_at=now,
            updated_at=now,
        )
        self._session.add(template)
        await self._session.flush()
        return template

    async def get_by_id(self, job_id: uuid.UUID) -> Optional[ReportJob]:
        result = await self._session.execute(select(ReportJob).where(ReportJob.id == job_id))
        return result.scalar_one_or_none()

    async def get_for_owner(self, job_id: uuid.UUID, owner_id: uuid.UUID) -> Optional[ReportJob]:
        result = await self._session.execute(
            select(ReportJob).where(ReportJob.id == job_id, ReportJob.owner_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def list_for_owner(
        self,
        owner_id: uuid.UUID,
        company_id: Optional[uuid.UUID] = None,
        report_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[ReportJob]:
        stmt = (
            select(ReportJob)
            .where(ReportJob.owner_id == owner_id)
            .order_by(ReportJob.created_at.desc())
        )
        if company_id is not None:
            stmt = stmt.where(ReportJob.company_id == company_id)
        if report_type is not None:
            stmt = stmt.where(ReportJob.report_type == report_type)
        if status is not None:
            stmt = stmt.where(ReportJob.status == status)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_templates(self) -> list[ReportJob]:
        """All SCHEDULED templates, oldest first."""
        result = await self._session.execute(
            select(ReportJob)
            .where(ReportJob.status == ReportStatus.SCHEDULED.value)
            .order_by(ReportJob.created_at.asc())
        )
        return list(result.scalars().all())

    async def mark_completed(
        self,
        job_id: uuid.UUID,
        artifact_ref: str,
        data_snapshot: dict[str, Any],
        generated_at: datetime,
    ) -> bool:
        """GENERATING → COMPLETED. False when the row is gone or already terminal."""
        return await self._finish(
            job_id,
            status=ReportStatus.COMPLETED.value,
            artifact_ref=artifact_ref,
            data_snapshot=data_snapshot,
            generated_at=generated_at,
        )

    async def mark_failed(self, job_id: uuid.UUID, error_message: str) -> bool:
        """GENERATING → FAILED. False when the row is gone or already terminal."""
        return await self._finish(
            job_id,
            status=ReportStatus.FAILED.value,
            artifact_ref=None,
            error_message=error_message[:2000],
        )

    async def _finish(self, job_id: uuid.UUID, **values: Any) -> bool:
        result = await self._session.execute(
            update(ReportJob)
            .where(ReportJob.id == job_id, ReportJob.status == ReportStatus.GENERATING.value)
            .values(updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def fail_stuck_jobs(self, started_before: datetime) -> int:
        """Mark GENERATING jobs created before ``started_before`` as FAILED."""
        result = await self._session.execute(
            update(ReportJob)
            .where(
                ReportJob.status == ReportStatus.GENERATING.value,
                ReportJob.created_at < started_before,
            )
            .values(
                updated_at=utcnow(),
                status=ReportStatus.FAILED.value,
                artifact_ref=None,
                error_message="Generation did not finish before the reconciliation threshold",
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def delete(self, job: ReportJob) -> None:
        await self._session.delete(job)
        await self._session.flush()
