"""Reports API — generate, schedule, list, download and delete report jobs."""

import uuid
from io import BytesIO
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from constructo.api.deps import get_current_user_id, get_report_service
from constructo.api.schemas.reports import (
    MessageResponse,
    ReportAccepted,
    ReportDetail,
    ReportGenerateRequest,
    ReportResponse,
    ReportScheduleRequest,
    ReportTemplateResponse,
)
from constructo.db.models.report import ReportJob
from constructo.domain.enums import ReportFormat
from constructo.report.rendering import CONTENT_TYPES
from constructo.report.service import ReportService, download_filename

router = APIRouter(prefix="/api/reports", tags=["reports"])

UserDep = Annotated[uuid.UUID, Depends(get_current_user_id)]
ServiceDep = Annotated[ReportService, Depends(get_report_service)]


def _to_response(job: ReportJob, detail: bool = False) -> ReportResponse:
    fields = dict(
        id=job.id,
        name=job.name,
        type=job.report_type,
        status=job.status,
        file_format=job.file_format,
        company_id=job.company_id,
        config=job.scope,
        is_recurring=job.is_recurring,
        schedule=job.schedule,
        template_id=job.template_id,
        error_message=job.error_message,
        created_at=job.created_at,
        updated_at=job.updated_at,
        generated_at=job.generated_at,
    )
    if detail:
        return ReportDetail(data=job.data_snapshot, **fields)
    return ReportResponse(**fields)


@router.get("", response_model=list[ReportResponse])
async def list_reports(
    user_id: UserDep,
    service: ServiceDep,
    company_id: Optional[uuid.UUID] = Query(None, alias="companyId"),
    report_type: Optional[str] = Query(None, alias="type"),
    status: Optional[str] = Query(None),
) -> list[ReportResponse]:
    """List the caller's reports and templates, newest first."""
    jobs = await service.list_reports(user_id, company_id=company_id, report_type=report_type, status=status)
    return [_to_response(job) for job in jobs]


@router.get("/templates", response_model=list[ReportTemplateResponse])
async def list_templates(user_id: UserDep, service: ServiceDep) -> list[ReportTemplateResponse]:
    entries = await service.list_templates(user_id)
    return [
        ReportTemplateResponse(
            type=info.type.value,
            name=info.name,
            description=info.description,
            fields=list(info.fields),
            required_fields=list(info.required_fields),
            formats=[f.value for f in info.formats],
            premium=info.premium,
            available=available,
        )
        for info, available in entries
    ]


@router.post("/generate", response_model=ReportAccepted, status_code=202)
async def generate_report(body: ReportGenerateRequest, user_id: UserDep, service: ServiceDep) -> ReportAccepted:
    """Create a report job; generation continues in the background."""
    job = await service.generate(
        user_id,
        name=body.name,
        report_type=body.type,
        config=body.config.to_scope() if body.config else None,
        file_format=body.format,
    )
    return ReportAccepted(
        report_id=job.id,
        status=job.status,
        message="Report generation started. You will be notified when it's ready.",
    )


@router.post("/schedule", response_model=ReportResponse, status_code=201)
async def schedule_report(body: ReportScheduleRequest, user_id: UserDep, service: ServiceDep) -> ReportResponse:
    """Create a recurring template that spawns a report on every cron tick."""
    template = await service.schedule(
        user_id,
        name=body.name,
        report_type=body.type,
        config=body.config.to_scope() if body.config else None,
        file_format=body.format,
        schedule=body.schedule,
    )
    return _to_response(template)


@router.get("/{report_id}", response_model=ReportDetail)
async def get_report(report_id: uuid.UUID, user_id: UserDep, service: ServiceDep) -> ReportResponse:
    job = await service.get_report(user_id, report_id)
    return _to_response(job, detail=True)


@router.get("/{report_id}/download")
async def download_report(report_id: uuid.UUID, user_id: UserDep, service: ServiceDep):
    """Download the rendered file of a completed report."""
    job, data = await service.get_artifact(user_id, report_id)
    return StreamingResponse(
        BytesIO(data),
        media_type=CONTENT_TYPES[ReportFormat(job.file_format)],
        headers={"Content-Disposition": f'attachment; filename="{download_filename(job)}"'},
    )


@router.delete("/{report_id}", response_model=MessageResponse)
async def delete_report(report_id: uuid.UUID, user_id: UserDep, service: ServiceDep) -> MessageResponse:
    await service.delete_report(user_id, report_id)
    return MessageResponse(message="Report deleted successfully")
