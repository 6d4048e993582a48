"""Request/response models for the reports API (camelCase on the wire)."""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class ReportConfig(CamelModel):
    company_id: Optional[str] = None
    project_id: Optional[str] = None
    period: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    def to_scope(self) -> dict[str, Any]:
        """Keys of ReportScope; absent values are left out."""
        scope = {
            "company_id": self.company_id,
            "project_id": self.project_id,
            "period": self.period,
            "start": _naive_utc(self.start_date),
            "end": _naive_utc(self.end_date),
        }
        return {k: v for k, v in scope.items() if v not in (None, "")}


class ReportGenerateRequest(CamelModel):
    name: Optional[str] = None
    type: Optional[str] = None
    config: Optional[ReportConfig] = None
    format: Optional[str] = None


class ReportScheduleRequest(ReportGenerateRequest):
    schedule: Optional[str] = None


class ReportAccepted(CamelModel):
    report_id: uuid.UUID
    status: str
    message: str


class ReportResponse(CamelModel):
    id: uuid.UUID
    name: str
    type: str
    status: str
    file_format: str
    company_id: uuid.UUID
    config: dict[str, Any]
    is_recurring: bool = False
    schedule: Optional[str] = None
    template_id: Optional[uuid.UUID] = None
    error_message: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    generated_at: Optional[datetime] = None


class ReportDetail(ReportResponse):
    data: Optional[dict[str, Any]] = None


class ReportTemplateResponse(CamelModel):
    type: str
    name: str
    description: str
    fields: list[str]
    required_fields: list[str]
    formats: list[str]
    premium: bool
    available: bool


class MessageResponse(CamelModel):
    message: str
