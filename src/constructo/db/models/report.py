"""ReportJob — lifecycle record of a generated report or a recurring template."""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from constructo.db.session import Base, TimestampMixin, UUIDPrimaryKey
from constructo.domain.enums import ReportStatus


class ReportJob(UUIDPrimaryKey, TimestampMixin, Base):
    """One report job, or a SCHEDULED template that spawns jobs.

    ``artifact_ref`` is set only together with status COMPLETED.
    """

    __tablename__ = "report_jobs"

    name: Mapped[str] = mapped_column(String(255))
    report_type: Mapped[str] = mapped_column(String(40))
    scope: Mapped[dict[str, Any]] = mapped_column(JSON)
    file_format: Mapped[str] = mapped_column(String(10))
    status: Mapped[str] = mapped_column(String(20), default=ReportStatus.GENERATING.value, index=True)
    is_recurring: Mapped[bool] = mapped_column(default=False)
    schedule: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    template_id: Mapped[Optional[uuid.UUID]] = mapped_column(default=None)
    owner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    company_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("companies.id"), index=True)
    data_snapshot: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, default=None)
    artifact_ref: Mapped[Optional[str]] = mapped_column(String(512), default=None)
    error_message: Mapped[Optional[str]] = mapped_column(Text, default=None)
    generated_at: Mapped[Optional[datetime]] = mapped_column(default=None)
