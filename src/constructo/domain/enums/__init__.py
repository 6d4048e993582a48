from constructo.domain.enums.report import (
    PREMIUM_REPORT_TYPES,
    ReportFormat,
    ReportPeriod,
    ReportStatus,
    ReportType,
)
from constructo.domain.enums.work import TaskPriority, TaskStatus, WorkerStatus

__all__ = [
    "PREMIUM_REPORT_TYPES",
    "ReportFormat",
    "ReportPeriod",
    "ReportStatus",
    "ReportType",
    "TaskPriority",
    "TaskStatus",
    "WorkerStatus",
]
