"""Static catalog of report types offered to clients."""

from dataclasses import dataclass, field

from constructo.domain.enums import PREMIUM_REPORT_TYPES, ReportFormat, ReportType


@dataclass(frozen=True)
class ReportTemplateInfo:
    type: ReportType
    name: str
    description: str
    fields: tuple[str, ...]
    required_fields: tuple[str, ...]
    formats: tuple[ReportFormat, ...] = (ReportFormat.PDF, ReportFormat.EXCEL)
    premium: bool = field(default=False)


def _info(report_type: ReportType, name: str, description: str, fields: tuple[str, ...], required: tuple[str, ...]) -> ReportTemplateInfo:
    return ReportTemplateInfo(
        type=report_type,
        name=name,
        description=description,
        fields=fields,
        required_fields=required,
        premium=report_type in PREMIUM_REPORT_TYPES,
    )


REPORT_CATALOG: dict[ReportType, ReportTemplateInfo] = {
    info.type: info
    for info in (
        _info(
            ReportType.PROJECT_SUMMARY,
            "Project Summary",
            "Progress, tasks and material costs of a single project",
            ("companyId", "projectId"),
            ("companyId", "projectId"),
        ),
        _info(
            ReportType.FINANCIAL_REPORT,
            "Financial Report",
            "Budgets, costs and variance across the company's projects",
            ("companyId", "period"),
            ("companyId",),
        ),
        _info(
            ReportType.TEAM_PRODUCTIVITY,
            "Team Productivity",
            "Worker throughput and workload",
            ("companyId", "period"),
            ("companyId",),
        ),
        _info(
            ReportType.TASK_COMPLETION,
            "Task Completion",
            "Task completion statistics and overdue work",
            ("companyId", "projectId", "period"),
            ("companyId",),
        ),
        _info(
            ReportType.MATERIAL_INVENTORY,
            "Material Inventory",
            "Stock levels and inventory value",
            ("companyId",),
            ("companyId",),
        ),
        _info(
            ReportType.TIME_TRACKING,
            "Time Tracking",
            "Estimated versus actual hours and efficiency",
            ("companyId", "period"),
            ("companyId",),
        ),
    )
}
