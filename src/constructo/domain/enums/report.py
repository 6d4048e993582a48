from enum import Enum


class ReportType(str, Enum):
    """Report kinds offered by the report catalog."""

    PROJECT_SUMMARY = "PROJECT_SUMMARY"
    FINANCIAL_REPORT = "FINANCIAL_REPORT"
    TEAM_PRODUCTIVITY = "TEAM_PRODUCTIVITY"
    TASK_COMPLETION = "TASK_COMPLETION"
    MATERIAL_INVENTORY = "MATERIAL_INVENTORY"
    TIME_TRACKING = "TIME_TRACKING"


class ReportFormat(str, Enum):
    """Output format of a rendered report."""

    PDF = "PDF"  # Paginated document
    EXCEL = "EXCEL"  # Spreadsheet workbook


class ReportStatus(str, Enum):
    """Lifecycle status of a report job.

    SCHEDULED marks a recurring template; it never becomes COMPLETED or FAILED.
    """

    GENERATING = "GENERATING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    SCHEDULED = "SCHEDULED"


class ReportPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


PREMIUM_REPORT_TYPES = frozenset({
    ReportType.FINANCIAL_REPORT,
    ReportType.TEAM_PRODUCTIVITY,
    ReportType.TIME_TRACKING,
})
