"""Document model — the format-neutral representation both renderers consume.

A document is an ordered list of sections; each section body is either a
summary block of (label, value) pairs or a table. Currency, percentage and
date formatting are decided here, so the renderers only lay out cells.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Union

from constructo.domain.enums import ReportType
from constructo.domain.models.bundles import (
    DataBundle,
    FinancialReportBundle,
    MaterialInventoryBundle,
    ProjectSummaryBundle,
    TaskCompletionBundle,
    TaskLine,
    TeamProductivityBundle,
    TimeRollup,
    TimeTrackingBundle,
)

Cell = Union[str, int, float, None]

REPORT_TITLES: dict[ReportType, str] = {
    ReportType.PROJECT_SUMMARY: "Project Summary",
    ReportType.FINANCIAL_REPORT: "Financial Report",
    ReportType.TEAM_PRODUCTIVITY: "Team Productivity",
    ReportType.TASK_COMPLETION: "Task Completion",
    ReportType.MATERIAL_INVENTORY: "Material Inventory",
    ReportType.TIME_TRACKING: "Time Tracking",
}

UNASSIGNED = "Unassigned"
NOT_SET = "-"
DATE_FORMAT = "%d.%m.%Y"
DATETIME_FORMAT = "%d.%m.%Y %H:%M"


@dataclass
class SummaryBlock:
    items: list[tuple[str, Cell]] = field(default_factory=list)


@dataclass
class TableBlock:
    columns: list[str] = field(default_factory=list)
    rows: list[list[Cell]] = field(default_factory=list)


@dataclass
class Section:
    title: str
    body: Union[SummaryBlock, TableBlock]


@dataclass
class DocumentModel:
    title: str
    report_type: str
    generated_at: str
    sections: list[Section] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Plain-JSON form stored as the job's data snapshot."""
        sections = []
        for section in self.sections:
            if isinstance(section.body, SummaryBlock):
                body = {"kind": "summary", "items": [[label, value] for label, value in section.body.items]}
            else:
                body = {"kind": "table", "columns": list(section.body.columns), "rows": [list(r) for r in section.body.rows]}
            sections.append({"title": section.title, "body": body})
        return {
            "title": self.title,
            "report_type": self.report_type,
            "generated_at": self.generated_at,
            "sections": sections,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentModel:
        sections = []
        for raw in data.get("sections", []):
            body = raw["body"]
            if body["kind"] == "summary":
                block: Union[SummaryBlock, TableBlock] = SummaryBlock(
                    items=[(label, value) for label, value in body["items"]]
                )
            else:
                block = TableBlock(columns=list(body["columns"]), rows=[list(r) for r in body["rows"]])
            sections.append(Section(title=raw["title"], body=block))
        return cls(
            title=data["title"],
            report_type=data["report_type"],
            generated_at=data["generated_at"],
            sections=sections,
        )

    def tables(self) -> list[TableBlock]:
        return [s.body for s in self.sections if isinstance(s.body, TableBlock)]


class CellFormatter:
    """Display formatting shared by every renderer."""

    def __init__(self, currency_symbol: str = "PLN") -> None:
        self.currency_symbol = currency_symbol

    def money(self, value: float) -> str:
        return f"{value:,.2f} {self.currency_symbol}"

    @staticmethod
    def percent(value: float) -> str:
        return f"{value:.2f}%"

    @staticmethod
    def date(value: Optional[datetime]) -> str:
        return value.strftime(DATE_FORMAT) if value is not None else NOT_SET

    @staticmethod
    def hours(value: float) -> float:
        return round(value, 2)

    @staticmethod
    def text(value: Optional[str], fallback: str = NOT_SET) -> str:
        return value if value else fallback


# ── Per-type section builders ───────────────────────────────


def _task_table(tasks: list[TaskLine], fmt: CellFormatter, with_project: bool) -> TableBlock:
    columns = ["Title", "Status", "Priority"]
    if with_project:
        columns.append("Project")
    columns += ["Assigned To", "Due Date"]
    rows = []
    for task in tasks:
        row: list[Cell] = [task.title, task.status, task.priority]
        if with_project:
            row.append(task.project)
        row += [fmt.text(task.assignee, UNASSIGNED), fmt.date(task.due_date)]
        rows.append(row)
    return TableBlock(columns=columns, rows=rows)


def _project_summary(bundle: ProjectSummaryBundle, fmt: CellFormatter) -> list[Section]:
    s = bundle.summary
    return [
        Section("Project", SummaryBlock([
            ("Project", bundle.project_name),
            ("Status", bundle.project_status),
            ("Budget", fmt.money(bundle.budget)),
        ])),
        Section("Summary", SummaryBlock([
            ("Total Tasks", s.total_tasks),
            ("Completed Tasks", s.completed_tasks),
            ("Completion Rate", fmt.percent(s.completion_rate)),
            ("Materials Cost", fmt.money(s.materials_cost)),
            ("Budget Usage", fmt.percent(s.budget_usage)),
        ])),
        Section("Tasks", _task_table(bundle.tasks, fmt, with_project=False)),
    ]


def _financial_report(bundle: FinancialReportBundle, fmt: CellFormatter) -> list[Section]:
    s = bundle.summary
    return [
        Section("Summary", SummaryBlock([
            ("Total Budget", fmt.money(s.total_budget)),
            ("Materials Cost", fmt.money(s.total_materials_cost)),
            ("Labor Cost", fmt.money(s.total_labor_cost)),
            ("Total Cost", fmt.money(s.total_cost)),
            ("Variance", fmt.money(s.total_variance)),
            ("Labor Rate (per hour)", fmt.money(bundle.labor_hourly_rate)),
        ])),
        Section("Projects", TableBlock(
            columns=["Project", "Budget", "Materials Cost", "Labor Cost", "Total Cost", "Variance"],
            rows=[
                [p.project, fmt.money(p.budget), fmt.money(p.materials_cost), fmt.money(p.labor_cost),
                 fmt.money(p.total_cost), fmt.money(p.variance)]
                for p in bundle.projects
            ],
        )),
    ]


def _team_productivity(bundle: TeamProductivityBundle, fmt: CellFormatter) -> list[Section]:
    s = bundle.summary
    return [
        Section("Summary", SummaryBlock([
            ("Workers", s.total_workers),
            ("Assigned Tasks", s.total_tasks),
            ("Completed Tasks", s.completed_tasks),
            ("Hours Worked", fmt.hours(s.total_hours)),
            ("Average Completion Rate", fmt.percent(s.average_productivity)),
        ])),
        Section("Workers", TableBlock(
            columns=["Worker", "Position", "Total Tasks", "Completed", "Completion Rate",
                     "Hours", "Efficiency", "Avg Task Time"],
            rows=[
                [w.name, fmt.text(w.position), w.total_tasks, w.completed_tasks,
                 fmt.percent(w.completion_rate), fmt.hours(w.total_hours),
                 fmt.percent(w.efficiency), fmt.hours(w.average_task_time)]
                for w in bundle.workers
            ],
        )),
    ]


def _task_completion(bundle: TaskCompletionBundle, fmt: CellFormatter) -> list[Section]:
    s = bundle.summary
    return [
        Section("Summary", SummaryBlock([
            ("Total", s.total),
            ("Completed", s.completed),
            ("In Progress", s.in_progress),
            ("In Review", s.review),
            ("To Do", s.todo),
            ("Overdue", s.overdue),
            ("Completion Rate", fmt.percent(s.completion_rate)),
        ])),
        Section("By Status", TableBlock(
            columns=["Status", "Count", "Share"],
            rows=[[b.key, b.count, fmt.percent(b.percentage)] for b in bundle.status_breakdown],
        )),
        Section("By Priority", TableBlock(
            columns=["Priority", "Count", "Share"],
            rows=[[b.key, b.count, fmt.percent(b.percentage)] for b in bundle.priority_breakdown],
        )),
        Section("Tasks", _task_table(bundle.tasks, fmt, with_project=True)),
    ]


def _material_inventory(bundle: MaterialInventoryBundle, fmt: CellFormatter) -> list[Section]:
    s = bundle.summary
    return [
        Section("Summary", SummaryBlock([
            ("Materials", s.total_materials),
            ("Total Value", fmt.money(s.total_value)),
            ("Low Stock", s.low_stock_count),
            ("Categories", s.categories_count),
            ("Average Value", fmt.money(s.average_value)),
        ])),
        Section("Categories", TableBlock(
            columns=["Category", "Materials", "Quantity", "Value"],
            rows=[
                [c.name, c.material_count, round(c.total_quantity, 3), fmt.money(c.total_value)]
                for c in bundle.categories
            ],
        )),
        Section("Materials", TableBlock(
            columns=["Name", "Category", "Quantity", "Unit", "Price", "Value", "Location", "Low Stock"],
            rows=[
                [m.name, m.category, m.quantity, m.unit, fmt.money(m.price), fmt.money(m.value),
                 fmt.text(m.location), "Yes" if m.low_stock else "No"]
                for m in bundle.materials
            ],
        )),
    ]


def _rollup_table(rollups: list[TimeRollup], fmt: CellFormatter, label: str) -> TableBlock:
    return TableBlock(
        columns=[label, "Tasks", "Estimated", "Actual", "Efficiency"],
        rows=[
            [r.name, r.task_count, fmt.hours(r.estimated_hours), fmt.hours(r.actual_hours), fmt.percent(r.efficiency)]
            for r in rollups
        ],
    )


def _time_tracking(bundle: TimeTrackingBundle, fmt: CellFormatter) -> list[Section]:
    s = bundle.summary
    return [
        Section("Summary", SummaryBlock([
            ("Tasks", s.total_tasks),
            ("Estimated Hours", fmt.hours(s.total_estimated_hours)),
            ("Actual Hours", fmt.hours(s.total_actual_hours)),
            ("Variance", fmt.hours(s.time_variance)),
            ("Efficiency", fmt.percent(s.time_efficiency)),
            ("Average Task Time", fmt.hours(s.average_task_time)),
        ])),
        Section("By Project", _rollup_table(bundle.by_project, fmt, "Project")),
        Section("By Worker", _rollup_table(bundle.by_worker, fmt, "Worker")),
        Section("Tasks", TableBlock(
            columns=["Task", "Project", "Assigned To", "Estimated", "Actual", "Variance", "Efficiency"],
            rows=[
                [t.title, t.project, fmt.text(t.assignee, UNASSIGNED), fmt.hours(t.estimated_hours),
                 fmt.hours(t.actual_hours), fmt.hours(t.variance), fmt.percent(t.efficiency)]
                for t in bundle.tasks
            ],
        )),
    ]


SECTION_BUILDERS: dict[ReportType, Callable[[Any, CellFormatter], list[Section]]] = {
    ReportType.PROJECT_SUMMARY: _project_summary,
    ReportType.FINANCIAL_REPORT: _financial_report,
    ReportType.TEAM_PRODUCTIVITY: _team_productivity,
    ReportType.TASK_COMPLETION: _task_completion,
    ReportType.MATERIAL_INVENTORY: _material_inventory,
    ReportType.TIME_TRACKING: _time_tracking,
}


def build_document(
    bundle: DataBundle,
    generated_at: datetime,
    currency_symbol: str = "PLN",
) -> DocumentModel:
    """Build the document model for a bundle. Same inputs, same document."""
    report_type = bundle.report_type
    fmt = CellFormatter(currency_symbol)
    return DocumentModel(
        title=REPORT_TITLES[report_type],
        report_type=report_type.value,
        generated_at=generated_at.strftime(DATETIME_FORMAT),
        sections=SECTION_BUILDERS[report_type](bundle, fmt),
    )
