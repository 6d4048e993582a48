"""Data bundles — typed, renderer-agnostic output of aggregation."""

import uuid
from datetime import datetime
from typing import ClassVar, Optional, Union

from pydantic import BaseModel

from constructo.domain.enums import ReportPeriod, ReportType


class TaskLine(BaseModel):
    title: str
    status: str
    priority: str
    project: str
    assignee: Optional[str] = None
    due_date: Optional[datetime] = None


# ── PROJECT_SUMMARY ─────────────────────────────────────────


class ProjectSummaryFigures(BaseModel):
    total_tasks: int = 0
    completed_tasks: int = 0
    completion_rate: float = 0.0
    materials_cost: float = 0.0
    budget_usage: float = 0.0


class ProjectSummaryBundle(BaseModel):
    report_type: ClassVar[ReportType] = ReportType.PROJECT_SUMMARY

    project_id: uuid.UUID
    project_name: str
    project_status: str
    budget: float = 0.0
    tasks: list[TaskLine] = []
    summary: ProjectSummaryFigures = ProjectSummaryFigures()


# ── FINANCIAL_REPORT ────────────────────────────────────────


class ProjectFinancials(BaseModel):
    project: str
    budget: float = 0.0
    materials_cost: float = 0.0
    labor_cost: float = 0.0
    total_cost: float = 0.0
    variance: float = 0.0  # budget - total_cost


class FinancialFigures(BaseModel):
    total_budget: float = 0.0
    total_materials_cost: float = 0.0
    total_labor_cost: float = 0.0
    total_cost: float = 0.0
    total_variance: float = 0.0


class FinancialReportBundle(BaseModel):
    report_type: ClassVar[ReportType] = ReportType.FINANCIAL_REPORT

    company_id: uuid.UUID
    period: Optional[ReportPeriod] = None
    labor_hourly_rate: float
    projects: list[ProjectFinancials] = []
    summary: FinancialFigures = FinancialFigures()


# ── TEAM_PRODUCTIVITY ───────────────────────────────────────


class WorkerProductivity(BaseModel):
    name: str
    email: str = ""
    position: Optional[str] = None
    total_tasks: int = 0
    completed_tasks: int = 0
    completion_rate: float = 0.0
    total_hours: float = 0.0
    estimated_hours: float = 0.0
    efficiency: float = 0.0
    average_task_time: float = 0.0


class TeamFigures(BaseModel):
    total_workers: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0
    total_hours: float = 0.0
    average_productivity: float = 0.0


class TeamProductivityBundle(BaseModel):
    report_type: ClassVar[ReportType] = ReportType.TEAM_PRODUCTIVITY

    company_id: uuid.UUID
    period: Optional[ReportPeriod] = None
    workers: list[WorkerProductivity] = []
    summary: TeamFigures = TeamFigures()


# ── TASK_COMPLETION ─────────────────────────────────────────


class BreakdownLine(BaseModel):
    key: str
    count: int = 0
    percentage: float = 0.0


class TaskCompletionFigures(BaseModel):
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    review: int = 0
    todo: int = 0
    overdue: int = 0
    completion_rate: float = 0.0


class TaskCompletionBundle(BaseModel):
    report_type: ClassVar[ReportType] = ReportType.TASK_COMPLETION

    company_id: uuid.UUID
    project_id: Optional[uuid.UUID] = None
    period: Optional[ReportPeriod] = None
    tasks: list[TaskLine] = []
    summary: TaskCompletionFigures = TaskCompletionFigures()
    status_breakdown: list[BreakdownLine] = []
    priority_breakdown: list[BreakdownLine] = []


# ── MATERIAL_INVENTORY ──────────────────────────────────────


class MaterialLine(BaseModel):
    name: str
    category: str
    quantity: float = 0.0
    unit: str = ""
    price: float = 0.0
    value: float = 0.0
    location: Optional[str] = None
    low_stock: bool = False


class CategoryTotals(BaseModel):
    name: str
    material_count: int = 0
    total_quantity: float = 0.0
    total_value: float = 0.0


class InventoryFigures(BaseModel):
    total_materials: int = 0
    total_value: float = 0.0
    low_stock_count: int = 0
    categories_count: int = 0
    average_value: float = 0.0


class MaterialInventoryBundle(BaseModel):
    report_type: ClassVar[ReportType] = ReportType.MATERIAL_INVENTORY

    company_id: uuid.UUID
    materials: list[MaterialLine] = []
    categories: list[CategoryTotals] = []
    top_value: list[MaterialLine] = []
    summary: InventoryFigures = InventoryFigures()


# ── TIME_TRACKING ───────────────────────────────────────────


class TimeLine(BaseModel):
    title: str
    project: str
    assignee: Optional[str] = None
    estimated_hours: float = 0.0
    actual_hours: float = 0.0
    variance: float = 0.0  # actual - estimated
    efficiency: float = 0.0


class TimeRollup(BaseModel):
    """Hours aggregated per project or per worker."""

    name: str
    task_count: int = 0
    estimated_hours: float = 0.0
    actual_hours: float = 0.0
    efficiency: float = 0.0


class TimeFigures(BaseModel):
    total_tasks: int = 0
    total_estimated_hours: float = 0.0
    total_actual_hours: float = 0.0
    time_variance: float = 0.0
    time_efficiency: float = 0.0
    average_task_time: float = 0.0


class TimeTrackingBundle(BaseModel):
    report_type: ClassVar[ReportType] = ReportType.TIME_TRACKING

    company_id: uuid.UUID
    period: Optional[ReportPeriod] = None
    tasks: list[TimeLine] = []
    by_project: list[TimeRollup] = []
    by_worker: list[TimeRollup] = []
    summary: TimeFigures = TimeFigures()


DataBundle = Union[
    ProjectSummaryBundle,
    FinancialReportBundle,
    TeamProductivityBundle,
    TaskCompletionBundle,
    MaterialInventoryBundle,
    TimeTrackingBundle,
]
