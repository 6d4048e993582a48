"""Aggregation layer — turns a scope plus domain records into a DataBundle.

The ``aggregate_*`` functions are pure: they take already-loaded records
and return pre-summarised figures. ``ReportAggregator`` does the loading
through the domain gateway and resolves scope errors.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Iterable

from constructo.db.repos.domain_repo import DomainGateway
from constructo.domain.enums import ReportType, TaskPriority, TaskStatus
from constructo.domain.models.bundles import (
    BreakdownLine,
    CategoryTotals,
    DataBundle,
    FinancialFigures,
    FinancialReportBundle,
    InventoryFigures,
    MaterialInventoryBundle,
    MaterialLine,
    ProjectFinancials,
    ProjectSummaryBundle,
    ProjectSummaryFigures,
    TaskCompletionBundle,
    TaskCompletionFigures,
    TaskLine,
    TeamFigures,
    TeamProductivityBundle,
    TimeFigures,
    TimeLine,
    TimeRollup,
    TimeTrackingBundle,
    WorkerProductivity,
)
from constructo.domain.models.records import (
    MaterialRecord,
    ProjectRecord,
    TaskRecord,
    WorkerRecord,
)
from constructo.domain.models.scope import ReportScope
from constructo.exceptions import ScopeNotFound

UNCATEGORIZED = "Other"
TOP_VALUE_LIMIT = 10


def percentage(part: float, whole: float) -> float:
    """part / whole as a percentage rounded to two decimals; 0 when whole is 0."""
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)


def efficiency(estimated_hours: float, actual_hours: float) -> float:
    """estimated / actual × 100; 0 when either side is 0."""
    if not estimated_hours or not actual_hours:
        return 0.0
    return round(estimated_hours / actual_hours * 100, 2)


def _money(value: float) -> float:
    return round(value, 2)


def _hours(value: float) -> float:
    return round(value, 2)


def _in_window(tasks: Iterable[TaskRecord], scope: ReportScope) -> list[TaskRecord]:
    if scope.start is None and scope.end is None:
        return list(tasks)
    return [t for t in tasks if scope.contains(t.created_at)]


def _task_line(task: TaskRecord) -> TaskLine:
    return TaskLine(
        title=task.title,
        status=task.status.value,
        priority=task.priority.value,
        project=task.project_name,
        assignee=task.assignee.full_name if task.assignee else None,
        due_date=task.due_date,
    )


def _materials_cost(materials: Iterable[MaterialRecord]) -> float:
    return sum(m.value for m in materials)


# ── Pure aggregations ───────────────────────────────────────


def aggregate_project_summary(project: ProjectRecord, scope: ReportScope) -> ProjectSummaryBundle:
    tasks = _in_window(project.tasks, scope)
    total = len(tasks)
    completed = sum(1 for t in tasks if t.status == TaskStatus.DONE)
    materials_cost = _materials_cost(project.materials)

    return ProjectSummaryBundle(
        project_id=project.id,
        project_name=project.name,
        project_status=project.status,
        budget=_money(project.budget),
        tasks=[_task_line(t) for t in tasks],
        summary=ProjectSummaryFigures(
            total_tasks=total,
            completed_tasks=completed,
            completion_rate=percentage(completed, total),
            materials_cost=_money(materials_cost),
            budget_usage=percentage(materials_cost, project.budget),
        ),
    )


def aggregate_financial_report(
    projects: list[ProjectRecord],
    scope: ReportScope,
    labor_hourly_rate: float,
) -> FinancialReportBundle:
    rows: list[ProjectFinancials] = []
    for project in projects:
        materials_cost = _materials_cost(project.materials)
        labor_cost = sum(t.actual_hours for t in _in_window(project.tasks, scope)) * labor_hourly_rate
        total_cost = materials_cost + labor_cost
        rows.append(ProjectFinancials(
            project=project.name,
            budget=_money(project.budget),
            materials_cost=_money(materials_cost),
            labor_cost=_money(labor_cost),
            total_cost=_money(total_cost),
            variance=_money(project.budget - total_cost),
        ))

    return FinancialReportBundle(
        company_id=scope.company_id,
        period=scope.period,
        labor_hourly_rate=labor_hourly_rate,
        projects=rows,
        summary=FinancialFigures(
            total_budget=_money(sum(r.budget for r in rows)),
            total_materials_cost=_money(sum(r.materials_cost for r in rows)),
            total_labor_cost=_money(sum(r.labor_cost for r in rows)),
            total_cost=_money(sum(r.total_cost for r in rows)),
            total_variance=_money(sum(r.variance for r in rows)),
        ),
    )


def aggregate_team_productivity(
    workers: list[WorkerRecord],
    tasks: list[TaskRecord],
    scope: ReportScope,
) -> TeamProductivityBundle:
    assigned = [t for t in _in_window(tasks, scope) if t.assignee is not None]
    by_user: dict[uuid.UUID, list[TaskRecord]] = defaultdict(list)
    for task in assigned:
        by_user[task.assignee.id].append(task)

    rows: list[WorkerProductivity] = []
    for worker in workers:
        worker_tasks = by_user.get(worker.user.id, [])
        completed = sum(1 for t in worker_tasks if t.status == TaskStatus.DONE)
        total_hours = sum(t.actual_hours for t in worker_tasks)
        estimated_hours = sum(t.estimated_hours for t in worker_tasks)
        rows.append(WorkerProductivity(
            name=worker.user.full_name,
            email=worker.user.email,
            position=worker.position,
            total_tasks=len(worker_tasks),
            completed_tasks=completed,
            completion_rate=percentage(completed, len(worker_tasks)),
            total_hours=_hours(total_hours),
            estimated_hours=_hours(estimated_hours),
            efficiency=efficiency(estimated_hours, total_hours),
            average_task_time=_hours(total_hours / completed) if completed else 0.0,
        ))

    average = round(sum(r.completion_rate for r in rows) / len(rows), 2) if rows else 0.0
    return TeamProductivityBundle(
        company_id=scope.company_id,
        period=scope.period,
        workers=rows,
        summary=TeamFigures(
            total_workers=len(workers),
            total_tasks=len(assigned),
            completed_tasks=sum(1 for t in assigned if t.status == TaskStatus.DONE),
            total_hours=_hours(sum(t.actual_hours for t in assigned)),
            average_productivity=average,
        ),
    )


def aggregate_task_completion(tasks: list[TaskRecord], scope: ReportScope) -> TaskCompletionBundle:
    tasks = _in_window(tasks, scope)
    total = len(tasks)
    by_status = {s: sum(1 for t in tasks if t.status == s) for s in TaskStatus}
    by_priority = {p: sum(1 for t in tasks if t.priority == p) for p in TaskPriority}

    overdue = 0
    if scope.as_of is not None:
        overdue = sum(
            1 for t in tasks
            if t.due_date is not None and t.due_date < scope.as_of and t.status != TaskStatus.DONE
        )

    return TaskCompletionBundle(
        company_id=scope.company_id,
        project_id=scope.project_id,
        period=scope.period,
        tasks=[_task_line(t) for t in tasks],
        summary=TaskCompletionFigures(
            total=total,
            completed=by_status[TaskStatus.DONE],
            in_progress=by_status[TaskStatus.IN_PROGRESS],
            review=by_status[TaskStatus.REVIEW],
            todo=by_status[TaskStatus.TODO],
            overdue=overdue,
            completion_rate=percentage(by_status[TaskStatus.DONE], total),
        ),
        status_breakdown=[
            BreakdownLine(key=s.value, count=n, percentage=percentage(n, total))
            for s, n in by_status.items()
        ],
        priority_breakdown=[
            BreakdownLine(key=p.value, count=n, percentage=percentage(n, total))
            for p, n in by_priority.items()
        ],
    )


def aggregate_material_inventory(
    materials: list[MaterialRecord], scope: ReportScope
) -> MaterialInventoryBundle:
    lines = [
        MaterialLine(
            name=m.name,
            category=m.category or UNCATEGORIZED,
            quantity=m.quantity,
            unit=m.unit,
            price=_money(m.price),
            value=_money(m.value),
            location=m.location,
            low_stock=m.min_quantity is not None and m.quantity <= m.min_quantity,
        )
        for m in materials
    ]

    categories: dict[str, CategoryTotals] = {}
    for line in lines:
        totals = categories.setdefault(line.category, CategoryTotals(name=line.category))
        totals.material_count += 1
        totals.total_quantity += line.quantity
        totals.total_value = _money(totals.total_value + line.value)

    total_value = sum(line.value for line in lines)
    top_value = sorted(lines, key=lambda line: (-line.value, line.name))[:TOP_VALUE_LIMIT]

    return MaterialInventoryBundle(
        company_id=scope.company_id,
        materials=lines,
        categories=sorted(categories.values(), key=lambda c: c.name),
        top_value=top_value,
        summary=InventoryFigures(
            total_materials=len(lines),
            total_value=_money(total_value),
            low_stock_count=sum(1 for line in lines if line.low_stock),
            categories_count=len(categories),
            average_value=_money(total_value / len(lines)) if lines else 0.0,
        ),
    )


def _rollup(name: str, tasks: list[TaskRecord]) -> TimeRollup:
    estimated = sum(t.estimated_hours for t in tasks)
    actual = sum(t.actual_hours for t in tasks)
    return TimeRollup(
        name=name,
        task_count=len(tasks),
        estimated_hours=_hours(estimated),
        actual_hours=_hours(actual),
        efficiency=efficiency(estimated, actual),
    )


def aggregate_time_tracking(tasks: list[TaskRecord], scope: ReportScope) -> TimeTrackingBundle:
    tracked = [
        t for t in _in_window(tasks, scope)
        if t.estimated_hours > 0 or t.actual_hours > 0
    ]
    estimated = sum(t.estimated_hours for t in tracked)
    actual = sum(t.actual_hours for t in tracked)

    by_project: dict[str, list[TaskRecord]] = defaultdict(list)
    by_worker: dict[str, list[TaskRecord]] = defaultdict(list)
    for task in tracked:
        by_project[task.project_name].append(task)
        if task.assignee is not None:
            by_worker[task.assignee.full_name].append(task)

    return TimeTrackingBundle(
        company_id=scope.company_id,
        period=scope.period,
        tasks=[
            TimeLine(
                title=t.title,
                project=t.project_name,
                assignee=t.assignee.full_name if t.assignee else None,
                estimated_hours=_hours(t.estimated_hours),
                actual_hours=_hours(t.actual_hours),
                variance=_hours(t.actual_hours - t.estimated_hours),
                efficiency=efficiency(t.estimated_hours, t.actual_hours),
            )
            for t in tracked
        ],
        by_project=[_rollup(name, group) for name, group in sorted(by_project.items())],
        by_worker=[_rollup(name, group) for name, group in sorted(by_worker.items())],
        summary=TimeFigures(
            total_tasks=len(tracked),
            total_estimated_hours=_hours(estimated),
            total_actual_hours=_hours(actual),
            time_variance=_hours(actual - estimated),
            time_efficiency=efficiency(estimated, actual),
            average_task_time=_hours(actual / len(tracked)) if tracked else 0.0,
        ),
    )


# ── Loading + dispatch ──────────────────────────────────────


class ReportAggregator:
    """Loads the records a report type needs and aggregates them.

    Only reads from the gateway, so running it twice for the same scope is safe.
    """

    def __init__(self, gateway: DomainGateway, labor_hourly_rate: float = 50.0) -> None:
        self._gateway = gateway
        self._labor_hourly_rate = labor_hourly_rate

    async def aggregate(self, report_type: ReportType, scope: ReportScope) -> DataBundle:
        if not await self._gateway.company_exists(scope.company_id):
            raise ScopeNotFound(f"Company {scope.company_id} not found")

        if report_type == ReportType.PROJECT_SUMMARY:
            project = await self._load_project(scope)
            return aggregate_project_summary(project, scope)

        if report_type == ReportType.FINANCIAL_REPORT:
            projects = await self._gateway.list_projects(scope.company_id)
            return aggregate_financial_report(projects, scope, self._labor_hourly_rate)

        if report_type == ReportType.TEAM_PRODUCTIVITY:
            workers = await self._gateway.list_active_workers(scope.company_id)
            tasks = await self._gateway.list_tasks(scope.company_id)
            return aggregate_team_productivity(workers, tasks, scope)

        if report_type == ReportType.TASK_COMPLETION:
            if scope.project_id is not None:
                await self._load_project(scope)
            tasks = await self._gateway.list_tasks(scope.company_id, scope.project_id)
            return aggregate_task_completion(tasks, scope)

        if report_type == ReportType.MATERIAL_INVENTORY:
            materials = await self._gateway.list_materials(scope.company_id)
            return aggregate_material_inventory(materials, scope)

        if report_type == ReportType.TIME_TRACKING:
            tasks = await self._gateway.list_tasks(scope.company_id)
            return aggregate_time_tracking(tasks, scope)

        raise ValueError(f"Unknown report type: {report_type}")

    async def _load_project(self, scope: ReportScope) -> ProjectRecord:
        if scope.project_id is None:
            raise ScopeNotFound("Project scope is missing")
        project = await self._gateway.get_project(scope.project_id)
        if project is None or project.company_id != scope.company_id:
            raise ScopeNotFound(f"Project {scope.project_id} not found in company {scope.company_id}")
        return project
