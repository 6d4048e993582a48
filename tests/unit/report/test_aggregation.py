"""Tests for the pure aggregation functions."""

import uuid
from datetime import datetime

from constructo.domain.enums import ReportFormat, ReportPeriod, TaskPriority, TaskStatus
from constructo.domain.models.records import (
    MaterialRecord,
    PersonRef,
    ProjectRecord,
    TaskRecord,
    WorkerRecord,
)
from constructo.domain.models.scope import ReportScope
from constructo.report.aggregation import (
    TOP_VALUE_LIMIT,
    UNCATEGORIZED,
    aggregate_financial_report,
    aggregate_material_inventory,
    aggregate_project_summary,
    aggregate_task_completion,
    aggregate_team_productivity,
    aggregate_time_tracking,
    efficiency,
    percentage,
)
from constructo.report.document import build_document
from constructo.report.rendering import render

COMPANY_ID = uuid.uuid4()
PROJECT_ID = uuid.uuid4()
AS_OF = datetime(2025, 6, 15, 12, 0)

JAN = PersonRef(id=uuid.uuid4(), first_name="Jan", last_name="Kowalski", email="jan@example.com")
EWA = PersonRef(id=uuid.uuid4(), first_name="Ewa", last_name="Lis", email="ewa@example.com")


def _scope(**kwargs) -> ReportScope:
    return ReportScope(company_id=COMPANY_ID, as_of=AS_OF, **kwargs)


def _task(title="Task", status=TaskStatus.TODO, **kwargs) -> TaskRecord:
    defaults = dict(
        id=uuid.uuid4(),
        project_id=PROJECT_ID,
        project_name="Osiedle",
        title=title,
        status=status,
        created_at=datetime(2025, 6, 1),
    )
    defaults.update(kwargs)
    return TaskRecord(**defaults)


def _project(tasks=(), materials=(), budget=10000.0, name="Osiedle") -> ProjectRecord:
    return ProjectRecord(
        id=PROJECT_ID, company_id=COMPANY_ID, name=name, budget=budget,
        tasks=list(tasks), materials=list(materials),
    )


def _material(name="Cement", quantity=10.0, price=20.0, **kwargs) -> MaterialRecord:
    return MaterialRecord(id=uuid.uuid4(), name=name, quantity=quantity, price=price, unit="bag", **kwargs)


class TestHelpers:
    def test_percentage_rounds_to_two_places(self):
        assert percentage(1, 3) == 33.33

    def test_percentage_of_zero_is_zero(self):
        assert percentage(5, 0) == 0.0

    def test_efficiency_zero_estimate(self):
        assert efficiency(0, 5) == 0.0

    def test_efficiency_zero_actual(self):
        assert efficiency(8, 0) == 0.0

    def test_efficiency_ratio(self):
        assert efficiency(40, 50) == 80.0


class TestEmptyScopes:
    def test_project_summary_without_tasks(self):
        bundle = aggregate_project_summary(_project(budget=0.0), _scope(project_id=PROJECT_ID))
        assert bundle.summary.total_tasks == 0
        assert bundle.summary.completion_rate == 0.0
        assert bundle.summary.budget_usage == 0.0
        assert bundle.tasks == []

    def test_financial_without_projects(self):
        bundle = aggregate_financial_report([], _scope(), labor_hourly_rate=50.0)
        assert bundle.projects == []
        assert bundle.summary.total_cost == 0.0
        assert bundle.summary.total_variance == 0.0

    def test_team_without_workers(self):
        bundle = aggregate_team_productivity([], [], _scope())
        assert bundle.workers == []
        assert bundle.summary.total_workers == 0
        assert bundle.summary.average_productivity == 0.0

    def test_task_completion_without_tasks(self):
        bundle = aggregate_task_completion([], _scope())
        assert bundle.summary.total == 0
        assert bundle.summary.completion_rate == 0.0
        assert all(line.count == 0 and line.percentage == 0.0 for line in bundle.status_breakdown)

    def test_inventory_without_materials(self):
        bundle = aggregate_material_inventory([], _scope())
        assert bundle.summary.total_materials == 0
        assert bundle.summary.total_value == 0.0
        assert bundle.summary.average_value == 0.0
        assert bundle.categories == []

    def test_time_tracking_without_tasks(self):
        bundle = aggregate_time_tracking([], _scope())
        assert bundle.summary.total_tasks == 0
        assert bundle.summary.time_efficiency == 0.0
        assert bundle.summary.average_task_time == 0.0


class TestProjectSummary:
    def test_completion_rate_six_of_ten(self):
        tasks = [_task(f"T{i}", TaskStatus.DONE if i < 6 else TaskStatus.TODO) for i in range(10)]
        bundle = aggregate_project_summary(_project(tasks), _scope(project_id=PROJECT_ID))
        assert bundle.summary.total_tasks == 10
        assert bundle.summary.completed_tasks == 6
        assert bundle.summary.completion_rate == 60.0

    def test_six_of_ten_through_document_and_renderers(self):
        tasks = [_task(f"T{i}", TaskStatus.DONE if i < 6 else TaskStatus.TODO) for i in range(10)]
        bundle = aggregate_project_summary(_project(tasks), _scope(project_id=PROJECT_ID))
        assert bundle.summary.completion_rate == 60.0

        document = build_document(bundle, AS_OF)
        task_tables = [s.body for s in document.sections if s.title == "Tasks"]
        assert len(task_tables) == 1
        assert len(task_tables[0].rows) == 10

        pdf = render(document, ReportFormat.PDF)
        xlsx = render(document, ReportFormat.EXCEL)
        assert pdf.startswith(b"%PDF")
        assert xlsx.startswith(b"PK")

    def test_materials_cost_and_budget_usage(self):
        materials = [_material(quantity=10, price=20.0), _material("Sand", quantity=5, price=100.0)]
        bundle = aggregate_project_summary(_project(materials=materials, budget=1400.0), _scope(project_id=PROJECT_ID))
        assert bundle.summary.materials_cost == 700.0
        assert bundle.summary.budget_usage == 50.0

    def test_period_window_filters_tasks(self):
        tasks = [
            _task("Old", created_at=datetime(2025, 1, 10)),
            _task("Recent", created_at=datetime(2025, 6, 10)),
        ]
        scope = _scope(project_id=PROJECT_ID, period=ReportPeriod.MONTHLY).resolve(AS_OF)
        bundle = aggregate_project_summary(_project(tasks), scope)
        assert [t.title for t in bundle.tasks] == ["Recent"]

    def test_unassigned_task_line(self):
        bundle = aggregate_project_summary(_project([_task()]), _scope(project_id=PROJECT_ID))
        assert bundle.tasks[0].assignee is None


class TestFinancialReport:
    def test_costs_and_variance(self):
        tasks = [_task(actual_hours=10), _task(actual_hours=6)]
        materials = [_material(quantity=10, price=50.0)]
        bundle = aggregate_financial_report(
            [_project(tasks, materials, budget=2000.0)], _scope(), labor_hourly_rate=50.0
        )
        row = bundle.projects[0]
        assert row.materials_cost == 500.0
        assert row.labor_cost == 800.0
        assert row.total_cost == 1300.0
        assert row.variance == 700.0
        assert bundle.summary.total_variance == 700.0

    def test_overspent_project_has_negative_variance(self):
        bundle = aggregate_financial_report(
            [_project([_task(actual_hours=100)], budget=1000.0)], _scope(), labor_hourly_rate=50.0
        )
        assert bundle.projects[0].variance == -4000.0


class TestTeamProductivity:
    def test_per_worker_figures(self):
        workers = [WorkerRecord(user=JAN, position="Builder"), WorkerRecord(user=EWA)]
        tasks = [
            _task("A", TaskStatus.DONE, assignee=JAN, estimated_hours=10, actual_hours=8),
            _task("B", TaskStatus.DONE, assignee=JAN, estimated_hours=10, actual_hours=12),
            _task("C", TaskStatus.IN_PROGRESS, assignee=JAN, estimated_hours=5, actual_hours=0),
            _task("D", TaskStatus.DONE),
        ]
        bundle = aggregate_team_productivity(workers, tasks, _scope())
        jan, ewa = bundle.workers
        assert jan.name == "Jan Kowalski"
        assert jan.total_tasks == 3
        assert jan.completed_tasks == 2
        assert jan.completion_rate == 66.67
        assert jan.total_hours == 20.0
        assert jan.average_task_time == 10.0
        assert jan.efficiency == 125.0
        assert ewa.total_tasks == 0
        assert ewa.completion_rate == 0.0
        assert bundle.summary.total_tasks == 3
        assert bundle.summary.average_productivity == round((66.67 + 0.0) / 2, 2)

    def test_worker_with_estimate_but_no_actual_hours(self):
        tasks = [_task("A", assignee=JAN, estimated_hours=8, actual_hours=0)]
        bundle = aggregate_team_productivity([WorkerRecord(user=JAN)], tasks, _scope())
        assert bundle.workers[0].efficiency == 0.0


class TestTaskCompletion:
    def test_status_counts_and_overdue(self):
        tasks = [
            _task("A", TaskStatus.DONE, due_date=datetime(2025, 6, 1)),
            _task("B", TaskStatus.IN_PROGRESS, due_date=datetime(2025, 6, 1)),
            _task("C", TaskStatus.REVIEW, due_date=datetime(2025, 7, 1)),
            _task("D", TaskStatus.TODO),
        ]
        bundle = aggregate_task_completion(tasks, _scope())
        s = bundle.summary
        assert (s.total, s.completed, s.in_progress, s.review, s.todo) == (4, 1, 1, 1, 1)
        assert s.overdue == 1
        assert s.completion_rate == 25.0

    def test_priority_breakdown(self):
        tasks = [_task(priority=TaskPriority.URGENT), _task(priority=TaskPriority.URGENT), _task(priority=TaskPriority.LOW)]
        bundle = aggregate_task_completion(tasks, _scope())
        breakdown = {line.key: line for line in bundle.priority_breakdown}
        assert breakdown["URGENT"].count == 2
        assert breakdown["URGENT"].percentage == 66.67
        assert breakdown["HIGH"].count == 0

    def test_overdue_depends_on_as_of_not_wall_clock(self):
        tasks = [_task(due_date=datetime(2030, 1, 1))]
        early = aggregate_task_completion(tasks, _scope())
        late = aggregate_task_completion(tasks, ReportScope(company_id=COMPANY_ID, as_of=datetime(2031, 1, 1)))
        assert early.summary.overdue == 0
        assert late.summary.overdue == 1


class TestMaterialInventory:
    def test_values_categories_and_low_stock(self):
        materials = [
            _material("Cement", quantity=10, price=20.0, category="Binders", min_quantity=15),
            _material("Lime", quantity=5, price=10.0, category="Binders"),
            _material("Nails", quantity=1000, price=0.1),
        ]
        bundle = aggregate_material_inventory(materials, _scope())
        assert bundle.summary.total_value == 350.0
        assert bundle.summary.low_stock_count == 1
        assert bundle.summary.categories_count == 2
        assert bundle.summary.average_value == 116.67
        binders = next(c for c in bundle.categories if c.name == "Binders")
        assert binders.material_count == 2
        assert binders.total_value == 250.0
        assert any(c.name == UNCATEGORIZED for c in bundle.categories)

    def test_top_value_is_capped_and_sorted(self):
        materials = [_material(f"M{i:02d}", quantity=1, price=float(i)) for i in range(15)]
        bundle = aggregate_material_inventory(materials, _scope())
        assert len(bundle.top_value) == TOP_VALUE_LIMIT
        assert bundle.top_value[0].name == "M14"


class TestTimeTracking:
    def test_rollups_and_efficiency(self):
        tasks = [
            _task("A", assignee=JAN, estimated_hours=10, actual_hours=8),
            _task("B", assignee=EWA, estimated_hours=10, actual_hours=12, project_name="Hala"),
            _task("C"),
        ]
        bundle = aggregate_time_tracking(tasks, _scope())
        assert bundle.summary.total_tasks == 2
        assert bundle.summary.total_estimated_hours == 20.0
        assert bundle.summary.total_actual_hours == 20.0
        assert bundle.summary.time_efficiency == 100.0
        assert [r.name for r in bundle.by_project] == ["Hala", "Osiedle"]
        assert [r.name for r in bundle.by_worker] == ["Ewa Lis", "Jan Kowalski"]

    def test_zero_estimate_with_actual_hours(self):
        bundle = aggregate_time_tracking([_task(estimated_hours=0, actual_hours=5)], _scope())
        assert bundle.tasks[0].efficiency == 0.0
        assert bundle.tasks[0].variance == 5.0
        assert bundle.summary.time_efficiency == 0.0
