"""Tests for DocumentModel building and its snapshot form."""

import uuid
from datetime import datetime

import pytest

from constructo.domain.enums import ReportType
from constructo.domain.models.bundles import (
    FinancialReportBundle,
    MaterialInventoryBundle,
    ProjectSummaryBundle,
    ProjectSummaryFigures,
    TaskCompletionBundle,
    TaskLine,
    TeamProductivityBundle,
    TimeTrackingBundle,
)
from constructo.report.document import (
    CellFormatter,
    DocumentModel,
    REPORT_TITLES,
    SummaryBlock,
    TableBlock,
    build_document,
)

GENERATED_AT = datetime(2025, 3, 4, 9, 30)
COMPANY_ID = uuid.uuid4()


def _project_bundle(task_count: int = 2) -> ProjectSummaryBundle:
    return ProjectSummaryBundle(
        project_id=uuid.uuid4(),
        project_name="Osiedle Zielone",
        project_status="ACTIVE",
        budget=125000.0,
        tasks=[
            TaskLine(title=f"Task {i}", status="DONE", priority="HIGH", project="Osiedle Zielone",
                     assignee="Jan Kowalski" if i % 2 else None, due_date=datetime(2025, 1, 31))
            for i in range(task_count)
        ],
        summary=ProjectSummaryFigures(
            total_tasks=task_count, completed_tasks=task_count, completion_rate=60.0,
            materials_cost=1234.5, budget_usage=0.99,
        ),
    )


EMPTY_BUNDLES = [
    ProjectSummaryBundle(project_id=uuid.uuid4(), project_name="Empty", project_status="ACTIVE"),
    FinancialReportBundle(company_id=COMPANY_ID, labor_hourly_rate=50.0),
    TeamProductivityBundle(company_id=COMPANY_ID),
    TaskCompletionBundle(company_id=COMPANY_ID),
    MaterialInventoryBundle(company_id=COMPANY_ID),
    TimeTrackingBundle(company_id=COMPANY_ID),
]


class TestCellFormatter:
    def test_money_has_currency_and_two_decimals(self):
        assert CellFormatter("PLN").money(1234.5) == "1,234.50 PLN"

    def test_percent(self):
        assert CellFormatter.percent(60.0) == "60.00%"

    def test_date(self):
        assert CellFormatter.date(datetime(2025, 1, 31)) == "31.01.2025"

    def test_missing_date(self):
        assert CellFormatter.date(None) == "-"


class TestBuildDocument:
    def test_project_summary_sections(self):
        doc = build_document(_project_bundle(), GENERATED_AT)
        assert doc.title == REPORT_TITLES[ReportType.PROJECT_SUMMARY]
        assert doc.report_type == "PROJECT_SUMMARY"
        assert doc.generated_at == "04.03.2025 09:30"
        assert [s.title for s in doc.sections] == ["Project", "Summary", "Tasks"]

    def test_cells_are_display_ready(self):
        doc = build_document(_project_bundle(), GENERATED_AT, currency_symbol="EUR")
        summary = dict(doc.sections[1].body.items)
        assert summary["Completion Rate"] == "60.00%"
        assert summary["Materials Cost"] == "1,234.50 EUR"
        tasks = doc.sections[2].body
        assert tasks.columns == ["Title", "Status", "Priority", "Assigned To", "Due Date"]
        assert tasks.rows[0][3] == "Unassigned"
        assert tasks.rows[0][4] == "31.01.2025"

    def test_same_inputs_same_document(self):
        bundle = _project_bundle(5)
        assert build_document(bundle, GENERATED_AT) == build_document(bundle, GENERATED_AT)

    @pytest.mark.parametrize("bundle", EMPTY_BUNDLES, ids=lambda b: b.report_type.value)
    def test_empty_bundles_build(self, bundle):
        doc = build_document(bundle, GENERATED_AT)
        assert doc.sections
        for table in doc.tables():
            assert table.columns
            assert table.rows == [] or all(len(r) == len(table.columns) for r in table.rows)


class TestSnapshot:
    def test_round_trip(self):
        doc = build_document(_project_bundle(3), GENERATED_AT)
        assert DocumentModel.from_dict(doc.to_dict()) == doc

    def test_snapshot_is_plain_json(self):
        data = build_document(_project_bundle(), GENERATED_AT).to_dict()
        assert data["sections"][0]["body"]["kind"] == "summary"
        assert data["sections"][2]["body"]["kind"] == "table"
        assert isinstance(data["sections"][2]["body"]["rows"][0], list)

    def test_from_dict_body_kinds(self):
        doc = DocumentModel.from_dict({
            "title": "T",
            "report_type": "TASK_COMPLETION",
            "generated_at": "01.01.2025 00:00",
            "sections": [
                {"title": "S", "body": {"kind": "summary", "items": [["A", 1]]}},
                {"title": "T", "body": {"kind": "table", "columns": ["X"], "rows": [["y"]]}},
            ],
        })
        assert isinstance(doc.sections[0].body, SummaryBlock)
        assert doc.sections[0].body.items == [("A", 1)]
        assert isinstance(doc.sections[1].body, TableBlock)
