"""ExcelWriter — renders a DocumentModel into a single-sheet workbook with openpyxl."""

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from constructo.report.document import DocumentModel, SummaryBlock

SHEET_TITLE = "Report"

TITLE_FONT = Font(bold=True, size=14)
SECTION_FONT = Font(bold=True, size=12)
HEADER_FONT = Font(bold=True)


class ExcelWriter:
    """Writes a DocumentModel to an in-memory .xlsx buffer.

    Layout, top to bottom: report title and generation time, then for each
    section a title row followed by either label/value rows or a header row
    plus data rows, with one blank row between sections.
    """

    def write_to_buffer(self, document: DocumentModel) -> BytesIO:
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        ws.cell(row=1, column=1, value=document.title).font = TITLE_FONT
        ws.cell(row=1, column=2, value=document.generated_at)
        row_idx = 3

        for section in document.sections:
            ws.cell(row=row_idx, column=1, value=section.title).font = SECTION_FONT
            row_idx += 1

            if isinstance(section.body, SummaryBlock):
                for label, value in section.body.items:
                    ws.cell(row=row_idx, column=1, value=label)
                    ws.cell(row=row_idx, column=2, value=value)
                    row_idx += 1
            else:
                for col_idx, header in enumerate(section.body.columns, start=1):
                    ws.cell(row=row_idx, column=col_idx, value=header).font = HEADER_FONT
                row_idx += 1
                for row in section.body.rows:
                    for col_idx, value in enumerate(row, start=1):
                        ws.cell(row=row_idx, column=col_idx, value=value)
                    row_idx += 1

            row_idx += 1

        _auto_fit_columns(ws)

        buf = BytesIO()
        wb.save(buf)
        buf.seek(0)
        return buf

    def render(self, document: DocumentModel) -> bytes:
        return self.write_to_buffer(document).getvalue()


def _auto_fit_columns(ws: Worksheet) -> None:
    """Set column widths based on content (approximate)."""
    for col_cells in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col_cells[0].column)
        for cell in col_cells:
            if cell.value is not None:
                cell_len = len(str(cell.value))
                if cell_len > max_len:
                    max_len = cell_len
        # Add padding, cap at 50
        ws.column_dimensions[col_letter].width = min(max_len + 3, 50)
