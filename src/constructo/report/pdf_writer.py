"""PdfWriter — renders a DocumentModel into an A4 PDF with ReportLab Platypus.

Tables are LongTables with a repeating header row, so any number of rows
flows onto following pages.
"""

from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import LongTable, Paragraph, SimpleDocTemplate, Spacer, TableStyle

from constructo.report.document import Cell, DocumentModel, SummaryBlock, TableBlock

PAGE_MARGIN = 20 * mm
ACCENT = colors.HexColor("#2563eb")
HEADER_BG = colors.HexColor("#f8fafc")
GRID = colors.HexColor("#dddddd")
EMPTY_TABLE_TEXT = "No records."


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("ReportTitle", parent=base["Title"], fontSize=18, spaceAfter=4),
        "meta": ParagraphStyle("ReportMeta", parent=base["Normal"], alignment=1, textColor=colors.grey),
        "section": ParagraphStyle("ReportSection", parent=base["Heading2"], textColor=ACCENT, spaceBefore=10),
        "cell": ParagraphStyle("ReportCell", parent=base["Normal"], fontSize=8, leading=10),
        "header": ParagraphStyle("ReportHeader", parent=base["Normal"], fontSize=8, leading=10, fontName="Helvetica-Bold"),
        "body": base["Normal"],
    }


def _text(value: Cell) -> str:
    return "" if value is None else escape(str(value))


class PdfWriter:
    """Writes a DocumentModel to an in-memory PDF buffer."""

    def write_to_buffer(self, document: DocumentModel) -> BytesIO:
        styles = _styles()
        buf = BytesIO()
        doc = SimpleDocTemplate(
            buf,
            pagesize=A4,
            rightMargin=PAGE_MARGIN,
            leftMargin=PAGE_MARGIN,
            topMargin=PAGE_MARGIN,
            bottomMargin=PAGE_MARGIN,
            title=document.title,
        )

        story = [
            Paragraph(escape(document.title), styles["title"]),
            Paragraph(f"Generated: {escape(document.generated_at)}", styles["meta"]),
            Spacer(1, 12),
        ]

        for section in document.sections:
            story.append(Paragraph(escape(section.title), styles["section"]))
            if isinstance(section.body, SummaryBlock):
                if section.body.items:
                    story.append(self._summary_table(section.body, styles, doc.width))
            elif section.body.rows:
                story.append(self._data_table(section.body, styles, doc.width))
            else:
                story.append(Paragraph(EMPTY_TABLE_TEXT, styles["body"]))
            story.append(Spacer(1, 8))

        doc.build(story)
        buf.seek(0)
        return buf

    def render(self, document: DocumentModel) -> bytes:
        return self.write_to_buffer(document).getvalue()

    @staticmethod
    def _summary_table(block: SummaryBlock, styles: dict[str, ParagraphStyle], width: float) -> LongTable:
        data = [
            [Paragraph(_text(label), styles["header"]), Paragraph(_text(value), styles["cell"])]
            for label, value in block.items
        ]
        table = LongTable(data, colWidths=[width * 0.4, width * 0.6])
        table.setStyle(TableStyle([
            ("LINEBELOW", (0, 0), (-1, -1), 0.25, GRID),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        return table

    @staticmethod
    def _data_table(block: TableBlock, styles: dict[str, ParagraphStyle], width: float) -> LongTable:
        col_width = width / max(len(block.columns), 1)
        data = [[Paragraph(_text(h), styles["header"]) for h in block.columns]]
        data += [[Paragraph(_text(v), styles["cell"]) for v in row] for row in block.rows]
        table = LongTable(data, colWidths=[col_width] * len(block.columns), repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
            ("GRID", (0, 0), (-1, -1), 0.25, GRID),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        return table
