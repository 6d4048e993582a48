"""Renderer dispatch by output format."""

import logging

from constructo.domain.enums import ReportFormat
from constructo.exceptions import RenderFailure
from constructo.report.document import DocumentModel
from constructo.report.excel_writer import ExcelWriter
from constructo.report.pdf_writer import PdfWriter

logger = logging.getLogger(__name__)

CONTENT_TYPES: dict[ReportFormat, str] = {
    ReportFormat.PDF: "application/pdf",
    ReportFormat.EXCEL: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

FILE_EXTENSIONS: dict[ReportFormat, str] = {
    ReportFormat.PDF: "pdf",
    ReportFormat.EXCEL: "xlsx",
}

RENDERERS = {
    ReportFormat.PDF: PdfWriter,
    ReportFormat.EXCEL: ExcelWriter,
}


def render(document: DocumentModel, file_format: ReportFormat) -> bytes:
    """Render a document to bytes. Backend errors surface as RenderFailure, never partial bytes."""
    writer = RENDERERS[file_format]()
    try:
        data = writer.render(document)
    except Exception as e:
        logger.exception("%s rendering failed for %s", file_format.value, document.report_type)
        raise RenderFailure(f"{file_format.value} rendering failed: {e}") from e
    if not data:
        raise RenderFailure(f"{file_format.value} renderer produced no output")
    return data
