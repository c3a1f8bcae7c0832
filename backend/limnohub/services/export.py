"""CSV and XLSX file generation from flattened records.

The generator only formats data it is given; it never touches the database.
Records must already be flat (see ``format_list_output``).
"""

import io
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal

import structlog
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from limnohub.exceptions import ExportGenerationError

logger = structlog.get_logger()

ExportFormat = Literal["csv", "xlsx"]
ExportDelimiter = Literal[",", ";"]
ExportEncoding = Literal["utf-8", "iso-8859-1"]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "Data"
EMPTY_MESSAGE = "No data found to export."
MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 50
HEADER_FONT = Font(bold=True)


@dataclass(frozen=True)
class ExportOptions:
    """Options for one export. Delimiter and encoding only apply to CSV."""

    format: ExportFormat = "csv"
    include_headers: bool = True
    delimiter: ExportDelimiter = ";"
    encoding: ExportEncoding = "utf-8"


def generate_export_file(records: Sequence[Mapping[str, Any]], options: ExportOptions) -> bytes:
    """Render ``records`` as a CSV or XLSX file.

    Raises:
        ExportGenerationError: On any formatting failure. Details are logged
            here and deliberately not carried by the raised error.
    """
    try:
        if options.format == "xlsx":
            return _generate_xlsx(records, options.include_headers)
        return _generate_csv(records, options)
    except Exception as exc:
        logger.exception(
            "export_generation_failed",
            error=str(exc),
            error_type=type(exc).__name__,
            format=options.format,
            record_count=len(records),
        )
        raise ExportGenerationError() from None


# =========================================================================
# CSV
# =========================================================================


def render_value(value: Any) -> str:
    """Text form of a cell value; integral floats lose their ``.0``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def escape_csv_value(value: Any, delimiter: str) -> str:
    """Quote a field that contains the delimiter, a quote or a newline."""
    text = render_value(value)
    if delimiter in text or '"' in text or "\n" in text:
        text = '"' + text.replace('"', '""') + '"'
    return text


def encode_csv(content: str, encoding: ExportEncoding) -> bytes:
    """Encode CSV text.

    Latin-1 cannot represent every character; those outside its range are
    written as ``?``.
    """
    if encoding == "iso-8859-1":
        return content.encode("iso-8859-1", errors="replace")
    return content.encode("utf-8")


def _generate_csv(records: Sequence[Mapping[str, Any]], options: ExportOptions) -> bytes:
    if not records:
        return encode_csv(EMPTY_MESSAGE if options.include_headers else "", options.encoding)

    keys = list(records[0].keys())
    lines: list[str] = []

    if options.include_headers:
        lines.append(options.delimiter.join(keys))

    for record in records:
        lines.append(
            options.delimiter.join(
                escape_csv_value(record.get(key), options.delimiter) for key in keys
            )
        )

    return encode_csv("\n".join(lines), options.encoding)


# =========================================================================
# XLSX
# =========================================================================


def auto_column_width(
    ws: Worksheet,
    min_width: int = MIN_COLUMN_WIDTH,
    max_width: int = MAX_COLUMN_WIDTH,
) -> None:
    """Fit each column to its longest rendered value, within bounds."""
    for column in ws.columns:
        max_length = 0
        for cell in column:
            if cell.value is not None:
                max_length = max(max_length, len(render_value(cell.value)))
        width = min(max(max_length + 2, min_width), max_width)
        ws.column_dimensions[get_column_letter(column[0].column)].width = width


def _generate_xlsx(records: Sequence[Mapping[str, Any]], include_headers: bool) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    if not records:
        if include_headers:
            ws.append([EMPTY_MESSAGE])
        return _workbook_bytes(wb)

    keys = list(records[0].keys())

    if include_headers:
        ws.append(keys)
        for cell in ws[1]:
            cell.font = HEADER_FONT

    for record in records:
        ws.append([record.get(key) for key in keys])

    auto_column_width(ws)
    return _workbook_bytes(wb)


def _workbook_bytes(wb: Workbook) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# =========================================================================
# Response metadata
# =========================================================================


def export_media_type(options: ExportOptions) -> str:
    """Content-Type for an export response."""
    if options.format == "xlsx":
        return XLSX_MEDIA_TYPE
    return f"text/csv; charset={options.encoding}"


def export_filename(entity: str, export_format: ExportFormat, today: date) -> str:
    """Download file name, e.g. ``export_abiotico_coluna_2024-05-01.csv``."""
    return f"export_{entity}_{today.isoformat()}.{export_format}"
