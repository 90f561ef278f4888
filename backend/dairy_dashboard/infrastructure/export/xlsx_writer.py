"""openpyxl spreadsheet writer — implements the SpreadsheetWriter interface."""

import logging
from decimal import Decimal
from io import BytesIO
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font

from dairy_dashboard.application.interfaces.spreadsheet_writer import SpreadsheetWriter

logger = logging.getLogger(__name__)

# Column width bounds, in characters
_MIN_WIDTH = 8
_MAX_WIDTH = 50


class OpenpyxlSpreadsheetWriter(SpreadsheetWriter):
    """Writes one sheet with a bold header row and auto-sized columns."""

    def write(self, sheet_title: str, headers: list[str], rows: list[list[Any]]) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = sheet_title or "Sheet1"

        sheet.append(headers)
        for cell in sheet[1]:
            cell.font = Font(bold=True)
        for row in rows:
            sheet.append([_normalize_value(value) for value in row])

        for index, header in enumerate(headers, start=1):
            longest = max(
                [len(str(header))] + [len(str(row[index - 1])) for row in rows if len(row) >= index]
            )
            letter = sheet.cell(row=1, column=index).column_letter
            sheet.column_dimensions[letter].width = min(max(longest + 2, _MIN_WIDTH), _MAX_WIDTH)

        buffer = BytesIO()
        workbook.save(buffer)
        logger.debug("Wrote sheet '%s' with %d rows", sheet.title, len(rows))
        return buffer.getvalue()


def _normalize_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (int, float, bool, str)):
        return value
    return str(value)
