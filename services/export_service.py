"""
Excel Export Service - Serialize records back to .xlsx workbooks.

Exports and templates share the schema's header order, and every export
header is one of its field's import aliases, so an exported workbook imports
back without loss.
"""

import io
import logging
from datetime import date
from typing import Any, Iterable, List

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from backend.models.record import RecordBase
from backend.models.schema import PARTICIPANT_SCHEMA, FieldSpec, FieldType, RecordSchema

logger = logging.getLogger(__name__)

IDENTIFIER_HEADER = '#'
HEADER_FILL = PatternFill(fill_type='solid', start_color='FF1074D6', end_color='FF1074D6')
HEADER_FONT = Font(bold=True, color='FFFFFFFF')
BAND_FILL = PatternFill(fill_type='solid', start_color='FFF0F4FF', end_color='FFF0F4FF')
DATE_FORMAT = 'yyyy-mm-dd'
MAX_COLUMN_WIDTH = 60


def cell_value(value: Any, spec: FieldSpec) -> Any:
    """
    Convert a record field value into the value written to the sheet.

    Control characters that worksheets cannot hold are dropped from text.
    """
    if spec.field_type == FieldType.BOOLEAN:
        return 'Y' if value else 'N'
    if spec.field_type == FieldType.DATE:
        return value if isinstance(value, date) else None
    if spec.field_type == FieldType.INTEGER:
        return int(value or 0)
    if value is None:
        return ''
    return ILLEGAL_CHARACTERS_RE.sub('', str(value))


class ExcelExportService:
    """Build export and template workbooks for one record schema."""

    def __init__(self, schema: RecordSchema = PARTICIPANT_SCHEMA):
        self.schema = schema

    def export(self, records: Iterable[RecordBase]) -> bytes:
        """
        Write records to a single-sheet workbook.

        The first column holds the store identifier, followed by every schema
        field in order. Rows follow the iteration order of ``records``.
        """
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = self.schema.sheet_name

        headers = [IDENTIFIER_HEADER] + self.schema.display_names
        self._write_header(worksheet, headers)

        count = 0
        for row_idx, record in enumerate(records, start=2):
            worksheet.cell(row=row_idx, column=1, value=record.row_number)
            self._write_fields(worksheet, row_idx, 2, record.model_dump())
            if row_idx % 2 == 0:
                self._shade_row(worksheet, row_idx, len(headers))
            count += 1

        self._finish_sheet(worksheet, len(headers))
        logger.info(f"Exported {count} records to sheet '{worksheet.title}'")
        return self._to_bytes(workbook)

    def generate_template(self) -> bytes:
        """
        Build an import template.

        The first sheet holds the headers and the schema's example rows; usage
        notes go on a second sheet so they are never read back as data.
        """
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = 'Template'

        headers = self.schema.display_names
        self._write_header(worksheet, headers)
        for row_idx, example in enumerate(self.schema.template_examples, start=2):
            self._write_fields(worksheet, row_idx, 1, example)
        self._finish_sheet(worksheet, len(headers))

        if self.schema.template_notes:
            notes = workbook.create_sheet('Notes')
            notes.cell(row=1, column=1, value='Notes:').font = Font(bold=True)
            for row_idx, note in enumerate(self.schema.template_notes, start=2):
                notes.cell(row=row_idx, column=1, value=note)
            notes.column_dimensions['A'].width = min(
                max(len(note) for note in self.schema.template_notes) + 2, 120
            )

        logger.info(f"Generated '{self.schema.name}' template with "
                    f"{len(self.schema.template_examples)} example rows")
        return self._to_bytes(workbook)

    def _write_header(self, worksheet: Worksheet, headers: List[str]):
        for col_idx, header in enumerate(headers, start=1):
            cell = worksheet.cell(row=1, column=col_idx, value=header)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL

    def _write_fields(self, worksheet: Worksheet, row_idx: int, first_col: int, values: dict):
        for offset, spec in enumerate(self.schema.fields):
            cell = worksheet.cell(
                row=row_idx,
                column=first_col + offset,
                value=cell_value(values.get(spec.name), spec)
            )
            if spec.field_type == FieldType.DATE:
                cell.number_format = DATE_FORMAT
            elif spec.field_type == FieldType.TEXT:
                # Text starting with '=' stays literal text, never a formula
                cell.data_type = 's'

    def _shade_row(self, worksheet: Worksheet, row_idx: int, width: int):
        for col_idx in range(1, width + 1):
            worksheet.cell(row=row_idx, column=col_idx).fill = BAND_FILL

    def _finish_sheet(self, worksheet: Worksheet, width: int):
        """Freeze the header row and size columns to their content."""
        worksheet.freeze_panes = 'A2'
        for col_idx in range(1, width + 1):
            longest = 0
            for (value,) in worksheet.iter_rows(min_col=col_idx, max_col=col_idx, values_only=True):
                if value is None:
                    continue
                text = value.isoformat() if isinstance(value, date) else str(value)
                longest = max(longest, len(text))
            worksheet.column_dimensions[get_column_letter(col_idx)].width = min(longest + 2, MAX_COLUMN_WIDTH)

    @staticmethod
    def _to_bytes(workbook: Workbook) -> bytes:
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()
