"""
Pytest configuration and fixtures for record import tests.
"""

import io
from typing import Any, List, Optional, Sequence

import openpyxl
import pytest

from backend.models.schema import PARTICIPANT_SCHEMA, PLACEMENT_SCHEMA
from services.excel_import_service import ExcelImportService
from services.export_service import ExcelExportService
from services.record_store import RecordStore


def build_workbook(headers: Optional[Sequence[Any]], rows: Sequence[Sequence[Any]] = (),
                   extra_sheets: Sequence[str] = ()) -> bytes:
    """
    Build an .xlsx workbook in memory.

    None cells are left empty, so a row of Nones is a blank row.
    """
    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = 'Data'

    all_rows: List[Sequence[Any]] = ([headers] if headers is not None else []) + list(rows)
    for row_idx, values in enumerate(all_rows, start=1):
        for col_idx, value in enumerate(values, start=1):
            if value is not None:
                worksheet.cell(row=row_idx, column=col_idx, value=value)

    for title in extra_sheets:
        workbook.create_sheet(title).cell(row=1, column=1, value='Name')

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook():
    """Factory fixture returning workbook bytes for a header row and data rows."""
    return build_workbook


@pytest.fixture
def schema():
    return PARTICIPANT_SCHEMA


@pytest.fixture
def placement_schema():
    return PLACEMENT_SCHEMA


@pytest.fixture
def store():
    """Fresh, empty record store."""
    return RecordStore()


@pytest.fixture
def importer(store, schema):
    return ExcelImportService(store, schema)


@pytest.fixture
def exporter(schema):
    return ExcelExportService(schema)


@pytest.fixture
def participant_rows():
    """Three valid participant rows with headers in canonical order."""
    headers = ['Name', 'Surname', 'Identifier', 'Email Address', 'Host Company', 'Person Disability']
    rows = [
        ['Jane', 'Smith', '1234567890123', 'jane@example.com', 'KPMG', 'N'],
        ['John', 'Doe', '9876543210987', 'john@example.com', 'Old Mutual', 'N'],
        ['Thabo', 'Nkosi', '1111111111111', 'thabo@example.com', 'CallLab', 'Y'],
    ]
    return headers, rows
