"""
Export router - Download the record store or an import template as .xlsx.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from api.dependencies import get_export_service, get_store
from services.export_service import ExcelExportService
from services.record_store import RecordStore

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

# Create router
router = APIRouter(prefix='/export', tags=['export'])


def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={'Content-Disposition': f'attachment; filename="{filename}"'}
    )


@router.get('/records')
def export_records(
    store: RecordStore = Depends(get_store),
    exporter: ExcelExportService = Depends(get_export_service)
):
    """
    Download every record as a workbook.

    **Example:**
    ```bash
    curl -o records.xlsx http://localhost:8000/api/export/records
    ```
    """
    content = exporter.export(store.get_all())
    filename = f"{exporter.schema.name}_export_{datetime.now():%Y%m%d_%H%M%S}.xlsx"
    return _xlsx_response(content, filename)


@router.get('/template')
def download_template(exporter: ExcelExportService = Depends(get_export_service)):
    """Download a blank import template with example rows and usage notes."""
    return _xlsx_response(exporter.generate_template(), f"{exporter.schema.name}_template.xlsx")
