"""
Import router - Handle spreadsheet uploads.

This module provides the upload endpoint that replaces the record store's
contents with the records of an uploaded workbook.
"""

import logging

from fastapi import APIRouter, UploadFile, File, Depends, HTTPException, status

from api.dependencies import (
    get_current_user, get_import_service, verify_file_extension, verify_file_size
)
from api.schemas.import_schema import ImportResultResponse
from services.excel_import_service import ExcelImportService, STATUS_REJECTED
from services.exceptions import WorkbookReadError

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/import', tags=['import'])


@router.post('/upload', response_model=ImportResultResponse)
def upload_excel_file(
    file: UploadFile = File(..., description="Workbook to import (.xlsx)"),
    importer: ExcelImportService = Depends(get_import_service),
    current_user: str = Depends(get_current_user)
):
    """
    Upload a workbook and replace the record store with its rows.

    Only the first worksheet is read. Row 1 holds the headers, matched by
    name against the active schema's aliases; column order does not matter.

    **Workflow:**
    1. Validate file name and size
    2. Parse rows (the store stays readable meanwhile)
    3. Swap the parsed records into the store in one step

    **Returns:**
    - 200 with import counts when the import completed (or the file was empty)
    - 422 when required columns are missing; existing records are kept
    - 400 when the file is not a readable workbook; existing records are kept
    """
    logger.info(f"Upload request from {current_user}: {file.filename}")

    verify_file_extension(file.filename)

    data = file.file.read()
    verify_file_size(len(data))
    logger.info(f"Received {file.filename} ({len(data) / 1024:.1f} KB)")

    try:
        result = importer.import_bytes(data, file.filename or '<upload>')
    except WorkbookReadError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if result.status == STATUS_REJECTED:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                'message': result.message,
                'missing_required_columns': result.missing_required_columns
            }
        )

    return ImportResultResponse.from_result(result)
