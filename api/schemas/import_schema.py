"""
Import-related Pydantic schemas.

This module contains schemas for spreadsheet upload responses.
"""

from typing import List
from pydantic import BaseModel, Field

from services.excel_import_service import ImportResult


class RowErrorResponse(BaseModel):
    """A data row skipped because it could not be parsed."""

    row_index: int = Field(..., description="1-based worksheet row number")
    message: str = Field(..., description="Why the row was rejected")


class ImportResultResponse(BaseModel):
    """Detailed import results."""

    status: str = Field(..., description="completed, rejected or empty")
    imported_count: int = Field(0, description="Records now in the store from this file")
    skipped_count: int = Field(0, description="Blank rows plus rows that failed to parse")
    blank_count: int = Field(0, description="Rows skipped because their identity fields were blank")
    failed_count: int = Field(0, description="Rows skipped because they failed to parse")
    missing_required_columns: List[str] = Field(
        default_factory=list,
        description="Required fields with no matching header (rejected imports only)"
    )
    row_errors: List[RowErrorResponse] = Field(default_factory=list, description="Per-row failures")
    headers: List[str] = Field(default_factory=list, description="Header cells found in the file")
    message: str = Field('', description="Human-readable summary")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "completed",
                "imported_count": 240,
                "skipped_count": 3,
                "blank_count": 2,
                "failed_count": 1,
                "missing_required_columns": [],
                "row_errors": [{"row_index": 17, "message": "email_address: Value error, 'n/a' is not a valid e-mail address"}],
                "headers": ["Name", "Surname", "Email"],
                "message": "Imported 240 records, skipped 3 blank/error rows."
            }
        }

    @classmethod
    def from_result(cls, result: ImportResult) -> 'ImportResultResponse':
        return cls(**result.to_dict())
