"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API request validation
and response serialization.
"""

from api.schemas.common import ErrorResponse, SuccessResponse, HealthCheckResponse
from api.schemas.import_schema import ImportResultResponse, RowErrorResponse
from api.schemas.record_schema import (
    RecordListResponse, RecordCountResponse, SchemaFieldResponse, SchemaResponse,
    StoreChangeMessage
)

__all__ = [
    # Common
    'ErrorResponse',
    'SuccessResponse',
    'HealthCheckResponse',

    # Import
    'ImportResultResponse',
    'RowErrorResponse',

    # Records
    'RecordListResponse',
    'RecordCountResponse',
    'SchemaFieldResponse',
    'SchemaResponse',
    'StoreChangeMessage',
]
