"""
Record-related Pydantic schemas.

Record payloads themselves are plain dictionaries validated against the
active schema's record model at request time, since the record shape is
chosen by configuration.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class RecordListResponse(BaseModel):
    """Snapshot of the record store."""

    total: int = Field(..., description="Number of records")
    items: List[Dict[str, Any]] = Field(..., description="Records in store order")

    class Config:
        json_schema_extra = {
            "example": {
                "total": 1,
                "items": [{"row_number": 1, "name": "John", "surname": "Doe",
                           "email_address": "john@example.com"}]
            }
        }


class RecordCountResponse(BaseModel):
    """Record count."""

    count: int = Field(..., description="Number of records in the store")


class SchemaFieldResponse(BaseModel):
    """One canonical field of the active schema."""

    name: str = Field(..., description="Canonical field name")
    display_name: str = Field(..., description="Header written on export")
    field_type: str = Field(..., description="text, integer, boolean or date")
    aliases: List[str] = Field(..., description="Accepted import headers, in precedence order")
    required: bool = Field(False, description="Import is rejected without this column")


class SchemaResponse(BaseModel):
    """Active record schema."""

    name: str
    fields: List[SchemaFieldResponse]
    identity_fields: List[str]
    serial_field: Optional[str] = None


class StoreChangeMessage(BaseModel):
    """Message pushed over the change-notification WebSocket."""

    event: str = Field('store_changed', description="Message type")
    kind: str = Field(..., description="replaced, added, updated, deleted or cleared")
    record_count: int = Field(..., description="Records in the store after the change")
    row_number: Optional[int] = Field(None, description="Affected record, for single-record changes")
