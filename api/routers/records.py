"""
Records router - CRUD operations on the in-memory record store.

Bodies are validated against the active schema's record model. Handlers
are plain functions so FastAPI runs them on its thread pool.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError

from api.dependencies import get_current_user, get_schema, get_store
from api.schemas.common import SuccessResponse
from api.schemas.record_schema import (
    RecordCountResponse, RecordListResponse, SchemaFieldResponse, SchemaResponse
)
from backend.models.record import RecordBase
from backend.models.schema import RecordSchema
from services.record_store import RecordStore

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=['records'])


def _build_record(payload: Dict[str, Any], schema: RecordSchema, row_number: int = 0) -> RecordBase:
    """Validate a request body into the active record model."""
    try:
        return schema.record_model.model_validate({**payload, 'row_number': row_number})
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False)
        )


def _not_found(row_number: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Record {row_number} not found"
    )


@router.get('/records', response_model=RecordListResponse)
def list_records(store: RecordStore = Depends(get_store)):
    """
    List all records in store order.

    **Example:**
    ```bash
    curl http://localhost:8000/api/records
    ```
    """
    records = store.get_all()
    return RecordListResponse(
        total=len(records),
        items=[record.model_dump(mode='json') for record in records]
    )


@router.get('/records/count', response_model=RecordCountResponse)
def count_records(store: RecordStore = Depends(get_store)):
    """Number of records in the store."""
    return RecordCountResponse(count=store.count())


@router.get('/records/{row_number}')
def get_record(row_number: int, store: RecordStore = Depends(get_store)):
    """Get one record by identifier."""
    record = store.get(row_number)
    if record is None:
        raise _not_found(row_number)
    return record.model_dump(mode='json')


@router.post('/records', status_code=status.HTTP_201_CREATED)
def add_record(
    payload: Dict[str, Any] = Body(..., description="Record fields; any row_number is ignored"),
    store: RecordStore = Depends(get_store),
    schema: RecordSchema = Depends(get_schema),
    current_user: str = Depends(get_current_user)
):
    """
    Add a record. The store assigns its identifier.

    **Example:**
    ```bash
    curl -X POST http://localhost:8000/api/records \\
         -H 'Content-Type: application/json' \\
         -d '{"name": "Jane", "surname": "Smith"}'
    ```
    """
    stored = store.add(_build_record(payload, schema))
    logger.info(f"Record {stored.row_number} added by {current_user}")
    return stored.model_dump(mode='json')


@router.put('/records/{row_number}')
def update_record(
    row_number: int,
    payload: Dict[str, Any] = Body(..., description="Complete replacement record"),
    store: RecordStore = Depends(get_store),
    schema: RecordSchema = Depends(get_schema),
    current_user: str = Depends(get_current_user)
):
    """Replace a record wholesale. Fields left out take their defaults."""
    record = _build_record(payload, schema, row_number)
    if not store.update(record):
        raise _not_found(row_number)
    logger.info(f"Record {row_number} updated by {current_user}")
    return record.model_dump(mode='json')


@router.delete('/records/{row_number}', response_model=SuccessResponse)
def delete_record(
    row_number: int,
    store: RecordStore = Depends(get_store),
    current_user: str = Depends(get_current_user)
):
    """Delete one record by identifier."""
    if not store.delete(row_number):
        raise _not_found(row_number)
    logger.info(f"Record {row_number} deleted by {current_user}")
    return SuccessResponse(message=f"Record {row_number} deleted", data={'row_number': row_number})


@router.delete('/records', response_model=SuccessResponse)
def clear_records(
    store: RecordStore = Depends(get_store),
    current_user: str = Depends(get_current_user)
):
    """Remove every record and reset identifiers to start at 1."""
    removed = store.count()
    store.clear()
    logger.info(f"Record store cleared by {current_user}")
    return SuccessResponse(message="All records cleared", data={'removed': removed})


@router.get('/schema', response_model=SchemaResponse)
def get_active_schema(schema: RecordSchema = Depends(get_schema)):
    """Describe the active schema: fields, header aliases and required columns."""
    return SchemaResponse(
        name=schema.name,
        fields=[
            SchemaFieldResponse(
                name=spec.name,
                display_name=spec.display_name,
                field_type=spec.field_type.value,
                aliases=list(spec.aliases),
                required=spec.name in schema.required
            )
            for spec in schema.fields
        ],
        identity_fields=list(schema.identity),
        serial_field=schema.serial_field
    )
