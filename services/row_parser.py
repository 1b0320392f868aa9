"""
Row Parser - Turn one worksheet row into a record draft or a row outcome.

Parsing never raises: a row that cannot be built into a record becomes a
``failed`` outcome and the caller moves on to the next row.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence

from pydantic import ValidationError

from backend.models.record import RecordBase
from backend.models.schema import FieldType, RecordSchema
from services.cell_coercion import coerce, to_text
from services.column_resolver import ColumnMapping

logger = logging.getLogger(__name__)


class RowStatus(str, Enum):
    PARSED = 'parsed'
    BLANK = 'blank'
    FAILED = 'failed'


@dataclass
class RowOutcome:
    """
    Result of parsing one data row.

    Attributes:
        status: parsed, blank or failed
        row_index: 1-based worksheet row number
        record: Record draft (row_number not yet assigned) when parsed
        serial: Raw value of the schema's serial column, if any
        error: Failure reason when failed
    """

    status: RowStatus
    row_index: int
    record: Optional[RecordBase] = None
    serial: Any = None
    error: Optional[str] = None

    @property
    def is_parsed(self) -> bool:
        return self.status == RowStatus.PARSED


def _cell(values: Sequence[Any], position: Optional[int]) -> Any:
    if position is None or position >= len(values):
        return None
    return values[position]


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = '.'.join(str(part) for part in error.get('loc', ()))
        parts.append(f"{location}: {error.get('msg')}" if location else error.get('msg', ''))
    return '; '.join(parts)


def is_blank_row(values: Sequence[Any], mapping: ColumnMapping, schema: RecordSchema) -> bool:
    """
    Check the schema's identity fields for content.

    A row is blank when every identity field is empty after trimming. Schemas
    without identity fields fall back to checking every mapped column.
    """
    fields = schema.identity or tuple(mapping.resolved_fields)
    return all(not to_text(_cell(values, mapping.position_of(name))) for name in fields)


def parse_row(
    values: Sequence[Any],
    row_index: int,
    mapping: ColumnMapping,
    schema: RecordSchema
) -> RowOutcome:
    """
    Parse one data row.

    Args:
        values: Cell values of the row in sheet order
        row_index: 1-based worksheet row number (for reporting)
        mapping: Resolved header mapping
        schema: Active record schema

    Returns:
        RowOutcome with status parsed, blank or failed
    """
    if is_blank_row(values, mapping, schema):
        return RowOutcome(RowStatus.BLANK, row_index)

    serial = None
    if schema.serial_field:
        serial = _cell(values, mapping.position_of(schema.serial_field))

    try:
        data: Dict[str, Any] = {}
        for spec in schema.fields:
            raw = _cell(values, mapping.position_of(spec.name))
            if raw is None and spec.field_type == FieldType.DATE:
                continue
            data[spec.name] = coerce(raw, spec.field_type)

        record = schema.record_model(**data)
    except ValidationError as e:
        message = _format_validation_error(e)
        logger.error(f"Failed to parse row {row_index}: {message}")
        return RowOutcome(RowStatus.FAILED, row_index, serial=serial, error=message)
    except (ValueError, TypeError) as e:
        logger.error(f"Failed to parse row {row_index}: {e}")
        return RowOutcome(RowStatus.FAILED, row_index, serial=serial, error=str(e))

    return RowOutcome(RowStatus.PARSED, row_index, record=record, serial=serial)
