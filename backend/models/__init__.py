"""Record models and schema definitions."""

from backend.models.record import ParticipantRecord, PlacementRecord, RecordBase
from backend.models.schema import (
    FieldSpec, FieldType, RecordSchema, PARTICIPANT_SCHEMA, PLACEMENT_SCHEMA, SCHEMAS, get_schema
)

__all__ = [
    'RecordBase', 'ParticipantRecord', 'PlacementRecord',
    'FieldSpec', 'FieldType', 'RecordSchema',
    'PARTICIPANT_SCHEMA', 'PLACEMENT_SCHEMA', 'SCHEMAS', 'get_schema',
]
