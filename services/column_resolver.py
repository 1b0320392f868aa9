"""
Column Resolver - Map a header row to canonical record fields.

Headers are matched case-insensitively and exactly against each field's alias
list. Column order in the sheet does not matter.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from backend.models.schema import RecordSchema

logger = logging.getLogger(__name__)


@dataclass
class ColumnMapping:
    """
    Result of resolving one header row.

    Attributes:
        positions: Canonical field name -> zero-based column index
        matched_headers: Canonical field name -> header text that matched
        unmapped_headers: Non-blank headers that no field claimed, in sheet order
    """

    positions: Dict[str, int] = field(default_factory=dict)
    matched_headers: Dict[str, str] = field(default_factory=dict)
    unmapped_headers: List[str] = field(default_factory=list)

    def __contains__(self, field_name: str) -> bool:
        return field_name in self.positions

    def position_of(self, field_name: str) -> Optional[int]:
        return self.positions.get(field_name)

    @property
    def resolved_fields(self) -> List[str]:
        return list(self.positions)


def _header_text(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def index_headers(headers: Sequence[Any]) -> Dict[str, int]:
    """
    Build a case-folded header -> column index lookup.

    Blank headers are skipped and the first occurrence of a repeated header wins.
    """
    index: Dict[str, int] = {}
    for position, value in enumerate(headers):
        text = _header_text(value)
        if not text:
            continue
        key = text.casefold()
        if key in index:
            logger.debug(f"Ignoring duplicate header '{text}' at column {position + 1}")
            continue
        index[key] = position
    return index


def resolve_columns(headers: Sequence[Any], schema: RecordSchema) -> ColumnMapping:
    """
    Resolve header cells to canonical field positions.

    For each field, the first alias (in alias-list order) present anywhere in
    the header row wins. Fields with no alias present are left unresolved.

    Args:
        headers: Header-row cell values in sheet order
        schema: Active record schema providing the alias table

    Returns:
        ColumnMapping with the resolved positions
    """
    index = index_headers(headers)
    mapping = ColumnMapping()

    for spec in schema.fields:
        for alias in spec.aliases:
            position = index.get(alias.casefold())
            if position is not None:
                mapping.positions[spec.name] = position
                mapping.matched_headers[spec.name] = _header_text(headers[position])
                break

    claimed = set(mapping.positions.values())
    mapping.unmapped_headers = [
        _header_text(headers[position])
        for position in sorted(index.values())
        if position not in claimed
    ]
    return mapping


def missing_required(mapping: ColumnMapping, schema: RecordSchema) -> List[str]:
    """Return required fields with no resolved column, in schema order."""
    return [name for name in schema.required if name not in mapping]
