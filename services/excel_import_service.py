"""
Excel Import Service - Framework-agnostic record import.

This module reads the first worksheet of an uploaded workbook, resolves its
header row against the active record schema, parses every data row and
atomically replaces the record store's contents with the rows that passed.
Progress callbacks let the API or CLI report what the import is doing.
"""

import io
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Sequence, Set, Tuple

import openpyxl

from backend.models.record import RecordBase
from backend.models.schema import PARTICIPANT_SCHEMA, RecordSchema
from services.cell_coercion import to_int
from services.column_resolver import missing_required, resolve_columns
from services.exceptions import WorkbookReadError
from services.record_store import RecordStore
from services.row_parser import RowOutcome, RowStatus, parse_row

logger = logging.getLogger(__name__)

STATUS_COMPLETED = 'completed'
STATUS_REJECTED = 'rejected'
STATUS_EMPTY = 'empty'


@dataclass
class RowError:
    """A data row that could not be turned into a record."""

    row_index: int
    message: str


@dataclass
class ImportResult:
    """
    Summary of one import run.

    ``skipped_count`` is blank rows plus failed rows. The store is only
    replaced when ``status`` is completed.
    """

    status: str
    imported_count: int = 0
    skipped_count: int = 0
    blank_count: int = 0
    failed_count: int = 0
    missing_required_columns: List[str] = field(default_factory=list)
    row_errors: List[RowError] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)
    message: str = ''

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class IdentifierAllocator:
    """
    Hands out record identifiers in row order.

    With ``prefer_file_serial`` a positive, not yet used serial number from the
    file is kept; every other row takes the next unused counter value.
    """

    def __init__(self, prefer_file_serial: bool = False):
        self.prefer_file_serial = prefer_file_serial
        self._used: Set[int] = set()
        self._next = 1

    def allocate(self, serial: Any = None) -> int:
        if self.prefer_file_serial and serial is not None:
            candidate = to_int(serial)
            if candidate > 0 and candidate not in self._used:
                self._used.add(candidate)
                return candidate

        while self._next in self._used:
            self._next += 1
        identifier = self._next
        self._used.add(identifier)
        self._next += 1
        return identifier


class ExcelImportService:
    """
    Framework-agnostic Excel import service.

    Parsing happens without touching the store; only the final swap goes
    through ``RecordStore.replace_all``.
    """

    def __init__(
        self,
        store: RecordStore,
        schema: RecordSchema = PARTICIPANT_SCHEMA,
        progress_callback: Optional[Callable[[str, float, str], None]] = None,
        prefer_file_serial: bool = False
    ):
        """
        Initialize Excel import service.

        Args:
            store: Record store that receives the imported records
            schema: Active record schema (fields, aliases, required columns)
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
            prefer_file_serial: Keep positive serial numbers from the file as
                               identifiers (schemas with a serial column only)
        """
        self.store = store
        self.schema = schema
        self.progress_callback = progress_callback or (lambda *args: None)
        self.prefer_file_serial = prefer_file_serial

    def _emit_progress(self, stage: str, percent: float, message: str):
        """Emit progress update via callback."""
        self.progress_callback(stage, percent, message)
        logger.info(f"Progress: {stage} ({percent:.1f}%) - {message}")

    def read_rows(self, stream: BinaryIO, source: str = '<stream>') -> List[Sequence[Any]]:
        """
        Read every row of the first worksheet as a list of cell values.

        Raises:
            WorkbookReadError: If the stream is not a readable workbook
        """
        try:
            workbook = openpyxl.load_workbook(stream, data_only=True)
        except Exception as e:
            logger.error(f"Fatal error opening workbook {source}: {e}", exc_info=True)
            raise WorkbookReadError(str(e), source) from e

        try:
            if not workbook.worksheets:
                raise ValueError("workbook has no worksheets")
            worksheet = workbook.worksheets[0]
            logger.info(f"Reading sheet '{worksheet.title}' "
                        f"({worksheet.max_row} rows x {worksheet.max_column} columns)")
            return [
                list(row)
                for row in worksheet.iter_rows(
                    min_row=1, max_row=worksheet.max_row,
                    min_col=1, max_col=worksheet.max_column,
                    values_only=True
                )
            ]
        except Exception as e:
            logger.error(f"Fatal error reading workbook {source}: {e}", exc_info=True)
            raise WorkbookReadError(str(e), source) from e
        finally:
            workbook.close()

    def parse_rows(self, rows: List[Sequence[Any]]) -> Tuple[ImportResult, List[RecordBase]]:
        """
        Validate the header row and parse data rows into records.

        The store is not touched.

        Returns:
            (result, records) where records carry their assigned identifiers.
            Records is empty unless result.status is completed.
        """
        records: List[RecordBase] = []

        if len(rows) < 2:
            logger.warning("Workbook has no data rows")
            return ImportResult(
                status=STATUS_EMPTY,
                message='File appears empty or has only a header row.'
            ), records

        header = rows[0]
        mapping = resolve_columns(header, self.schema)
        headers = [str(value).strip() for value in header if value is not None and str(value).strip()]
        logger.info(f"Excel headers detected: {', '.join(headers)}")
        logger.info("Column mapping: " + ', '.join(
            f"{name} <- '{header_text}'" for name, header_text in mapping.matched_headers.items()
        ))
        if mapping.unmapped_headers:
            logger.info(f"Ignoring unmapped columns: {', '.join(mapping.unmapped_headers)}")

        missing = missing_required(mapping, self.schema)
        if missing:
            logger.warning(f"Missing required columns: {', '.join(missing)}")
            return ImportResult(
                status=STATUS_REJECTED,
                missing_required_columns=missing,
                headers=headers,
                message=f"Missing required columns: {', '.join(missing)}"
            ), records

        result = ImportResult(status=STATUS_COMPLETED, headers=headers)
        allocator = IdentifierAllocator(self.prefer_file_serial and bool(self.schema.serial_field))
        total = len(rows) - 1

        for offset, values in enumerate(rows[1:]):
            row_index = offset + 2
            outcome: RowOutcome = parse_row(values, row_index, mapping, self.schema)

            if outcome.status == RowStatus.BLANK:
                result.blank_count += 1
            elif outcome.status == RowStatus.FAILED:
                result.failed_count += 1
                result.row_errors.append(RowError(row_index, outcome.error or 'unknown error'))
            else:
                identifier = allocator.allocate(outcome.serial)
                records.append(outcome.record.model_copy(update={'row_number': identifier}))

            if offset and offset % 500 == 0:
                self._emit_progress('parsing', 10 + 80 * offset / total, f"Parsed {offset}/{total} rows")

        result.imported_count = len(records)
        result.skipped_count = result.blank_count + result.failed_count
        result.message = (f"Imported {result.imported_count} records, "
                          f"skipped {result.skipped_count} blank/error rows.")
        return result, records

    def import_stream(self, stream: BinaryIO, source: str = '<stream>') -> ImportResult:
        """
        Main import workflow.

        Args:
            stream: Readable binary stream holding an .xlsx workbook
            source: Name used in log messages and errors

        Returns:
            ImportResult describing what happened

        Raises:
            WorkbookReadError: If the workbook cannot be opened or read; the
                               store is left untouched
        """
        logger.info(f"Starting import of {source} using schema '{self.schema.name}'")

        self._emit_progress('reading', 5, 'Reading workbook...')
        rows = self.read_rows(stream, source)

        self._emit_progress('parsing', 10, f"Parsing {max(len(rows) - 1, 0)} data rows...")
        result, records = self.parse_rows(rows)

        if result.status != STATUS_COMPLETED:
            self._emit_progress('complete', 100, result.message)
            return result

        self._emit_progress('storing', 95, f"Replacing store with {result.imported_count} records...")
        self.store.replace_all(records)

        for error in result.row_errors:
            logger.debug(f"Skipped row {error.row_index}: {error.message}")
        logger.info(result.message)

        self._emit_progress('complete', 100, 'Import complete')
        return result

    def import_bytes(self, data: bytes, source: str = '<upload>') -> ImportResult:
        """Import a workbook held in memory."""
        return self.import_stream(io.BytesIO(data), source)

    def import_file(self, file_path: str) -> ImportResult:
        """Import a workbook from disk."""
        path = Path(file_path)
        try:
            with path.open('rb') as handle:
                data = handle.read()
        except OSError as e:
            logger.error(f"Could not open {file_path}: {e}")
            raise WorkbookReadError(str(e), path.name) from e
        return self.import_bytes(data, path.name)
