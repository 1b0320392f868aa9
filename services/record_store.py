"""
Record Store - Thread-safe in-memory record collection.

The store is the single authoritative collection of records for the process.
It is built once at startup and handed to whatever needs it (API, CLI).
Every mutation notifies subscribers once, after the change is visible.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional

from backend.models.record import RecordBase

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    REPLACED = 'replaced'
    ADDED = 'added'
    UPDATED = 'updated'
    DELETED = 'deleted'
    CLEARED = 'cleared'


@dataclass(frozen=True)
class StoreChange:
    """Notification payload delivered to subscribers."""

    kind: ChangeKind
    record_count: int
    row_number: Optional[int] = None


Subscriber = Callable[[StoreChange], None]


class RecordStore:
    """
    In-memory record collection with identifier assignment.

    A single lock guards the record list and the identifier counter, so every
    operation is atomic with respect to every other. Records are copied on the
    way in and on the way out; callers never hold references into the store.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: List[RecordBase] = []
        self._next_id = 1
        self._subscribers: List[Subscriber] = []
        self._subscribers_lock = threading.Lock()

    # Read

    def get_all(self) -> List[RecordBase]:
        """Return copies of all records in store order."""
        with self._lock:
            records = list(self._records)
        return [record.model_copy(deep=True) for record in records]

    def get(self, row_number: int) -> Optional[RecordBase]:
        """Return a copy of the record with this identifier, or None."""
        with self._lock:
            for record in self._records:
                if record.row_number == row_number:
                    return record.model_copy(deep=True)
        return None

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    @property
    def next_id(self) -> int:
        with self._lock:
            return self._next_id

    # Write

    def replace_all(self, records: Iterable[RecordBase]) -> int:
        """
        Swap the whole collection for ``records``.

        Identifiers must already be assigned: positive and unique. The counter
        is recomputed as max(identifier) + 1, or 1 for an empty collection.

        Returns:
            Number of records now in the store

        Raises:
            ValueError: If any identifier is non-positive or duplicated
        """
        new_records = [record.model_copy(deep=True) for record in records]

        seen = set()
        for record in new_records:
            if record.row_number <= 0:
                raise ValueError(f"Record identifier must be positive, got {record.row_number}")
            if record.row_number in seen:
                raise ValueError(f"Duplicate record identifier {record.row_number}")
            seen.add(record.row_number)

        with self._lock:
            self._records = new_records
            self._next_id = max(seen) + 1 if seen else 1
            count = len(self._records)
            next_id = self._next_id

        logger.info(f"Record store replaced: {count} records, next id {next_id}")
        self._notify(StoreChange(ChangeKind.REPLACED, count))
        return count

    def add(self, record: RecordBase) -> RecordBase:
        """
        Append a record under the next identifier.

        Any identifier on the incoming record is ignored.

        Returns:
            Copy of the stored record, with its assigned identifier
        """
        with self._lock:
            stored = record.model_copy(update={'row_number': self._next_id}, deep=True)
            self._next_id += 1
            self._records.append(stored)
            count = len(self._records)
            result = stored.model_copy(deep=True)

        logger.debug(f"Added record {result.row_number}")
        self._notify(StoreChange(ChangeKind.ADDED, count, result.row_number))
        return result

    def update(self, record: RecordBase) -> bool:
        """
        Replace the record with the same identifier.

        Returns:
            True if a record was replaced, False if no record has that identifier
        """
        replacement = record.model_copy(deep=True)
        with self._lock:
            for index, existing in enumerate(self._records):
                if existing.row_number == replacement.row_number:
                    self._records[index] = replacement
                    count = len(self._records)
                    break
            else:
                logger.debug(f"Update skipped: record {replacement.row_number} not found")
                return False

        self._notify(StoreChange(ChangeKind.UPDATED, count, replacement.row_number))
        return True

    def delete(self, row_number: int) -> bool:
        """
        Remove every record with this identifier.

        Returns:
            True if anything was removed
        """
        with self._lock:
            before = len(self._records)
            self._records = [r for r in self._records if r.row_number != row_number]
            count = len(self._records)
            removed = count < before

        if not removed:
            logger.debug(f"Delete skipped: record {row_number} not found")
            return False

        self._notify(StoreChange(ChangeKind.DELETED, count, row_number))
        return True

    def clear(self):
        """Remove all records and reset the identifier counter to 1."""
        with self._lock:
            self._records = []
            self._next_id = 1

        logger.info("Record store cleared")
        self._notify(StoreChange(ChangeKind.CLEARED, 0))

    # Notifications

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a change callback.

        Callbacks run synchronously on the thread that made the change, after
        the change is committed.

        Returns:
            Function that removes the subscription
        """
        with self._subscribers_lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._subscribers_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, change: StoreChange):
        with self._subscribers_lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(change)
            except Exception as e:
                logger.error(f"Store subscriber {callback!r} failed on {change.kind.value}: {e}",
                             exc_info=True)
