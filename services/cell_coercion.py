"""
Cell coercion - Convert raw worksheet cell values into typed field values.

Every coercion is total: it never raises and always returns a definite value
(or None for an absent date).
"""

import logging
import math
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as dateparser
from openpyxl.utils.datetime import from_excel

from backend.models.record import TRUE_VALUES
from backend.models.schema import FieldType

logger = logging.getLogger(__name__)

# Last day openpyxl can represent (9999-12-31) in the 1900 date system
MAX_DAY_SERIAL = 2958465

# Integers with more digits than this coerce to 0
MAX_INT_DIGITS = 18

# Two defaults differing in every part; a date that parses identically under
# both was fully specified by the text
_PARSE_DEFAULTS = (datetime(1904, 1, 1), datetime(1999, 12, 28))


def to_text(value: Any) -> str:
    """Stringify and trim a cell value; None becomes an empty string."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value).strip()
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=' ')
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def to_int(value: Any) -> int:
    """
    Parse an integer, falling back to a truncated decimal.

    Anything unparseable (or absent) yields 0.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return _bounded(value)
    if isinstance(value, float):
        return _bounded(int(value)) if math.isfinite(value) else 0

    text = to_text(value)
    if not text:
        return 0
    try:
        return _bounded(int(text))
    except ValueError:
        pass
    try:
        number = Decimal(text.replace(',', ''))
    except InvalidOperation:
        return 0
    if not number.is_finite() or number.adjusted() >= MAX_INT_DIGITS:
        return 0
    return int(number)


def _bounded(number: int) -> int:
    return number if abs(number) < 10 ** MAX_INT_DIGITS else 0


def to_bool(value: Any) -> bool:
    """True for Y, YES, TRUE or 1 (any case); False for everything else."""
    return to_text(value).upper() in TRUE_VALUES


def _from_day_serial(serial: float) -> Optional[date]:
    if not math.isfinite(serial) or serial < 1 or serial > MAX_DAY_SERIAL:
        return None
    try:
        converted = from_excel(serial)
    except (ValueError, OverflowError, TypeError):
        return None
    if isinstance(converted, datetime):
        return converted.date()
    if isinstance(converted, date):
        return converted
    return None


def to_date(value: Any) -> Optional[date]:
    """
    Convert a cell value to a calendar date.

    Accepts a native date/datetime, a spreadsheet day-serial number (also as
    numeric text) or date text naming year, month and day. Partial date text
    such as "May" is rejected rather than completed from today's date.
    Returns None when nothing applies.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return _from_day_serial(float(value))

    text = to_text(value)
    if not text:
        return None
    try:
        serial = float(text)
    except ValueError:
        return _parse_date_text(text)
    return _from_day_serial(serial)


def _parse_date_text(text: str) -> Optional[date]:
    try:
        first, second = (dateparser.parse(text, default=default) for default in _PARSE_DEFAULTS)
    except (ValueError, OverflowError, TypeError):
        logger.debug(f"'{text}' is not a date string")
        return None
    if first.date() != second.date():
        logger.debug(f"'{text}' is an incomplete date")
        return None
    return first.date()


COERCIONS = {
    FieldType.TEXT: to_text,
    FieldType.INTEGER: to_int,
    FieldType.BOOLEAN: to_bool,
    FieldType.DATE: to_date,
}


def coerce(value: Any, field_type: FieldType) -> Any:
    """Apply the coercion registered for ``field_type``."""
    return COERCIONS[field_type](value)
