"""
Value conversion in both directions.

- coerce_value: Convert a column value to a field's declared type
- TypeConverter: Normalize Python values before they are bound as parameters

Column values are coerced through a closed table of textual parsers keyed by
target type. A value whose runtime type already is the target is assigned as
is; anything else is rendered with ``str()`` and parsed. New target types are
added with `register_parser`.
"""
import datetime
import logging
import math
import uuid
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import Any

import dateutil.parser
import numpy as np
import pandas as pd

from litemap.exceptions import TypeConversionError
from litemap.fields import unwrap_optional

logger = logging.getLogger(__name__)

TRUE_STRINGS = {'true', '1'}
FALSE_STRINGS = {'false', '0'}

NUMPY_FLOAT_TYPES = (np.floating,)
NUMPY_INT_TYPES = (np.integer, np.unsignedinteger)


def parse_bool(text: str) -> bool:
    """Parse a boolean from its textual form.

    >>> parse_bool('True'), parse_bool('0')
    (True, False)
    """
    lowered = text.strip().lower()
    if lowered in TRUE_STRINGS:
        return True
    if lowered in FALSE_STRINGS:
        return False
    raise ValueError(f'Not a boolean: {text!r}')


def _parse_datetime(text: str) -> datetime.datetime:
    try:
        return dateutil.parser.isoparse(text)
    except ValueError:
        return dateutil.parser.parse(text)


def parse_datetime(text: str) -> datetime.datetime:
    """Parse a datetime, ISO 8601 first and free-form second.

    >>> parse_datetime('2023-05-15 14:30:45')
    datetime.datetime(2023, 5, 15, 14, 30, 45)
    """
    return _parse_datetime(text)


def parse_date(text: str) -> datetime.date:
    """Parse a date, dropping any time component.

    >>> parse_date('2023-05-15')
    datetime.date(2023, 5, 15)
    """
    return _parse_datetime(text).date()


def parse_time(text: str) -> datetime.time:
    """Parse a time of day.

    >>> parse_time('14:30:45')
    datetime.time(14, 30, 45)
    """
    return datetime.time.fromisoformat(text)


def parse_decimal(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f'Not a decimal: {text!r}') from e


PARSERS: dict[type, Callable[[str], Any]] = {
    bool: parse_bool,
    int: int,
    float: float,
    Decimal: parse_decimal,
    datetime.datetime: parse_datetime,
    datetime.date: parse_date,
    datetime.time: parse_time,
    uuid.UUID: uuid.UUID,
    str: str,
    }


def register_parser(target: type, parser: Callable[[str], Any]) -> None:
    """Add or replace the textual parser used to coerce values to `target`.
    """
    PARSERS[target] = parser


def _coerce_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f'Not bytes-like: {type(value).__name__}')


def coerce_value(value: Any, target: Any, field: str | None = None) -> Any:
    """Convert a non-null column value to a declared type.

    Raises TypeConversionError when the value cannot be parsed.

    >>> coerce_value(5, int)
    5
    >>> coerce_value('42', int | None)
    42
    >>> coerce_value(1, bool)
    True
    """
    base, _ = unwrap_optional(target)

    if base is Any or base is object or type(value) is base:
        return value

    try:
        if base is bytes:
            return _coerce_bytes(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f'Binary value cannot be parsed as {base!r}')
        parser = PARSERS.get(base)
        if parser is None:
            if isinstance(base, type) and isinstance(value, base):
                return value
            raise TypeError(f'No parser registered for {base!r}')
        return parser(str(value))
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f'Coercion of {value!r} to {base!r} failed: {e}')
        raise TypeConversionError(value, base, field) from e


def _convert_numpy_value(val: Any) -> float | int | datetime.datetime | None:
    """Convert NumPy value to Python type."""
    if isinstance(val, np.floating) and np.isnan(val):
        return None

    if isinstance(val, np.datetime64) and np.isnat(val):
        return None

    if isinstance(val, (*NUMPY_FLOAT_TYPES, *NUMPY_INT_TYPES, np.bool_)):
        return val.item()

    if isinstance(val, np.datetime64):
        return pd.Timestamp(val).to_pydatetime()

    return val


class TypeConverter:
    """Normalize parameter values to what the drivers accept.

    Every null flavour (NaN, NumPy NaN/NaT, pandas NA/NaT) becomes None, the
    DB-API null marker, and NumPy scalars become Python scalars.
    """

    @staticmethod
    def convert_value(value: Any) -> Any:
        """Convert a single value to a database-compatible format."""
        if value is None:
            return None

        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None

        if value is pd.NaT or value is pd.NA:
            return None

        if isinstance(value, (*NUMPY_FLOAT_TYPES, *NUMPY_INT_TYPES, np.bool_, np.datetime64)):
            return _convert_numpy_value(value)

        if isinstance(value, pd.Timestamp):
            return value.to_pydatetime()

        return value

    @staticmethod
    def convert_params(params: Any) -> Any:
        """Convert a collection of parameters for database operations."""
        if params is None:
            return None

        if isinstance(params, dict):
            return {k: TypeConverter.convert_value(v) for k, v in params.items()}

        if isinstance(params, list | tuple):
            return type(params)(TypeConverter.convert_value(v) for v in params)

        return TypeConverter.convert_value(params)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
