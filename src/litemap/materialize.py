"""
Turn result cursors into typed values.

`materialize` reads a DB-API style cursor (``description`` plus
``fetchone``) and yields one value per row:

- scalar targets (primitives, ``str``, ``bytes``) take the first column;
- record targets get a fresh instance per row, populated by matching column
  names to field names exactly.
"""
import logging
from collections.abc import Iterator
from typing import Any, NamedTuple, TypeVar

from litemap.fields import default_value, fields_of, is_scalar_type
from litemap.fields import new_instance
from litemap.types import coerce_value

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Column(NamedTuple):
    """Name and position of a result column."""
    name: str
    ordinal: int


def columns_of(cursor: Any) -> list[Column]:
    """Extract column descriptors from a cursor description.
    """
    if cursor.description is None:
        return []
    return [Column(desc[0], i) for i, desc in enumerate(cursor.description)]


def _rows(cursor: Any) -> Iterator[Any]:
    while True:
        row = cursor.fetchone()
        if row is None:
            return
        yield row


def _scalars(cursor: Any, target: type[T]) -> Iterator[T]:
    default = default_value(target)
    for row in _rows(cursor):
        value = row[0]
        if value is None:
            yield default
        else:
            yield coerce_value(value, target)


def _records(cursor: Any, target: type[T]) -> Iterator[T]:
    by_name = {f.name: f for f in fields_of(target)}
    bound = [(col, by_name[col.name]) for col in columns_of(cursor) if col.name in by_name]
    logger.debug(f'Mapping {len(bound)} columns onto {target.__name__}')

    for row in _rows(cursor):
        values = {}
        for col, field in bound:
            value = row[col.ordinal]
            if value is None:
                continue
            values[field.name] = coerce_value(value, field.type, field.name)
        yield new_instance(target, values)


def materialize(cursor: Any, target: type[T]) -> Iterator[T]:
    """Lazily convert every remaining row of `cursor` into `target` values.

    The cursor is consumed as the result is iterated, so the sequence can only
    be read once. An empty result yields nothing. A value that cannot be
    converted raises TypeConversionError and ends the iteration.

    Args:
        cursor: Cursor positioned before the first row
        target: Scalar type or record type to produce

    Returns
        Iterator over the converted rows
    """
    if is_scalar_type(target):
        return _scalars(cursor, target)
    return _records(cursor, target)
