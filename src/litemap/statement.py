"""
INSERT and UPDATE generation from record fields.

Placeholders are written ``@<name>`` and bound by name; the dialect strategy
rewrites them for the driver. Table and column names are interpolated as
given: they come from type and field names, never from user input.
"""
import logging
from collections.abc import Mapping
from typing import Any, NamedTuple

from litemap.fields import fields_of
from litemap.types import TypeConverter

logger = logging.getLogger(__name__)

ID_FIELD = 'Id'

_LIKE_ESCAPES = str.maketrans({'%': '[%]', '[': '[[]', ']': '[]]'})


class Statement(NamedTuple):
    """SQL text with its ordered named bindings."""
    sql: str
    params: dict[str, Any]


def bindings_of(obj: Any) -> dict[str, Any]:
    """Named parameter values from a mapping or a record instance.

    Values are normalized so nulls bind as None.
    """
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return TypeConverter.convert_params(dict(obj))
    return {f.name: TypeConverter.convert_value(f.get(obj)) for f in fields_of(obj)}


def build_insert(table: str, record: Any, keyword: str = 'INSERT') -> Statement:
    """Build an INSERT for every field of `record`.

    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class User:
    ...     Id: int
    ...     Name: str
    ...     Age: int
    >>> build_insert('Users', User(1, 'Ann', 30)).sql
    'INSERT Users (Id,Name,Age) VALUES (@Id,@Name,@Age)'
    """
    params = bindings_of(record)
    cols = ','.join(params)
    placeholders = ','.join(f'@{name}' for name in params)
    sql = f'{keyword} {table} ({cols}) VALUES ({placeholders})'
    return Statement(sql, params)


def build_update(table: str, record: Any) -> Statement:
    """Build an UPDATE of every field except ``Id``, keyed on ``Id``.

    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class User:
    ...     Id: int
    ...     Name: str
    ...     Age: int
    >>> build_update('Users', User(1, 'Ann', 30)).sql
    'UPDATE Users SET Name= @Name,Age= @Age WHERE Id = @Id'
    """
    params = bindings_of(record)
    assignments = ','.join(f'{name}= @{name}' for name in params if name != ID_FIELD)
    sql = f'UPDATE {table} SET {assignments} WHERE {ID_FIELD} = @{ID_FIELD}'
    return Statement(sql, params)


def encode_for_like(term: str) -> str:
    """Wrap a term for a substring LIKE match, escaping ``%``, ``[`` and ``]``.

    Uses bracket escaping, as understood by SQL Server style LIKE.

    >>> encode_for_like('50%_off')
    '%50[%]_off%'
    >>> encode_for_like('[a]')
    '%[[]a[]]%'
    """
    return '%' + term.translate(_LIKE_ESCAPES) + '%'


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
