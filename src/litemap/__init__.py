"""
Minimal object-relational mapping over PostgreSQL and SQLite.

Rows are read into dataclasses or annotated classes by matching column
names to field names, and INSERT/UPDATE statements are generated from a
record's fields. Tables are inferred from type names.

    cn = litemap.connect(drivername='sqlite', database='app.db')
    repo = litemap.Repository(cn)
    repo.init()
    users = repo.all(User)
"""
__version__ = '0.1.0'

from typing import Any

from litemap.connection import ConnectionWrapper, connect
from litemap.exceptions import DatabaseError, DbConnectionError
from litemap.exceptions import IntegrityError, NoMatchingTableError
from litemap.exceptions import NoRowsAffectedError, NotInitializedError
from litemap.exceptions import OperationalError, ProgrammingError
from litemap.exceptions import TypeConversionError, UniqueViolation
from litemap.fields import Field, FieldKind, fields_of
from litemap.materialize import materialize
from litemap.naming import pluralize, resolve_table_name
from litemap.options import DatabaseOptions, RepositoryOptions
from litemap.repository import Repository
from litemap.statement import Statement, build_insert, build_update
from litemap.statement import encode_for_like
from litemap.transaction import Transaction as transaction
from litemap.types import coerce_value, register_parser


def repository(options: DatabaseOptions | dict[str, Any] | None = None,
               on_error=None, propagate: bool = True, **kw: Any) -> Repository:
    """Connect and return an initialised Repository.
    """
    repo = Repository(connect(options, **kw),
                      RepositoryOptions(on_error=on_error, propagate=propagate))
    repo.init()
    return repo


__all__ = [
    'connect',
    'repository',
    'ConnectionWrapper',
    'Repository',
    'transaction',
    'DatabaseOptions',
    'RepositoryOptions',
    'Field',
    'FieldKind',
    'fields_of',
    'materialize',
    'coerce_value',
    'register_parser',
    'Statement',
    'build_insert',
    'build_update',
    'encode_for_like',
    'pluralize',
    'resolve_table_name',
    'DatabaseError',
    'NoMatchingTableError',
    'TypeConversionError',
    'NoRowsAffectedError',
    'NotInitializedError',
    'DbConnectionError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
    'UniqueViolation',
]
