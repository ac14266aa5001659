"""
Mapping and database exception classes.
"""
import sqlite3

import psycopg


class DatabaseError(Exception):
    """Base class for all litemap errors.
    """


class NoMatchingTableError(DatabaseError):
    """A type name matched no table, either exactly or pluralized.
    """

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f'Cannot match the type name {type_name} to any table')


class TypeConversionError(DatabaseError):
    """A column value could not be converted to a field's declared type.
    """

    def __init__(self, value, target, field: str | None = None) -> None:
        self.value = value
        self.target = target
        self.field = field
        target_name = getattr(target, '__name__', str(target))
        where = f' for field {field!r}' if field else ''
        super().__init__(f'Cannot convert {value!r} to {target_name}{where}')


class NoRowsAffectedError(DatabaseError):
    """An INSERT or UPDATE executed but reported no affected rows.
    """

    def __init__(self, operation: str, rowcount: int) -> None:
        self.operation = operation
        self.rowcount = rowcount
        super().__init__(f'{operation} affected no rows (rowcount={rowcount})')


class NotInitializedError(DatabaseError):
    """The repository was used before its table names were loaded.
    """


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    )

IntegrityError = (
    psycopg.IntegrityError,
    sqlite3.IntegrityError,
    )

ProgrammingError = (
    psycopg.ProgrammingError,
    psycopg.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    )

OperationalError = (
    psycopg.OperationalError,
    sqlite3.OperationalError,
    )

UniqueViolation = (
    psycopg.errors.UniqueViolation,
    sqlite3.IntegrityError,
    )
