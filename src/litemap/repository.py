"""
Repository facade: typed CRUD over one connection.

Tables are found from record type names (exact match, then naive plural)
against a snapshot of table names taken once by `Repository.init()`. Every
table is assumed to have an identity column named ``Id``.

    cn = litemap.connect(drivername='sqlite', database='app.db')
    repo = Repository(cn)
    repo.init()
    user = repo.get(User, 1)
    user.Name = 'Ann'
    repo.update(user)

Errors from any operation go to `RepositoryOptions.on_error`, then are
re-raised or, with ``propagate=False``, replaced by an empty result.
"""
import logging
from collections.abc import Callable, Mapping
from functools import wraps
from typing import Any, TypeVar

from litemap.connection import ConnectionWrapper
from litemap.exceptions import NoRowsAffectedError, NotInitializedError
from litemap.materialize import materialize
from litemap.naming import resolve_table_name, table_name_map
from litemap.options import RepositoryOptions
from litemap.statement import bindings_of, build_insert, build_update
from litemap.statement import encode_for_like
from litemap.transaction import Transaction

__all__ = ['Repository', 'guarded']

logger = logging.getLogger(__name__)

T = TypeVar('T')


def _check_rowcount(operation: str, rowcount: int) -> None:
    if rowcount <= 0:
        raise NoRowsAffectedError(operation, rowcount)


def guarded(empty: Any = None) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Apply the repository's error policy to a method.

    On any exception the error is logged and passed to ``on_error``; it is
    then re-raised, or `empty` is returned (called first when it is callable)
    if the repository was built with ``propagate=False``.
    """
    def decorator(f: Callable[..., T]) -> Callable[..., T]:
        @wraps(f)
        def inner(self: 'Repository', *args: Any, **kwargs: Any) -> T:
            try:
                return f(self, *args, **kwargs)
            except Exception as err:
                logger.error(f'{f.__name__} failed: {err}')
                if self.options.on_error is not None:
                    self.options.on_error(err)
                if self.options.propagate:
                    raise
                return empty() if callable(empty) else empty

        return inner

    return decorator


class Repository:
    """CRUD surface over a live connection.

    Args:
        cn: Connection returned by `litemap.connect`
        options: Error policy; re-raise with no handler by default
    """

    encode_for_like = staticmethod(encode_for_like)

    def __init__(self, cn: ConnectionWrapper,
                 options: RepositoryOptions | None = None) -> None:
        if cn is None:
            raise ValueError('Connection cannot be None')
        self.cn = cn
        self.options = options or RepositoryOptions()
        self._table_names: Mapping[str, str] | None = None

    @guarded()
    def init(self) -> None:
        """Load the table name snapshot. Must be called before anything else.

        The snapshot is never refreshed: tables created afterwards are not
        visible to this repository.
        """
        names = self.cn.strategy.get_table_names(self.cn)
        self._table_names = table_name_map(names)
        logger.debug(f'Loaded {len(names)} table names')

    @property
    def table_names(self) -> Mapping[str, str]:
        if self._table_names is None:
            raise NotInitializedError('Repository.init() must be called before use')
        return self._table_names

    def table_name(self, cls: type) -> str:
        """Resolve the table for a record type."""
        return resolve_table_name(cls.__name__, self.table_names)

    def _select(self, cls: type[T], sql: str, params: Any = None) -> list[T]:
        cursor = self.cn.query(sql, bindings_of(params))
        try:
            return list(materialize(cursor, cls))
        finally:
            cursor.close()

    @guarded(empty=-1)
    def execute(self, sql: str, params: Any = None) -> int:
        """Execute a statement and return the affected row count.

        Args:
            sql: SQL with ``@name`` placeholders
            params: Mapping or record instance supplying the placeholders

        Returns
            Affected row count, or -1 when the error was swallowed
        """
        return self.cn.execute(sql, bindings_of(params))

    @guarded(empty=list)
    def query(self, cls: type[T], sql: str, params: Any = None) -> list[T]:
        """Run a query and convert every row to `cls`.

        Args:
            cls: Scalar type (first column) or record type (columns by name)
            sql: SQL with ``@name`` placeholders
            params: Mapping or record instance supplying the placeholders

        Returns
            A list, empty when no rows matched
        """
        return self._select(cls, sql, params)

    @guarded()
    def get(self, cls: type[T], id: Any) -> T | None:
        """Fetch the record whose ``Id`` equals `id`, or None.
        """
        table = self.table_name(cls)
        rows = self._select(cls, f'SELECT * FROM {table} WHERE Id = @id', {'id': id})
        return rows[0] if rows else None

    @guarded()
    def get_by(self, cls: type[T], column: str, value: Any) -> T | None:
        """Fetch the first record whose `column` equals `value`, or None.
        """
        rows = self._all_by(cls, column, value)
        return rows[0] if rows else None

    @guarded(empty=list)
    def all(self, cls: type[T]) -> list[T]:
        """Fetch every record of the table matching `cls`.
        """
        table = self.table_name(cls)
        return self._select(cls, f'SELECT * FROM {table}')

    @guarded(empty=list)
    def all_by(self, cls: type[T], column: str, value: Any) -> list[T]:
        """Fetch every record whose `column` equals `value`.
        """
        return self._all_by(cls, column, value)

    def _all_by(self, cls: type[T], column: str, value: Any) -> list[T]:
        table = self.table_name(cls)
        return self._select(cls, f'SELECT * FROM {table} WHERE {column} = @param',
                            {'param': value})

    @guarded()
    def insert(self, record: Any) -> None:
        """Insert `record` into the table inferred from its type.

        Runs in its own transaction, or joins the one already open on the
        connection. Raises NoRowsAffectedError if the database reports no
        inserted row.
        """
        table = self.table_name(type(record))
        statement = build_insert(table, record, keyword=self.cn.strategy.insert_keyword)
        self._write('INSERT', statement.sql, statement.params)

    @guarded()
    def update(self, record: Any) -> None:
        """Update the row whose ``Id`` matches `record` with every other field.

        Runs in its own transaction, or joins the one already open on the
        connection. Raises NoRowsAffectedError if no row has that ``Id``.
        """
        table = self.table_name(type(record))
        statement = build_update(table, record)
        self._write('UPDATE', statement.sql, statement.params)

    def _write(self, operation: str, sql: str, params: dict[str, Any]) -> None:
        if self.cn.in_transaction:
            _check_rowcount(operation, self.cn.execute(sql, params))
            return
        with Transaction(self.cn) as tx:
            _check_rowcount(operation, tx.execute(sql, params))
