"""
Database connection handling with SQLAlchemy.

This module provides:
1. The `connect()` function for creating new database connections
2. The `ConnectionWrapper` class, the driver surface the mapper works against
3. Engine creation and management through a thread-safe registry

SQLAlchemy manages connections only; statements run on the DBAPI connection
through litemap cursors. Engines use `NullPool`, so every wrapper owns one
physical connection.
"""
import atexit
import dataclasses
import logging
import threading
from collections.abc import Callable
from typing import Any, Self

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from litemap.cursor import Cursor
from litemap.options import DatabaseOptions
from litemap.strategy import DatabaseStrategy, get_strategy
from litemap.utils import get_dialect_name, get_raw_connection

__all__ = [
    'ConnectionWrapper',
    'connect',
    'configure_connection',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def get_engine_for_options(options: DatabaseOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.
    """
    key = str(options)

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.drivername}')
            return _engine_registry[key]

        strategy = get_strategy(options.drivername)
        url = strategy.build_connection_url(options)

        engine_kwargs: dict[str, Any] = {'echo': False, 'poolclass': NullPool}
        engine_kwargs.update(strategy.get_engine_kwargs(options))
        engine_kwargs.update(kwargs)

        engine = engine_factory(url, **engine_kwargs)

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.drivername}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in list(_engine_registry.values()):
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


def configure_connection(sa_connection: sa.engine.Connection) -> None:
    """Apply the dialect strategy's settings to a freshly opened connection.
    """
    strategy = get_strategy(sa_connection)
    strategy.configure_connection(get_raw_connection(sa_connection))


class ConnectionWrapper:
    """Wraps a SQLAlchemy connection object to track calls and execution time

    This class provides the narrow driver surface the repository depends on:
    1. Reopens the connection when it has been closed
    2. Executes non-queries and reports the affected row count
    3. Executes queries and hands back an open cursor
    4. Tracks query execution counts and timing
    5. Supports context manager protocol for explicit resource management
    """

    def __init__(self, sa_connection: sa.engine.Connection | None = None,
                 options: DatabaseOptions | None = None) -> None:
        """Initialize a connection wrapper

        Args:
            sa_connection: SQLAlchemy connection object to wrap
            options: The DatabaseOptions used to create this connection
        """
        self.sa_connection = sa_connection
        self.engine = sa_connection.engine if sa_connection else None
        self.options = options
        self.dbapi_connection = get_raw_connection(sa_connection) if sa_connection else None
        self._dialect = get_dialect_name(sa_connection) if sa_connection else None
        self.calls = 0
        self.time = 0
        self.in_transaction = False

    def __enter__(self) -> Self:
        """Support for context manager protocol
        """
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        """Close the connection when exiting the context manager
        """
        try:
            self.close()
            logger.debug('Closed connection via context manager')
        except Exception as e:
            logger.debug(f'Error closing connection in __exit__: {e}')

    @property
    def dialect(self) -> str:
        """Return the dialect name ('postgresql' or 'sqlite')."""
        return self._dialect

    @property
    def strategy(self) -> DatabaseStrategy:
        """Strategy for this connection's dialect."""
        return get_strategy(self._dialect)

    @property
    def closed(self) -> bool:
        return self.sa_connection is None or self.sa_connection.closed

    def open(self) -> None:
        """Reopen the connection if it has been closed.
        """
        if not self.closed:
            return
        self.sa_connection = self.engine.connect()
        self.dbapi_connection = get_raw_connection(self.sa_connection)
        configure_connection(self.sa_connection)
        logger.debug(f'Reopened {self.dialect} connection')

    def cursor(self) -> Cursor:
        """Get a wrapped cursor for this connection, reconnecting if closed.
        """
        self.open()
        return Cursor(self.dbapi_connection.cursor(), self, self.strategy)

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Execute a statement and return the affected row count.
        """
        cursor = self.cursor()
        try:
            return cursor.execute(sql, params)
        finally:
            cursor.close()

    def query(self, sql: str, params: dict[str, Any] | None = None) -> Cursor:
        """Execute a query and return its cursor, positioned before the first row.

        The caller owns the cursor and must close it.
        """
        cursor = self.cursor()
        try:
            cursor.execute(sql, params)
        except Exception:
            cursor.close()
            raise
        return cursor

    def commit(self) -> None:
        """Commit the DBAPI connection."""
        self.dbapi_connection.commit()

    def rollback(self) -> None:
        """Roll back the DBAPI connection."""
        self.dbapi_connection.rollback()

    def close(self) -> None:
        """Close the SQLAlchemy connection
        """
        if not self.closed:
            self.sa_connection.close()
            logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s (avg: {self.time/max(1,self.calls):.3f}s per query)')


def connect(options: DatabaseOptions | dict[str, Any] | None = None,
            **kw: Any) -> ConnectionWrapper:
    """Connect to a database using SQLAlchemy for connection management

    Args:
        options: Can be:
                - DatabaseOptions object
                - Dictionary of options
                - None, with options specified as keyword arguments
        **kw: Additional keyword arguments to override options

    Returns
        ConnectionWrapper object for connecting to the database
    """
    if options is None:
        options = DatabaseOptions(**kw)
    elif isinstance(options, dict):
        options = DatabaseOptions(**(options | kw))
    elif kw:
        options = dataclasses.replace(options, **kw)

    engine = get_engine_for_options(options)

    sa_connection = engine.connect()
    configure_connection(sa_connection)

    return ConnectionWrapper(sa_connection, options)
