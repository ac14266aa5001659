"""
Cursor wrapper with SQL logging and named parameter handling.

Implements the subset of Python DB-API 2.0 (PEP-249) the mapper needs:
execute, fetchone, description, rowcount and close.
"""
import logging
import time
from functools import wraps
from typing import Any

from litemap.sql import has_placeholders
from litemap.types import TypeConverter

logger = logging.getLogger(__name__)


def dumpsql(func):
    """Decorator for logging SQL queries and parameters."""
    @wraps(func)
    def wrapper(self, operation: str, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{operation}\nargs: {args}')
        try:
            return func(self, operation, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{operation}\nargs: {args}')
            raise
        finally:
            elapsed = time.time() - start
            self.connwrapper.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class Cursor:
    """Cursor bound to a connection wrapper and its dialect strategy.

    SQL is written with ``@name`` placeholders and parameters are passed as a
    mapping; the strategy rewrites the placeholders for the driver.
    """

    def __init__(self, cursor: Any, connection_wrapper: Any, strategy: Any) -> None:
        self.dbapi_cursor = cursor
        self.connwrapper = connection_wrapper
        self.strategy = strategy

    def __getattr__(self, name: str) -> Any:
        """Delegate members to underlying cursor."""
        return getattr(self.dbapi_cursor, name)

    def __enter__(self) -> 'Cursor':
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    @property
    def description(self) -> list[tuple] | None:
        """Column descriptions for last query."""
        return self.dbapi_cursor.description

    @property
    def rowcount(self) -> int:
        """Number of rows produced/affected by last operation."""
        return self.dbapi_cursor.rowcount

    def close(self) -> None:
        """Close cursor."""
        self.dbapi_cursor.close()

    def fetchone(self) -> Any:
        """Fetch next row."""
        return self.dbapi_cursor.fetchone()

    @dumpsql
    def execute(self, operation: str, params: dict[str, Any] | None = None) -> int:
        """Execute a database operation and return the affected row count."""
        if params and has_placeholders(operation):
            operation = self.strategy.standardize_sql(operation)
            self.dbapi_cursor.execute(operation, TypeConverter.convert_params(params))
        else:
            if params:
                logger.debug('Executed query without placeholders (ignoring params)')
            self.dbapi_cursor.execute(operation)
        return self.dbapi_cursor.rowcount
