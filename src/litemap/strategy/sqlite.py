"""
SQLite-specific strategy implementation.

- Tables are listed from ``main.sqlite_master``
- Connections run with ``PRAGMA synchronous = FULL`` so every commit is
  durable, and with ``isolation_level = None`` (auto-commit) outside
  transactions
- ``date``/``datetime`` declared columns are converted with dateutil
- ``Decimal`` values are stored as text
"""
import datetime
import logging
import sqlite3
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import dateutil.parser

from litemap.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from litemap.options import DatabaseOptions

logger = logging.getLogger(__name__)


def adapt_date_iso(val: datetime.date) -> str:
    """Convert date to ISO 8601 format string.

    >>> adapt_date_iso(datetime.date(2023, 5, 15))
    '2023-05-15'
    """
    return val.isoformat()


def adapt_datetime_iso(val: datetime.datetime) -> str:
    """Convert datetime to ISO 8601 format string.

    >>> adapt_datetime_iso(datetime.datetime(2023, 5, 15, 14, 30, 45))
    '2023-05-15T14:30:45'
    """
    return val.isoformat()


def convert_date(val: bytes) -> datetime.date:
    """Convert ISO 8601 date string to date object"""
    return dateutil.parser.isoparse(val.decode()).date()


def convert_datetime(val: bytes) -> datetime.datetime:
    """Convert ISO 8601 datetime string to datetime object"""
    return dateutil.parser.isoparse(val.decode())


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    table_names_sql = """
SELECT tbl_name
FROM main.sqlite_master
WHERE type = 'table'
"""

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def build_connection_url(self, options: 'DatabaseOptions') -> str:
        """Build the SQLAlchemy connection URL for SQLite."""
        return f'sqlite:///{options.database}'

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for SQLite."""
        return {
            'connect_args': {
                'detect_types': sqlite3.PARSE_DECLTYPES
            }
        }

    def configure_connection(self, raw_conn: Any) -> None:
        """Configure connection settings for SQLite.

        SQLite registers adapters and converters globally rather than
        per connection.
        """
        sqlite3.register_adapter(datetime.date, adapt_date_iso)
        sqlite3.register_adapter(datetime.datetime, adapt_datetime_iso)
        sqlite3.register_adapter(Decimal, str)
        sqlite3.register_converter('date', convert_date)
        sqlite3.register_converter('datetime', convert_datetime)

        self.enable_autocommit(raw_conn)
        raw_conn.execute('PRAGMA foreign_keys = ON')
        raw_conn.execute('PRAGMA synchronous = FULL')

    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode for SQLite.
        """
        raw_conn.isolation_level = None

    def disable_autocommit(self, raw_conn: Any) -> None:
        """Disable auto-commit mode for SQLite.
        """
        raw_conn.isolation_level = 'DEFERRED'

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']
