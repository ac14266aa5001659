"""
Base strategy interface for database operations.

Each supported dialect registers a strategy describing how litemap talks to
it: the connection URL, connection setup and auto-commit switching, the
paramstyle rewrite for ``@name`` placeholders, the statement that makes a
commit durable, and the catalog query that lists tables.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from litemap.sql import standardize_placeholders

if TYPE_CHECKING:
    from litemap.connection import ConnectionWrapper
    from litemap.options import DatabaseOptions

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DatabaseStrategy(ABC):
    """Base class for database-specific operations.
    """

    #: Keyword that starts an INSERT statement in this dialect.
    insert_keyword: str = 'INSERT INTO'

    #: Query returning one table name per row.
    table_names_sql: str = ''

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'postgresql', 'sqlite')."""

    @abstractmethod
    def build_connection_url(self, options: 'DatabaseOptions') -> str:
        """Build the database connection URL for this dialect.

        Args:
            options: DatabaseOptions containing connection parameters

        Returns
            Connection URL string suitable for SQLAlchemy
        """

    @abstractmethod
    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for this dialect."""

    @abstractmethod
    def configure_connection(self, raw_conn: Any) -> None:
        """Configure a freshly opened DBAPI connection.

        Connections are left in auto-commit mode; transactions switch it off.
        """

    @abstractmethod
    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode on a raw database connection."""

    @abstractmethod
    def disable_autocommit(self, raw_conn: Any) -> None:
        """Disable auto-commit mode on a raw database connection."""

    def durable_commit_sql(self) -> list[str]:
        """Statements run at the start of a transaction so its commit is
        flushed to stable storage before returning.
        """
        return []

    def standardize_sql(self, sql: str) -> str:
        """Rewrite ``@name`` placeholders to this driver's paramstyle."""
        return standardize_placeholders(sql, self.dialect_name)

    def get_table_names(self, cn: 'ConnectionWrapper') -> list[str]:
        """List the tables of the connected database.

        Args:
            cn: Database connection object

        Returns
            list: Table names in catalog order
        """
        from litemap.materialize import materialize

        cursor = cn.query(self.table_names_sql)
        try:
            return list(materialize(cursor, str))
        finally:
            cursor.close()

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect."""

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this dialect.

        Raises
            ValueError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or 0')
