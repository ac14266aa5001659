"""
PostgreSQL-specific strategy implementation.

- Tables are listed from ``information_schema.tables`` for the current schema
- Transactions set ``synchronous_commit`` on so a commit waits for the WAL
  flush even when the server default is relaxed
- psycopg named parameters (``%(name)s``) replace ``@name`` placeholders
"""
import logging
from typing import TYPE_CHECKING, Any

from litemap.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from litemap.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    table_names_sql = """
SELECT table_name
FROM information_schema.tables
WHERE table_schema = current_schema()
AND table_type = 'BASE TABLE'
"""

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def build_connection_url(self, options: 'DatabaseOptions') -> str:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query_parts = []
        if options.timeout:
            query_parts.append(f'connect_timeout={options.timeout}')

        url = (f'postgresql+psycopg://{options.username}:{options.password}'
               f'@{options.hostname}:{options.port}/{options.database}')

        if query_parts:
            url += '?' + '&'.join(query_parts)

        return url

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for PostgreSQL."""
        return {}

    def configure_connection(self, raw_conn: Any) -> None:
        """Configure connection settings for PostgreSQL.
        """
        self.enable_autocommit(raw_conn)

    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode for PostgreSQL.
        """
        raw_conn.autocommit = True

    def disable_autocommit(self, raw_conn: Any) -> None:
        """Disable auto-commit mode for PostgreSQL.
        """
        raw_conn.autocommit = False

    def durable_commit_sql(self) -> list[str]:
        """Force this transaction's commit to wait for the WAL flush."""
        return ['SET LOCAL synchronous_commit TO on']

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'password', 'database', 'port']
