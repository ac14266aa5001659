"""
Transaction handling for database operations.
"""
import logging
import sys
import threading
from typing import Any

from litemap.connection import ConnectionWrapper

logger = logging.getLogger(__name__)


_local = threading.local()


class Transaction:
    """Context manager for running commands in a single durable transaction.

    The connection leaves auto-commit mode on entry. On a clean exit the
    transaction commits, after the dialect's durability statements made the
    commit wait for stable storage; on an exception it rolls back and the
    exception propagates. Nested transactions on the same connection within
    a thread are not supported.

    Examples
        with Transaction(cn) as tx:
            tx.execute('UPDATE Users SET Age = @age WHERE Id = @id', {'age': 31, 'id': 1})
    """

    def __init__(self, cn: ConnectionWrapper) -> None:
        self.connection = cn

        if not hasattr(_local, 'active_transactions'):
            _local.active_transactions = {}

        if id(cn) in _local.active_transactions:
            raise RuntimeError('Nested transactions are not supported')

    def __enter__(self):
        cn = self.connection
        cn.open()
        _local.active_transactions[id(cn)] = True
        cn.in_transaction = True

        strategy = cn.strategy
        strategy.disable_autocommit(cn.dbapi_connection)
        logger.debug(f'Started transaction for connection {id(cn)}')

        try:
            for sql in strategy.durable_commit_sql():
                cn.execute(sql)
        except Exception:
            self.__exit__(*sys.exc_info())
            raise

        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        cn = self.connection
        try:
            if exc_type is not None:
                cn.rollback()
                logger.warning('Rolling back the current transaction')
            else:
                try:
                    cn.commit()
                except Exception:
                    cn.rollback()
                    logger.warning('Commit failed, rolled back the current transaction')
                    raise
                logger.debug(f'Committed transaction for connection {id(cn)}')
        finally:
            _local.active_transactions.pop(id(cn), None)
            cn.strategy.enable_autocommit(cn.dbapi_connection)
            cn.in_transaction = False
            logger.debug(f'Transaction cleanup complete for connection {id(cn)}')

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Execute SQL within the transaction and return the affected row count."""
        return self.connection.execute(sql, params)
