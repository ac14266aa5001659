"""
Dialect strategies for the two supported databases, SQLite and PostgreSQL.

Strategies hold no state, so one instance per dialect is shared by every
connection. `get_strategy` accepts either a dialect name or anything that
carries one (a SQLAlchemy connection or engine, a ConnectionWrapper).
"""
from functools import cache
from typing import Any

from litemap.strategy.base import _STRATEGY_REGISTRY, DatabaseStrategy
from litemap.strategy.base import register_strategy
from litemap.strategy.postgres import PostgresStrategy
from litemap.strategy.sqlite import SQLiteStrategy
from litemap.utils import get_dialect_name

__all__ = [
    'DatabaseStrategy',
    'PostgresStrategy',
    'SQLiteStrategy',
    'register_strategy',
    'get_strategy',
    'get_strategy_class',
]


def get_strategy_class(dialect: str) -> type[DatabaseStrategy]:
    """Look up the registered strategy class for a dialect name.

    Raises
        ValueError: If no strategy is registered under `dialect`
    """
    try:
        return _STRATEGY_REGISTRY[dialect]
    except KeyError:
        raise ValueError(f'Unsupported dialect: {dialect}. '
                         f'Available: {sorted(_STRATEGY_REGISTRY)}') from None


@cache
def _shared_instance(dialect: str) -> DatabaseStrategy:
    return get_strategy_class(dialect)()


def get_strategy(dialect_or_connection: str | Any) -> DatabaseStrategy:
    """Return the shared strategy for a dialect name or a connection.

    >>> get_strategy('sqlite').dialect_name
    'sqlite'
    """
    if isinstance(dialect_or_connection, str):
        dialect = dialect_or_connection
    else:
        dialect = get_dialect_name(dialect_or_connection)
    return _shared_instance(dialect)
