from collections.abc import Callable
from dataclasses import dataclass

from litemap.strategy import get_strategy_class

__all__ = [
    'DatabaseOptions',
    'RepositoryOptions',
]


@dataclass
class DatabaseOptions:
    """Options

    supported driver names: `postgresql`, `sqlite`
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0

    def __post_init__(self):
        get_strategy_class(self.drivername).validate_options(self)


@dataclass(frozen=True)
class RepositoryOptions:
    """Error policy of a repository, fixed at construction.

    on_error: called with every exception a repository operation raises
    propagate: re-raise after `on_error` (default), or return an empty result
    """
    on_error: Callable[[Exception], None] | None = None
    propagate: bool = True
