"""
Table name resolution from record type names.

A type name resolves to a table by exact match first, then by its naive
plural. The plural rule only knows a trailing ``y`` and an existing trailing
``s``; irregular plurals ("Person" -> "People") do not resolve.
"""
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from litemap.exceptions import NoMatchingTableError

logger = logging.getLogger(__name__)


def pluralize(name: str) -> str:
    """Pluralize a type name.

    >>> pluralize('Category'), pluralize('Bus'), pluralize('Dog')
    ('Categories', 'Bus', 'Dogs')
    """
    if name.endswith('y'):
        return name[:-1] + 'ies'
    if name.endswith('s'):
        return name
    return name + 's'


def table_name_map(names: Iterable[str]) -> Mapping[str, str]:
    """Build the read-only snapshot of known table names.

    >>> dict(table_name_map(['Users']))
    {'Users': 'Users'}
    """
    return MappingProxyType({name: name for name in names})


def resolve_table_name(type_name: str, table_map: Mapping[str, str]) -> str:
    """Find the table for a type name.

    >>> tables = table_name_map(['Users', 'Categories'])
    >>> resolve_table_name('User', tables), resolve_table_name('Category', tables)
    ('Users', 'Categories')
    """
    if type_name in table_map:
        return table_map[type_name]

    plural = pluralize(type_name)
    if plural in table_map:
        logger.debug(f'Resolved {type_name} to table {table_map[plural]} by pluralizing')
        return table_map[plural]

    raise NoMatchingTableError(type_name)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
