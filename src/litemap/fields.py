"""
Field reflection for record types.

A record type is a dataclass or a plain class with annotated attributes. Its
fields are read from the class declaration, so the field set of a type never
changes at runtime and can be cached per class.

>>> from dataclasses import dataclass
>>> @dataclass
... class User:
...     Id: int
...     Name: str | None = None
>>> [f.name for f in fields_of(User)]
['Id', 'Name']
>>> fields_of(User)[1].kind
<FieldKind.STRING: 3>
"""
import dataclasses
import datetime
import inspect
import logging
import threading
import types
import typing
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, TypeVar, Union

import cachetools

logger = logging.getLogger(__name__)

T = TypeVar('T')

MISSING = dataclasses.MISSING

PRIMITIVE_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    Decimal,
    datetime.datetime,
    datetime.date,
    datetime.time,
    uuid.UUID,
    )

# Zero values for primitives that have one; every other type defaults to None.
ZERO_VALUES: dict[type, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    Decimal: Decimal(0),
    }

_field_cache = cachetools.LRUCache(maxsize=256)
_field_cache_lock = threading.RLock()


class FieldKind(Enum):
    """Semantic type tag of a declared field."""
    PRIMITIVE = 1
    NULLABLE_PRIMITIVE = 2
    STRING = 3
    OTHER = 4


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Strip an ``Optional[...]`` wrapper.

    Returns the underlying type and whether the wrapper was present.

    >>> unwrap_optional(int | None)
    (<class 'int'>, True)
    >>> unwrap_optional(int)
    (<class 'int'>, False)
    """
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = typing.get_args(tp)
        non_null = [a for a in args if a is not type(None)]
        if len(non_null) == 1 and len(args) == 2:
            return non_null[0], True
    return tp, False


def field_kind(tp: Any) -> FieldKind:
    """Classify a declared type.

    >>> field_kind(int), field_kind(int | None), field_kind(str), field_kind(bytes)
    (<FieldKind.PRIMITIVE: 1>, <FieldKind.NULLABLE_PRIMITIVE: 2>, <FieldKind.STRING: 3>, <FieldKind.OTHER: 4>)
    """
    base, nullable = unwrap_optional(tp)
    if base is str:
        return FieldKind.STRING
    if base in PRIMITIVE_TYPES:
        return FieldKind.NULLABLE_PRIMITIVE if nullable else FieldKind.PRIMITIVE
    return FieldKind.OTHER


def is_scalar_type(tp: Any) -> bool:
    """Check whether query results for `tp` come from the first column only.
    """
    return field_kind(tp) is not FieldKind.OTHER or unwrap_optional(tp)[0] is bytes


def default_value(tp: Any) -> Any:
    """Return the default value of a type: zero for numeric primitives, else None.

    >>> default_value(int), default_value(float), default_value(int | None), default_value(str)
    (0, 0.0, None, None)
    """
    if field_kind(tp) is FieldKind.PRIMITIVE:
        return ZERO_VALUES.get(tp)
    return None


@dataclass(frozen=True, slots=True)
class Field:
    """Descriptor of one named field of a record type."""
    name: str
    type: Any
    kind: FieldKind
    base_type: Any
    init: bool = True
    default: Any = dataclasses.field(default_factory=lambda: MISSING)
    default_factory: Callable[[], Any] | Any = dataclasses.field(default_factory=lambda: MISSING)

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING or self.default_factory is not MISSING

    def get(self, obj: Any) -> Any:
        """Read this field from a record instance, None when never assigned."""
        return getattr(obj, self.name, None)


def _make_field(name: str, tp: Any, **kwargs: Any) -> Field:
    base, _ = unwrap_optional(tp)
    return Field(name=name, type=tp, kind=field_kind(tp), base_type=base, **kwargs)


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError) as e:
        logger.debug(f'Could not resolve type hints for {cls.__name__}: {e}')
        return {}


def _dataclass_fields(cls: type) -> tuple[Field, ...]:
    hints = _type_hints(cls)
    return tuple(
        _make_field(f.name, hints.get(f.name, f.type), init=f.init,
                    default=f.default, default_factory=f.default_factory)
        for f in dataclasses.fields(cls)
        )


def _is_classvar(tp: Any) -> bool:
    return tp is ClassVar or typing.get_origin(tp) is ClassVar


def _annotated_fields(cls: type) -> tuple[Field, ...]:
    hints = _type_hints(cls)
    seen: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, annotation in inspect.get_annotations(klass).items():
            if name.startswith('_'):
                continue
            seen[name] = hints.get(name, annotation)
    return tuple(
        _make_field(name, tp, init=False, default=getattr(cls, name, MISSING))
        for name, tp in seen.items()
        if not _is_classvar(tp)
        )


@cachetools.cached(_field_cache, lock=_field_cache_lock)
def _fields_for_class(cls: type) -> tuple[Field, ...]:
    if dataclasses.is_dataclass(cls):
        result = _dataclass_fields(cls)
    else:
        result = _annotated_fields(cls)
    logger.debug(f'Reflected {len(result)} fields for {cls.__name__}')
    return result


def fields_of(type_or_instance: Any) -> tuple[Field, ...]:
    """Return the fields of a record type or instance in declaration order.

    A type without declared fields yields an empty tuple.
    """
    cls = type_or_instance if isinstance(type_or_instance, type) else type(type_or_instance)
    return _fields_for_class(cls)


def clear_field_cache() -> None:
    """Forget every reflected field set."""
    with _field_cache_lock:
        _field_cache.clear()


def default_for(field: Field) -> Any:
    """Return the value a field holds when no column populates it.
    """
    if field.default is not MISSING:
        return field.default
    if field.default_factory is not MISSING:
        return field.default_factory()
    return default_value(field.type)


def new_instance(cls: type[T], values: Mapping[str, Any]) -> T:
    """Build a fresh record from already converted field values.

    Fields missing from `values` keep their declared default, or the default
    of their type when none is declared.
    """
    fields = fields_of(cls)

    if dataclasses.is_dataclass(cls):
        kwargs = {}
        late = {}
        for f in fields:
            if f.init:
                if f.name in values:
                    kwargs[f.name] = values[f.name]
                elif not f.has_default:
                    kwargs[f.name] = default_for(f)
            elif f.name in values:
                late[f.name] = values[f.name]
        obj = cls(**kwargs)
        for name, value in late.items():
            object.__setattr__(obj, name, value)
        return obj

    obj = cls()
    for f in fields:
        if f.name in values:
            setattr(obj, f.name, values[f.name])
        elif not hasattr(obj, f.name):
            setattr(obj, f.name, default_for(f))
    return obj
