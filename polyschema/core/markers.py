"""Class markers that drive schema generation.

Markers are recorded in weak registries keyed by class rather than stored as
attributes, so they never interfere with pydantic's model namespace and local
classes are released once out of scope.

    @generates_schema
    @json_type_info(property="@type")
    class Shape(BaseModel):
        ...

    class Circle(Shape):
        radius: float
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Type, TypeVar, Union
from weakref import WeakKeyDictionary, WeakSet

T = TypeVar("T", bound=type)

SubTypeEntry = Union[type, Tuple[type, str]]


@dataclass(frozen=True)
class TypeInfo:
    """Name based polymorphism: the discriminator property carrying the subtype name."""

    property: str = "@type"


@dataclass(frozen=True)
class JsonRequired:
    """Field metadata forcing a property into the ``required`` list.

    Usage: ``name: Annotated[Optional[str], JsonRequired()]``
    """


_SCHEMA_TYPES: "WeakSet[type]" = WeakSet()
_TYPE_INFO: "WeakKeyDictionary[type, TypeInfo]" = WeakKeyDictionary()
_TYPE_NAMES: "WeakKeyDictionary[type, str]" = WeakKeyDictionary()
_SUB_TYPES: "WeakKeyDictionary[type, Tuple[Tuple[type, Optional[str]], ...]]" = (
    WeakKeyDictionary()
)
_PROPERTY_ORDER: "WeakKeyDictionary[type, Tuple[str, ...]]" = WeakKeyDictionary()


def generates_schema(cls: T) -> T:
    """Mark ``cls`` as a root type the generator should produce a schema for."""
    _SCHEMA_TYPES.add(cls)
    return cls


def json_type_info(property: str = "@type") -> Callable[[T], T]:
    """Mark a class as the base of a name-discriminated hierarchy."""

    def decorator(cls: T) -> T:
        _TYPE_INFO[cls] = TypeInfo(property=property)
        return cls

    return decorator


def json_type_name(name: str) -> Callable[[T], T]:
    """Override the discriminator value of a subtype."""

    def decorator(cls: T) -> T:
        _TYPE_NAMES[cls] = name
        return cls

    return decorator


def json_sub_types(base: type, *sub_types: SubTypeEntry) -> None:
    """Declare a closed, ordered list of subtypes for ``base``.

    Entries are either a class or a ``(class, name)`` pair. Subtypes declared
    here are used as-is and never looked up by scanning.
    """
    entries = []
    for entry in sub_types:
        if isinstance(entry, tuple):
            sub_type, name = entry
        else:
            sub_type, name = entry, None
        if not isinstance(sub_type, type) or not issubclass(sub_type, base):
            raise TypeError(f"{sub_type!r} is not a subtype of {base.__qualname__}")
        entries.append((sub_type, name))
    _SUB_TYPES[base] = tuple(entries)


def json_property_order(*names: str) -> Callable[[T], T]:
    """Properties listed here come first, in this order; the rest follow alphabetically."""

    def decorator(cls: T) -> T:
        _PROPERTY_ORDER[cls] = tuple(names)
        return cls

    return decorator


def schema_types() -> Tuple[type, ...]:
    return tuple(_SCHEMA_TYPES)


def type_info_of(cls: type) -> Optional[Tuple[TypeInfo, Type]]:
    """Return the nearest type info in ``cls``'s MRO and the class that declared it."""
    for klass in cls.__mro__:
        info = _TYPE_INFO.get(klass)
        if info is not None:
            return info, klass
    return None


def declared_type_name(cls: type) -> Optional[str]:
    return _TYPE_NAMES.get(cls)


def declared_sub_types(cls: type) -> Tuple[Tuple[type, Optional[str]], ...]:
    return _SUB_TYPES.get(cls, ())


def property_order_of(cls: type) -> Tuple[str, ...]:
    for klass in cls.__mro__:
        order = _PROPERTY_ORDER.get(klass)
        if order is not None:
            return order
    return ()
