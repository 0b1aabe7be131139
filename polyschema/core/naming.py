"""Names derived from types: qualified names, discriminator values and file stems."""

from __future__ import annotations
import re

from . import markers

_LOCALS = "<locals>"
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def qualified_name(type_: type) -> str:
    """Fully-qualified name, e.g. ``acme.shapes.Circle``."""
    module = getattr(type_, "__module__", None)
    qualname = getattr(type_, "__qualname__", None) or getattr(type_, "__name__", repr(type_))
    return f"{module}.{qualname}" if module else qualname


def subtype_name(sub_type: type, base_type: type) -> str:
    """Default discriminator value of ``sub_type`` within ``base_type``'s hierarchy.

    The base type's name is dropped when it is a suffix of the subtype's name,
    then the remainder is snake_cased:

        >>> subtype_name(CircleShape, Shape)
        'circle'
        >>> subtype_name(SubType1, BaseType)
        'sub_type1'
    """
    name = sub_type.__name__
    base_name = base_type.__name__
    if name != base_name and name.endswith(base_name):
        name = name[: -len(base_name)]
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def type_name(type_: type) -> str:
    """The discriminator value written for instances of ``type_``.

    Precedence: ``@json_type_name`` on the class, then the name given in a
    closed subtype list of an ancestor, then :func:`subtype_name` relative to
    the class declaring the type info.
    """
    declared = markers.declared_type_name(type_)
    if declared:
        return declared

    for klass in type_.__mro__[1:]:
        for sub_type, name in markers.declared_sub_types(klass):
            if sub_type is type_ and name:
                return name

    found = markers.type_info_of(type_)
    base = found[1] if found is not None else type_
    return subtype_name(type_, base)


def schema_file_stem(type_: type) -> str:
    """File stem for a type: nested qualnames joined with ``$``, ``<locals>`` dropped."""
    parts = [p for p in type_.__qualname__.split(".") if p != _LOCALS]
    return "$".join(parts)
