"""Structural view of pydantic models and type annotations.

Both the polymorphic type resolver and the schema builder see types only
through a :class:`TypeIntrospector`, so the walk and the generated documents
always agree on what a type contains.
"""

from __future__ import annotations
import collections
import collections.abc as abc
import types
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import (
    Annotated,
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from pydantic import BaseModel

from . import formats, markers, naming
from .errors import IntrospectionError
from .formats import NUMERIC_DURATION_MODES

_NONE_TYPE = type(None)
_UNION_TYPES: Tuple[Any, ...] = (Union,)
if hasattr(types, "UnionType"):
    _UNION_TYPES += (types.UnionType,)

_ARRAY_ORIGINS = (
    list,
    set,
    frozenset,
    collections.deque,
    abc.Sequence,
    abc.MutableSequence,
    abc.Set,
    abc.MutableSet,
    abc.Collection,
    abc.Iterable,
)
_UNIQUE_ORIGINS = (set, frozenset, abc.Set, abc.MutableSet)
_MAP_ORIGINS = (
    dict,
    collections.OrderedDict,
    collections.defaultdict,
    abc.Mapping,
    abc.MutableMapping,
)

# (metadata attribute, schema keyword) for numeric constraints
_NUMERIC_CONSTRAINTS = (
    ("gt", "exclusiveMinimum"),
    ("ge", "minimum"),
    ("lt", "exclusiveMaximum"),
    ("le", "maximum"),
    ("multiple_of", "multipleOf"),
)


class ShapeKind(str, Enum):
    ANY = "any"
    NULL = "null"
    LEAF = "leaf"
    OBJECT = "object"
    ARRAY = "array"
    MAP = "map"
    UNION = "union"


@dataclass(frozen=True)
class Shape:
    """What an annotation looks like once serialized.

    ``contained`` lists every nested annotation the walk must follow: element
    types, map key/value types, union members and generic type arguments.
    """

    kind: ShapeKind
    type: Any = None
    elements: Tuple[Any, ...] = ()
    key: Any = None
    value: Any = None
    options: Tuple[Any, ...] = ()
    nullable: bool = False
    unique: bool = False
    fixed: bool = False
    enum_values: Tuple[Any, ...] = ()
    type_arguments: Tuple[Any, ...] = ()

    @property
    def contained(self) -> Tuple[Any, ...]:
        if self.kind is ShapeKind.ARRAY:
            return self.elements
        if self.kind is ShapeKind.MAP:
            return (self.key, self.value)
        if self.kind is ShapeKind.UNION:
            return self.options
        if self.kind is ShapeKind.OBJECT:
            return self.type_arguments
        return ()


@dataclass(frozen=True)
class PropertyInfo:
    name: str
    public_name: str
    annotation: Any
    required: bool
    optional_wrapper: bool = False
    explicit_required: bool = False
    title: Optional[str] = None
    description: Optional[str] = None
    extra: Any = None
    constraints: Dict[str, Any] = field(default_factory=dict)
    read_only: bool = False

    @property
    def conflicting_requirement(self) -> bool:
        """Explicitly required while typed as an optional wrapper: required wins."""
        return self.explicit_required and self.optional_wrapper


class TypeIntrospector(Protocol):
    def shape_of(self, annotation: Any) -> Shape: ...

    def properties(self, type_: type) -> List[PropertyInfo]: ...

    def discriminator(self, type_: type) -> Optional[str]: ...

    def is_open_polymorphic(self, type_: type) -> bool: ...

    def explicit_sub_types(self, type_: type) -> List[Tuple[type, str]]: ...

    def property_order(self, type_: type) -> Tuple[str, ...]: ...

    def type_name(self, type_: type) -> str: ...

    def title(self, type_: type) -> str: ...

    def type_extra(self, type_: type) -> Any: ...

    def numeric_durations(self, type_: type) -> bool: ...


def strip_annotated(annotation: Any) -> Tuple[Any, Tuple[Any, ...]]:
    metadata: Tuple[Any, ...] = ()
    while get_origin(annotation) is Annotated:
        args = get_args(annotation)
        annotation, metadata = args[0], metadata + tuple(args[1:])
    return annotation, metadata


def is_optional_wrapper(annotation: Any) -> bool:
    annotation, _ = strip_annotated(annotation)
    return get_origin(annotation) in _UNION_TYPES and _NONE_TYPE in get_args(annotation)


def constraints_from(metadata: Sequence[Any]) -> Dict[str, Any]:
    """Map annotated-types / pydantic constraint metadata onto schema keywords.

    ``min_length``/``max_length`` are kept under their own names: the builder
    decides between the string and array keywords once the node type is known.
    """
    found: Dict[str, Any] = {}
    for item in metadata:
        for attr, keyword in _NUMERIC_CONSTRAINTS:
            value = getattr(item, attr, None)
            if value is not None:
                found[keyword] = _plain_number(value)
        for attr in ("min_length", "max_length"):
            value = getattr(item, attr, None)
            if value is not None:
                found[attr] = value
        pattern = getattr(item, "pattern", None)
        if pattern is not None:
            found["pattern"] = getattr(pattern, "pattern", pattern)
    return found


def _plain_number(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


class PydanticIntrospector:
    """Introspects pydantic v2 models and standard typing annotations."""

    def shape_of(self, annotation: Any) -> Shape:
        annotation, _ = strip_annotated(annotation)

        if annotation is Any or annotation is object:
            return Shape(ShapeKind.ANY)
        if annotation is None or annotation is _NONE_TYPE:
            return Shape(ShapeKind.NULL)
        if isinstance(annotation, TypeVar):
            return self._type_var_shape(annotation)

        origin = get_origin(annotation)
        args = get_args(annotation)

        if origin in _UNION_TYPES:
            options = tuple(a for a in args if a is not _NONE_TYPE)
            return Shape(ShapeKind.UNION, options=options, nullable=len(options) != len(args))
        if origin is Literal:
            return Shape(ShapeKind.LEAF, enum_values=tuple(_enum_value(a) for a in args))
        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return Shape(ShapeKind.ARRAY, elements=(args[0],))
            if not args:
                return Shape(ShapeKind.ARRAY, elements=(Any,))
            return Shape(ShapeKind.ARRAY, elements=args, fixed=True)
        if origin in _ARRAY_ORIGINS:
            return Shape(
                ShapeKind.ARRAY,
                elements=(args[0] if args else Any,),
                unique=origin in _UNIQUE_ORIGINS,
            )
        if origin in _MAP_ORIGINS:
            key, value = args if len(args) == 2 else (str, Any)
            return Shape(ShapeKind.MAP, key=key, value=value)
        if origin is not None:
            raise IntrospectionError(repr(annotation), f"Unsupported generic type: {annotation!r}")

        if isinstance(annotation, type):
            return self._class_shape(annotation)

        raise IntrospectionError(
            repr(annotation), f"Unsupported or unresolved annotation: {annotation!r}"
        )

    def _class_shape(self, type_: type) -> Shape:
        if issubclass(type_, Enum):
            return Shape(
                ShapeKind.LEAF, type=type_, enum_values=tuple(_enum_value(m) for m in type_)
            )
        if formats.is_leaf(type_):
            return Shape(ShapeKind.LEAF, type=type_)
        if type_ in (list, set, frozenset, tuple):
            return Shape(ShapeKind.ARRAY, elements=(Any,), unique=type_ in (set, frozenset))
        if type_ is dict:
            return Shape(ShapeKind.MAP, key=str, value=Any)
        if issubclass(type_, BaseModel):
            return Shape(ShapeKind.OBJECT, type=type_, type_arguments=_generic_arguments(type_))
        raise IntrospectionError(naming.qualified_name(type_), f"Unsupported type: {type_!r}")

    def _type_var_shape(self, type_var: Any) -> Shape:
        if type_var.__constraints__:
            return Shape(ShapeKind.UNION, options=tuple(type_var.__constraints__))
        if type_var.__bound__ is not None:
            return self.shape_of(type_var.__bound__)
        return Shape(ShapeKind.ANY)

    def properties(self, type_: type) -> List[PropertyInfo]:
        self._ensure_complete(type_)

        props: List[PropertyInfo] = []
        for name, info in type_.model_fields.items():
            if info.exclude is True:
                continue

            optional_wrapper = is_optional_wrapper(info.annotation)
            explicit_required = any(isinstance(m, markers.JsonRequired) for m in info.metadata)
            props.append(
                PropertyInfo(
                    name=name,
                    public_name=info.serialization_alias or info.alias or name,
                    annotation=info.annotation,
                    required=explicit_required or (info.is_required() and not optional_wrapper),
                    optional_wrapper=optional_wrapper,
                    explicit_required=explicit_required,
                    title=info.title,
                    description=info.description,
                    extra=info.json_schema_extra,
                    constraints=constraints_from(info.metadata),
                )
            )

        for name, info in type_.model_computed_fields.items():
            props.append(
                PropertyInfo(
                    name=name,
                    public_name=info.alias or name,
                    annotation=info.return_type,
                    required=True,
                    title=info.title,
                    description=info.description,
                    extra=info.json_schema_extra,
                    read_only=True,
                )
            )
        return props

    def _ensure_complete(self, type_: type) -> None:
        if not isinstance(type_, type) or not issubclass(type_, BaseModel):
            raise IntrospectionError(
                naming.qualified_name(type_), f"Not a pydantic model: {type_!r}"
            )
        if getattr(type_, "__pydantic_complete__", True):
            return
        try:
            type_.model_rebuild(raise_errors=True)
        except Exception as e:
            raise IntrospectionError(
                naming.qualified_name(type_),
                f"Failed to resolve annotations of {naming.qualified_name(type_)}",
                original_error=e,
            ) from e

    def discriminator(self, type_: type) -> Optional[str]:
        found = markers.type_info_of(type_)
        return found[0].property if found is not None else None

    def is_open_polymorphic(self, type_: type) -> bool:
        found = markers.type_info_of(type_)
        if found is None:
            return False
        declaring = found[1]
        for klass in type_.__mro__:
            if markers.declared_sub_types(klass):
                return False
            if klass is declaring:
                break
        return True

    def explicit_sub_types(self, type_: type) -> List[Tuple[type, str]]:
        return [(sub_type, naming.type_name(sub_type)) for sub_type, _ in markers.declared_sub_types(type_)]

    def property_order(self, type_: type) -> Tuple[str, ...]:
        return markers.property_order_of(type_)

    def type_name(self, type_: type) -> str:
        return naming.type_name(type_)

    def title(self, type_: type) -> str:
        config = getattr(type_, "model_config", {}) or {}
        return config.get("title") or type_.__name__

    def type_extra(self, type_: type) -> Any:
        config = getattr(type_, "model_config", {}) or {}
        return config.get("json_schema_extra")

    def numeric_durations(self, type_: type) -> bool:
        config = getattr(type_, "model_config", {}) or {}
        return config.get("ser_json_timedelta") in NUMERIC_DURATION_MODES


def _enum_value(value: Any) -> Any:
    if isinstance(value, Enum):
        value = value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _generic_arguments(type_: type) -> Tuple[Any, ...]:
    metadata = getattr(type_, "__pydantic_generic_metadata__", None) or {}
    return tuple(metadata.get("args") or ()) + tuple(metadata.get("parameters") or ())


