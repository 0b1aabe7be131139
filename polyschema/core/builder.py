"""Draft-07 schema trees for pydantic models.

The tree is plain ``dict``/``list`` data with a fixed key order so the YAML
written from it is byte-for-byte reproducible.
"""

from __future__ import annotations
import inspect
import re
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence

from ..logging import get_logger
from . import formats
from .introspection import (
    PropertyInfo,
    Shape,
    ShapeKind,
    TypeIntrospector,
    constraints_from,
    strip_annotated,
)
from .naming import qualified_name
from .polymorphic import PolymorphicRegistry

logger = get_logger(__name__)

DRAFT_07 = "http://json-schema.org/draft-07/schema#"
DEFINITIONS = "definitions"
NOT_INCLUDED = {"type": "null", "title": "Not included"}

_OBJECT_KEY_ORDER = ("title", "description", "type", "additionalProperties", "properties", "required")
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_.$-]+")


def build_schema_tree(
    type_: type, registry: PolymorphicRegistry, introspector: TypeIntrospector
) -> Dict[str, Any]:
    """Return the complete schema tree for ``type_``."""
    return _TreeBuilder(type_, registry, introspector).document()


def order_properties(props: Sequence[PropertyInfo], explicit: Sequence[str]) -> List[PropertyInfo]:
    """Explicitly ordered properties first, in declared order, then the rest by public name."""
    by_name: Dict[str, PropertyInfo] = {}
    for prop in props:
        by_name.setdefault(prop.public_name, prop)
        by_name.setdefault(prop.name, prop)

    ordered: List[PropertyInfo] = []
    for name in explicit:
        prop = by_name.get(name)
        if prop is not None and prop not in ordered:
            ordered.append(prop)
    rest = sorted((p for p in props if p not in ordered), key=lambda p: p.public_name)
    return ordered + rest


class _TreeBuilder:
    def __init__(self, root: type, registry: PolymorphicRegistry, introspector: TypeIntrospector):
        self.root = root
        self.registry = registry
        self.introspector = introspector
        self.definitions: Dict[str, Dict[str, Any]] = {}
        self.definition_names: Dict[type, str] = {}

    def document(self) -> Dict[str, Any]:
        sub_types = self.sub_types(self.root)
        if sub_types:
            body = {
                "title": self.introspector.title(self.root),
                "oneOf": [self.definition_ref(s) for s in sub_types],
            }
        else:
            body = self.object_body(self.root)

        tree: Dict[str, Any] = {"$schema": DRAFT_07}
        tree.update(body)
        if self.definitions:
            tree[DEFINITIONS] = {name: self.definitions[name] for name in sorted(self.definitions)}
        return tree

    def sub_types(self, type_: type) -> List[type]:
        explicit = self.introspector.explicit_sub_types(type_)
        if explicit:
            return [sub_type for sub_type, _ in explicit]
        found = self.registry.sub_types_of(type_)
        if not found and self.introspector.is_open_polymorphic(type_):
            found = self.inherited_sub_types(type_)
        return sorted(found, key=lambda t: (t.__name__, qualified_name(t)))

    def inherited_sub_types(self, type_: type) -> FrozenSet[type]:
        """Subtypes of an intermediate type, taken from its nearest registered ancestor.

        An intermediate type is only a registry key when the walk reached it
        before its ancestor.
        """
        for klass in type_.__mro__[1:]:
            if klass in self.registry:
                return frozenset(
                    s for s in self.registry[klass] if s is not type_ and issubclass(s, type_)
                )
        return frozenset()

    def object_body(self, type_: type) -> Dict[str, Any]:
        node: Dict[str, Any] = {
            "title": self.introspector.title(type_),
            "type": "object",
            "additionalProperties": False,
        }
        properties: Dict[str, Any] = {}
        required: List[str] = []

        discriminator = self.introspector.discriminator(type_)
        if discriminator:
            name = self.introspector.type_name(type_)
            properties[discriminator] = {"type": "string", "enum": [name], "default": name}
            required.append(discriminator)

        props = self.introspector.properties(type_)
        for prop in order_properties(props, self.introspector.property_order(type_)):
            if prop.public_name == discriminator:
                continue
            if prop.conflicting_requirement:
                logger.warning(
                    "Property '%s' of %s is explicitly required but typed as optional; "
                    "treating it as required",
                    prop.public_name,
                    qualified_name(type_),
                )
            properties[prop.public_name] = self.property_node(prop, type_)
            if prop.required:
                required.append(prop.public_name)

        node["properties"] = properties
        if required:
            node["required"] = required

        extra = self.introspector.type_extra(type_)
        if extra:
            node = _apply_extra(node, extra, type_)
            node = _reorder(node, _OBJECT_KEY_ORDER)
        return node

    def property_node(self, prop: PropertyInfo, owner: type) -> Dict[str, Any]:
        node: Dict[str, Any] = {}
        if prop.title:
            node["title"] = prop.title
        if prop.description:
            node["description"] = prop.description
        node.update(self.node(prop.annotation, owner, prop.constraints))
        if prop.read_only:
            node["readOnly"] = True
        if prop.extra:
            node = _apply_extra(node, prop.extra, owner)
        return node

    def node(
        self, annotation: Any, owner: type, constraints: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        _, metadata = strip_annotated(annotation)
        constraints = {**(constraints or {}), **constraints_from(metadata)}
        shape = self.introspector.shape_of(annotation)

        if shape.kind is ShapeKind.UNION:
            return self.union_node(shape, owner, constraints)

        if shape.kind is ShapeKind.ANY:
            node: Dict[str, Any] = {}
        elif shape.kind is ShapeKind.NULL:
            node = {"type": "null"}
        elif shape.kind is ShapeKind.LEAF:
            node = self.leaf_node(shape, owner)
        elif shape.kind is ShapeKind.ARRAY:
            node = self.array_node(shape, owner)
        elif shape.kind is ShapeKind.MAP:
            node = {"type": "object", "additionalProperties": self.node(shape.value, owner)}
        else:
            node = self.object_reference(shape.type)

        if constraints and ("$ref" in node or "oneOf" in node):
            # draft-07 ignores keywords next to $ref
            return _apply_constraints({"allOf": [node]}, constraints, "object")
        return _apply_constraints(node, constraints)

    def union_node(self, shape: Shape, owner: type, constraints: Dict[str, Any]) -> Dict[str, Any]:
        options = [self.node(option, owner, constraints) for option in shape.options]
        if len(options) == 1:
            inner = options[0]
        else:
            inner = {"anyOf": options}
        if shape.nullable:
            return {"oneOf": [dict(NOT_INCLUDED), inner]}
        return inner

    def leaf_node(self, shape: Shape, owner: type) -> Dict[str, Any]:
        if shape.enum_values:
            node: Dict[str, Any] = {}
            json_type = _enum_json_type(shape.enum_values)
            if json_type:
                node["type"] = json_type
            node["enum"] = list(shape.enum_values)
            return node

        found = formats.object_format(shape.type)
        if found is not None:
            name, schema = found
            return self.definition_ref(shape.type, lambda: schema, name)

        node = formats.leaf_schema(
            shape.type, numeric_durations=self.introspector.numeric_durations(owner)
        )
        if node is None:
            raise TypeError(f"No schema format for {qualified_name(shape.type)}")
        return node

    def array_node(self, shape: Shape, owner: type) -> Dict[str, Any]:
        node: Dict[str, Any] = {"type": "array"}
        if not shape.fixed:
            node["items"] = self.node(shape.elements[0], owner)
            if shape.unique:
                node["uniqueItems"] = True
        else:
            node["items"] = [self.node(element, owner) for element in shape.elements]
            node["minItems"] = len(shape.elements)
            node["maxItems"] = len(shape.elements)
        return node

    def object_reference(self, type_: type) -> Dict[str, Any]:
        sub_types = self.sub_types(type_)
        if sub_types:
            return {"oneOf": [self.definition_ref(s) for s in sub_types]}
        if type_ is self.root:
            return {"$ref": "#"}
        return self.definition_ref(type_)

    def definition_ref(
        self,
        type_: type,
        body: Optional[Callable[[], Dict[str, Any]]] = None,
        name: Optional[str] = None,
    ) -> Dict[str, Any]:
        if type_ not in self.definition_names:
            name = self._unique_name(name or type_.__name__)
            self.definition_names[type_] = name
            # Reserved before building so recursive references resolve to it.
            self.definitions[name] = {}
            self.definitions[name] = body() if body is not None else self.object_body(type_)
        return {"$ref": f"#/{DEFINITIONS}/{self.definition_names[type_]}"}

    def _unique_name(self, name: str) -> str:
        name = _UNSAFE_NAME_CHARS.sub("_", name)
        candidate, suffix = name, 0
        while candidate in self.definitions:
            suffix += 1
            candidate = f"{name}_{suffix}"
        return candidate


def _enum_json_type(values: Sequence[Any]) -> Optional[str]:
    if all(isinstance(v, bool) for v in values):
        return "boolean"
    if all(isinstance(v, str) for v in values):
        return "string"
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "integer"
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return "number"
    return None


def _apply_constraints(
    node: Dict[str, Any], constraints: Dict[str, Any], json_type: Optional[str] = None
) -> Dict[str, Any]:
    if not constraints:
        return node
    json_type = json_type or node.get("type")
    for key, value in constraints.items():
        if key in ("min_length", "max_length"):
            bound = "min" if key == "min_length" else "max"
            if json_type == "array":
                node[f"{bound}Items"] = value
            elif json_type == "object":
                node[f"{bound}Properties"] = value
            else:
                node[f"{bound}Length"] = value
        else:
            node[key] = value
    return node


def _apply_extra(node: Dict[str, Any], extra: Any, owner: type) -> Dict[str, Any]:
    if callable(extra):
        if len(inspect.signature(extra).parameters) > 1:
            extra(node, owner)
        else:
            extra(node)
        return node
    node.update(extra)
    return node


def _reorder(node: Dict[str, Any], key_order: Sequence[str]) -> Dict[str, Any]:
    ordered = {key: node[key] for key in key_order if key in node}
    ordered.update((key, value) for key, value in node.items() if key not in ordered)
    return ordered
