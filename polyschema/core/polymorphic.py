"""Discovery of name-discriminated polymorphic types reachable from root types.

The walk follows every property, container element, map key/value, union
member and generic type argument. Each model class is processed at most once,
which is what makes the walk terminate on self-referential hierarchies.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional

from ..logging import get_logger
from .errors import CoreError, IntrospectionError, SubtypeLookupError
from .introspection import PydanticIntrospector, ShapeKind, TypeIntrospector
from .locator import SubclassLocator, SubtypeLocator
from .naming import qualified_name
from .scope import ScopeFilter

logger = get_logger(__name__)


@dataclass(frozen=True)
class PolymorphicType:
    type: type
    sub_types: FrozenSet[type]

    def __repr__(self) -> str:
        subs = ", ".join(sorted(qualified_name(s) for s in self.sub_types))
        return f"PolymorphicType(type={qualified_name(self.type)}, sub_types={{{subs}}})"


class PolymorphicRegistry(Mapping[type, FrozenSet[type]]):
    """Read-only map from open polymorphic type to its in-scope subtypes."""

    def __init__(self, entries: Iterable[PolymorphicType] = ()):
        self._entries: Dict[type, FrozenSet[type]] = {e.type: e.sub_types for e in entries}

    def __getitem__(self, key: type) -> FrozenSet[type]:
        return self._entries[key]

    def __iter__(self) -> Iterator[type]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def sub_types_of(self, type_: type) -> FrozenSet[type]:
        return self._entries.get(type_, frozenset())

    def __repr__(self) -> str:
        return f"PolymorphicRegistry({sorted(qualified_name(t) for t in self._entries)})"


class PolymorphicTypeResolver:
    def __init__(
        self,
        introspector: Optional[TypeIntrospector] = None,
        locator: Optional[SubtypeLocator] = None,
    ):
        self.introspector = introspector or PydanticIntrospector()
        self.locator = locator or SubclassLocator()

    def resolve(self, types: Iterable[type], scope: ScopeFilter) -> PolymorphicRegistry:
        return PolymorphicRegistry(_Walk(self.introspector, self.locator, scope).run(types))


def find_polymorphic_types(
    types: Iterable[type],
    scope: ScopeFilter,
    introspector: Optional[TypeIntrospector] = None,
    locator: Optional[SubtypeLocator] = None,
) -> List[PolymorphicType]:
    """Return every open polymorphic type reachable from ``types`` that has subtypes in scope."""
    walk = _Walk(introspector or PydanticIntrospector(), locator or SubclassLocator(), scope)
    return walk.run(types)


class _Walk:
    def __init__(self, introspector: TypeIntrospector, locator: SubtypeLocator, scope: ScopeFilter):
        self.introspector = introspector
        self.locator = locator
        self.scope = scope
        self.visited: Dict[type, PolymorphicType] = {}

    def run(self, types: Iterable[type]) -> List[PolymorphicType]:
        for root in types:
            try:
                self.visit(root)
            except SubtypeLookupError as e:
                raise SubtypeLookupError(
                    qualified_name(root),
                    f"Failed to extract polymorphic types from {qualified_name(root)}: {e.message}",
                    context=e.context,
                    original_error=e.original_error or e,
                ) from e
            except Exception as e:
                raise IntrospectionError(
                    qualified_name(root),
                    f"Failed to extract polymorphic types from {qualified_name(root)}",
                    original_error=e,
                ) from e

        return [p for p in self.visited.values() if p.sub_types]

    def visit(self, annotation: Any) -> None:
        shape = self.introspector.shape_of(annotation)
        if shape.kind is ShapeKind.OBJECT:
            self._visit_object(shape.type)
        for contained in shape.contained:
            self.visit(contained)

    def _visit_object(self, type_: type) -> None:
        if type_ in self.visited:
            return

        sub_types: FrozenSet[type] = frozenset()
        if self.introspector.is_open_polymorphic(type_):
            sub_types = self._find_sub_types(type_)

        self.visited[type_] = PolymorphicType(type_, sub_types)
        self._visit_members(type_)

        # Subtypes were found with the parent's lookup, which covers theirs too.
        for sub_type in sorted(sub_types, key=qualified_name):
            if sub_type in self.visited:
                continue
            self.visited[sub_type] = PolymorphicType(sub_type, frozenset())
            self._visit_members(sub_type)

    def _visit_members(self, type_: type) -> None:
        for prop in self.introspector.properties(type_):
            self.visit(prop.annotation)
        for sub_type, _ in self.introspector.explicit_sub_types(type_):
            self._visit_object(sub_type)

    def _find_sub_types(self, type_: type) -> FrozenSet[type]:
        try:
            found = frozenset(self.locator.find(type_, self.scope))
        except CoreError:
            raise
        except Exception as e:
            raise SubtypeLookupError(
                qualified_name(type_),
                context={"scope": str(self.scope)},
                original_error=e,
            ) from e

        logger.debug(
            "Found %d subtype(s) of %s in scope %s", len(found), qualified_name(type_), self.scope
        )
        return found
