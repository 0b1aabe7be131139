from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

import yaml

from .builder import build_schema_tree
from .errors import SchemaBuildError
from .introspection import PydanticIntrospector, TypeIntrospector
from .locator import SubclassLocator, SubtypeLocator
from .naming import qualified_name
from .polymorphic import PolymorphicRegistry, PolymorphicTypeResolver
from .scope import ScopeFilter

Clock = Callable[[], int]


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class SchemaDocument:
    """A generated schema: the source type, the YAML text, and when it was generated."""

    type: type
    text: str
    generated_at: int

    @property
    def type_name(self) -> str:
        return qualified_name(self.type)


class _NoAliasDumper(yaml.SafeDumper):
    def ignore_aliases(self, data: Any) -> bool:
        return True


def to_yaml(tree: Any) -> str:
    return yaml.dump(
        tree,
        Dumper=_NoAliasDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=120,
    )


class SchemaGenerator:
    """Generates YAML schema documents for pydantic models.

    Usage is two-phase: call :meth:`register_sub_types` once with every type a
    schema will be generated for, then :meth:`generate_schema` per type. The
    registry built in the first phase is shared, read-only, by every document.
    """

    def __init__(
        self,
        subtype_scanning: Optional[ScopeFilter] = None,
        *,
        clock: Optional[Clock] = None,
        introspector: Optional[TypeIntrospector] = None,
        locator: Optional[SubtypeLocator] = None,
    ):
        self.subtype_scanning = subtype_scanning or ScopeFilter()
        self.clock = clock or epoch_millis
        self.introspector = introspector or PydanticIntrospector()
        self.resolver = PolymorphicTypeResolver(self.introspector, locator or SubclassLocator())
        self._registry = PolymorphicRegistry()

    @property
    def registry(self) -> PolymorphicRegistry:
        return self._registry

    def register_sub_types(self, types: Iterable[type]) -> PolymorphicRegistry:
        self._registry = self.resolver.resolve(types, self.subtype_scanning)
        return self._registry

    def generate_schema(self, type_: type) -> SchemaDocument:
        return self.build(type_, self._registry)

    def build(self, type_: type, registry: PolymorphicRegistry) -> SchemaDocument:
        try:
            tree = build_schema_tree(type_, registry, self.introspector)
            body = to_yaml(tree)
        except Exception as e:
            raise SchemaBuildError(qualified_name(type_), original_error=e) from e

        generated_at = self.clock()
        return SchemaDocument(
            type=type_,
            text=f"---\n# timestamp={generated_at}\n{body}",
            generated_at=generated_at,
        )
