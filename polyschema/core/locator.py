from __future__ import annotations
from typing import FrozenSet, List, Protocol, Set

from .scope import ScopeFilter


class SubtypeLocator(Protocol):
    def find(self, type_: type, scope: ScopeFilter) -> FrozenSet[type]:
        """Return every concrete subtype of ``type_`` admitted by ``scope``."""
        ...


class SubclassLocator:
    """Finds subtypes among the classes currently loaded in the interpreter.

    Subclasses are collected transitively. Parametrised generic models
    (``Page[int]``) are skipped: they share the schema of their origin.
    """

    def find(self, type_: type, scope: ScopeFilter) -> FrozenSet[type]:
        seen: Set[type] = set()
        pending: List[type] = list(type.__subclasses__(type_))
        while pending:
            klass = pending.pop()
            if klass in seen:
                continue
            seen.add(klass)
            pending.extend(type.__subclasses__(klass))
        return frozenset(k for k in seen if not _is_parametrised(k) and scope.allows(k))


def _is_parametrised(klass: type) -> bool:
    metadata = getattr(klass, "__pydantic_generic_metadata__", None) or {}
    return metadata.get("origin") is not None
