"""Module/package allow-lists used to bound type and subtype scanning."""

from __future__ import annotations
from fnmatch import fnmatchcase
from typing import FrozenSet, Iterable

from pydantic import BaseModel, ConfigDict, Field


class ScopeFilter(BaseModel):
    """A pair of glob allow-lists restricting which types a scan may return.

    ``modules`` patterns are matched against the full name of the module a type
    is defined in. ``packages`` patterns match that module or any package that
    contains it, so ``acme.shapes`` admits ``acme.shapes.round``.

    An empty set on either axis leaves that axis unrestricted. When both axes
    are set a type must satisfy both.
    """

    model_config = ConfigDict(frozen=True)

    modules: FrozenSet[str] = Field(default_factory=frozenset)
    packages: FrozenSet[str] = Field(default_factory=frozenset)

    @classmethod
    def of(cls, modules: Iterable[str] = (), packages: Iterable[str] = ()) -> "ScopeFilter":
        return cls(modules=frozenset(modules), packages=frozenset(packages))

    @property
    def unrestricted(self) -> bool:
        return not self.modules and not self.packages

    def allows(self, type_: type) -> bool:
        return self.allows_module(getattr(type_, "__module__", None) or "")

    def allows_module(self, module_name: str) -> bool:
        if self.modules and not any(fnmatchcase(module_name, p) for p in self.modules):
            return False
        if self.packages and not any(_in_package(module_name, p) for p in self.packages):
            return False
        return True

    def __str__(self) -> str:
        return f"modules={_format_allowed(self.modules)}, packages={_format_allowed(self.packages)}"


def _in_package(module_name: str, pattern: str) -> bool:
    return fnmatchcase(module_name, pattern) or fnmatchcase(module_name, pattern + ".*")


def _format_allowed(allowed: FrozenSet[str]) -> str:
    return "<ANY>" if not allowed else "[" + ", ".join(sorted(allowed)) + "]"
