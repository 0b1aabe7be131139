"""Root type discovery: import the modules in scope and collect ``@generates_schema`` classes."""

from __future__ import annotations
import importlib
import pkgutil
from typing import Iterable, List, Optional, Set

from ..logging import get_logger
from . import markers
from .naming import qualified_name
from .scope import ScopeFilter

logger = get_logger(__name__)

_GLOB_CHARS = set("*?[")


def scan_for_schema_types(
    scope: ScopeFilter, search_modules: Optional[Iterable[str]] = None
) -> List[type]:
    """Return every schema type admitted by ``scope``, sorted by qualified name.

    Only classes in imported modules are visible, so the literal (non-glob)
    module and package names in ``scope`` are imported first, along with
    ``search_modules``. Packages are imported with all their sub-modules.
    """
    targets = set(search_modules or ())
    targets.update(_literal_names(scope.modules))
    targets.update(_literal_names(scope.packages))
    for name in sorted(targets):
        _import_tree(name)

    found = [t for t in markers.schema_types() if scope.allows(t)]
    if not found and not targets:
        logger.warning(
            "No schema types found for %s; glob patterns only match modules that are already "
            "imported, name a module or package to import it",
            scope,
        )
    return sorted(found, key=qualified_name)


def _literal_names(patterns: Iterable[str]) -> Set[str]:
    return {p for p in patterns if not _GLOB_CHARS.intersection(p)}


def _import_tree(name: str) -> None:
    try:
        module = importlib.import_module(name)
    except ImportError as e:
        logger.warning("Unable to import %s: %s", name, e)
        return

    path = getattr(module, "__path__", None)
    if path is None:
        return

    def on_error(failed: str) -> None:
        logger.warning("Unable to import %s", failed)

    for info in pkgutil.walk_packages(path, prefix=module.__name__ + ".", onerror=on_error):
        try:
            importlib.import_module(info.name)
        except ImportError as e:
            logger.warning("Unable to import %s: %s", info.name, e)
