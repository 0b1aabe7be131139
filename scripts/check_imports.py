#!/usr/bin/env python3
"""
Static analyzer to enforce core/front-end boundaries.

This script prevents imports of the CLI, generator entry point or options
from polyschema/core, so the engine can be embedded without them.
"""

import ast
import sys
from pathlib import Path
from typing import List, Tuple


class ImportViolationChecker(ast.NodeVisitor):
    """AST visitor to check for forbidden imports in core modules."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self.violations: List[Tuple[int, str]] = []
        self.forbidden_modules = ["cli", "generator", "options"]

    def _is_forbidden_import(self, module_name: str, level: int = 0) -> bool:
        """Check if a module name refers to a front-end module."""
        if level == 0:
            return any(
                module_name == f"polyschema.{m}" or module_name.startswith(f"polyschema.{m}.")
                for m in self.forbidden_modules
            )
        # Relative imports from core: ``..cli`` reaches the package root.
        if level >= 2:
            head = module_name.split(".")[0] if module_name else ""
            return head in self.forbidden_modules
        return False

    def visit_Import(self, node: ast.Import) -> None:
        """Check import statements."""
        for alias in node.names:
            if self._is_forbidden_import(alias.name):
                self.violations.append((node.lineno, f"Forbidden import: import {alias.name}"))
        self.generic_visit(node)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        """Check from...import statements."""
        names = [alias.name for alias in node.names]
        forbidden = self._is_forbidden_import(node.module or "", node.level)
        if not forbidden and node.level >= 2 and not node.module:
            forbidden = any(name in self.forbidden_modules for name in names)
        if forbidden:
            module = "." * node.level + (node.module or "")
            self.violations.append(
                (node.lineno, f"Forbidden import: from {module} import {', '.join(names)}")
            )
        self.generic_visit(node)


def check_core_imports(root_path: Path) -> List[Tuple[str, int, str]]:
    """
    Check all Python files in polyschema/core for forbidden imports.

    Returns:
        List of violations as (file_path, line_number, message) tuples
    """
    violations = []
    core_path = root_path / "polyschema" / "core"

    if not core_path.exists():
        print(f"Warning: Core path {core_path} does not exist")
        return violations

    for py_file in sorted(core_path.rglob("*.py")):
        try:
            source = py_file.read_text(encoding="utf-8")
            tree = ast.parse(source, filename=str(py_file))
            checker = ImportViolationChecker(str(py_file))
            checker.visit(tree)

            for line_no, message in checker.violations:
                violations.append((str(py_file), line_no, message))

        except SyntaxError as e:
            violations.append((str(py_file), e.lineno or 0, f"Syntax error: {e}"))

    return violations


def main() -> int:
    """Main entry point."""
    root_path = Path(__file__).parent.parent
    violations = check_core_imports(root_path)

    if not violations:
        print("✅ All core imports are valid - no cross-layer violations found")
        return 0

    print("❌ Cross-layer import violations found:")
    print()

    for file_path, line_no, message in violations:
        rel_path = Path(file_path).relative_to(root_path)
        print(f"  {rel_path}:{line_no} - {message}")

    print()
    print(f"Total violations: {len(violations)}")
    print()
    print("Core modules must not import polyschema.cli, polyschema.generator or polyschema.options.")

    return 1


if __name__ == "__main__":
    sys.exit(main())
