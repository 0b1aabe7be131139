#!/usr/bin/env python3
"""
Generate schema documents for the example models.

This script scans the example modules for ``@generates_schema`` models and
writes one YAML schema per model to the schemas/ directory.
"""

import sys
from pathlib import Path
from typing import List, Optional

from polyschema.core.output import DirectoryTreeOutputLocationStrategy, OutputLocationStrategy
from polyschema.core.scanning import scan_for_schema_types
from polyschema.core.schema import SchemaGenerator
from polyschema.core.scope import ScopeFilter
from polyschema.core.writer import SchemaWriter

EXAMPLE_MODULES = ["examples.shapes"]


def generate_schema(
    generator: SchemaGenerator,
    model_class: type,
    output_dir: Path,
    location: Optional[OutputLocationStrategy] = None,
) -> Path:
    """Generate the schema for a model and save it under ``output_dir``."""
    writer = SchemaWriter(output_dir, location or DirectoryTreeOutputLocationStrategy())
    path = writer.write(generator.generate_schema(model_class))
    print(f"Generated schema: {path}")
    return path


def main(modules: Optional[List[str]] = None, output_dir: Optional[Path] = None) -> int:
    """Generate schemas for every example model."""
    base_path = output_dir or Path(__file__).parent.parent / "schemas"
    scope = ScopeFilter.of(modules=modules or EXAMPLE_MODULES)

    models = scan_for_schema_types(scope)
    generator = SchemaGenerator()
    generator.register_sub_types(models)

    failures = 0
    for model_class in models:
        try:
            generate_schema(generator, model_class, base_path)
        except Exception as e:
            failures += 1
            print(f"Error generating schema for {model_class.__name__}: {e}")

    print(f"\nSchemas generated in: {base_path}")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
