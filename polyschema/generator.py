"""Generator entry point: scan, register subtypes, generate and write every schema."""

from __future__ import annotations
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import List

from .core.scanning import scan_for_schema_types
from .core.schema import SchemaGenerator
from .core.writer import SchemaWriter
from .logging import get_logger
from .options import GeneratorOptions

logger = get_logger(__name__)


def generator_version() -> str:
    try:
        return version("polyschema")
    except PackageNotFoundError:
        return "unknown"


def generate(options: GeneratorOptions) -> List[type]:
    """Generate schemas for every ``@generates_schema`` type in scope.

    Returns the types a schema was written for. Any failure aborts the run.
    """
    if options.echo_only:
        _echo(options)
        return []

    types = scan_for_schema_types(options.type_scanning)

    generator = SchemaGenerator(options.subtype_scanning)
    writer = SchemaWriter(options.output_directory, options.location_strategy())
    generator.register_sub_types(types)
    for type_ in types:
        writer.write(generator.generate_schema(type_))

    logger.info("Wrote %d schemas", len(types))
    return types


def _echo(options: GeneratorOptions) -> None:
    logger.info("polyschema: %s", generator_version())
    logger.info("--python-path=%s", ":".join(sys.path))
    logger.info("%s", options)
