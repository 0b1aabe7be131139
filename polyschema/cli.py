#!/usr/bin/env python3
"""
CLI for polyschema schema generation and validation.

This module provides command-line tools for generating schema documents for
``@generates_schema`` models and validating JSON payloads against them.
"""

import json
import sys
import argparse
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from .core.errors import CoreError, InvalidArgumentsError, wrap_exception
from .core.scope import ScopeFilter
from .core.validation import load_schema_document, validate_payload
from .generator import generate, generator_version
from .logging import configure_logging
from .options import GeneratorOptions, GeneratorSettings, OutputStrategy


class GeneratorCLI:
    """CLI for generating and validating schema documents."""

    def __init__(self, settings: Optional[GeneratorSettings] = None):
        self.settings = settings or GeneratorSettings()

    def build_options(self, args: argparse.Namespace, usage: str = "") -> GeneratorOptions:
        """Turn parsed arguments into generator options, falling back to settings."""
        strategy = args.output_directory_strategy or self.settings.output_directory_strategy
        try:
            return GeneratorOptions(
                echo_only=args.echo_only,
                output_directory=args.output_directory,
                output_directory_strategy=strategy,
                type_scanning=ScopeFilter.of(
                    modules=args.type_scanning_allowed_modules,
                    packages=args.type_scanning_allowed_packages,
                ),
                subtype_scanning=ScopeFilter.of(
                    modules=args.subtype_scanning_allowed_modules,
                    packages=args.subtype_scanning_allowed_packages,
                ),
            )
        except ValidationError as e:
            raise InvalidArgumentsError(f"Invalid arguments: {e}", usage) from e

    def run_generate(self, args: argparse.Namespace, usage: str = "") -> int:
        """Run generation and return exit code."""
        configure_logging(
            verbose=args.verbose or self.settings.verbose,
            log_file=args.log_file or self.settings.log_file,
        )

        try:
            options = self.build_options(args, usage)
        except InvalidArgumentsError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 2

        try:
            generate(options)
        except CoreError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except Exception as e:
            error = wrap_exception(e, "Schema generation failed", context={"options": str(options)})
            print(f"Error: {error}", file=sys.stderr)
            return 1
        return 0

    def load_payload(self, input_path: str) -> Any:
        """Load payload from file or stdin."""
        if input_path == "-":
            try:
                return json.load(sys.stdin)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON from stdin: {e}")

        file_path = Path(input_path)
        if not file_path.exists():
            raise ValueError(f"Input file not found: {input_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in file {input_path}: {e}")

    def run_validate(self, schema_path: str, input_path: str, verbose: bool = False) -> int:
        """Run validation and return exit code."""
        try:
            if verbose:
                print(f"Loading schema from: {schema_path}")
            if not Path(schema_path).exists():
                raise ValueError(f"Schema not found: {schema_path}")
            schema = load_schema_document(schema_path)

            if verbose:
                input_desc = "stdin" if input_path == "-" else input_path
                print(f"Loading payload from: {input_desc}")
            payload = self.load_payload(input_path)

            if verbose:
                print("Validating payload...")
            is_valid, errors = validate_payload(payload, schema)

            if is_valid:
                print("✅ Payload is valid")
                return 0
            else:
                print("❌ Payload validation failed:")
                for error in errors:
                    print(f"  • {error}")
                return 1

        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polyschema",
        description="polyschema CLI for schema generation and validation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate schemas for every @generates_schema model in a package
  polyschema generate -o build/schemas --type-scanning-allowed-package acme.model

  # One flat directory of files, subtypes limited to acme.*
  polyschema generate -o build/schemas --output-directory-strategy flatDirectory \\
      --type-scanning-allowed-package acme.model --subtype-scanning-allowed-package 'acme.*'

  # Validate a payload from stdin
  cat shape.json | polyschema validate --schema build/schemas/acme/model/Shape.yml --input -
        """,
    )
    parser.add_argument("--version", action="version", version=f"polyschema {generator_version()}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    generate_parser = subparsers.add_parser("generate", help="Generate schema documents")
    generate_parser.add_argument(
        "-e", "--echo-only", action="store_true", help=argparse.SUPPRESS
    )
    generate_parser.add_argument(
        "-o",
        "--output-directory",
        required=True,
        type=Path,
        help="The directory the schemas will be written to.",
    )
    generate_parser.add_argument(
        "--output-directory-strategy",
        choices=[s.value for s in OutputStrategy],
        default=None,
        help="How schema files are laid out under the output directory (default: directoryTree).",
    )
    generate_parser.add_argument(
        "--type-scanning-allowed-module",
        dest="type_scanning_allowed_modules",
        action="append",
        default=[],
        help="Limit the types to generate schemas for to modules matching this glob. Repeatable.",
    )
    generate_parser.add_argument(
        "--type-scanning-allowed-package",
        dest="type_scanning_allowed_packages",
        action="append",
        default=[],
        help="Limit the types to generate schemas for to packages matching this glob. Repeatable.",
    )
    generate_parser.add_argument(
        "--subtype-scanning-allowed-module",
        dest="subtype_scanning_allowed_modules",
        action="append",
        default=[],
        help="Limit the subtypes included in schemas to modules matching this glob. Repeatable.",
    )
    generate_parser.add_argument(
        "--subtype-scanning-allowed-package",
        dest="subtype_scanning_allowed_packages",
        action="append",
        default=[],
        help="Limit the subtypes included in schemas to packages matching this glob. Repeatable.",
    )
    generate_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    generate_parser.add_argument("--log-file", type=Path, default=None, help="Also log to this file")
    generate_parser.set_defaults(usage=generate_parser.format_usage())

    validate_parser = subparsers.add_parser(
        "validate", help="Validate a JSON payload against a generated schema"
    )
    validate_parser.add_argument("--schema", required=True, help="Generated schema document (.yml)")
    validate_parser.add_argument(
        "--input",
        dest="input_path",
        default="-",
        help="Input file path or '-' for stdin (default: stdin)",
    )
    validate_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    cli = GeneratorCLI()

    if args.command == "generate":
        return cli.run_generate(args, args.usage)

    if args.command == "validate":
        return cli.run_validate(args.schema, args.input_path, args.verbose)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
