"""Where each schema document is written, relative to the output directory."""

from __future__ import annotations
from pathlib import Path
from typing import Protocol

from .naming import schema_file_stem

YAML_EXTENSION = ".yml"


class OutputLocationStrategy(Protocol):
    def output_path(self, type_: type) -> Path: ...


class DirectoryTreeOutputLocationStrategy:
    """One directory per module segment: ``acme.shapes.Shape`` -> ``acme/shapes/Shape.yml``."""

    def output_path(self, type_: type) -> Path:
        return Path(*type_.__module__.split("."), schema_file_stem(type_) + YAML_EXTENSION)

    def __repr__(self) -> str:
        return "DirectoryTreeOutputLocationStrategy()"


class FlatDirectoryOutputLocationStrategy:
    """All files in the output directory: ``acme.shapes.Shape`` -> ``acme.shapes.Shape.yml``."""

    def output_path(self, type_: type) -> Path:
        return Path(f"{type_.__module__}.{schema_file_stem(type_)}{YAML_EXTENSION}")

    def __repr__(self) -> str:
        return "FlatDirectoryOutputLocationStrategy()"
