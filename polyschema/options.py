"""Generator options and environment-backed defaults.

Resolution order: CLI flags > env vars (POLYSCHEMA_*) > defaults.
"""

from __future__ import annotations
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.output import (
    DirectoryTreeOutputLocationStrategy,
    FlatDirectoryOutputLocationStrategy,
    OutputLocationStrategy,
)
from .core.scope import ScopeFilter


class OutputStrategy(str, Enum):
    DIRECTORY_TREE = "directoryTree"
    FLAT_DIRECTORY = "flatDirectory"

    def location_strategy(self) -> OutputLocationStrategy:
        if self is OutputStrategy.FLAT_DIRECTORY:
            return FlatDirectoryOutputLocationStrategy()
        return DirectoryTreeOutputLocationStrategy()


class GeneratorSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="POLYSCHEMA_", extra="ignore")

    output_directory_strategy: OutputStrategy = OutputStrategy.DIRECTORY_TREE
    verbose: bool = False
    log_file: Optional[Path] = None


class GeneratorOptions(BaseModel):
    """Everything a generator run needs."""

    model_config = ConfigDict(frozen=True)

    echo_only: bool = False
    output_directory: Path
    output_directory_strategy: OutputStrategy = OutputStrategy.DIRECTORY_TREE
    type_scanning: ScopeFilter = Field(default_factory=ScopeFilter)
    subtype_scanning: ScopeFilter = Field(default_factory=ScopeFilter)

    def location_strategy(self) -> OutputLocationStrategy:
        return self.output_directory_strategy.location_strategy()

    def __str__(self) -> str:
        return (
            f"--output-directory={self.output_directory}\n"
            f"--output-directory-strategy={self.output_directory_strategy.value}\n"
            f"--type-scanning={self.type_scanning}\n"
            f"--subtype-scanning={self.subtype_scanning}"
        )
