from __future__ import annotations
from pathlib import Path
from typing import Optional, Union

from ..logging import get_logger
from .errors import OutputWriteError
from .output import DirectoryTreeOutputLocationStrategy, OutputLocationStrategy
from .schema import SchemaDocument

logger = get_logger(__name__)


class SchemaWriter:
    """Persists schema documents under an output directory."""

    def __init__(
        self,
        output_dir: Union[str, Path],
        location: Optional[OutputLocationStrategy] = None,
    ):
        self.output_dir = Path(output_dir)
        self.location = location or DirectoryTreeOutputLocationStrategy()

    def write(self, document: SchemaDocument) -> Path:
        return deliver(document, self.output_dir, self.location)


def deliver(document: SchemaDocument, root: Path, location: OutputLocationStrategy) -> Path:
    """Write ``document`` to ``root`` / ``location.output_path(...)``, overwriting any existing file."""
    path = Path(root).resolve() / location.output_path(document.type)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(document.text.encode("utf-8"))
    except OSError as e:
        raise OutputWriteError(document.type_name, path=str(path), original_error=e) from e

    logger.info("Wrote %s's schema to %s", document.type_name, path)
    return path
