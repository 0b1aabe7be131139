from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml
from jsonschema import Draft7Validator


def load_schema_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a generated schema document; the leading timestamp comment is ignored by YAML."""
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def validate_payload(payload: Any, schema: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """Validate payload against schema. Returns (is_valid, error_messages)."""
    validator = Draft7Validator(schema)
    errors = []

    for error in sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path]):
        path = " -> ".join(str(p) for p in error.absolute_path) if error.absolute_path else "root"
        errors.append(f"At '{path}': {error.message}")

    return len(errors) == 0, errors
