"""Draft-07 schema generation for pydantic models with name-discriminated polymorphism."""

from .core import (
    CoreError,
    Instant,
    JsonRequired,
    ScopeFilter,
    SchemaDocument,
    SchemaGenerator,
    SchemaWriter,
    generates_schema,
    json_property_order,
    json_sub_types,
    json_type_info,
    json_type_name,
    to_jsonable,
    to_minified_json,
)

__all__ = [
    "CoreError",
    "Instant",
    "JsonRequired",
    "ScopeFilter",
    "SchemaDocument",
    "SchemaGenerator",
    "SchemaWriter",
    "generates_schema",
    "json_property_order",
    "json_sub_types",
    "json_type_info",
    "json_type_name",
    "to_jsonable",
    "to_minified_json",
]
