"""Core schema generation engine for polyschema."""

from .errors import (
    CoreError,
    ErrorCode,
    IntrospectionError,
    SubtypeLookupError,
    SchemaBuildError,
    OutputWriteError,
    InvalidArgumentsError,
    wrap_exception,
)
from .markers import (
    JsonRequired,
    TypeInfo,
    generates_schema,
    json_property_order,
    json_sub_types,
    json_type_info,
    json_type_name,
)
from .formats import Instant
from .scope import ScopeFilter
from .introspection import PydanticIntrospector, TypeIntrospector
from .locator import SubclassLocator, SubtypeLocator
from .polymorphic import (
    PolymorphicRegistry,
    PolymorphicType,
    PolymorphicTypeResolver,
    find_polymorphic_types,
)
from .schema import SchemaDocument, SchemaGenerator
from .output import (
    DirectoryTreeOutputLocationStrategy,
    FlatDirectoryOutputLocationStrategy,
    OutputLocationStrategy,
)
from .writer import SchemaWriter, deliver
from .scanning import scan_for_schema_types
from .serialization import to_jsonable, to_minified_json
from .validation import load_schema_document, validate_payload

__all__ = [
    # Error classes
    "CoreError",
    "ErrorCode",
    "IntrospectionError",
    "SubtypeLookupError",
    "SchemaBuildError",
    "OutputWriteError",
    "InvalidArgumentsError",
    "wrap_exception",
    # Markers
    "JsonRequired",
    "TypeInfo",
    "generates_schema",
    "json_property_order",
    "json_sub_types",
    "json_type_info",
    "json_type_name",
    "Instant",
    # Discovery and generation
    "ScopeFilter",
    "PydanticIntrospector",
    "TypeIntrospector",
    "SubclassLocator",
    "SubtypeLocator",
    "PolymorphicRegistry",
    "PolymorphicType",
    "PolymorphicTypeResolver",
    "find_polymorphic_types",
    "SchemaDocument",
    "SchemaGenerator",
    # Output
    "DirectoryTreeOutputLocationStrategy",
    "FlatDirectoryOutputLocationStrategy",
    "OutputLocationStrategy",
    "SchemaWriter",
    "deliver",
    "scan_for_schema_types",
    # Runtime JSON
    "to_jsonable",
    "to_minified_json",
    "load_schema_document",
    "validate_payload",
]
