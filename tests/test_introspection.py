"""Tests for the pydantic introspector and naming helpers."""

import logging
from enum import Enum
from typing import Annotated, Any, Dict, FrozenSet, List, Literal, Optional, Tuple, TypeVar, Union

import pytest
import yaml
from pydantic import BaseModel, Field, computed_field

from polyschema.core.errors import IntrospectionError
from polyschema.core.introspection import PydanticIntrospector, ShapeKind
from polyschema.core.markers import (
    JsonRequired,
    json_sub_types,
    json_type_info,
    json_type_name,
)
from polyschema.core.naming import schema_file_stem, subtype_name, type_name
from polyschema.core.schema import SchemaGenerator

introspector = PydanticIntrospector()


class Colour(str, Enum):
    RED = "red"
    BLUE = "blue"


class TestShapeOf:
    """Structural shapes of annotations."""

    @pytest.mark.parametrize(
        "annotation, kind",
        [
            (Any, ShapeKind.ANY),
            (int, ShapeKind.LEAF),
            (Colour, ShapeKind.LEAF),
            (Literal["a", "b"], ShapeKind.LEAF),
            (List[int], ShapeKind.ARRAY),
            (FrozenSet[str], ShapeKind.ARRAY),
            (Tuple[int, ...], ShapeKind.ARRAY),
            (Dict[str, int], ShapeKind.MAP),
            (Union[int, str], ShapeKind.UNION),
            (Optional[int], ShapeKind.UNION),
            (Annotated[int, "meta"], ShapeKind.LEAF),
        ],
    )
    def test_kinds(self, annotation, kind):
        assert introspector.shape_of(annotation).kind is kind

    def test_optional_is_nullable_union(self):
        shape = introspector.shape_of(Optional[int])

        assert shape.nullable
        assert shape.options == (int,)

    def test_fixed_tuple(self):
        shape = introspector.shape_of(Tuple[int, str])

        assert shape.fixed
        assert shape.elements == (int, str)

    def test_enum_values(self):
        assert introspector.shape_of(Colour).enum_values == ("red", "blue")

    def test_type_var_uses_bound(self):
        class Bound(BaseModel):
            pass

        T = TypeVar("T", bound=Bound)

        shape = introspector.shape_of(T)

        assert shape.kind is ShapeKind.OBJECT
        assert shape.type is Bound

    def test_unsupported_type(self):
        class Opaque:
            pass

        with pytest.raises(IntrospectionError):
            introspector.shape_of(Opaque)


class TestProperties:
    """Field level information."""

    def test_public_names_and_requirements(self):
        class Model(BaseModel):
            plain: str
            aliased: int = Field(alias="renamed")
            maybe: Optional[str] = None
            forced: Annotated[Optional[str], JsonRequired()] = None

        props = {p.name: p for p in introspector.properties(Model)}

        assert props["aliased"].public_name == "renamed"
        assert props["plain"].required
        assert not props["maybe"].required
        assert props["maybe"].optional_wrapper
        assert props["forced"].required
        assert props["forced"].conflicting_requirement

    def test_computed_fields_are_required(self):
        class Model(BaseModel):
            a: int

            @computed_field
            @property
            def double(self) -> int:
                return self.a * 2

        props = {p.name: p for p in introspector.properties(Model)}

        assert props["double"].required
        assert props["double"].read_only
        assert props["double"].annotation is int

    def test_conflicting_requirement_is_logged_and_required_wins(self, caplog):
        class Model(BaseModel):
            forced: Annotated[Optional[str], JsonRequired()] = None

        with caplog.at_level(logging.WARNING, logger="polyschema"):
            document = SchemaGenerator(clock=lambda: 0).generate_schema(Model)

        assert "Property 'forced'" in caplog.text
        assert yaml.safe_load(document.text)["required"] == ["forced"]

    def test_unresolvable_forward_reference(self):
        class Model(BaseModel):
            other: "DoesNotExist"  # noqa: F821

        with pytest.raises(IntrospectionError):
            introspector.properties(Model)


class TestPolymorphismMarkers:
    """Open vs closed hierarchies and discriminator names."""

    def test_open_polymorphic(self):
        @json_type_info()
        class Base(BaseModel):
            pass

        class Sub(Base):
            pass

        assert introspector.is_open_polymorphic(Base)
        assert introspector.is_open_polymorphic(Sub)
        assert introspector.discriminator(Sub) == "@type"

    def test_closed_list_is_not_open(self):
        @json_type_info(property="kind")
        class Base(BaseModel):
            pass

        class Sub(Base):
            pass

        json_sub_types(Base, (Sub, "s"))

        assert not introspector.is_open_polymorphic(Base)
        assert not introspector.is_open_polymorphic(Sub)
        assert introspector.explicit_sub_types(Base) == [(Sub, "s")]

    def test_closed_list_rejects_non_subtypes(self):
        class Base(BaseModel):
            pass

        with pytest.raises(TypeError):
            json_sub_types(Base, str)

    def test_plain_model_is_not_polymorphic(self):
        class Plain(BaseModel):
            pass

        assert not introspector.is_open_polymorphic(Plain)
        assert introspector.discriminator(Plain) is None


class TestNaming:
    """Discriminator values and file stems."""

    def test_subtype_name_drops_base_suffix(self):
        class Shape:
            pass

        class CircleShape(Shape):
            pass

        class SubType1(Shape):
            pass

        assert subtype_name(CircleShape, Shape) == "circle"
        assert subtype_name(SubType1, Shape) == "sub_type1"

    def test_declared_name_wins(self):
        @json_type_info()
        class Base(BaseModel):
            pass

        @json_type_name("custom")
        class Named(Base):
            pass

        assert type_name(Named) == "custom"

    def test_schema_file_stem(self):
        class Local:
            class Nested:
                pass

        assert schema_file_stem(Local.Nested).endswith("test_schema_file_stem$Local$Nested")
