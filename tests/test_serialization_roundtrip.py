"""Generated schemas accept what serialization produces and reject malformed data."""

import datetime as dt
from decimal import Decimal
from uuid import UUID

import pytest
import yaml

from polyschema.core.formats import Instant
from polyschema.core.schema import SchemaGenerator
from polyschema.core.scope import ScopeFilter
from polyschema.core.serialization import to_jsonable, to_minified_json
from polyschema.core.validation import validate_payload

from _fixtures.models import (
    Bike,
    Car,
    Circle,
    Drawing,
    Event,
    Garage,
    Meter,
    Shape,
    Square,
)


@pytest.fixture(scope="module")
def generator():
    generator = SchemaGenerator(ScopeFilter.of(packages=["_fixtures"]), clock=lambda: 0)
    generator.register_sub_types([Shape, Drawing, Garage, Event])
    return generator


def schema_for(generator, type_):
    return yaml.safe_load(generator.generate_schema(type_).text)


class TestShapes:
    """The Circle / Square scenario."""

    def test_shape_schema_lists_circle_before_square(self, generator):
        schema = schema_for(generator, Shape)

        assert schema["oneOf"] == [
            {"$ref": "#/definitions/Circle"},
            {"$ref": "#/definitions/Square"},
        ]
        assert schema["definitions"]["Circle"]["properties"]["@type"] == {
            "type": "string",
            "enum": ["circle"],
            "default": "circle",
        }
        assert schema["definitions"]["Square"]["properties"]["@type"]["default"] == "square"

    def test_accepts_valid_circle(self, generator):
        valid, errors = validate_payload({"@type": "circle", "radius": 1}, schema_for(generator, Shape))

        assert valid, errors

    def test_rejects_unknown_discriminator(self, generator):
        valid, errors = validate_payload({"@type": "triangle"}, schema_for(generator, Shape))

        assert not valid
        assert errors

    def test_rejects_wrong_property_for_type(self, generator):
        valid, _ = validate_payload({"@type": "circle", "side": 1}, schema_for(generator, Shape))

        assert not valid

    def test_serialized_instances_validate(self, generator):
        schema = schema_for(generator, Shape)

        for shape in (Circle(radius=1.5), Square(side=2)):
            valid, errors = validate_payload(to_jsonable(shape), schema)
            assert valid, errors

    def test_minified_json_carries_discriminator(self):
        assert to_minified_json(Circle(radius=1)) == '{"@type":"circle","radius":1.0}'


class TestRoundTrip:
    """Whole documents round-trip through serialization and validation."""

    def test_drawing(self, generator):
        drawing = Drawing(name="d", shapes=[Circle(radius=1), Square(side=2)])
        schema = schema_for(generator, Drawing)

        valid, errors = validate_payload(to_jsonable(drawing), schema)
        assert valid, errors

        payload = to_jsonable(drawing)
        payload["shapes"][0]["@type"] = "triangle"
        assert not validate_payload(payload, schema)[0]

    def test_drawing_rejects_missing_required(self, generator):
        valid, errors = validate_payload({"shapes": []}, schema_for(generator, Drawing))

        assert not valid
        assert any("'name' is a required property" in e for e in errors)

    def test_closed_list_uses_declared_names(self, generator):
        garage = Garage(vehicles={"mine": Bike(wheels=2), "yours": Car(wheels=4)})
        payload = to_jsonable(garage)

        assert payload["vehicles"]["mine"]["kind"] == "bicycle"
        assert payload["vehicles"]["yours"]["kind"] == "car"

        valid, errors = validate_payload(payload, schema_for(generator, Garage))
        assert valid, errors

    def test_formats(self, generator):
        event = Event(
            id=UUID("12345678-1234-5678-1234-567812345678"),
            occurred=Instant(seconds=10, nanos=5),
            recorded=dt.datetime(2024, 1, 2, 3, 4, 5, tzinfo=dt.timezone.utc),
            day=dt.date(2024, 1, 2),
            amount=Decimal("12.50"),
            ttl=dt.timedelta(minutes=1),
        )
        payload = to_jsonable(event)

        assert payload["occurred"] == {"nanos": 5, "seconds": 10}
        assert payload["amount"] == 12.5
        assert payload["note"] is None

        valid, errors = validate_payload(payload, schema_for(generator, Event))
        assert valid, errors

    def test_numeric_durations(self):
        assert to_jsonable(Meter(ttl=dt.timedelta(seconds=90))) == {"ttl": 90.0}


def test_instant_from_datetime():
    instant = Instant.from_datetime(dt.datetime(1970, 1, 1, 0, 0, 1, 500, tzinfo=dt.timezone.utc))

    assert instant == Instant(seconds=1, nanos=500_000)
