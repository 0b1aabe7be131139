"""A small polymorphic model and the schemas generated for it.

Run from the repository root:

    python examples/shapes.py build/schemas
"""

import datetime as dt
import pathlib
import sys
from typing import List, Optional

from pydantic import BaseModel, Field

from polyschema import (
    Instant,
    SchemaGenerator,
    SchemaWriter,
    generates_schema,
    json_type_info,
    to_minified_json,
)


@json_type_info(property="@type")
class Shape(BaseModel):
    pass


class Circle(Shape):
    radius: float


class Square(Shape):
    side: float


@generates_schema
class Drawing(BaseModel):
    name: str = Field(description="Display name of the drawing")
    shapes: List[Shape] = Field(default_factory=list)
    created: Instant
    modified: Optional[dt.datetime] = None


if __name__ == "__main__":
    out = pathlib.Path(sys.argv[1] if len(sys.argv) > 1 else "build/schemas")

    generator = SchemaGenerator()
    generator.register_sub_types([Drawing])
    path = SchemaWriter(out).write(generator.generate_schema(Drawing))
    print(path.read_text())

    drawing = Drawing(
        name="example",
        shapes=[Circle(radius=1.0), Square(side=2.0)],
        created=Instant(seconds=1_700_000_000),
    )
    print(to_minified_json(drawing))
