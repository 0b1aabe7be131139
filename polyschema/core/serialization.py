"""Runtime JSON form of model instances, matching the generated schemas.

Pydantic's own dump knows nothing of the discriminator markers, so instances
are walked here: the discriminator is injected for every class carrying type
info, fields are keyed by their public name, and excluded fields are skipped.
"""

from __future__ import annotations
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping

from pydantic import BaseModel
from pydantic_core import to_json, to_jsonable_python

from . import markers
from .formats import NUMERIC_DURATION_MODES, Instant
from .naming import type_name


def to_jsonable(value: Any, *, exclude_none: bool = False) -> Any:
    return _convert(value, exclude_none, numeric_durations=False)


def to_minified_json(value: Any, *, exclude_none: bool = False) -> str:
    return to_json(to_jsonable(value, exclude_none=exclude_none)).decode("utf-8")


def _convert(value: Any, exclude_none: bool, numeric_durations: bool) -> Any:
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, BaseModel):
        return _model(value, exclude_none)
    if isinstance(value, Enum):
        return _convert(value.value, exclude_none, numeric_durations)
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, Instant):
        return {"nanos": value.nanos, "seconds": value.seconds}
    if isinstance(value, dt.timedelta) and numeric_durations:
        return value.total_seconds()
    if isinstance(value, Mapping):
        return {
            str(_convert(k, exclude_none, numeric_durations)): _convert(
                v, exclude_none, numeric_durations
            )
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_convert(v, exclude_none, numeric_durations) for v in value]
    return to_jsonable_python(value)


def _model(model: BaseModel, exclude_none: bool) -> Dict[str, Any]:
    cls = type(model)
    numeric_durations = cls.model_config.get("ser_json_timedelta") in NUMERIC_DURATION_MODES
    data: Dict[str, Any] = {}

    found = markers.type_info_of(cls)
    discriminator = found[0].property if found is not None else None
    if discriminator:
        data[discriminator] = type_name(cls)

    for name, info in cls.model_fields.items():
        if info.exclude is True:
            continue
        key = info.serialization_alias or info.alias or name
        if key == discriminator:
            continue
        field_value = getattr(model, name)
        if field_value is None and exclude_none:
            continue
        data[key] = _convert(field_value, exclude_none, numeric_durations)

    for name, info in cls.model_computed_fields.items():
        data[info.alias or name] = _convert(getattr(model, name), exclude_none, numeric_durations)

    return data
