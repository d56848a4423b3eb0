"""Post-processing passes over presented structs.

Passes run in order: optional fields, dates, datetimes. Each walks nested
dicts and lists and rewrites values in place.
"""

from datetime import datetime
from typing import Any, Collection

from ..utils.time import date_to_string, datetime_to_epoch, is_calendar_date
from .markers import OptionalField


def _walk(struct: Any, convert) -> Any:
    if isinstance(struct, dict):
        for key, value in struct.items():
            struct[key] = _walk(value, convert)
        return struct
    if isinstance(struct, list):
        for index, value in enumerate(struct):
            struct[index] = _walk(value, convert)
        return struct
    if isinstance(struct, tuple):
        return tuple(_walk(value, convert) for value in struct)
    return convert(struct)


def load_optional_fields(struct: Any, fields: Collection[str]) -> Any:
    """Replace requested OptionalFields with their value and drop the rest."""
    if isinstance(struct, dict):
        for key, value in list(struct.items()):
            if isinstance(value, OptionalField):
                if key in fields:
                    struct[key] = value.compute()
                else:
                    del struct[key]
            else:
                load_optional_fields(value, fields)
    elif isinstance(struct, (list, tuple)):
        for value in struct:
            load_optional_fields(value, fields)
    return struct


def dates_to_strings(struct: Any) -> Any:
    return _walk(struct, lambda v: date_to_string(v) if is_calendar_date(v) else v)


def datetimes_to_epoch(struct: Any) -> Any:
    return _walk(struct, lambda v: datetime_to_epoch(v) if isinstance(v, datetime) else v)


def process_fields(struct: Any, fields: Collection[str]) -> Any:
    load_optional_fields(struct, fields)
    struct = dates_to_strings(struct)
    return datetimes_to_epoch(struct)
