"""Serialization utilities."""

from dataclasses import asdict
from datetime import datetime

from common.datetime import to_iso


def serialize_dataclass(obj, drop_none: bool = False) -> dict:
    """Serialize a dataclass to a JSON-ready dict.

    Datetimes become canonical UTC strings. With `drop_none`, top-level
    fields that are None are left out.
    """
    data = {}
    for key, value in asdict(obj).items():
        if value is None and drop_none:
            continue
        data[key] = to_iso(value) if isinstance(value, datetime) else value
    return data
