from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


PRIMITIVE_TYPES = (str, int, float, bool, type(None))


def serialize(obj: Any):
    """
    Serialize core results (layout, curves, validation, view states) into
    JSON-compatible structures.
    Nodes and edges go through the persistence codec instead.
    """

    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, PRIMITIVE_TYPES):
        return obj

    if isinstance(obj, (list, tuple)):
        return [serialize(item) for item in obj]

    if isinstance(obj, dict):
        return {k: serialize(v) for k, v in obj.items()}

    if is_dataclass(obj):
        return {
            f.name: serialize(getattr(obj, f.name))
            for f in fields(obj)
            if not f.name.startswith("_")
        }

    return str(obj)
