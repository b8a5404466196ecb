"""
Converts evaluated values into host-native structures.

This is the only place evaluated values cross the outer boundary: records
become plain dicts, byte strings become lists of small integers, arrays become
lists, and scalars pass through unchanged.
"""

import datetime
from typing import Any, Optional, Set

from cairn.exceptions import ErrorCode, SerializationError

from .evaluator import type_name


def to_host_value(value: Any, _active: Optional[Set[int]] = None) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if isinstance(value, (bytes, bytearray)):
        return list(value)

    # YAML timestamps; ISO text is the representation JSON hosts expect.
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()

    if not isinstance(value, (dict, list, tuple, set)):
        raise SerializationError(ErrorCode.UNSERIALIZABLE_VALUE, provided=type_name(value))

    # YAML anchors can make a container its own descendant.
    active = set() if _active is None else _active
    if id(value) in active:
        raise SerializationError(ErrorCode.CYCLIC_VALUE, provided=type_name(value))

    active.add(id(value))
    try:
        if isinstance(value, dict):
            result = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise SerializationError(ErrorCode.NON_STRING_KEY, provided=type_name(key))
                result[key] = to_host_value(item, active)
            return result
        return [to_host_value(item, active) for item in value]
    finally:
        active.discard(id(value))
