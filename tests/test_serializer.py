import datetime

import pytest

from cairn.exceptions import ErrorCode, SerializationError
from cairn.loader.serializer import to_host_value


def test_nested_structures_become_plain_python():
    value = {"a": (1, 2), "b": {"c": [True, None, 1.5, "x"]}}

    assert to_host_value(value) == {"a": [1, 2], "b": {"c": [True, None, 1.5, "x"]}}


def test_bytes_become_integer_lists():
    assert to_host_value({"blob": b"\x00\xffA"}) == {"blob": [0, 255, 65]}
    assert to_host_value(bytearray(b"hi")) == [104, 105]


def test_dates_become_iso_strings():
    assert to_host_value(datetime.date(2024, 2, 29)) == "2024-02-29"


def test_non_string_keys_are_rejected():
    with pytest.raises(SerializationError) as exc_info:
        to_host_value({1: "one"})

    assert exc_info.value.code == ErrorCode.NON_STRING_KEY


def test_unknown_values_are_rejected():
    with pytest.raises(SerializationError) as exc_info:
        to_host_value({"x": object()})

    assert exc_info.value.code == ErrorCode.UNSERIALIZABLE_VALUE


def test_self_containing_value_is_rejected():
    looped = []
    looped.append(looped)

    with pytest.raises(SerializationError) as exc_info:
        to_host_value({"a": looped})

    assert exc_info.value.code == ErrorCode.CYCLIC_VALUE


def test_shared_value_is_not_a_cycle():
    shared = {"port": 1}

    assert to_host_value([shared, {"again": shared}]) == [{"port": 1}, {"again": {"port": 1}}]
