import pytest

from cairn.exceptions import ErrorCode, EvaluationError, SerializationError
from cairn.loader.pipeline import load_config_sync
from cairn.resolver.memory import MemoryResolver


def evaluate_source(source: str, **extra_files):
    """Loads `source` as /main.cairn, with optional sibling documents."""
    files = {"/main.cairn": source}
    files.update({f"/{name}": text for name, text in extra_files.items()})
    return load_config_sync(MemoryResolver(files), "/main.cairn")


def test_let_bindings_records_and_arrays():
    value = evaluate_source('let x = 2 in { a = x * 3, b = [x, "s" ++ "t"], c = null }')

    assert value == {"a": 6, "b": [2, "st"], "c": None}


def test_deep_merge_right_wins():
    value = evaluate_source("{ a = { b = 1, c = 2 }, keep = true } & { a = { c = 3 } }")

    assert value == {"a": {"b": 1, "c": 3}, "keep": True}


def test_functions_capture_their_scope():
    value = evaluate_source("let base = 10 in let add = fun a b => a + b + base in add(1, 2)")

    assert value == 13


def test_conditionals_and_comparisons():
    assert evaluate_source('if 1 < 2 then "yes" else "no"') == "yes"
    assert evaluate_source('if "a" == "b" || !true then 1 else 2') == 2


def test_equality_distinguishes_booleans_from_numbers():
    assert evaluate_source("1 == true") is False
    assert evaluate_source("[1, 2] != [1, 2]") is False


def test_division_keeps_integers_when_exact():
    assert evaluate_source("6 / 3") == 2
    assert evaluate_source("7 / 2") == 3.5
    assert evaluate_source("7 % 4") == 3


def test_array_concatenation():
    assert evaluate_source("[1] ++ [2, 3]") == [1, 2, 3]


def test_logical_operators_short_circuit():
    assert evaluate_source("false && missing") is False
    assert evaluate_source("true || missing") is True


def test_field_access_on_imported_document():
    value = evaluate_source('(import "base.cairn").port + 1', **{"base.cairn": "{ port = 8080 }"})

    assert value == 8081


def test_unbound_identifier_points_at_the_name():
    # --- ACT & ASSERT ---
    with pytest.raises(EvaluationError) as exc_info:
        evaluate_source("{\n  a = missing\n}")

    error = exc_info.value
    assert error.code == ErrorCode.UNBOUND_IDENTIFIER
    assert error.path == "/main.cairn"
    assert error.range.as_tuple() == (1, 6, 1, 13)


def test_missing_field():
    with pytest.raises(EvaluationError) as exc_info:
        evaluate_source("{ a = 1 }.b")

    assert exc_info.value.code == ErrorCode.MISSING_FIELD


def test_duplicate_field():
    with pytest.raises(EvaluationError) as exc_info:
        evaluate_source("{ a = 1, a = 2 }")

    assert exc_info.value.code == ErrorCode.DUPLICATE_FIELD


def test_division_by_zero():
    with pytest.raises(EvaluationError) as exc_info:
        evaluate_source("1 / 0")

    assert exc_info.value.code == ErrorCode.DIVISION_BY_ZERO


def test_operator_type_mismatch():
    with pytest.raises(EvaluationError) as exc_info:
        evaluate_source('1 + "a"')

    error = exc_info.value
    assert error.code == ErrorCode.OPERATOR_TYPE_MISMATCH
    assert "'+'" in str(error)
    assert "number" in str(error) and "string" in str(error)


def test_condition_must_be_boolean():
    with pytest.raises(EvaluationError) as exc_info:
        evaluate_source("if 1 then 2 else 3")

    assert exc_info.value.code == ErrorCode.CONDITION_NOT_BOOLEAN


def test_calling_with_wrong_arity():
    with pytest.raises(EvaluationError) as exc_info:
        evaluate_source("let f = fun a => a in f(1, 2)")

    assert exc_info.value.code == ErrorCode.ARGUMENT_COUNT_MISMATCH


def test_calling_a_non_function():
    with pytest.raises(EvaluationError) as exc_info:
        evaluate_source("let f = 3 in f(1)")

    assert exc_info.value.code == ErrorCode.NOT_A_FUNCTION


def test_function_value_cannot_be_serialized():
    with pytest.raises(SerializationError) as exc_info:
        evaluate_source("{ f = fun x => x }")

    assert exc_info.value.code == ErrorCode.UNSERIALIZABLE_VALUE
