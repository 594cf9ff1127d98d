from __future__ import annotations

import pytest

from jobly.errors import ValidationError
from jobly.sql.partial_update import sql_for_partial_update


def test_single_mapped_field() -> None:
    frag = sql_for_partial_update({"firstName": "Aliya"}, {"firstName": "first_name"})

    assert frag.clause == '"first_name"=$1'
    assert frag.values == ("Aliya",)


def test_mapped_and_passthrough_fields_keep_payload_order() -> None:
    frag = sql_for_partial_update(
        {"firstName": "Aliya", "age": 32},
        {"firstName": "first_name"},
    )

    assert frag.clause == '"first_name"=$1, "age"=$2'
    assert frag.values == ("Aliya", 32)


def test_unmapped_field_passes_through_verbatim() -> None:
    frag = sql_for_partial_update({"lastName": "Smith"}, {"firstName": "first_name"})

    assert frag.clause == '"lastName"=$1'
    assert frag.values == ("Smith",)


@pytest.mark.parametrize("field_map", [{}, {"firstName": "first_name"}])
def test_empty_payload_raises_validation_error(field_map) -> None:
    with pytest.raises(ValidationError, match="No data"):
        sql_for_partial_update({}, field_map)


def test_empty_pair_sequence_raises_validation_error() -> None:
    with pytest.raises(ValidationError):
        sql_for_partial_update([], {})


def test_explicit_pairs_preserve_given_order() -> None:
    frag = sql_for_partial_update([("b", 2), ("a", 1)], {})

    assert frag.clause == '"b"=$1, "a"=$2'
    assert frag.values == (2, 1)


def test_null_and_boolean_values_are_bound_not_interpolated() -> None:
    frag = sql_for_partial_update({"equity": None, "active": False, "title": "x'; --"}, {})

    assert frag.clause == '"equity"=$1, "active"=$2, "title"=$3'
    assert frag.values == (None, False, "x'; --")
    assert "x'" not in frag.clause


def test_start_ordinal_offsets_placeholders() -> None:
    frag = sql_for_partial_update({"a": 1, "b": 2}, {}, start_ordinal=4)

    assert frag.clause == '"a"=$4, "b"=$5'
    assert frag.placeholders == [4, 5]
    assert frag.next_ordinal == 6


def test_start_ordinal_below_one_rejected() -> None:
    with pytest.raises(ValueError):
        sql_for_partial_update({"a": 1}, {}, start_ordinal=0)


def test_field_mapped_to_empty_string_is_rejected_not_passed_through() -> None:
    with pytest.raises(ValueError):
        sql_for_partial_update({"firstName": "Aliya"}, {"firstName": ""})


def test_placeholder_count_matches_values() -> None:
    payload = {f"f{i}": i for i in range(7)}
    frag = sql_for_partial_update(payload, {"f3": "col_three"})

    assert len(frag.values) == len(payload)
    assert frag.placeholders == list(range(1, len(payload) + 1))
    assert '"col_three"=$4' in frag.clause


def test_repeated_calls_are_identical() -> None:
    payload = {"firstName": "Aliya", "age": 32}
    field_map = {"firstName": "first_name"}

    assert sql_for_partial_update(payload, field_map) == sql_for_partial_update(payload, field_map)


def test_does_not_mutate_inputs() -> None:
    payload = {"firstName": "Aliya"}
    field_map = {"firstName": "first_name"}
    sql_for_partial_update(payload, field_map)

    assert payload == {"firstName": "Aliya"}
    assert field_map == {"firstName": "first_name"}


@pytest.mark.parametrize("size", range(0, 6))
def test_trailing_id_parameter_continues_ordinals(size: int) -> None:
    payload = {f"col{i}": f"v{i}" for i in range(size)}

    if size == 0:
        with pytest.raises(ValidationError):
            sql_for_partial_update(payload, {})
        return

    frag = sql_for_partial_update(payload, {})
    sql = f"UPDATE t SET {frag.clause} WHERE id = ${frag.next_ordinal}"
    params = [*frag.values, 99]

    assert frag.next_ordinal == size + 1
    assert sql.endswith(f"WHERE id = ${size + 1}")
    # the last placeholder in the statement binds the appended id
    assert params[frag.next_ordinal - 1] == 99
