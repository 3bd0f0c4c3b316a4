from functools import cmp_to_key

import pytest

from sortsmith.core.compare import (
    ComparisonError,
    Direction,
    NilPlacement,
    build_comparator,
    compare_values,
    derive_value,
)
from sortsmith.core.step import Step


def test_compare_values_three_way():
    assert compare_values(1, 2) == -1
    assert compare_values(2, 1) == 1
    assert compare_values(1, 1) == 0
    assert compare_values("a", "b") == -1


def test_nils_last_places_none_after_values():
    assert compare_values(None, 1, nils=NilPlacement.LAST) == 1
    assert compare_values(1, None, nils=NilPlacement.LAST) == -1


def test_nils_first_places_none_before_values():
    assert compare_values(None, 1, nils=NilPlacement.FIRST) == -1
    assert compare_values(1, None, nils=NilPlacement.FIRST) == 1


def test_two_nones_are_equal():
    assert compare_values(None, None, nils=NilPlacement.FIRST) == 0
    assert compare_values(None, None, nils=NilPlacement.LAST) == 0


def test_incompatible_types_raise_comparison_error():
    with pytest.raises(ComparisonError) as excinfo:
        compare_values("string", 42)

    err = excinfo.value
    message = str(err)
    assert isinstance(err, TypeError)
    assert message.startswith("Cannot compare values during sort")
    assert "'string' (str)" in message
    assert "42 (int)" in message
    assert err.left == "string"
    assert err.right == 42


def test_comparison_error_hints_at_missing_extraction():
    with pytest.raises(ComparisonError) as excinfo:
        compare_values({"name": "a"}, {"name": "b"}, has_extraction=False)

    message = str(excinfo.value)
    assert "dict" in message
    assert "missing an extraction method" in message
    assert excinfo.value.has_extraction is False


def test_comparison_error_with_extraction_mentions_incompatible_types():
    with pytest.raises(ComparisonError) as excinfo:
        compare_values({"a": 1}, {"b": 2}, has_extraction=True)

    message = str(excinfo.value)
    assert "missing an extraction method" not in message
    assert "incompatible types" in message


def test_derive_value_applies_steps_in_order():
    steps = [Step.dig("user", "name"), Step.case_fold("upper")]

    assert derive_value({"user": {"name": "ann"}}, steps) == "ANN"
    assert derive_value("raw", []) == "raw"


def test_build_comparator_applies_steps_to_both_operands():
    cmp = build_comparator([Step.dig("name"), Step.case_fold("lower")])
    items = [{"name": "bob"}, {"name": "Alice"}, {"name": "carol"}]

    ordered = sorted(items, key=cmp_to_key(cmp))

    assert [i["name"] for i in ordered] == ["Alice", "bob", "carol"]


def test_build_comparator_ignores_ordering_steps_and_honours_nils():
    cmp = build_comparator([Step.dig("n"), Step.order("desc")], nils="first")
    items = [{"n": 2}, {"n": None}, {"n": 1}]

    ordered = sorted(items, key=cmp_to_key(cmp))

    assert [i["n"] for i in ordered] == [None, 1, 2]


def test_direction_normalize():
    assert Direction.normalize(None) == "asc"
    assert Direction.normalize("DESC") == "desc"
    assert Direction.normalize("ascending") == "asc"
    assert Direction.is_descending("desc")
    with pytest.raises(ValueError, match="Invalid sort direction"):
        Direction.normalize("up")


def test_nil_placement_normalize():
    assert NilPlacement.normalize(None) == "last"
    assert NilPlacement.normalize("First") == "first"
    assert NilPlacement.normalize("nil_last") == "last"
    with pytest.raises(ValueError, match="Invalid nil placement"):
        NilPlacement.normalize("middle")
