"""
Tests for the insertion compositor.
"""
from datameq.allocation.compositor import compose, group_inserts
from datameq.allocation.types import InsertSpec


def test_inserts_before_kth_line_and_at_end():
    lines = compose(
        ["a", "b", "c"],
        [InsertSpec(1, "X"), InsertSpec(2, "Y"), InsertSpec(4, "Z")],
    )
    assert lines == ["X", "a", "Y", "b", "c", "Z"]


def test_no_inserts_keeps_lines():
    assert compose(["a", "b"], []) == ["a", "b"]


def test_invalid_inserts_are_ignored():
    inserts = [InsertSpec(0, "zero"), InsertSpec(-3, "neg"), InsertSpec(2, "   "), InsertSpec(2, "")]
    assert compose(["a", "b"], inserts) == ["a", "b"]


def test_same_position_keeps_input_order():
    lines = compose(["a", "b"], [InsertSpec(2, "first"), InsertSpec(2, "second")])
    assert lines == ["a", "first", "second", "b"]


def test_position_past_end_is_clamped_to_end():
    lines = compose(["a", "b"], [InsertSpec(9, "far"), InsertSpec(3, "end")])
    assert lines == ["a", "b", "far", "end"]


def test_inserts_into_empty_combined():
    lines = compose([], [InsertSpec(5, "only"), InsertSpec(1, "first")])
    assert lines == ["only", "first"]


def test_insert_text_is_not_trimmed():
    assert compose(["a"], [InsertSpec(1, "  padded ")]) == ["  padded ", "a"]


def test_output_length_counts_valid_inserts_only():
    combined = [f"l{i}" for i in range(10)]
    inserts = [InsertSpec(1, "x"), InsertSpec(0, "no"), InsertSpec(5, "y"), InsertSpec(11, "z")]
    assert len(compose(combined, inserts)) == 13


def test_group_inserts():
    grouped = group_inserts([InsertSpec(1, "a"), InsertSpec(7, "b"), InsertSpec(0, "c")], 2)
    assert dict(grouped) == {1: ["a"], 3: ["b"]}
