"""Tests for sqlspine.binding.processors."""

from __future__ import annotations

import pytest

from sqlspine.binding.processors import (
    compound_condition,
    direct_processor,
    equals_processor,
    greater_processor,
    lesser_processor,
    like_processor,
    processors,
    raw_processor,
)


class TestProcessorTable:
    def test_all_flags_registered(self):
        assert set(processors()) == {
            "id", "*id", "=id", "!id", ">id", ">=id", "<id", "<=id", "%id", "%id%", "id%",
        }

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            processors()["~id"] = direct_processor()  # type: ignore[index]


class TestDirect:
    def test_scalar(self):
        assert direct_processor()("a", 1) == ("?", [1])

    def test_sequence(self):
        assert direct_processor()("a", [1, 2, 3]) == ("?, ?, ?", [1, 2, 3])

    def test_tuple(self):
        assert direct_processor()("a", (1, 2)) == ("?, ?", [1, 2])

    def test_none_is_bound(self):
        assert direct_processor()("a", None) == ("?", [None])

    def test_empty_sequence(self):
        assert direct_processor()("a", []) == ("", [])


class TestRaw:
    def test_scalar(self):
        assert raw_processor()("a", "users") == ("users", [])

    def test_sequence_is_comma_joined(self):
        assert raw_processor()("a", ["id", "name"]) == ("id, name", [])

    def test_numbers_rendered_as_text(self):
        assert raw_processor()("a", 10) == ("10", [])

    def test_none_rendered_empty(self):
        assert raw_processor()("a", None) == ("", [])

    def test_booleans_rendered_as_digits(self):
        assert raw_processor()("a", [True, False]) == ("1, 0", [])


class TestEquals:
    def test_scalar(self):
        assert equals_processor(False)("a", 1) == ("a = ?", [1])

    def test_single_element_sequence_degenerates(self):
        assert equals_processor(False)("a", [1]) == ("a = ?", [1])

    def test_multiple_values(self):
        assert equals_processor(False)("a", [1, 2]) == ("a in (?, ?)", [1, 2])

    def test_negated_scalar(self):
        assert equals_processor(True)("a", 1) == ("a != ?", [1])

    def test_negated_single_element(self):
        assert equals_processor(True)("a", [1]) == ("a != ?", [1])

    def test_negated_multiple(self):
        assert equals_processor(True)("a", [1, 2]) == ("a not in (?, ?)", [1, 2])

    def test_empty_sequence_binds_none(self):
        assert equals_processor(False)("a", []) == ("a = ?", [None])

    def test_negated_empty_sequence_binds_none(self):
        assert equals_processor(True)("a", ()) == ("a != ?", [None])


class TestComparison:
    @pytest.mark.parametrize(
        "processor, op",
        [
            (greater_processor(False), ">"),
            (greater_processor(True), ">="),
            (lesser_processor(False), "<"),
            (lesser_processor(True), "<="),
        ],
    )
    def test_scalar(self, processor, op):
        assert processor("a", 1) == (f"a {op} ?", [1])

    @pytest.mark.parametrize(
        "processor, op",
        [
            (greater_processor(False), ">"),
            (greater_processor(True), ">="),
            (lesser_processor(False), "<"),
            (lesser_processor(True), "<="),
        ],
    )
    def test_multiple_values_are_or_joined(self, processor, op):
        assert processor("a", [1, 2]) == (f"(a {op} ? or a {op} ?)", [1, 2])

    def test_single_element_sequence_not_parenthesized(self):
        assert greater_processor(False)("a", [5]) == ("a > ?", [5])


class TestLike:
    def test_prefix_wildcard(self):
        assert like_processor(True, False)("a", "b") == ("a like ?", ["%b"])

    def test_both_wildcards(self):
        assert like_processor(True, True)("a", "b") == ("a like ?", ["%b%"])

    def test_suffix_wildcard(self):
        assert like_processor(False, True)("a", "b") == ("a like ?", ["b%"])

    def test_multiple_values(self):
        assert like_processor(True, False)("a", ["b", "c"]) == (
            "(a like ? or a like ?)",
            ["%b", "%c"],
        )

    def test_none_adds_only_wildcards(self):
        assert like_processor(True, False)("a", None) == ("a like ?", ["%"])
        assert like_processor(True, True)("a", None) == ("a like ?", ["%%"])

    def test_booleans_rendered_as_digits(self):
        assert like_processor(True, False)("a", True) == ("a like ?", ["%1"])
        assert like_processor(False, True)("a", False) == ("a like ?", ["0%"])

    def test_numbers_rendered_as_text(self):
        assert like_processor(True, True)("a", 42) == ("a like ?", ["%42%"])


class TestCompoundCondition:
    def test_three_operands(self):
        sql, values = compound_condition("x", [1, 2, 3], "=")
        assert sql == "(x = ? or x = ? or x = ?)"
        assert values == [1, 2, 3]

    def test_placeholder_count_matches_values(self):
        for values in ([], [1], [1, 2], [1, 2, 3, 4]):
            sql, params = compound_condition("x", values, "<")
            assert sql.count("?") == len(params)
