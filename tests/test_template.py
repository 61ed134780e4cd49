"""Tests for the q() template binder."""

from __future__ import annotations

import pytest

from sqlspine import q
from sqlspine.binding.template import (
    CompiledQuery,
    are_values_scalar,
    next_binding_position,
    parse_expression,
)
from sqlspine.errors import (
    BindingError,
    InvalidValueTypeError,
    MissingIdentifierError,
    TemplateSyntaxError,
    UnknownBindingFlagError,
)

CASES = [
    # Direct processor
    ("where {a}", {"a": 1}, "where ?", [1]),
    ("where {a}", {"a": [1, 2]}, "where ?, ?", [1, 2]),
    # Equality processor with a single value
    ("where {=a}", {"a": 1}, "where a = ?", [1]),
    ("where {=a}", {"a": [1]}, "where a = ?", [1]),
    ("where {!a}", {"a": 1}, "where a != ?", [1]),
    ("where {!a}", {"a": [1]}, "where a != ?", [1]),
    # Equality processor with multiple values
    ("where {=a}", {"a": [1, 2]}, "where a in (?, ?)", [1, 2]),
    ("where {!a}", {"a": [1, 2]}, "where a not in (?, ?)", [1, 2]),
    # Like processor with a single value
    ("where {%a}", {"a": "b"}, "where a like ?", ["%b"]),
    ("where {%a%}", {"a": "b"}, "where a like ?", ["%b%"]),
    ("where {a%}", {"a": "b"}, "where a like ?", ["b%"]),
    # Like processor with multiple values
    ("where {%a}", {"a": ["b", "c"]}, "where (a like ? or a like ?)", ["%b", "%c"]),
    ("where {%a%}", {"a": ["b", "c"]}, "where (a like ? or a like ?)", ["%b%", "%c%"]),
    ("where {a%}", {"a": ["b", "c"]}, "where (a like ? or a like ?)", ["b%", "c%"]),
    # Greater processor
    ("where {>a}", {"a": 1}, "where a > ?", [1]),
    ("where {>=a}", {"a": 1}, "where a >= ?", [1]),
    ("where {>a}", {"a": [1, 2]}, "where (a > ? or a > ?)", [1, 2]),
    ("where {>=a}", {"a": [1, 2]}, "where (a >= ? or a >= ?)", [1, 2]),
    # Lesser processor
    ("where {<a}", {"a": 1}, "where a < ?", [1]),
    ("where {<=a}", {"a": 1}, "where a <= ?", [1]),
    ("where {<a}", {"a": [1, 2]}, "where (a < ? or a < ?)", [1, 2]),
    ("where {<=a}", {"a": [1, 2]}, "where (a <= ? or a <= ?)", [1, 2]),
    # Raw value
    ("from {*a}", {"a": "table"}, "from table", []),
]

FLAG_TEMPLATES = [
    "{a}", "{*a}", "{=a}", "{!a}", "{>a}", "{>=a}", "{<a}", "{<=a}", "{%a}", "{%a%}", "{a%}",
]

VALUE_SHAPES = [1, "b", None, True, [], (), [1], (1,), [1, 2], ("b", "c", "d")]

SHAPE_CASES = [
    (template, {"a": value}) for template in FLAG_TEMPLATES for value in VALUE_SHAPES
]


class TestBindingFlags:
    @pytest.mark.parametrize("template, data, sql, params", CASES)
    def test_processes_binding_flags(self, template, data, sql, params):
        assert q(template, data) == (sql, params)

    @pytest.mark.parametrize(
        "template, data", [(t, d) for t, d, _, _ in CASES] + SHAPE_CASES
    )
    def test_placeholders_match_params(self, template, data):
        compiled = q(template, data)
        assert compiled.sql.count("?") == len(compiled.params)


class TestTemplates:
    def test_template_without_expressions_is_unchanged(self):
        template = "select * from users where id = 1"
        assert q(template, {}) == (template, [])

    def test_empty_template(self):
        assert q("", {}) == ("", [])

    def test_data_defaults_to_empty(self):
        assert q("select 1") == ("select 1", [])

    def test_returns_compiled_query(self):
        compiled = q("where {a}", {"a": 1})
        assert isinstance(compiled, CompiledQuery)
        assert compiled.sql == "where ?"
        assert compiled.params == [1]

    def test_unpacks_into_sql_and_params(self):
        sql, params = q("where {a}", {"a": 1})
        assert sql == "where ?"
        assert params == [1]

    def test_multiple_expressions_keep_order(self):
        sql, params = q(
            "select * from {*table} where {=status} and {>=age} and name = {name}",
            {"table": "users", "status": ["new", "active"], "age": 18, "name": "ann"},
        )
        assert sql == (
            "select * from users where status in (?, ?) and age >= ? and name = ?"
        )
        assert params == ["new", "active", 18, "ann"]

    def test_same_identifier_used_twice(self):
        sql, params = q("{a} {=a}", {"a": 3})
        assert sql == "? a = ?"
        assert params == [3, 3]

    def test_adjacent_expressions(self):
        assert q("{a}{b}", {"a": 1, "b": 2}) == ("??", [1, 2])

    def test_trailing_text_is_appended(self):
        assert q("{a} limit 10", {"a": 1}) == ("? limit 10", [1])

    def test_stray_closing_brace_is_literal(self):
        assert q("select '}' from t", {}) == ("select '}' from t", [])

    def test_empty_sequences(self):
        assert q("where {=a}", {"a": []}) == ("where a = ?", [None])
        assert q("values ({a})", {"a": []}) == ("values ()", [])
        assert q("where {>a}", {"a": ()}) == ("where ", [])

    def test_raw_values_are_not_validated(self):
        assert q("from {*a}", {"a": {"not": "scalar"}}) == ("from {'not': 'scalar'}", [])

    def test_mixed_raw_and_bound(self):
        sql, params = q(
            "insert into {*table} ({*fields}) values ({values})",
            {"table": "users", "fields": ["name", "age"], "values": ["ann", 30]},
        )
        assert sql == "insert into users (name, age) values (?, ?)"
        assert params == ["ann", 30]

    def test_scalar_types(self):
        sql, params = q("{a}, {b}, {c}, {d}, {e}", {"a": 1, "b": 1.5, "c": "x", "d": True, "e": None})
        assert sql == "?, ?, ?, ?, ?"
        assert params == [1, 1.5, "x", True, None]


class TestErrors:
    def test_missing_identifier(self):
        with pytest.raises(MissingIdentifierError) as exc_info:
            q("where {a}", {})
        assert exc_info.value.identifier == "a"
        assert exc_info.value.template == "where {a}"

    def test_unterminated_expression(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            q("where {a", {"a": 1})
        assert exc_info.value.position == 6

    def test_unterminated_after_valid_expression(self):
        with pytest.raises(TemplateSyntaxError):
            q("{a} and {b", {"a": 1, "b": 2})

    def test_unknown_flag(self):
        with pytest.raises(UnknownBindingFlagError) as exc_info:
            q("where {~a}", {"a": 1})
        assert exc_info.value.expression == "~a"

    def test_empty_expression(self):
        with pytest.raises(UnknownBindingFlagError):
            q("where {}", {})

    def test_flag_without_identifier(self):
        with pytest.raises(UnknownBindingFlagError):
            q("where {=}", {})

    def test_whitespace_is_not_a_flag(self):
        with pytest.raises(UnknownBindingFlagError):
            q("where { a }", {"a": 1})

    def test_nested_values_rejected(self):
        with pytest.raises(InvalidValueTypeError) as exc_info:
            q("where {=a}", {"a": [[1, 2]]})
        assert exc_info.value.identifier == "a"

    def test_mapping_value_rejected(self):
        with pytest.raises(InvalidValueTypeError):
            q("where {a}", {"a": {"b": 1}})

    def test_object_value_rejected(self):
        with pytest.raises(InvalidValueTypeError):
            q("where {a}", {"a": object()})

    def test_all_binding_errors_share_base(self):
        for template, data in [("{a", {}), ("{a}", {}), ("{~a}", {"a": 1}), ("{a}", {"a": [{}]})]:
            with pytest.raises(BindingError):
                q(template, data)


class TestHelpers:
    def test_parse_expression(self):
        assert parse_expression("a") == ("a", "id")
        assert parse_expression("%name%") == ("name", "%id%")
        assert parse_expression(">=age") == ("age", ">=id")
        assert parse_expression("col_1%") == ("col_1", "id%")

    def test_identifier_named_id(self):
        assert parse_expression("=id") == ("id", "=id")
        assert q("where {=id}", {"id": 4}) == ("where id = ?", [4])

    def test_next_binding_position(self):
        assert next_binding_position("a {b} c") == (2, 4)
        assert next_binding_position("no bindings") is None
        assert next_binding_position("{a} {b}", 3) == (4, 6)

    def test_are_values_scalar(self):
        assert are_values_scalar(1)
        assert are_values_scalar(None)
        assert are_values_scalar(["a", 1, None, 2.5, False])
        assert not are_values_scalar([1, [2]])
        assert not are_values_scalar({"a": 1})
        assert not are_values_scalar(b"bytes")
