"""
tests/test_literals.py
Unit tests for dataset_generator.core.literals (literal encoding).

Tests cover:
- Null, integer, boolean, float and fixed-point literals
- Date/time constructor calls with explicit numeric components
- String quoting, control characters and right-margin wrapping
- Binary and unsupported values flagged as lossy
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal

import pytest

from dataset_generator.core.config import DEFAULT_OPTIONS
from dataset_generator.core.literals import (
    LiteralEncoder,
    encode_value,
    render_units,
    rendered_width,
    text_units,
    unescape_literal,
)
from dataset_generator.core.schema import ColumnDescriptor


def column(type_info, name="Value", **kwargs) -> ColumnDescriptor:
    return ColumnDescriptor.from_type(name, type_info, **kwargs)


@pytest.fixture()
def encoder() -> LiteralEncoder:
    return LiteralEncoder(DEFAULT_OPTIONS)


def encoder_with_margin(margin: int) -> LiteralEncoder:
    return LiteralEncoder(DEFAULT_OPTIONS.with_overrides(right_margin=margin))


class TestScalars:
    @pytest.mark.parametrize(
        "type_info", ["INTEGER", "TEXT", "DATE", "BOOLEAN", "BLOB", "GEOMETRY"]
    )
    def test_null_is_kind_independent(self, encoder, type_info):
        encoded = encoder.encode(None, column(type_info))
        assert encoded.segments == ("Null",)
        assert not encoded.lossy

    def test_integers(self, encoder):
        assert encoder.encode(42, column("INTEGER")).text == "42"
        assert encoder.encode(-7, column("INTEGER")).text == "-7"
        assert encoder.encode(10**12, column("BIGINT")).text == "1000000000000"

    def test_booleans(self, encoder):
        assert encoder.encode(True, column("BOOLEAN")).text == "True"
        assert encoder.encode(False, column("BOOLEAN")).text == "False"

    @pytest.mark.parametrize(
        "value, expected",
        [(1200.0, "1200"), (3.25, "3.25"), (-0.5, "-0.5"), (1e-07, "1e-07"), (7, "7")],
    )
    def test_floats_use_a_decimal_point(self, encoder, value, expected):
        assert encoder.encode(value, column("DOUBLE")).text == expected

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_float_is_lossy(self, encoder, value):
        encoded = encoder.encode(value, column("DOUBLE"))
        assert encoded.text == "Null"
        assert encoded.lossy

    def test_decimal_keeps_declared_scale(self, encoder):
        price = column("DECIMAL(10,2)")
        assert encoder.encode(Decimal("12.5"), price).text == "12.50"
        assert encoder.encode(Decimal("1200"), price).text == "1200.00"

    def test_decimal_is_not_rounded_to_scale(self, encoder):
        assert encoder.encode(Decimal("12.345"), column("DECIMAL(10,2)")).text == "12.345"

    def test_decimal_without_scale(self, encoder):
        assert encoder.encode(Decimal("7.10"), column("MONEY")).text == "7.10"

    def test_decimal_plain_notation(self, encoder):
        assert encoder.encode(Decimal("1E+3"), column("MONEY")).text == "1000"


class TestTemporal:
    def test_date_has_explicit_components(self, encoder):
        assert encoder.encode(date(2019, 9, 16), column("DATE")).text == "EncodeDate(2019,9,16)"

    def test_time_with_milliseconds(self, encoder):
        encoded = encoder.encode(time(13, 5, 7, 250000), column("TIME"))
        assert encoded.text == "EncodeTime(13,5,7,250)"
        assert not encoded.lossy

    def test_sub_millisecond_time_is_lossy(self, encoder):
        encoded = encoder.encode(time(1, 2, 3, 123456), column("TIME"))
        assert encoded.text == "EncodeTime(1,2,3,123)"
        assert encoded.lossy
        assert "sub-millisecond" in encoded.note

    def test_datetime(self, encoder):
        encoded = encoder.encode(datetime(2019, 9, 16, 8, 30), column("TIMESTAMP"))
        assert encoded.text == "EncodeDate(2019,9,16)+EncodeTime(8,30,0,0)"

    def test_time_zone_is_dropped(self, encoder):
        value = datetime(2019, 9, 16, 8, 30, tzinfo=timezone.utc)
        encoded = encoder.encode(value, column("TIMESTAMP"))
        assert encoded.text == "EncodeDate(2019,9,16)+EncodeTime(8,30,0,0)"
        assert encoded.note == "time zone dropped"

    def test_literal_is_locale_independent(self, encoder):
        text = encoder.encode(date(2001, 2, 3), column("DATE")).text
        # No formatted date string, only numeric constructor arguments
        assert "'" not in text
        assert "/" not in text
        assert text == "EncodeDate(2001,2,3)"


class TestStrings:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Team integration", "'Team integration'"),
            ("O'Brien", "'O''Brien'"),
            ("", "''"),
            ("a\r\nb", "'a'#13#10'b'"),
            ("\tx", "#9'x'"),
            ("\n", "#10"),
            ("Zürich", "'Zürich'"),
        ],
    )
    def test_quoting(self, encoder, value, expected):
        assert encoder.encode(value, column("TEXT")).text == expected

    def test_fixed_width_text_uses_same_rules(self, encoder):
        assert encoder.encode("it's", column("VARCHAR(10)")).text == "'it''s'"

    def test_no_wrapping_when_margin_is_zero(self):
        value = "x" * 300
        encoded = encoder_with_margin(0).encode(value, column("TEXT"), start_column=60)
        assert encoded.segments == ("'" + value + "'",)

    def test_no_wrapping_when_it_fits(self):
        encoded = encoder_with_margin(20).encode("short", column("TEXT"), start_column=10)
        assert not encoded.is_wrapped

    def test_wraps_after_spaces(self):
        encoded = encoder_with_margin(20).encode(
            "alpha beta gamma delta epsilon", column("TEXT")
        )
        assert encoded.segments == ("'alpha beta '", "'gamma delta '", "'epsilon'")
        assert encoded.text == "'alpha beta ' +\n'gamma delta ' +\n'epsilon'"

    def test_hard_break_without_spaces(self):
        value = "abcdefghijklmnopqrstuvwxyz"
        encoded = encoder_with_margin(12).encode(value, column("TEXT"))
        assert encoded.segments[0] == "'abcdefgh'"
        assert unescape_literal(encoded.text) == value

    def test_null_is_never_wrapped(self):
        encoded = encoder_with_margin(3).encode(None, column("TEXT"), start_column=50)
        assert encoded.segments == ("Null",)

    @pytest.mark.parametrize(
        "value",
        [
            "The quick brown fox jumps over the lazy dog, then it's gone again",
            "''''''''''''''''''''''''''''''''''''''''",
            "it's a 'quoted' word and it''s doubled",
            "line one\r\nline two\r\nline three\tand a tab at the very end\n",
            "x" * 150,
        ],
    )
    @pytest.mark.parametrize("margin", [20, 33, 50])
    def test_wrapped_segments_reproduce_the_value(self, value, margin):
        encoded = encoder_with_margin(margin).encode(
            value, column("TEXT"), start_column=10, continuation_column=4
        )
        assert unescape_literal(encoded.text) == value
        # Each segment is a complete literal: no break inside a doubled quote
        assert "".join(unescape_literal(segment) for segment in encoded.segments) == value
        for segment in encoded.segments:
            assert segment.count("'") % 2 == 0

    @pytest.mark.parametrize("start", [20, 79, 200])
    def test_empty_string_past_the_margin(self, start):
        encoded = encoder_with_margin(10).encode("", column("TEXT"), start_column=start)
        assert encoded.segments == ("''",)
        assert encoded.text == "''"

    def test_wrapped_lines_fit_the_margin(self):
        value = "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod"
        start, continuation, margin = 10, 4, 40
        encoded = encoder_with_margin(margin).encode(
            value, column("TEXT"), start_column=start, continuation_column=continuation
        )
        assert encoded.is_wrapped
        positions = [start] + [continuation] * (len(encoded.segments) - 1)
        for index, (position, segment) in enumerate(zip(positions, encoded.segments)):
            suffix = 2 if index < len(encoded.segments) - 1 else 0
            assert position + len(segment) + suffix <= margin

    def test_encode_value_joins_segments(self):
        options = DEFAULT_OPTIONS.with_overrides(right_margin=20)
        text = encode_value("alpha beta gamma delta epsilon", column("TEXT"), options)
        assert text.splitlines() == ["'alpha beta ' +", "'gamma delta ' +", "'epsilon'"]

    def test_encoding_is_deterministic(self):
        value = "some text that is long enough to wrap around the margin twice"
        first = encoder_with_margin(25).encode(value, column("TEXT"))
        second = encoder_with_margin(25).encode(value, column("TEXT"))
        assert first == second


class TestUnits:
    def test_units_are_atomic(self):
        assert text_units("a'\n") == [("a", True), ("''", True), ("#10", False)]

    def test_rendered_width_matches_rendering(self):
        for value in ["", "abc", "a\nb", "\n\n", "'x'\ty"]:
            units = text_units(value)
            assert rendered_width(units) == len(render_units(units))


class TestLossy:
    def test_binary(self, encoder):
        encoded = encoder.encode(b"\x01\xff", column("BLOB"))
        assert encoded.text == "VarArrayOf([$01,$FF])"
        assert encoded.lossy

    def test_unsupported_rendered_as_text(self, encoder):
        encoded = encoder.encode({"a": 1}, column("GEOMETRY"))
        assert encoded.text == "'{''a'': 1}'"
        assert encoded.lossy
        assert "GEOMETRY" in encoded.note
