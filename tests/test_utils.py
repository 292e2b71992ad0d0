import pytest

from utils import (
    format_currency,
    format_large_number,
    format_number,
    format_percent,
    format_signed_percent,
    parse_number,
)


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(0) == "$0.00"
    assert format_currency(-35000) == "-$35,000.00"
    assert format_currency(116666.666) == "$116,666.67"
    assert format_currency(10, symbol="£") == "£10.00"


@pytest.mark.parametrize("value, expected", [
    (999, "999"),
    (1500, "1.5K"),
    (-1500, "-1.5K"),
    (2_500_000, "2.5M"),
    (3_000_000_000, "3.0B"),
    (0, "0"),
])
def test_format_large_number(value, expected):
    assert format_large_number(value) == expected


def test_format_number():
    assert format_number(3333.3333) == "3,333.33"
    assert format_number(1000) == "1,000"
    assert format_number(0.5) == "0.5"
    assert format_number(0) == "0"
    assert format_number(-0.001) == "0"
    assert format_number(1234.5678, max_decimals=0) == "1,235"


def test_format_percent():
    assert format_percent(12.345) == "12.3%"
    assert format_percent(-100) == "-100.0%"


def test_format_signed_percent():
    assert format_signed_percent(20) == "+20%"
    assert format_signed_percent(-5) == "-5%"
    assert format_signed_percent(0) == "0%"


class TestParseNumber:

    @pytest.mark.parametrize("text, expected", [
        ("100", 100.0),
        (" 42", 42.0),
        ("-3.5", -3.5),
        ("0.01", 0.01),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("12abc", 12.0),
        ("7.", 7.0),
    ])
    def test_valid_text(self, text, expected):
        assert parse_number(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "-", ".", "nan", "inf", None, "1e999"])
    def test_malformed_text_falls_back_to_zero(self, text):
        assert parse_number(text) == 0.0

    def test_custom_default(self):
        assert parse_number("oops", default=5.0) == 5.0

    def test_text_is_truncated(self):
        assert parse_number("1234567890123456") == 123456789012.0
        assert parse_number("12345", max_length=3) == 123.0

    def test_numeric_values_pass_through(self):
        assert parse_number(5) == 5.0
        assert parse_number(2.5) == 2.5
        assert parse_number(float('nan')) == 0.0
