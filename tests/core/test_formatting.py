"""Tests for gmsol_engine/core/formatting.py: display strings only."""

import pytest

from gmsol_engine.core.fixed_point import ScaledAmount
from gmsol_engine.core.formatting import (
    format_amount,
    format_delta_usd,
    format_leverage,
    format_liquidation_price,
    format_percentage,
    format_rate_percentage,
    format_token_amount,
    format_usd,
    get_limited_display,
    get_plus_or_minus_symbol,
    limit_decimals,
    number_with_commas,
    pad_decimals,
    to_fixed_decimal,
)


def usd(units):
    return ScaledAmount.from_units(units, 20)


def cents(n):
    return ScaledAmount(n * 10**18, 20)


# ---------------------------------------------------------------------------
# Raw string helpers
# ---------------------------------------------------------------------------

class TestStringHelpers:
    @pytest.mark.parametrize(
        "amount,decimals,expected",
        [(-1500, 3, "-1.500"), (123, 4, "0.0123"), (5, 0, "5"), (0, 2, "0.00")],
    )
    def test_to_fixed_decimal(self, amount, decimals, expected):
        assert to_fixed_decimal(amount, decimals) == expected

    def test_limit_decimals(self):
        assert limit_decimals("1.23456", 2) == "1.23"
        assert limit_decimals("1.2", 4) == "1.2"
        assert limit_decimals("1.99", 0) == "1"
        assert limit_decimals("1.99") == "1.99"

    def test_pad_decimals(self):
        assert pad_decimals("1.2", 4) == "1.2000"
        assert pad_decimals("12", 2) == "12.00"
        assert pad_decimals("1.2345", 2) == "1.2345"

    def test_number_with_commas(self):
        assert number_with_commas("1234567.891") == "1,234,567.891"
        assert number_with_commas("-1234") == "-1,234"
        assert number_with_commas("123") == "123"
        assert number_with_commas("") == "..."

    def test_format_amount(self):
        assert format_amount(123456789, 4, 2, True) == "12,345.67"
        assert format_amount(10**9, 9) == "1.0000"
        assert format_amount(10**9, 9, 0) == "1"
        assert format_amount(None, 9) == "..."
        assert format_amount(None, 9, default_value="-") == "-"


# ---------------------------------------------------------------------------
# Thresholds / signs
# ---------------------------------------------------------------------------

class TestLimitedDisplay:
    def test_zero_untouched(self):
        limited = get_limited_display(0, 20)
        assert limited.symbol == ""
        assert limited.value == 0

    def test_in_range(self):
        limited = get_limited_display(-usd(5).value, 20)
        assert limited.symbol == ""
        assert limited.value == usd(5).value

    def test_above_max(self):
        limited = get_limited_display(usd(2_000_000_000).value, 20)
        assert limited.symbol == "≥"
        assert limited.value == usd(1_000_000_000).value

    def test_below_min(self):
        limited = get_limited_display(10**17, 20)
        assert limited.symbol == "≤"
        assert limited.value == 10**18


class TestPlusOrMinus:
    def test_symbols(self):
        assert get_plus_or_minus_symbol(None) == ""
        assert get_plus_or_minus_symbol(0) == ""
        assert get_plus_or_minus_symbol(0, show_plus_for_zero=True) == "+"
        assert get_plus_or_minus_symbol(-1) == "-"
        assert get_plus_or_minus_symbol(1) == "+"


# ---------------------------------------------------------------------------
# USD
# ---------------------------------------------------------------------------

class TestFormatUsd:
    def test_basic(self):
        assert format_usd(cents(123_450)) == "$1,234.50"

    def test_negative(self):
        assert format_usd(-cents(123_450)) == "-$1,234.50"

    def test_display_plus(self):
        assert format_usd(cents(123_450), display_plus=True) == "+$1,234.50"

    def test_truncates_not_rounds(self):
        assert format_usd(ScaledAmount(1_999 * 10**17, 20)) == "$199.90"
        assert format_usd(ScaledAmount(19_999 * 10**16, 20)) == "$199.99"

    def test_missing(self):
        assert format_usd(None) is None
        assert format_usd(None, fallback_to_zero=True) == "$0.00"

    def test_above_max_threshold(self):
        assert format_usd(usd(2_000_000_000)) == "≥ $1,000,000,000.00"

    def test_below_min_threshold(self):
        assert format_usd(ScaledAmount(10**17, 20)) == "≤ $0.01"
        assert format_usd(ScaledAmount(-(10**17), 20)) == "≤ -$0.01"

    def test_custom_threshold_and_prefix(self):
        assert format_usd(usd(2_000), max_threshold="1000", above_prefix=">") == "> $1,000.00"

    def test_display_decimals(self):
        assert format_usd(cents(150), display_decimals=4) == "$1.5000"


# ---------------------------------------------------------------------------
# Percentages / deltas
# ---------------------------------------------------------------------------

class TestPercentages:
    def test_basis_points(self):
        assert format_percentage(1234) == "12.34%"
        assert format_percentage(-50) == "-0.50%"
        assert format_percentage(50, signed=True) == "+0.50%"
        assert format_percentage(0, signed=True, show_plus_for_zero=True) == "+0.00%"

    def test_missing_percentage(self):
        assert format_percentage(None) is None
        assert format_percentage(None, fallback_to_zero=True) == "0.00%"

    def test_rate(self):
        assert format_rate_percentage(10**18) == "+1.0000%"
        assert format_rate_percentage(-5 * 10**17) == "-0.5000%"
        assert format_rate_percentage(0) == "0.0000%"
        assert format_rate_percentage(None) == "-"

    def test_delta_usd(self):
        assert format_delta_usd(usd(-10), -1000) == "-$10.00 (-10.00%)"
        assert format_delta_usd(usd(10)) == "+$10.00"
        assert format_delta_usd(usd(0), 0, show_plus_for_zero=True) == "+$0.00 (+0.00%)"
        assert format_delta_usd(None) is None


# ---------------------------------------------------------------------------
# Tokens / leverage / liquidation price
# ---------------------------------------------------------------------------

class TestDomainFormatters:
    def test_token_amount(self):
        assert format_token_amount(ScaledAmount(1_234_567_890_123, 9), "WSOL") == "1,234.5678 WSOL"
        assert format_token_amount(ScaledAmount(10**6, 6)) == "1.0000"
        assert format_token_amount(None, "GM") is None
        assert format_token_amount(None, "GM", fallback_to_zero=True, decimals=9) == "0.0000 GM"

    def test_leverage(self):
        assert format_leverage(102_040) == "10.20x"
        assert format_leverage(10_000) == "1.00x"
        assert format_leverage(None) is None

    @pytest.mark.parametrize("price", [None, ScaledAmount(0, 20), ScaledAmount(-1, 20)])
    def test_liquidation_price_not_applicable(self, price):
        assert format_liquidation_price(price) == "NA"

    def test_liquidation_price(self):
        assert format_liquidation_price(cents(9_120)) == "$91.20"
        assert format_liquidation_price(usd(5_000_000)) == "≥ $1,000,000.00"

    def test_formatting_does_not_touch_value(self):
        value = cents(123_456)
        format_usd(value)
        assert value == cents(123_456)
