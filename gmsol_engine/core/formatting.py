"""Presentation formatting for fixed-point values.

String rendering only: nothing here feeds back into valuation. Raw helpers
(`format_amount`, `to_fixed_decimal`, ...) take a bare int plus its decimals;
the domain helpers take `ScaledAmount`s and read the exponent from them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .fixed_point import FACTOR_DECIMALS, USD_DECIMALS, ScaledAmount, get_unit

TRIGGER_PREFIX_ABOVE = "≥"
TRIGGER_PREFIX_BELOW = "≤"

MAX_EXCEEDING_THRESHOLD = "1000000000"
MIN_EXCEEDING_THRESHOLD_SCALE = 2
LIQUIDATION_PRICE_MAX_THRESHOLD = "1000000"

# Leverage is stored in basis points: 4 decimals of a multiplier.
LEVERAGE_DECIMALS = 4
# A basis point is 0.01%.
PERCENTAGE_DECIMALS = 2

_THOUSANDS = re.compile(r"\B(?=(\d{3})+(?!\d))")


# -- Raw string helpers ------------------------------------------------------

def to_fixed_decimal(amount: int, decimals: int) -> str:
    """Exact decimal rendering, e.g. ``to_fixed_decimal(-1500, 3) == "-1.500"``."""
    sign = "-" if amount < 0 else ""
    if decimals == 0:
        return f"{sign}{abs(amount)}"
    integer, fraction = divmod(abs(amount), get_unit(decimals))
    return f"{sign}{integer}.{fraction:0{decimals}d}"


def limit_decimals(amount_str: str, max_decimals: Optional[int] = None) -> str:
    """Truncate (never round) to at most *max_decimals* fractional digits."""
    if max_decimals is None:
        return amount_str
    if max_decimals == 0:
        return amount_str.split(".")[0]
    whole, dot, fraction = amount_str.partition(".")
    if dot and len(fraction) > max_decimals:
        return f"{whole}.{fraction[:max_decimals]}"
    return amount_str


def pad_decimals(amount_str: str, min_decimals: int) -> str:
    whole, dot, fraction = amount_str.partition(".")
    if not dot:
        return f"{whole}.{'0' * min_decimals}" if min_decimals > 0 else whole
    if len(fraction) < min_decimals:
        return amount_str + "0" * (min_decimals - len(fraction))
    return amount_str


def number_with_commas(amount_str: str) -> str:
    if not amount_str:
        return "..."
    whole, dot, fraction = amount_str.partition(".")
    return _THOUSANDS.sub(",", whole) + dot + fraction


def format_amount(
    amount: Optional[int],
    token_decimals: int,
    display_decimals: int = 4,
    use_commas: bool = False,
    default_value: str = "...",
) -> str:
    if amount is None:
        return default_value
    amount_str = limit_decimals(to_fixed_decimal(amount, token_decimals), display_decimals)
    if display_decimals != 0:
        amount_str = pad_decimals(amount_str, display_decimals)
    if use_commas:
        return number_with_commas(amount_str)
    return amount_str


# -- Thresholds / signs ------------------------------------------------------

@dataclass(frozen=True)
class LimitedDisplay:
    """Magnitude clamped into the displayable range plus the prefix to show."""

    symbol: str
    value: int


def get_limited_display(
    amount: int,
    token_decimals: int,
    *,
    max_threshold: str = MAX_EXCEEDING_THRESHOLD,
    min_threshold_scale: int = MIN_EXCEEDING_THRESHOLD_SCALE,
    above_prefix: str = TRIGGER_PREFIX_ABOVE,
    below_prefix: str = TRIGGER_PREFIX_BELOW,
) -> LimitedDisplay:
    """Clamp ``|amount|`` to ``[10**-scale, max_threshold]`` whole units.

    Zero is never clamped.
    """
    max_value = int(max_threshold) * get_unit(token_decimals)
    min_value = 10 ** (token_decimals - min_threshold_scale) if token_decimals >= min_threshold_scale else 1
    abs_amount = abs(amount)
    if abs_amount == 0:
        return LimitedDisplay(symbol="", value=0)
    if abs_amount > max_value:
        return LimitedDisplay(symbol=above_prefix, value=max_value)
    if abs_amount < min_value:
        return LimitedDisplay(symbol=below_prefix, value=min_value)
    return LimitedDisplay(symbol="", value=abs_amount)


def get_plus_or_minus_symbol(value: Optional[int], *, show_plus_for_zero: bool = False) -> str:
    if value is None:
        return ""
    if value == 0:
        return "+" if show_plus_for_zero else ""
    return "-" if value < 0 else "+"


# -- Domain formatters -------------------------------------------------------

def format_usd(
    usd: Optional[ScaledAmount],
    *,
    fallback_to_zero: bool = False,
    display_decimals: int = 2,
    max_threshold: str = MAX_EXCEEDING_THRESHOLD,
    min_threshold_scale: int = MIN_EXCEEDING_THRESHOLD_SCALE,
    display_plus: bool = False,
    above_prefix: str = TRIGGER_PREFIX_ABOVE,
    below_prefix: str = TRIGGER_PREFIX_BELOW,
) -> Optional[str]:
    """``"<prefix> <sign>$<amount>"``, e.g. ``"-$1,234.50"`` or ``"≥ $1,000,000,000.00"``."""
    if usd is None:
        if not fallback_to_zero:
            return None
        usd = ScaledAmount.zero(USD_DECIMALS)
    limited = get_limited_display(
        usd.value,
        usd.decimals,
        max_threshold=max_threshold,
        min_threshold_scale=min_threshold_scale,
        above_prefix=above_prefix,
        below_prefix=below_prefix,
    )
    sign = "-" if usd.is_negative() else ("+" if display_plus else "")
    symbol = f"{limited.symbol} " if limited.symbol else ""
    display = format_amount(limited.value, usd.decimals, display_decimals, True)
    return f"{symbol}{sign}${display}"


def format_delta_usd(
    delta_usd: Optional[ScaledAmount],
    percentage: Optional[int] = None,
    *,
    show_plus_for_zero: bool = False,
) -> Optional[str]:
    """Signed USD change, optionally followed by its basis-point percentage."""
    if delta_usd is None:
        return None
    sign = get_plus_or_minus_symbol(delta_usd.value, show_plus_for_zero=show_plus_for_zero)
    out = f"{sign}${format_amount(abs(delta_usd.value), delta_usd.decimals, 2, True)}"
    if percentage is not None:
        out += f" ({format_percentage(percentage, signed=True, show_plus_for_zero=show_plus_for_zero)})"
    return out


def format_percentage(
    basis_points: Optional[int],
    *,
    display_decimals: int = 2,
    signed: bool = False,
    show_plus_for_zero: bool = False,
    fallback_to_zero: bool = False,
) -> Optional[str]:
    """Basis points as a percentage: ``1234 -> "12.34%"``."""
    if basis_points is None:
        if not fallback_to_zero:
            return None
        basis_points = 0
    if signed:
        sign = get_plus_or_minus_symbol(basis_points, show_plus_for_zero=show_plus_for_zero)
    else:
        sign = "-" if basis_points < 0 else ""
    return f"{sign}{format_amount(abs(basis_points), PERCENTAGE_DECIMALS, display_decimals)}%"


def format_rate_percentage(
    rate: Optional[int],
    display_decimals: int = 4,
    *,
    factor_decimals: int = FACTOR_DECIMALS,
) -> str:
    """A factor-decimals rate as a signed percentage; ``"-"`` when absent."""
    if rate is None:
        return "-"
    return f"{get_plus_or_minus_symbol(rate)}{format_amount(abs(rate * 100), factor_decimals, display_decimals)}%"


def format_token_amount(
    amount: Optional[ScaledAmount],
    symbol: str = "",
    *,
    display_decimals: int = 4,
    use_commas: bool = True,
    fallback_to_zero: bool = False,
    decimals: Optional[int] = None,
) -> Optional[str]:
    """``"1,234.5678 ETH"``; *decimals* is only needed with *fallback_to_zero*."""
    if amount is None:
        if not fallback_to_zero or decimals is None:
            return None
        amount = ScaledAmount.zero(decimals)
    out = format_amount(amount.value, amount.decimals, display_decimals, use_commas)
    return f"{out} {symbol}" if symbol else out


def format_leverage(leverage: Optional[int]) -> Optional[str]:
    """Basis-point leverage as a multiplier: ``123456 -> "12.34x"``."""
    if leverage is None:
        return None
    return f"{format_amount(leverage, LEVERAGE_DECIMALS, 2)}x"


def format_liquidation_price(
    liquidation_price: Optional[ScaledAmount],
    *,
    display_decimals: int = 2,
) -> str:
    if liquidation_price is None or not liquidation_price.is_positive():
        return "NA"
    out = format_usd(
        liquidation_price,
        display_decimals=display_decimals,
        max_threshold=LIQUIDATION_PRICE_MAX_THRESHOLD,
    )
    assert out is not None
    return out
